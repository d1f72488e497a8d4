# assembler.py
# Detects closed regions formed by loose LINE segments after every entity has been folded in.
# Two strategies:
#   greedy - pairwise intersection scan, a region leaves the working set once it closes (order dependent)
#   planar - shapely noding + polygonize, every bounded face is a region (order independent)

import logging
import math
from collections import defaultdict

from shapely.geometry import LineString, Polygon
from shapely.ops import polygonize, unary_union

from cutmetrics.utils import geometry
from cutmetrics.utils.geometry import Point, Segment

KEY_DIGITS = 6  # Coordinate rounding for structural keys
STRATEGIES = ("greedy", "planar")


def point_key(point, digits=KEY_DIGITS):
    return round(point[0], digits), round(point[1], digits)


def segment_key(segment, digits=KEY_DIGITS):
    """Direction-free key, so a reversed duplicate maps to the same segment."""
    a, b = point_key(segment[0], digits), point_key(segment[1], digits)
    return (a, b) if a <= b else (b, a)


def polygon_key(vertices, digits=KEY_DIGITS):
    """Canonical sorted vertex set; the same region found from another start or winding shares it."""
    return tuple(sorted({point_key(p, digits) for p in vertices}))


class EndpointIndex:
    """Segments bucketed by endpoint on a grid of tolerance-sized cells."""

    def __init__(self, tolerance=geometry.CLOSURE_TOLERANCE, segments=()):
        self.cell_size = tolerance
        self.buckets = defaultdict(dict)
        for segment in segments:
            self.add(segment)

    def _cell(self, point):
        return math.floor(point[0] / self.cell_size), math.floor(point[1] / self.cell_size)

    def add(self, segment):
        key = segment_key(segment)
        for point in segment:
            self.buckets[self._cell(point)][key] = segment

    def remove(self, segment):
        key = segment_key(segment)
        for point in segment:
            bucket = self.buckets.get(self._cell(point))
            if bucket:
                bucket.pop(key, None)

    def near(self, point):
        """Yield (key, segment) for every segment with an endpoint in the 3x3 cells around point."""
        cx, cy = self._cell(point)
        for dx in (-1, 0, 1):
            for dy in (-1, 0, 1):
                bucket = self.buckets.get((cx + dx, cy + dy))
                if bucket:
                    yield from bucket.items()


def _attach(path, index, taken, tolerance):
    """Extend path by one indexed segment at its tail, else its head. Returns the segment or None."""
    tail = path[-1].end
    for key, seg in index.near(tail):
        if key in taken:
            continue
        if geometry.distance(seg.start, tail) < tolerance:
            path.append(seg)
        elif geometry.distance(seg.end, tail) < tolerance:
            path.append(Segment(seg.end, seg.start))
        else:
            continue
        taken.add(key)
        return seg
    head = path[0].start
    for key, seg in index.near(head):
        if key in taken:
            continue
        if geometry.distance(seg.end, head) < tolerance:
            path.insert(0, seg)
        elif geometry.distance(seg.start, head) < tolerance:
            path.insert(0, Segment(seg.end, seg.start))
        else:
            continue
        taken.add(key)
        return seg
    return None


def walk_chain(seed, others, tolerance=geometry.CLOSURE_TOLERANCE):
    """
    Grow a path from seed by attaching segments that share an endpoint with either end.
    others is an EndpointIndex or a plain iterable of segments.
    Returns (oriented path segments, input segments consumed); unconnected segments are left out.
    """
    index = others if isinstance(others, EndpointIndex) else EndpointIndex(tolerance, others)
    path = [seed]
    consumed = [seed]
    taken = {segment_key(seed)}
    while not (len(path) >= 3 and geometry.distance(path[0].start, path[-1].end) < tolerance):
        seg = _attach(path, index, taken, tolerance)
        if seg is None:
            break
        consumed.append(seg)
    return path, consumed


def chain_vertices(path):
    """Each segment's start plus the final segment's end."""
    return [seg.start for seg in path] + [path[-1].end]


def is_simple_polygon(vertices):
    """Closed chain with at least 3 distinct corners and no self-intersection."""
    ring = list(vertices[:-1])
    if len({point_key(p) for p in ring}) < 3 or geometry.polygon_area(ring) <= 0:
        return False
    return Polygon(ring).is_valid


def _is_joined(index, point, key, tolerance):
    return any(k != key and (geometry.distance(s.start, point) < tolerance or geometry.distance(s.end, point) < tolerance)
               for k, s in index.near(point))


def _boxes_overlap(a, b):
    return a[0] <= b[2] and b[0] <= a[2] and a[1] <= b[3] and b[1] <= a[3]


def _assemble_greedy(segments, tolerance):
    polygons = []
    used = {}
    index = EndpointIndex(tolerance)
    boxes = [geometry.vertex_bounds(s) for s in segments]
    # A walk from an unchanged working set repeats its last result, so it is skipped
    generation = 0
    walked = {}
    n = len(segments)
    for i in range(n):
        for j in range(i + 1, n):
            if not _boxes_overlap(boxes[i], boxes[j]) or not geometry.segments_intersect(segments[i], segments[j]):
                continue
            for seg in (segments[i], segments[j]):
                key = segment_key(seg)
                if key not in used:
                    used[key] = seg
                    index.add(seg)
                    generation += 1
            seed_key = segment_key(segments[j])
            if walked.get(seed_key) == generation:
                continue
            walked[seed_key] = generation
            seed = used[seed_key]
            # A closed chain joins every member at both ends
            if not (_is_joined(index, seed.start, seed_key, tolerance) and _is_joined(index, seed.end, seed_key, tolerance)):
                continue
            path, consumed = walk_chain(seed, index, tolerance)
            chain = chain_vertices(path)
            if not geometry.is_closed_loop(chain, tolerance):
                continue
            if is_simple_polygon(chain):
                polygons.append(tuple(chain))
            else:
                logging.debug(f"Discarding non-simple closed chain with {len(chain)} vertices")
            for seg in consumed:
                used.pop(segment_key(seg), None)
                index.remove(seg)
            generation += 1
    return polygons


def _assemble_planar(segments):
    lines = [LineString([tuple(s.start), tuple(s.end)]) for s in segments if geometry.segment_length(s) > 0]
    if not lines:
        return []
    noded = unary_union(lines)
    polygons = []
    for face in polygonize(list(getattr(noded, 'geoms', [noded]))):
        if face.is_empty or face.area <= 0:
            continue
        polygons.append(tuple(Point(x, y) for x, y in face.exterior.coords))
    return polygons


def assemble_polygons(segments, tolerance=geometry.CLOSURE_TOLERANCE, strategy="greedy"):
    """Return the unique closed polygons (closed vertex chains) formed by open segments."""
    if strategy not in STRATEGIES:
        raise ValueError(f"Unknown assembly strategy: {strategy}. Allowed: {list(STRATEGIES)}")
    segments = [Segment(Point(*s[0]), Point(*s[1])) for s in segments]
    if len(segments) < 3:
        return []

    if strategy == "planar":
        found = _assemble_planar(segments)
    else:
        found = _assemble_greedy(segments, tolerance)

    unique = {}
    for polygon in found:
        unique.setdefault(polygon_key(polygon), polygon)
    logging.info(f"Polygon assembly ({strategy}): segments={len(segments)}, found={len(found)}, unique={len(unique)}")
    return list(unique.values())
