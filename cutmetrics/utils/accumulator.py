# accumulator.py
# Folds per-entity contributions into running extremes, cut length, area and loop tally.
# One Accumulator belongs to exactly one analysis call; nothing here is shared between calls.

import logging

from cutmetrics.utils import geometry
from cutmetrics.utils.entities import CircularArc, Ellipse, VertexChain, entity_kind


class Accumulator:
    """Running totals for one drawing, plus the open line segments kept for polygon assembly."""

    def __init__(self, tolerance=geometry.CLOSURE_TOLERANCE):
        self.tolerance = tolerance
        self.min_x, self.min_y = float('inf'), float('inf')
        self.max_x, self.max_y = float('-inf'), float('-inf')
        self.total_cutting_length = 0.0
        self.total_surface_area = 0.0
        self.loop_count = 0
        self.open_segments = []
        self.circle_areas = []
        self.entity_counts = {}

    @property
    def has_extent(self):
        return self.min_x != float('inf') and self.max_x != float('-inf')

    @property
    def bounds(self):
        return self.min_x, self.min_y, self.max_x, self.max_y

    def _expand(self, min_x, min_y, max_x, max_y):
        self.min_x = min(self.min_x, min_x)
        self.min_y = min(self.min_y, min_y)
        self.max_x = max(self.max_x, max_x)
        self.max_y = max(self.max_y, max_y)

    def add(self, entity):
        if isinstance(entity, VertexChain):
            self.add_vertex_chain(entity)
        elif isinstance(entity, CircularArc):
            self.add_arc(entity)
        elif isinstance(entity, Ellipse):
            self.add_ellipse(entity)
        else:
            logging.debug(f"Accumulator ignoring {type(entity).__name__}")
            return
        kind = entity_kind(entity)
        self.entity_counts[kind] = self.entity_counts.get(kind, 0) + 1

    def add_vertex_chain(self, chain):
        vertices = chain.vertices
        self._expand(*geometry.vertex_bounds(vertices))

        if geometry.is_closed_loop(vertices, self.tolerance):
            area = geometry.polygon_area(vertices)
            length = geometry.polygon_perimeter(vertices)
            self.total_surface_area += area
            self.total_cutting_length += length
            self.loop_count += 1
            logging.debug(f"Closed chain: vertices={len(vertices)}, length={length:.4f}, area={area:.4f}")
        elif len(vertices) == 2:
            segment = geometry.Segment(vertices[0], vertices[1])
            self.total_cutting_length += geometry.segment_length(segment)
            self.open_segments.append(segment)
        else:
            self.total_cutting_length += geometry.open_chain_length(vertices)

    def add_arc(self, arc):
        cx, cy = arc.center
        r = arc.radius
        self._expand(cx - r, cy - r, cx + r, cy + r)
        length, is_closed = geometry.arc_or_circle_length(r, arc.start_angle, arc.end_angle)
        self.total_cutting_length += length
        if is_closed:
            area = geometry.circle_area(r)
            self.total_surface_area += area
            self.circle_areas.append(area)
            self.loop_count += 1
        logging.debug(f"{'CIRCLE' if is_closed else 'ARC'}: radius={r:.4f}, length={length:.4f}")

    def add_ellipse(self, ellipse):
        cx, cy = ellipse.center
        a, b = ellipse.semi_major_axis, ellipse.semi_minor_axis
        self._expand(cx - a, cy - b, cx + a, cy + b)
        self.total_cutting_length += geometry.ellipse_perimeter(a, b)
        self.total_surface_area += geometry.ellipse_area(a, b)
        self.loop_count += 1
