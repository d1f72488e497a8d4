# geometry.py
# Pure 2-D helpers for measuring torch paths: lengths, perimeters, areas, closure and intersection tests.
# Every function here is stateless; callers decide which measurement applies to which entity.

import math
from collections import namedtuple

CLOSURE_TOLERANCE = 1e-4  # Absolute distance (drawing units) below which a chain counts as closed
TWO_PI = 2 * math.pi

Point = namedtuple('Point', ['x', 'y'])
Segment = namedtuple('Segment', ['start', 'end'])

UNIT_LABELS = {0: "in", 1: "mm"}


def distance(p1, p2):
    return math.hypot(p2[0] - p1[0], p2[1] - p1[1])


def is_finite_point(point):
    return math.isfinite(point[0]) and math.isfinite(point[1])


def segment_length(segment):
    """Euclidean distance between the segment endpoints."""
    return distance(segment[0], segment[1])


def polygon_perimeter(vertices):
    """Sum of edge lengths, wrapping the last vertex back to the first."""
    n = len(vertices)
    perimeter = 0.0
    for i in range(n):
        j = (i + 1) % n
        perimeter += distance(vertices[i], vertices[j])
    return perimeter


def open_chain_length(vertices):
    """Sum of edge lengths between consecutive vertices, no wrap."""
    return sum(distance(vertices[i - 1], vertices[i]) for i in range(1, len(vertices)))


def polygon_area(vertices):
    """Calculate polygon area using shoelace formula."""
    n = len(vertices)
    if n < 3:
        return 0.0
    area = 0.0
    for i in range(n):
        j = (i + 1) % n
        area += vertices[i][0] * vertices[j][1]
        area -= vertices[j][0] * vertices[i][1]
    return abs(area) / 2


def is_closed_loop(vertices, tolerance=CLOSURE_TOLERANCE):
    """True when the chain has at least 3 vertices and its ends meet within tolerance."""
    if len(vertices) < 3:
        return False
    return distance(vertices[0], vertices[-1]) < tolerance


def arc_or_circle_length(radius, start_angle=None, end_angle=None):
    """
    Return (length, is_closed) for an arc or a full circle.
    Angles are radians. Without both angles the entity is a circle.
    """
    if start_angle is not None and end_angle is not None:
        span = end_angle - start_angle
        if span < 0:
            span %= TWO_PI
        if span > TWO_PI:
            span %= TWO_PI
        return radius * span, False
    return TWO_PI * radius, True


def circle_area(radius):
    return math.pi * radius ** 2


def ellipse_perimeter(semi_major, semi_minor):
    """Ramanujan's approximation of the ellipse circumference."""
    a, b = semi_major, semi_minor
    return math.pi * (3 * (a + b) - math.sqrt((3 * a + b) * (a + 3 * b)))


def ellipse_area(semi_major, semi_minor):
    return math.pi * semi_major * semi_minor


def orientation(p, q, r):
    """0 = collinear, 1 = clockwise, 2 = counterclockwise."""
    val = (q[1] - p[1]) * (r[0] - q[0]) - (q[0] - p[0]) * (r[1] - q[1])
    if val == 0:
        return 0
    return 1 if val > 0 else 2


def segments_intersect(s1, s2):
    """General-position orientation test; endpoints touching another segment count as an intersection."""
    p1, q1 = s1
    p2, q2 = s2
    o1 = orientation(p1, q1, p2)
    o2 = orientation(p1, q1, q2)
    o3 = orientation(p2, q2, p1)
    o4 = orientation(p2, q2, q1)
    return o1 != o2 and o3 != o4


def vertex_bounds(vertices):
    """(min_x, min_y, max_x, max_y) of a vertex sequence."""
    xs = [p[0] for p in vertices]
    ys = [p[1] for p in vertices]
    return min(xs), min(ys), max(xs), max(ys)


def measurement_unit_label(code=None):
    """Map the drawing's $MEASUREMENT code to a unit label."""
    return UNIT_LABELS.get(code, "Unknown")
