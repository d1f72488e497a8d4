# entities.py
# Normalized drawing entities and the classifier that turns decoder records into them.
# Records come from the DXF decoding collaborator as plain mappings; anything we cannot
# measure (annotations, malformed shapes) is dropped here, not reported as an error.

import logging
import math
from dataclasses import dataclass
from typing import Optional

from cutmetrics.utils.geometry import Point, is_finite_point


@dataclass(frozen=True)
class VertexChain:
    """A line (2 vertices) or a polyline/polygon (3+ vertices)."""
    vertices: tuple


@dataclass(frozen=True)
class CircularArc:
    """Arc when both angles (radians) are set, full circle otherwise."""
    center: Point
    radius: float
    start_angle: Optional[float] = None
    end_angle: Optional[float] = None

    @property
    def is_circle(self):
        return self.start_angle is None or self.end_angle is None


@dataclass(frozen=True)
class Ellipse:
    center: Point
    semi_major_axis: float
    semi_minor_axis: float


@dataclass(frozen=True)
class DrawingHeader:
    """Optional drawing metadata: extents and the $MEASUREMENT unit code."""
    ext_max: Optional[Point] = None
    ext_min: Optional[Point] = None
    measurement_code: Optional[int] = None

    @property
    def has_extents(self):
        return self.ext_max is not None and self.ext_min is not None

    @classmethod
    def from_dict(cls, header):
        if header is None:
            return cls()
        if isinstance(header, cls):
            return header
        if not isinstance(header, dict):
            logging.debug(f"Ignoring non-mapping drawing header: {type(header).__name__}")
            return cls()
        code = _field(header, '$MEASUREMENT', 'measurement', 'measurementCode', 'measurement_code')
        try:
            code = int(code) if code is not None else None
        except (TypeError, ValueError):
            logging.debug(f"Ignoring non-integer measurement code: {code!r}")
            code = None
        return cls(
            ext_max=_to_point(_field(header, '$EXTMAX', 'extMax', 'ext_max')),
            ext_min=_to_point(_field(header, '$EXTMIN', 'extMin', 'ext_min')),
            measurement_code=code,
        )


ENTITY_TYPES = (VertexChain, CircularArc, Ellipse)


def _field(record, *names):
    for name in names:
        value = record.get(name)
        if value is not None:
            return value
    return None


def _to_float(value):
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _to_point(raw):
    """Accept {"x", "y"} mappings, Point tuples or [x, y(, z)] sequences."""
    if raw is None:
        return None
    if isinstance(raw, dict):
        x, y = _to_float(raw.get('x')), _to_float(raw.get('y'))
    else:
        try:
            x, y = _to_float(raw[0]), _to_float(raw[1])
        except (TypeError, IndexError, KeyError):
            return None
    if x is None or y is None:
        return None
    return Point(x, y)


def _validate(entity):
    """Return the entity when it is measurable, None otherwise."""
    if isinstance(entity, VertexChain):
        if not entity.vertices or not all(is_finite_point(p) for p in entity.vertices):
            return None
    elif isinstance(entity, CircularArc):
        if not is_finite_point(entity.center) or not math.isfinite(entity.radius) or entity.radius <= 0:
            return None
        for angle in (entity.start_angle, entity.end_angle):
            if angle is not None and not math.isfinite(angle):
                return None
    elif isinstance(entity, Ellipse):
        axes = (entity.semi_major_axis, entity.semi_minor_axis)
        if not is_finite_point(entity.center) or not all(math.isfinite(a) and a > 0 for a in axes):
            return None
    return entity


def classify_entity(record):
    """
    Dispatch a decoder record to its shape: vertex chain, center+radius(+angles), or
    ellipse semi-axes. Returns a typed entity, or None for unrecognized or malformed records.
    """
    if isinstance(record, ENTITY_TYPES):
        return _validate(record)
    if not isinstance(record, dict):
        logging.debug(f"Skipping non-mapping entity record: {type(record).__name__}")
        return None

    entity_type = str(record.get('type', '')).upper()

    if record.get('vertices') is not None:
        if not isinstance(record['vertices'], (list, tuple)):
            logging.debug(f"Skipping {entity_type or 'vertex chain'}: vertices is not a sequence")
            return None
        vertices = []
        for raw in record['vertices']:
            point = _to_point(raw)
            if point is None:
                logging.debug(f"Skipping {entity_type or 'vertex chain'}: malformed vertex {raw!r}")
                return None
            vertices.append(point)
        if not vertices:
            logging.debug(f"Skipping {entity_type or 'vertex chain'}: no vertices")
            return None
        return VertexChain(tuple(vertices))

    center = _to_point(record.get('center'))
    if record.get('center') is not None and record.get('radius') is not None:
        radius = _to_float(record['radius'])
        start_raw = _field(record, 'startAngle', 'start_angle')
        end_raw = _field(record, 'endAngle', 'end_angle')
        start_angle = _to_float(start_raw) if start_raw is not None else None
        end_angle = _to_float(end_raw) if end_raw is not None else None
        if center is None or radius is None or (start_raw is not None and start_angle is None) \
                or (end_raw is not None and end_angle is None):
            logging.debug(f"Skipping {entity_type or 'arc'}: malformed center/radius/angles")
            return None
        return _validate(CircularArc(center, radius, start_angle, end_angle))

    if entity_type == 'ELLIPSE':
        major = _to_float(_field(record, 'semiMajorAxis', 'semi_major_axis'))
        minor = _to_float(_field(record, 'semiMinorAxis', 'semi_minor_axis'))
        if center is None or major is None or minor is None:
            logging.debug("Skipping ELLIPSE: missing center or semi-axis data")
            return None
        return _validate(Ellipse(center, major, minor))

    logging.debug(f"Ignoring unsupported entity type '{entity_type or 'UNKNOWN'}'")
    return None


def entity_kind(entity):
    """Tally key used in entity_counts."""
    if isinstance(entity, VertexChain):
        return "LINE" if len(entity.vertices) == 2 else "POLYLINE"
    if isinstance(entity, CircularArc):
        return "CIRCLE" if entity.is_circle else "ARC"
    if isinstance(entity, Ellipse):
        return "ELLIPSE"
    return "OTHER"
