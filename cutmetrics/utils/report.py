# report.py
# Combines accumulated totals, assembled polygons and the drawing header into the final result.

import logging
from dataclasses import asdict, dataclass, field

from cutmetrics.utils import geometry
from cutmetrics.utils.entities import DrawingHeader


@dataclass(frozen=True)
class BoundingBox:
    min_x: float
    min_y: float
    max_x: float
    max_y: float
    width: float
    height: float

    @property
    def area(self):
        return self.width * self.height


@dataclass(frozen=True)
class AnalysisResult:
    """Manufacturing metrics for one drawing."""
    bounding_box: BoundingBox
    total_cutting_length: float
    total_surface_area: float
    net_surface_area: float
    unit_of_measurement: str
    loop_count: int
    polygon_areas: tuple = ()
    entity_counts: dict = field(default_factory=dict)

    def to_dict(self):
        data = asdict(self)
        data["polygon_areas"] = list(self.polygon_areas)
        return data


def resolve_bounding_box(bounds, header):
    """Header extents win when both are present; otherwise fall back to entity extrema."""
    min_x, min_y, max_x, max_y = bounds
    if header.has_extents:
        width = header.ext_max.x - header.ext_min.x
        height = header.ext_max.y - header.ext_min.y
    else:
        width = max_x - min_x
        height = max_y - min_y
    return BoundingBox(min_x, min_y, max_x, max_y, width, height)


def is_outer_frame(polygon, bounds):
    """The polygon spans exactly the drawing extrema, so it is the plate outline, not a cutout."""
    return geometry.vertex_bounds(polygon) == tuple(bounds)


def corrected_loop_count(loop_count, bounds, polygons):
    """Drop one loop when the outer frame would otherwise be counted as a cutout."""
    min_x, min_y, max_x, max_y = bounds
    degenerate = min_x == max_x or min_y == max_y
    frame = any(is_outer_frame(p, bounds) for p in polygons)
    if (degenerate or frame) and loop_count > 0:
        logging.debug(f"Loop count corrected (degenerate={degenerate}, frame={frame})")
        return loop_count - 1
    return loop_count


def build_report(accumulator, polygons, header=None, add_assembled_area=False):
    """Return the AnalysisResult, or None when no entity produced a finite extremum."""
    if not accumulator.has_extent:
        return None
    header = DrawingHeader.from_dict(header)
    bounds = accumulator.bounds
    box = resolve_bounding_box(bounds, header)

    polygon_areas = tuple(geometry.polygon_area(p) for p in polygons)
    total_surface_area = accumulator.total_surface_area
    if add_assembled_area:
        total_surface_area += sum(polygon_areas)
    cutout_area = sum(area for p, area in zip(polygons, polygon_areas) if not is_outer_frame(p, bounds))
    net_surface_area = box.area - cutout_area - sum(accumulator.circle_areas)

    loop_count = corrected_loop_count(accumulator.loop_count + len(polygons), bounds, polygons)

    result = AnalysisResult(
        bounding_box=box,
        total_cutting_length=accumulator.total_cutting_length,
        total_surface_area=total_surface_area,
        net_surface_area=net_surface_area,
        unit_of_measurement=geometry.measurement_unit_label(header.measurement_code),
        loop_count=loop_count,
        polygon_areas=polygon_areas,
        entity_counts=dict(accumulator.entity_counts),
    )
    logging.info("Analysis summary:")
    logging.info(f"  Total Cut Length: {result.total_cutting_length:.2f} {result.unit_of_measurement}")
    logging.info(f"  Surface Area: {result.total_surface_area:.2f}, Net Area: {result.net_surface_area:.2f}")
    logging.info(f"  Loops: {result.loop_count}, Entity Counts: {result.entity_counts}")
    return result
