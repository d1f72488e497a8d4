# analysis.py
# Entry points: entity list -> classifier -> accumulator -> polygon assembler -> report.

import logging

from cutmetrics.config import load_analysis_config
from cutmetrics.utils import dxf_loader
from cutmetrics.utils.accumulator import Accumulator
from cutmetrics.utils.assembler import assemble_polygons
from cutmetrics.utils.entities import classify_entity
from cutmetrics.utils.report import build_report


def analyze_drawing(entities, header=None, config=None):
    """
    Derive cutting metrics from a normalized entity list and optional drawing header.
    Returns an AnalysisResult, or None when no entity contributed finite geometry.
    """
    settings = load_analysis_config(config)
    accumulator = Accumulator(tolerance=settings["tolerance"])
    skipped = 0
    for record in entities or []:
        entity = classify_entity(record)
        if entity is None:
            skipped += 1
            continue
        accumulator.add(entity)
    if skipped:
        logging.info(f"Skipped {skipped} unsupported or malformed entities")

    if not accumulator.has_extent:
        logging.warning("No measurable geometry found; no analysis result")
        return None

    polygons = assemble_polygons(accumulator.open_segments, settings["tolerance"], settings["strategy"])
    return build_report(accumulator, polygons, header, settings["add_assembled_area"])


def analyze_file(file_path, config=None):
    """Load a DXF file through the ezdxf collaborator and analyze it."""
    entities, header = dxf_loader.load_drawing(file_path)
    return analyze_drawing(entities, header, config)


def summarize(result):
    """Human-readable summary lines for a result (or its absence)."""
    if result is None:
        return ["No measurable geometry found."]
    box = result.bounding_box
    unit = result.unit_of_measurement
    return [
        f"Bounding Box: {box.width:.2f} x {box.height:.2f} {unit}",
        f"Total Cutting Length: {result.total_cutting_length:.2f} {unit}",
        f"Total Surface Area: {result.total_surface_area:.2f} sq {unit}",
        f"Net Surface Area: {result.net_surface_area:.2f} sq {unit}",
        f"Closed Loops: {result.loop_count}",
        f"Unit of Measurement: {unit}",
    ]
