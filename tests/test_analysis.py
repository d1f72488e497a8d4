"""
test_analysis.py
End-to-end tests for analyze_drawing / analyze_file: entity list in, AnalysisResult out.
"""
import itertools
import math

import pytest

from cutmetrics.utils.analysis import analyze_drawing, analyze_file, summarize

OFFSET_CIRCLE = {"type": "CIRCLE", "center": {"x": 5, "y": 5}, "radius": 1}


def test_circle_end_to_end():
    result = analyze_drawing([{"type": "CIRCLE", "center": {"x": 0, "y": 0}, "radius": 5}])
    box = result.bounding_box
    assert (box.min_x, box.min_y, box.max_x, box.max_y) == (-5, -5, 5, 5)
    assert result.total_cutting_length == pytest.approx(31.4159, abs=1e-4)
    assert result.total_surface_area == pytest.approx(78.5398, abs=1e-4)
    assert result.net_surface_area == pytest.approx(100 - 78.5398, abs=1e-4)
    assert result.loop_count == 1
    assert result.unit_of_measurement == "Unknown"


def test_square_polyline_end_to_end(square_polyline):
    result = analyze_drawing([square_polyline], {"$MEASUREMENT": 1})
    assert result.total_cutting_length == pytest.approx(40)
    assert result.total_surface_area == pytest.approx(100)
    assert result.loop_count == 1
    assert result.unit_of_measurement == "mm"


@pytest.mark.parametrize("order", list(itertools.permutations(range(4))))
def test_rectangle_from_lines_adds_exactly_one_loop(unit_rectangle_lines, order):
    baseline = analyze_drawing([OFFSET_CIRCLE])
    lines = [unit_rectangle_lines[i] for i in order]
    result = analyze_drawing(lines + [OFFSET_CIRCLE])
    assert result.loop_count == baseline.loop_count + 1
    assert result.polygon_areas == (pytest.approx(1.0),)
    # Lines are counted once as cut length, never again by assembly
    assert result.total_cutting_length == pytest.approx(baseline.total_cutting_length + 4)


def test_rectangle_alone_is_the_outer_frame(unit_rectangle_lines):
    result = analyze_drawing(unit_rectangle_lines)
    assert result.loop_count == 0
    # The frame is the plate, not a cutout
    assert result.net_surface_area == pytest.approx(1)


def test_plate_with_cutouts():
    entities = [
        {"type": "LINE", "vertices": [[0, 0], [100, 0]]},
        {"type": "LINE", "vertices": [[100, 0], [100, 50]]},
        {"type": "LINE", "vertices": [[100, 50], [0, 50]]},
        {"type": "LINE", "vertices": [[0, 50], [0, 0]]},
        {"type": "LINE", "vertices": [[10, 10], [30, 10]]},
        {"type": "LINE", "vertices": [[30, 10], [30, 20]]},
        {"type": "LINE", "vertices": [[30, 20], [10, 20]]},
        {"type": "LINE", "vertices": [[10, 20], [10, 10]]},
        {"type": "CIRCLE", "center": {"x": 70, "y": 25}, "radius": 5},
        {"type": "TEXT", "text": "PLATE"},
    ]
    result = analyze_drawing(entities, {"$EXTMIN": {"x": 0, "y": 0}, "$EXTMAX": {"x": 100, "y": 50}})
    # circle + slot; the outer frame is discounted
    assert result.loop_count == 2
    assert sorted(result.polygon_areas) == [pytest.approx(200), pytest.approx(5000)]
    assert result.net_surface_area == pytest.approx(5000 - 200 - math.pi * 25)
    assert result.entity_counts == {"LINE": 8, "CIRCLE": 1}


def test_empty_and_unsupported_inputs_give_no_result():
    assert analyze_drawing([]) is None
    assert analyze_drawing(None) is None
    assert analyze_drawing([{"type": "TEXT"}, {"type": "CIRCLE", "center": {"x": 0, "y": 0}, "radius": 0}]) is None


def test_malformed_entities_are_skipped_not_fatal():
    entities = [
        {"type": "LWPOLYLINE", "vertices": []},
        {"type": "CIRCLE", "center": {"x": 0, "y": 0}, "radius": -1},
        {"type": "LINE", "vertices": [[0, 0], [3, 4]]},
    ]
    result = analyze_drawing(entities)
    assert result.total_cutting_length == pytest.approx(5)
    assert result.entity_counts == {"LINE": 1}


def test_ellipse_and_arc_contributions():
    entities = [
        {"type": "ELLIPSE", "center": {"x": 0, "y": 0}, "semiMajorAxis": 4, "semiMinorAxis": 2},
        {"type": "ARC", "center": {"x": 10, "y": 0}, "radius": 1, "startAngle": 0, "endAngle": math.pi / 2},
    ]
    result = analyze_drawing(entities)
    box = result.bounding_box
    assert (box.min_x, box.min_y, box.max_x, box.max_y) == (-4, -2, 11, 2)
    assert result.loop_count == 1
    assert result.total_surface_area == pytest.approx(math.pi * 8)


def test_config_overrides(unit_rectangle_lines):
    entities = unit_rectangle_lines + [OFFSET_CIRCLE]
    planar = analyze_drawing(entities, config={"strategy": "planar"})
    assert planar.polygon_areas == (pytest.approx(1.0),)
    added = analyze_drawing(entities, config={"add_assembled_area": True})
    assert added.total_surface_area == pytest.approx(math.pi + 1.0)
    with pytest.raises(ValueError):
        analyze_drawing(entities, config={"strategy": "nope"})
    with pytest.raises(ValueError):
        analyze_drawing(entities, config={"tolerance": 0})


def test_summarize_lines(square_polyline):
    lines = summarize(analyze_drawing([square_polyline], {"$MEASUREMENT": 0}))
    assert "Total Cutting Length: 40.00 in" in lines
    assert "Closed Loops: 1" in lines
    assert summarize(None) == ["No measurable geometry found."]


def test_analyze_file(tmp_path, sample_doc):
    path = tmp_path / "plate.dxf"
    sample_doc.saveas(path)
    result = analyze_file(str(path))
    assert result.unit_of_measurement == "mm"
    assert result.bounding_box.width == pytest.approx(100)
    assert result.bounding_box.height == pytest.approx(50)
    # outline 300 + hole 10*pi + half-circle slot 10*pi + loose line 30
    assert result.total_cutting_length == pytest.approx(330 + 20 * math.pi)
    assert result.total_surface_area == pytest.approx(5000 + 25 * math.pi)
    assert result.loop_count == 2
    # TEXT is ignored; a closed LWPOLYLINE tallies as a polyline
    assert result.entity_counts == {"POLYLINE": 1, "CIRCLE": 1, "ARC": 1, "LINE": 1}


def test_line_drawn_plate_net_area_keeps_the_frame():
    entities = [
        {"type": "LINE", "vertices": [[0, 0], [100, 0]]},
        {"type": "LINE", "vertices": [[100, 0], [100, 50]]},
        {"type": "LINE", "vertices": [[100, 50], [0, 50]]},
        {"type": "LINE", "vertices": [[0, 50], [0, 0]]},
        {"type": "CIRCLE", "center": {"x": 50, "y": 25}, "radius": 5},
    ]
    result = analyze_drawing(entities)
    assert result.loop_count == 1
    assert result.polygon_areas == (pytest.approx(5000),)
    assert result.net_surface_area == pytest.approx(5000 - math.pi * 25)
    assert result.net_surface_area > 0


def test_non_mapping_header_is_ignored(square_polyline):
    result = analyze_drawing([square_polyline], header=[0, 0, 10, 10])
    assert result.unit_of_measurement == "Unknown"
    assert result.bounding_box.width == pytest.approx(10)


def test_non_sequence_vertices_do_not_abort_analysis():
    entities = [
        {"type": "LINE", "vertices": 5},
        {"type": "CIRCLE", "center": {"x": 0, "y": 0}, "radius": 1},
    ]
    result = analyze_drawing(entities)
    assert result.entity_counts == {"CIRCLE": 1}
    assert result.loop_count == 1
