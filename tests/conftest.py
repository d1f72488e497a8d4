import io
import logging

import ezdxf
import pytest

from cutmetrics import create_app


# Log all test failures so they land next to the analysis logs
@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(item, call):
    outcome = yield
    rep = outcome.get_result()
    if rep.when == 'call' and rep.failed:
        logger = logging.getLogger()
        logger.error(f"Test {item.nodeid} {rep.outcome.upper()}")
        if rep.longrepr:
            logger.error(f"Failure traceback for {item.nodeid}:\n{rep.longrepr}")


@pytest.fixture
def app():
    app = create_app({'TESTING': True, 'MAX_ENTITIES': 50})
    return app


@pytest.fixture
def client(app):
    return app.test_client()


def _line(x1, y1, x2, y2):
    return {"type": "LINE", "vertices": [{"x": x1, "y": y1}, {"x": x2, "y": y2}]}


@pytest.fixture
def unit_rectangle_lines():
    """Four LINE records forming the unit square, none closed on its own."""
    return [
        _line(0, 0, 1, 0),
        _line(1, 0, 1, 1),
        _line(1, 1, 0, 1),
        _line(0, 1, 0, 0),
    ]


@pytest.fixture
def square_polyline():
    return {
        "type": "LWPOLYLINE",
        "vertices": [{"x": 0, "y": 0}, {"x": 10, "y": 0}, {"x": 10, "y": 10}, {"x": 0, "y": 10}, {"x": 0, "y": 0}],
    }


@pytest.fixture
def sample_doc():
    """Plate with a closed outline, a hole, a slot arc and loose lines."""
    doc = ezdxf.new()
    msp = doc.modelspace()
    msp.add_lwpolyline([(0, 0), (100, 0), (100, 50), (0, 50)], close=True)
    msp.add_circle((25, 25), radius=5)
    msp.add_arc((75, 25), radius=10, start_angle=0, end_angle=180)
    msp.add_line((60, 10), (90, 10))
    msp.add_text("PART-001")
    doc.header['$EXTMIN'] = (0, 0, 0)
    doc.header['$EXTMAX'] = (100, 50, 0)
    doc.header['$MEASUREMENT'] = 1
    return doc


@pytest.fixture
def dxf_bytes():
    """Serialize an ezdxf document into an upload-ready byte stream."""
    def _dxf_bytes(doc):
        stream = io.StringIO()
        doc.write(stream)
        return io.BytesIO(stream.getvalue().encode('utf-8'))
    return _dxf_bytes
