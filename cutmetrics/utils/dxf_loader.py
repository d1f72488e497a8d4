# dxf_loader.py
# Decodes a DXF file with ezdxf into the normalized entity records the analysis consumes.
# This is the only module that knows about DXF; the analysis never sees ezdxf objects.

import logging
import math

import ezdxf

MAX_BLOCK_DEPTH = 10  # Nested INSERT recursion limit


class DrawingLoadError(Exception):
    """The DXF file could not be read or decoded."""


def _xy(vec):
    return {"x": float(vec[0]), "y": float(vec[1])}


def _chain_record(entity_type, points, closed):
    vertices = [_xy(p) for p in points]
    if closed and vertices:
        vertices.append(vertices[0])
    return {"type": entity_type, "vertices": vertices}


def entity_records(entity, depth=0):
    """Yield normalized records for one modelspace entity (blocks are exploded)."""
    entity_type = entity.dxftype()
    if entity_type == "LINE":
        yield {"type": "LINE", "vertices": [_xy(entity.dxf.start), _xy(entity.dxf.end)]}
    elif entity_type == "LWPOLYLINE":
        yield _chain_record("LWPOLYLINE", entity.get_points('xy'), entity.closed)
    elif entity_type == "POLYLINE":
        if entity.is_2d_polyline:
            points = [v.dxf.location for v in entity.vertices]
            yield _chain_record("POLYLINE", points, entity.is_closed)
        else:
            logging.debug("Skipping 3D/mesh POLYLINE")
            yield {"type": "POLYLINE"}
    elif entity_type == "CIRCLE":
        yield {"type": "CIRCLE", "center": _xy(entity.dxf.center), "radius": entity.dxf.radius}
    elif entity_type == "ARC":
        yield {
            "type": "ARC",
            "center": _xy(entity.dxf.center),
            "radius": entity.dxf.radius,
            "startAngle": math.radians(entity.dxf.start_angle),
            "endAngle": math.radians(entity.dxf.end_angle),
        }
    elif entity_type == "ELLIPSE":
        major = entity.dxf.major_axis
        semi_major = math.hypot(major[0], major[1])
        yield {
            "type": "ELLIPSE",
            "center": _xy(entity.dxf.center),
            "semiMajorAxis": semi_major,
            "semiMinorAxis": semi_major * entity.dxf.ratio,
        }
    elif entity_type == "INSERT":
        if depth >= MAX_BLOCK_DEPTH:
            logging.warning(f"Skipping INSERT {entity.dxf.name}: nesting deeper than {MAX_BLOCK_DEPTH}")
            return
        for sub_entity in entity.virtual_entities():
            yield from entity_records(sub_entity, depth + 1)
    else:
        yield {"type": entity_type}


def header_record(doc):
    """Extents and unit code; ezdxf's unset extents (min above max) are dropped."""
    header = {}
    ext_min = doc.header.get('$EXTMIN')
    ext_max = doc.header.get('$EXTMAX')
    if ext_min is not None and ext_max is not None and ext_min[0] <= ext_max[0] and ext_min[1] <= ext_max[1]:
        header['$EXTMIN'] = _xy(ext_min)
        header['$EXTMAX'] = _xy(ext_max)
    measurement = doc.header.get('$MEASUREMENT')
    if measurement is not None:
        header['$MEASUREMENT'] = int(measurement)
    return header


def drawing_from_document(doc):
    """Return (entities, header) for an already loaded ezdxf document."""
    entities = []
    for entity in doc.modelspace():
        entities.extend(entity_records(entity))
    header = header_record(doc)
    logging.info(f"Decoded {len(entities)} entity records, header keys: {sorted(header)}")
    return entities, header


def load_drawing(file_path):
    """Read a DXF file and return (entities, header)."""
    try:
        doc = ezdxf.readfile(file_path)
    except IOError as e:
        logging.error(f"Could not read DXF file {file_path}: {e}")
        raise DrawingLoadError(f"Could not read {file_path}: {e}") from e
    except ezdxf.DXFStructureError as e:
        logging.error(f"Invalid or corrupt DXF file {file_path}: {e}")
        raise DrawingLoadError(f"Invalid or corrupt DXF file {file_path}: {e}") from e
    return drawing_from_document(doc)
