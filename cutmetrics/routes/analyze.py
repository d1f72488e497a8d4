from flask import Blueprint, request, jsonify, current_app
import logging
import os
import tempfile

from cutmetrics.utils import analysis, dxf_loader

analyze_bp = Blueprint('analyze', __name__, url_prefix='/api')


def _result_response(result):
    if result is None:
        return jsonify({"status": "no_result", "result": None, "summary": analysis.summarize(None)}), 200
    return jsonify({"status": "success", "result": result.to_dict(), "summary": analysis.summarize(result)}), 200


def _merged_options(options):
    merged = dict(current_app.config['ANALYSIS'])
    merged.update(options or {})
    return merged


@analyze_bp.route('/health', methods=['GET'])
def health():
    return jsonify({"status": "ok"}), 200


@analyze_bp.route('/analyze', methods=['POST'])
def analyze():
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        return jsonify({"error": "Request body must be a JSON object"}), 400
    entities = payload.get('entities')
    if not isinstance(entities, list):
        return jsonify({"error": "'entities' must be a list"}), 400
    options = payload.get('options')
    if options is not None and not isinstance(options, dict):
        return jsonify({"error": "'options' must be an object"}), 400
    max_entities = current_app.config['MAX_ENTITIES']
    if len(entities) > max_entities:
        logging.warning(f"/api/analyze rejected: {len(entities)} entities exceeds MAX_ENTITIES={max_entities}")
        return jsonify({"error": f"Too many entities ({len(entities)}); limit is {max_entities}"}), 413
    header = payload.get('header')
    if header is not None and not isinstance(header, dict):
        return jsonify({"error": "'header' must be an object"}), 400

    try:
        result = analysis.analyze_drawing(entities, header, _merged_options(options))
    except ValueError as e:
        return jsonify({"error": str(e)}), 400
    return _result_response(result)


@analyze_bp.route('/analyze/dxf', methods=['POST'])
def analyze_dxf():
    if 'file' not in request.files:
        return jsonify({"error": "No file part"}), 400
    file = request.files['file']
    if file.filename == '':
        return jsonify({"error": "No selected file"}), 400
    if not file.filename.lower().endswith('.dxf'):
        return jsonify({"error": "File must be a .dxf"}), 400

    with tempfile.NamedTemporaryFile(delete=False, suffix='.dxf') as temp_file:
        file.save(temp_file)
        temp_file_path = temp_file.name
    try:
        entities, header = dxf_loader.load_drawing(temp_file_path)
        max_entities = current_app.config['MAX_ENTITIES']
        if len(entities) > max_entities:
            return jsonify({"error": f"Too many entities ({len(entities)}); limit is {max_entities}"}), 413
        result = analysis.analyze_drawing(entities, header, current_app.config['ANALYSIS'])
    except dxf_loader.DrawingLoadError as e:
        return jsonify({"error": f"Failed to parse {file.filename}: {e}"}), 400
    finally:
        if os.path.exists(temp_file_path):
            os.unlink(temp_file_path)
    if result is None:
        logging.warning(f"No measurable geometry in upload {file.filename}")
    else:
        logging.info(f"Analyzed upload {file.filename}: length={result.total_cutting_length:.2f}, loops={result.loop_count}")
    return _result_response(result)
