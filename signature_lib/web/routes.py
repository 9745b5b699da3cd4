"""JSON endpoints for signature tracing and motion planning.

Routes:
    POST /api/trace   multipart upload (field ``image``) -> SignatureAnalysis
    POST /api/plan    {analysis, width, height, style?, duration?} -> paths
    GET  /api/styles  built-in handwriting style presets

Bad input answers 400 with ``{"error": "..."}``; a blank image is not bad
input and answers 200 with an empty stroke list.
"""

import logging

from flask import jsonify, request

from ..domain.motion import DEFAULT_STYLE, STYLE_PRESETS
from ..motion.planner import natural_duration
from .flask_app import app, service, validate_canvas_size, validate_duration

logger = logging.getLogger(__name__)


@app.route('/api/trace', methods=['POST'])
def api_trace():
    upload = request.files.get('image')
    if upload is None:
        return jsonify(error="Missing image upload (multipart field 'image')"), 400
    data = upload.read()
    if not data:
        return jsonify(error="Uploaded image is empty"), 400

    try:
        analysis = service.trace_image(data)
    except ValueError as e:
        logger.warning("Trace rejected %s: %s", upload.filename or '<upload>', e)
        return jsonify(error=str(e)), 400
    return jsonify(analysis.to_dict())


@app.route('/api/plan', methods=['POST'])
def api_plan():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify(error="Expected a JSON object body"), 400
    if 'analysis' not in data:
        return jsonify(error="Missing analysis"), 400

    size, err = validate_canvas_size(data.get('width'), data.get('height'))
    if err:
        return err
    duration_ms, err = validate_duration(data.get('duration'))
    if err:
        return err

    try:
        paths = service.plan_motion(data['analysis'], size[0], size[1],
                                    style=data.get('style'), duration_ms=duration_ms)
    except ValueError as e:
        return jsonify(error=str(e)), 400
    return jsonify(paths=[p.to_dict() for p in paths], duration=natural_duration(paths))


@app.route('/api/styles')
def api_styles():
    return jsonify(
        default=DEFAULT_STYLE.to_dict(),
        presets={name: style.to_dict() for name, style in STYLE_PRESETS.items()},
    )
