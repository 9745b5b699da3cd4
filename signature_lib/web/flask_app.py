"""Flask application setup for the signature tracing API.

This module owns the Flask application instance, the shared
SignatureService, and the request validation helpers. Route handlers live
in routes.py and register themselves on ``app`` when imported; importing
the ``signature_lib.web`` package does both.

Architecture:
    - flask_app.py: App instance, service, and validation helpers (this module)
    - routes.py: JSON endpoints for tracing, planning and style presets

Example:
    Run the development server::

        signature-web --port 5000 --log-level DEBUG

    Or from Python::

        from signature_lib.web import app
        app.run(port=5000)

Attributes:
    app (Flask): The Flask application instance.
    service (SignatureService): Service shared by every request.
    MAX_UPLOAD_BYTES (int): Largest accepted request body (16 MiB).
    MAX_CANVAS_SIZE (int): Largest canvas edge accepted by /api/plan.
"""

import argparse
import logging
import math

from flask import Flask, jsonify

from ..api.services import SignatureService
from ..utils.log_setup import configure_logging

logger = logging.getLogger(__name__)

MAX_UPLOAD_BYTES = 16 * 1024 * 1024
MAX_CANVAS_SIZE = 10000

app = Flask(__name__)
app.config['MAX_CONTENT_LENGTH'] = MAX_UPLOAD_BYTES

service = SignatureService()


def _positive_number(value) -> float | None:
    """value as a finite positive float, or None."""
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number) or number <= 0:
        return None
    return number


def validate_canvas_size(width, height) -> tuple[tuple[float, float] | None, tuple | None]:
    """Validate canvas dimensions from a request payload.

    Returns:
        tuple: ((width, height), None) if valid, or (None, error_response)
            where error_response is (flask.Response, 400).

    Example:
        Using in a route handler::

            size, err = validate_canvas_size(data.get('width'), data.get('height'))
            if err:
                return err
    """
    w = _positive_number(width)
    h = _positive_number(height)
    if w is None or h is None:
        return None, (jsonify(error="width and height must be positive numbers"), 400)
    if w > MAX_CANVAS_SIZE or h > MAX_CANVAS_SIZE:
        return None, (jsonify(error=f"Canvas larger than {MAX_CANVAS_SIZE}px"), 400)
    return (w, h), None


def validate_duration(seconds) -> tuple[float | None, tuple | None]:
    """Validate an optional target duration in seconds.

    Returns:
        tuple: (duration_ms or None, None) if valid or absent, or
            (None, error_response) if present but not a positive number.
    """
    if seconds is None:
        return None, None
    value = _positive_number(seconds)
    if value is None:
        return None, (jsonify(error="duration must be a positive number of seconds"), 400)
    return value * 1000.0, None


def main() -> None:
    """Run the development server."""
    parser = argparse.ArgumentParser(description='Signature tracing web API')
    parser.add_argument('--host', default='127.0.0.1', help='Interface to bind')
    parser.add_argument('--port', type=int, default=5000, help='Port to listen on')
    parser.add_argument('--debug', action='store_true', help='Enable Flask debug mode')
    parser.add_argument('--log-level', default='INFO',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        help='Logging verbosity')
    args = parser.parse_args()

    configure_logging(level=args.log_level)

    logger.info("Starting signature API on %s:%d", args.host, args.port)
    app.run(host=args.host, port=args.port, debug=args.debug)
