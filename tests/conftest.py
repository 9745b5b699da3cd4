"""Shared pytest fixtures for the signature tracing test suite.

Fixtures:
    make_rgba: Factory for white RGBA images with black rectangles
    bar_rgba: 260x60 image holding one 200x6 horizontal bar
    blank_rgba: 260x60 all-white image
    bar_png: bar_rgba encoded as PNG bytes
    flask_client: Flask test client for the web API

Markers:
    slow: Mark test as slow-running (skip with -m "not slow")
    integration: Mark test as integration test
"""

import io
import sys
from pathlib import Path

import numpy as np
import pytest
from PIL import Image

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

# Geometry of the reference bar image: columns 20-219, rows 20-25
BAR_IMAGE_SIZE = (260, 60)
BAR_RECT = (20, 20, 220, 26)


# -----------------------------------------------------------------------------
# Pytest Markers
# -----------------------------------------------------------------------------

def pytest_configure(config):
    """Register custom pytest markers."""
    config.addinivalue_line(
        "markers", "slow: mark test as slow-running (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )


# -----------------------------------------------------------------------------
# Image Fixtures
# -----------------------------------------------------------------------------

def _make_rgba(width, height, rects=(), color=(0, 0, 0, 255)):
    """White opaque image with filled rectangles.

    Args:
        width: Image width in pixels.
        height: Image height in pixels.
        rects: (x0, y0, x1, y1) boxes, end-exclusive, filled with color.
        color: RGBA fill color.

    Returns:
        numpy.ndarray: uint8 array of shape (height, width, 4).
    """
    img = np.full((height, width, 4), 255, dtype=np.uint8)
    for x0, y0, x1, y1 in rects:
        img[y0:y1, x0:x1] = color
    return img


def _encode_png(rgba):
    buf = io.BytesIO()
    Image.fromarray(rgba, 'RGBA').save(buf, format='PNG')
    return buf.getvalue()


@pytest.fixture
def make_rgba():
    """Return the RGBA image factory.

    Example:
        def test_two_bars(make_rgba):
            img = make_rgba(100, 50, [(5, 5, 80, 11), (5, 30, 80, 36)])
    """
    return _make_rgba


@pytest.fixture
def bar_rgba():
    """Return a 260x60 white image with a 200x6 black bar at (20, 20)."""
    return _make_rgba(*BAR_IMAGE_SIZE, [BAR_RECT])


@pytest.fixture
def blank_rgba():
    """Return a 260x60 all-white image."""
    return _make_rgba(*BAR_IMAGE_SIZE)


@pytest.fixture
def bar_png(bar_rgba):
    """Return the bar image encoded as PNG bytes."""
    return _encode_png(bar_rgba)


@pytest.fixture
def blank_png(blank_rgba):
    """Return the blank image encoded as PNG bytes."""
    return _encode_png(blank_rgba)


# -----------------------------------------------------------------------------
# Flask Fixture
# -----------------------------------------------------------------------------

@pytest.fixture
def flask_client():
    """Create a Flask test client for the web API.

    Returns:
        flask.testing.FlaskClient: Test client for making requests.

    Example:
        def test_styles(flask_client):
            response = flask_client.get('/api/styles')
            assert response.status_code == 200
    """
    from signature_lib.web import app

    app.config['TESTING'] = True
    with app.test_client() as client:
        yield client
