"""Unit tests for signature_lib.utils.imaging."""

import io

import numpy as np
import pytest
from PIL import Image

from signature_lib.utils.imaging import ensure_rgba, load_rgba


def _png_bytes(img):
    buf = io.BytesIO()
    img.save(buf, format='PNG')
    return buf.getvalue()


class TestLoadRgba:
    """Decoding and downscaling."""

    def test_wide_image_downscaled(self):
        data = _png_bytes(Image.new('RGB', (2400, 600), 'white'))
        loaded = load_rgba(data, max_width=1200)
        assert loaded.original_size == (2400, 600)
        assert loaded.scale == 0.5
        assert loaded.pixels.shape == (300, 1200, 4)
        assert (loaded.width, loaded.height) == (1200, 300)

    def test_small_image_not_upscaled(self):
        data = _png_bytes(Image.new('RGB', (300, 100), 'white'))
        loaded = load_rgba(data, max_width=1200)
        assert loaded.scale == 1.0
        assert loaded.pixels.shape == (100, 300, 4)

    def test_grayscale_gets_opaque_alpha(self):
        data = _png_bytes(Image.new('L', (40, 20), 0))
        pixels = load_rgba(data).pixels
        assert pixels.dtype == np.uint8
        assert (pixels[..., 3] == 255).all()
        assert (pixels[..., :3] == 0).all()

    def test_transparency_kept(self):
        data = _png_bytes(Image.new('RGBA', (10, 10), (0, 0, 0, 0)))
        assert (load_rgba(data).pixels[..., 3] == 0).all()

    def test_path_and_file_object(self, tmp_path):
        path = tmp_path / 'sig.png'
        Image.new('RGB', (50, 30), 'white').save(path)
        assert load_rgba(path).original_size == (50, 30)
        assert load_rgba(str(path)).original_size == (50, 30)
        with open(path, 'rb') as f:
            assert load_rgba(f).original_size == (50, 30)

    def test_garbage_bytes(self):
        with pytest.raises(ValueError):
            load_rgba(b'definitely not an image')

    def test_missing_file(self, tmp_path):
        with pytest.raises(ValueError):
            load_rgba(tmp_path / 'nope.png')

    def test_decompression_bomb(self, monkeypatch):
        monkeypatch.setattr(Image, 'MAX_IMAGE_PIXELS', 100)
        data = _png_bytes(Image.new('RGB', (300, 100), 'white'))
        with pytest.raises(ValueError):
            load_rgba(data)


class TestEnsureRgba:
    """Pixel buffer validation."""

    def test_passes_uint8(self):
        arr = np.zeros((4, 5, 4), dtype=np.uint8)
        assert ensure_rgba(arr) is arr

    def test_clips_other_dtypes(self):
        arr = np.full((2, 2, 4), 300, dtype=np.int32)
        out = ensure_rgba(arr)
        assert out.dtype == np.uint8
        assert (out == 255).all()

    @pytest.mark.parametrize("shape", [(4, 5), (4, 5, 3), (0, 5, 4), (4, 0, 4)])
    def test_rejects_bad_shapes(self, shape):
        with pytest.raises(ValueError):
            ensure_rgba(np.zeros(shape, dtype=np.uint8))
