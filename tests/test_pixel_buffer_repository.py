import io

import cv2
import numpy as np
import pytest
from PIL import Image

from models.frame_errors import UnreadableBufferError, UnsupportedPixelFormatError
from models.pixel_buffer import PixelBuffer
from repositories.pixel_buffer_repository import PixelBufferRepository
from frame_factory import bgra_from_rgb, buffer_from_bgra

repo = PixelBufferRepository()


def test_view_strips_padding_and_is_read_only():
    pixels = bgra_from_rgb([[(1, 2, 3), (4, 5, 6)], [(7, 8, 9), (10, 11, 12)]])
    view = repo.view(buffer_from_bgra(pixels, pad=8))
    assert view.shape == (2, 2, 4)
    assert np.array_equal(view, pixels)
    with pytest.raises(ValueError):
        view[0, 0, 0] = 0


@pytest.mark.parametrize("buffer, error", [
    (PixelBuffer(width=0, height=2, stride=0, data=b""), UnreadableBufferError),
    (PixelBuffer(width=2, height=2, stride=4, data=b"\x00" * 16), UnreadableBufferError),
    (PixelBuffer(width=2, height=2, stride=8, data=b"\x00" * 15), UnreadableBufferError),
    (PixelBuffer(width=2, height=2, stride=8, data=b"\x00" * 16, pixel_format="RGB"), UnsupportedPixelFormatError),
])
def test_validate_rejects_malformed_buffers(buffer, error):
    with pytest.raises(error):
        repo.validate(buffer)


def test_from_bgra_rejects_wrong_shapes():
    with pytest.raises(UnsupportedPixelFormatError):
        repo.from_bgra(np.zeros((2, 2, 3), dtype=np.uint8))
    with pytest.raises(UnsupportedPixelFormatError):
        repo.from_bgra(np.zeros((2, 2, 4), dtype=np.float32))


def test_decode_png_roundtrip_to_bgra():
    bgr = np.zeros((3, 5, 3), dtype=np.uint8)
    bgr[..., 2] = 200
    ok, png = cv2.imencode(".png", bgr)
    assert ok
    buffer = repo.decode(png.tobytes())
    assert (buffer.width, buffer.height, buffer.stride) == (5, 3, 20)
    view = repo.view(buffer)
    assert (view[..., 2] == 200).all() and (view[..., 3] == 255).all()


def test_decode_garbage_raises():
    with pytest.raises(UnreadableBufferError):
        repo.decode(b"not an image")


def test_save_and_load(tmp_path):
    buffer = buffer_from_bgra(bgra_from_rgb([[(10, 20, 30)] * 3] * 2))
    path = tmp_path / "frame.png"
    repo.save(buffer, path)
    loaded = repo.load(path)
    assert loaded.data == buffer.data
    assert repo.list_dir(tmp_path) == [path]


def translucent_buffer():
    pixels = bgra_from_rgb([[(10, 20, 30), (200, 100, 50)]] * 2)
    pixels[..., 3] = [[0, 64], [128, 255]]
    return buffer_from_bgra(pixels, pad=4)


def test_encode_png_keeps_alpha():
    img = Image.open(io.BytesIO(repo.encode_png(translucent_buffer())))
    assert img.mode == "RGBA"
    assert np.asarray(img)[..., 3].tolist() == [[0, 64], [128, 255]]
    assert img.getpixel((1, 0)) == (200, 100, 50, 64)


def test_save_png_keeps_alpha_and_jpeg_drops_it(tmp_path):
    png_path, jpg_path = tmp_path / "frame.png", tmp_path / "frame.jpg"
    repo.save(translucent_buffer(), png_path)
    repo.save(translucent_buffer(), jpg_path)
    with Image.open(png_path) as img:
        assert img.mode == "RGBA"
        assert np.asarray(img)[..., 3].tolist() == [[0, 64], [128, 255]]
    with Image.open(jpg_path) as img:
        assert img.mode == "RGB"
        assert img.size == (2, 2)


def test_load_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        repo.load(tmp_path / "missing.png")
