import pytest

from models.pixel_buffer import PixelBuffer
from services.center_sampler_service import CenterSamplerService
from frame_factory import bgra_from_rgb, buffer_from_bgra, solid_buffer

sampler = CenterSamplerService()


def test_uniform_buffer():
    color = sampler.sample_center(solid_buffer(4, 4, (128, 64, 32)))
    assert color.red == pytest.approx(0.502, abs=1 / 255)
    assert color.green == pytest.approx(0.251, abs=1 / 255)
    assert color.blue == pytest.approx(0.125, abs=1 / 255)
    assert color.rgb_string() == "R:128 G:64 B:32"
    assert color.hex() == "#804020"


def test_truncating_center_with_padded_stride():
    rows = [[(0, 0, 0)] * 5 for _ in range(3)]
    rows[1][2] = (10, 20, 250)
    color = sampler.sample_center(buffer_from_bgra(bgra_from_rgb(rows), pad=16))
    assert color.to_bytes() == (10, 20, 250)


def test_even_dimensions_pick_lower_right_of_middle():
    rows = [[(0, 0, 0)] * 4 for _ in range(4)]
    rows[2][2] = (255, 255, 255)
    assert sampler.sample_center(buffer_from_bgra(bgra_from_rgb(rows))).to_bytes() == (255, 255, 255)


def test_unreadable_buffers_return_none():
    assert sampler.sample_center(PixelBuffer(width=0, height=4, stride=0, data=b"")) is None
    assert sampler.sample_center(PixelBuffer(width=4, height=4, stride=16, data=b"\x00" * 10)) is None
