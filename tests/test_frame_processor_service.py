import threading

import numpy as np

from models.color_category import TrackedColor
from models.pixel_buffer import PixelBuffer
from models.selection_state import SelectionSource, SelectionState
from models.vision_mode import VisionMode
from pipeline.highlight_stream import highlight_frames
from repositories.pixel_buffer_repository import PixelBufferRepository
from frame_factory import bgra_from_rgb, buffer_from_bgra, solid_buffer

repo = PixelBufferRepository()

RED_PX, GREEN_PX, BLUE_PX, YELLOW_PX = (220, 20, 20), (20, 220, 20), (20, 20, 220), (230, 220, 10)


def quad_frame(pad=0):
    rows = [[RED_PX] * 6 + [GREEN_PX] * 6] * 5 + [[BLUE_PX] * 6 + [YELLOW_PX] * 6] * 5
    return buffer_from_bgra(bgra_from_rgb(rows), pad=pad)


def test_normal_mode_is_byte_identical_passthrough(frame_processor):
    frame = quad_frame(pad=8)
    scanned_before = frame_processor.mask_service.pixels_scanned
    result = frame_processor.process_frame(frame, SelectionState())
    assert result.composited.data == frame.data
    assert result.active_categories == ()
    assert frame_processor.mask_service.pixels_scanned == scanned_before


def test_result_dimensions_and_center_color(frame_processor):
    frame = quad_frame(pad=12)
    state = SelectionState(manual_colors=(TrackedColor.RED,))
    result = frame_processor.process_frame(frame, state)
    out = result.composited
    assert (out.width, out.height, out.stride) == (12, 10, 48)
    # center (6, 5) lies in the yellow quadrant of the original frame
    assert result.center_color.to_bytes() == YELLOW_PX
    assert result.active_categories == (TrackedColor.RED,)


def test_tritanomaly_highlights_blue_and_yellow_only(frame_processor):
    frame = quad_frame()
    state = SelectionState(manual_colors=(TrackedColor.RED, TrackedColor.GREEN),
                           vision_mode=VisionMode.TRITANOMALY,
                           source=SelectionSource.VISION_MODE)
    result = frame_processor.process_frame(frame, state)
    assert set(result.active_categories) == {TrackedColor.BLUE, TrackedColor.YELLOW}

    fg = np.rint(frame_processor.compositor_service.derive_foreground(frame) * 255).astype(np.uint8)
    out = repo.view(result.composited)[..., :3]
    highlighted = (out == fg).all(axis=2)
    assert highlighted[5:, :].all()          # blue + yellow rows
    assert not highlighted[:5, :].any()      # red + green rows


def test_uses_selection_snapshot_when_no_state_given(frame_processor):
    frame_processor.selection_service.select_vision_mode(VisionMode.PROTANOMALY)
    result = frame_processor.process_frame(quad_frame())
    assert result.active_categories == (TrackedColor.RED,)


def test_malformed_frames_are_skipped(frame_processor):
    state = SelectionState(manual_colors=(TrackedColor.RED,))
    bad = [
        PixelBuffer(width=0, height=0, stride=0, data=b""),
        PixelBuffer(width=4, height=4, stride=8, data=b"\x00" * 64),
        PixelBuffer(width=4, height=4, stride=16, data=b"\x00" * 63),
        PixelBuffer(width=4, height=4, stride=16, data=b"\x00" * 64, pixel_format="YUV"),
    ]
    for frame in bad:
        assert frame_processor.process_frame(frame, state) is None
    assert frame_processor.frames_skipped == len(bad)
    assert frame_processor.frames_processed == 0


def test_stream_skips_bad_frames_and_delivers_the_rest(frame_processor):
    frames = [
        solid_buffer(8, 8, GREEN_PX),
        PixelBuffer(width=8, height=8, stride=4, data=b""),
        solid_buffer(8, 8, RED_PX, pad=4),
    ]
    delivered = []
    count = highlight_frames(frames, sink=delivered.append,
                             frame_processor=frame_processor,
                             state_provider=lambda: SelectionState(manual_colors=(TrackedColor.GREEN,)))
    assert count == 2
    assert len(delivered) == 2
    assert [r.center_color.to_bytes() for r in delivered] == [GREEN_PX, RED_PX]
    assert all(r.composited.stride == 32 for r in delivered)


def test_stream_reads_live_selection_per_frame(frame_processor):
    seen = []

    def frames():
        yield solid_buffer(4, 4, RED_PX)
        frame_processor.selection_service.toggle_manual_color(TrackedColor.BLUE)
        yield solid_buffer(4, 4, RED_PX)

    highlight_frames(frames(), sink=lambda r: seen.append(r.active_categories),
                     frame_processor=frame_processor)
    assert seen == [(), (TrackedColor.BLUE,)]


def test_failed_derived_allocation_skips_frame(frame_processor, monkeypatch):
    def out_of_memory(frame):
        raise MemoryError("no room for foreground")

    monkeypatch.setattr(frame_processor.compositor_service, "derive_foreground", out_of_memory)
    state = SelectionState(manual_colors=(TrackedColor.RED,))
    assert frame_processor.process_frame(quad_frame(), state) is None
    assert frame_processor.frames_skipped == 1
    assert frame_processor.frames_processed == 0


def test_counters_are_exact_under_concurrent_calls(frame_processor):
    good = solid_buffer(4, 4, RED_PX)
    bad = PixelBuffer(width=4, height=4, stride=4, data=b"")
    state = SelectionState(manual_colors=(TrackedColor.RED,))

    def worker():
        for _ in range(25):
            frame_processor.process_frame(good, state)
            frame_processor.process_frame(bad, state)

    threads = [threading.Thread(target=worker) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert frame_processor.frames_processed == 100
    assert frame_processor.frames_skipped == 100
