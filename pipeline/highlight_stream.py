"""
Highlight Stream Pipeline
Pulls frames from a source, runs the highlight pipeline on each one and
hands the result to a presentation sink.
"""

import logging
from typing import Callable, Iterable, Optional

from models.frame_result import FrameResult
from models.pixel_buffer import PixelBuffer
from models.selection_state import SelectionState
from services.frame_processor_service import FrameProcessorService

logger = logging.getLogger(__name__)


def highlight_frames(
    frames: Iterable[PixelBuffer],
    *,
    sink: Callable[[FrameResult], None],
    frame_processor: Optional[FrameProcessorService] = None,
    state_provider: Optional[Callable[[], SelectionState]] = None,
) -> int:
    """
    Process every frame of *frames* in arrival order.

    This pipeline step:
    1. Snapshots the selection once per frame
    2. Runs mask build / composite / center sample
    3. Calls *sink* once for each frame that succeeded
    4. Skips malformed frames without stopping the stream

    Args:
        frames: Frame source (any iterable of PixelBuffer)
        sink: Presentation callback; each call replaces the previous frame
        frame_processor: Service doing the per-frame work
        state_provider: Selection snapshot callable (defaults to the
            processor's SelectionService)

    Returns:
        int: Number of frames delivered to the sink
    """
    frame_processor = frame_processor or FrameProcessorService()
    state_provider = state_provider or frame_processor.selection_service.snapshot

    delivered = skipped = 0
    for frame in frames:
        result = frame_processor.process_frame(frame, state_provider())
        if result is None:
            skipped += 1
            continue
        sink(result)
        delivered += 1

    logger.info(f"Stream finished: {delivered} frames delivered, {skipped} skipped")
    return delivered
