import pytest

from services.frame_processor_service import FrameProcessorService
from services.mask_service import MaskService


@pytest.fixture
def mask_service():
    service = MaskService(workers=2, chunk_rows=3)
    yield service
    service.close()


@pytest.fixture
def frame_processor():
    processor = FrameProcessorService(mask_service=MaskService(workers=2, chunk_rows=2),
                                      workers=3)
    yield processor
    processor.close()
