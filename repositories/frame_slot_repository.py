import threading
from typing import Optional

from models.frame_result import FrameResult


class FrameSlotRepository:
    """
    Latest processed frame for the presentation side.
    Each store overwrites the previous result; nothing is queued.
    """

    def __init__(self) -> None:
        self._result: Optional[FrameResult] = None
        self._frame_id = 0
        self.lock = threading.Lock()

    def store(self, result: FrameResult) -> int:
        with self.lock:
            self._result = result
            self._frame_id += 1
            return self._frame_id

    def retrieve(self) -> Optional[FrameResult]:
        with self.lock:
            return self._result

    def clear(self) -> None:
        with self.lock:
            self._result = None
