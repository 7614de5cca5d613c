import threading

from models.selection_state import SelectionState


class SelectionRepository:
    """
    Holds the current SelectionState.
    The lock only guards the reference swap, never any frame processing.
    """

    def __init__(self, initial: SelectionState | None = None) -> None:
        self._state = initial or SelectionState()
        self._lock = threading.Lock()

    def retrieve(self) -> SelectionState:
        with self._lock:
            return self._state

    def update(self, mutate) -> SelectionState:
        """Apply `mutate(old) -> new` atomically and return the new state."""
        with self._lock:
            self._state = mutate(self._state)
            return self._state

    def replace(self, state: SelectionState) -> None:
        with self._lock:
            self._state = state
