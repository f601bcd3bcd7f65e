"""Status line: exactly one current label."""
import logging
from typing import Callable, List

from tapedeck.models.session import Status

logger = logging.getLogger(__name__)


class StatusBoard:
    def __init__(self, initial: Status = Status.POWER_OFF) -> None:
        self._current = initial
        self._listeners: List[Callable[[Status], None]] = []

    @property
    def current(self) -> Status:
        return self._current

    def set(self, status: Status) -> None:
        if status is self._current:
            return
        logger.info("Status: %s", status.value)
        self._current = status
        for listener in list(self._listeners):
            listener(status)

    def subscribe(self, listener: Callable[[Status], None]) -> None:
        self._listeners.append(listener)
