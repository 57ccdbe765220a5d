from __future__ import annotations

import logging

from PySide6.QtCore import QObject, QTimer, Signal

from fastlegend.core.session import TypingSession

logger = logging.getLogger(__name__)


class SessionTimer(QObject):
    """Drives a TypingSession from the Qt event loop.

    Input handlers and the tick run on the same thread, so a session is never
    written to by both at once.
    """

    ticked = Signal(object)  # remaining seconds, or None for untimed modes
    finished = Signal(object)  # final MetricsResult

    def __init__(self, session: TypingSession, tick_ms: int = 1000, parent=None):
        super().__init__(parent)
        self._session = session
        self._tick = QTimer(self)
        self._tick.setInterval(tick_ms)
        self._tick.timeout.connect(self._on_tick)
        self._reported = False

    @property
    def session(self) -> TypingSession:
        return self._session

    def is_running(self) -> bool:
        return self._tick.isActive()

    def start(self):
        if not self._session.is_finished:
            self._tick.start()

    def stop(self):
        self._tick.stop()

    def type_text(self, chars: str) -> bool:
        accepted = self._session.type_text(chars)
        if self._session.is_finished:
            self._finish()
        return accepted

    def pause(self):
        self._session.pause()
        self._tick.stop()

    def resume(self):
        self._session.resume()
        self.start()

    def reset(self):
        self._tick.stop()
        self._session.reset()
        self._reported = False
        self._tick.start()
        self.ticked.emit(self._session.remaining_seconds)

    def finish(self):
        """End the test now, e.g. a zen session the user has stopped."""
        self._finish()

    def _on_tick(self):
        done = self._session.tick()
        self.ticked.emit(self._session.remaining_seconds)
        if done:
            self._finish()

    def _finish(self):
        if self._reported:
            return
        self._tick.stop()
        self._reported = True
        self.finished.emit(self._session.finish())
