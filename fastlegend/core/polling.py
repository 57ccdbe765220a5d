from __future__ import annotations

import logging
from typing import Callable, List, Optional

from PySide6.QtCore import QObject, QTimer, Signal

from fastlegend.core.errors import LeaderboardServiceError
from fastlegend.core.leaderboard import (
    DEFAULT_LEADERBOARD_SIZE,
    CurrentSession,
    LeaderboardEntry,
    LeaderboardView,
    build_leaderboard_view,
)

logger = logging.getLogger(__name__)


class PollHandle:
    """Returned by LeaderboardPoller.start(); cancel() stops further refreshes.

    The handle keeps its poller alive, so cancelling on teardown still works
    after the owner has dropped the poller.
    """

    def __init__(self, poller: LeaderboardPoller) -> None:
        self._poller: Optional[LeaderboardPoller] = poller

    @property
    def active(self) -> bool:
        return self._poller is not None and self._poller.is_polling()

    def cancel(self) -> None:
        if self._poller is None:
            return
        poller, self._poller = self._poller, None
        poller.stop()
        logger.debug("Leaderboard polling cancelled")


class LeaderboardPoller(QObject):
    """Refreshes the leaderboard snapshot on a fixed interval.

    A failed fetch keeps the previous snapshot in place; the error is logged
    and never reaches the caller.
    """

    refreshed = Signal(object)  # LeaderboardView

    def __init__(
        self,
        fetch_entries: Callable[[], List[LeaderboardEntry]],
        current_session: Callable[[], Optional[CurrentSession]] = lambda: None,
        interval_seconds: float = 30.0,
        limit: int = DEFAULT_LEADERBOARD_SIZE,
        parent=None,
    ):
        super().__init__(parent)
        self._fetch_entries = fetch_entries
        self._current_session = current_session
        self._limit = limit
        self._entries: List[LeaderboardEntry] = []
        self._view: LeaderboardView = build_leaderboard_view([], None, limit)
        self._timer = QTimer(self)
        self._timer.setInterval(int(interval_seconds * 1000))
        self._timer.timeout.connect(self.poll_once)
        self._handle: Optional[PollHandle] = None

    @property
    def view(self) -> LeaderboardView:
        return self._view

    @property
    def entries(self) -> List[LeaderboardEntry]:
        return list(self._entries)

    def start(self, immediate: bool = True) -> PollHandle:
        """Begin polling. Starting again cancels the previous handle."""
        if self._handle is not None:
            self._handle.cancel()
        self._handle = PollHandle(self)
        self._timer.start()
        if immediate:
            self.poll_once()
        return self._handle

    def stop(self) -> None:
        self._timer.stop()

    def is_polling(self) -> bool:
        return self._timer.isActive()

    def poll_once(self) -> bool:
        """Fetch and rebuild the view. Returns False if the fetch failed."""
        try:
            entries = self._fetch_entries()
        except LeaderboardServiceError as e:
            logger.warning("Leaderboard refresh failed, keeping previous snapshot: %s", e)
            return False
        self._entries = list(entries)
        self.rebuild()
        return True

    def rebuild(self) -> LeaderboardView:
        """Re-rank the last snapshot, e.g. after the local user's bests changed."""
        self._view = build_leaderboard_view(self._entries, self._current_session(), self._limit)
        self.refreshed.emit(self._view)
        return self._view
