"""Ties one typing test to the preference store and the leaderboard."""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from PySide6.QtCore import QObject, Signal

from fastlegend.core.config import AppConfig
from fastlegend.core.countdown import SessionTimer
from fastlegend.core.metrics import MetricsResult, Mode
from fastlegend.core.phrases import PhraseRepository
from fastlegend.core.polling import LeaderboardPoller
from fastlegend.core.preferences import PreferenceStore
from fastlegend.core.session import TypingSession

logger = logging.getLogger(__name__)


class PracticeController(QObject):
    """Runs typing tests and folds each final result into the user's bests.

    A finished test is recorded in the preference store and the leaderboard
    is re-ranked from its last snapshot, so the user's new rank shows without
    waiting for the next poll.
    """

    completed = Signal(object)  # final MetricsResult

    def __init__(
        self,
        config: AppConfig,
        phrases: PhraseRepository,
        preferences: PreferenceStore,
        poller: Optional[LeaderboardPoller] = None,
        clock: Callable[[], float] = time.monotonic,
        parent=None,
    ):
        super().__init__(parent)
        self._config = config
        self._phrases = phrases
        self._preferences = preferences
        self._poller = poller
        self._clock = clock
        self._timer: Optional[SessionTimer] = None

    @property
    def timer(self) -> Optional[SessionTimer]:
        return self._timer

    def resolve_duration(self, mode: Mode, duration: Optional[float] = None) -> float:
        """Pick the test length for ``mode``.

        Without an explicit ``duration`` the stored default is used when the
        mode allows it, otherwise the first allowed value.

        Raises:
            ValueError: If ``duration`` is not one of the lengths configured for ``mode``.
        """
        allowed = self._config.durations_for(mode)
        if duration is not None:
            if allowed and duration not in allowed:
                raise ValueError(f"{Mode(mode).value} tests allow {list(allowed)}, got {duration!r}")
            return duration
        default = self._preferences.get().default_duration
        if not allowed or default in allowed:
            return default
        return allowed[0]

    def start_test(self, mode: Optional[Mode] = None, duration: Optional[float] = None) -> SessionTimer:
        """Start a new test, abandoning any test still running."""
        mode = Mode(mode) if mode is not None else self._preferences.get().default_mode
        duration = self.resolve_duration(mode, duration)
        if self._timer is not None:
            self._timer.stop()
            self._timer.finished.disconnect(self._on_finished)

        session = TypingSession(
            self._phrases.get_phrase,
            mode=mode,
            duration=duration,
            policy=self._config.scoring,
            clock=self._clock,
        )
        self._timer = SessionTimer(session, tick_ms=self._config.tick_interval_ms, parent=self)
        self._timer.finished.connect(self._on_finished)
        self._timer.start()
        logger.info("Started %s test (%s)", mode.value, duration)
        return self._timer

    def _on_finished(self, result: MetricsResult):
        prefs = self._preferences.record_result(result)
        logger.debug("Recorded result; best %.1f wpm over %d tests", prefs.best_wpm, prefs.total_tests)
        if self._poller is not None:
            self._poller.rebuild()
        self.completed.emit(result)
