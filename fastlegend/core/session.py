from __future__ import annotations

import logging
import time
from typing import Callable, List, Optional

from fastlegend.core.metrics import DEFAULT_POLICY, MetricsResult, Mode, ScoringPolicy, compute_metrics

logger = logging.getLogger(__name__)


def _completed_words(text: str) -> int:
    """Number of whitespace-terminated words in ``text``."""
    words = text.split()
    if not words:
        return 0
    if text[-1].isspace():
        return len(words)
    return len(words) - 1


class TypingSession:
    """A timed typing test made of one or more phrase segments.

    Input is appended at the front-running index only. When the typed input
    matches the current phrase exactly the segment is complete: it is kept
    for scoring, a new phrase is drawn and the input clears.

    The session ends according to its mode:
      * **time** – after ``duration`` seconds of unpaused typing.
      * **words** – once ``duration`` words have been completed.
      * **quote** – once the first phrase is completed.
      * **zen** – only when :meth:`finish` is called.

    Live and final metrics cover every completed segment plus the current
    one and use the same scoring policy.
    """

    def __init__(
        self,
        phrase_source: Callable[[float], str],
        mode: Mode = Mode.TIME,
        duration: float = 60,
        policy: ScoringPolicy = DEFAULT_POLICY,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if duration <= 0 and Mode(mode) in (Mode.TIME, Mode.WORDS):
            raise ValueError(f"duration must be positive for {Mode(mode).value} mode")
        self._phrase_source = phrase_source
        self._mode = Mode(mode)
        self._duration = duration
        self._policy = policy
        self._clock = clock
        self._start()

    def _start(self) -> None:
        self._target = self._phrase_source(self._duration)
        self._typed = ""
        self._segments: List[str] = []
        self._elapsed = 0.0
        self._resumed_at: Optional[float] = self._clock()
        self._paused = False
        self._result: Optional[MetricsResult] = None

    @property
    def mode(self) -> Mode:
        return self._mode

    @property
    def duration(self) -> float:
        return self._duration

    @property
    def target_text(self) -> str:
        return self._target

    @property
    def typed_input(self) -> str:
        return self._typed

    @property
    def segments_completed(self) -> int:
        return len(self._segments)

    @property
    def is_paused(self) -> bool:
        return self._paused

    @property
    def is_finished(self) -> bool:
        return self._result is not None

    @property
    def elapsed_seconds(self) -> float:
        """Unpaused seconds since the session (or last reset) started."""
        if self._resumed_at is None:
            return self._elapsed
        return self._elapsed + max(0.0, self._clock() - self._resumed_at)

    @property
    def remaining_seconds(self) -> Optional[float]:
        """Seconds left in a time-mode test; None for the other modes."""
        if self._mode is not Mode.TIME:
            return None
        return max(0.0, self._duration - self.elapsed_seconds)

    def words_completed(self) -> int:
        done = sum(len(segment.split()) for segment in self._segments)
        return done + _completed_words(self._typed)

    def type_text(self, chars: str) -> bool:
        """Append ``chars`` to the input. Returns False if the input was rejected."""
        if self._paused or self.is_finished:
            return False
        if self._time_is_up():
            self.finish()
            return False
        for ch in chars:
            self._typed += ch
            if self._typed == self._target:
                self._complete_segment()
                if self.is_finished:
                    break
        self._check_termination()
        return True

    def pause(self) -> None:
        if self._paused or self.is_finished:
            return
        self._elapsed = self.elapsed_seconds
        self._resumed_at = None
        self._paused = True
        logger.debug("Session paused at %.2fs", self._elapsed)

    def resume(self) -> None:
        if not self._paused or self.is_finished:
            return
        self._resumed_at = self._clock()
        self._paused = False
        logger.debug("Session resumed at %.2fs", self._elapsed)

    def reset(self) -> None:
        """Discard all input, draw a new phrase and restart the clock."""
        self._start()
        logger.info("Session reset (%s, %s)", self._mode.value, self._duration)

    def tick(self) -> bool:
        """Check the termination condition; returns True once the session is finished."""
        if not self.is_finished:
            self._check_termination()
        return self.is_finished

    def live_metrics(self) -> MetricsResult:
        if self._result is not None:
            return self._result
        return self._metrics()

    def finish(self) -> MetricsResult:
        """Freeze the clock and return the final metrics. Repeated calls return the same result."""
        if self._result is None:
            self._elapsed = self.elapsed_seconds
            if self._mode is Mode.TIME:
                self._elapsed = min(self._elapsed, self._duration)
            self._resumed_at = None
            self._paused = False
            self._result = self._metrics()
            logger.info(
                "Session finished: %.1f wpm, %.1f%% accuracy, %d errors",
                self._result.wpm,
                self._result.accuracy,
                self._result.errors,
            )
        return self._result

    def _metrics(self) -> MetricsResult:
        history = "".join(self._segments)
        return compute_metrics(
            history + self._typed,
            history + self._target,
            self.elapsed_seconds,
            self._mode,
            self._policy,
        )

    def _complete_segment(self) -> None:
        self._segments.append(self._target)
        self._typed = ""
        logger.debug("Segment %d completed", len(self._segments))
        if self._mode is Mode.QUOTE:
            self._target = ""
            self.finish()
            return
        self._target = self._phrase_source(self._duration)

    def _time_is_up(self) -> bool:
        return self._mode is Mode.TIME and self.elapsed_seconds >= self._duration

    def _check_termination(self) -> None:
        if self.is_finished:
            return
        if self._time_is_up():
            self.finish()
        elif self._mode is Mode.WORDS and self.words_completed() >= self._duration:
            self.finish()
