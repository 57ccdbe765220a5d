from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum

CHARS_PER_WORD = 5
WPM_ERROR_PENALTY = 0.0
CONSISTENCY_PENALTY_PER_ERROR = 5
MIN_ELAPSED_SECONDS = 1.0


class Mode(str, Enum):
    TIME = "time"
    WORDS = "words"
    QUOTE = "quote"
    ZEN = "zen"


@dataclass(frozen=True)
class ScoringPolicy:
    """Error-counting policy shared by the live and final computations.

    * Positions up to ``min(len(typed), len(target))`` count as correct or
      as errors; every typed character past the end of the target is an
      extra error. Untyped target characters are never errors.
    * ``error_wpm_penalty`` is subtracted from net WPM per error (0 disables
      the penalty).
    * ``consistency_penalty`` is subtracted from 100 per error.
    * Elapsed time is floored at ``min_elapsed_seconds`` before use.
    """

    error_wpm_penalty: float = WPM_ERROR_PENALTY
    consistency_penalty: float = CONSISTENCY_PENALTY_PER_ERROR
    min_elapsed_seconds: float = MIN_ELAPSED_SECONDS


DEFAULT_POLICY = ScoringPolicy()


@dataclass(frozen=True)
class MetricsResult:
    """Scored snapshot of a typing attempt."""

    wpm: float
    raw_wpm: float
    accuracy: float
    errors: int
    correct_chars: int
    consistency: float
    chars_typed: int = 0
    time_taken: int = 0
    mode: Mode = Mode.TIME


def neutral_result(mode: Mode = Mode.TIME) -> MetricsResult:
    """Result reported before any time has elapsed."""
    return MetricsResult(
        wpm=0.0,
        raw_wpm=0.0,
        accuracy=100.0,
        errors=0,
        correct_chars=0,
        consistency=100.0,
        mode=mode,
    )


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def compute_metrics(
    typed_input: str,
    target_text: str,
    elapsed_seconds: float,
    mode: Mode = Mode.TIME,
    policy: ScoringPolicy = DEFAULT_POLICY,
) -> MetricsResult:
    """Score ``typed_input`` against ``target_text``.

    Speeds follow the 5-characters-per-word convention:
      * **WPM** – (correct chars / 5) / minutes, less the per-error penalty
        of ``policy``, floored at 0.
      * **Raw WPM** – (typed chars / 5) / minutes, no correctness check.

    Never raises; ``elapsed_seconds <= 0`` or a non-finite time returns the
    neutral result.
    """
    mode = Mode(mode)
    if not math.isfinite(elapsed_seconds) or elapsed_seconds <= 0:
        return neutral_result(mode)

    overlap = min(len(typed_input), len(target_text))
    correct = sum(1 for a, b in zip(typed_input, target_text) if a == b)
    extra = max(0, len(typed_input) - len(target_text))
    errors = (overlap - correct) + extra

    accuracy = _clamp(100.0 * correct / max(1, len(typed_input)), 0.0, 100.0)

    seconds = max(elapsed_seconds, policy.min_elapsed_seconds)
    minutes = seconds / 60.0
    net_wpm = (correct / CHARS_PER_WORD) / minutes
    wpm = max(0.0, net_wpm - errors * policy.error_wpm_penalty)
    raw_wpm = (len(typed_input) / CHARS_PER_WORD) / minutes

    consistency = _clamp(100.0 - errors * policy.consistency_penalty, 0.0, 100.0)

    return MetricsResult(
        wpm=wpm,
        raw_wpm=raw_wpm,
        accuracy=accuracy,
        errors=errors,
        correct_chars=correct,
        consistency=consistency,
        chars_typed=len(typed_input),
        time_taken=round(seconds),
        mode=mode,
    )
