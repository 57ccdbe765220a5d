from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple

import yaml

from fastlegend.core.metrics import DEFAULT_POLICY, Mode, ScoringPolicy

logger = logging.getLogger(__name__)

DEFAULT_API_BASE_URL = "http://localhost:8000"


def _default_durations() -> Dict[Mode, Tuple[int, ...]]:
    return {
        Mode.TIME: (15, 30, 60, 120),
        Mode.WORDS: (10, 25, 50, 100),
    }


def default_config_path() -> Path:
    return Path.home() / ".fastlegend" / "config.yaml"


@dataclass(frozen=True)
class AppConfig:
    """Immutable application settings, passed to the objects that need them."""

    api_base_url: str = DEFAULT_API_BASE_URL
    request_timeout: float = 10.0
    poll_interval_seconds: float = 30.0
    leaderboard_size: int = 10
    tick_interval_ms: int = 1000
    scoring: ScoringPolicy = DEFAULT_POLICY
    durations: Mapping[Mode, Tuple[int, ...]] = field(
        default_factory=lambda: MappingProxyType(_default_durations())
    )

    def durations_for(self, mode: Mode) -> Tuple[int, ...]:
        """Allowed durations (seconds or words) for ``mode``; empty for untimed modes."""
        return self.durations.get(Mode(mode), ())


def _positive(name: str, value: Any, cast=float):
    try:
        number = cast(value)
    except (TypeError, ValueError):
        raise ValueError(f"{name}: expected a number, got {value!r}") from None
    if number <= 0:
        raise ValueError(f"{name}: must be positive, got {value!r}")
    return number


def _parse_scoring(raw: Any) -> ScoringPolicy:
    if raw is None:
        return DEFAULT_POLICY
    if not isinstance(raw, dict):
        raise ValueError("scoring: expected a mapping")
    try:
        policy = ScoringPolicy(
            error_wpm_penalty=float(raw.get("error_wpm_penalty", DEFAULT_POLICY.error_wpm_penalty)),
            consistency_penalty=float(raw.get("consistency_penalty", DEFAULT_POLICY.consistency_penalty)),
            min_elapsed_seconds=float(raw.get("min_elapsed_seconds", DEFAULT_POLICY.min_elapsed_seconds)),
        )
    except (TypeError, ValueError):
        raise ValueError(f"scoring: invalid values {raw!r}") from None
    if policy.error_wpm_penalty < 0 or policy.consistency_penalty < 0 or policy.min_elapsed_seconds < 0:
        raise ValueError("scoring: values must not be negative")
    return policy


def _parse_durations(raw: Any) -> Mapping[Mode, Tuple[int, ...]]:
    durations = _default_durations()
    if raw is None:
        return MappingProxyType(durations)
    if not isinstance(raw, dict):
        raise ValueError("durations: expected a mapping of mode to list")
    for key, values in raw.items():
        try:
            mode = Mode(key)
        except ValueError:
            raise ValueError(f"durations: unknown mode {key!r}") from None
        if not isinstance(values, list) or not values:
            raise ValueError(f"durations.{key}: expected a non-empty list")
        durations[mode] = tuple(_positive(f"durations.{key}", v, int) for v in values)
    return MappingProxyType(durations)


def parse_config(raw: Optional[Dict[str, Any]]) -> AppConfig:
    raw = raw or {}
    defaults = AppConfig()
    api_base_url = str(raw.get("api_base_url", defaults.api_base_url)).rstrip("/")
    if not api_base_url:
        raise ValueError("api_base_url: must not be empty")
    return AppConfig(
        api_base_url=api_base_url,
        request_timeout=_positive("request_timeout", raw.get("request_timeout", defaults.request_timeout)),
        poll_interval_seconds=_positive(
            "poll_interval_seconds", raw.get("poll_interval_seconds", defaults.poll_interval_seconds)
        ),
        leaderboard_size=_positive("leaderboard_size", raw.get("leaderboard_size", defaults.leaderboard_size), int),
        tick_interval_ms=_positive("tick_interval_ms", raw.get("tick_interval_ms", defaults.tick_interval_ms), int),
        scoring=_parse_scoring(raw.get("scoring")),
        durations=_parse_durations(raw.get("durations")),
    )


def load_config(path: Optional[Path] = None) -> AppConfig:
    """Load settings from YAML. A missing file gives the defaults."""
    path = path or default_config_path()
    if not path.exists():
        logger.info("No config file at %s, using defaults", path)
        return AppConfig()
    raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    if raw is not None and not isinstance(raw, dict):
        raise ValueError(f"{path.name}: expected a YAML mapping")
    return parse_config(raw)
