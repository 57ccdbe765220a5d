from __future__ import annotations

import json
import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Optional

from fastlegend.core.leaderboard import CurrentSession
from fastlegend.core.metrics import Mode, MetricsResult

logger = logging.getLogger(__name__)

THEMES = ("spotify", "ocean", "sunset", "forest", "cyberpunk")
COLOR_MODES = ("light", "dark", "auto")


@dataclass(frozen=True)
class UserProfile:
    name: str = ""
    location: str = ""
    has_seen_welcome: bool = False
    has_completed_test: bool = False


@dataclass(frozen=True)
class Preferences:
    default_duration: int = 60
    default_mode: Mode = Mode.TIME
    theme: str = "ocean"
    color_mode: str = "auto"
    user_profile: UserProfile = UserProfile()
    best_wpm: float = 0.0
    best_accuracy: float = 0.0
    total_tests: int = 0


def default_preferences_path() -> Path:
    return Path.home() / ".fastlegend" / "preferences.json"


class PreferenceStore:
    """Stores test settings, the user profile and personal bests.
    File: ~/.fastlegend/preferences.json. Every change is written through to disk."""

    def __init__(self, path: Optional[Path] = None) -> None:
        self._file_path = path or default_preferences_path()
        self._file_path.parent.mkdir(parents=True, exist_ok=True)
        self._prefs = self._load()

    def get(self) -> Preferences:
        return self._prefs

    def set_default_duration(self, duration: int) -> None:
        if duration <= 0:
            raise ValueError(f"duration must be positive, got {duration!r}")
        self._update(default_duration=int(duration))

    def set_default_mode(self, mode: Mode) -> None:
        self._update(default_mode=Mode(mode))

    def set_theme(self, theme: str) -> None:
        if theme not in THEMES:
            raise ValueError(f"unknown theme {theme!r}")
        self._update(theme=theme)

    def set_color_mode(self, color_mode: str) -> None:
        if color_mode not in COLOR_MODES:
            raise ValueError(f"unknown color mode {color_mode!r}")
        self._update(color_mode=color_mode)

    def set_user_profile(self, name: str, location: str, mark_seen: bool = False) -> None:
        profile = replace(self._prefs.user_profile, name=name.strip(), location=location.strip())
        if mark_seen:
            profile = replace(profile, has_seen_welcome=True)
        self._update(user_profile=profile)

    def set_has_seen_welcome(self, seen: bool) -> None:
        self._update(user_profile=replace(self._prefs.user_profile, has_seen_welcome=seen))

    def record_result(self, result: MetricsResult) -> Preferences:
        """Fold a finished test into the personal bests and test count."""
        current = self._prefs
        self._update(
            best_wpm=max(current.best_wpm, result.wpm),
            best_accuracy=max(current.best_accuracy, result.accuracy),
            total_tests=current.total_tests + 1,
            user_profile=replace(current.user_profile, has_completed_test=True),
        )
        return self._prefs

    def current_session(self) -> Optional[CurrentSession]:
        """Leaderboard candidate for the local user, if they have completed a test."""
        prefs = self._prefs
        if not prefs.user_profile.has_completed_test:
            return None
        session = CurrentSession(
            name=prefs.user_profile.name,
            location=prefs.user_profile.location,
            wpm=prefs.best_wpm,
            accuracy=prefs.best_accuracy,
            tests_completed=prefs.total_tests,
        )
        return session if session.qualifies() else None

    def reset(self) -> None:
        """Restore every preference to its default."""
        self._prefs = Preferences()
        self._save()

    def save(self) -> None:
        self._save()

    def _update(self, **changes: Any) -> None:
        self._prefs = replace(self._prefs, **changes)
        self._save()

    def _load(self) -> Preferences:
        if not self._file_path.exists():
            return Preferences()
        try:
            payload = json.loads(self._file_path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Could not load preferences from %s: %s", self._file_path, e)
            return Preferences()
        if not isinstance(payload, dict):
            logger.warning("Ignoring malformed preferences in %s", self._file_path)
            return Preferences()

        defaults = Preferences()
        try:
            default_mode = Mode(payload.get("defaultMode", defaults.default_mode.value))
        except ValueError:
            default_mode = defaults.default_mode
        theme = payload.get("theme", defaults.theme)
        color_mode = payload.get("colorMode", defaults.color_mode)
        try:
            return Preferences(
                default_duration=int(payload.get("defaultDuration", defaults.default_duration)),
                default_mode=default_mode,
                theme=theme if theme in THEMES else defaults.theme,
                color_mode=color_mode if color_mode in COLOR_MODES else defaults.color_mode,
                user_profile=_profile_from_json(payload.get("userProfile")),
                best_wpm=float(payload.get("bestWPM", 0.0)),
                best_accuracy=float(payload.get("bestAccuracy", 0.0)),
                total_tests=int(payload.get("totalTests", 0)),
            )
        except (TypeError, ValueError) as e:
            logger.warning("Could not parse preferences from %s: %s", self._file_path, e)
            return Preferences()

    def _save(self) -> None:
        self._file_path.parent.mkdir(parents=True, exist_ok=True)
        prefs = self._prefs
        payload = {
            "defaultDuration": prefs.default_duration,
            "defaultMode": prefs.default_mode.value,
            "theme": prefs.theme,
            "colorMode": prefs.color_mode,
            "userProfile": {
                "name": prefs.user_profile.name,
                "location": prefs.user_profile.location,
                "hasSeenWelcome": prefs.user_profile.has_seen_welcome,
                "hasCompletedTest": prefs.user_profile.has_completed_test,
            },
            "bestWPM": prefs.best_wpm,
            "bestAccuracy": prefs.best_accuracy,
            "totalTests": prefs.total_tests,
        }
        try:
            self._file_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        except OSError as e:
            logger.warning("Could not save preferences to %s: %s", self._file_path, e)


def _profile_from_json(raw: Any) -> UserProfile:
    # files written before profiles existed have no userProfile
    if not isinstance(raw, dict):
        return UserProfile()
    return UserProfile(
        name=str(raw.get("name", "")),
        location=str(raw.get("location", "")),
        has_seen_welcome=bool(raw.get("hasSeenWelcome", False)),
        has_completed_test=bool(raw.get("hasCompletedTest", False)),
    )
