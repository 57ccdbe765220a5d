"""Tests for fastlegend.core.preferences – preference persistence."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from fastlegend.core.leaderboard import CurrentSession
from fastlegend.core.metrics import Mode, compute_metrics
from fastlegend.core.preferences import PreferenceStore, Preferences, UserProfile


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture()
def prefs_file(tmp_path: Path) -> Path:
    return tmp_path / "fastlegend" / "preferences.json"


@pytest.fixture()
def store(prefs_file: Path) -> PreferenceStore:
    """PreferenceStore backed by a temp file so tests don't touch ~/.fastlegend."""
    return PreferenceStore(prefs_file)


def _result(wpm_chars: str, seconds: float = 60):
    return compute_metrics(wpm_chars, wpm_chars, seconds)


# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------

class TestDefaults:
    def test_no_file_returns_defaults(self, store: PreferenceStore):
        assert store.get() == Preferences()

    def test_default_values(self):
        p = Preferences()
        assert p.default_duration == 60
        assert p.default_mode is Mode.TIME
        assert p.theme == "ocean"
        assert p.color_mode == "auto"
        assert p.user_profile == UserProfile()
        assert (p.best_wpm, p.best_accuracy, p.total_tests) == (0.0, 0.0, 0)

    def test_creates_parent_directory(self, store: PreferenceStore, prefs_file: Path):
        assert prefs_file.parent.is_dir()


# ---------------------------------------------------------------------------
# Setters
# ---------------------------------------------------------------------------

class TestSetters:
    def test_default_duration(self, store: PreferenceStore):
        store.set_default_duration(30)
        assert store.get().default_duration == 30

    def test_default_duration_rejects_non_positive(self, store: PreferenceStore):
        with pytest.raises(ValueError):
            store.set_default_duration(0)

    def test_default_mode(self, store: PreferenceStore):
        store.set_default_mode("words")
        assert store.get().default_mode is Mode.WORDS

    def test_default_mode_rejects_unknown(self, store: PreferenceStore):
        with pytest.raises(ValueError):
            store.set_default_mode("marathon")

    def test_theme(self, store: PreferenceStore):
        store.set_theme("cyberpunk")
        assert store.get().theme == "cyberpunk"

    def test_theme_rejects_unknown(self, store: PreferenceStore):
        with pytest.raises(ValueError):
            store.set_theme("neon")

    def test_color_mode(self, store: PreferenceStore):
        store.set_color_mode("dark")
        assert store.get().color_mode == "dark"

    def test_color_mode_rejects_unknown(self, store: PreferenceStore):
        with pytest.raises(ValueError):
            store.set_color_mode("sepia")

    def test_user_profile_stripped(self, store: PreferenceStore):
        store.set_user_profile("  Abhiraj K ", " Kottayam ")
        profile = store.get().user_profile
        assert profile.name == "Abhiraj K"
        assert profile.location == "Kottayam"
        assert profile.has_seen_welcome is False

    def test_user_profile_mark_seen(self, store: PreferenceStore):
        store.set_user_profile("A", "B", mark_seen=True)
        assert store.get().user_profile.has_seen_welcome is True

    def test_has_seen_welcome(self, store: PreferenceStore):
        store.set_has_seen_welcome(True)
        assert store.get().user_profile.has_seen_welcome is True

    def test_snapshots_are_immutable(self, store: PreferenceStore):
        before = store.get()
        store.set_theme("forest")
        assert before.theme == "ocean"


# ---------------------------------------------------------------------------
# record_result
# ---------------------------------------------------------------------------

class TestRecordResult:
    def test_first_result(self, store: PreferenceStore):
        prefs = store.record_result(_result("abcdefghij"))
        assert prefs.best_wpm == pytest.approx(2.0)
        assert prefs.best_accuracy == 100.0
        assert prefs.total_tests == 1
        assert prefs.user_profile.has_completed_test is True

    def test_keeps_max_per_field(self, store: PreferenceStore):
        store.record_result(_result("abcdefghij"))
        slow_sloppy = compute_metrics("axc", "abc", 60)
        prefs = store.record_result(slow_sloppy)
        assert prefs.best_wpm == pytest.approx(2.0)
        assert prefs.best_accuracy == 100.0
        assert prefs.total_tests == 2

    def test_persists_to_disk(self, store: PreferenceStore, prefs_file: Path):
        store.record_result(_result("abcde"))
        data = json.loads(prefs_file.read_text(encoding="utf-8"))
        assert data["totalTests"] == 1
        assert data["bestWPM"] == pytest.approx(1.0)
        assert data["userProfile"]["hasCompletedTest"] is True


# ---------------------------------------------------------------------------
# current_session
# ---------------------------------------------------------------------------

class TestCurrentSession:
    def test_none_before_any_test(self, store: PreferenceStore):
        store.set_user_profile("A", "B")
        assert store.current_session() is None

    def test_candidate_after_test(self, store: PreferenceStore):
        store.set_user_profile("Abhiraj", "Kottayam")
        store.record_result(_result("abcde"))
        assert store.current_session() == CurrentSession(
            name="Abhiraj", location="Kottayam", wpm=pytest.approx(1.0), accuracy=100.0, tests_completed=1
        )


# ---------------------------------------------------------------------------
# Persistence round trip and reset
# ---------------------------------------------------------------------------

class TestPersistence:
    def test_reload_from_disk(self, store: PreferenceStore, prefs_file: Path):
        store.set_theme("sunset")
        store.set_default_mode(Mode.WORDS)
        store.set_user_profile("A", "B", mark_seen=True)
        reloaded = PreferenceStore(prefs_file)
        assert reloaded.get() == store.get()

    def test_reset(self, store: PreferenceStore, prefs_file: Path):
        store.record_result(_result("abcde"))
        store.reset()
        assert store.get() == Preferences()
        assert json.loads(prefs_file.read_text(encoding="utf-8"))["totalTests"] == 0


# ---------------------------------------------------------------------------
# Loading edge cases
# ---------------------------------------------------------------------------

class TestLoadEdgeCases:
    def test_corrupt_json(self, prefs_file: Path):
        prefs_file.parent.mkdir(parents=True)
        prefs_file.write_text("NOT VALID JSON", encoding="utf-8")
        assert PreferenceStore(prefs_file).get() == Preferences()

    def test_not_an_object(self, prefs_file: Path):
        prefs_file.parent.mkdir(parents=True)
        prefs_file.write_text("[1, 2]", encoding="utf-8")
        assert PreferenceStore(prefs_file).get() == Preferences()

    def test_missing_user_profile(self, prefs_file: Path):
        prefs_file.parent.mkdir(parents=True)
        prefs_file.write_text(json.dumps({"bestWPM": 80, "totalTests": 4}), encoding="utf-8")
        prefs = PreferenceStore(prefs_file).get()
        assert prefs.user_profile == UserProfile()
        assert prefs.best_wpm == 80.0
        assert prefs.total_tests == 4

    def test_unknown_values_fall_back(self, prefs_file: Path):
        prefs_file.parent.mkdir(parents=True)
        prefs_file.write_text(
            json.dumps({"defaultMode": "marathon", "theme": "neon", "colorMode": "sepia"}),
            encoding="utf-8",
        )
        prefs = PreferenceStore(prefs_file).get()
        assert prefs.default_mode is Mode.TIME
        assert prefs.theme == "ocean"
        assert prefs.color_mode == "auto"

    def test_bad_number_falls_back(self, prefs_file: Path):
        prefs_file.parent.mkdir(parents=True)
        prefs_file.write_text(json.dumps({"totalTests": "many"}), encoding="utf-8")
        assert PreferenceStore(prefs_file).get() == Preferences()
