"""Leaderboard ranking: merges the current user's bests into a snapshot of entries."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Iterable, List, Optional, Tuple

logger = logging.getLogger(__name__)

DEFAULT_LEADERBOARD_SIZE = 10
ANONYMOUS_NAME = "Anonymous"
UNKNOWN_LOCATION = "Unknown"


@dataclass(frozen=True)
class LeaderboardEntry:
    name: str
    location: str
    best_wpm: float = 0.0
    best_accuracy: float = 0.0
    tests_completed: int = 0
    entry_id: Optional[str] = None


@dataclass(frozen=True)
class CurrentSession:
    """Best figures of the local user, as read from the preference store."""

    name: str
    location: str
    wpm: float
    accuracy: float
    tests_completed: int

    def qualifies(self) -> bool:
        return self.tests_completed > 0 or self.wpm > 0

    def to_entry(self) -> LeaderboardEntry:
        return LeaderboardEntry(
            name=self.name.strip() or ANONYMOUS_NAME,
            location=self.location.strip() or UNKNOWN_LOCATION,
            best_wpm=self.wpm,
            best_accuracy=self.accuracy,
            tests_completed=self.tests_completed,
            entry_id="current-user",
        )


@dataclass(frozen=True)
class RankedEntry:
    rank: int
    entry: LeaderboardEntry


@dataclass(frozen=True)
class LeaderboardStats:
    total_players: int = 0
    max_wpm: float = 0.0
    max_accuracy: float = 0.0
    total_tests: int = 0


@dataclass(frozen=True)
class LeaderboardView:
    """Everything a leaderboard screen shows: top rows, user rank, full-set stats."""

    rows: List[RankedEntry]
    everyone: List[RankedEntry]
    current_user_rank: Optional[int]
    stats: LeaderboardStats


def _merge(existing: LeaderboardEntry, candidate: LeaderboardEntry) -> LeaderboardEntry:
    return replace(
        existing,
        best_wpm=max(existing.best_wpm, candidate.best_wpm),
        best_accuracy=max(existing.best_accuracy, candidate.best_accuracy),
        tests_completed=max(existing.tests_completed, candidate.tests_completed),
    )


def _sort_key(entry: LeaderboardEntry) -> Tuple[float, float, int, str]:
    # wpm desc, accuracy desc, tests desc, name asc
    return (-entry.best_wpm, -entry.best_accuracy, -entry.tests_completed, entry.name)


def _candidates(
    persisted_entries: Iterable[LeaderboardEntry],
    current_session: Optional[CurrentSession],
) -> Tuple[List[LeaderboardEntry], Optional[LeaderboardEntry]]:
    """Entries to rank, plus the one that belongs to the current user."""
    entries = list(persisted_entries)
    if current_session is None or not current_session.qualifies():
        return entries, None

    candidate = current_session.to_entry()
    for i, existing in enumerate(entries):
        # names alone are not unique
        if (existing.name, existing.location) == (candidate.name, candidate.location):
            entries[i] = _merge(existing, candidate)
            logger.debug("Merged current session into existing entry %r", existing.name)
            return entries, entries[i]
    entries.append(candidate)
    return entries, candidate


def rank_entries(
    persisted_entries: Iterable[LeaderboardEntry],
    current_session: Optional[CurrentSession] = None,
) -> Tuple[List[RankedEntry], Optional[int]]:
    """Rank the full set of entries; ranks are recomputed from scratch on every call."""
    entries, current_entry = _candidates(persisted_entries, current_session)
    ordered = sorted(entries, key=_sort_key)
    ranked = [RankedEntry(rank=i + 1, entry=entry) for i, entry in enumerate(ordered)]

    current_rank: Optional[int] = None
    if current_entry is not None:
        current_rank = next(
            (row.rank for row in ranked if row.entry is current_entry), None
        )
    return ranked, current_rank


def build_leaderboard(
    persisted_entries: Iterable[LeaderboardEntry],
    current_session: Optional[CurrentSession] = None,
    limit: int = DEFAULT_LEADERBOARD_SIZE,
) -> Tuple[List[RankedEntry], Optional[int]]:
    """Return the top ``limit`` ranked entries and the current user's rank.

    The current user's rank is taken from the full ranking, so it is reported
    even when the user falls outside the returned rows.
    """
    ranked, current_rank = rank_entries(persisted_entries, current_session)
    return ranked[: max(0, limit)], current_rank


def leaderboard_stats(entries: Iterable[LeaderboardEntry]) -> LeaderboardStats:
    """Aggregate figures over every entry; an empty set gives all zeros."""
    entries = list(entries)
    if not entries:
        return LeaderboardStats()
    return LeaderboardStats(
        total_players=len(entries),
        max_wpm=max(e.best_wpm for e in entries),
        max_accuracy=max(e.best_accuracy for e in entries),
        total_tests=sum(e.tests_completed for e in entries),
    )


def build_leaderboard_view(
    persisted_entries: Iterable[LeaderboardEntry],
    current_session: Optional[CurrentSession] = None,
    limit: int = DEFAULT_LEADERBOARD_SIZE,
) -> LeaderboardView:
    ranked, current_rank = rank_entries(persisted_entries, current_session)
    return LeaderboardView(
        rows=ranked[: max(0, limit)],
        everyone=ranked,
        current_user_rank=current_rank,
        stats=leaderboard_stats(row.entry for row in ranked),
    )
