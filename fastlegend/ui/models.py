"""Display models built from metrics and leaderboard results."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from fastlegend.core.leaderboard import LeaderboardView
from fastlegend.core.metrics import MetricsResult

RANK_BADGES = {1: "gold", 2: "silver", 3: "bronze"}


@dataclass(frozen=True)
class StatTile:
    """One labelled figure in the stats bar."""

    label: str
    value: str


@dataclass
class LeaderboardRow:
    """Formatted leaderboard line, flagged when it belongs to the local user."""

    rank: int
    name: str
    location: str
    wpm: str
    accuracy: str
    tests: str
    badge: Optional[str] = None
    is_current_user: bool = False


def rank_badge(rank: int) -> Optional[str]:
    return RANK_BADGES.get(rank)


def live_stat_tiles(result: MetricsResult, remaining_seconds: Optional[float]) -> List[StatTile]:
    time_value = "--" if remaining_seconds is None else f"{int(remaining_seconds)}s"
    return [
        StatTile("WPM", str(round(result.wpm))),
        StatTile("Accuracy", f"{result.accuracy:.1f}%"),
        StatTile("Time", time_value),
        StatTile("Chars", str(result.chars_typed)),
    ]


def leaderboard_rows(view: LeaderboardView) -> List[LeaderboardRow]:
    rows = []
    for ranked in view.rows:
        entry = ranked.entry
        rows.append(
            LeaderboardRow(
                rank=ranked.rank,
                name=entry.name,
                location=entry.location,
                wpm=str(round(entry.best_wpm)),
                accuracy=f"{entry.best_accuracy:.1f}%",
                tests=str(entry.tests_completed),
                badge=rank_badge(ranked.rank),
                is_current_user=ranked.rank == view.current_user_rank,
            )
        )
    return rows
