"""HTTP clients for the leaderboard and user registration services."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx

from fastlegend.core.errors import (
    DuplicateRegistrationError,
    LeaderboardServiceError,
    RegistrationError,
)
from fastlegend.core.leaderboard import LeaderboardEntry

logger = logging.getLogger(__name__)


def parse_entry(raw: Any) -> LeaderboardEntry:
    """Build a LeaderboardEntry from one item of the service payload.

    Raises:
        LeaderboardServiceError: If the item is not an object or has bad field types.
    """
    if not isinstance(raw, dict):
        raise LeaderboardServiceError(f"Leaderboard entry is not an object: {raw!r}")
    try:
        entry_id = raw.get("id")
        entry = LeaderboardEntry(
            name=str(raw["name"]),
            location=str(raw.get("location") or ""),
            best_wpm=float(raw.get("bestWpm", raw.get("wpm", 0.0))),
            best_accuracy=float(raw.get("bestAccuracy", raw.get("accuracy", 0.0))),
            tests_completed=int(raw.get("testsCompleted", 0)),
            entry_id=str(entry_id) if entry_id is not None else None,
        )
    except (KeyError, TypeError, ValueError, OverflowError) as e:
        raise LeaderboardServiceError(f"Malformed leaderboard entry {raw!r}: {e}") from e

    # NaN or negative figures would break the ranking order
    for value in (entry.best_wpm, entry.best_accuracy):
        if not math.isfinite(value) or value < 0:
            raise LeaderboardServiceError(f"Leaderboard entry has an invalid figure: {raw!r}")
    if entry.tests_completed < 0:
        raise LeaderboardServiceError(f"Leaderboard entry has a negative test count: {raw!r}")
    return entry


class LeaderboardClient:
    """Reads the global leaderboard from ``GET /api/leaderboard``."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self._client = client or httpx.Client(base_url=base_url, timeout=timeout)
        self._owns_client = client is None

    def fetch_entries(self) -> List[LeaderboardEntry]:
        """Fetch the current leaderboard snapshot.

        Raises:
            LeaderboardServiceError: On transport errors, non-2xx responses or a
                payload without an ``entries`` list.
        """
        try:
            response = self._client.get("/api/leaderboard")
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as e:
            raise LeaderboardServiceError(f"Leaderboard request failed: {e}") from e
        except ValueError as e:
            raise LeaderboardServiceError(f"Leaderboard response is not JSON: {e}") from e

        if not isinstance(payload, dict) or not isinstance(payload.get("entries"), list):
            raise LeaderboardServiceError("Leaderboard response has no 'entries' list")
        entries = [parse_entry(item) for item in payload["entries"]]
        logger.debug("Fetched %d leaderboard entries", len(entries))
        return entries

    def close(self) -> None:
        if self._owns_client:
            self._client.close()


@dataclass(frozen=True)
class Registration:
    username: str
    mobile_number: str
    country: str


class RegistrationClient:
    """Registers a user with ``POST /api/users``."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self._client = client or httpx.Client(base_url=base_url, timeout=timeout)
        self._owns_client = client is None

    def register(self, username: str, mobile_number: str, country: str = "") -> Registration:
        """Register a user.

        Raises:
            ValueError: If username or mobile number is blank.
            DuplicateRegistrationError: If the mobile number is already registered.
            RegistrationError: On any other failure.
        """
        registration = Registration(
            username=username.strip(),
            mobile_number=mobile_number.strip(),
            country=country.strip(),
        )
        if not registration.username or not registration.mobile_number:
            raise ValueError("username and mobile number are required")

        body: Dict[str, str] = {
            "username": registration.username,
            "mobileNumber": registration.mobile_number,
            "country": registration.country,
        }
        try:
            response = self._client.post("/api/users", json=body)
        except httpx.HTTPError as e:
            logger.warning("Registration request failed: %s", e)
            raise RegistrationError("Network error") from e

        if response.status_code == 409:
            raise DuplicateRegistrationError("Mobile number already registered")
        if not response.is_success:
            logger.warning("Registration rejected with status %d", response.status_code)
            raise RegistrationError("Failed to save profile")
        logger.info("Registered user %r", registration.username)
        return registration

    def close(self) -> None:
        if self._owns_client:
            self._client.close()
