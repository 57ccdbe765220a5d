from __future__ import annotations

import random
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional

import yaml

SHORT_MAX_SECONDS = 30
MEDIUM_MAX_SECONDS = 90


class DurationBucket(str, Enum):
    SHORT = "short"
    MEDIUM = "medium"
    LONG = "long"


def bucket_for_duration(duration: float) -> DurationBucket:
    """Map a test duration to its phrase bucket (<=30 short, <=90 medium, else long)."""
    if duration <= SHORT_MAX_SECONDS:
        return DurationBucket.SHORT
    if duration <= MEDIUM_MAX_SECONDS:
        return DurationBucket.MEDIUM
    return DurationBucket.LONG


def default_phrases_path() -> Path:
    return Path(__file__).resolve().parent.parent / "data" / "phrases.yaml"


class PhraseRepository:
    def __init__(self, path: Optional[Path] = None, rng: Optional[random.Random] = None) -> None:
        self._path = path or default_phrases_path()
        self._rng = rng or random.Random()
        self._phrases = self._load_phrases()

    def phrases(self, bucket: DurationBucket) -> List[str]:
        return list(self._phrases[bucket])

    def get_phrase(self, duration: float) -> str:
        """Pick a random phrase from the bucket matching ``duration``."""
        return self._rng.choice(self._phrases[bucket_for_duration(duration)])

    def _load_phrases(self) -> Dict[DurationBucket, List[str]]:
        if not self._path.exists():
            raise FileNotFoundError(f"Phrases file not found: {self._path}")

        raw = yaml.safe_load(self._path.read_text(encoding="utf-8"))
        if not raw or not isinstance(raw, dict):
            raise ValueError(f"{self._path.name}: expected YAML mapping of duration buckets")

        phrases: Dict[DurationBucket, List[str]] = {}
        for bucket in DurationBucket:
            content = raw.get(bucket.value)
            if content is None:
                raise ValueError(f"{self._path.name}: missing '{bucket.value}'")
            if isinstance(content, list):
                items = [" ".join(str(item).split()) for item in content]
            else:
                # allow a bucket as a multiline string, one phrase per line
                items = [" ".join(line.split()) for line in str(content).splitlines()]
            items = [item for item in items if item]
            if not items:
                raise ValueError(f"{self._path.name}: '{bucket.value}' has no phrases")
            phrases[bucket] = items
        return phrases
