"""Soft per-client submission limits and duplicate detection.

State is a short JSON list of ``{"timestamp", "normalizedContent"}`` records
kept in a per-client key-value store (``ClientStore`` in the web app, keyed
by an id held in the session cookie; any ``MutableMapping`` elsewhere).
Clearing the store or the cookie resets the guard, so it is advisory only.
Every storage problem fails open: the guard never blocks a user because its
own state is unreadable.
"""

from __future__ import annotations

import json
import logging
import math
import re
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import MutableMapping, Optional, Union

from ..config import Settings, get_settings
from .dedupe import normalize, word_overlap


logger = logging.getLogger(__name__)

STORAGE_KEY = "question_submissions"
DAY_MS = 24 * 60 * 60 * 1000
HOUR_MS = 60 * 60 * 1000

MIN_QUESTION_LENGTH = 15
MIN_QUESTION_WORDS = 3
_REPEATED_CHAR = re.compile(r"(.)\1{10,}")

Instant = Union[datetime, int, float]


@dataclass
class LimitResult:
    can_submit: bool
    reason: Optional[str] = None
    time_until_next: Optional[int] = None


def _to_millis(now: Optional[Instant]) -> int:
    if now is None:
        return int(time.time() * 1000)
    if isinstance(now, datetime):
        if now.tzinfo is None:
            # naive datetimes are UTC throughout the app
            now = now.replace(tzinfo=timezone.utc)
        return int(now.timestamp() * 1000)
    return int(now)


def _plural(n: int, word: str) -> str:
    return f"{n} {word}{'s' if n > 1 else ''}"


def is_valid_question(content: str) -> bool:
    trimmed = content.strip()
    if len(trimmed) < MIN_QUESTION_LENGTH:
        return False
    # keyboard mashing: the same character 11+ times in a row
    if _REPEATED_CHAR.search(trimmed):
        return False
    return len(trimmed.split()) >= MIN_QUESTION_WORDS


class SubmissionGuard:
    def __init__(self, store: MutableMapping, settings: Optional[Settings] = None) -> None:
        self.store = store
        self.settings = settings or get_settings()

    # --- storage ---
    def _load(self) -> list[dict]:
        raw = self.store.get(STORAGE_KEY)
        if not raw:
            return []
        entries = json.loads(raw)
        if not isinstance(entries, list):
            raise ValueError(f"expected a list under {STORAGE_KEY!r}")
        return entries

    def _save(self, entries: list[dict]) -> None:
        self.store[STORAGE_KEY] = json.dumps(entries)

    def submission_count(self) -> int:
        try:
            return len(self._load())
        except Exception as e:
            logger.warning("Could not read submission history: %s", e)
            return 0

    # --- checks ---
    def check_limits(self, now: Optional[Instant] = None) -> LimitResult:
        try:
            return self._check_limits(_to_millis(now))
        except Exception as e:
            logger.warning("Error checking submission limits: %s", e)
            return LimitResult(can_submit=True)

    def _check_limits(self, now_ms: int) -> LimitResult:
        max_per_day = self.settings.max_submissions_per_day
        cooldown = self.settings.min_seconds_between

        window_start = now_ms - DAY_MS
        recent = [int(e["timestamp"]) for e in self._load() if int(e["timestamp"]) > window_start]

        if len(recent) >= max_per_day:
            hours = math.ceil((min(recent) + DAY_MS - now_ms) / HOUR_MS)
            return LimitResult(
                can_submit=False,
                reason=(
                    f"You've reached the daily limit of {max_per_day} submissions. "
                    f"Please try again in {_plural(hours, 'hour')}."
                ),
            )

        if recent:
            since_last = (now_ms - max(recent)) / 1000
            if since_last < cooldown:
                seconds = math.ceil(cooldown - since_last)
                return LimitResult(
                    can_submit=False,
                    reason=f"Please wait {_plural(seconds, 'second')} between submissions.",
                    time_until_next=seconds,
                )

        return LimitResult(can_submit=True)

    def record_submission(self, content: str, now: Optional[Instant] = None) -> None:
        try:
            entries = self._load()
        except Exception as e:
            logger.warning("Discarding unreadable submission history: %s", e)
            entries = []
        entries.append({"timestamp": _to_millis(now), "normalizedContent": normalize(content)})
        keep = max(1, self.settings.history_size)
        try:
            self._save(entries[-keep:])
        except Exception as e:
            logger.warning("Error recording submission: %s", e)

    def check_duplicate(self, content: str) -> bool:
        try:
            entries = self._load()
            candidate = normalize(content)
            threshold = self.settings.duplicate_threshold
            return any(word_overlap(candidate, e["normalizedContent"]) > threshold for e in entries)
        except Exception as e:
            logger.warning("Error checking duplicate: %s", e)
            return False

    def is_valid_question(self, content: str) -> bool:
        return is_valid_question(content)
