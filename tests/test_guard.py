import json
from datetime import datetime, timezone

import pytest

from asktaaza.config import Settings
from asktaaza.services.guard import STORAGE_KEY, SubmissionGuard, is_valid_question


T0 = 1_790_000_000_000  # ms since epoch
SECOND = 1000
MINUTE = 60 * SECOND
HOUR = 60 * MINUTE


@pytest.fixture
def store():
    return {}


@pytest.fixture
def guard(store):
    return SubmissionGuard(store, Settings())


def stored(store):
    return json.loads(store[STORAGE_KEY])


class BrokenStore(dict):
    def get(self, key, default=None):
        raise OSError("storage unavailable")

    def __setitem__(self, key, value):
        raise OSError("storage full")


class TestRecordSubmission:
    def test_normalizes_content(self, guard, store):
        guard.record_submission("  How Do You REVERSE a list?  ", now=T0)
        assert stored(store) == [{"timestamp": T0, "normalizedContent": "how do you reverse a list?"}]

    def test_keeps_only_last_ten(self, guard, store):
        for i in range(11):
            guard.record_submission(f"question number {i}", now=T0 + i * MINUTE)
        entries = stored(store)
        assert len(entries) == 10
        assert [e["normalizedContent"] for e in entries] == [f"question number {i}" for i in range(1, 11)]
        assert entries[-1]["timestamp"] == T0 + 10 * MINUTE

    def test_accepts_datetime(self, guard, store):
        when = datetime(2026, 10, 19, tzinfo=timezone.utc)
        guard.record_submission("some question text here", now=when)
        assert stored(store)[0]["timestamp"] == int(when.timestamp() * 1000)

    def test_naive_datetime_is_utc(self, guard, store):
        aware = datetime(2026, 10, 19, 8, 30, tzinfo=timezone.utc)
        guard.record_submission("some question text here", now=aware.replace(tzinfo=None))
        assert stored(store)[0]["timestamp"] == int(aware.timestamp() * 1000)

    def test_history_size_from_settings(self, store):
        g = SubmissionGuard(store, Settings(history_size=3))
        for i in range(5):
            g.record_submission(f"q {i}", now=T0 + i)
        assert len(stored(store)) == 3
        assert g.submission_count() == 3


class TestCheckLimits:
    def test_empty_history_allows(self, guard):
        result = guard.check_limits(now=T0)
        assert result.can_submit is True
        assert result.reason is None

    def test_cooldown_blocks_second_submission(self, guard):
        guard.record_submission("first question here please", now=T0)
        result = guard.check_limits(now=T0 + 30 * SECOND)
        assert result.can_submit is False
        assert result.reason == "Please wait 30 seconds between submissions."
        assert result.time_until_next == 30

    def test_cooldown_singular_second(self, guard):
        guard.record_submission("first question here please", now=T0)
        result = guard.check_limits(now=T0 + 59_500)
        assert result.reason == "Please wait 1 second between submissions."
        assert result.time_until_next == 1

    def test_spaced_submissions_allowed(self, guard):
        guard.record_submission("first", now=T0)
        assert guard.check_limits(now=T0 + 61 * SECOND).can_submit
        guard.record_submission("second", now=T0 + 2 * MINUTE)
        assert guard.check_limits(now=T0 + 4 * MINUTE).can_submit

    def test_fourth_within_a_day_denied(self, guard):
        for i in range(3):
            guard.record_submission(f"question {i}", now=T0 + i * 2 * MINUTE)
        result = guard.check_limits(now=T0 + 6 * MINUTE)
        assert result.can_submit is False
        assert result.reason == (
            "You've reached the daily limit of 3 submissions. Please try again in 24 hours."
        )

    def test_daily_limit_message_singular_hour(self, guard):
        for i in range(3):
            guard.record_submission(f"question {i}", now=T0 + i * HOUR)
        result = guard.check_limits(now=T0 + 23 * HOUR + 30 * MINUTE)
        assert "Please try again in 1 hour." in result.reason

    def test_old_submissions_expire(self, guard):
        for i in range(3):
            guard.record_submission(f"question {i}", now=T0 + i * MINUTE)
        assert guard.check_limits(now=T0 + 24 * HOUR + 3 * MINUTE).can_submit

    def test_cooldown_boundary_allows_at_exactly_sixty_seconds(self, guard):
        guard.record_submission("first question here please", now=T0)
        assert guard.check_limits(now=T0 + 60 * SECOND - 1).can_submit is False
        assert guard.check_limits(now=T0 + 60 * SECOND).can_submit is True

    def test_entry_exactly_a_day_old_is_not_recent(self, guard):
        for i in range(3):
            guard.record_submission(f"question {i}", now=T0 + i * 2 * MINUTE)
        # oldest entry sits exactly on the window edge, so only two count
        assert guard.check_limits(now=T0 + 24 * HOUR).can_submit is True
        assert guard.check_limits(now=T0 + 24 * HOUR - 1).can_submit is False

    def test_configurable_limits(self, store):
        g = SubmissionGuard(store, Settings(max_submissions_per_day=1, min_seconds_between=10))
        g.record_submission("one", now=T0)
        assert "daily limit of 1 submissions" in g.check_limits(now=T0 + HOUR).reason


class TestCheckDuplicate:
    def test_same_question_with_punctuation(self, guard):
        guard.record_submission("how do you reverse a linked list", now=T0)
        assert guard.check_duplicate("How do you reverse a linked list?") is True

    def test_unrelated_question(self, guard):
        guard.record_submission("how do you reverse a linked list", now=T0)
        assert guard.check_duplicate("Explain CAP theorem.") is False

    def test_empty_history(self, guard):
        assert guard.check_duplicate("How do you reverse a linked list?") is False

    def test_minor_edit_still_duplicate(self, guard):
        guard.record_submission("What is the difference between a process and a thread", now=T0)
        assert guard.check_duplicate("what's the difference between a process and a thread?") is True


class TestFailOpen:
    def test_corrupt_json(self):
        store = {STORAGE_KEY: "{not json"}
        g = SubmissionGuard(store, Settings())
        assert g.check_limits(now=T0).can_submit is True
        assert g.check_duplicate("How do you reverse a linked list?") is False
        assert g.submission_count() == 0

    def test_corrupt_history_is_replaced_on_record(self):
        store = {STORAGE_KEY: json.dumps({"oops": 1})}
        g = SubmissionGuard(store, Settings())
        g.record_submission("fresh question text", now=T0)
        assert stored(store) == [{"timestamp": T0, "normalizedContent": "fresh question text"}]

    def test_unavailable_store(self):
        g = SubmissionGuard(BrokenStore(), Settings())
        assert g.check_limits(now=T0).can_submit is True
        assert g.check_duplicate("anything at all here") is False
        g.record_submission("does not raise", now=T0)


class TestIsValidQuestion:
    @pytest.mark.parametrize(
        "content",
        [
            "What is a hash map?",
            "  Explain the CAP theorem in detail  ",
            "How would you design a URL shortener?",
        ],
    )
    def test_valid(self, content):
        assert is_valid_question(content) is True

    @pytest.mark.parametrize(
        "content",
        [
            "aaaaaaaaaaaaaa",
            "too short",
            "This is greaaaaaaaaaaaaat question",
            "Supercalifragilistic expialidocious",
            "               ",
        ],
    )
    def test_invalid(self, content):
        assert is_valid_question(content) is False

    def test_guard_method_delegates(self, guard):
        assert guard.is_valid_question("What is a hash map?") is True
