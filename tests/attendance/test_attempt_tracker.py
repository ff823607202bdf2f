from datetime import datetime, timedelta

import pytest

from sikaji.attendance.security import AttemptTracker
from sikaji.core.exceptions import TooManyAttemptsError

T0 = datetime(2026, 2, 2, 7, 0, 0)


def _spaced(tracker, count, gap=timedelta(seconds=30)):
    at = T0
    for _ in range(count):
        tracker.register(at)
        at += gap
    return at


def test_first_attempt_is_allowed():
    tracker = AttemptTracker()
    tracker.register(T0)

    assert tracker.attempts == 1
    assert tracker.last_attempt == T0


def test_attempts_need_thirty_seconds_between_them():
    tracker = AttemptTracker()
    tracker.register(T0)

    with pytest.raises(TooManyAttemptsError) as exc:
        tracker.register(T0 + timedelta(seconds=29))
    assert "30 detik" in str(exc.value)

    tracker.register(T0 + timedelta(seconds=30))
    assert tracker.attempts == 2


def test_sixth_attempt_within_the_hour_is_refused():
    tracker = AttemptTracker()
    next_at = _spaced(tracker, 5)

    with pytest.raises(TooManyAttemptsError) as exc:
        tracker.register(next_at)

    assert "1 jam" in str(exc.value)
    assert tracker.attempts == 5


def test_counter_resets_after_an_hour_of_quiet():
    tracker = AttemptTracker()
    _spaced(tracker, 5)

    tracker.register(tracker.last_attempt + timedelta(hours=1, seconds=1))

    assert tracker.attempts == 1


def test_rejected_attempt_does_not_move_the_clock():
    tracker = AttemptTracker()
    tracker.register(T0)

    with pytest.raises(TooManyAttemptsError):
        tracker.register(T0 + timedelta(seconds=10))

    assert tracker.last_attempt == T0
    assert tracker.attempts == 1


def test_tracker_survives_session_storage():
    tracker = AttemptTracker()
    _spaced(tracker, 2)

    restored = AttemptTracker.from_dict(tracker.to_dict())

    assert restored.attempts == 2
    assert restored.last_attempt == tracker.last_attempt


@pytest.mark.parametrize("data", [None, {}, {"attempts": "many", "last_attempt": 1.0}, ["x"]])
def test_missing_or_malformed_session_data_starts_fresh(data):
    tracker = AttemptTracker.from_dict(data)

    assert tracker.attempts == 0
    assert tracker.last_attempt is None
