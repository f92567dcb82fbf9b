"""
Tests for the Streak & Progression Engine.

Covered scenarios:
  - first post        → one active streak, start=end=D, length 1
  - extend            → D+1 grows the active streak in place
  - break             → D+k (k>1) closes the old streak, opens a new one
  - same day          → no streak change, level / total_posts still advance
  - backfill          → earlier date leaves streak and last_post_date alone
  - invariants over a mixed sequence (single active row, length == span,
    longest never shrinks, current == active length)
  - failures (unknown user, bad date, commit failure) leave no trace
  - two writers for one user are serialized; a second active row is refused
"""
from __future__ import annotations

from datetime import date, datetime, timedelta

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from app.core.errors import InvalidPostDateError, PersistenceError, UserNotFoundError
from app.db.base import atomic
from app.models.streak import Streak
from app.models.user import User
from app.services.streak_engine import (
    StreakTransition,
    apply_post,
    coerce_post_date,
    get_active_streak,
    list_streaks,
    record_post,
)
from app.services.users import get_user_for_update

D = date(2024, 1, 1)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _streaks(db, uid: str) -> list[Streak]:
    db.expire_all()
    return (
        db.query(Streak)
        .filter(Streak.user_id == uid)
        .order_by(Streak.start_date, Streak.id)
        .all()
    )


def _active(db, uid: str) -> list[Streak]:
    return [s for s in _streaks(db, uid) if s.is_active]


def _user(db, uid: str) -> User:
    db.expire_all()
    return db.get(User, uid)


# ---------------------------------------------------------------------------
# Transitions
# ---------------------------------------------------------------------------

class TestFirstPost:

    def test_creates_single_active_streak(self, db, make_user):
        uid = make_user()
        outcome = record_post(db, uid, D)

        assert outcome.transition == StreakTransition.STARTED
        rows = _streaks(db, uid)
        assert len(rows) == 1
        s = rows[0]
        assert (s.start_date, s.end_date, s.length, s.is_active) == (D, D, 1, True)

    def test_sets_user_counters(self, db, make_user):
        uid = make_user()
        record_post(db, uid, D)
        user = _user(db, uid)
        assert user.current_streak == 1
        assert user.longest_streak == 1
        assert user.total_posts == 1
        assert user.level == 2
        assert user.last_post_date == D


class TestExtend:

    def test_next_day_extends_in_place(self, db, make_user):
        uid = make_user()
        record_post(db, uid, D)
        outcome = record_post(db, uid, D + timedelta(days=1))

        assert outcome.transition == StreakTransition.EXTENDED
        rows = _streaks(db, uid)
        assert len(rows) == 1
        assert rows[0].end_date == D + timedelta(days=1)
        assert rows[0].length == 2
        assert _user(db, uid).current_streak == 2

    def test_longest_follows_growing_streak(self, db, make_user):
        uid = make_user()
        for i in range(5):
            record_post(db, uid, D + timedelta(days=i))
        user = _user(db, uid)
        assert user.current_streak == 5
        assert user.longest_streak == 5


class TestBreak:

    def test_gap_closes_old_and_opens_new(self, db, make_user):
        uid = make_user()
        record_post(db, uid, D)
        record_post(db, uid, D + timedelta(days=1))
        outcome = record_post(db, uid, D + timedelta(days=4))

        assert outcome.transition == StreakTransition.BROKEN
        assert outcome.closed_streak is not None

        old, new = _streaks(db, uid)
        assert old.is_active is False
        assert old.length == 2
        assert old.end_date == D + timedelta(days=1)
        assert new.is_active is True
        assert (new.start_date, new.end_date, new.length) == (
            D + timedelta(days=4), D + timedelta(days=4), 1,
        )
        user = _user(db, uid)
        assert user.current_streak == 1
        assert user.longest_streak == 2

    def test_two_day_gap_also_breaks(self, db, make_user):
        uid = make_user()
        record_post(db, uid, D)
        outcome = record_post(db, uid, D + timedelta(days=2))
        assert outcome.transition == StreakTransition.BROKEN
        assert len(_active(db, uid)) == 1


class TestSameDayAndBackfill:

    def test_same_day_leaves_streak_unchanged(self, db, make_user):
        uid = make_user()
        record_post(db, uid, D)
        record_post(db, uid, D + timedelta(days=1))
        before = _user(db, uid)
        current, longest = before.current_streak, before.longest_streak

        outcome = record_post(db, uid, D + timedelta(days=1))

        assert outcome.transition == StreakTransition.UNCHANGED
        (active,) = _active(db, uid)
        assert active.length == 2
        assert active.end_date == D + timedelta(days=1)
        user = _user(db, uid)
        assert user.current_streak == current
        assert user.longest_streak == longest

    def test_same_day_still_grants_level_and_post_count(self, db, make_user):
        uid = make_user()
        record_post(db, uid, D)
        record_post(db, uid, D)
        user = _user(db, uid)
        assert user.total_posts == 2
        assert user.level == 3

    def test_backfilled_date_is_ignored_by_streak(self, db, make_user):
        uid = make_user()
        record_post(db, uid, D + timedelta(days=10))
        outcome = record_post(db, uid, D)

        assert outcome.transition == StreakTransition.UNCHANGED
        assert len(_streaks(db, uid)) == 1
        user = _user(db, uid)
        assert user.current_streak == 1
        assert user.last_post_date == D + timedelta(days=10)


# ---------------------------------------------------------------------------
# Invariants over a mixed sequence
# ---------------------------------------------------------------------------

class TestInvariants:

    OFFSETS = [0, 1, 2, 2, 5, 6, 6, 7, 20, 19, 21, 22, 40]

    def test_invariants_hold_after_every_call(self, db, make_user):
        uid = make_user()
        prev_longest = 0
        for n, off in enumerate(self.OFFSETS, start=1):
            record_post(db, uid, D + timedelta(days=off))

            active = _active(db, uid)
            assert len(active) == 1
            a = active[0]
            assert a.length == (a.end_date - a.start_date).days + 1

            user = _user(db, uid)
            assert user.current_streak == a.length
            assert user.longest_streak >= prev_longest
            assert user.longest_streak >= user.current_streak
            assert user.total_posts == n
            assert user.level == n + 1
            prev_longest = user.longest_streak

        # runs: 0-2, 5-7, 19..22 (19 is a backfill, ignored → 20-22), 40
        assert _user(db, uid).longest_streak == 3

    def test_closed_streaks_keep_their_span(self, db, make_user):
        uid = make_user()
        for off in self.OFFSETS:
            record_post(db, uid, D + timedelta(days=off))
        for s in _streaks(db, uid):
            assert s.length == (s.end_date - s.start_date).days + 1


class TestScenario:

    def test_three_daily_posts_then_gap(self, db, make_user):
        uid = make_user()
        for day in ("2024-01-01", "2024-01-02", "2024-01-03"):
            record_post(db, uid, day)

        user = _user(db, uid)
        assert user.current_streak == 3
        assert user.longest_streak == 3
        (active,) = _active(db, uid)
        assert (active.start_date, active.end_date, active.length) == (
            date(2024, 1, 1), date(2024, 1, 3), 3,
        )

        record_post(db, uid, "2024-01-06")

        old, new = _streaks(db, uid)
        assert old.is_active is False and old.length == 3
        assert (new.start_date, new.end_date, new.length, new.is_active) == (
            date(2024, 1, 6), date(2024, 1, 6), 1, True,
        )
        user = _user(db, uid)
        assert user.current_streak == 1
        assert user.longest_streak == 3


# ---------------------------------------------------------------------------
# Failures
# ---------------------------------------------------------------------------

class TestFailures:

    def test_unknown_user_raises_not_found(self, db, new_user_id):
        with pytest.raises(UserNotFoundError):
            record_post(db, new_user_id, D)
        assert _streaks(db, new_user_id) == []

    @pytest.mark.parametrize("bad", ["2024-13-45", "yesterday", "", None, 20240101])
    def test_invalid_date_raises_and_writes_nothing(self, db, make_user, bad):
        uid = make_user()
        with pytest.raises(InvalidPostDateError):
            record_post(db, uid, bad)
        assert _streaks(db, uid) == []
        user = _user(db, uid)
        assert user.total_posts == 0
        assert user.level == 1

    def test_commit_failure_rolls_back_everything(self, db, make_user, monkeypatch):
        uid = make_user()
        record_post(db, uid, D)

        def _boom():
            raise OperationalError("COMMIT", {}, Exception("disk I/O error"))

        monkeypatch.setattr(db, "commit", _boom)
        with pytest.raises(PersistenceError):
            record_post(db, uid, D + timedelta(days=1))
        monkeypatch.undo()

        (active,) = _active(db, uid)
        assert active.length == 1
        user = _user(db, uid)
        assert user.current_streak == 1
        assert user.total_posts == 1
        assert user.level == 2


# ---------------------------------------------------------------------------
# Date coercion and read helpers
# ---------------------------------------------------------------------------

class TestCoercePostDate:

    def test_date_passthrough(self):
        assert coerce_post_date(D) == D

    def test_datetime_drops_time(self):
        assert coerce_post_date(datetime(2024, 1, 1, 23, 59)) == D

    def test_iso_string(self):
        assert coerce_post_date(" 2024-01-01 ") == D

    def test_iso_datetime_string(self):
        assert coerce_post_date("2024-01-01T15:30:00") == D


class TestReadHelpers:

    def test_no_active_streak_for_new_user(self, db, make_user):
        assert get_active_streak(db, make_user()) is None

    def test_active_streak_is_the_open_one(self, db, make_user):
        uid = make_user()
        record_post(db, uid, D)
        record_post(db, uid, D + timedelta(days=3))
        active = get_active_streak(db, uid)
        assert active is not None
        assert active.start_date == D + timedelta(days=3)

    def test_list_streaks_newest_first(self, db, make_user):
        uid = make_user()
        for off in (0, 5, 10):
            record_post(db, uid, D + timedelta(days=off))
        total, items = list_streaks(db, uid)
        assert total == 3
        assert [s.start_date for s in items] == [
            D + timedelta(days=10), D + timedelta(days=5), D,
        ]
        assert items[0].is_active and not items[1].is_active

    def test_list_streaks_pagination(self, db, make_user):
        uid = make_user()
        for off in (0, 5, 10):
            record_post(db, uid, D + timedelta(days=off))
        total, items = list_streaks(db, uid, limit=1, offset=1)
        assert total == 3
        assert len(items) == 1
        assert items[0].start_date == D + timedelta(days=5)


# ---------------------------------------------------------------------------
# Concurrency guards
# ---------------------------------------------------------------------------

class TestSerializedWriters:

    def test_second_writer_waits_for_the_first(self, make_user, impatient_sessions):
        uid = make_user()
        with impatient_sessions() as s:
            record_post(s, uid, D)

        holder = impatient_sessions()
        contender = impatient_sessions()
        try:
            user = get_user_for_update(holder, uid)

            # holder owns the write lock, so the contender cannot read stale counters
            with pytest.raises(PersistenceError):
                record_post(contender, uid, D + timedelta(days=1))

            apply_post(holder, user, D + timedelta(days=1))
            holder.commit()

            outcome = record_post(contender, uid, D + timedelta(days=2))
        finally:
            holder.close()
            contender.close()

        assert outcome.total_posts == 3
        assert outcome.current_streak == 3
        assert outcome.longest_streak == 3
        assert outcome.level == 4


class TestSingleActiveStreakIndex:

    def test_second_active_row_is_refused(self, db, make_user):
        uid = make_user()
        record_post(db, uid, D)

        with pytest.raises(PersistenceError) as excinfo:
            with atomic(db, "insert_active_streak"):
                db.add(Streak(
                    user_id=uid,
                    start_date=D + timedelta(days=5),
                    end_date=D + timedelta(days=5),
                    length=1,
                    is_active=True,
                ))
        assert isinstance(excinfo.value.__cause__, IntegrityError)

        (active,) = _active(db, uid)
        assert active.start_date == D

    def test_closed_rows_are_not_limited(self, db, make_user):
        uid = make_user()
        record_post(db, uid, D)
        with atomic(db, "insert_closed_streak"):
            for off in (-10, -20):
                db.add(Streak(
                    user_id=uid,
                    start_date=D + timedelta(days=off),
                    end_date=D + timedelta(days=off),
                    length=1,
                    is_active=False,
                ))
        assert len(_streaks(db, uid)) == 3
        assert len(_active(db, uid)) == 1
