"""
Service Tests for the attempt ledger
Tests for: daily counting window, recording, history and dashboard
"""
from datetime import datetime, timedelta

from sqlalchemy import func, select

from campusgate.models import GateVerification, VerificationStatus
from campusgate.services import attempt_ledger

from conftest import NOW


def _record(session, student, when, outcome=VerificationStatus.VALID, agent=None):
    entry = attempt_ledger.record_attempt(
        session,
        student=student,
        admission_number=student.admission_number,
        outcome=outcome,
        expiry_snapshot=NOW + timedelta(days=30),
        agent=agent,
        now=when,
    )
    session.commit()
    return entry


class TestCountAttemptsToday:
    """Test the per-day count used for the step-up threshold"""

    def test_no_attempts(self, db_session, student):
        assert attempt_ledger.count_attempts_today(db_session, student.admission_number, now=NOW) == 0

    def test_counts_only_today(self, db_session, student):
        """Test yesterday's and tomorrow's rows are outside the window"""
        _record(db_session, student, NOW.replace(hour=0, minute=0))
        _record(db_session, student, NOW.replace(hour=8))
        _record(db_session, student, NOW - timedelta(days=1))
        _record(db_session, student, NOW + timedelta(days=1))

        assert attempt_ledger.count_attempts_today(db_session, student.admission_number, now=NOW) == 2

    def test_last_millisecond_of_day_counts(self, db_session, student):
        _record(db_session, student, datetime(2026, 3, 10, 23, 59, 59, 999000))

        assert attempt_ledger.count_attempts_today(db_session, student.admission_number, now=NOW) == 1

    def test_counts_per_admission_number(self, db_session, student, make_student):
        other = make_student('ADM/2024/0999')
        _record(db_session, other, NOW.replace(hour=8))

        assert attempt_ledger.count_attempts_today(db_session, student.admission_number, now=NOW) == 0


class TestRecordAttempt:
    """Test append-only recording"""

    def test_records_snapshot_and_agent(self, db_session, student, gate_agent):
        entry = _record(db_session, student, NOW.replace(hour=8, minute=5), VerificationStatus.EXPIRED, gate_agent)

        assert entry.verification_id is not None
        assert entry.admission_number == student.admission_number
        assert entry.status is VerificationStatus.EXPIRED
        assert entry.verification_time == '08:05 AM'
        assert entry.expiry_date == NOW + timedelta(days=30)
        assert entry.verified_by == gate_agent.user_id

    def test_each_call_adds_a_row(self, db_session, student):
        _record(db_session, student, NOW)
        _record(db_session, student, NOW)

        total = db_session.execute(select(func.count(GateVerification.verification_id))).scalar_one()
        assert total == 2


class TestMostRecentAttemptToday:
    """Test lookup used for the "previously verified" warning"""

    def test_none_when_no_attempts(self, db_session, student):
        assert attempt_ledger.most_recent_attempt_today(db_session, student.admission_number, now=NOW) is None

    def test_returns_earliest_of_today(self, db_session, student):
        _record(db_session, student, NOW - timedelta(days=1))
        first = _record(db_session, student, NOW.replace(hour=8))
        _record(db_session, student, NOW.replace(hour=9))

        found = attempt_ledger.most_recent_attempt_today(db_session, student.admission_number, now=NOW)
        assert found.verification_id == first.verification_id

    def test_ties_broken_by_insertion_order(self, db_session, student):
        first = _record(db_session, student, NOW.replace(hour=8))
        _record(db_session, student, NOW.replace(hour=8))

        found = attempt_ledger.most_recent_attempt_today(db_session, student.admission_number, now=NOW)
        assert found.verification_id == first.verification_id


class TestListingsAndSummary:
    """Test today/history listings and dashboard counters"""

    def test_list_today_newest_first(self, db_session, student):
        _record(db_session, student, NOW - timedelta(days=1))
        early = _record(db_session, student, NOW.replace(hour=7))
        late = _record(db_session, student, NOW.replace(hour=9))

        rows = attempt_ledger.list_attempts_today(db_session, now=NOW)
        assert [r.verification_id for r in rows] == [late.verification_id, early.verification_id]

    def test_history_window_and_limit(self, db_session, student):
        for days in range(5):
            _record(db_session, student, NOW - timedelta(days=days))

        assert len(attempt_ledger.list_attempt_history(db_session, limit=3)) == 3

        windowed = attempt_ledger.list_attempt_history(
            db_session,
            start=NOW - timedelta(days=1, hours=1),
            end=NOW,
        )
        assert len(windowed) == 2

    def test_daily_summary(self, db_session, student, make_student):
        make_student()
        _record(db_session, student, NOW.replace(hour=7))
        _record(db_session, student, NOW.replace(hour=8), VerificationStatus.EXPIRED)
        _record(db_session, student, NOW - timedelta(days=1))

        summary = attempt_ledger.daily_summary(db_session, now=NOW)
        assert summary == {
            'today_verifications': 2,
            'valid_today': 1,
            'expired_today': 1,
            'total_students': 2,
        }
