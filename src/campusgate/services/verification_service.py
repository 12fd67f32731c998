"""Gate-pass verification workflow.

A verification runs through a fixed sequence: resolve the student, check the
asserted course, check today's attempt count against the step-up threshold
(issuing or redeeming a challenge code as needed), evaluate the latest fee
record's gate-pass expiry, and finally record the attempt.

The branching is kept in small pure functions (:func:`next_state_after_threshold`,
:func:`outcome_for_expiry`) so the ordering can be tested without a database.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy.orm import Session

from ..models import User, VerificationStatus
from ..utils.datetime import format_short_date
from . import attempt_ledger, challenge_code_service, directory_service, fee_service

logger = logging.getLogger(__name__)

DEFAULT_STEP_UP_THRESHOLD = 2


class ErrorKind(str, enum.Enum):
    """Terminal failure categories surfaced to the gate agent."""

    NOT_FOUND = "not_found"
    MISMATCH = "mismatch"
    INVALID_CODE = "invalid_code"
    CONFIGURATION_MISSING = "configuration_missing"


class GateVerificationError(Exception):
    """Raised when a verification cannot complete."""

    def __init__(self, detail: str, status_code: int = 400, kind: ErrorKind = ErrorKind.MISMATCH) -> None:
        super().__init__(detail)
        self.detail = detail
        self.status_code = status_code
        self.kind = kind


class VerificationState(str, enum.Enum):
    """Stages a single verification request moves through."""

    RESOLVING = "resolving"
    THRESHOLD_CHECK = "threshold_check"
    CODE_REQUIRED = "code_required"
    CODE_VALIDATION = "code_validation"
    EXPIRY_EVALUATION = "expiry_evaluation"
    RECORDED = "recorded"


def next_state_after_threshold(
    attempts_today: int,
    code_presented: bool,
    threshold: int = DEFAULT_STEP_UP_THRESHOLD,
) -> VerificationState:
    """Pick the stage following the threshold check."""

    if attempts_today < threshold:
        return VerificationState.EXPIRY_EVALUATION
    if not code_presented:
        return VerificationState.CODE_REQUIRED
    return VerificationState.CODE_VALIDATION


def outcome_for_expiry(now: datetime, expiry: datetime) -> VerificationStatus:
    """A pass is valid up to and including its expiry instant."""

    return VerificationStatus.VALID if now <= expiry else VerificationStatus.EXPIRED


def course_matches(asserted: str, student: User) -> bool:
    course = student.course
    if course is None:
        return False
    wanted = asserted.strip().casefold()
    return wanted in {course.name.strip().casefold(), course.code.strip().casefold()}


@dataclass
class StepUpRequired:
    """Threshold reached and no code presented. Not an attempt."""

    verifications_today: int
    code_newly_issued: bool
    requires_code: bool = True
    code_sent_to_student: bool = True

    @property
    def message(self) -> str:
        times = "twice" if self.verifications_today == 2 else f"{self.verifications_today} times"
        return (
            f"This admission has been verified {times} today already. For security, a 6-digit verification "
            "code has been sent to the student dashboard. Please ask the student for the code."
        )


@dataclass
class VerificationResult:
    """Outcome of a completed (recorded) verification."""

    student: User
    status: VerificationStatus
    expiry_date: datetime
    verification_time: str
    balance: Decimal
    verifications_today: int
    previous_verification_time: Optional[str]
    warning: Optional[str]
    message: str

    @property
    def success(self) -> bool:
        return self.status is VerificationStatus.VALID

    @property
    def is_expired(self) -> bool:
        return self.status is VerificationStatus.EXPIRED


def verify_gate_pass(
    session: Session,
    *,
    admission_number: str,
    course: str,
    verification_code: Optional[str],
    agent: Optional[User],
    now: datetime,
    threshold: int = DEFAULT_STEP_UP_THRESHOLD,
) -> StepUpRequired | VerificationResult:
    """Run one verification attempt.

    ``now`` is captured once by the caller; the day window, code expiry and
    pass validity are all judged against it. Raises
    :class:`GateVerificationError` for terminal failures, none of which write
    anything.

    Callers hold ``admission_locks`` for the admission number until the
    session is committed, so concurrent requests for one student see each
    other's attempts and codes.
    """

    verification_code = verification_code or None
    student = directory_service.find_student_by_admission_number(session, admission_number, lock=True)
    if student is None:
        raise GateVerificationError(
            "Student not found with this admission number",
            status_code=404,
            kind=ErrorKind.NOT_FOUND,
        )

    if not course_matches(course, student):
        raise GateVerificationError("Course does not match student records", kind=ErrorKind.MISMATCH)

    attempts_today = attempt_ledger.count_attempts_today(session, admission_number, now=now)
    logger.info("admission %s has been verified %s times today", admission_number, attempts_today)

    state = next_state_after_threshold(attempts_today, verification_code is not None, threshold)

    if state is VerificationState.CODE_REQUIRED:
        receipt, is_new = challenge_code_service.get_or_issue_pending_code(session, student, now=now)
        if is_new:
            challenge_code_service.dispatch_code(session, receipt, sender=agent)
        return StepUpRequired(verifications_today=attempts_today, code_newly_issued=is_new)

    if state is VerificationState.CODE_VALIDATION:
        if not challenge_code_service.validate_and_consume(session, student, verification_code, now=now):
            raise GateVerificationError("Invalid or expired verification code", kind=ErrorKind.INVALID_CODE)

    fee_record = fee_service.latest_fee_record(session, student.user_id)
    if fee_record is None:
        raise GateVerificationError("No fee records found for this student", kind=ErrorKind.NOT_FOUND)
    expiry = fee_record.gatepass_expiry_date
    if expiry is None:
        raise GateVerificationError(
            "No gate pass expiry date set for this student. Please contact finance office.",
            kind=ErrorKind.CONFIGURATION_MISSING,
        )

    outcome = outcome_for_expiry(now, expiry)

    previous_time = None
    warn_next = attempts_today == threshold - 1 and attempts_today > 0
    if warn_next:
        previous = attempt_ledger.most_recent_attempt_today(session, admission_number, now=now)
        previous_time = previous.verification_time if previous is not None else None

    entry = attempt_ledger.record_attempt(
        session,
        student=student,
        admission_number=admission_number,
        outcome=outcome,
        expiry_snapshot=expiry,
        agent=agent,
        now=now,
    )
    logger.info("admission %s verified: %s", admission_number, outcome.value)

    warning = None
    if warn_next:
        warning = (
            f"This admission was already verified today at {previous_time}. "
            "Next verification will require a security code."
        )

    if outcome is VerificationStatus.EXPIRED:
        message = f"Gate pass expired on {format_short_date(expiry)}. Please pay your fees."
    else:
        message = f"Valid gate pass until {format_short_date(expiry)}"

    return VerificationResult(
        student=student,
        status=outcome,
        expiry_date=expiry,
        verification_time=entry.verification_time,
        balance=fee_record.balance,
        verifications_today=attempts_today + 1,
        previous_verification_time=previous_time,
        warning=warning,
        message=message,
    )
