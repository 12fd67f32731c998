"""Gate verification endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from ...core.database import get_db
from ...core.dependencies import GATE_ROLES, get_clock, get_current_user, get_step_up_threshold, require_roles
from ...core.locks import admission_locks
from ...models import User, UserRole
from ...schemas import (
    CodeRequiredResponse,
    GateDashboard,
    GateFailure,
    GateStudent,
    ReceiptRead,
    VerificationRecordRead,
    VerificationRequest,
    VerificationResponse,
)
from ...services import attempt_ledger, challenge_code_service, directory_service, verification_service
from ...services.verification_service import GateVerificationError, StepUpRequired
from ...utils.datetime import Clock

router = APIRouter(prefix="/gate", tags=["gate"])


def _failure(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=GateFailure(message=message).model_dump(by_alias=True))


@router.post(
    "/verify",
    response_model=VerificationResponse,
    summary="Verify a student's gate pass",
    responses={
        200: {
            "description": "Verification recorded",
            "content": {
                "application/json": {
                    "example": {
                        "success": True,
                        "isExpired": False,
                        "student": {
                            "name": "Achieng Otieno",
                            "admissionNumber": "ADM/2024/0113",
                            "course": "Diploma in ICT",
                            "level": "Level 5",
                        },
                        "expiryDate": "2026-12-31T23:59:59",
                        "verificationTime": "08:05 AM",
                        "status": "Valid",
                        "balance": 0.0,
                        "verificationsToday": 2,
                        "previousVerificationTime": "07:40 AM",
                        "warning": "This admission was already verified today at 07:40 AM. "
                        "Next verification will require a security code.",
                        "message": "Valid gate pass until 12/31/2026",
                    }
                }
            },
        },
        400: {
            "model": CodeRequiredResponse,
            "description": "Code required, course mismatch, invalid code or fee record problem",
        },
        404: {"description": "Student not found"},
    },
)
def verify(
    payload: VerificationRequest,
    db: Session = Depends(get_db),
    agent: User = Depends(require_roles(*GATE_ROLES)),
    clock: Clock = Depends(get_clock),
    threshold: int = Depends(get_step_up_threshold),
):
    """Check a student's gate pass.

    Example request body::

        {
            "admissionNumber": "ADM/2024/0113",
            "course": "DICT",
            "verificationCode": "482913"
        }

    ``verificationCode`` is only needed once the student has been verified
    twice on the same day.
    """

    now = clock()
    with admission_locks.hold(payload.admission_number):
        try:
            result = verification_service.verify_gate_pass(
                db,
                admission_number=payload.admission_number,
                course=payload.course,
                verification_code=payload.verification_code,
                agent=agent,
                now=now,
                threshold=threshold,
            )
            db.commit()
        except GateVerificationError as exc:
            db.rollback()
            return _failure(exc.status_code, exc.detail)

    if isinstance(result, StepUpRequired):
        body = CodeRequiredResponse(message=result.message, verifications_today=result.verifications_today)
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=body.model_dump(by_alias=True))

    student = result.student
    return VerificationResponse(
        success=result.success,
        is_expired=result.is_expired,
        student=GateStudent(
            name=student.name,
            admission_number=student.admission_number,
            course=student.course.name if student.course else None,
            level=student.level,
        ),
        expiry_date=result.expiry_date,
        verification_time=result.verification_time,
        status=result.status.value,
        balance=float(result.balance or 0),
        verifications_today=result.verifications_today,
        previous_verification_time=result.previous_verification_time,
        warning=result.warning,
        message=result.message,
    )


@router.get(
    "/verifications/today",
    response_model=List[VerificationRecordRead],
    summary="Verifications recorded today",
)
def list_today(
    db: Session = Depends(get_db),
    _agent: User = Depends(require_roles(*GATE_ROLES)),
    clock: Clock = Depends(get_clock),
) -> List[VerificationRecordRead]:
    """Return today's verifications, newest first."""

    return list(attempt_ledger.list_attempts_today(db, now=clock()))


@router.get(
    "/verifications/history",
    response_model=List[VerificationRecordRead],
    summary="Verification history",
)
def list_history(
    *,
    start_date: Optional[datetime] = Query(None, alias="startDate", description="Window start (inclusive)"),
    end_date: Optional[datetime] = Query(None, alias="endDate", description="Window end (inclusive)"),
    limit: int = Query(50, ge=1, le=200, description="Maximum items to return"),
    db: Session = Depends(get_db),
    _agent: User = Depends(require_roles(*GATE_ROLES)),
) -> List[VerificationRecordRead]:
    """Return past verifications; the date window applies only when both ends are given."""

    return list(attempt_ledger.list_attempt_history(db, start=start_date, end=end_date, limit=limit))


@router.get(
    "/students/{admission_number:path}/receipts",
    response_model=List[ReceiptRead],
    summary="Pending challenge codes for a student",
    responses={403: {"description": "Access denied"}, 404: {"description": "Student not found"}},
)
def list_receipts(
    admission_number: str,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
    clock: Clock = Depends(get_clock),
) -> List[ReceiptRead]:
    """Return the student's unused, unexpired codes.

    Students may only read their own codes; any staff account may read them.
    """

    student = directory_service.find_student_by_admission_number(db, admission_number)
    if student is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Student not found")

    if user.role == UserRole.STUDENT and user.user_id != student.user_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied")

    return list(challenge_code_service.list_pending_codes(db, student, now=clock()))


@router.get("/dashboard", response_model=GateDashboard, summary="Gate dashboard counters")
def dashboard(
    db: Session = Depends(get_db),
    _agent: User = Depends(require_roles(*GATE_ROLES)),
    clock: Clock = Depends(get_clock),
) -> GateDashboard:
    """Return today's verification counts and the student total."""

    return GateDashboard(**attempt_ledger.daily_summary(db, now=clock()))
