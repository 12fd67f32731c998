"""Pydantic schemas for gate verification endpoints."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model speaking camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class VerificationRequest(CamelModel):
    """Body posted by the gate agent."""

    admission_number: str = Field(..., min_length=1, description="Student admission number.")
    course: str = Field(..., min_length=1, description="Course name or code as stated by the student.")
    verification_code: Optional[str] = Field(
        None,
        description="Challenge code read from the student's dashboard. Blank means no code.",
    )

    @field_validator("verification_code", mode="before")
    @classmethod
    def blank_code_is_absent(cls, value):
        if isinstance(value, str):
            value = value.strip()
        return value or None


class GateStudent(CamelModel):
    """Student fields shown to the gate agent."""

    name: str
    admission_number: str
    course: Optional[str]
    level: Optional[str]


class VerificationResponse(CamelModel):
    """A completed verification."""

    success: bool
    is_expired: bool
    student: GateStudent
    expiry_date: datetime
    verification_time: str
    status: str
    balance: float
    verifications_today: int
    previous_verification_time: Optional[str] = None
    warning: Optional[str] = None
    message: str


class CodeRequiredResponse(CamelModel):
    """Threshold reached; the agent must ask for the student's code."""

    success: bool = False
    requires_code: bool = True
    code_sent_to_student: bool = True
    message: str
    verifications_today: int


class GateFailure(CamelModel):
    """Terminal failure body."""

    success: bool = False
    message: str
