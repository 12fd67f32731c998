"""Campus user and course models."""

import enum
import uuid
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, Enum, ForeignKey, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from ..core.database import Base


class UserRole(str, enum.Enum):
    """Roles recognised by the identity directory."""

    STUDENT = "student"
    TEACHER = "teacher"
    ADMIN = "admin"
    FINANCE = "finance"
    GATE = "gate"
    GATE_VERIFICATION = "gateverification"
    ENROLLMENT = "enrollment"


class Course(Base):
    """Course a student is enrolled on."""

    __tablename__ = "courses"
    __table_args__ = (
        UniqueConstraint("name", name="courses_name_unique"),
        UniqueConstraint("code", name="courses_code_unique"),
    )

    course_id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String, nullable=False)
    code = Column(String, nullable=False)
    department = Column(String)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    students = relationship("User", back_populates="course")


class User(Base):
    """Directory entry for anyone who can sign in, students included."""

    __tablename__ = "users"
    __table_args__ = (
        UniqueConstraint("email", name="users_email_unique"),
        UniqueConstraint("admission_number", name="users_admission_number_unique"),
    )

    user_id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String, nullable=False)
    email = Column(String, nullable=False)
    role = Column(Enum(UserRole, name="user_role", values_callable=lambda roles: [r.value for r in roles]), nullable=False)
    admission_number = Column(String)
    course_id = Column(UUID(as_uuid=True), ForeignKey("courses.course_id", ondelete="RESTRICT"))
    level = Column(String)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    course = relationship("Course", back_populates="students")
    fee_records = relationship("FeeRecord", back_populates="student")
    verifications = relationship(
        "GateVerification",
        foreign_keys="GateVerification.student_id",
        back_populates="student",
    )
    receipts = relationship("VerificationReceipt", back_populates="student")
