"""
Campus Gate - Test Configuration and Fixtures
"""
import os
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Generator

import pytest
from faker import Faker
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

# Set testing environment before the app builds its engine
os.environ['CAMPUSGATE_DATABASE_URL'] = 'sqlite://'
os.environ['CAMPUSGATE_STEP_UP_THRESHOLD'] = '2'

from campusgate.core.database import Base, get_db
from campusgate.core.dependencies import get_clock
from campusgate.main import app
from campusgate.models import Course, FeeRecord, User, UserRole

fake = Faker()

# Tuesday morning; every test runs "today" unless it moves the clock
NOW = datetime(2026, 3, 10, 9, 30)


class FrozenClock:
    """Callable time source the tests can move around"""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def engine():
    """In-memory SQLite shared across threads"""
    test_engine = create_engine(
        'sqlite://',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )

    # pysqlite needs explicit BEGIN for SAVEPOINT to behave
    @event.listens_for(test_engine, 'connect')
    def do_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(test_engine, 'begin')
    def do_begin(conn):
        conn.exec_driver_sql('BEGIN')

    Base.metadata.create_all(test_engine)
    yield test_engine
    Base.metadata.drop_all(test_engine)
    test_engine.dispose()


@pytest.fixture
def db_session(engine) -> Generator[Session, None, None]:
    """Create a fresh database session for each test"""
    TestSessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(NOW)


@pytest.fixture
def client(db_session: Session, clock: FrozenClock) -> Generator[TestClient, None, None]:
    """Create test client with database and clock overrides"""

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: clock

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def course(db_session: Session) -> Course:
    course = Course(name='Diploma in ICT', code='DICT', department='Computing')
    db_session.add(course)
    db_session.commit()
    return course


@pytest.fixture
def make_student(db_session: Session, course: Course):
    """Factory for enrolled students"""

    def _make(admission_number: str | None = None, **overrides) -> User:
        student = User(
            name=fake.name(),
            email=fake.unique.email(),
            role=UserRole.STUDENT,
            admission_number=admission_number or f'ADM/{fake.unique.random_int(1000, 9999)}',
            course_id=course.course_id,
            level='Level 5',
            **overrides,
        )
        db_session.add(student)
        db_session.commit()
        return student

    return _make


@pytest.fixture
def student(make_student) -> User:
    return make_student('ADM/2024/0113')


@pytest.fixture
def gate_agent(db_session: Session) -> User:
    agent = User(name=fake.name(), email=fake.unique.email(), role=UserRole.GATE)
    db_session.add(agent)
    db_session.commit()
    return agent


@pytest.fixture
def make_fee_record(db_session: Session):
    """Factory for fee records; later created_at wins"""

    def _make(student: User, expiry: datetime | None, created_at: datetime | None = None, balance: str = '0') -> FeeRecord:
        record = FeeRecord(
            student_id=student.user_id,
            total_amount=Decimal('45000'),
            amount_paid=Decimal('45000') - Decimal(balance),
            balance=Decimal(balance),
            semester='Semester 1',
            academic_year='2025/2026',
            gatepass_expiry_date=expiry,
            created_at=created_at or NOW - timedelta(days=30),
        )
        db_session.add(record)
        db_session.commit()
        return record

    return _make


@pytest.fixture
def agent_headers(gate_agent: User) -> dict:
    """Headers the auth gateway forwards for a gate agent"""
    return {'X-User-Id': str(gate_agent.user_id)}
