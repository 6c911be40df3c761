# tests/conftest.py
import os
from datetime import date, datetime, timedelta

# Must be set before rollcall.config is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from rollcall.database import Base, get_db
from rollcall.domain.attendance.service import AttendanceConversionService, AttendanceService
from rollcall.domain.schedules.router import rate_limit_public_schedule
from rollcall.domain.schedules.schemas import CandidateInput, ResponseEntry, ScheduleCreate
from rollcall.domain.schedules.service import ScheduleService
from rollcall.main import app
from rollcall.models import Member, MemberGroup, MemberGroupMembership, generate_id
from rollcall.shared.clock import Clock, get_clock

D1 = date(2026, 5, 10)
D2 = date(2026, 5, 11)
D3 = date(2026, 5, 12)
D4 = date(2026, 5, 13)

START = datetime(2026, 5, 1, 9, 0, 0)


class FixedClock(Clock):
    """Clock that only moves when a test moves it"""

    def __init__(self, current: datetime = START):
        self.current = current

    def now(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> datetime:
        self.current = self.current + timedelta(**kwargs)
        return self.current


@pytest.fixture
def engine():
    test_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=test_engine)
    yield test_engine
    Base.metadata.drop_all(bind=test_engine)
    test_engine.dispose()


@pytest.fixture
def db(engine):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def tenant_id():
    return generate_id()


@pytest.fixture
def other_tenant_id():
    return generate_id()


@pytest.fixture
def make_member(db):
    def _make(tenant_id: str, name: str = "Member", is_active: bool = True) -> Member:
        member = Member(id=generate_id(), tenant_id=tenant_id, display_name=name, is_active=is_active)
        db.add(member)
        db.commit()
        return member

    return _make


@pytest.fixture
def make_group(db):
    def _make(tenant_id: str, members: list, name: str = "Group") -> MemberGroup:
        group = MemberGroup(id=generate_id(), tenant_id=tenant_id, name=name)
        db.add(group)
        db.flush()
        for member in members:
            db.add(MemberGroupMembership(group_id=group.id, member_id=member.id))
        db.commit()
        return group

    return _make


@pytest.fixture
def schedule_service(db, clock):
    return ScheduleService(db, clock=clock)


@pytest.fixture
def conversion_service(db, clock):
    return AttendanceConversionService(db, clock=clock)


@pytest.fixture
def attendance_service(db):
    return AttendanceService(db)


@pytest.fixture
def make_schedule(schedule_service):
    def _make(tenant_id: str, candidates=None, **kwargs):
        candidates = candidates or [(D1, None, None), (D2, None, None), (D3, None, None)]
        data = ScheduleCreate(
            title=kwargs.pop("title", "Spring practice"),
            candidates=[CandidateInput(date=d, startTime=s, endTime=e) for d, s, e in candidates],
            **kwargs,
        )
        return schedule_service.create_schedule(tenant_id, data)

    return _make


def answer(candidate_id: str, availability: str, note: str = "") -> ResponseEntry:
    return ResponseEntry(candidateId=candidate_id, availability=availability, note=note)


@pytest.fixture
def client(db, clock):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[rate_limit_public_schedule] = lambda: None

    yield TestClient(app)

    app.dependency_overrides.clear()
