import os

# Settings are read on import, so the environment must be in place first
os.environ.setdefault("ENV", "dev")
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

from datetime import date
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from student_ncr.core.db import get_db
from student_ncr.main import app
from student_ncr.models import Base, YearTerm, StudentCourseHistory
from student_ncr.schemas.classification import Term, EnrollmentRecord
from student_ncr.services.sources import InMemoryTermCalendar, InMemoryEnrollmentHistory

# (year, term, begin, end)
CALENDAR = [
    ("2324", "FA", date(2023, 8, 15), date(2023, 12, 15)),
    ("2324", "SP", date(2024, 1, 15), date(2024, 5, 10)),
    ("2324", "SU", date(2024, 6, 1), date(2024, 7, 31)),
    ("2425", "FA", date(2024, 8, 15), date(2024, 12, 15)),
    ("2425", "SP", date(2025, 1, 15), date(2025, 5, 10)),
    ("2425", "SU", date(2025, 6, 1), date(2025, 7, 31)),
    ("2526", "FA", date(2025, 8, 15), date(2025, 12, 15)),
]

STUDENT_ID = 1001


@pytest.fixture
def calendar_terms():
    return [Term(year_code=y, term_code=t, begin_date=b, end_date=e) for y, t, b, e in CALENDAR]


@pytest.fixture
def terms(calendar_terms):
    return InMemoryTermCalendar(calendar_terms)


@pytest.fixture
def record():
    """Factory for a valid enrollment record in the given term key"""
    def make(key, student_id=STUDENT_ID, status="A", grade="A", credits="3", course="ENG 101"):
        return EnrollmentRecord(
            student_id=student_id,
            year_code=key[:4],
            term_code=key[4:],
            course_code=course,
            transaction_status=status,
            grade_code=grade,
            credit_hours=Decimal(credits) if credits is not None else None,
        )
    return make


@pytest.fixture
def history():
    return lambda *records: InMemoryEnrollmentHistory(records)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(bind=engine, autoflush=False)()
    session.add_all(
        YearTerm(yr_cde=y, trm_cde=t, trm_begin_dte=b, trm_end_dte=e)
        for y, t, b, e in CALENDAR
    )
    session.add_all([
        # Continuing student: Spring 2024 and Fall 2023
        StudentCourseHistory(id_num=1001, yr_cde="2324", trm_cde="SP", crs_cde="MATH 101",
                             transaction_sts="A", grade_cde="B", credit_hrs=Decimal("3.00")),
        StudentCourseHistory(id_num=1001, yr_cde="2324", trm_cde="FA", crs_cde="ENG 101",
                             transaction_sts="A", grade_cde="A", credit_hrs=Decimal("3.00")),
        # Returning student: Fall 2023 only, plus a dropped Summer 2024 course
        StudentCourseHistory(id_num=2002, yr_cde="2324", trm_cde="FA", crs_cde="HIST 110",
                             transaction_sts="A", grade_cde="C", credit_hrs=Decimal("4.00")),
        StudentCourseHistory(id_num=2002, yr_cde="2324", trm_cde="SU", crs_cde="BIO 100",
                             transaction_sts="D", grade_cde=None, credit_hrs=Decimal("3.00")),
        # Transfer credit only
        StudentCourseHistory(id_num=3003, yr_cde="TRAN", trm_cde="FA", crs_cde="CHEM 101",
                             transaction_sts="A", grade_cde="TR", credit_hrs=Decimal("4.00")),
    ])
    session.commit()
    yield session
    session.close()


@pytest.fixture
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def unreachable_db(monkeypatch):
    """Point the global database manager at a SQLite file it cannot open"""
    from student_ncr.core import db as db_module
    from student_ncr.core.config import settings

    monkeypatch.setattr(settings, "DATABASE_URL", "sqlite:////nonexistent_student_ncr_dir/registrar.db")
    manager = db_module.DatabaseManager()
    monkeypatch.setattr(db_module, "db_manager", manager)
    return manager
