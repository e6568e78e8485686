# student_ncr/services/sources.py - Read-only term calendar and enrollment history sources
from sqlalchemy.orm import Session
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from typing import Dict, Iterable, List, Optional, Protocol
import logging

from student_ncr.core.errors import DataSourceUnavailable
from student_ncr.models.academic import YearTerm
from student_ncr.models.enrollment import StudentCourseHistory
from student_ncr.schemas.classification import Term, EnrollmentRecord, term_key

logger = logging.getLogger(__name__)


class TermCalendar(Protocol):
    def list_terms_ordered_by_begin_date(self) -> List[Term]:
        ...

    def lookup_term(self, year_code: str, term_code: str) -> Optional[Term]:
        ...


class EnrollmentHistory(Protocol):
    def list_enrollment_records(self, student_id: int) -> List[EnrollmentRecord]:
        ...


def _calendar_order(term: Term):
    # Begin dates are unique in practice; the key only breaks accidental ties
    return (term.begin_date, term.key)


# ==================== IN-MEMORY ====================

class InMemoryTermCalendar:
    """Term calendar over an already-loaded collection of terms"""

    def __init__(self, terms: Iterable[Term]):
        self._terms = sorted(terms, key=_calendar_order)
        self._by_key: Dict[str, Term] = {term.key: term for term in self._terms}

    def list_terms_ordered_by_begin_date(self) -> List[Term]:
        return list(self._terms)

    def lookup_term(self, year_code: str, term_code: str) -> Optional[Term]:
        return self._by_key.get(term_key(year_code, term_code))


class InMemoryEnrollmentHistory:
    """Enrollment history over an already-loaded collection of records"""

    def __init__(self, records: Iterable[EnrollmentRecord]):
        self._records = list(records)

    def list_enrollment_records(self, student_id: int) -> List[EnrollmentRecord]:
        return [r for r in self._records if r.student_id == student_id]


# ==================== SQL ====================

def _read(db: Session, stmt, what: str) -> list:
    try:
        return list(db.execute(stmt).scalars().all())
    except SQLAlchemyError as e:
        logger.error(f"Error reading {what}: {e}")
        raise DataSourceUnavailable(f"Could not read {what}") from e


def _term_from_row(row: YearTerm) -> Term:
    return Term(
        year_code=row.yr_cde.strip(),
        term_code=row.trm_cde.strip(),
        begin_date=row.trm_begin_dte,
        end_date=row.trm_end_dte,
    )


def _record_from_row(row: StudentCourseHistory) -> EnrollmentRecord:
    return EnrollmentRecord(
        student_id=row.id_num,
        year_code=row.yr_cde,
        term_code=row.trm_cde,
        course_code=row.crs_cde,
        transaction_status=row.transaction_sts,
        grade_code=row.grade_cde,
        credit_hours=row.credit_hrs,
    )


class SqlTermCalendar:
    """Term calendar backed by year_term_table"""

    def __init__(self, db: Session):
        self.db = db

    def list_terms_ordered_by_begin_date(self) -> List[Term]:
        rows = _read(
            self.db,
            select(YearTerm).order_by(YearTerm.trm_begin_dte, YearTerm.yr_cde, YearTerm.trm_cde),
            "term calendar",
        )
        return [_term_from_row(row) for row in rows]

    def lookup_term(self, year_code: str, term_code: str) -> Optional[Term]:
        rows = _read(
            self.db,
            select(YearTerm).where(
                YearTerm.yr_cde == year_code.strip().upper(),
                YearTerm.trm_cde == term_code.strip().upper(),
            ),
            f"term {term_key(year_code, term_code)}",
        )
        return _term_from_row(rows[0]) if rows else None


class SqlEnrollmentHistory:
    """Enrollment history backed by student_crs_hist"""

    def __init__(self, db: Session):
        self.db = db

    def list_enrollment_records(self, student_id: int) -> List[EnrollmentRecord]:
        rows = _read(
            self.db,
            select(StudentCourseHistory)
            .where(StudentCourseHistory.id_num == student_id)
            .order_by(StudentCourseHistory.yr_cde, StudentCourseHistory.trm_cde, StudentCourseHistory.crs_cde),
            f"course history for student {student_id}",
        )
        return [_record_from_row(row) for row in rows]
