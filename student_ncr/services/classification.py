# student_ncr/services/classification.py - New / Continue / Return classification
"""
Classifies a student for one term as New (N), Continue (C) or Return (R).

1. The immediate-prior window is the 2 terms that begin before a Fall term
   (the prior Spring and Summer), or the 1 term that begins before any other
   term.
2. Rules are tried in order and the first match wins:
     Continue - valid course history inside the window
     Return   - valid course history in a term that ended before the
                earliest window term began
     New      - anything else
"""
from datetime import date
from pydantic import BaseModel, ConfigDict
from typing import Callable, Dict, FrozenSet, List, Optional, Sequence, Tuple
import logging
import re

from student_ncr.core.errors import InvalidInput, TermNotFound
from student_ncr.schemas.classification import (
    Classification, ClassificationOut, EnrollmentRecord, Term,
)
from student_ncr.services.sources import TermCalendar, EnrollmentHistory

logger = logging.getLogger(__name__)

FALL_TERM_CODE = "FA"
FALL_WINDOW_SIZE = 2  # prior Spring + Summer
DEFAULT_WINDOW_SIZE = 1

DROPPED_STATUS = "D"
PLACEHOLDER_YEAR_CODES = frozenset({"TRAN", "ZZZZ"})  # transfer credit, unassigned term

# Grade codes are compared case-folded
CONTINUE_EXCLUDED_GRADES = frozenset({"nw", "ew", "x"})
RETURN_EXCLUDED_GRADES = CONTINUE_EXCLUDED_GRADES | frozenset({"t", "tu", "sw"})

MAX_STUDENT_ID = 2_147_483_647  # id_num is a 32-bit INT

_ALPHANUMERIC = re.compile(r"[A-Za-z0-9]+")


# ==================== INPUT ====================

def _normalise_code(value, length: int, name: str) -> str:
    if not isinstance(value, str):
        raise InvalidInput(f"{name} must be a string, got {type(value).__name__}")
    code = value.strip()
    if len(code) != length or not _ALPHANUMERIC.fullmatch(code):
        raise InvalidInput(f"{name} must be {length} alphanumeric characters, got {value!r}")
    return code.upper()


def validate_query(year_code, term_code, student_id) -> Tuple[str, str, int]:
    """
    Check and normalise a classification query.

    Returns:
        (year_code, term_code, student_id) with codes upper-cased

    Raises:
        InvalidInput: wrong length or non-alphanumeric codes, or a student id
            that is not a positive 32-bit integer
    """
    year_code = _normalise_code(year_code, 4, "year_code")
    term_code = _normalise_code(term_code, 2, "term_code")

    if isinstance(student_id, bool) or not isinstance(student_id, int):
        raise InvalidInput(f"student_id must be an integer, got {student_id!r}")
    if not 0 < student_id <= MAX_STUDENT_ID:
        raise InvalidInput(f"student_id out of range: {student_id}")

    return year_code, term_code, student_id


# ==================== VALIDITY ====================

def _is_valid(record: EnrollmentRecord, excluded_grades: FrozenSet[str]) -> bool:
    status = record.transaction_status
    if status is None or status.strip().upper() == DROPPED_STATUS:
        return False
    if record.credit_hours is None or record.credit_hours <= 0:
        return False
    if record.grade_code is not None and record.grade_code.strip().casefold() in excluded_grades:
        return False
    if record.year_code.strip().upper() in PLACEHOLDER_YEAR_CODES:
        return False
    return True


def is_valid_for_continue_check(record: EnrollmentRecord) -> bool:
    """Not dropped, positive credit hours, grade not nw/ew/X, real year code"""
    return _is_valid(record, CONTINUE_EXCLUDED_GRADES)


def is_valid_for_return_check(record: EnrollmentRecord) -> bool:
    """As the Continue check, additionally excluding grades t/tu/sw"""
    return _is_valid(record, RETURN_EXCLUDED_GRADES)


# ==================== WINDOW ====================

def window_size(term_code: str) -> int:
    return FALL_WINDOW_SIZE if term_code.strip().upper() == FALL_TERM_CODE else DEFAULT_WINDOW_SIZE


def immediate_prior_terms(query_term: Term, calendar: Sequence[Term], size: int) -> List[Term]:
    """
    The `size` terms beginning strictly before `query_term`, most recent first.
    Shorter than `size` when the calendar does not reach back far enough.
    """
    earlier = [t for t in calendar if t.begin_date < query_term.begin_date]
    earlier.sort(key=lambda t: (t.begin_date, t.key), reverse=True)
    return earlier[:size]


# ==================== DECISION LIST ====================

class HistoryContext(BaseModel):
    """Everything the rules need to judge one student's history"""
    model_config = ConfigDict(frozen=True)

    records: List[EnrollmentRecord]
    prior_keys: FrozenSet[str]
    return_cutoff: Optional[date] = None
    end_dates: Dict[str, date]


def has_continue_history(ctx: HistoryContext) -> bool:
    return any(
        r.key in ctx.prior_keys and is_valid_for_continue_check(r)
        for r in ctx.records
    )


def has_return_history(ctx: HistoryContext) -> bool:
    if ctx.return_cutoff is None:
        return False
    for r in ctx.records:
        end_date = ctx.end_dates.get(r.key)
        # Records in terms missing from the calendar have no end date to compare
        if end_date is not None and end_date < ctx.return_cutoff and is_valid_for_return_check(r):
            return True
    return False


Rule = Callable[[HistoryContext], bool]

DECISION_LIST: Tuple[Tuple[Classification, Rule], ...] = (
    (Classification.CONTINUE, has_continue_history),
    (Classification.RETURN, has_return_history),
)
FALLBACK = Classification.NEW
DECISION_ORDER = tuple(label for label, _ in DECISION_LIST) + (FALLBACK,)


def decide(ctx: HistoryContext) -> Classification:
    for label, rule in DECISION_LIST:
        if rule(ctx):
            return label
    return FALLBACK


# ==================== ENTRY POINTS ====================

def explain(
    year_code: str,
    term_code: str,
    student_id: int,
    *,
    terms: TermCalendar,
    history: EnrollmentHistory,
) -> ClassificationOut:
    """
    Classify a student and report the window the decision was made on.

    Raises:
        InvalidInput: malformed query, before either source is read
        TermNotFound: year_code + term_code is not in the calendar
        DataSourceUnavailable: propagated unchanged from the sources
    """
    year_code, term_code, student_id = validate_query(year_code, term_code, student_id)

    query_term = terms.lookup_term(year_code, term_code)
    if query_term is None:
        raise TermNotFound(year_code, term_code)

    calendar = terms.list_terms_ordered_by_begin_date()
    prior = immediate_prior_terms(query_term, calendar, window_size(term_code))
    return_cutoff = min(t.begin_date for t in prior) if prior else None

    ctx = HistoryContext(
        records=history.list_enrollment_records(student_id),
        prior_keys=frozenset(t.key for t in prior),
        return_cutoff=return_cutoff,
        end_dates={t.key: t.end_date for t in calendar},
    )
    label = decide(ctx)

    logger.debug(
        f"Student {student_id} in {query_term.key}: window={[t.key for t in prior]} "
        f"cutoff={return_cutoff} records={len(ctx.records)} -> {label.value}"
    )

    return ClassificationOut(
        year_code=year_code,
        term_code=term_code,
        student_id=student_id,
        classification=label,
        prior_terms=[t.key for t in prior],
        return_cutoff=return_cutoff,
    )


def classify(
    year_code: str,
    term_code: str,
    student_id: int,
    *,
    terms: TermCalendar,
    history: EnrollmentHistory,
) -> Classification:
    """Return N, C or R for the student in the given term"""
    return explain(year_code, term_code, student_id, terms=terms, history=history).classification
