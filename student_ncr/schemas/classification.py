# student_ncr/schemas/classification.py - Term, enrollment and classification schemas
from datetime import date
from decimal import Decimal
from enum import Enum
from pydantic import BaseModel, ConfigDict
from typing import Optional, List


def term_key(year_code: str, term_code: str) -> str:
    """Composite term key, e.g. ('2425', 'fa ') -> '2425FA'"""
    return f"{year_code.strip().upper()}{term_code.strip().upper()}"


class Classification(str, Enum):
    NEW = "N"
    CONTINUE = "C"
    RETURN = "R"


class Term(BaseModel):
    model_config = ConfigDict(from_attributes=True, frozen=True)

    year_code: str
    term_code: str
    begin_date: date
    end_date: date

    @property
    def key(self) -> str:
        return term_key(self.year_code, self.term_code)


class EnrollmentRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True, frozen=True)

    student_id: int
    year_code: str
    term_code: str
    course_code: Optional[str] = None
    transaction_status: Optional[str] = "A"
    grade_code: Optional[str] = None
    credit_hours: Optional[Decimal] = None

    @property
    def key(self) -> str:
        return term_key(self.year_code, self.term_code)


class ClassificationOut(BaseModel):
    """Label for one student in one term, with the window it was decided on"""
    year_code: str
    term_code: str
    student_id: int
    classification: Classification
    prior_terms: List[str]  # immediate-prior term keys, most recent first
    return_cutoff: Optional[date] = None
