# student_ncr/services/classification_service.py - Classification against the registrar database
from sqlalchemy.orm import Session
import logging

from student_ncr.schemas.classification import Classification, ClassificationOut
from student_ncr.services import classification
from student_ncr.services.sources import SqlTermCalendar, SqlEnrollmentHistory

logger = logging.getLogger(__name__)


class ClassificationService:
    """Service class wiring the classifier to year_term_table and student_crs_hist"""

    def __init__(self, db: Session):
        self.db = db
        self.terms = SqlTermCalendar(db)
        self.history = SqlEnrollmentHistory(db)

    def explain(self, year_code: str, term_code: str, student_id: int) -> ClassificationOut:
        """
        Classify a student and include the immediate-prior window

        Raises:
            InvalidInput, TermNotFound, DataSourceUnavailable
        """
        return classification.explain(
            year_code, term_code, student_id,
            terms=self.terms, history=self.history,
        )

    def classify(self, year_code: str, term_code: str, student_id: int) -> Classification:
        return self.explain(year_code, term_code, student_id).classification
