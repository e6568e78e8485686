# student_ncr/api/routers/classifications.py - Per-student N/C/R lookup
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
import logging

from student_ncr.core.db import get_db
from student_ncr.core.errors import InvalidInput, TermNotFound, DataSourceUnavailable
from student_ncr.schemas.classification import ClassificationOut
from student_ncr.services.classification_service import ClassificationService

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/{year_code}/{term_code}/students/{student_id}", response_model=ClassificationOut)
def get_student_classification(
    year_code: str,
    term_code: str,
    student_id: int,
    db: Session = Depends(get_db)
):
    """Classify a student as New (N), Continue (C) or Return (R) for a term"""
    try:
        result = ClassificationService(db).explain(year_code, term_code, student_id)
    except InvalidInput as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except TermNotFound as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e)
        )
    except DataSourceUnavailable as e:
        logger.error(f"Classification unavailable for {year_code}{term_code}/{student_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Enrollment data is temporarily unavailable"
        )

    logger.info(f"Student {result.student_id} classified {result.classification.value} for {result.year_code}{result.term_code}")
    return result
