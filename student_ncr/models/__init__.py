# student_ncr/models/__init__.py - Import all models so SQLAlchemy can discover them

from student_ncr.models.base import Base
from student_ncr.models.academic import YearTerm
from student_ncr.models.enrollment import StudentCourseHistory

__all__ = [
    "Base",
    "YearTerm",
    "StudentCourseHistory",
]
