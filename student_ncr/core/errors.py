# student_ncr/core/errors.py - Failures raised while classifying a student


class ClassificationError(Exception):
    """Base class for every classification failure"""


class InvalidInput(ClassificationError, ValueError):
    """Malformed year code, term code or student id"""


class TermNotFound(ClassificationError, LookupError):
    """The queried year + term is not in the term calendar"""

    def __init__(self, year_code: str, term_code: str):
        self.year_code = year_code
        self.term_code = term_code
        super().__init__(f"Term {year_code}{term_code} not found in term calendar")


class DataSourceUnavailable(ClassificationError):
    """A term calendar or enrollment history read failed"""


__all__ = ["ClassificationError", "InvalidInput", "TermNotFound", "DataSourceUnavailable"]
