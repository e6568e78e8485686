# student_ncr/cli.py - Command-line classification of a single student
import argparse
import logging
import sys

from student_ncr.core.config import configure_logging
from student_ncr.core.db import session_scope
from student_ncr.core.errors import InvalidInput, TermNotFound, DataSourceUnavailable
from student_ncr.services.classification_service import ClassificationService

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_INVALID_INPUT = 2  # same code argparse uses for usage errors
EXIT_TERM_NOT_FOUND = 3
EXIT_DATA_UNAVAILABLE = 4


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="student-ncr",
        description="Classify a student as New (N), Continue (C) or Return (R) for a term",
    )
    parser.add_argument("year_code", help="Academic year code, e.g. 2425")
    parser.add_argument("term_code", help="Term code, e.g. FA, SP, SU")
    parser.add_argument("student_id", type=int, help="Student ID number")
    parser.add_argument(
        "--explain",
        action="store_true",
        help="Also print the immediate-prior terms and the Return cutoff date",
    )
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging()

    try:
        with session_scope() as db:
            result = ClassificationService(db).explain(args.year_code, args.term_code, args.student_id)
    except InvalidInput as e:
        print(f"Invalid input: {e}", file=sys.stderr)
        return EXIT_INVALID_INPUT
    except TermNotFound as e:
        print(str(e), file=sys.stderr)
        return EXIT_TERM_NOT_FOUND
    except DataSourceUnavailable as e:
        logger.error(f"Classification failed: {e}")
        print(f"Enrollment data unavailable: {e}", file=sys.stderr)
        return EXIT_DATA_UNAVAILABLE

    if args.explain:
        print(f"Term:           {result.year_code}{result.term_code}")
        print(f"Student:        {result.student_id}")
        print(f"Prior terms:    {', '.join(result.prior_terms) or '(none)'}")
        print(f"Return cutoff:  {result.return_cutoff or '(none)'}")
        print(f"Classification: {result.classification.value}")
    else:
        print(result.classification.value)
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
