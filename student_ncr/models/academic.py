# student_ncr/models/academic.py - Term calendar (read-only reference data)
from __future__ import annotations
from datetime import date
from sqlalchemy import String, Date, Index
from sqlalchemy.orm import Mapped, mapped_column
from student_ncr.models.base import Base


class YearTerm(Base):
    """
    One academic offering period, keyed by year code + term code
    (e.g. '2425' + 'FA'). Maintained by the registrar; only read here.
    """
    __tablename__ = "year_term_table"

    yr_cde: Mapped[str] = mapped_column(String(4), primary_key=True)  # e.g., "2425"
    trm_cde: Mapped[str] = mapped_column(String(2), primary_key=True)  # FA|SP|SU|...
    trm_begin_dte: Mapped[date] = mapped_column(Date, nullable=False)
    trm_end_dte: Mapped[date] = mapped_column(Date, nullable=False)

    @property
    def term_key(self) -> str:
        return f"{self.yr_cde.strip().upper()}{self.trm_cde.strip().upper()}"

    __table_args__ = (
        Index("ix_year_term_begin", "trm_begin_dte"),
    )
