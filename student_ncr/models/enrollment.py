# student_ncr/models/enrollment.py - Student course history (read-only transactional data)
from __future__ import annotations
from decimal import Decimal
from sqlalchemy import String, Integer, Numeric, Index
from sqlalchemy.orm import Mapped, mapped_column
from student_ncr.models.base import Base


class StudentCourseHistory(Base):
    """
    One student's registration in one course within one term.
    The owning term is referenced by (yr_cde, trm_cde), which may carry
    placeholder years such as TRAN (transfer credit) or ZZZZ (unassigned).
    """
    __tablename__ = "student_crs_hist"

    id_num: Mapped[int] = mapped_column(Integer, primary_key=True)
    yr_cde: Mapped[str] = mapped_column(String(4), primary_key=True)
    trm_cde: Mapped[str] = mapped_column(String(2), primary_key=True)
    crs_cde: Mapped[str] = mapped_column(String(30), primary_key=True)

    transaction_sts: Mapped[str | None] = mapped_column(String(1), nullable=True)  # A = active, D = dropped
    grade_cde: Mapped[str | None] = mapped_column(String(3), nullable=True)
    credit_hrs: Mapped[Decimal | None] = mapped_column(Numeric(6, 2), nullable=True)

    __table_args__ = (
        Index("ix_student_crs_hist_student", "id_num"),
    )
