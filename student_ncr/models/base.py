# student_ncr/models/base.py - Declarative base shared by all mapped tables
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass
