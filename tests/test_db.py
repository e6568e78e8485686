import pytest
from sqlalchemy.exc import OperationalError

from student_ncr.core import db as db_module
from student_ncr.core.db import DatabaseManager
from student_ncr.core.errors import DataSourceUnavailable


class RecordingSession:
    def __init__(self):
        self.calls = []

    def rollback(self):
        self.calls.append("rollback")

    def close(self):
        self.calls.append("close")


@pytest.fixture
def manager():
    manager = DatabaseManager()
    manager._initialized = True
    manager.SessionLocal = RecordingSession
    return manager


def test_get_session_always_rolls_back_then_closes(manager):
    sessions = manager.get_session()
    session = next(sessions)
    with pytest.raises(StopIteration):
        next(sessions)
    assert session.calls == ["rollback", "close"]


def test_get_session_rolls_back_when_request_fails(manager):
    sessions = manager.get_session()
    session = next(sessions)
    with pytest.raises(RuntimeError):
        sessions.throw(RuntimeError("route failed"))
    assert session.calls == ["rollback", "close"]


def test_session_scope_rolls_back_then_closes(manager):
    with manager.session_scope() as session:
        pass
    assert session.calls == ["rollback", "close"]


def test_session_factory_failure_is_data_source_unavailable(manager):
    def refuse():
        raise OperationalError("connect", {}, Exception("connection refused"))

    manager.SessionLocal = refuse
    with pytest.raises(DataSourceUnavailable) as exc_info:
        next(manager.get_session())
    assert isinstance(exc_info.value.__cause__, OperationalError)


def test_unreachable_database_in_get_db(unreachable_db):
    with pytest.raises(DataSourceUnavailable) as exc_info:
        next(db_module.get_db())
    assert isinstance(exc_info.value.__cause__, OperationalError)
    assert not unreachable_db._initialized


def test_unreachable_database_in_session_scope(unreachable_db):
    with pytest.raises(DataSourceUnavailable):
        with db_module.session_scope():
            pass
