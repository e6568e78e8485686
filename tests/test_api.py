from sqlalchemy.exc import OperationalError


def test_continue_student(client):
    response = client.get("/api/classifications/2425/FA/students/1001")
    assert response.status_code == 200
    assert response.json() == {
        "year_code": "2425",
        "term_code": "FA",
        "student_id": 1001,
        "classification": "C",
        "prior_terms": ["2324SU", "2324SP"],
        "return_cutoff": "2024-01-15",
    }


def test_return_student(client):
    response = client.get("/api/classifications/2425/FA/students/2002")
    assert response.status_code == 200
    assert response.json()["classification"] == "R"


def test_new_student(client):
    response = client.get("/api/classifications/2425/fa/students/3003")
    assert response.status_code == 200
    body = response.json()
    assert body["classification"] == "N"
    assert body["term_code"] == "FA"


def test_unknown_term_is_404(client):
    response = client.get("/api/classifications/2425/WI/students/1001")
    assert response.status_code == 404
    assert "2425WI" in response.json()["detail"]


def test_malformed_year_code_is_400(client):
    response = client.get("/api/classifications/24/FA/students/1001")
    assert response.status_code == 400


def test_non_positive_student_id_is_400(client):
    response = client.get("/api/classifications/2425/FA/students/0")
    assert response.status_code == 400


def test_non_numeric_student_id_is_422(client):
    response = client.get("/api/classifications/2425/FA/students/abc")
    assert response.status_code == 422


def test_database_failure_is_503(client, db, monkeypatch):
    def fail(*args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("connection refused"))

    monkeypatch.setattr(db, "execute", fail)
    response = client.get("/api/classifications/2425/FA/students/1001")
    assert response.status_code == 503


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["database"]["status"] == "healthy"


def test_root(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["docs_url"] == "/docs"


def test_unreachable_database_is_503(unreachable_db):
    from fastapi.testclient import TestClient
    from student_ncr.main import app

    response = TestClient(app).get("/api/classifications/2425/FA/students/1001")
    assert response.status_code == 503
    assert response.json() == {"detail": "Enrollment data is temporarily unavailable"}


def test_run_serves_on_configured_host_and_port(monkeypatch):
    from student_ncr import main
    from student_ncr.core.config import settings

    calls = []
    monkeypatch.setattr(main.uvicorn, "run", lambda app, **kwargs: calls.append((app, kwargs)))
    monkeypatch.setattr(settings, "API_HOST", "127.0.0.1")
    monkeypatch.setattr(settings, "API_PORT", 8123)

    main.run()
    assert calls == [(main.app, {"host": "127.0.0.1", "port": 8123, "log_level": settings.LOG_LEVEL.lower()})]
