from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from attendance_notifier.api import create_app
from attendance_notifier.bootstrap import build_services
from attendance_notifier.config import Settings
from attendance_notifier.models import AttendanceRecord, AttendanceReport
from attendance_notifier.services import BatchOrchestrator

from conftest import BrokenRepository, RecordingGateway, StubScraper

OK_REPORT = AttendanceReport.success_result(
    [AttendanceRecord(subject="Maths", time_slot="09:30", faculty="Dr. Rao", status="Present")],
    "82%",
)


def _client(tmp_path, reports, *, database: bool = True, gateway=None) -> TestClient:
    settings = Settings(database_path=tmp_path / "users.db" if database else None)
    services = build_services(settings, gateway=gateway or RecordingGateway(), scraper=StubScraper(reports))
    return TestClient(create_app(services=services))


def test_health_check(tmp_path):
    response = _client(tmp_path, {}).get("/api/scrape-status")

    assert response.status_code == 200
    assert response.json() == {"status": "Server running and healthy"}


@pytest.mark.parametrize(
    "body",
    [
        {},
        {"username": "u", "password": "p"},
        {"username": "u", "password": "", "whatsapp": "+1"},
        {"username": None, "password": "p", "whatsapp": "+1"},
        {"username": ["u"], "password": "p", "whatsapp": "+1"},
        {"username": "u", "password": "p", "whatsapp": {"number": "+1"}},
    ],
)
def test_scrape_requires_all_fields(tmp_path, body):
    response = _client(tmp_path, {}).post("/api/scrape", json=body)

    assert response.status_code == 400
    assert response.json() == {"error": "Missing required fields"}


def test_scrape_error_returns_500(tmp_path):
    client = _client(tmp_path, {"u": AttendanceReport.failure_result("Attendance button not found")})

    response = client.post("/api/scrape", json={"username": "u", "password": "p", "whatsapp": "+1"})

    assert response.status_code == 500
    assert response.json() == {"error": "Attendance button not found"}


def test_scrape_then_automate(tmp_path):
    client = _client(tmp_path, {"u": OK_REPORT})

    scraped = client.post("/api/scrape", json={"username": "u", "password": "p", "whatsapp": "+1"})
    automated = client.post("/api/automate")

    assert scraped.status_code == 200
    assert scraped.json()["data"]["total_percentage"] == "82%"
    assert scraped.json()["notification"] == {"success": True}
    assert automated.json() == {
        "message": "Daily automation complete.",
        "results": [{"username": "u", "status": "Report Sent"}],
    }


def test_automate_without_storage_is_skipped(tmp_path):
    response = _client(tmp_path, {}, database=False).post("/api/automate")

    assert response.status_code == 200
    assert response.json() == {"message": "No registered users. Automation skipped."}


def test_numeric_username_is_accepted(tmp_path):
    client = _client(tmp_path, {"22881": OK_REPORT})

    response = client.post("/api/scrape", json={"username": 22881, "password": "p", "whatsapp": "+1"})

    assert response.status_code == 200
    assert response.json()["data"]["total_percentage"] == "82%"


def test_unusable_database_path_falls_back_to_no_store(tmp_path):
    blocker = tmp_path / "afile"
    blocker.write_text("not a directory", encoding="utf-8")
    settings = Settings(database_path=blocker / "users.db")

    services = build_services(settings, gateway=RecordingGateway(), scraper=StubScraper({}))
    response = TestClient(create_app(services=services)).post("/api/automate")

    assert services.repository is None
    assert response.status_code == 200
    assert response.json() == {"message": "No registered users. Automation skipped."}


class ExplodingOrchestrator:
    def run_stored_roster(self):
        raise RuntimeError("roster decode bug")


@pytest.mark.parametrize(
    "orchestrator",
    [
        BatchOrchestrator(StubScraper({}), RecordingGateway(), repository=BrokenRepository()),
        ExplodingOrchestrator(),
    ],
    ids=["unreadable-roster", "unexpected-error"],
)
def test_automate_failure_returns_500(tmp_path, orchestrator):
    services = build_services(Settings(), gateway=RecordingGateway(), scraper=StubScraper({}))
    services.orchestrator = orchestrator

    response = TestClient(create_app(services=services)).post("/api/automate")

    assert response.status_code == 500
    assert response.json() == {"error": "Automation failed."}
