from __future__ import annotations

from typing import Callable, Iterable

import pytest
from selenium.common.exceptions import NoSuchElementException

from attendance_notifier.automation import BrowserSession, ScrapeTimings
from attendance_notifier.automation import scraper as portal
from attendance_notifier.config import BrowserConfig
from attendance_notifier.errors import PersistenceError
from attendance_notifier.models import AttendanceReport, Credentials, NotificationOutcome

FAST_TIMINGS = ScrapeTimings(
    login_page_timeout=0.05,
    post_login_settle=0,
    popup_timeout=0.05,
    pre_navigation_settle=0,
    attendance_button_timeout=0.05,
    attendance_page_settle=0,
    summary_timeout=0.05,
)


class FakeElement:
    def __init__(self, text: str = "", children: dict | None = None) -> None:
        self.text = text
        self._children = dict(children or {})
        self.typed: list[str] = []
        self.clicks = 0

    def send_keys(self, *values: str) -> None:
        self.typed.append("".join(values))

    def click(self) -> None:
        self.clicks += 1

    def find_element(self, by: str, value: str) -> "FakeElement":
        try:
            return self._children[(by, value)]
        except KeyError:
            raise NoSuchElementException(f"{by}={value}") from None


class FakeDriver:
    """Minimal stand-in for a Selenium WebDriver backed by a locator map."""

    def __init__(self, elements: dict | None = None, collections: dict | None = None) -> None:
        self.elements = dict(elements or {})
        self.collections = dict(collections or {})
        self.visited: list[str] = []
        self.quit_calls = 0

    def get(self, url: str) -> None:
        self.visited.append(url)

    def find_element(self, by: str, value: str) -> FakeElement:
        try:
            return self.elements[(by, value)]
        except KeyError:
            raise NoSuchElementException(f"{by}={value}") from None

    def find_elements(self, by: str, value: str) -> list[FakeElement]:
        return list(self.collections.get((by, value), []))

    def quit(self) -> None:
        self.quit_calls += 1


def subject_row(subject: str, status: str, *, time_slot: str = "09:30 - 10:20", faculty: str = "Dr. Rao") -> FakeElement:
    return FakeElement(
        children={
            portal.SUBJECT_NAME: FakeElement(subject),
            portal.SUBJECT_TIME_SLOT: FakeElement(time_slot),
            portal.SUBJECT_FACULTY: FakeElement(faculty),
            portal.SUBJECT_STATUS: FakeElement(status),
        }
    )


def build_portal_driver(
    *,
    login_page: bool = True,
    popup: bool = True,
    attendance_button: bool = True,
    summary: str | None = "82%",
    rows: Iterable[FakeElement] = (),
) -> FakeDriver:
    elements: dict = {}
    if login_page:
        elements[portal.USERNAME_FIELD] = FakeElement()
        elements[portal.PASSWORD_FIELD] = FakeElement()
        elements[portal.LOGIN_BUTTON] = FakeElement()
    if popup:
        elements[portal.POPUP_CLOSE_BUTTON] = FakeElement()
    if attendance_button:
        elements[portal.ATTENDANCE_BUTTON] = FakeElement()
    if summary is not None:
        elements[portal.TOTAL_PERCENTAGE] = FakeElement(summary)
    return FakeDriver(elements, {portal.SUBJECT_ITEMS: list(rows)})


def session_factory_for(drivers: Iterable[FakeDriver]) -> Callable[[BrowserConfig], BrowserSession]:
    """Hand out one fake driver per acquired session, in order."""
    queue = iter(drivers)

    def factory(config: BrowserConfig) -> BrowserSession:
        return BrowserSession(next(queue), poll_frequency=0.01)

    return factory


class RecordingGateway:
    def __init__(self, failures: dict[str, str] | None = None) -> None:
        self.failures = dict(failures or {})
        self.sent: list[tuple[str, str]] = []

    def send(self, address: str, text: str) -> NotificationOutcome:
        self.sent.append((address, text))
        if address in self.failures:
            return NotificationOutcome.failed(self.failures[address])
        return NotificationOutcome.delivered()


class StubScraper:
    def __init__(self, reports: dict[str, AttendanceReport]) -> None:
        self.reports = reports
        self.calls: list[str] = []

    def scrape(self, credentials: Credentials) -> AttendanceReport:
        self.calls.append(credentials.username)
        return self.reports[credentials.username]


class BrokenRepository:
    def upsert(self, user_id, fields):
        raise PersistenceError("disk I/O error")

    def find_all(self):
        raise PersistenceError("no such table: users")


@pytest.fixture
def fast_timings() -> ScrapeTimings:
    return FAST_TIMINGS


@pytest.fixture
def browser_config() -> BrowserConfig:
    return BrowserConfig()


@pytest.fixture
def credentials() -> Credentials:
    return Credentials(username="22881A0501", password="s3cret", whatsapp="+919900000001")


@pytest.fixture
def gateway() -> RecordingGateway:
    return RecordingGateway()
