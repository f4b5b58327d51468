from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional

from selenium.common.exceptions import NoSuchElementException, TimeoutException, WebDriverException
from selenium.webdriver.common.by import By
from selenium.webdriver.remote.webelement import WebElement

from attendance_notifier.automation.chrome import BrowserSession, ChromeAutomationError, Locator
from attendance_notifier.config.settings import BrowserConfig
from attendance_notifier.errors import FatalNavigationError, MalformedRowError
from attendance_notifier.models import NOT_AVAILABLE, AttendanceRecord, AttendanceReport, Credentials

logger = logging.getLogger(__name__)

LOGIN_URL = "https://login.vardhaman.org/"

USERNAME_FIELD: Locator = (By.NAME, "txtuser")
PASSWORD_FIELD: Locator = (By.NAME, "txtpass")
LOGIN_BUTTON: Locator = (By.NAME, "btnLogin")
POPUP_CLOSE_BUTTON: Locator = (By.XPATH, '//*[@id="ctl00_ContentPlaceHolder1_PopupCTRLMain_Image2"]')
ATTENDANCE_BUTTON: Locator = (By.XPATH, '//*[@id="ctl00_ContentPlaceHolder1_divAttendance"]/div[3]/a/div[2]')
TOTAL_PERCENTAGE: Locator = (By.CSS_SELECTOR, ".attendance-count")
SUBJECT_ITEMS: Locator = (By.CSS_SELECTOR, ".atten-sub.bus-stops ul li")

SUBJECT_NAME: Locator = (By.TAG_NAME, "h5")
SUBJECT_TIME_SLOT: Locator = (By.CSS_SELECTOR, ".stp-detail p.text-primary")
SUBJECT_FACULTY: Locator = (By.CSS_SELECTOR, ".fac-status p.text-primary")
SUBJECT_STATUS: Locator = (By.CSS_SELECTOR, ".fac-status .status")

SessionFactory = Callable[[BrowserConfig], BrowserSession]


class ScrapeState(str, Enum):
    INIT = "init"
    NAVIGATED = "navigated"
    LOGGED_IN = "logged_in"
    POPUP_HANDLED = "popup_handled"
    ATTENDANCE_PAGE = "attendance_page"
    SUMMARY_EXTRACTED = "summary_extracted"
    SUBJECTS_EXTRACTED = "subjects_extracted"
    DONE = "done"


@dataclass(frozen=True, slots=True)
class ScrapeTimings:
    """Bounded waits (seconds) for every step of the portal flow."""

    login_page_timeout: float = 30.0
    post_login_settle: float = 3.0
    popup_timeout: float = 5.0
    pre_navigation_settle: float = 3.0
    attendance_button_timeout: float = 10.0
    attendance_page_settle: float = 5.0
    summary_timeout: float = 10.0


@dataclass(slots=True)
class ScrapeContext:
    credentials: Credentials
    session: Optional[BrowserSession] = None
    state: ScrapeState = ScrapeState.INIT
    popup_dismissed: bool = False
    total_percentage: str = NOT_AVAILABLE
    subjects: list[AttendanceRecord] = field(default_factory=list)


class AttendanceScraper:
    """Drive the portal from login to the attendance view for one user at a time.

    ``scrape`` never raises: every failure comes back as an error-shaped
    ``AttendanceReport`` after the browser has been released.
    """

    def __init__(
        self,
        browser_config: BrowserConfig,
        *,
        timings: ScrapeTimings | None = None,
        session_factory: SessionFactory = BrowserSession.acquire,
        sleep: Callable[[float], None] = time.sleep,
        login_url: str = LOGIN_URL,
    ) -> None:
        self._browser_config = browser_config
        self._timings = timings or ScrapeTimings()
        self._session_factory = session_factory
        self._sleep = sleep
        self._login_url = login_url

    def transitions(self) -> tuple[tuple[ScrapeState, Callable[[ScrapeContext], None]], ...]:
        return (
            (ScrapeState.NAVIGATED, self.open_login_page),
            (ScrapeState.LOGGED_IN, self.submit_login),
            (ScrapeState.POPUP_HANDLED, self.dismiss_popup),
            (ScrapeState.ATTENDANCE_PAGE, self.open_attendance_page),
            (ScrapeState.SUMMARY_EXTRACTED, self.extract_summary),
            (ScrapeState.SUBJECTS_EXTRACTED, self.extract_subjects),
        )

    def scrape(self, credentials: Credentials) -> AttendanceReport:
        user = credentials.username
        context = ScrapeContext(credentials=credentials)
        try:
            with self._session_factory(self._browser_config) as session:
                context.session = session
                self._run(context)
        except FatalNavigationError as exc:
            logger.error("Scrape for %s failed after state %s: %s", user, context.state.value, exc)
            return AttendanceReport.failure_result(str(exc))
        except ChromeAutomationError as exc:
            logger.error("Could not start browser for %s: %s", user, exc)
            return AttendanceReport.failure_result(str(exc))
        except WebDriverException as exc:
            logger.error("WebDriver error while scraping %s: %s", user, exc.msg or exc)
            return AttendanceReport.failure_result(
                exc.msg or "Scraping failed due to an element timeout or WebDriver error."
            )
        except Exception as exc:
            logger.exception("Unexpected scrape failure for %s", user)
            return AttendanceReport.failure_result(str(exc) or "Scraping failed.")

        context.state = ScrapeState.DONE
        logger.info(
            "Scraped %d subject(s) for %s (total %s)",
            len(context.subjects),
            user,
            context.total_percentage,
        )
        return AttendanceReport.success_result(context.subjects, context.total_percentage)

    def _run(self, context: ScrapeContext) -> None:
        for target, step in self.transitions():
            step(context)
            context.state = target
            logger.debug("Scrape for %s reached %s", context.credentials.username, target.value)

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------
    def open_login_page(self, context: ScrapeContext) -> None:
        context.session.navigate(self._login_url)
        try:
            context.session.wait_for(USERNAME_FIELD, self._timings.login_page_timeout)
        except TimeoutException as exc:
            raise FatalNavigationError(
                f"Login page did not load within {self._timings.login_page_timeout:g}s."
            ) from exc

    def submit_login(self, context: ScrapeContext) -> None:
        session = context.session
        try:
            session.type_text(session.find(USERNAME_FIELD), context.credentials.username)
            session.type_text(session.find(PASSWORD_FIELD), context.credentials.password)
            session.click(session.find(LOGIN_BUTTON))
        except NoSuchElementException as exc:
            raise FatalNavigationError("Login form is incomplete; portal markup may have changed.") from exc
        # The portal gives no reliable post-login signal.
        self._sleep(self._timings.post_login_settle)

    def dismiss_popup(self, context: ScrapeContext) -> None:
        close_button = context.session.find_optional(POPUP_CLOSE_BUTTON, self._timings.popup_timeout)
        if close_button is None:
            logger.info("No pop-up detected.")
            return
        context.session.click(close_button)
        context.popup_dismissed = True
        logger.info("Pop-up closed.")

    def open_attendance_page(self, context: ScrapeContext) -> None:
        self._sleep(self._timings.pre_navigation_settle)
        try:
            button = context.session.wait_for(ATTENDANCE_BUTTON, self._timings.attendance_button_timeout)
        except TimeoutException as exc:
            raise FatalNavigationError(
                "Attendance button not found; login may have failed."
            ) from exc
        context.session.click(button)
        self._sleep(self._timings.attendance_page_settle)

    def extract_summary(self, context: ScrapeContext) -> None:
        element = context.session.find_optional(TOTAL_PERCENTAGE, self._timings.summary_timeout)
        if element is None:
            logger.warning("Could not find total attendance percentage.")
            context.total_percentage = NOT_AVAILABLE
            return
        context.total_percentage = context.session.read_text(element) or NOT_AVAILABLE

    def extract_subjects(self, context: ScrapeContext) -> None:
        items = context.session.find_all(SUBJECT_ITEMS)
        context.subjects = [self._parse_subject(index, item) for index, item in enumerate(items, start=1)]

    @staticmethod
    def _parse_subject(index: int, item: WebElement) -> AttendanceRecord:
        def field_text(locator: Locator, label: str) -> str:
            try:
                return BrowserSession.read_text(item.find_element(*locator))
            except NoSuchElementException as exc:
                raise MalformedRowError(f"Subject row {index} is missing its {label}.") from exc

        return AttendanceRecord(
            subject=field_text(SUBJECT_NAME, "subject name"),
            time_slot=field_text(SUBJECT_TIME_SLOT, "time slot"),
            faculty=field_text(SUBJECT_FACULTY, "faculty"),
            status=field_text(SUBJECT_STATUS, "status"),
        )

