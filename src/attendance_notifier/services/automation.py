from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, Iterable, Optional, Protocol

from attendance_notifier.data import UserRepository
from attendance_notifier.errors import PersistenceError
from attendance_notifier.models import (
    AttendanceReport,
    AutomationResult,
    AutomationStatus,
    Credentials,
    NotificationOutcome,
)
from attendance_notifier.services.notifier import NotificationGateway
from attendance_notifier.services.report_formatter import format_report

logger = logging.getLogger(__name__)


class ReportScraper(Protocol):
    def scrape(self, credentials: Credentials) -> AttendanceReport:
        """Return the user's attendance report, or an error-shaped report."""


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class BatchOrchestrator:
    """Run the scrape, persist and notify pipeline over a roster, one user at a time.

    A failure for one user becomes that user's ``AutomationResult``; it never
    stops the batch. Results come back in roster order, one per entry.
    """

    def __init__(
        self,
        scraper: ReportScraper,
        gateway: NotificationGateway,
        *,
        repository: Optional[UserRepository] = None,
        formatter: Callable[[AttendanceReport], str] = format_report,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._scraper = scraper
        self._gateway = gateway
        self._repository = repository
        self._formatter = formatter
        self._clock = clock

    def run_stored_roster(self) -> list[AutomationResult]:
        """Run the batch over every stored user.

        Raises ``PersistenceError`` when the roster cannot be read.
        """
        if self._repository is None:
            logger.info("No user store configured; automation has no roster.")
            return []

        roster = [record.credentials for record in self._repository.find_all()]
        if not roster:
            logger.info("No registered users found.")
            return []
        return self.run_batch(roster)

    def run_batch(self, roster: Iterable[Credentials]) -> list[AutomationResult]:
        logger.info("Starting automated daily attendance check...")
        results: list[AutomationResult] = []
        for credentials in roster:
            results.append(self._process_user(credentials))

        sent = sum(1 for result in results if result.status is AutomationStatus.REPORT_SENT)
        logger.info("Daily automation complete: %d/%d report(s) sent.", sent, len(results))
        return results

    def _process_user(self, credentials: Credentials) -> AutomationResult:
        username = credentials.username

        try:
            report = self._scraper.scrape(credentials)
        except Exception as exc:
            logger.exception("Scraper raised for %s", username)
            report = AttendanceReport.failure_result(str(exc) or exc.__class__.__name__)

        if not report.ok:
            logger.error("Scrape failed for %s: %s", username, report.error)
            return AutomationResult(username, AutomationStatus.SCRAPE_FAILED, report.error)

        self._save_snapshot(username, report)

        try:
            outcome = self._gateway.send(credentials.whatsapp, self._formatter(report))
        except Exception as exc:
            logger.exception("Notification gateway raised for %s", username)
            outcome = NotificationOutcome.failed(str(exc) or exc.__class__.__name__)

        if outcome.success:
            return AutomationResult(username, AutomationStatus.REPORT_SENT)
        return AutomationResult(username, AutomationStatus.NOTIFICATION_FAILED, outcome.error)

    def _save_snapshot(self, username: str, report: AttendanceReport) -> None:
        if self._repository is None:
            return
        try:
            self._repository.upsert(username, {"report": report, "last_updated": self._clock()})
        except PersistenceError as exc:
            logger.error("DB update failed for %s: %s", username, exc)
