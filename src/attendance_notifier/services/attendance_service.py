from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from attendance_notifier.data import UserRepository
from attendance_notifier.errors import PersistenceError
from attendance_notifier.models import AttendanceReport, Credentials, NotificationOutcome
from attendance_notifier.services.automation import ReportScraper, utc_now
from attendance_notifier.services.notifier import NotificationGateway
from attendance_notifier.services.report_formatter import format_report

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class OnDemandOutcome:
    report: AttendanceReport
    notification: Optional[NotificationOutcome] = None

    @property
    def ok(self) -> bool:
        return self.report.ok


class AttendanceReportService:
    """Scrape, notify and remember a single user on request."""

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

    def scrape_and_notify(self, credentials: Credentials) -> OnDemandOutcome:
        report = self._scraper.scrape(credentials)
        if not report.ok:
            return OnDemandOutcome(report)

        notification = self._gateway.send(credentials.whatsapp, self._formatter(report))
        self._register(credentials, report)
        return OnDemandOutcome(report, notification)

    def _register(self, credentials: Credentials, report: AttendanceReport) -> None:
        if self._repository is None:
            return
        try:
            self._repository.upsert(
                credentials.username,
                {
                    "password": credentials.password,
                    "whatsapp": credentials.whatsapp,
                    "report": report,
                    "last_updated": self._clock(),
                },
            )
        except PersistenceError as exc:
            logger.error("DB save failed, continuing without DB: %s", exc)
