from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from attendance_notifier.automation import AttendanceScraper
from attendance_notifier.config import Settings
from attendance_notifier.data import Database, UserRepository
from attendance_notifier.errors import PersistenceError
from attendance_notifier.services import (
    AttendanceReportService,
    BatchOrchestrator,
    NotificationGateway,
    TwilioWhatsAppGateway,
)

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class Services:
    """Collaborators built once per process and shared by every request."""

    settings: Settings
    scraper: AttendanceScraper
    gateway: NotificationGateway
    repository: Optional[UserRepository]
    report_service: AttendanceReportService
    orchestrator: BatchOrchestrator


def build_repository(settings: Settings) -> Optional[UserRepository]:
    if settings.database_path is None:
        logger.info("DATABASE_PATH not set; running without a user store.")
        return None

    try:
        repository = UserRepository(Database(settings.database_path))
        repository.initialize()
    except (OSError, PersistenceError) as exc:
        logger.error("User store unavailable. Proceeding without DB: %s", exc)
        return None
    logger.info("User store ready at %s", settings.database_path)
    return repository


def build_services(
    settings: Settings,
    *,
    gateway: NotificationGateway | None = None,
    scraper: AttendanceScraper | None = None,
) -> Services:
    scraper = scraper or AttendanceScraper(settings.browser)
    gateway = gateway or TwilioWhatsAppGateway.from_config(settings.twilio)
    repository = build_repository(settings)

    return Services(
        settings=settings,
        scraper=scraper,
        gateway=gateway,
        repository=repository,
        report_service=AttendanceReportService(scraper, gateway, repository=repository),
        orchestrator=BatchOrchestrator(scraper, gateway, repository=repository),
    )
