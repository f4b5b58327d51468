from __future__ import annotations

import json
import logging
import sys

import uvicorn

from attendance_notifier.api import create_app
from attendance_notifier.bootstrap import build_services
from attendance_notifier.config import configure_logging, load_settings
from attendance_notifier.errors import PersistenceError
from attendance_notifier.models import AutomationStatus

logger = logging.getLogger(__name__)


def main() -> None:
    """Serve the HTTP API."""
    settings = load_settings()
    configure_logging(settings.log_level)
    logger.info(settings.__print__())

    app = create_app(services=build_services(settings))
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


def run_daily_batch() -> int:
    """Run the stored-roster automation once, e.g. from cron."""
    settings = load_settings()
    configure_logging(settings.log_level)

    services = build_services(settings)
    try:
        results = services.orchestrator.run_stored_roster()
    except PersistenceError as exc:
        logger.error("Automation failed: %s", exc)
        return 2

    print(json.dumps([result.to_dict() for result in results], indent=2))
    failed = [result for result in results if result.status is not AutomationStatus.REPORT_SENT]
    return 1 if failed else 0


def batch_entry() -> None:
    sys.exit(run_daily_batch())


if __name__ == "__main__":
    main()
