"""FastAPI application exposing the on-demand scrape and the daily automation."""

from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import Depends, FastAPI, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, field_validator

from .bootstrap import Services, build_services
from .config import Settings, load_settings
from .errors import PersistenceError
from .models import Credentials

logger = logging.getLogger(__name__)


class ScrapeRequest(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None
    whatsapp: Optional[str] = None

    @field_validator("username", "password", "whatsapp", mode="before")
    @classmethod
    def coerce_scalar(cls, value: Any) -> Optional[str]:
        # null, booleans and structured values count as missing.
        if isinstance(value, str):
            return value
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return None

    def credentials(self) -> Optional[Credentials]:
        username = (self.username or "").strip()
        whatsapp = (self.whatsapp or "").strip()
        if not username or not self.password or not whatsapp:
            return None
        return Credentials(username=username, password=self.password, whatsapp=whatsapp)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def create_app(settings: Optional[Settings] = None, *, services: Optional[Services] = None) -> FastAPI:
    if services is None:
        services = build_services(settings or load_settings())

    app = FastAPI(title=services.settings.app_name, version="0.1.0")

    def get_services() -> Services:
        return services

    @app.get("/api/scrape-status")
    def scrape_status() -> dict[str, str]:
        return {"status": "Server running and healthy"}

    # Handlers are sync so each scrape runs in the server's thread pool with
    # its own browser session.
    @app.post("/api/scrape")
    def scrape(payload: ScrapeRequest, svc: Services = Depends(get_services)):
        credentials = payload.credentials()
        if credentials is None:
            return _error(status.HTTP_400_BAD_REQUEST, "Missing required fields")

        try:
            outcome = svc.report_service.scrape_and_notify(credentials)
        except Exception:
            logger.exception("Unexpected error during on-demand scrape")
            return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Scrape failed")

        if not outcome.ok:
            return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, outcome.report.error or "Scrape failed")

        notification = outcome.notification
        delivered = notification is not None and notification.success
        return {
            "message": (
                "Scraped and WhatsApp sent successfully"
                if delivered
                else "Scraped successfully, but WhatsApp delivery failed"
            ),
            "data": outcome.report.to_dict(),
            "notification": notification.to_dict() if notification else None,
        }

    @app.post("/api/automate")
    def automate(svc: Services = Depends(get_services)):
        try:
            results = svc.orchestrator.run_stored_roster()
        except PersistenceError as exc:
            logger.error("Automation error: %s", exc)
            return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Automation failed.")
        except Exception:
            logger.exception("Automation error")
            return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Automation failed.")

        if not results:
            return {"message": "No registered users. Automation skipped."}

        return {
            "message": "Daily automation complete.",
            "results": [result.to_dict() for result in results],
        }

    return app
