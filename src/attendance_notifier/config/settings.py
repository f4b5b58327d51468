from __future__ import annotations

import os
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parents[3]
ENV_PATH = BASE_DIR / ".env"

APP_NAME = "Attendance Notifier"
PRODUCTION = "production"
DEFAULT_CHROME_BINARY = Path("/usr/bin/google-chrome")

HEADLESS_ARGUMENTS: tuple[str, ...] = (
    "--headless",
    "--disable-gpu",
    "--no-sandbox",
    "--window-size=1920,1080",
    "--disable-dev-shm-usage",
)


@dataclass(frozen=True, slots=True)
class BrowserConfig:
    """Everything needed to launch one headless Chrome instance."""

    binary_path: Optional[Path] = None
    driver_path: Optional[Path] = None
    arguments: tuple[str, ...] = HEADLESS_ARGUMENTS


@dataclass(frozen=True, slots=True)
class TwilioConfig:
    account_sid: Optional[str] = None
    auth_token: Optional[str] = field(default=None, repr=False)
    whatsapp_number: Optional[str] = None

    @property
    def is_configured(self) -> bool:
        return bool(self.account_sid and self.auth_token)


@dataclass(frozen=True, slots=True)
class Settings:
    app_name: str = APP_NAME
    environment: str = "local"
    browser: BrowserConfig = field(default_factory=BrowserConfig)
    twilio: TwilioConfig = field(default_factory=TwilioConfig)
    database_path: Optional[Path] = None
    host: str = "0.0.0.0"
    port: int = 10000
    log_level: str = "INFO"

    @property
    def is_production(self) -> bool:
        return self.environment == PRODUCTION

    def __print__(self) -> str:
        return (
            f"Settings(app_name={self.app_name}, "
            f"environment={self.environment}, "
            f"chrome_binary_path={self.browser.binary_path}, "
            f"selenium_driver_path={self.browser.driver_path}, "
            f"database_path={self.database_path}, "
            f"twilio_configured={self.twilio.is_configured}, "
            f"port={self.port})"
        )


LOG_LEVEL_ALIASES = {"WARN": "WARNING", "FATAL": "CRITICAL"}
LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


def normalize_log_level(raw: str | None) -> str:
    """Map ``LOG_LEVEL`` onto a name both ``logging`` and uvicorn accept."""
    level = (raw or "INFO").strip().upper()
    level = LOG_LEVEL_ALIASES.get(level, level)
    return level if level in LOG_LEVELS else "INFO"


def _optional_path(name: str) -> Path | None:
    raw = os.getenv(name)
    return Path(raw).expanduser() if raw else None


def resolve_browser_config(environment: str) -> BrowserConfig:
    """Pick Chrome and chromedriver locations for the deployment environment.

    Local runs let Selenium locate Chrome itself. Production containers pin
    the binary, falling back to whatever Chrome build is on ``PATH``.
    """

    binary_path = _optional_path("CHROME_BINARY_PATH")
    if binary_path is None and environment == PRODUCTION:
        binary_path = _discover_chrome_binary() or DEFAULT_CHROME_BINARY

    return BrowserConfig(
        binary_path=binary_path,
        driver_path=_optional_path("SELENIUM_DRIVER_PATH"),
    )


def load_settings(env_file: str | Path | None = None) -> Settings:
    """Read settings from the environment, loading a ``.env`` file first."""

    load_dotenv(env_file or ENV_PATH)

    environment = os.getenv("ATTENDANCE_ENV", "local").strip().lower() or "local"

    return Settings(
        environment=environment,
        browser=resolve_browser_config(environment),
        twilio=TwilioConfig(
            account_sid=os.getenv("TWILIO_ACCOUNT_SID") or None,
            auth_token=os.getenv("TWILIO_AUTH_TOKEN") or None,
            whatsapp_number=os.getenv("TWILIO_WHATSAPP_NUMBER") or None,
        ),
        database_path=_optional_path("DATABASE_PATH"),
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "10000")),
        log_level=normalize_log_level(os.getenv("LOG_LEVEL")),
    )


def _discover_chrome_binary() -> Optional[Path]:
    for executable in ("google-chrome", "google-chrome-stable", "chromium-browser", "chromium"):
        located = shutil.which(executable)
        if located:
            return Path(located)
    return None
