from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Optional

from selenium import webdriver
from selenium.common.exceptions import TimeoutException, WebDriverException
from selenium.webdriver.chrome.options import Options
from selenium.webdriver.chrome.service import Service
from selenium.webdriver.remote.webdriver import WebDriver
from selenium.webdriver.remote.webelement import WebElement
from selenium.webdriver.support import expected_conditions as EC
from selenium.webdriver.support.ui import WebDriverWait

try:  # pragma: no cover - import guard for static analysis
    from webdriver_manager.chrome import ChromeDriverManager
except ImportError as exc:  # pragma: no cover - missing dependency
    raise RuntimeError(
        "webdriver-manager is required for Chrome automation support."
    ) from exc

from attendance_notifier.config.settings import BrowserConfig

logger = logging.getLogger(__name__)

Locator = tuple[str, str]
DriverFactory = Callable[[BrowserConfig], WebDriver]

DEFAULT_POLL_FREQUENCY = 0.5


class ChromeAutomationError(RuntimeError):
    """Raised when the headless Chrome session cannot be launched."""


def build_chrome_driver(config: BrowserConfig) -> WebDriver:
    """Launch a fresh headless Chrome process described by ``config``."""

    options = Options()
    for argument in config.arguments:
        options.add_argument(argument)
    if config.binary_path is not None:
        options.binary_location = str(config.binary_path)

    driver_path = config.driver_path or Path(ChromeDriverManager().install())
    service = Service(str(driver_path))

    try:
        return webdriver.Chrome(service=service, options=options)
    except WebDriverException as exc:
        raise ChromeAutomationError(
            f"Failed to start headless Chrome (binary={config.binary_path or 'auto'}, "
            f"driver={driver_path}): {exc.msg or exc}"
        ) from exc


class BrowserSession:
    """One browser instance, owned by a single scrape from acquire to release.

    Use it as a context manager; leaving the block quits the driver whether the
    scrape succeeded or not. ``release`` quits at most once.
    """

    def __init__(self, driver: WebDriver, *, poll_frequency: float = DEFAULT_POLL_FREQUENCY) -> None:
        self._driver = driver
        self._poll_frequency = poll_frequency
        self._released = False

    @classmethod
    def acquire(
        cls,
        config: BrowserConfig,
        *,
        driver_factory: DriverFactory = build_chrome_driver,
        poll_frequency: float = DEFAULT_POLL_FREQUENCY,
    ) -> "BrowserSession":
        driver = driver_factory(config)
        logger.debug("Browser session acquired")
        return cls(driver, poll_frequency=poll_frequency)

    def __enter__(self) -> "BrowserSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()

    @property
    def released(self) -> bool:
        return self._released

    # ------------------------------------------------------------------
    # Navigation and lookups
    # ------------------------------------------------------------------
    def navigate(self, url: str) -> None:
        self._driver.get(url)

    def wait_for(self, locator: Locator, timeout: float) -> WebElement:
        """Block until ``locator`` is present; raise ``TimeoutException`` after ``timeout`` seconds."""
        wait = WebDriverWait(self._driver, timeout, poll_frequency=self._poll_frequency)
        return wait.until(
            EC.presence_of_element_located(locator),
            f"Element {locator[0]}={locator[1]!r} not found within {timeout:g}s",
        )

    def find_optional(self, locator: Locator, timeout: float) -> Optional[WebElement]:
        try:
            return self.wait_for(locator, timeout)
        except TimeoutException:
            return None

    def find(self, locator: Locator) -> WebElement:
        return self._driver.find_element(*locator)

    def find_all(self, locator: Locator) -> list[WebElement]:
        return list(self._driver.find_elements(*locator))

    # ------------------------------------------------------------------
    # Element interaction
    # ------------------------------------------------------------------
    @staticmethod
    def type_text(element: WebElement, text: str) -> None:
        element.send_keys(text)

    @staticmethod
    def click(element: WebElement) -> None:
        element.click()

    @staticmethod
    def read_text(element: WebElement) -> str:
        return (element.text or "").strip()

    def release(self) -> None:
        if self._released:
            return
        self._released = True
        try:
            self._driver.quit()
        except WebDriverException as exc:  # pragma: no cover - best effort cleanup
            logger.warning("Failed to quit Chrome cleanly: %s", exc)
        else:
            logger.debug("Browser session released")
