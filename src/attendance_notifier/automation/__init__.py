from .chrome import BrowserSession, ChromeAutomationError, build_chrome_driver
from .scraper import AttendanceScraper, ScrapeContext, ScrapeState, ScrapeTimings

__all__ = [
	"AttendanceScraper",
	"BrowserSession",
	"ChromeAutomationError",
	"ScrapeContext",
	"ScrapeState",
	"ScrapeTimings",
	"build_chrome_driver",
]
