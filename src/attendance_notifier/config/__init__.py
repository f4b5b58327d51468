from .log_setup import configure_logging
from .settings import BrowserConfig, Settings, TwilioConfig, load_settings, resolve_browser_config

__all__ = [
    "BrowserConfig",
    "Settings",
    "TwilioConfig",
    "configure_logging",
    "load_settings",
    "resolve_browser_config",
]
