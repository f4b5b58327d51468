from .attendance import (
    NOT_AVAILABLE,
    AttendanceRecord,
    AttendanceReport,
    AutomationResult,
    AutomationStatus,
    Credentials,
    NotificationOutcome,
    StoredUserRecord,
)

__all__ = [
    "NOT_AVAILABLE",
    "AttendanceRecord",
    "AttendanceReport",
    "AutomationResult",
    "AutomationStatus",
    "Credentials",
    "NotificationOutcome",
    "StoredUserRecord",
]
