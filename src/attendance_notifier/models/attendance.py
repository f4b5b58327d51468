from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Mapping, Optional


NOT_AVAILABLE = "N/A"


@dataclass(slots=True, frozen=True)
class Credentials:
    username: str
    password: str = field(repr=False)
    whatsapp: str

    @property
    def user_id(self) -> str:
        return self.username


@dataclass(slots=True, frozen=True)
class AttendanceRecord:
    subject: str
    time_slot: str
    faculty: str
    status: str

    def to_dict(self) -> dict[str, str]:
        return {
            "subject": self.subject,
            "time_slot": self.time_slot,
            "faculty": self.faculty,
            "status": self.status,
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "AttendanceRecord":
        return cls(
            subject=str(payload.get("subject", "")),
            time_slot=str(payload.get("time_slot", "")),
            faculty=str(payload.get("faculty", "")),
            status=str(payload.get("status", "")),
        )


@dataclass(slots=True, frozen=True)
class AttendanceReport:
    """Outcome of one scrape session.

    When ``error`` is set the session failed and ``subjects`` and
    ``total_percentage`` carry no information.
    """

    subjects: tuple[AttendanceRecord, ...] = ()
    total_percentage: str = NOT_AVAILABLE
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success_result(
        cls,
        subjects: tuple[AttendanceRecord, ...] | list[AttendanceRecord],
        total_percentage: str | None = None,
    ) -> "AttendanceReport":
        return cls(
            subjects=tuple(subjects),
            total_percentage=total_percentage or NOT_AVAILABLE,
        )

    @classmethod
    def failure_result(cls, error: str) -> "AttendanceReport":
        return cls(error=error or "Scraping failed.")

    def to_dict(self) -> dict[str, Any]:
        if self.error is not None:
            return {"error": self.error}
        return {
            "subjects": [record.to_dict() for record in self.subjects],
            "total_percentage": self.total_percentage,
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "AttendanceReport":
        if payload.get("error"):
            return cls.failure_result(str(payload["error"]))
        return cls.success_result(
            [AttendanceRecord.from_dict(item) for item in payload.get("subjects") or ()],
            payload.get("total_percentage"),
        )


@dataclass(slots=True, frozen=True)
class NotificationOutcome:
    success: bool
    error: Optional[str] = None

    @classmethod
    def delivered(cls) -> "NotificationOutcome":
        return cls(success=True)

    @classmethod
    def failed(cls, error: str) -> "NotificationOutcome":
        return cls(success=False, error=error)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"success": self.success}
        if self.error is not None:
            payload["error"] = self.error
        return payload


class AutomationStatus(str, Enum):
    REPORT_SENT = "Report Sent"
    SCRAPE_FAILED = "Scrape Failed"
    NOTIFICATION_FAILED = "Notification Failed"


@dataclass(slots=True, frozen=True)
class AutomationResult:
    username: str
    status: AutomationStatus
    error: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"username": self.username, "status": self.status.value}
        if self.error is not None:
            payload["error"] = self.error
        return payload


@dataclass(slots=True)
class StoredUserRecord:
    credentials: Credentials
    last_report: Optional[AttendanceReport] = None
    last_updated: Optional[datetime] = None

    @property
    def user_id(self) -> str:
        return self.credentials.user_id
