from .attendance_service import AttendanceReportService, OnDemandOutcome
from .automation import BatchOrchestrator
from .notifier import NotificationGateway, TwilioWhatsAppGateway
from .report_formatter import format_report

__all__ = [
    "AttendanceReportService",
    "BatchOrchestrator",
    "NotificationGateway",
    "OnDemandOutcome",
    "TwilioWhatsAppGateway",
    "format_report",
]
