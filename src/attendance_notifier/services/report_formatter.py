from __future__ import annotations

from attendance_notifier.models import NOT_AVAILABLE, AttendanceReport

STATUS_DECORATIONS = {
    "Present": "✅ Present",
    "Absent": "❌ Absent",
}


def decorate_status(status: str) -> str:
    return STATUS_DECORATIONS.get(status, status)


def format_report(report: AttendanceReport) -> str:
    """Render a successful report as a WhatsApp message body."""

    if not report.ok:
        raise ValueError("Cannot format a failed attendance report.")

    lines = [
        "📚 *Daily Attendance Report* 📚",
        "",
        f"✅ Total Attendance: *{report.total_percentage or NOT_AVAILABLE}*",
        "",
        "*Subject-wise Breakdown:*",
    ]
    lines.extend(f"- {record.subject}: {decorate_status(record.status)}" for record in report.subjects)
    return "\n".join(lines) + "\n"
