from __future__ import annotations

import json
import logging
import sqlite3
from datetime import datetime
from typing import Any, Mapping

from attendance_notifier.data.database import Database
from attendance_notifier.errors import PersistenceError
from attendance_notifier.models import AttendanceReport, Credentials, StoredUserRecord

logger = logging.getLogger(__name__)

USER_COLUMNS = ("password", "whatsapp", "report", "last_updated")


class UserRepository:
    """Roster storage: one row per portal username with the latest report snapshot."""

    def __init__(self, database: Database) -> None:
        self._database = database

    def initialize(self) -> None:
        try:
            self._database.initialize()
        except (sqlite3.Error, OSError) as exc:
            raise PersistenceError(f"Could not initialize user store: {exc}") from exc

    def ensure_schema(self) -> None:
        """Raise ``PersistenceError`` unless the users table has every roster column."""
        try:
            columns = self._database.table_columns("users")
        except sqlite3.Error as exc:
            raise PersistenceError(f"Could not inspect user store: {exc}") from exc

        missing = [column for column in ("username", *USER_COLUMNS) if column not in columns]
        if missing:
            raise PersistenceError(
                f"User store schema is missing column(s): {', '.join(missing)}; run initialize() first."
            )

    def upsert(self, user_id: str, fields: Mapping[str, Any]) -> None:
        """Insert or update ``user_id``; columns absent from ``fields`` keep their values."""

        unknown = set(fields) - set(USER_COLUMNS)
        if unknown:
            raise ValueError(f"Unknown user fields: {', '.join(sorted(unknown))}")

        columns = [column for column in USER_COLUMNS if column in fields]
        values = [self._encode(column, fields[column]) for column in columns]

        placeholders = ", ".join("?" for _ in range(len(columns) + 1))
        if columns:
            assignments = ", ".join(f"{column} = excluded.{column}" for column in columns)
            conflict = f"DO UPDATE SET {assignments}"
        else:
            conflict = "DO NOTHING"

        sql = (
            f"INSERT INTO users (username{''.join(', ' + column for column in columns)}) "
            f"VALUES ({placeholders}) "
            f"ON CONFLICT(username) {conflict}"
        )

        try:
            with self._database.connect() as connection:
                connection.execute(sql, (user_id.strip(), *values))
        except sqlite3.Error as exc:
            raise PersistenceError(f"Could not save user {user_id}: {exc}") from exc

    def find_all(self) -> list[StoredUserRecord]:
        self.ensure_schema()
        try:
            with self._database.connect() as connection:
                rows = connection.execute(
                    """
                    SELECT username, password, whatsapp, report, last_updated
                      FROM users
                  ORDER BY rowid ASC
                    """
                ).fetchall()
        except sqlite3.Error as exc:
            raise PersistenceError(f"Could not read user roster: {exc}") from exc

        return [self._to_record(row) for row in rows]

    @staticmethod
    def _encode(column: str, value: Any) -> Any:
        if value is None:
            return None
        if column == "report":
            if isinstance(value, AttendanceReport):
                value = value.to_dict()
            return json.dumps(value, ensure_ascii=False)
        if column == "last_updated" and isinstance(value, datetime):
            return value.isoformat()
        return str(value)

    @staticmethod
    def _to_record(row: sqlite3.Row) -> StoredUserRecord:
        report = None
        if row["report"]:
            try:
                report = AttendanceReport.from_dict(json.loads(row["report"]))
            except (ValueError, TypeError):
                logger.warning("Ignoring unreadable report snapshot for %s", row["username"])

        last_updated = None
        if row["last_updated"]:
            try:
                last_updated = datetime.fromisoformat(row["last_updated"])
            except ValueError:
                logger.warning("Ignoring unreadable timestamp for %s", row["username"])

        return StoredUserRecord(
            credentials=Credentials(
                username=row["username"],
                password=row["password"] or "",
                whatsapp=row["whatsapp"] or "",
            ),
            last_report=report,
            last_updated=last_updated,
        )
