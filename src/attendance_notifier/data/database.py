from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

MIGRATIONS_DIR = Path(__file__).resolve().parent / "migrations"


class Database:
    def __init__(self, db_path: Path, *, timeout: float = 5.0) -> None:
        self._db_path = Path(db_path)
        self._timeout = timeout
        self._db_path.parent.mkdir(parents=True, exist_ok=True)

    @property
    def path(self) -> Path:
        return self._db_path

    @contextmanager
    def connect(self) -> Iterator[sqlite3.Connection]:
        connection = sqlite3.connect(self._db_path, timeout=self._timeout)
        connection.row_factory = sqlite3.Row
        try:
            yield connection
            connection.commit()
        except Exception:
            connection.rollback()
            raise
        finally:
            connection.close()

    def initialize(self) -> None:
        migration_files = sorted(MIGRATIONS_DIR.glob("*.sql"))

        with self.connect() as connection:
            self._ensure_migrations_table(connection)
            applied = {
                row["name"] for row in connection.execute("SELECT name FROM schema_migrations")
            }

            for migration in migration_files:
                if migration.name in applied:
                    continue
                connection.executescript(migration.read_text(encoding="utf-8"))
                connection.execute(
                    "INSERT INTO schema_migrations(name) VALUES (?)",
                    (migration.name,),
                )

    def table_columns(self, table: str) -> set[str]:
        """Column names of ``table``; empty when the table does not exist."""
        with self.connect() as connection:
            rows = connection.execute(f"PRAGMA table_info({table})").fetchall()
        return {row["name"] for row in rows}

    def applied_migrations(self) -> list[str]:
        with self.connect() as connection:
            self._ensure_migrations_table(connection)
            rows = connection.execute(
                "SELECT name FROM schema_migrations ORDER BY name"
            ).fetchall()
        return [row["name"] for row in rows]

    @staticmethod
    def _ensure_migrations_table(connection: sqlite3.Connection) -> None:
        connection.execute(
            """
            CREATE TABLE IF NOT EXISTS schema_migrations (
                name TEXT PRIMARY KEY,
                applied_at TEXT NOT NULL DEFAULT (datetime('now'))
            );
            """
        )
