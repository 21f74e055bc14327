from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass, field
from pathlib import Path

from contentsync.core.hashing import digest_of_text
from contentsync.db.engine import get_connection


logger = logging.getLogger(__name__)

_LEDGER_DDL = """
CREATE TABLE IF NOT EXISTS schema_migrations (
  version TEXT PRIMARY KEY,
  checksum TEXT NOT NULL,
  applied_at TEXT NOT NULL DEFAULT (datetime('now'))
)
"""


@dataclass
class MigrationResult:
    applied: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)


def default_migrations_dir() -> Path:
    return Path(__file__).resolve().parents[1] / "migrations"


def _recorded_checksums(conn: sqlite3.Connection) -> dict[str, str]:
    conn.execute(_LEDGER_DDL)
    rows = conn.execute("SELECT version, checksum FROM schema_migrations").fetchall()
    return {row["version"]: row["checksum"] for row in rows}


def apply_sql_migrations(settings, migrations_dir: Path | None = None) -> MigrationResult:
    """Run every packaged ``*.sql`` file once, in name order.

    A file whose text changed after it was applied is refused rather than
    re-run, since the remote digest table may already hold data.
    """
    migrations_dir = migrations_dir or default_migrations_dir()
    scripts = {
        path.name: path.read_text(encoding="utf-8")
        for path in sorted(migrations_dir.glob("*.sql"))
    }
    result = MigrationResult()

    conn = get_connection(settings)
    try:
        recorded = _recorded_checksums(conn)
        for version, sql in scripts.items():
            checksum = digest_of_text(sql)
            if version in recorded:
                if recorded[version] != checksum:
                    raise RuntimeError(f"Migration checksum mismatch for {version}.")
                result.skipped.append(version)
                continue
            conn.executescript(sql)
            conn.execute(
                "INSERT INTO schema_migrations (version, checksum) VALUES (?, ?)",
                (version, checksum),
            )
            conn.commit()
            result.applied.append(version)
            logger.info("applied migration %s", version)
    finally:
        conn.close()
    return result
