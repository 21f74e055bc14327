from __future__ import annotations

import sqlite3
from pathlib import Path

from contentsync.core.config import Settings


BUSY_TIMEOUT_SECONDS = 5.0


def get_connection(settings: Settings) -> sqlite3.Connection:
    db_path = Path(settings.db_path)
    db_path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(db_path, timeout=BUSY_TIMEOUT_SECONDS)
    conn.row_factory = sqlite3.Row
    # Readers fetching remote digests must not block on a concurrent PUT.
    conn.execute("PRAGMA journal_mode = WAL;")
    return conn
