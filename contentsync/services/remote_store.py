from __future__ import annotations

import json
import logging
from typing import Any

from contentsync.core.errors import DigestSetParseError
from contentsync.core.time import utc_now_iso
from contentsync.db.engine import get_connection
from contentsync.services.digest_sets import DigestSet


logger = logging.getLogger(__name__)


def put_remote_digest_set(settings, item_key: str, digest_set: DigestSet) -> None:
    if not item_key.strip():
        raise ValueError("item_key is required.")
    now = utc_now_iso()
    payload = json.dumps(digest_set.to_dict(), separators=(",", ":"), ensure_ascii=False)

    conn = get_connection(settings)
    try:
        conn.execute(
            """
            INSERT INTO remote_digest_sets (item_key, combined, payload_json, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?)
            ON CONFLICT(item_key) DO UPDATE SET
              combined=excluded.combined,
              payload_json=excluded.payload_json,
              updated_at=excluded.updated_at
            """,
            (item_key, digest_set.combined, payload, now, now),
        )
        conn.commit()
    finally:
        conn.close()
    logger.info("stored remote digest set for %s combined=%s", item_key, digest_set.combined)


def get_remote_digest_set(settings, item_key: str) -> DigestSet | None:
    conn = get_connection(settings)
    try:
        row = conn.execute(
            "SELECT payload_json FROM remote_digest_sets WHERE item_key = ?",
            (item_key,),
        ).fetchone()
    finally:
        conn.close()
    if not row:
        return None
    try:
        data = json.loads(row["payload_json"])
    except json.JSONDecodeError as exc:
        raise DigestSetParseError(f"Stored digest set for {item_key} is not valid JSON.") from exc
    return DigestSet.from_dict(data)


def list_remote_items(settings, *, limit: int = 100, offset: int = 0) -> dict[str, Any]:
    conn = get_connection(settings)
    try:
        total = conn.execute("SELECT COUNT(*) FROM remote_digest_sets").fetchone()[0]
        rows = conn.execute(
            """
            SELECT item_key, combined, created_at, updated_at
            FROM remote_digest_sets
            ORDER BY item_key ASC
            LIMIT ? OFFSET ?
            """,
            (limit, offset),
        ).fetchall()
    finally:
        conn.close()
    return {
        "items": [
            {
                "item_key": row["item_key"],
                "combined": row["combined"],
                "created_at": row["created_at"],
                "updated_at": row["updated_at"],
            }
            for row in rows
        ],
        "total": int(total),
    }


def delete_remote_digest_set(settings, item_key: str) -> bool:
    conn = get_connection(settings)
    try:
        cursor = conn.execute("DELETE FROM remote_digest_sets WHERE item_key = ?", (item_key,))
        conn.commit()
        deleted = cursor.rowcount > 0
    finally:
        conn.close()
    if deleted:
        logger.info("deleted remote digest set for %s", item_key)
    return deleted
