from __future__ import annotations

from pathlib import Path

from contentsync.core.config import Settings
from contentsync.core.hashing import digest_of_text
from contentsync.db.engine import get_connection
from contentsync.db.migrations import apply_sql_migrations
from contentsync.services.digest_sets import DigestSet
from contentsync.services.remote_store import (
    delete_remote_digest_set,
    get_remote_digest_set,
    list_remote_items,
    put_remote_digest_set,
)


def _settings(tmp_path: Path) -> Settings:
    return Settings(
        CONTENTSYNC_EXPORT_ROOT=str(tmp_path / "content"),
        CONTENTSYNC_DB_PATH=str(tmp_path / "data" / "contentsync.db"),
    )


def test_apply_sql_migrations_creates_tables_once(tmp_path: Path) -> None:
    settings = _settings(tmp_path)
    first = apply_sql_migrations(settings)
    assert "0001_remote_digest_sets.sql" in first.applied
    second = apply_sql_migrations(settings)
    assert second.applied == []
    assert "0001_remote_digest_sets.sql" in second.skipped

    conn = get_connection(settings)
    try:
        tables = {
            row["name"]
            for row in conn.execute("SELECT name FROM sqlite_master WHERE type='table'").fetchall()
        }
    finally:
        conn.close()
    assert {"schema_migrations", "remote_digest_sets"} <= tables


def test_apply_sql_migrations_rejects_edited_migration(tmp_path: Path) -> None:
    settings = _settings(tmp_path)
    migrations_dir = tmp_path / "migrations"
    migrations_dir.mkdir()
    (migrations_dir / "0001_a.sql").write_text("CREATE TABLE a (x TEXT);", encoding="utf-8")
    apply_sql_migrations(settings, migrations_dir)
    (migrations_dir / "0001_a.sql").write_text("CREATE TABLE a (y TEXT);", encoding="utf-8")
    try:
        apply_sql_migrations(settings, migrations_dir)
    except RuntimeError as exc:
        assert "0001_a.sql" in str(exc)
    else:
        raise AssertionError("edited migration was accepted")


def test_put_get_list_delete_remote_digest_set(tmp_path: Path) -> None:
    settings = _settings(tmp_path)
    apply_sql_migrations(settings)

    assert get_remote_digest_set(settings, "posts/hello") is None

    first = DigestSet.from_entries({"body.html": digest_of_text("a")}, {"photo.jpg": digest_of_text("p")})
    put_remote_digest_set(settings, "posts/hello", first)
    assert get_remote_digest_set(settings, "posts/hello") == first

    second = DigestSet.from_entries({"body.html": digest_of_text("b")})
    put_remote_digest_set(settings, "posts/hello", second)
    put_remote_digest_set(settings, "pages/about", first)
    assert get_remote_digest_set(settings, "posts/hello") == second

    listed = list_remote_items(settings)
    assert listed["total"] == 2
    assert [item["item_key"] for item in listed["items"]] == ["pages/about", "posts/hello"]
    assert listed["items"][1]["combined"] == second.combined

    assert delete_remote_digest_set(settings, "posts/hello") is True
    assert delete_remote_digest_set(settings, "posts/hello") is False
    assert get_remote_digest_set(settings, "posts/hello") is None
