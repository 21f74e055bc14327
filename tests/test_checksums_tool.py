from __future__ import annotations

import json
from pathlib import Path

import pytest

from contentsync.services.digest_sets import load_digest_set
from contentsync.tools.checksums import main


def _write(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def _bundle(tmp_path: Path) -> Path:
    bundle = tmp_path / "post"
    _write(bundle / "body.html", "<p>Hi</p>")
    _write(bundle / "metadata.json", '{"id": 1, "title": "Hi"}')
    (bundle / "media").mkdir()
    (bundle / "media" / "photo.jpg").write_bytes(b"jpeg")
    return bundle


def test_generate_then_compare(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    bundle = _bundle(tmp_path)

    assert main(["generate", str(bundle)]) == 0
    stored = load_digest_set(bundle / "checksums.json")
    assert stored is not None
    assert capsys.readouterr().out.strip() == stored.combined

    assert main(["compare", str(bundle)]) == 0
    unchanged = json.loads(capsys.readouterr().out)
    assert unchanged["reason"] == "combined-match"

    (bundle / "media" / "new.png").write_bytes(b"png")
    assert main(["compare", str(bundle)]) == 1
    changed = json.loads(capsys.readouterr().out)
    assert changed["reason"] == "content-changed"
    assert changed["details"] == {"files": [], "media": ["new.png"]}


def test_compare_without_stored_checksums(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    bundle = _bundle(tmp_path)
    assert main(["compare", str(bundle), "--stored", str(tmp_path / "remote.json")]) == 1
    result = json.loads(capsys.readouterr().out)
    assert result == {
        "changed": True,
        "reason": "no-remote-digest",
        "details": {"files": [], "media": []},
    }


def test_generate_to_custom_output_with_sorted_entries(tmp_path: Path) -> None:
    bundle = _bundle(tmp_path)
    _write(bundle / "seo.json", "{}")
    _write(bundle / "acf.json", "{}")
    output = tmp_path / "out" / "checksums.json"
    assert main(["generate", str(bundle), "--output", str(output), "--sorted"]) == 0
    stored = load_digest_set(output)
    assert stored is not None
    assert list(stored.files) == ["acf.json", "body.html", "metadata.json", "seo.json"]
    assert not (bundle / "checksums.json").exists()


def test_missing_bundle_exits_with_error(tmp_path: Path) -> None:
    assert main(["generate", str(tmp_path / "missing")]) == 2
