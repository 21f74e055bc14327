from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

from contentsync.core.errors import BundleNotFoundError, BundleParseError, BundleReadError


BODY_FILENAME = "body.html"
METADATA_FILENAME = "metadata.json"
MEDIA_MAPPING_FILENAME = "media-mapping.json"
CHECKSUMS_FILENAME = "checksums.json"
MEDIA_DIRNAME = "media"

RESERVED_FILENAMES = frozenset({METADATA_FILENAME, MEDIA_MAPPING_FILENAME, CHECKSUMS_FILENAME})


def resolve_bundle_dir(export_root: Path, item_key: str) -> Path:
    parts = [part for part in item_key.replace("\\", "/").split("/") if part]
    if not parts or any(part in {".", ".."} for part in parts):
        raise ValueError(f"Invalid content item key: {item_key!r}")
    return export_root.joinpath(*parts)


def ensure_bundle_dir(bundle_dir: Path) -> Path:
    if not bundle_dir.is_dir():
        raise BundleNotFoundError(f"Content bundle not found: {bundle_dir}")
    return bundle_dir


def read_bundle_bytes(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except FileNotFoundError as exc:
        raise BundleNotFoundError(f"Bundle file vanished before it could be read: {path}") from exc
    except OSError as exc:
        raise BundleReadError(f"Could not read bundle file {path}: {exc}") from exc


def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-standard JSON constant {name}")


def read_bundle_json(path: Path) -> Any:
    raw = read_bundle_bytes(path)
    try:
        # utf-8-sig drops a leading byte-order mark written by some editors.
        return json.loads(raw.decode("utf-8-sig"), parse_constant=_reject_constant)
    except ValueError as exc:
        raise BundleParseError(f"Malformed JSON document {path}: {exc}") from exc


def _list_dir(directory: Path) -> list[Path]:
    """Directory entries in byte-wise name order, as the exporter's readdir lists them."""
    try:
        paths = list(directory.iterdir())
    except FileNotFoundError as exc:
        raise BundleNotFoundError(f"Directory vanished before it could be listed: {directory}") from exc
    except OSError as exc:
        raise BundleReadError(f"Could not list directory {directory}: {exc}") from exc
    paths.sort(key=lambda path: os.fsencode(path.name))
    return paths


def list_auxiliary_documents(bundle_dir: Path) -> list[Path]:
    """JSON documents in the bundle root other than the reserved ones."""
    return [
        path
        for path in _list_dir(bundle_dir)
        if path.name.endswith(".json") and path.name not in RESERVED_FILENAMES and path.is_file()
    ]


def list_media_files(bundle_dir: Path) -> list[Path] | None:
    """Regular files under ``media/``, or ``None`` when the bundle has no media directory."""
    media_dir = bundle_dir / MEDIA_DIRNAME
    if not media_dir.is_dir():
        return None
    return [path for path in _list_dir(media_dir) if path.is_file()]
