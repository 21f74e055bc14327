from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from fastapi import APIRouter, HTTPException, Query, Request

from contentsync.core.errors import (
    BundleNotFoundError,
    BundleParseError,
    BundleReadError,
    DigestSetParseError,
)
from contentsync.db.migrations import apply_sql_migrations
from contentsync.services.bundles import CHECKSUMS_FILENAME, resolve_bundle_dir
from contentsync.services.differ import compare
from contentsync.services.digest_sets import DigestSet, build_digest_set, load_digest_set, save_digest_set
from contentsync.services.remote_store import get_remote_digest_set


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/bundles", tags=["bundles"])


def _bundle_dir(settings, item_key: str) -> Path:
    try:
        return resolve_bundle_dir(settings.export_root, item_key)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


def _build(settings, bundle_dir: Path) -> DigestSet:
    try:
        return build_digest_set(bundle_dir, sort_entries=settings.sorted_combined)
    except BundleNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except BundleParseError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except BundleReadError as exc:
        logger.error("digest build failed for %s: %s", bundle_dir, exc)
        raise HTTPException(status_code=500, detail=str(exc)) from exc


@router.get("/{item_key:path}/checksums")
def bundle_checksums(request: Request, item_key: str) -> dict[str, Any]:
    settings = request.app.state.settings
    return _build(settings, _bundle_dir(settings, item_key)).to_dict()


@router.post("/{item_key:path}/checksums")
def write_bundle_checksums(request: Request, item_key: str) -> dict[str, Any]:
    settings = request.app.state.settings
    bundle_dir = _bundle_dir(settings, item_key)
    digest_set = _build(settings, bundle_dir)
    save_digest_set(digest_set, bundle_dir / CHECKSUMS_FILENAME)
    return digest_set.to_dict()


@router.get("/{item_key:path}/diff")
def bundle_diff(
    request: Request,
    item_key: str,
    source: str = Query(default="remote", pattern="^(local|remote)$"),
) -> dict[str, Any]:
    settings = request.app.state.settings
    bundle_dir = _bundle_dir(settings, item_key)
    fresh = _build(settings, bundle_dir)

    try:
        if source == "local":
            stored = load_digest_set(bundle_dir / CHECKSUMS_FILENAME)
        else:
            apply_sql_migrations(settings)
            stored = get_remote_digest_set(settings, item_key)
    except DigestSetParseError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    return {"item_key": item_key, "source": source, **compare(fresh, stored).to_dict()}
