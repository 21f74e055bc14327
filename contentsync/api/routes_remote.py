from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException, Query, Request

from contentsync.api.payloads import DigestSetPayload, digest_set_from_payload
from contentsync.core.errors import DigestSetParseError
from contentsync.db.migrations import apply_sql_migrations
from contentsync.services.remote_store import (
    delete_remote_digest_set,
    get_remote_digest_set,
    list_remote_items,
    put_remote_digest_set,
)


router = APIRouter(prefix="/api/remote", tags=["remote"])


@router.get("")
def remote_list(
    request: Request,
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
) -> dict[str, Any]:
    settings = request.app.state.settings
    apply_sql_migrations(settings)
    return list_remote_items(settings, limit=limit, offset=offset)


@router.get("/{item_key:path}/checksums")
def remote_checksums(request: Request, item_key: str) -> dict[str, Any]:
    settings = request.app.state.settings
    apply_sql_migrations(settings)
    try:
        digest_set = get_remote_digest_set(settings, item_key)
    except DigestSetParseError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    if digest_set is None:
        raise HTTPException(status_code=404, detail="No stored checksums for this item.")
    return digest_set.to_dict()


@router.put("/{item_key:path}/checksums")
def store_remote_checksums(request: Request, item_key: str, payload: DigestSetPayload) -> dict[str, Any]:
    settings = request.app.state.settings
    apply_sql_migrations(settings)
    digest_set = digest_set_from_payload(payload)
    try:
        put_remote_digest_set(settings, item_key, digest_set)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return digest_set.to_dict()


@router.delete("/{item_key:path}/checksums")
def remove_remote_checksums(request: Request, item_key: str) -> dict[str, Any]:
    settings = request.app.state.settings
    apply_sql_migrations(settings)
    if not delete_remote_digest_set(settings, item_key):
        raise HTTPException(status_code=404, detail="No stored checksums for this item.")
    return {"item_key": item_key, "deleted": True}
