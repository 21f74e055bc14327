from __future__ import annotations

from typing import Any

from fastapi import APIRouter
from pydantic import BaseModel

from contentsync.api.payloads import DigestSetPayload, digest_set_from_payload
from contentsync.services.differ import compare


router = APIRouter(prefix="/api/checksums", tags=["checksums"])


class CompareRequest(BaseModel):
    fresh: DigestSetPayload
    stored: DigestSetPayload | None = None


@router.post("/compare")
def compare_checksums(payload: CompareRequest) -> dict[str, Any]:
    fresh = digest_set_from_payload(payload.fresh)
    stored = digest_set_from_payload(payload.stored) if payload.stored is not None else None
    return compare(fresh, stored).to_dict()
