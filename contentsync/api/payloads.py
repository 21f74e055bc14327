from __future__ import annotations

from dataclasses import replace

from fastapi import HTTPException
from pydantic import BaseModel, Field

from contentsync.core.errors import DigestSetParseError
from contentsync.services.digest_sets import DIGEST_SET_VERSION, DigestSet


class DigestSetPayload(BaseModel):
    version: int = Field(default=DIGEST_SET_VERSION, ge=1)
    generated: str | None = Field(default=None, max_length=100)
    files: dict[str, str] = Field(default_factory=dict)
    media: dict[str, str] | None = None
    combined: str | None = Field(default=None, max_length=64)


def digest_set_from_payload(payload: DigestSetPayload) -> DigestSet:
    """Build a DigestSet, keeping a client-sent combined digest only if it is current."""
    digest_set = DigestSet.from_entries(
        payload.files,
        payload.media,
        generated=payload.generated,
        version=payload.version,
    )
    if payload.combined is not None:
        provided = replace(digest_set, combined=payload.combined)
        if provided.combined_is_current():
            digest_set = provided
    try:
        return DigestSet.from_dict(digest_set.to_dict())
    except DigestSetParseError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
