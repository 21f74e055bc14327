from typing import Any

from fastapi import APIRouter, Request

from contentsync.core.hashing import DIGEST_ALGORITHM
from contentsync.services.digest_sets import DIGEST_SET_VERSION

router = APIRouter()


@router.get("/api/health")
def health(request: Request) -> dict[str, Any]:
    settings = request.app.state.settings
    return {
        "status": "ok",
        "digest_algorithm": DIGEST_ALGORITHM,
        "digest_set_version": DIGEST_SET_VERSION,
        "sorted_combined": settings.sorted_combined,
    }
