from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any

from contentsync.services.digest_sets import DigestSet


logger = logging.getLogger(__name__)


class DiffReason(str, Enum):
    NO_REMOTE_DIGEST = "no-remote-digest"
    COMBINED_MATCH = "combined-match"
    CONTENT_CHANGED = "content-changed"
    MATCH = "match"


@dataclass
class DiffDetails:
    files: list[str] = field(default_factory=list)
    media: list[str] = field(default_factory=list)


@dataclass
class DiffResult:
    changed: bool
    reason: DiffReason
    details: DiffDetails = field(default_factory=DiffDetails)

    def to_dict(self) -> dict[str, Any]:
        return {
            "changed": self.changed,
            "reason": self.reason.value,
            "details": asdict(self.details),
        }


def _changed_names(fresh: dict[str, str], stored: dict[str, str]) -> list[str]:
    # New-in-fresh and mismatched entries only; names present only in the
    # stored mapping are never reported.
    return [name for name, digest in fresh.items() if stored.get(name) != digest]


def compare(fresh: DigestSet, stored: DigestSet | None) -> DiffResult:
    if stored is None:
        logger.debug("no stored digest set; treating %s as never synced", fresh.combined)
        return DiffResult(changed=True, reason=DiffReason.NO_REMOTE_DIGEST)

    if fresh.combined == stored.combined:
        logger.debug("combined digest match %s", fresh.combined)
        return DiffResult(changed=False, reason=DiffReason.COMBINED_MATCH)

    details = DiffDetails(
        files=_changed_names(fresh.files, stored.files),
        media=_changed_names(fresh.media or {}, stored.media or {}),
    )
    changed = bool(details.files or details.media)
    reason = DiffReason.CONTENT_CHANGED if changed else DiffReason.MATCH
    logger.debug(
        "full comparison: reason=%s files=%s media=%s",
        reason.value,
        details.files,
        details.media,
    )
    return DiffResult(changed=changed, reason=reason, details=details)
