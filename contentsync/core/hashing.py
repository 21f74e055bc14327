from __future__ import annotations

import hashlib
import json
from collections.abc import Iterable
from typing import Any


DIGEST_ALGORITHM = "sha256"

# Regenerated by every export/import round-trip of the same content item.
DYNAMIC_FIELDS = frozenset(
    {
        "id",
        "date",
        "modified",
        "guid",
        "link",
    }
)


def digest_of_bytes(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def digest_of_text(text: str) -> str:
    return digest_of_bytes(text.encode("utf-8"))


def stable_serialize(value: Any) -> str:
    """Compact JSON that keeps mapping insertion order as given."""
    return json.dumps(
        value,
        separators=(",", ":"),
        ensure_ascii=False,
        allow_nan=False,
    )


def canonicalize(value: Any) -> Any:
    if isinstance(value, dict):
        return {key: canonicalize(value[key]) for key in sorted(value.keys())}
    if isinstance(value, (list, tuple)):
        return [canonicalize(item) for item in value]
    # JSON documents written by other producers do not distinguish 1 from 1.0.
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def strip_dynamic_fields(value: Any, exclude_keys: Iterable[str] = ()) -> Any:
    if not isinstance(value, dict):
        return value
    excluded = DYNAMIC_FIELDS | set(exclude_keys)
    return {key: val for key, val in value.items() if key not in excluded}


def digest_of_structured_value(value: Any, exclude_keys: Iterable[str] = ()) -> str:
    canonical = canonicalize(strip_dynamic_fields(value, exclude_keys))
    return digest_of_text(stable_serialize(canonical))
