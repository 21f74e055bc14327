from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from jsonschema import ValidationError
from jsonschema.validators import Draft202012Validator

from contentsync.core.errors import DigestSetParseError
from contentsync.core.hashing import (
    digest_of_bytes,
    digest_of_structured_value,
    digest_of_text,
    stable_serialize,
)
from contentsync.core.time import utc_now_iso_millis
from contentsync.services.bundles import (
    BODY_FILENAME,
    METADATA_FILENAME,
    ensure_bundle_dir,
    list_auxiliary_documents,
    list_media_files,
    read_bundle_bytes,
    read_bundle_json,
)


logger = logging.getLogger(__name__)

DIGEST_SET_VERSION = 1

_DIGEST_MAP_SCHEMA = {
    "type": "object",
    "additionalProperties": {"type": "string", "pattern": "^[0-9a-f]{64}$"},
}

DIGEST_SET_SCHEMA: dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "properties": {
        "version": {"type": "integer", "minimum": 1},
        "generated": {"type": "string"},
        "files": _DIGEST_MAP_SCHEMA,
        "media": _DIGEST_MAP_SCHEMA,
        "combined": {"type": "string", "pattern": "^[0-9a-f]{64}$"},
    },
    "required": ["version", "generated", "files", "combined"],
}

_validator = Draft202012Validator(DIGEST_SET_SCHEMA)


def combined_digest(
    files: dict[str, str],
    media: dict[str, str] | None,
    *,
    sort_entries: bool = False,
) -> str:
    media = media or {}
    if sort_entries:
        files = dict(sorted(files.items()))
        media = dict(sorted(media.items()))
    return digest_of_text(stable_serialize(files) + stable_serialize(media))


@dataclass(frozen=True)
class DigestSet:
    files: dict[str, str]
    combined: str
    media: dict[str, str] | None = None
    generated: str = field(default_factory=utc_now_iso_millis)
    version: int = DIGEST_SET_VERSION

    @classmethod
    def from_entries(
        cls,
        files: dict[str, str],
        media: dict[str, str] | None = None,
        *,
        generated: str | None = None,
        version: int = DIGEST_SET_VERSION,
        sort_entries: bool = False,
    ) -> DigestSet:
        files = dict(files)
        media = dict(media) if media is not None else None
        if sort_entries:
            files = dict(sorted(files.items()))
            media = dict(sorted(media.items())) if media is not None else None
        return cls(
            files=files,
            media=media,
            combined=combined_digest(files, media),
            generated=generated or utc_now_iso_millis(),
            version=version,
        )

    def combined_is_current(self) -> bool:
        return self.combined in {
            combined_digest(self.files, self.media),
            combined_digest(self.files, self.media, sort_entries=True),
        }

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "version": self.version,
            "generated": self.generated,
            "files": dict(self.files),
        }
        if self.media is not None:
            out["media"] = dict(self.media)
        out["combined"] = self.combined
        return out

    @classmethod
    def from_dict(cls, data: Any) -> DigestSet:
        try:
            _validator.validate(data)
        except ValidationError as exc:
            path = ".".join(str(part) for part in exc.path)
            path_text = path if path else "$"
            raise DigestSetParseError(f"{path_text}: {exc.message}") from exc
        media = data.get("media")
        return cls(
            version=data["version"],
            generated=data["generated"],
            files=dict(data["files"]),
            media=dict(media) if media is not None else None,
            combined=data["combined"],
        )


def build_digest_set(bundle_dir: Path, *, sort_entries: bool = False) -> DigestSet:
    """Hash every tracked file of a content bundle.

    Any missing or unreadable file aborts the build; a partial set would carry
    a combined digest that does not describe the bundle.
    """
    bundle_dir = ensure_bundle_dir(Path(bundle_dir))
    generated = utc_now_iso_millis()
    files: dict[str, str] = {}
    media: dict[str, str] | None = None

    body_path = bundle_dir / BODY_FILENAME
    if body_path.exists():
        files[BODY_FILENAME] = digest_of_bytes(read_bundle_bytes(body_path))
        logger.debug("hashed %s", body_path)

    metadata_path = bundle_dir / METADATA_FILENAME
    if metadata_path.exists():
        files[METADATA_FILENAME] = digest_of_structured_value(read_bundle_json(metadata_path))
        logger.debug("hashed %s (canonical)", metadata_path)

    for path in list_auxiliary_documents(bundle_dir):
        files[path.name] = digest_of_bytes(read_bundle_bytes(path))
        logger.debug("hashed %s", path)

    media_paths = list_media_files(bundle_dir)
    if media_paths is not None:
        media = {}
        for path in media_paths:
            media[path.name] = digest_of_bytes(read_bundle_bytes(path))
            logger.debug("hashed %s", path)

    digest_set = DigestSet.from_entries(
        files,
        media,
        generated=generated,
        sort_entries=sort_entries,
    )
    logger.info(
        "built digest set for %s: %d files, %d media, combined=%s",
        bundle_dir,
        len(digest_set.files),
        len(digest_set.media or {}),
        digest_set.combined,
    )
    return digest_set


def save_digest_set(digest_set: DigestSet, path: Path) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(digest_set.to_dict(), f, ensure_ascii=False, indent=2)
        f.write("\n")
    logger.info("wrote digest set to %s", path)


def load_digest_set(path: Path) -> DigestSet | None:
    path = Path(path)
    if not path.exists():
        return None
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise DigestSetParseError(f"Malformed digest set file {path}: {exc}") from exc
    return DigestSet.from_dict(data)
