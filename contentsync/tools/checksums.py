from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

from contentsync.core.config import get_settings
from contentsync.core.errors import ContentSyncError
from contentsync.services.bundles import CHECKSUMS_FILENAME
from contentsync.services.differ import DiffResult, compare
from contentsync.services.digest_sets import DigestSet, build_digest_set, load_digest_set, save_digest_set


logger = logging.getLogger(__name__)


def generate(bundle: Path, output: Path | None = None, *, sort_entries: bool = False) -> DigestSet:
    digest_set = build_digest_set(bundle, sort_entries=sort_entries)
    save_digest_set(digest_set, output or bundle / CHECKSUMS_FILENAME)
    return digest_set


def diff(bundle: Path, stored: Path | None = None, *, sort_entries: bool = False) -> DiffResult:
    fresh = build_digest_set(bundle, sort_entries=sort_entries)
    return compare(fresh, load_digest_set(stored or bundle / CHECKSUMS_FILENAME))


def run(args: argparse.Namespace) -> int:
    if args.command == "generate":
        digest_set = generate(args.bundle, args.output, sort_entries=args.sorted)
        print(digest_set.combined)
        return 0
    result = diff(args.bundle, args.stored, sort_entries=args.sorted)
    print(json.dumps(result.to_dict(), indent=2))
    return 1 if result.changed else 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Generate and compare content bundle checksums.")
    parser.add_argument("--log-level", default=None, help="Overrides CONTENTSYNC_LOG_LEVEL.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    gen = subparsers.add_parser("generate", help="Write checksums.json for a bundle.")
    gen.add_argument("bundle", type=Path)
    gen.add_argument("--output", type=Path, default=None)

    cmp_ = subparsers.add_parser("compare", help="Compare a bundle against stored checksums.")
    cmp_.add_argument("bundle", type=Path)
    cmp_.add_argument("--stored", type=Path, default=None)

    for sub in (gen, cmp_):
        sub.add_argument(
            "--sorted",
            action="store_true",
            default=None,
            help="Order entries by filename before computing the combined digest.",
        )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    logging.basicConfig(level=(args.log_level or settings.log_level).upper())
    if args.sorted is None:
        args.sorted = settings.sorted_combined
    try:
        return run(args)
    except ContentSyncError as exc:
        logger.error("%s", exc)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
