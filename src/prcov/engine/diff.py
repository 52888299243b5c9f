"""Unified-diff parsing: which lines does the new revision add?"""

from __future__ import annotations

import re
from collections import defaultdict
from itertools import pairwise
from typing import TYPE_CHECKING

from prcov import logger as _package_logger
from prcov.engine.chunker import to_ranges

if TYPE_CHECKING:
    import logging

    from prcov.model.types import LineRange

HUNK_HEADER = re.compile(r"^@@ -\d+(?:,\d+)? \+(\d+)(?:,(\d+))? @@")
NEW_FILE_HEADER = re.compile(r"^\+\+\+ [wb]/(.+)$")
OLD_FILE_HEADER_PREFIX = "--- "
FILE_HEADER_PREFIX = "+++ "
DEV_NULL = "/dev/null"


def _decode(diff: str | bytes) -> str:
    if isinstance(diff, bytes):
        return diff.decode("utf-8", errors="replace")
    return diff


def parse_new_file_path(line: str) -> str | None:
    """Return the target path of a ``+++`` header, or ``None`` for deletions."""
    line = line.rstrip()
    if line.endswith(DEV_NULL):
        return None
    match = NEW_FILE_HEADER.match(line)
    return match.group(1) if match else None


def _is_file_header(line: str, previous: str) -> bool:
    # "+++ " alone may be an added line whose content starts with "++ ".
    return line.startswith(FILE_HEADER_PREFIX) and previous.startswith(OLD_FILE_HEADER_PREFIX)


def _added_lines(text: str) -> dict[str, list[int]]:
    changed: dict[str, list[int]] = defaultdict(list)
    current_file: str | None = None
    cursor: int | None = None

    for previous, line in pairwise(["", *text.splitlines()]):
        if _is_file_header(line, previous):
            current_file = parse_new_file_path(line)
            cursor = None
            continue

        if match := HUNK_HEADER.match(line):
            cursor = int(match.group(1))
            continue

        if current_file is None or cursor is None or not line:
            continue

        marker = line[0]
        if marker == "+":
            changed[current_file].append(cursor)
            cursor += 1
        elif marker == " ":
            cursor += 1
        # "-" lines exist only in the old revision; anything else is diff metadata.

    return changed


def extract_modified_ranges(
    diff: str | bytes | None,
    *,
    logger: logging.Logger | None = None,
) -> dict[str, list[LineRange]]:
    """Map each file of a unified diff to the ranges of lines it adds.

    Deleted files (``+++ /dev/null``) never appear in the result. Malformed input
    degrades to an empty mapping instead of raising.
    """
    log = logger or _package_logger.getChild("diff")
    if diff is None:
        return {}
    try:
        changed = _added_lines(_decode(diff))
    except Exception:  # noqa: BLE001
        log.warning("could not parse diff; treating it as empty", exc_info=True)
        return {}

    ranges = {file: to_ranges(lines) for file, lines in changed.items()}
    log.debug("diff adds lines in %d files", len(ranges))
    return ranges


def extract_modified_files(diff: str | bytes | None) -> list[str]:
    """Return the sorted paths of every non-deleted file touched by *diff*."""
    if diff is None:
        return []
    files = {
        path
        for previous, line in pairwise(["", *_decode(diff).splitlines()])
        if _is_file_header(line, previous) and (path := parse_new_file_path(line)) is not None
    }
    return sorted(files)


__all__ = [
    "HUNK_HEADER",
    "extract_modified_files",
    "extract_modified_ranges",
    "parse_new_file_path",
]
