"""Line-number chunking and range consolidation."""

from __future__ import annotations

from typing import TYPE_CHECKING

from more_itertools import consecutive_groups

from prcov.errors import RangeInvariantError

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator, Sequence

    from prcov.model.types import LineRange


def chunks(lines: Iterable[int] | int | None) -> list[list[int]]:
    """Group line numbers into runs of consecutive integers.

    The input is sorted first. A repeated value is not ``previous + 1`` and therefore
    opens a new run: ``chunks([3, 3, 4]) == [[3], [3, 4]]``. A bare integer is treated
    as a one-element list and ``None`` as an empty one.
    """
    if lines is None:
        return []
    if isinstance(lines, int):
        lines = [lines]
    return [list(grp) for grp in consecutive_groups(sorted(lines))]


def consolidate_sorted(lines: Sequence[int]) -> list[LineRange]:
    """Merge an increasing sequence of line numbers into inclusive ranges.

    Consecutive integers extend the current range, any gap closes it.
    """
    if not lines:
        return []

    ranges: list[LineRange] = []
    start = end = lines[0]
    for current in lines[1:]:
        if current == end + 1:
            end = current
        else:
            ranges.append((start, end))
            start = end = current
    ranges.append((start, end))
    return ranges


def to_ranges(lines: Iterable[int]) -> list[LineRange]:
    """Return the unique, sorted, consolidated ranges covering *lines*."""
    return consolidate_sorted(sorted(set(lines)))


def count_lines(ranges: Iterable[LineRange]) -> int:
    return sum(end - start + 1 for start, end in ranges)


def expand_ranges(ranges: Iterable[LineRange]) -> Iterator[int]:
    for start, end in ranges:
        yield from range(start, end + 1)


def validate_ranges(ranges: Sequence[LineRange], *, name: str = "ranges") -> None:
    """Raise :class:`RangeInvariantError` unless *ranges* are sorted and disjoint."""
    previous_end = 0
    for start, end in ranges:
        if start < 1 or end < start:
            msg = f"{name}: malformed range ({start}, {end})"
            raise RangeInvariantError(msg)
        if start <= previous_end:
            msg = f"{name}: range ({start}, {end}) overlaps or precedes line {previous_end}"
            raise RangeInvariantError(msg)
        previous_end = end


__all__ = [
    "chunks",
    "consolidate_sorted",
    "count_lines",
    "expand_ranges",
    "to_ranges",
    "validate_ranges",
]
