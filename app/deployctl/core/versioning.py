"""Strict dot-separated numeric version comparison."""

from __future__ import annotations

from enum import IntEnum

from deployctl.core.errors import VersionParseError


class Ordering(IntEnum):
    """Result of comparing two versions."""

    LESS = -1
    EQUAL = 0
    GREATER = 1


def parse_version(version: str) -> tuple[int, ...]:
    """Split a version into its numeric segments.

    Args:
        version: Version string such as "1.2.0".

    Returns:
        Tuple of non-negative integer segments.

    Raises:
        VersionParseError: If any segment is empty or not a decimal number.
    """
    segments = version.strip().split(".")
    parsed: list[int] = []
    for segment in segments:
        if not segment.isascii() or not segment.isdigit():
            msg = f"Invalid version '{version}': segment '{segment}' is not a number"
            raise VersionParseError(msg)
        parsed.append(int(segment))
    return tuple(parsed)


def version_compare(left: str, right: str) -> Ordering:
    """Compare two versions segment by segment.

    When all shared segments are equal, the version with more segments
    is greater ("1.2.0" > "1.2").

    Raises:
        VersionParseError: If either version is not strictly numeric.
    """
    lhs = parse_version(left)
    rhs = parse_version(right)
    for a, b in zip(lhs, rhs, strict=False):
        if a != b:
            return Ordering.GREATER if a > b else Ordering.LESS
    if len(lhs) == len(rhs):
        return Ordering.EQUAL
    return Ordering.GREATER if len(lhs) > len(rhs) else Ordering.LESS
