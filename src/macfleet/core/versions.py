"""Dotted numeric version comparison.

Versions have up to three integer components (``major.minor.patch``). Shorter
versions are padded with zeros, so ``15.3`` equals ``15.3.0``. Anything longer
than three components is rejected rather than truncated.
"""

from __future__ import annotations

from enum import IntEnum

from macfleet.errors import InvalidVersionError

COMPONENTS = 3


class VersionOrder(IntEnum):
    LESS = -1
    EQUAL = 0
    GREATER = 1


def parse_version(value: str) -> tuple[int, int, int]:
    parts = value.strip().split(".")
    if len(parts) > COMPONENTS:
        raise InvalidVersionError(
            f"Version {value!r} has more than {COMPONENTS} components"
        )
    if not all(part.isascii() and part.isdigit() for part in parts):
        raise InvalidVersionError(f"Version {value!r} is not dotted numeric")

    numbers = [int(part) for part in parts]
    numbers.extend([0] * (COMPONENTS - len(numbers)))
    return numbers[0], numbers[1], numbers[2]


def compare(a: str, b: str) -> VersionOrder:
    for left, right in zip(parse_version(a), parse_version(b)):
        if left < right:
            return VersionOrder.LESS
        if left > right:
            return VersionOrder.GREATER
    return VersionOrder.EQUAL


def is_outdated(current: str, latest: str) -> bool:
    return compare(current, latest) is VersionOrder.LESS
