"""Semantic version parsing and ordering."""

from __future__ import annotations

import functools
import re
from dataclasses import dataclass

_VERSION_PATTERN = re.compile(
    r"v?([0-9]+)(\.[0-9]+)?(\.[0-9]+)?"
    r"(?:-([0-9A-Za-z\-]+(?:\.[0-9A-Za-z\-]+)*))?"
    r"(?:\+([0-9A-Za-z\-]+(?:\.[0-9A-Za-z\-]+)*))?"
)


class InvalidVersionError(ValueError):
    """Raised when text is not a semantic version."""


def _is_integer(text: str) -> bool:
    try:
        int(text)
    except ValueError:
        return False
    return True


def _compare_pre_part(mine: str, other: str) -> int:
    if mine == other:
        return 0
    if other == "":
        return 1 if _is_integer(mine) else -1
    if mine == "":
        return -1 if _is_integer(other) else 1
    mine_numeric = _is_integer(mine)
    other_numeric = _is_integer(other)
    if not mine_numeric and not other_numeric:
        return 1 if mine > other else -1
    if not other_numeric:
        return -1
    if not mine_numeric:
        return 1
    return 1 if int(mine) > int(other) else -1


def _compare_prerelease(mine: str, other: str) -> int:
    mine_parts = mine.split(".")
    other_parts = other.split(".")
    for index in range(max(len(mine_parts), len(other_parts))):
        left = mine_parts[index] if index < len(mine_parts) else ""
        right = other_parts[index] if index < len(other_parts) else ""
        result = _compare_pre_part(left, right)
        if result:
            return result
    return 0


@functools.total_ordering
@dataclass(frozen=True, eq=False)
class Version:
    """A parsed semantic version; build metadata does not affect ordering."""

    major: int
    minor: int
    patch: int
    prerelease: str = ""
    metadata: str = ""
    original: str = ""

    def _compare(self, other: Version) -> int:
        mine = (self.major, self.minor, self.patch)
        theirs = (other.major, other.minor, other.patch)
        if mine != theirs:
            return 1 if mine > theirs else -1
        if self.prerelease == other.prerelease:
            return 0
        if not self.prerelease:
            return 1
        if not other.prerelease:
            return -1
        return _compare_prerelease(self.prerelease, other.prerelease)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._compare(other) == 0

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._compare(other) < 0

    def __hash__(self) -> int:
        return hash((self.major, self.minor, self.patch, self.prerelease))

    def __str__(self) -> str:
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            text += f"-{self.prerelease}"
        if self.metadata:
            text += f"+{self.metadata}"
        return text


def parse_version(text: str) -> Version:
    """Parse text as a semantic version, filling in a missing minor or patch with 0."""
    match = _VERSION_PATTERN.fullmatch(text)
    if match is None:
        raise InvalidVersionError(f"invalid semantic version: {text!r}")
    major, minor, patch, prerelease, metadata = match.groups()
    return Version(
        major=int(major),
        minor=int(minor[1:]) if minor else 0,
        patch=int(patch[1:]) if patch else 0,
        prerelease=prerelease or "",
        metadata=metadata or "",
        original=text,
    )