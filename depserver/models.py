"""Core data types, errors and collaborator protocols for dependency lookups."""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Protocol, runtime_checkable


def _format_timestamp(moment: datetime) -> str:
    """Format a datetime as RFC 3339 with trailing zeros of the fraction dropped."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    text = (
        f"{moment.year:04d}-{moment.month:02d}-{moment.day:02d}"
        f"T{moment.hour:02d}:{moment.minute:02d}:{moment.second:02d}"
    )
    if moment.microsecond:
        text += "." + f"{moment.microsecond:06d}".rstrip("0")
    offset = moment.utcoffset()
    if not offset:
        return text + "Z"
    total = int(offset.total_seconds())
    sign = "+" if total >= 0 else "-"
    total = abs(total)
    return f"{text}{sign}{total // 3600:02d}:{total % 3600 // 60:02d}"


@dataclass
class DepVersion:
    """Metadata describing one version of an upstream dependency."""

    version: str
    uri: str
    sha256: str
    release_date: datetime | None = None
    deprecation_date: datetime | None = None
    cpe: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-ready mapping; absent dates are left out."""
        data: dict[str, Any] = {
            "version": self.version,
            "uri": self.uri,
            "sha256": self.sha256,
        }
        if self.release_date is not None:
            data["release_date"] = _format_timestamp(self.release_date)
        if self.deprecation_date is not None:
            data["deprecation_date"] = _format_timestamp(self.deprecation_date)
        data["cpe"] = self.cpe
        return data

    def to_json(self) -> str:
        """Return the compact JSON encoding of this version."""
        return json.dumps(self.to_dict(), separators=(",", ":"), ensure_ascii=False)


@dataclass(frozen=True)
class GithubRelease:
    """A published release of a GitHub repository."""

    tag_name: str
    published_date: datetime


class DependencyError(Exception):
    """Raised when dependency metadata cannot be gathered."""


class NoSourceCodeError(DependencyError):
    """Raised when a release has no downloadable artifact for the version."""

    def __init__(self, version: str) -> None:
        super().__init__(f"no source code available for version {version}")
        self.version = version

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NoSourceCodeError):
            return NotImplemented
        return self.version == other.version

    def __hash__(self) -> int:
        return hash((NoSourceCodeError, self.version))


class Checksummer(Protocol):
    """Verifies and computes file checksums and signatures."""

    def verify_asc(self, asc: str, path: str, *pgp_keys: str) -> None:
        """Verify a detached ASCII-armoured signature of the file at path."""
        ...

    def verify_md5(self, path: str, md5: str) -> None:
        """Verify the MD5 digest of the file at path."""
        ...

    def verify_sha1(self, path: str, sha: str) -> None:
        """Verify the SHA-1 digest of the file at path."""
        ...

    def verify_sha256(self, path: str, sha: str) -> None:
        """Verify the SHA-256 digest of the file at path."""
        ...

    def verify_sha512(self, path: str, sha: str) -> None:
        """Verify the SHA-512 digest of the file at path."""
        ...

    def get_sha256(self, path: str) -> str:
        """Return the hex SHA-256 digest of the file at path."""
        ...

    def split_pgp_keys(self, block: str) -> list[str]:
        """Split a block of concatenated PGP public keys."""
        ...


class FileSystem(Protocol):
    """Writes files."""

    def write_file(self, filename: str, contents: str) -> None:
        """Write contents to filename."""
        ...


class WebClient(Protocol):
    """Fetches resources over HTTP."""

    def download(self, url: str, output_path: str, *options: Any) -> None:
        """Save the resource at url to output_path."""
        ...

    def get(self, url: str, *options: Any) -> bytes:
        """Return the body of the resource at url."""
        ...


class GithubClient(Protocol):
    """Queries releases and tags of GitHub repositories."""

    def get_release_tags(self, org: str, repo: str) -> list[GithubRelease]:
        """Return the releases of org/repo."""
        ...

    def get_tags(self, org: str, repo: str) -> list[str]:
        """Return the tag names of org/repo."""
        ...

    def get_release_asset(self, org: str, repo: str, version: str, filename: str) -> bytes:
        """Return the contents of a release asset."""
        ...

    def download_release_asset(
        self, org: str, repo: str, version: str, filename: str, output_path: str
    ) -> str:
        """Download a release asset to output_path and return its URL."""
        ...

    def download_source_tarball(
        self, org: str, repo: str, version: str, output_path: str
    ) -> str:
        """Download the source tarball of a version and return its URL."""
        ...

    def get_release_date(self, org: str, repo: str, tag: str) -> datetime | None:
        """Return the publication date of the release for tag."""
        ...


@runtime_checkable
class Dependency(Protocol):
    """An upstream dependency whose versions can be listed and described."""

    def get_all_version_refs(self) -> list[str]:
        """Return all known versions, newest first."""
        ...

    def get_dependency_version(self, version: str) -> DepVersion:
        """Return the metadata of one version."""
        ...

    def get_release_date(self, version: str) -> datetime | None:
        """Return the release date of one version."""
        ...