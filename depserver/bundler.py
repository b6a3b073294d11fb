"""Bundler releases published on rubygems.org."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

from depserver.models import Checksummer, DependencyError, DepVersion, FileSystem, WebClient

_RELEASES_URL = "https://rubygems.org/api/v1/versions/bundler.json"
_FINAL_VERSION = re.compile(r"\d+\.\d+\.\d+\Z")
_RFC3339 = re.compile(
    r"(\d{4})-(\d{2})-(\d{2})T(\d{2}):(\d{2}):(\d{2})(?:\.(\d+))?(Z|[+-]\d{2}:\d{2})"
)


def _parse_rfc3339(text: str) -> datetime:
    match = _RFC3339.fullmatch(text)
    if match is None:
        raise ValueError(f"cannot parse {text!r} as an RFC 3339 time")
    year, month, day, hour, minute, second, fraction, zone = match.groups()
    if zone == "Z":
        tzinfo = timezone.utc
    else:
        sign = -1 if zone[0] == "-" else 1
        offset = timedelta(hours=int(zone[1:3]), minutes=int(zone[4:6]))
        tzinfo = timezone(sign * offset)
    microsecond = int((fraction or "")[:6].ljust(6, "0"))
    return datetime(
        int(year), int(month), int(day), int(hour), int(minute), int(second),
        microsecond, tzinfo=tzinfo,
    )


@dataclass(frozen=True)
class _BundlerRelease:
    version: str
    date: str
    sha: str


@dataclass
class Bundler:
    """The bundler gem."""

    checksummer: Checksummer | None = None
    file_system: FileSystem | None = None
    web_client: WebClient | None = None

    def get_all_version_refs(self) -> list[str]:
        try:
            releases = self._get_all_releases()
        except DependencyError as err:
            raise DependencyError(f"could not get bundler releases: {err}") from err
        return [r.version for r in releases if _FINAL_VERSION.search(r.version)]

    def get_dependency_version(self, version: str) -> DepVersion:
        release_date = self._find_release_date(version, f"could not find version {version}")
        sha = next(r.sha for r in self._cached_releases if r.version == version)
        return DepVersion(
            version=version,
            uri=f"https://rubygems.org/downloads/bundler-{version}.gem",
            sha256=sha,
            release_date=release_date,
            deprecation_date=None,
            cpe=f"cpe:2.3:a:bundler:bundler:{version}:*:*:*:*:ruby:*:*",
        )

    def get_release_date(self, version: str) -> datetime:
        return self._find_release_date(
            version, f"could not find release date for version {version}"
        )

    def _find_release_date(self, version: str, missing_message: str) -> datetime:
        try:
            releases = self._get_all_releases()
        except DependencyError as err:
            raise DependencyError(f"could not get releases: {err}") from err
        self._cached_releases = releases
        for release in releases:
            if release.version == version:
                try:
                    return _parse_rfc3339(release.date)
                except ValueError as err:
                    raise DependencyError(f"could not parse release date: {err}") from err
        raise DependencyError(missing_message)

    def _get_all_releases(self) -> list[_BundlerRelease]:
        try:
            body = self.web_client.get(_RELEASES_URL)
        except Exception as err:
            raise DependencyError(f"could not get release index: {err}") from err
        try:
            entries: Any = json.loads(body)
            if not isinstance(entries, list):
                raise ValueError("expected a JSON array of releases")
            return [
                _BundlerRelease(
                    version=entry.get("number") or "",
                    date=entry.get("created_at") or "",
                    sha=entry.get("sha") or "",
                )
                for entry in entries
            ]
        except (ValueError, AttributeError) as err:
            text = body.decode("utf-8", errors="replace")
            raise DependencyError(f"could not unmarshal response: {err}\n{text}") from err