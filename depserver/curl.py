"""curl releases listed on curl.se."""

from __future__ import annotations

import csv
import io
import os
import tempfile
from dataclasses import dataclass
from datetime import datetime, timezone

from depserver.models import Checksummer, DependencyError, DepVersion, WebClient
from depserver.versions import InvalidVersionError, Version, parse_version

_RELEASES_URL = "https://curl.se/docs/releases.csv"
_GPG_KEY_URL = "https://daniel.haxx.se/mykey.asc"
_VERSION_COLUMN = 1
_DATE_COLUMN = 3

_LAST_UNSIGNED = parse_version("7.29.0")
_FIRST_CURRENT_DOWNLOAD = parse_version("7.30.0")
_KEPT_V4 = parse_version("4.8")
_KEPT_V5 = parse_version("5.9")
_NO_DOWNLOAD = frozenset(parse_version(text) for text in ("6.3", "6.5", "6.5.1", "7.1"))


@dataclass(frozen=True)
class CurlRelease:
    """One row of the curl release table."""

    version: str
    date: datetime
    semver: Version


def _has_download(version: Version) -> bool:
    missing = (
        (version.major == 4 and version != _KEPT_V4)
        or (version.major == 5 and version != _KEPT_V5)
        or version in _NO_DOWNLOAD
    )
    return not missing


def _parse_releases(body: bytes) -> list[CurlRelease]:
    reader = csv.reader(io.StringIO(body.decode("utf-8", errors="replace")), delimiter=";")
    expected_fields: int | None = None
    releases = []
    try:
        for row in reader:
            if not row:
                continue
            if expected_fields is None:
                expected_fields = len(row)
            elif len(row) != expected_fields:
                raise DependencyError(
                    f"could not read from csv reader: record on line {reader.line_num}: "
                    "wrong number of fields"
                )
            if len(row) <= _DATE_COLUMN:
                raise DependencyError(
                    f"could not read from csv reader: record on line {reader.line_num}: "
                    "too few fields"
                )
            text = row[_VERSION_COLUMN]
            try:
                version = parse_version(text)
            except InvalidVersionError as err:
                raise DependencyError(f"could not parse version: {err}") from err
            if not _has_download(version):
                continue
            try:
                date = datetime.strptime(row[_DATE_COLUMN], "%Y-%m-%d").replace(
                    tzinfo=timezone.utc
                )
            except ValueError as err:
                raise DependencyError(f"could not parse date: {err}") from err
            releases.append(CurlRelease(version=text, date=date, semver=version))
    except csv.Error as err:
        raise DependencyError(f"could not read from csv reader: {err}") from err
    return releases


@dataclass
class Curl:
    """The curl source tarball."""

    checksummer: Checksummer | None = None
    web_client: WebClient | None = None

    def get_all_version_refs(self) -> list[str]:
        try:
            releases = self._get_all_releases()
        except DependencyError as err:
            raise DependencyError(f"could not get curl releases: {err}") from err
        return [r.version for r in sorted(releases, key=lambda r: r.date, reverse=True)]

    def get_dependency_version(self, version: str) -> DepVersion:
        release = self._find(version, f"could not find version {version}")
        try:
            sha = self._get_dependency_sha(release)
        except DependencyError as err:
            raise DependencyError(f"could not get curl sha: {err}") from err
        return DepVersion(
            version=release.version,
            uri=self._dependency_url(release),
            sha256=sha,
            release_date=release.date,
            cpe=f"cpe:2.3:a:haxx:curl:{release.version}:*:*:*:*:*:*:*",
        )

    def get_release_date(self, version: str) -> datetime:
        return self._find(version, f"could not find release date for version {version}").date

    def _find(self, version: str, missing_message: str) -> CurlRelease:
        try:
            releases = self._get_all_releases()
        except DependencyError as err:
            raise DependencyError(f"could not get releases: {err}") from err
        for release in releases:
            if release.version == version:
                return release
        raise DependencyError(missing_message)

    def _get_all_releases(self) -> list[CurlRelease]:
        try:
            body = self.web_client.get(_RELEASES_URL)
        except Exception as err:
            raise DependencyError(f"could not get release csv: {err}") from err
        return _parse_releases(bytes(body or b""))

    def _get_dependency_sha(self, release: CurlRelease) -> str:
        url = self._dependency_url(release)
        with tempfile.TemporaryDirectory(prefix="curl") as output_dir:
            output_path = os.path.join(output_dir, url.rsplit("/", 1)[-1])
            try:
                self.web_client.download(url, output_path)
            except Exception as err:
                raise DependencyError(f"could not download dependency: {err}") from err

            if release.semver > _LAST_UNSIGNED:
                try:
                    gpg_key = self.web_client.get(_GPG_KEY_URL)
                except Exception as err:
                    raise DependencyError(f"could not get curl GPG key: {err}") from err
                signature_url = f"https://curl.se/download/curl-{release.version}.tar.gz.asc"
                try:
                    signature = self.web_client.get(signature_url)
                except Exception as err:
                    raise DependencyError(
                        f"could not get dependency signature: {err}"
                    ) from err
                try:
                    self.checksummer.verify_asc(
                        bytes(signature).decode("utf-8", errors="replace"),
                        output_path,
                        bytes(gpg_key).decode("utf-8", errors="replace"),
                    )
                except Exception as err:
                    raise DependencyError(
                        f"dependency signature verification failed: {err}"
                    ) from err

            try:
                return self.checksummer.get_sha256(output_path)
            except Exception as err:
                raise DependencyError(f"could not get SHA256: {err}") from err

    @staticmethod
    def _dependency_url(release: CurlRelease) -> str:
        if release.semver < _FIRST_CURRENT_DOWNLOAD:
            return f"https://curl.se/download/archeology/curl-{release.version}.tar.gz"
        return f"https://curl.se/download/curl-{release.version}.tar.gz"