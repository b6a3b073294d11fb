"""Composer releases published on GitHub and getcomposer.org."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from depserver.models import (
    Checksummer,
    DependencyError,
    DepVersion,
    FileSystem,
    GithubClient,
    GithubRelease,
    WebClient,
)
from depserver.versions import InvalidVersionError, parse_version


@dataclass
class Composer:
    """The composer PHP package manager."""

    checksummer: Checksummer | None = None
    file_system: FileSystem | None = None
    github_client: GithubClient | None = None
    web_client: WebClient | None = None

    def get_all_version_refs(self) -> list[str]:
        versions = []
        for release in self._releases():
            try:
                parsed = parse_version(release.tag_name)
            except InvalidVersionError as err:
                raise DependencyError(f"failed to parse version: {err}") from err
            if not parsed.prerelease:
                versions.append(release.tag_name)
        return versions

    def get_dependency_version(self, version: str) -> DepVersion:
        for release in self._releases():
            if release.tag_name == version:
                try:
                    return self._create_dependency_version(release)
                except DependencyError as err:
                    raise DependencyError(
                        f"could not create composer version: {err}"
                    ) from err
        raise DependencyError(f"could not find composer version {version}")

    def get_release_date(self, version: str) -> datetime:
        for release in self._releases():
            if release.tag_name == version:
                return release.published_date
        raise DependencyError(f"could not find release date for version {version}")

    def _releases(self) -> list[GithubRelease]:
        try:
            return self.github_client.get_release_tags("composer", "composer")
        except Exception as err:
            raise DependencyError(f"could not get releases: {err}") from err

    def _create_dependency_version(self, release: GithubRelease) -> DepVersion:
        try:
            sha = self._get_dependency_sha(release.tag_name)
        except DependencyError as err:
            raise DependencyError(f"could not get sha: {err}") from err
        return DepVersion(
            version=release.tag_name,
            uri=f"https://getcomposer.org/download/{release.tag_name}/composer.phar",
            sha256=sha,
            release_date=release.published_date,
            deprecation_date=None,
        )

    def _get_dependency_sha(self, version: str) -> str:
        sha_url = f"https://getcomposer.org/download/{version}/composer.phar.sha256sum"
        try:
            body = self.web_client.get(sha_url)
        except Exception as err:
            raise DependencyError(f"could not download composer SHA256 file: {err}") from err
        sha = bytes(body or b"").decode("utf-8", errors="replace").split(" ")[0]
        if len(sha) < 64:
            raise DependencyError(f"could not get SHA256 from file {sha_url}")
        return sha