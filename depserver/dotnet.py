"""The .NET runtime and ASP.NET Core runtime published in Microsoft release metadata."""

from __future__ import annotations

import json
import os
import tempfile
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from depserver.models import (
    Checksummer,
    DependencyError,
    DepVersion,
    NoSourceCodeError,
    WebClient,
)
from depserver.versions import InvalidVersionError, parse_version

_RELEASE_INDEX_URL = (
    "https://dotnetcli.blob.core.windows.net/dotnet/release-metadata/releases-index.json"
)
_CHANNEL_URL = "https://dotnetcli.blob.core.windows.net/dotnet/release-metadata/{}/releases.json"
_LINUX_RID = "linux-x64"
_UBUNTU_RID = "ubuntu-x64"
_FIRST_DOTNET_NAMED = parse_version("5.0.0-0")


@dataclass(frozen=True)
class DotnetChannelReleaseFile:
    """A downloadable file of one product release."""

    name: str = ""
    rid: str = ""
    url: str = ""
    hash: str = ""


@dataclass(frozen=True)
class _ProductRelease:
    version: str = ""
    files: tuple[DotnetChannelReleaseFile, ...] = ()


@dataclass(frozen=True)
class DotnetChannelRelease:
    """One release entry of a channel, covering several products."""

    release_date: str = ""
    aspnetcore_runtime: _ProductRelease = field(default_factory=_ProductRelease)
    runtime: _ProductRelease = field(default_factory=_ProductRelease)
    sdk: _ProductRelease = field(default_factory=_ProductRelease)
    sdks: tuple[_ProductRelease, ...] = ()


@dataclass(frozen=True)
class DotnetChannel:
    """The releases of one major.minor channel."""

    eol_date: str = ""
    releases: tuple[DotnetChannelRelease, ...] = ()


def _product(data: Any) -> _ProductRelease:
    if not data:
        return _ProductRelease()
    files = tuple(
        DotnetChannelReleaseFile(
            name=item.get("name") or "",
            rid=item.get("rid") or "",
            url=item.get("url") or "",
            hash=item.get("hash") or "",
        )
        for item in data.get("files") or []
    )
    return _ProductRelease(version=data.get("version") or "", files=files)


def _parse_channel(body: bytes) -> DotnetChannel:
    data = json.loads(body)
    if not isinstance(data, dict):
        raise ValueError("expected a JSON object")
    releases = tuple(
        DotnetChannelRelease(
            release_date=item.get("release-date") or "",
            aspnetcore_runtime=_product(item.get("aspnetcore-runtime")),
            runtime=_product(item.get("runtime")),
            sdk=_product(item.get("sdk")),
            sdks=tuple(_product(sdk) for sdk in item.get("sdks") or []),
        )
        for item in data.get("releases") or []
    )
    return DotnetChannel(eol_date=data.get("eol-date") or "", releases=releases)


def _parse_date(text: str) -> datetime:
    return datetime.strptime(text, "%Y-%m-%d").replace(tzinfo=timezone.utc)


def _major_minor(version: str) -> str:
    return ".".join(version.split(".")[:2])


@dataclass
class DotnetDependency(ABC):
    """Shared lookup logic for products described by .NET release metadata."""

    checksummer: Checksummer | None = None
    web_client: WebClient | None = None

    @abstractmethod
    def _product(self, release: DotnetChannelRelease) -> _ProductRelease:
        """Return this product's part of a channel release."""

    @abstractmethod
    def _cpe(self, version: str) -> str:
        """Return the CPE identifier of a version."""

    def _channel_version(self, version: str) -> str:
        return _major_minor(version)

    def _release_versions(self, release: DotnetChannelRelease) -> list[str]:
        return [self._product(release).version]

    def get_all_version_refs(self) -> list[str]:
        try:
            channel_versions = self._get_all_channel_versions()
        except DependencyError as err:
            raise DependencyError(f"could not get channel versions: {err}") from err

        entries: list[tuple[str, str]] = []
        for channel_version in channel_versions:
            try:
                entries.extend(self._versions_for_channel(channel_version))
            except DependencyError as err:
                raise DependencyError(
                    f"could not get versions for channel {channel_version}: {err}"
                ) from err

        entries.sort(key=lambda entry: (entry[1], parse_version(entry[0])))
        unique = list(dict.fromkeys(version for version, _ in entries))
        unique.reverse()
        return unique

    def get_dependency_version(self, version: str) -> DepVersion:
        channel = self._checked_channel(version)
        release_file = self._release_file(channel, version)
        try:
            sha256 = self._release_file_sha(release_file)
        except DependencyError as err:
            raise DependencyError(f"could not get sha: {err}") from err
        try:
            release_date = self._release_date(channel, version)
        except DependencyError as err:
            raise DependencyError(f"error getting release date: {err}") from err
        try:
            cpe = self._cpe(version)
        except DependencyError as err:
            raise DependencyError(f"could not get cpe: {err}") from err

        deprecation_date = None
        if channel.eol_date:
            try:
                deprecation_date = _parse_date(channel.eol_date)
            except ValueError as err:
                raise DependencyError(f"could not parse EOL date: {err}") from err

        return DepVersion(
            version=version,
            uri=release_file.url,
            sha256=sha256,
            release_date=release_date,
            deprecation_date=deprecation_date,
            cpe=cpe,
        )

    def get_release_date(self, version: str) -> datetime | None:
        return self._release_date(self._checked_channel(version), version)

    def _checked_channel(self, version: str) -> DotnetChannel:
        try:
            return self._get_channel(version)
        except DependencyError as err:
            raise DependencyError(f"could not get channel: {err}") from err

    def _get_all_channel_versions(self) -> list[str]:
        try:
            body = self.web_client.get(_RELEASE_INDEX_URL)
        except Exception as err:
            raise DependencyError(f"could not get releases index body: {err}") from err
        try:
            data = json.loads(body)
            return [
                channel.get("channel-version") or ""
                for channel in data.get("releases-index") or []
            ]
        except (ValueError, AttributeError) as err:
            raise DependencyError(f"could not unmarshal releases index: {err}") from err

    def _versions_for_channel(self, version: str) -> list[tuple[str, str]]:
        channel = self._checked_channel(version)
        seen: set[str] = set()
        entries = []
        for release in reversed(channel.releases):
            for candidate in self._release_versions(release):
                if not candidate:
                    continue
                try:
                    parsed = parse_version(candidate)
                except InvalidVersionError as err:
                    raise DependencyError(f"failed to parse version: {err}") from err
                if parsed.prerelease:
                    continue
                if candidate not in seen:
                    seen.add(candidate)
                    entries.append((candidate, release.release_date))
        return entries

    def _get_channel(self, version: str) -> DotnetChannel:
        url = _CHANNEL_URL.format(self._channel_version(version))
        try:
            body = self.web_client.get(url)
        except Exception as err:
            raise DependencyError(f"could not get channel body: {err}") from err
        try:
            return _parse_channel(body)
        except (ValueError, AttributeError, TypeError) as err:
            raise DependencyError(f"could not unmarshal channel: {err}") from err

    def _release_files(
        self, channel: DotnetChannel, version: str
    ) -> tuple[DotnetChannelReleaseFile, ...]:
        for release in channel.releases:
            product = self._product(release)
            if product.version == version:
                return product.files
        return ()

    def _release_date(self, channel: DotnetChannel, version: str) -> datetime | None:
        for release in channel.releases:
            if self._product(release).version == version:
                try:
                    return _parse_date(release.release_date)
                except ValueError as err:
                    raise DependencyError(f"could not parse release date: {err}") from err
        return None

    def _release_file(self, channel: DotnetChannel, version: str) -> DotnetChannelReleaseFile:
        files = self._release_files(channel, version)
        for rid in (_LINUX_RID, _UBUNTU_RID):
            for release_file in files:
                if release_file.rid == rid:
                    return release_file
        raise NoSourceCodeError(version)

    def _release_file_sha(self, release_file: DotnetChannelReleaseFile) -> str:
        if len(release_file.hash) == 64:
            return release_file.hash.lower()

        with tempfile.TemporaryDirectory(prefix="dotnet") as temp_dir:
            output_path = os.path.join(temp_dir, release_file.name)
            try:
                self.web_client.download(release_file.url, output_path)
            except Exception as err:
                raise DependencyError(f"could not download dependency: {err}") from err

            if release_file.hash:
                try:
                    self.checksummer.verify_sha512(output_path, release_file.hash.lower())
                except Exception as err:
                    raise DependencyError(
                        f"dependency signature verification failed: {err}"
                    ) from err

            try:
                return self.checksummer.get_sha256(output_path)
            except Exception as err:
                raise DependencyError(f"could not get SHA256: {err}") from err


class DotnetASPNETCore(DotnetDependency):
    """The ASP.NET Core runtime."""

    def _product(self, release: DotnetChannelRelease) -> _ProductRelease:
        return release.aspnetcore_runtime

    def _cpe(self, version: str) -> str:
        return f"cpe:2.3:a:microsoft:asp.net_core:{_major_minor(version)}:*:*:*:*:*:*:*"


class DotnetRuntime(DotnetDependency):
    """The .NET runtime."""

    def _product(self, release: DotnetChannelRelease) -> _ProductRelease:
        return release.runtime

    def _cpe(self, version: str) -> str:
        try:
            parsed = parse_version(version)
        except InvalidVersionError as err:
            raise DependencyError(f"failed to parse semver: {err}") from err
        # 5.0.0 previews and release candidates already use the ".net" product name.
        product = ".net_core" if parsed < _FIRST_DOTNET_NAMED else ".net"
        return f"cpe:2.3:a:microsoft:{product}:{version}:*:*:*:*:*:*:*"