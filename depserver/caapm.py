"""The CA APM PHP agent published on Bintray."""

from __future__ import annotations

import os
import re
import tempfile
from dataclasses import dataclass
from datetime import datetime

from depserver.models import Checksummer, DependencyError, DepVersion, FileSystem, WebClient
from depserver.versions import InvalidVersionError, parse_version

_INDEX_URL = "https://ca.bintray.com/apm-agents/"
_LINK = re.compile(r'<a href="CA-APM-PHPAgent-(.*)_linux\.tar\.gz">')


@dataclass
class CAAPM:
    """The CA APM PHP agent."""

    checksummer: Checksummer | None = None
    file_system: FileSystem | None = None
    web_client: WebClient | None = None

    def get_all_version_refs(self) -> list[str]:
        try:
            body = self.web_client.get(_INDEX_URL)
        except Exception as err:
            raise DependencyError(f"could not hit ca.bintray.com: {err}") from err
        versions = _LINK.findall(body.decode("utf-8", errors="replace"))
        try:
            return sorted(versions, key=parse_version, reverse=True)
        except InvalidVersionError as err:
            raise DependencyError(f"could not sort versions: {err}") from err

    def get_dependency_version(self, version: str) -> DepVersion:
        url = f"{_INDEX_URL}CA-APM-PHPAgent-{version}_linux.tar.gz"
        with tempfile.TemporaryDirectory(prefix="caapm") as output_dir:
            output_path = os.path.join(output_dir, url.rsplit("/", 1)[-1])
            try:
                self.web_client.download(url, output_path)
            except Exception as err:
                raise DependencyError(f"could not download dependency: {err}") from err
            try:
                sha = self.checksummer.get_sha256(output_path)
            except Exception as err:
                raise DependencyError(f"could not get SHA256: {err}") from err
        return DepVersion(
            version=version,
            uri=url,
            sha256=sha,
            release_date=None,
            deprecation_date=None,
        )

    def get_release_date(self, version: str) -> datetime | None:
        """Always fails: the Bintray index carries no release dates."""
        product = type(self).__name__
        raise DependencyError(f"cannot determine release dates for {product}")