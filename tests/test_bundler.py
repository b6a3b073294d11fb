import json
from datetime import datetime, timezone

import pytest

from depserver.bundler import Bundler
from depserver.models import DependencyError, DepVersion


class FakeWebClient:
    def __init__(self, returns=b""):
        self.returns = returns
        self.get_calls = []

    def get(self, url, *options):
        self.get_calls.append(url)
        if isinstance(self.returns, Exception):
            raise self.returns
        return self.returns


def _release(number, created_at, sha, prerelease=False):
    return {
        "built_at": created_at[:10] + "T00:00:00.000Z",
        "created_at": created_at,
        "number": number,
        "summary": "The best way to manage your application's dependencies",
        "platform": "ruby",
        "prerelease": prerelease,
        "licenses": ["MIT"],
        "requirements": [],
        "sha": sha,
    }


RELEASES = json.dumps(
    [
        _release(
            "2.2.0.rc.1",
            "2020-07-02T12:07:54.097Z",
            "2c50355965b6603035ae43199484e9f0f12f45b6d7f7a8d18a503b6d178b4f42",
            prerelease=True,
        ),
        _release(
            "2.1.4",
            "2020-01-05T18:19:06.369Z",
            "50014d21d6712079da4d6464de12bb93c278f87c9200d0b60ba99f32c25af489",
        ),
        _release(
            "2.1.3",
            "2020-01-02T12:29:43.745Z",
            "9b9a9a5685121403eda1ae148ed3a34c86418f2a2beec7df82a45d4baca0e5d2",
        ),
        _release(
            "2.1.2",
            "2019-12-20T00:43:22.951Z",
            "a3d89c9a7fbfe9364512cac10bc8dc4f9c370e41375c03cd36cad31eef6fb961",
        ),
    ]
).encode()


@pytest.fixture
def web_client():
    return FakeWebClient(RELEASES)


@pytest.fixture
def bundler(web_client):
    return Bundler(checksummer=None, file_system=None, web_client=web_client)


def test_get_all_version_refs_returns_final_versions_newest_first(bundler):
    assert bundler.get_all_version_refs() == ["2.1.4", "2.1.3", "2.1.2"]


def test_get_dependency_version(bundler, web_client):
    actual = bundler.get_dependency_version("2.1.3")
    expected = DepVersion(
        version="2.1.3",
        uri="https://rubygems.org/downloads/bundler-2.1.3.gem",
        sha256="9b9a9a5685121403eda1ae148ed3a34c86418f2a2beec7df82a45d4baca0e5d2",
        release_date=datetime(2020, 1, 2, 12, 29, 43, 745000, tzinfo=timezone.utc),
        deprecation_date=None,
        cpe="cpe:2.3:a:bundler:bundler:2.1.3:*:*:*:*:ruby:*:*",
    )
    assert actual == expected
    assert web_client.get_calls[0] == "https://rubygems.org/api/v1/versions/bundler.json"


def test_get_release_date(bundler):
    release_date = bundler.get_release_date("2.1.3")
    assert release_date == datetime(2020, 1, 2, 12, 29, 43, 745000, tzinfo=timezone.utc)
    dep = DepVersion(version="2.1.3", uri="", sha256="", release_date=release_date)
    assert dep.to_dict()["release_date"] == "2020-01-02T12:29:43.745Z"


def test_unknown_version_raises(bundler):
    with pytest.raises(DependencyError, match="could not find version 9.9.9"):
        bundler.get_dependency_version("9.9.9")
    with pytest.raises(DependencyError, match="could not find release date for version 9.9.9"):
        bundler.get_release_date("9.9.9")


def test_web_failure_is_wrapped():
    bundler = Bundler(web_client=FakeWebClient(OSError("boom")))
    with pytest.raises(DependencyError) as info:
        bundler.get_all_version_refs()
    assert str(info.value) == "could not get bundler releases: could not get release index: boom"


def test_bad_json_raises():
    bundler = Bundler(web_client=FakeWebClient(b"not json"))
    with pytest.raises(DependencyError, match="could not unmarshal response"):
        bundler.get_dependency_version("2.1.3")


def test_bad_date_raises():
    body = json.dumps([_release("1.0.0", "yesterday", "abc")]).encode()
    bundler = Bundler(web_client=FakeWebClient(body))
    with pytest.raises(DependencyError, match="could not parse release date"):
        bundler.get_release_date("1.0.0")