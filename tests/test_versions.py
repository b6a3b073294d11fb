import pytest

from depserver.versions import InvalidVersionError, parse_version


def test_parses_prerelease_parts():
    version = parse_version("2.0.0-preview1.20000.20")
    assert (version.major, version.minor, version.patch) == (2, 0, 0)
    assert version.prerelease == "preview1.20000.20"
    assert version.original == "2.0.0-preview1.20000.20"


def test_missing_parts_default_to_zero():
    version = parse_version("v4.8")
    assert (version.major, version.minor, version.patch) == (4, 8, 0)
    assert version == parse_version("4.8.0")


@pytest.mark.parametrize("text", ["2.2.0.rc.1", "", "abc", "1.0.0-", "1..0"])
def test_invalid_versions_raise(text):
    with pytest.raises(InvalidVersionError):
        parse_version(text)


def test_sorting_descending():
    parsed = [parse_version(text) for text in ["10.6.0", "10.7.0", "20.1.0", "9.9.9"]]
    ordered = sorted(parsed, reverse=True)
    assert [version.original for version in ordered] == [
        "20.1.0",
        "10.7.0",
        "10.6.0",
        "9.9.9",
    ]


def test_prerelease_sorts_before_release():
    assert parse_version("3.0.0-RC") < parse_version("3.0.0")
    assert parse_version("3.0.0-alpha1") < parse_version("3.0.0-alpha2")
    assert parse_version("4.9.9") < parse_version("5.0.0-0") < parse_version("5.0.0")


def test_numeric_prerelease_parts_compare_numerically():
    assert parse_version("1.0.0-2") < parse_version("1.0.0-10")
    assert parse_version("1.0.0-10") < parse_version("1.0.0-alpha")


def test_metadata_is_ignored_for_equality():
    assert parse_version("1.0.0+build.5") == parse_version("1.0.0")
    assert hash(parse_version("1.0.0+build.5")) == hash(parse_version("1.0.0"))


def test_str_round_trips():
    text = "1.2.3-beta.1+build.7"
    assert str(parse_version(text)) == text
    assert parse_version(str(parse_version(text))) == parse_version(text)