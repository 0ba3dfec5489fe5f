from __future__ import annotations

import pytest

from rt.services.release.semver import (
    SemVer,
    create_experimental_semver,
    is_experimental_semver,
    is_first_next_prerelease,
    parse_semver,
    release_tag_for_version,
)


def _v(text: str) -> SemVer:
    version = parse_semver(text)
    assert version is not None
    return version


def test_parse_semver_accepts_prerelease_build_and_leading_v() -> None:
    version = parse_semver("v13.1.0-rc.2+sha.abc")
    assert version == SemVer(13, 1, 0, ("rc", 2), ("sha", "abc"))
    assert version is not None
    assert version.format() == "13.1.0-rc.2"
    assert version.prerelease_tag == "rc"
    assert version.build == ("sha", "abc")


@pytest.mark.parametrize("raw", ["", "1.2", "1.2.3.4", "01.2.3", "1.2.3-", "latest"])
def test_parse_semver_rejects_invalid(raw: str) -> None:
    assert parse_semver(raw) is None


@pytest.mark.parametrize(
    ("lower", "higher"),
    [
        ("1.0.0-next.1", "1.0.0-rc.0"),
        ("1.0.0-rc.9", "1.0.0"),
        ("1.0.0-next.2", "1.0.0-next.10"),
        ("1.0.0-1", "1.0.0-next.0"),
        ("1.9.9", "1.10.0"),
    ],
)
def test_precedence(lower: str, higher: str) -> None:
    assert _v(lower) < _v(higher)
    assert _v(higher) > _v(lower)


def test_same_precedence_ignores_build_metadata() -> None:
    assert _v("1.2.3+a").same_precedence(_v("1.2.3+b"))
    assert not _v("1.2.3").same_precedence(_v("1.2.3-next.0"))


def test_equality_agrees_with_precedence() -> None:
    a, b = _v("1.2.3+a"), _v("1.2.3+b")
    assert a == b
    assert hash(a) == hash(b)
    assert not a < b and not b < a
    assert len({a, b, _v("1.2.3")}) == 1


@pytest.mark.parametrize(
    ("start", "kind", "identifier", "expected"),
    [
        ("12.1.3", "patch", None, "12.1.4"),
        ("12.1.3-rc.0", "patch", None, "12.1.3"),
        ("12.2.0-next.2", "prerelease", None, "12.2.0-next.3"),
        ("12.2.0-next.4", "prerelease", "rc", "12.2.0-rc.0"),
        ("12.2.0-rc.0", "prerelease", "rc", "12.2.0-rc.1"),
        ("12.1.3", "prerelease", "rc", "12.1.4-rc.0"),
        ("13.0.0-rc.1", "major", None, "13.0.0"),
        ("12.1.3", "major", None, "13.0.0"),
        ("12.2.0-next.0", "minor", None, "12.2.0"),
    ],
)
def test_inc(start: str, kind: str, identifier: str | None, expected: str) -> None:
    assert _v(start).inc(kind, identifier).format() == expected  # type: ignore[arg-type]


def test_without_prerelease() -> None:
    assert _v("13.0.0-rc.1").without_prerelease() == SemVer(13, 0, 0)


def test_is_first_next_prerelease() -> None:
    assert is_first_next_prerelease(_v("13.0.0-next.0"))
    assert not is_first_next_prerelease(_v("13.0.0-next.1"))
    assert not is_first_next_prerelease(_v("13.0.0-rc.0"))
    assert not is_first_next_prerelease(_v("13.0.0"))


def test_experimental_semver_mapping() -> None:
    assert create_experimental_semver(_v("13.0.0")).format() == "0.1300.0"
    assert create_experimental_semver(_v("12.1.4-rc.0")).format() == "0.1201.4-rc.0"
    assert is_experimental_semver(_v("0.1300.0"))
    assert not is_experimental_semver(_v("0.99.0"))
    assert not is_experimental_semver(_v("13.0.0"))


def test_release_tag_is_the_plain_version() -> None:
    assert release_tag_for_version(_v("12.1.4")) == "12.1.4"
    assert release_tag_for_version(_v("13.0.0-rc.1")) == "13.0.0-rc.1"
