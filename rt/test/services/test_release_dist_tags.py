from __future__ import annotations

from dataclasses import dataclass, field

from rt.core.result import Err, Ok, Result
from rt.output.console import MockConsole
from rt.services.release.dist_tags import (
    delete_npm_dist_tag_for_packages,
    set_npm_dist_tag_for_packages,
)
from rt.services.release.errors import ReleaseError
from rt.services.release.semver import SemVer
from rt.test.services.release_fakes import CORE, LABS, PACKAGES, FakePackageManager, v


@dataclass
class _FailingWriter:
    calls: list[str] = field(default_factory=list[str])

    def set_dist_tag(
        self, package_name: str, dist_tag: str, version: SemVer, registry: str | None
    ) -> Result[None, ReleaseError]:
        del dist_tag, version, registry
        self.calls.append(package_name)
        return Err(ReleaseError(kind="pm_failed", message=f"cannot tag {package_name}"))

    def delete_dist_tag(
        self, package_name: str, dist_tag: str, registry: str | None
    ) -> Result[None, ReleaseError]:
        del dist_tag, registry
        self.calls.append(package_name)
        return Err(ReleaseError(kind="pm_failed", message=f"cannot untag {package_name}"))


def test_experimental_packages_get_the_mapped_version() -> None:
    pm = FakePackageManager()
    console = MockConsole()
    result = set_npm_dist_tag_for_packages(
        pm, PACKAGES, dist_tag="latest", version=v("13.0.0"), registry=None, console=console
    )
    assert result == Ok(None)
    assert pm.dist_tags == [
        (CORE.name, "latest", "13.0.0"),
        (LABS.name, "latest", "0.1300.0"),
    ]
    assert console.find('Set "latest" NPM dist tag for all packages to v13.0.0.')


def test_experimental_packages_can_be_skipped() -> None:
    pm = FakePackageManager()
    set_npm_dist_tag_for_packages(
        pm,
        PACKAGES,
        dist_tag="v12-lts",
        version=v("12.2.5"),
        registry=None,
        console=MockConsole(),
        skip_experimental=True,
    )
    assert pm.dist_tags == [(CORE.name, "v12-lts", "12.2.5")]


def test_first_failure_stops_tagging() -> None:
    writer = _FailingWriter()
    result = set_npm_dist_tag_for_packages(
        writer, PACKAGES, dist_tag="next", version=v("13.0.0"), registry=None, console=MockConsole()
    )
    assert isinstance(result, Err)
    assert writer.calls == [CORE.name]


def test_delete_dist_tag() -> None:
    pm = FakePackageManager()
    result = delete_npm_dist_tag_for_packages(
        pm, PACKAGES, dist_tag="next", registry=None, console=MockConsole()
    )
    assert result == Ok(None)
    assert pm.deleted_tags == [(CORE.name, "next"), (LABS.name, "next")]

    writer = _FailingWriter()
    failed = delete_npm_dist_tag_for_packages(
        writer, PACKAGES, dist_tag="next", registry=None, console=MockConsole()
    )
    assert isinstance(failed, Err)
    assert failed.error.message == f"cannot untag {CORE.name}"
