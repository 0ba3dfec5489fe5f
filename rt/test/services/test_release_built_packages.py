from __future__ import annotations

from pathlib import Path

from rt.core.config import NpmPackage
from rt.core.result import Err, Ok
from rt.output.console import MockConsole
from rt.services.release.built_packages import (
    analyze_and_extend_built_packages,
    assert_integrity_of_built_packages,
    compute_directory_hash,
    verify_package_versions,
)
from rt.services.release.model import BuiltPackageWithInfo
from rt.services.release.semver import SemVer
from rt.test.services.release_fakes import CORE, LABS, PACKAGES, write_built_package


def _analyzed(tmp_path: Path, core: str, labs: str) -> list[BuiltPackageWithInfo]:
    built = [
        write_built_package(tmp_path, CORE.name, core),
        write_built_package(tmp_path, LABS.name, labs),
    ]
    result = analyze_and_extend_built_packages(built, PACKAGES, console=MockConsole())
    assert isinstance(result, Ok)
    return result.value


def test_directory_hash_is_stable(tmp_path: Path) -> None:
    pkg = write_built_package(tmp_path, CORE.name, "1.2.3")
    assert compute_directory_hash(pkg.output_path) == compute_directory_hash(pkg.output_path)


def test_directory_hash_does_not_depend_on_creation_order(tmp_path: Path) -> None:
    first = tmp_path / "first"
    second = tmp_path / "second"
    for base, names in ((first, ["a.js", "lib/b.js"]), (second, ["lib/b.js", "a.js"])):
        for name in names:
            path = base / name
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(name, encoding="utf-8")
    assert compute_directory_hash(first) == compute_directory_hash(second)


def test_directory_hash_changes_when_output_is_touched(tmp_path: Path) -> None:
    pkg = write_built_package(tmp_path, CORE.name, "1.2.3")
    before = compute_directory_hash(pkg.output_path)

    (pkg.output_path / "index.js").write_text("tampered", encoding="utf-8")
    modified = compute_directory_hash(pkg.output_path)
    assert modified != before

    (pkg.output_path / "extra.js").write_text("", encoding="utf-8")
    assert compute_directory_hash(pkg.output_path) != modified


def test_analyze_attaches_version_and_experimental_flag(tmp_path: Path) -> None:
    core, labs = _analyzed(tmp_path, "1.2.3", "0.102.3")
    assert core.version == SemVer(1, 2, 3)
    assert not core.experimental
    assert labs.experimental
    assert core.hash == compute_directory_hash(core.output_path)


def test_analyze_rejects_unknown_package(tmp_path: Path) -> None:
    built = [write_built_package(tmp_path, "@acme/unknown", "1.2.3")]
    console = MockConsole()
    result = analyze_and_extend_built_packages(built, PACKAGES, console=console)
    assert isinstance(result, Err)
    assert result.error.kind == "build_failed"
    assert "@acme/unknown" in result.error.message


def test_analyze_rejects_output_without_version(tmp_path: Path) -> None:
    pkg = write_built_package(tmp_path, CORE.name, "1.2.3")
    (pkg.output_path / "package.json").write_text("{}", encoding="utf-8")
    result = analyze_and_extend_built_packages(
        [pkg], [NpmPackage(CORE.name)], console=MockConsole()
    )
    assert isinstance(result, Err)
    assert result.error.kind == "build_failed"


def test_verify_package_versions_accepts_matching_build(tmp_path: Path) -> None:
    packages = _analyzed(tmp_path, "1.2.3", "0.102.3")
    assert isinstance(
        verify_package_versions(SemVer(1, 2, 3), packages, console=MockConsole()), Ok
    )


def test_verify_package_versions_rejects_mismatch(tmp_path: Path) -> None:
    packages = _analyzed(tmp_path, "1.2.3", "0.102.3")
    console = MockConsole()
    result = verify_package_versions(SemVer(1, 2, 4), packages, console=console)
    assert isinstance(result, Err)
    assert result.error.kind == "version_mismatch"
    assert CORE.name in result.error.message
    assert console.has_error()


def test_verify_package_versions_checks_experimental_mapping(tmp_path: Path) -> None:
    packages = _analyzed(tmp_path, "1.2.3", "1.2.3")
    result = verify_package_versions(SemVer(1, 2, 3), packages, console=MockConsole())
    assert isinstance(result, Err)
    assert LABS.name in result.error.message


def test_integrity_check_detects_modified_output(tmp_path: Path) -> None:
    packages = _analyzed(tmp_path, "1.2.3", "0.102.3")
    assert isinstance(assert_integrity_of_built_packages(packages), Ok)

    (packages[1].output_path / "index.js").write_text("tampered", encoding="utf-8")
    result = assert_integrity_of_built_packages(packages)
    assert isinstance(result, Err)
    assert result.error.kind == "integrity_violation"
    assert result.error.hint is not None
    assert LABS.name in result.error.hint
    assert CORE.name not in result.error.hint
