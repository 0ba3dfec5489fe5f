"""Integrity anchor for built release output.

Each built package directory is digested right after the build. The digest
is recomputed immediately before publishing; any difference means the output
was modified on disk after it was staged, and nothing is published.
"""

from __future__ import annotations

import hashlib
from collections.abc import Iterable
from pathlib import Path

from rt.core.config import NpmPackage
from rt.core.result import Err, Ok, Result
from rt.core.structured import get_str
from rt.output.console import ConsoleProtocol
from rt.platform.files import read_json_object
from rt.services.release.errors import ReleaseError
from rt.services.release.model import BuiltPackage, BuiltPackageWithInfo
from rt.services.release.semver import SemVer, create_experimental_semver, parse_semver


def _sha256_file(path: Path) -> str:
    h = hashlib.sha256()
    with path.open("rb") as f:
        for chunk in iter(lambda: f.read(1024 * 1024), b""):
            h.update(chunk)
    return h.hexdigest()


def compute_directory_hash(directory: Path) -> str:
    """Digest of every file below ``directory``: relative path plus content hash.

    Files are visited in sorted relative-path order so the digest does not
    depend on filesystem iteration order.
    """
    h = hashlib.sha256()
    files = sorted(p for p in directory.rglob("*") if p.is_file())
    for path in files:
        rel = path.relative_to(directory).as_posix()
        h.update(rel.encode("utf-8"))
        h.update(b"\0")
        h.update(_sha256_file(path).encode("ascii"))
        h.update(b"\n")
    return h.hexdigest()


def _read_output_version(output_path: Path) -> SemVer | None:
    loaded = read_json_object(output_path / "package.json")
    raw = get_str(loaded.value, "version") if isinstance(loaded, Ok) else None
    return parse_semver(raw) if raw is not None else None


def analyze_and_extend_built_packages(
    built: Iterable[BuiltPackage],
    npm_packages: Iterable[NpmPackage],
    *,
    console: ConsoleProtocol,
) -> Result[list[BuiltPackageWithInfo], ReleaseError]:
    """Attach version, experimental flag and content digest to built packages."""
    infos = {p.name: p for p in npm_packages}
    out: list[BuiltPackageWithInfo] = []
    for pkg in built:
        info = infos.get(pkg.name)
        if info is None:
            console.debug(f"known packages: {', '.join(sorted(infos))}")
            return Err(
                ReleaseError(
                    kind="build_failed",
                    message=f'Could not find package information for built package: "{pkg.name}".',
                )
            )
        version = _read_output_version(pkg.output_path)
        if version is None:
            return Err(
                ReleaseError(
                    kind="build_failed",
                    message=f'Built package "{pkg.name}" has no readable package.json version.',
                    hint=str(pkg.output_path / "package.json"),
                )
            )
        out.append(
            BuiltPackageWithInfo(
                name=pkg.name,
                output_path=pkg.output_path,
                version=version,
                experimental=info.experimental,
                hash=compute_directory_hash(pkg.output_path),
            )
        )
    return Ok(out)


def assert_integrity_of_built_packages(
    packages: Iterable[BuiltPackageWithInfo],
) -> Result[None, ReleaseError]:
    modified = [p.name for p in packages if compute_directory_hash(p.output_path) != p.hash]
    if modified:
        return Err(
            ReleaseError(
                kind="integrity_violation",
                message="Release output has been modified locally since it was built.",
                hint=f"The following packages changed: {', '.join(modified)}",
            )
        )
    return Ok(None)


def verify_package_versions(
    version: SemVer,
    packages: Iterable[BuiltPackageWithInfo],
    *,
    console: ConsoleProtocol,
) -> Result[None, ReleaseError]:
    """Every built package must carry the release version (experimental ones its mapping)."""
    experimental_version = create_experimental_semver(version)
    for pkg in packages:
        expected = experimental_version if pkg.experimental else version
        if not pkg.version.same_precedence(expected):
            console.error(f"The built package version does not match for: {pkg.name}.")
            console.error(f"  Actual version:   {pkg.version}")
            console.error(f"  Expected version: {expected}")
            return Err(
                ReleaseError(
                    kind="version_mismatch",
                    message=f"The built package version does not match for: {pkg.name}.",
                    hint=f"expected {expected}, got {pkg.version}",
                )
            )
    return Ok(None)
