from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol

from rt.core.config import NpmPackage
from rt.core.result import Err, Ok, Result
from rt.output.console import ConsoleProtocol
from rt.services.release.errors import ReleaseError
from rt.services.release.semver import SemVer, create_experimental_semver


class DistTagWriter(Protocol):
    def set_dist_tag(
        self, package_name: str, dist_tag: str, version: SemVer, registry: str | None
    ) -> Result[None, ReleaseError]: ...

    def delete_dist_tag(
        self, package_name: str, dist_tag: str, registry: str | None
    ) -> Result[None, ReleaseError]: ...


def set_npm_dist_tag_for_packages(
    pm: DistTagWriter,
    packages: Iterable[NpmPackage],
    *,
    dist_tag: str,
    version: SemVer,
    registry: str | None,
    console: ConsoleProtocol,
    skip_experimental: bool = False,
) -> Result[None, ReleaseError]:
    """Point ``dist_tag`` at ``version`` for every package.

    Experimental packages are tagged at the experimental mapping of
    ``version``, or left alone when ``skip_experimental`` is set (LTS tags).
    """
    experimental_version = create_experimental_semver(version)
    for pkg in packages:
        if pkg.experimental and skip_experimental:
            console.debug(f"Skipping experimental package {pkg.name} for dist tag {dist_tag}.")
            continue
        target = experimental_version if pkg.experimental else version
        result = pm.set_dist_tag(pkg.name, dist_tag, target, registry)
        if isinstance(result, Err):
            return result
        console.debug(f"Set {pkg.name}@{target} as {dist_tag}.")
    console.success(f'Set "{dist_tag}" NPM dist tag for all packages to v{version}.')
    return Ok(None)


def delete_npm_dist_tag_for_packages(
    pm: DistTagWriter,
    packages: Iterable[NpmPackage],
    *,
    dist_tag: str,
    registry: str | None,
    console: ConsoleProtocol,
) -> Result[None, ReleaseError]:
    for pkg in packages:
        result = pm.delete_dist_tag(pkg.name, dist_tag, registry)
        if isinstance(result, Err):
            return result
        console.debug(f"Deleted {dist_tag} from {pkg.name}.")
    console.success(f'Deleted "{dist_tag}" NPM dist tag for all packages.')
    return Ok(None)
