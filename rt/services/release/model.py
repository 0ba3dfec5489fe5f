from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

from rt.core.structured import StrDict
from rt.services.release.semver import SemVer

GithubStatus = Literal["passing", "pending", "failing"]
PackageJsonMutator = Callable[[StrDict], None]


@dataclass(frozen=True, slots=True)
class ReleaseTrain:
    """A maintained branch and the version currently in its package.json."""

    branch_name: str
    version: SemVer

    @property
    def is_major(self) -> bool:
        return self.version.minor == 0 and self.version.patch == 0


@dataclass(frozen=True, slots=True)
class ActiveReleaseTrains:
    latest: ReleaseTrain
    next: ReleaseTrain
    release_candidate: ReleaseTrain | None = None
    exceptional_minor: ReleaseTrain | None = None

    def is_feature_freeze(self) -> bool:
        rc = self.release_candidate
        return rc is not None and rc.version.prerelease_tag == "next"


@dataclass(frozen=True, slots=True)
class BuiltPackage:
    """A package produced by the project build command."""

    name: str
    output_path: Path


@dataclass(frozen=True, slots=True)
class BuiltPackageWithInfo:
    """A built package with the data needed to publish it safely.

    ``hash`` is the digest of ``output_path`` captured at staging time; it is
    compared against a fresh digest right before the package is published.
    """

    name: str
    output_path: Path
    version: SemVer
    experimental: bool
    hash: str


@dataclass(frozen=True, slots=True)
class Fork:
    owner: str
    name: str


@dataclass(frozen=True, slots=True)
class PullRequest:
    id: int
    url: str
    fork: Fork
    fork_branch: str


@dataclass(frozen=True, slots=True)
class StagingOptions:
    """Variant-specific tweaks to the generic staging routine.

    ``update_pkg_json`` runs on the parsed package.json after the version has
    been set, before the file is written back.
    """

    update_pkg_json: PackageJsonMutator | None = None


@dataclass(frozen=True, slots=True)
class ReleaseNotes:
    version: SemVer
    markdown: str
    github_release_body: str

    @property
    def url_fragment(self) -> str:
        return self.version.format()


@dataclass(frozen=True, slots=True)
class StagingResult:
    pull_request: PullRequest
    release_notes: ReleaseNotes
    built_packages: tuple[BuiltPackageWithInfo, ...]
    before_staging_sha: str


@dataclass(frozen=True, slots=True)
class LtsBranch:
    name: str
    version: SemVer
    npm_dist_tag: str


@dataclass(frozen=True, slots=True)
class LtsBranches:
    active: tuple[LtsBranch, ...] = ()
    inactive: tuple[LtsBranch, ...] = ()


@dataclass(frozen=True, slots=True)
class NpmPackageInfo:
    """Registry document of the representative package (subset we read)."""

    dist_tags: dict[str, str] = field(default_factory=dict[str, str])
    versions: frozenset[str] = frozenset()
    time: dict[str, str] = field(default_factory=dict[str, str])

    def is_published(self, version: SemVer) -> bool:
        return version.format() in self.versions
