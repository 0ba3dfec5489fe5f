"""Derivation of the active release trains.

Versions are read from the code host rather than the local clone so a
stale checkout can never skew the result. Any inconsistency between the
branches is a fatal configuration error; nothing here is retried.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

from rt.core.result import Err, Ok, Result
from rt.core.structured import StrDict, get_str
from rt.services.release.branches import EXCEPTIONAL_MINOR_MARKER, select_version_branches
from rt.services.release.errors import ReleaseError
from rt.services.release.model import ActiveReleaseTrains, ReleaseTrain
from rt.services.release.semver import SemVer, parse_semver


class VersionBranchSource(Protocol):
    """Read access to the upstream repository's branches."""

    def list_protected_branches(self) -> Result[list[str], ReleaseError]: ...

    def get_package_json(self, ref: str) -> Result[StrDict, ReleaseError]: ...


@dataclass(frozen=True, slots=True)
class BranchVersionInfo:
    version: SemVer
    is_exceptional_minor: bool


@dataclass(frozen=True, slots=True)
class _TrainChecks:
    can_have_exceptional_minor: Callable[[ReleaseTrain | None], bool]
    is_valid_release_candidate: Callable[[SemVer], bool]
    is_valid_exceptional_minor: Callable[[SemVer, ReleaseTrain | None], bool]


def _invalid(message: str) -> Err[ReleaseError]:
    return Err(ReleaseError(kind="invalid_trains", message=message))


def read_branch_version_info(
    source: VersionBranchSource, branch: str
) -> Result[BranchVersionInfo, ReleaseError]:
    pkg = source.get_package_json(branch)
    if isinstance(pkg, Err):
        return pkg
    raw = get_str(pkg.value, "version")
    version = parse_semver(raw) if raw is not None else None
    if version is None:
        return _invalid(f"Invalid version detected in following branch: {branch}.")
    return Ok(
        BranchVersionInfo(
            version=version,
            is_exceptional_minor=pkg.value.get(EXCEPTIONAL_MINOR_MARKER) is True,
        )
    )


def _checks_for_next(next_version: SemVer) -> tuple[list[int], _TrainChecks]:
    n = next_version.major
    if next_version.minor == 0:
        return [n - 1, n - 2], _TrainChecks(
            can_have_exceptional_minor=lambda rc: rc is None or rc.is_major,
            is_valid_release_candidate=lambda v: v.major == n - 1,
            is_valid_exceptional_minor=lambda v, rc: (
                v.major == (n if rc is None else rc.version.major) - 1
            ),
        )
    if next_version.minor == 1:
        return [n, n - 1], _TrainChecks(
            can_have_exceptional_minor=lambda rc: rc is not None and rc.is_major,
            is_valid_release_candidate=lambda v: v.major == n,
            is_valid_exceptional_minor=lambda v, rc: (
                rc is not None and v.major == rc.version.major - 1
            ),
        )
    return [n], _TrainChecks(
        can_have_exceptional_minor=lambda rc: False,
        is_valid_release_candidate=lambda v: v.major == n,
        is_valid_exceptional_minor=lambda v, rc: False,
    )


def derive_active_release_trains(
    *,
    next_train: ReleaseTrain,
    branch_names: list[str],
    read_info: Callable[[str], Result[BranchVersionInfo, ReleaseError]],
) -> Result[ActiveReleaseTrains, ReleaseError]:
    """Classify version branches into latest / release-candidate / exceptional minor.

    Branches are scanned newest first. Exceptional minors and prerelease
    (``next``/``rc``) branches are collected until the first stable branch,
    which becomes ``latest``.
    """
    majors, checks = _checks_for_next(next_train.version)
    branches = select_version_branches(branch_names, majors=majors)
    next_branch = next_train.branch_name
    next_train_version = SemVer(next_train.version.major, next_train.version.minor, 0)

    latest: ReleaseTrain | None = None
    release_candidate: ReleaseTrain | None = None
    exceptional_minor: ReleaseTrain | None = None

    for name, parsed in branches:
        if parsed > next_train_version:
            return _invalid(
                f'Discovered unexpected version-branch "{name}" for a release-train that is '
                f'more recent than the release-train currently in the "{next_branch}" branch. '
                "Please either delete the branch if created by accident, or update the outdated "
                f"version in the next branch ({next_branch})."
            )
        if parsed.same_precedence(next_train_version):
            return _invalid(
                f'Discovered unexpected version-branch "{name}" for a release-train that is '
                f'already active in the "{next_branch}" branch. Please either delete the branch '
                f"if created by accident, or update the version in the next branch ({next_branch})."
            )

        info = read_info(name)
        if isinstance(info, Err):
            return info
        version = info.value.version
        train = ReleaseTrain(branch_name=name, version=version)

        if info.value.is_exceptional_minor:
            if exceptional_minor is not None:
                return _invalid(
                    "Unable to determine latest release-train. Found an additional exceptional "
                    f'minor version branch: "{name}". Already discovered: '
                    f"{exceptional_minor.branch_name}."
                )
            if not checks.can_have_exceptional_minor(release_candidate):
                return _invalid(
                    "Unable to determine latest release-train. Found an unexpected exceptional "
                    f'minor version branch: "{name}". No exceptional minor is currently allowed.'
                )
            if not checks.is_valid_exceptional_minor(version, release_candidate):
                return _invalid(
                    "Unable to determine latest release-train. Found an invalid exceptional "
                    f'minor version branch: "{name}". Invalid version: {version}.'
                )
            exceptional_minor = train
            continue

        if version.prerelease_tag in ("rc", "next"):
            if exceptional_minor is not None:
                return _invalid(
                    "Unable to determine latest release-train. Discovered a "
                    f"feature-freeze/release-candidate version branch ({name}) that is older "
                    f"than an in-progress exceptional minor ({exceptional_minor.branch_name})."
                )
            if release_candidate is not None:
                return _invalid(
                    "Unable to determine latest release-train. Found two consecutive "
                    "pre-release version branches. No exceptional minors are allowed currently, "
                    "and there cannot be multiple feature-freeze/release-candidate branches: "
                    f'"{name}".'
                )
            if not checks.is_valid_release_candidate(version):
                return _invalid(
                    "Discovered unexpected old feature-freeze/release-candidate branch. Expected "
                    "no version-branch in feature-freeze/release-candidate mode for "
                    f"v{version.major}."
                )
            release_candidate = train
            continue

        latest = train
        break

    if latest is None:
        considered = ", ".join(name for name, _ in branches)
        return _invalid(
            "Unable to determine the latest release-train. The following branches "
            f"have been considered: [{considered}]"
        )

    return Ok(
        ActiveReleaseTrains(
            latest=latest,
            next=next_train,
            release_candidate=release_candidate,
            exceptional_minor=exceptional_minor,
        )
    )


def fetch_active_release_trains(
    source: VersionBranchSource, *, next_branch: str
) -> Result[ActiveReleaseTrains, ReleaseError]:
    """Fetch the next branch version and all protected version branches, then classify."""
    next_info = read_branch_version_info(source, next_branch)
    if isinstance(next_info, Err):
        return next_info
    next_train = ReleaseTrain(branch_name=next_branch, version=next_info.value.version)

    branches = source.list_protected_branches()
    if isinstance(branches, Err):
        return branches

    return derive_active_release_trains(
        next_train=next_train,
        branch_names=branches.value,
        read_info=lambda name: read_branch_version_info(source, name),
    )
