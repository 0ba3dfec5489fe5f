"""Exceptional minors: a minor cut from the latest major while next is a new major.

The branch is marked with ``EXCEPTIONAL_MINOR_MARKER`` in its package.json
and its pre-releases go to a dist tag nobody installs by accident.
"""

from __future__ import annotations

from rt.core.result import Err, Ok, Result
from rt.core.structured import StrDict
from rt.services.release.actions.base import PACKAGE_JSON, ReleaseAction, required_train
from rt.services.release.actions.prerelease import (
    CutPrereleaseBase,
    is_unpublished_first_next,
    release_candidate_version,
)
from rt.services.release.branches import EXCEPTIONAL_MINOR_MARKER
from rt.services.release.context import ReleaseContext
from rt.services.release.errors import ReleaseError
from rt.services.release.model import (
    ActiveReleaseTrains,
    NpmPackageInfo,
    ReleaseTrain,
    StagingOptions,
)
from rt.services.release.semver import SemVer

EXCEPTIONAL_MINOR_DIST_TAG = "do-not-use-exceptional-minor"


class _ExceptionalMinorPrereleaseBase(CutPrereleaseBase):
    npm_dist_tag = EXCEPTIONAL_MINOR_DIST_TAG

    def release_train(self) -> ReleaseTrain:
        return required_train(self.active.exceptional_minor, "exceptional-minor")


class CutExceptionalMinorPrerelease(_ExceptionalMinorPrereleaseBase):
    def should_use_existing_version(self) -> bool:
        return is_unpublished_first_next(self.release_train(), self.npm_info)

    def description(self) -> str:
        return f"Exceptional Minor: {super().description()}"

    @staticmethod
    def is_active(
        active: ActiveReleaseTrains, ctx: ReleaseContext, npm_info: NpmPackageInfo
    ) -> bool:
        return active.exceptional_minor is not None


class CutExceptionalMinorReleaseCandidate(_ExceptionalMinorPrereleaseBase):
    def new_version(self) -> SemVer:
        return release_candidate_version(self.release_train().version)

    def description(self) -> str:
        branch = self.release_train().branch_name
        return (
            f'Exceptional Minor: Cut a first release-candidate for the "{branch}" branch '
            f"(v{self.new_version()})."
        )

    @staticmethod
    def is_active(
        active: ActiveReleaseTrains, ctx: ReleaseContext, npm_info: NpmPackageInfo
    ) -> bool:
        em = active.exceptional_minor
        return em is not None and em.version.prerelease_tag == "next"


def _mark_exceptional_minor(pkg: StrDict) -> None:
    pkg[EXCEPTIONAL_MINOR_MARKER] = True


class PrepareExceptionalMinor(ReleaseAction):
    """Create ``M.(m+1).x`` from the latest branch and mark it as exceptional minor."""

    def _base(self) -> ReleaseTrain:
        return self.active.latest

    def _new_branch(self) -> str:
        v = self._base().version
        return f"{v.major}.{v.minor + 1}.x"

    def _new_version(self) -> SemVer:
        v = self._base().version
        return SemVer(v.major, v.minor + 1, 0, ("next", 0))

    def description(self) -> str:
        return (
            f'Prepare an exceptional minor based on the existing "{self._base().branch_name}" '
            f"branch ({self._new_branch()})."
        )

    def perform(self) -> Result[None, ReleaseError]:
        base_branch = self._base().branch_name
        new_branch = self._new_branch()

        sha = self._latest_commit_of_branch(base_branch)
        if isinstance(sha, Err):
            return sha
        gate = self._verify_passing_github_status(sha.value, base_branch)
        if isinstance(gate, Err):
            return gate
        checked = self._checkout_upstream_branch(base_branch)
        if isinstance(checked, Err):
            return checked
        local = self._create_local_branch_from_head(new_branch)
        if isinstance(local, Err):
            return local

        bumped = self._update_project_version(
            self._new_version(), StagingOptions(update_pkg_json=_mark_exceptional_minor)
        )
        if isinstance(bumped, Err):
            return bumped
        committed = self._create_commit(
            f"build: prepare exceptional minor branch: {new_branch}", [PACKAGE_JSON]
        )
        if isinstance(committed, Err):
            return committed
        pushed = self._push_head_to_remote_branch(new_branch)
        if isinstance(pushed, Err):
            return pushed

        self.ctx.console.success(f'Version branch "{new_branch}" created.')
        self.ctx.console.success("Exceptional minor release-train is now active.")
        return Ok(None)

    @staticmethod
    def is_active(
        active: ActiveReleaseTrains, ctx: ReleaseContext, npm_info: NpmPackageInfo
    ) -> bool:
        if active.exceptional_minor is not None:
            return False
        if active.release_candidate is not None:
            return active.release_candidate.is_major
        return active.next.is_major
