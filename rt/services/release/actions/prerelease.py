"""Pre-release cuts (``-next.N`` and ``-rc.N``) published under a non-latest dist tag."""

from __future__ import annotations

from abc import abstractmethod

from rt.core.result import Err, Ok, Result
from rt.services.release.actions.base import ReleaseAction, required_train
from rt.services.release.context import ReleaseContext
from rt.services.release.errors import ReleaseError
from rt.services.release.model import ActiveReleaseTrains, NpmPackageInfo, ReleaseTrain
from rt.services.release.semver import SemVer, is_first_next_prerelease


def is_unpublished_first_next(train: ReleaseTrain, npm_info: NpmPackageInfo) -> bool:
    """The branch carries ``X.Y.Z-next.0`` and it has not been released yet.

    This is the state right after a version bump: the bumped version itself is
    released instead of incrementing past it.
    """
    return is_first_next_prerelease(train.version) and not npm_info.is_published(train.version)


def release_candidate_version(version: SemVer) -> SemVer:
    return version.inc("prerelease", "rc")


class CutPrereleaseBase(ReleaseAction):
    npm_dist_tag = "next"

    @abstractmethod
    def release_train(self) -> ReleaseTrain: ...

    def should_use_existing_version(self) -> bool:
        return False

    def new_version(self) -> SemVer:
        train = self.release_train()
        if self.should_use_existing_version():
            return train.version
        return train.version.inc("prerelease")

    def release_notes_compare_version(self) -> SemVer:
        if self.should_use_existing_version():
            return self.active.latest.version
        return self.release_train().version

    def description(self) -> str:
        branch = self.release_train().branch_name
        return f'Cut a new pre-release for the "{branch}" branch (v{self.new_version()}).'

    def perform(self) -> Result[None, ReleaseError]:
        train = self.release_train()
        branch = train.branch_name
        notes = self._stage_merge_and_publish(
            self.new_version(),
            self.release_notes_compare_version(),
            branch,
            self.npm_dist_tag,
            show_as_latest=False,
        )
        if isinstance(notes, Err):
            return notes

        # Pre-releases cut from a version branch still need their notes in next.
        if branch != self.active.next.branch_name:
            return self._cherry_pick_changelog_into_next_branch(notes.value, branch)
        return Ok(None)


class CutNpmNextPrerelease(CutPrereleaseBase):
    """New ``next`` pre-release for the feature-freeze/RC train, or for next itself."""

    def release_train(self) -> ReleaseTrain:
        return self.active.release_candidate or self.active.next

    def should_use_existing_version(self) -> bool:
        train = self.release_train()
        return train == self.active.next and is_unpublished_first_next(train, self.npm_info)

    @staticmethod
    def is_active(
        active: ActiveReleaseTrains, ctx: ReleaseContext, npm_info: NpmPackageInfo
    ) -> bool:
        return True


class CutNpmNextReleaseCandidate(CutPrereleaseBase):
    """First release candidate for a train that is in feature-freeze."""

    def release_train(self) -> ReleaseTrain:
        return required_train(self.active.release_candidate, "release-candidate")

    def new_version(self) -> SemVer:
        return release_candidate_version(self.release_train().version)

    def description(self) -> str:
        branch = self.release_train().branch_name
        return f'Cut a first release-candidate for the "{branch}" branch (v{self.new_version()}).'

    @staticmethod
    def is_active(
        active: ActiveReleaseTrains, ctx: ReleaseContext, npm_info: NpmPackageInfo
    ) -> bool:
        return active.is_feature_freeze()
