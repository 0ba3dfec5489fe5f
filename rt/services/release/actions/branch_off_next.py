"""Move the next train into its own version branch (feature-freeze or release-candidate).

A ``M.m.x`` branch is created from next and pushed upstream, a pre-release
is staged and published from it, and next is then bumped to the following
minor with the new changelog entry cherry-picked.
"""

from __future__ import annotations

from abc import abstractmethod
from dataclasses import replace
from typing import Literal

from rt.core.result import Err, Ok, Result
from rt.services.release.actions.base import PACKAGE_JSON, ReleaseAction, StagingPhase
from rt.services.release.actions.prerelease import CutNpmNextPrerelease, release_candidate_version
from rt.services.release.commit_message import (
    next_branch_bump_commit_message,
    release_notes_cherry_pick_commit_message,
)
from rt.services.release.context import ReleaseContext
from rt.services.release.errors import ReleaseError
from rt.services.release.model import (
    ActiveReleaseTrains,
    NpmPackageInfo,
    PullRequest,
    ReleaseNotes,
)
from rt.services.release.renovate import update_renovate_config
from rt.services.release.semver import SemVer

Phase = Literal["feature-freeze", "release-candidate"]


class BranchOffNextBase(ReleaseAction):
    @property
    @abstractmethod
    def new_phase_name(self) -> Phase: ...

    def _next_prerelease(self) -> CutNpmNextPrerelease:
        # What a plain "next" pre-release would cut if no RC train existed.
        trains = replace(self.active, release_candidate=None)
        return CutNpmNextPrerelease(trains, self.ctx, self.npm_info)

    def new_version(self) -> SemVer:
        if self.new_phase_name == "feature-freeze":
            return self._next_prerelease().new_version()
        return release_candidate_version(self.active.next.version)

    def description(self) -> str:
        return (
            f'Move the "{self.active.next.branch_name}" branch into {self.new_phase_name} '
            f"phase (v{self.new_version()})."
        )

    def perform(self) -> Result[None, ReleaseError]:
        next_branch = self.active.next.branch_name
        compare_version = self._next_prerelease().release_notes_compare_version()
        new_version = self.new_version()
        new_branch = f"{new_version.major}.{new_version.minor}.x"

        before_sha = self._latest_commit_of_branch(next_branch)
        if isinstance(before_sha, Err):
            return before_sha
        gate = self._verify_passing_github_status(before_sha.value, next_branch)
        if isinstance(gate, Err):
            return gate
        created = self._create_new_version_branch_from_next(new_branch)
        if isinstance(created, Err):
            return created

        staged = self._stage_version_for_branch_and_create_pull_request(
            new_version, compare_version, new_branch
        )
        if isinstance(staged, Err):
            return staged
        pull_request, notes, built = staged.value

        merged = self._wait_for_merge(pull_request)
        if isinstance(merged, Err):
            return merged
        published = self._publish(
            tuple(built), notes, before_sha.value, new_branch, "next", show_as_latest=False
        )
        if isinstance(published, Err):
            return published

        next_update = self._create_next_branch_update_pull_request(notes, new_version)
        if isinstance(next_update, Err):
            return next_update
        merged = self._wait_for_merge(next_update.value)
        if isinstance(merged, Err):
            return merged
        self._advance(StagingPhase.CHANGELOG_PROPAGATED)
        return Ok(None)

    def _create_new_version_branch_from_next(self, new_branch: str) -> Result[None, ReleaseError]:
        checked = self._checkout_upstream_branch(self.active.next.branch_name)
        if isinstance(checked, Err):
            return checked
        local = self._create_local_branch_from_head(new_branch)
        if isinstance(local, Err):
            return local
        pushed = self._push_head_to_remote_branch(new_branch)
        if isinstance(pushed, Err):
            return pushed
        self._advance(StagingPhase.BRANCH_CHECKED_OUT)
        self.ctx.console.success(f'Version branch "{new_branch}" created.')
        return Ok(None)

    def _create_next_branch_update_pull_request(
        self, notes: ReleaseNotes, new_version: SemVer
    ) -> Result[PullRequest, ReleaseError]:
        """Bump next to the following minor and cherry-pick the new changelog entry."""
        next_branch = self.active.next.branch_name
        current = self.active.next.version
        new_next_version = SemVer(current.major, current.minor + 1, 0, ("next", 0))

        checked = self._checkout_upstream_branch(next_branch)
        if isinstance(checked, Err):
            return checked
        bumped = self._update_project_version(new_next_version)
        if isinstance(bumped, Err):
            return bumped
        committed = self._create_commit(
            next_branch_bump_commit_message(new_next_version), [PACKAGE_JSON]
        )
        if isinstance(committed, Err):
            return committed

        changelog = self._prepend_release_notes_to_changelog(notes)
        if isinstance(changelog, Err):
            return changelog
        files = [self._changelog_file()]
        renovate = update_renovate_config(
            self.ctx.project_dir,
            next_branch=next_branch,
            new_branch=f"{new_version.major}.{new_version.minor}.x",
            console=self.ctx.console,
        )
        if isinstance(renovate, Err):
            return renovate
        if renovate.value is not None:
            files.append(renovate.value)
        committed = self._create_commit(
            release_notes_cherry_pick_commit_message(notes.version), files
        )
        if isinstance(committed, Err):
            return committed

        body = (
            f'The previous "next" release-train has moved into the {self.new_phase_name} '
            "phase. This PR updates the next branch to the subsequent release-train.\n\n"
            f"Also this PR cherry-picks the changelog for v{new_version} into the "
            f"{next_branch} branch so that the changelog is up to date."
        )
        pull_request = self._push_changes_to_fork_and_create_pull_request(
            next_branch,
            f"next-release-train-{new_next_version}",
            f'Update next branch to reflect new release-train "v{new_next_version}".',
            body,
        )
        if isinstance(pull_request, Err):
            return pull_request
        self.ctx.console.success(
            f'Pull request for updating the "{next_branch}" branch has been created.'
        )
        return pull_request


class MoveNextIntoFeatureFreeze(BranchOffNextBase):
    @property
    def new_phase_name(self) -> Phase:
        return "feature-freeze"

    @staticmethod
    def is_active(
        active: ActiveReleaseTrains, ctx: ReleaseContext, npm_info: NpmPackageInfo
    ) -> bool:
        # Only a major goes through feature-freeze; minors move straight to RC.
        return active.release_candidate is None and active.next.is_major


class MoveNextIntoReleaseCandidate(BranchOffNextBase):
    @property
    def new_phase_name(self) -> Phase:
        return "release-candidate"

    @staticmethod
    def is_active(
        active: ActiveReleaseTrains, ctx: ReleaseContext, npm_info: NpmPackageInfo
    ) -> bool:
        return active.release_candidate is None and not active.next.is_major
