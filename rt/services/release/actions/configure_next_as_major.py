from __future__ import annotations

from rt.core.result import Err, Result
from rt.services.release.actions.base import PACKAGE_JSON, ReleaseAction
from rt.services.release.actions.prerelease import is_unpublished_first_next
from rt.services.release.commit_message import next_branch_major_switch_commit_message
from rt.services.release.context import ReleaseContext
from rt.services.release.errors import ReleaseError
from rt.services.release.model import ActiveReleaseTrains, NpmPackageInfo
from rt.services.release.semver import SemVer


class ConfigureNextAsMajor(ReleaseAction):
    """Switch an unreleased minor on the next branch to the following major."""

    def _new_version(self) -> SemVer:
        return SemVer(self.active.next.version.major + 1, 0, 0, ("next", 0))

    def description(self) -> str:
        branch = self.active.next.branch_name
        return (
            f'Configure the "{branch}" branch to be released as major (v{self._new_version()}).'
        )

    def perform(self) -> Result[None, ReleaseError]:
        branch = self.active.next.branch_name
        new_version = self._new_version()

        sha = self._latest_commit_of_branch(branch)
        if isinstance(sha, Err):
            return sha
        gate = self._verify_passing_github_status(sha.value, branch)
        if isinstance(gate, Err):
            return gate
        checked = self._checkout_upstream_branch(branch)
        if isinstance(checked, Err):
            return checked
        bumped = self._update_project_version(new_version)
        if isinstance(bumped, Err):
            return bumped
        committed = self._create_commit(
            next_branch_major_switch_commit_message(new_version), [PACKAGE_JSON]
        )
        if isinstance(committed, Err):
            return committed

        pull_request = self._push_changes_to_fork_and_create_pull_request(
            branch,
            f"switch-next-to-major-{new_version}",
            f"Configure next branch to receive major changes for v{new_version}",
        )
        if isinstance(pull_request, Err):
            return pull_request
        self.ctx.console.success(
            f"Pull request for updating the {branch} branch has been created."
        )
        return self._wait_for_merge(pull_request.value)

    @staticmethod
    def is_active(
        active: ActiveReleaseTrains, ctx: ReleaseContext, npm_info: NpmPackageInfo
    ) -> bool:
        return not active.next.is_major and is_unpublished_first_next(active.next, npm_info)
