from __future__ import annotations

from rt.core.result import Err, Ok, Result
from rt.core.structured import StrDict
from rt.services.release.actions.base import ReleaseAction, required_train
from rt.services.release.actions.exceptional_minor import EXCEPTIONAL_MINOR_DIST_TAG
from rt.services.release.branches import EXCEPTIONAL_MINOR_MARKER
from rt.services.release.context import ReleaseContext
from rt.services.release.dist_tags import delete_npm_dist_tag_for_packages
from rt.services.release.errors import ReleaseError
from rt.services.release.lts import lts_dist_tag_of_major
from rt.services.release.model import (
    ActiveReleaseTrains,
    NpmPackageInfo,
    ReleaseTrain,
    StagingOptions,
)
from rt.services.release.semver import SemVer


def _drop_exceptional_minor_marker(pkg: StrDict) -> None:
    pkg.pop(EXCEPTIONAL_MINOR_MARKER, None)


class CutStable(ReleaseAction):
    """Turn the release-candidate (or exceptional minor) train into a stable release.

    A stable major is published as ``next``; it becomes ``latest`` later via
    ``TagRecentMajorAsLatest``, and the previous latest line gets its LTS tag.
    """

    def _train(self) -> ReleaseTrain:
        train = self.active.exceptional_minor or self.active.release_candidate
        return required_train(train, "release-candidate")

    def _is_exceptional_minor(self) -> bool:
        return self.active.exceptional_minor is not None

    def _new_version(self) -> SemVer:
        return self._train().version.without_prerelease()

    def _npm_dist_tag(self) -> str:
        return "next" if self._train().is_major else "latest"

    def description(self) -> str:
        branch = self._train().branch_name
        return (
            f'Cut a stable release for the "{branch}" branch - published as '
            f"`@{self._npm_dist_tag()}` (v{self._new_version()})."
        )

    def perform(self) -> Result[None, ReleaseError]:
        train = self._train()
        is_new_major = train.is_major
        if is_new_major and self._is_exceptional_minor():
            return Err(
                ReleaseError(
                    kind="invariant_violation",
                    message="Unexpected major release of an `exceptional-minor`.",
                )
            )

        branch = train.branch_name
        notes = self._stage_merge_and_publish(
            self._new_version(),
            self.active.latest.version,
            branch,
            self._npm_dist_tag(),
            show_as_latest=True,
            options=StagingOptions(update_pkg_json=_drop_exceptional_minor_marker),
        )
        if isinstance(notes, Err):
            return notes

        if self._is_exceptional_minor():
            deleted = self._delete_exceptional_minor_dist_tag()
            if isinstance(deleted, Err):
                return deleted

        if is_new_major:
            tagged = self._tag_previous_latest_as_lts()
            if isinstance(tagged, Err):
                return tagged

        return self._cherry_pick_changelog_into_next_branch(notes.value, branch)

    def _delete_exceptional_minor_dist_tag(self) -> Result[None, ReleaseError]:
        packages = self.ctx.pm.info()
        if isinstance(packages, Err):
            return packages
        return delete_npm_dist_tag_for_packages(
            self.ctx.pm,
            packages.value,
            dist_tag=EXCEPTIONAL_MINOR_DIST_TAG,
            registry=self.ctx.config.release.publish_registry,
            console=self.ctx.console,
        )

    def _tag_previous_latest_as_lts(self) -> Result[None, ReleaseError]:
        previous = self.active.latest
        checked = self._checkout_upstream_branch(previous.branch_name)
        if isinstance(checked, Err):
            return checked
        installed = self._install_dependencies()
        if isinstance(installed, Err):
            return installed
        tagged = self._set_dist_tag_for_checked_out_branch(
            lts_dist_tag_of_major(previous.version.major),
            previous.version,
            skip_experimental=True,
        )
        if isinstance(tagged, Err):
            return tagged
        return Ok(None)

    @staticmethod
    def is_active(
        active: ActiveReleaseTrains, ctx: ReleaseContext, npm_info: NpmPackageInfo
    ) -> bool:
        # An exceptional minor takes precedence over the release-candidate train.
        if active.exceptional_minor is not None:
            return active.exceptional_minor.version.prerelease_tag == "rc"
        if active.release_candidate is not None:
            return active.release_candidate.version.prerelease_tag == "rc"
        return False
