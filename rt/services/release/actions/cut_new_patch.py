from __future__ import annotations

from rt.core.result import Err, Result
from rt.services.release.actions.base import ReleaseAction
from rt.services.release.context import ReleaseContext
from rt.services.release.errors import ReleaseError
from rt.services.release.model import ActiveReleaseTrains, NpmPackageInfo
from rt.services.release.semver import SemVer


class CutNewPatch(ReleaseAction):
    """Patch release of the latest train, published as ``latest``."""

    def _new_version(self) -> SemVer:
        return self.active.latest.version.inc("patch")

    def description(self) -> str:
        branch = self.active.latest.branch_name
        return f'Cut a new patch release for the "{branch}" branch (v{self._new_version()}).'

    def perform(self) -> Result[None, ReleaseError]:
        latest = self.active.latest
        notes = self._stage_merge_and_publish(
            self._new_version(),
            latest.version,
            latest.branch_name,
            "latest",
            show_as_latest=True,
        )
        if isinstance(notes, Err):
            return notes
        return self._cherry_pick_changelog_into_next_branch(notes.value, latest.branch_name)

    @staticmethod
    def is_active(
        active: ActiveReleaseTrains, ctx: ReleaseContext, npm_info: NpmPackageInfo
    ) -> bool:
        return True
