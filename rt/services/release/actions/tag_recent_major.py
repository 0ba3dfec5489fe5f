from __future__ import annotations

from rt.core.result import Err, Ok, Result
from rt.services.release.actions.base import ReleaseAction, gh_failure
from rt.services.release.context import ReleaseContext
from rt.services.release.errors import ReleaseError
from rt.services.release.model import ActiveReleaseTrains, NpmPackageInfo
from rt.services.release.semver import SemVer, parse_semver, release_tag_for_version


class TagRecentMajorAsLatest(ReleaseAction):
    """Promote a major that was published as ``next`` to ``latest``.

    Active while the latest branch carries ``X.0.0`` but the registry
    ``latest`` tag still points at major ``X-1``.
    """

    def description(self) -> str:
        return f'Retag recently published major v{self.active.latest.version} as "latest" in NPM.'

    def perform(self) -> Result[None, ReleaseError]:
        latest = self.active.latest
        updated = self._update_github_release_entry_to_stable(latest.version)
        if isinstance(updated, Err):
            return updated
        checked = self._checkout_upstream_branch(latest.branch_name)
        if isinstance(checked, Err):
            return checked
        installed = self._install_dependencies()
        if isinstance(installed, Err):
            return installed
        return self._set_dist_tag_for_checked_out_branch("latest", latest.version)

    def _update_github_release_entry_to_stable(self, version: SemVer) -> Result[None, ReleaseError]:
        tag = release_tag_for_version(version)
        release_id = self.ctx.github.get_release_id_by_tag(tag)
        if isinstance(release_id, Err):
            return Err(gh_failure(release_id.error, f'failed to look up the "{tag}" release'))
        updated = self.ctx.github.update_release(release_id.value, prerelease=False)
        if isinstance(updated, Err):
            return Err(gh_failure(updated.error, f'failed to mark the "{tag}" release as stable'))
        self.ctx.console.success(f"Marked the v{version} GitHub release as stable.")
        return Ok(None)

    @staticmethod
    def is_active(
        active: ActiveReleaseTrains, ctx: ReleaseContext, npm_info: NpmPackageInfo
    ) -> bool:
        version = active.latest.version
        if version.minor != 0 or version.patch != 0:
            return False
        npm_latest = parse_semver(npm_info.dist_tags.get("latest", ""))
        return npm_latest is not None and npm_latest.major == version.major - 1
