"""Releases for long-term support lines."""

from __future__ import annotations

from rt.core.result import Err, Ok, Result
from rt.output.prompt import Choice
from rt.services.release.actions.base import ReleaseAction
from rt.services.release.branches import version_branch_to_semver
from rt.services.release.context import ReleaseContext
from rt.services.release.errors import ReleaseError
from rt.services.release.lts import lts_branches_from_package_info, lts_dist_tag_of_major
from rt.services.release.model import ActiveReleaseTrains, LtsBranch, LtsBranches, NpmPackageInfo
from rt.services.release.semver import SemVer, parse_semver

SPECIAL_RELEASE_ACTIONS_ENV = "RT_SPECIAL_RELEASE_ACTIONS"


def _lts_choice(branch: LtsBranch) -> Choice[LtsBranch]:
    return Choice(label=f"v{branch.version.major} (from {branch.name})", value=branch)


class CutLongTermSupportPatch(ReleaseAction):
    """Patch release for a branch that still carries a ``vN-lts`` dist tag."""

    def _lts_branches(self) -> LtsBranches:
        return lts_branches_from_package_info(self.npm_info)

    def description(self) -> str:
        active = len(self._lts_branches().active)
        return f"Cut a new release for an active LTS branch ({active} active)."

    def perform(self) -> Result[None, ReleaseError]:
        branch = self._prompt_for_target_lts_branch()
        if isinstance(branch, Err):
            return branch
        lts = branch.value

        notes = self._stage_merge_and_publish(
            lts.version.inc("patch"),
            lts.version,
            lts.name,
            lts.npm_dist_tag,
            show_as_latest=False,
        )
        if isinstance(notes, Err):
            return notes
        return self._cherry_pick_changelog_into_next_branch(notes.value, lts.name)

    def _prompt_for_target_lts_branch(self) -> Result[LtsBranch, ReleaseError]:
        branches = self._lts_branches()
        if not branches.active and not branches.inactive:
            return Err(
                ReleaseError(
                    kind="invalid_input",
                    message="No LTS branches are published to the registry.",
                )
            )

        choices: list[Choice[LtsBranch | None]] = [_lts_choice(b) for b in branches.active]
        if branches.inactive:
            choices.append(Choice(label="Inactive LTS versions (not recommended)", value=None))
        selected = self.ctx.prompt.select(
            "Please select a version for which you want to cut an LTS patch", choices
        )
        if selected is not None:
            return Ok(selected)

        return Ok(
            self.ctx.prompt.select(
                "Please select an inactive LTS version for which you want to cut an LTS patch",
                [_lts_choice(b) for b in branches.inactive],
            )
        )

    @staticmethod
    def is_active(
        active: ActiveReleaseTrains, ctx: ReleaseContext, npm_info: NpmPackageInfo
    ) -> bool:
        return True


class SpecialCutLongTermSupportMinor(ReleaseAction):
    """New minor on an LTS line. Hidden unless special release actions are enabled."""

    def description(self) -> str:
        return "SPECIAL: Cut a new release for an LTS minor."

    def perform(self) -> Result[None, ReleaseError]:
        console = self.ctx.console
        branch = self.ctx.prompt.input("Please specify the target LTS branch:").strip()
        branch_version = version_branch_to_semver(branch)
        if branch_version is None:
            console.error("Invalid release branch specified.")
            return Err(
                ReleaseError(
                    kind="invalid_input",
                    message="Invalid release branch specified.",
                    hint=f"expected <major>.<minor>.x, got {branch!r}",
                )
            )

        raw_compare = self.ctx.prompt.input("Compare version for release")
        compare_version = parse_semver(raw_compare)
        if compare_version is None:
            console.error("Invalid compare version specified.")
            return Err(
                ReleaseError(
                    kind="invalid_input",
                    message="Invalid compare version specified.",
                    hint=raw_compare,
                )
            )

        new_version = SemVer(branch_version.major, branch_version.minor, 0)
        notes = self._stage_merge_and_publish(
            new_version,
            compare_version,
            branch,
            lts_dist_tag_of_major(new_version.major),
            show_as_latest=False,
        )
        if isinstance(notes, Err):
            return notes
        return self._cherry_pick_changelog_into_next_branch(notes.value, branch)

    @staticmethod
    def is_active(
        active: ActiveReleaseTrains, ctx: ReleaseContext, npm_info: NpmPackageInfo
    ) -> bool:
        return ctx.env.get(SPECIAL_RELEASE_ACTIONS_ENV) == "1"
