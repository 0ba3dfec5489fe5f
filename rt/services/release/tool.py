"""Interactive release run: pre-flight checks, action menu, perform, cleanup."""

from __future__ import annotations

from enum import Enum

from rt.core.errors import ErrorCode
from rt.core.result import Err, Ok, Result
from rt.output.prompt import Choice
from rt.services.release.actions import RELEASE_ACTIONS, ReleaseAction
from rt.services.release.actions.base import gh_failure
from rt.services.release.context import ReleaseContext
from rt.services.release.errors import ReleaseError
from rt.services.release.lts import lts_branches_from_package_info
from rt.services.release.model import ActiveReleaseTrains, NpmPackageInfo
from rt.services.release.print_trains import print_active_release_trains
from rt.services.release.trains import fetch_active_release_trains


class CompletionState(Enum):
    SUCCESS = 0
    FATAL_ERROR = 1
    MANUALLY_ABORTED = 2

    @property
    def exit_code(self) -> ErrorCode:
        match self:
            case CompletionState.SUCCESS:
                return ErrorCode.OK
            case CompletionState.MANUALLY_ABORTED:
                return ErrorCode.ABORTED
            case _:
                return ErrorCode.FATAL


def active_release_actions(
    active: ActiveReleaseTrains, ctx: ReleaseContext, npm_info: NpmPackageInfo
) -> list[ReleaseAction]:
    return [
        action(active, ctx, npm_info)
        for action in RELEASE_ACTIONS
        if action.is_active(active, ctx, npm_info)
    ]


class ReleaseTool:
    def __init__(self, ctx: ReleaseContext) -> None:
        self._ctx = ctx

    @property
    def _registry_name(self) -> str:
        return self._ctx.config.release.publish_registry or "default"

    def run(self) -> CompletionState:
        ctx = self._ctx
        console = ctx.console
        console.header("Release tool")
        console.print(f"Repository: {ctx.github.slug}")

        preflight = self._preflight()
        if isinstance(preflight, Err):
            self._report(preflight.error)
            return CompletionState.FATAL_ERROR
        if not self._verify_npm_login_state():
            return CompletionState.MANUALLY_ABORTED

        previous = ctx.git.get_current_branch_or_revision()
        if isinstance(previous, Err):
            console.error(f"Unable to determine the current branch: {previous.error.message}")
            return CompletionState.FATAL_ERROR

        try:
            result = self._select_and_perform()
        finally:
            self._cleanup(previous.value)

        if isinstance(result, Err):
            self._report(result.error)
            if result.error.is_user_aborted:
                return CompletionState.MANUALLY_ABORTED
            return CompletionState.FATAL_ERROR
        return CompletionState.SUCCESS

    def _report(self, error: ReleaseError) -> None:
        console = self._ctx.console
        if error.is_user_aborted:
            console.warning(error.message)
            return
        console.error(error.message)
        if error.hint:
            console.error(error.hint)
        console.error("Release action has been aborted due to fatal errors. See above.")

    # ------------------------------------------------------------------
    # checks

    def _preflight(self) -> Result[None, ReleaseError]:
        for check in (
            self._verify_no_uncommitted_changes,
            self._verify_running_from_next_branch,
            self._verify_no_shallow_repository,
        ):
            result = check()
            if isinstance(result, Err):
                return result
        return Ok(None)

    def _verify_no_uncommitted_changes(self) -> Result[None, ReleaseError]:
        if self._ctx.git.has_uncommitted_changes():
            return Err(
                ReleaseError(
                    kind="invariant_violation",
                    message="There are changes which are not committed and should be discarded.",
                )
            )
        return Ok(None)

    def _verify_running_from_next_branch(self) -> Result[None, ReleaseError]:
        next_branch = self._ctx.next_branch
        head = self._ctx.git.head_sha()
        if isinstance(head, Err):
            return Err(
                ReleaseError(
                    kind="git_failed", message="failed to read HEAD", hint=head.error.message
                )
            )
        upstream = self._ctx.github.get_branch_head(next_branch)
        if isinstance(upstream, Err):
            return Err(gh_failure(upstream.error, f'failed to read the head of "{next_branch}"'))
        if head.value != upstream.value:
            return Err(
                ReleaseError(
                    kind="invariant_violation",
                    message="Running release tool from an outdated local branch.",
                    hint=f'Please make sure you are running from the "{next_branch}" branch.',
                )
            )
        return Ok(None)

    def _verify_no_shallow_repository(self) -> Result[None, ReleaseError]:
        shallow = self._ctx.git.is_shallow_repo()
        if isinstance(shallow, Err):
            return Err(
                ReleaseError(
                    kind="git_failed",
                    message="failed to inspect the repository",
                    hint=shallow.error.message,
                )
            )
        if shallow.value:
            return Err(
                ReleaseError(
                    kind="invariant_violation",
                    message="The local repository is configured as shallow.",
                    hint=(
                        "Please convert the repository to a complete one by syncing with "
                        "upstream: https://git-scm.com/docs/git-fetch#Documentation/"
                        "git-fetch.txt---unshallow"
                    ),
                )
            )
        return Ok(None)

    def _verify_npm_login_state(self) -> bool:
        ctx = self._ctx
        registry = ctx.config.release.publish_registry
        if ctx.pm.is_logged_in(registry):
            return True
        ctx.console.warning(f"Not currently logged into NPM at the {self._registry_name} registry.")
        if not ctx.prompt.confirm("Would you like to log into NPM now?"):
            return False
        login = ctx.pm.login(registry)
        if isinstance(login, Err):
            self._report(login.error)
            return False
        return True

    # ------------------------------------------------------------------
    # menu

    def _select_and_perform(self) -> Result[None, ReleaseError]:
        ctx = self._ctx
        active = fetch_active_release_trains(ctx.github, next_branch=ctx.next_branch)
        if isinstance(active, Err):
            return active
        npm_info = ctx.registry.package_info()
        if isinstance(npm_info, Err):
            return npm_info

        print_active_release_trains(
            active.value,
            lts_branches_from_package_info(npm_info.value),
            npm_info.value,
            console=ctx.console,
        )

        actions = active_release_actions(active.value, ctx, npm_info.value)
        ctx.console.info("Please select the type of release you want to perform.")
        action = ctx.prompt.select(
            "Please select an action:",
            [Choice(label=a.description(), value=a) for a in actions],
        )
        result = action.perform()
        if isinstance(result, Ok):
            ctx.console.success(
                f"Release action has completed successfully: {action.description()}"
            )
        return result

    def _cleanup(self, previous: str) -> None:
        ctx = self._ctx
        if not ctx.git.checkout(previous, clean_state=True):
            ctx.console.warning(f'Could not restore the previously checked out "{previous}".')
        if ctx.pm.logout(ctx.config.release.publish_registry):
            ctx.console.warning(f"Still logged into NPM at the {self._registry_name} registry.")
