from __future__ import annotations

from typing import Protocol

from rt.core.result import Err, Ok, Result
from rt.output.console import ConsoleProtocol
from rt.output.prompt import PromptProtocol
from rt.services.release.errors import ReleaseError
from rt.services.release.gh import GhApiError, api_failure
from rt.services.release.model import PullRequest
from rt.services.release.pull_request_state import PullRequestReader, is_pull_request_merged


class PullRequestMerger(PullRequestReader, Protocol):
    def merge_pull_request(
        self, number: int, *, method: str = "rebase"
    ) -> Result[bool, GhApiError]: ...


def _merged_or_false(
    github: PullRequestMerger, number: int, console: ConsoleProtocol
) -> Result[bool, ReleaseError]:
    state = is_pull_request_merged(github, number)
    if isinstance(state, Err):
        if state.error.status == 401:
            return Err(api_failure(state.error, f"failed to read pull request #{number}"))
        console.debug(f"Unable to determine if pull request #{number} has been merged.")
        console.debug(str(state.error))
        return Ok(False)
    return Ok(state.value)


def prompt_and_wait_for_merge(
    github: PullRequestMerger,
    pull_request: PullRequest,
    *,
    console: ConsoleProtocol,
    prompt: PromptProtocol,
) -> Result[None, ReleaseError]:
    """Block until the pull request is merged.

    Each confirmed iteration re-checks the merge state and otherwise makes a
    single rebase-merge attempt. API errors other than 401 are reported and
    the loop starts over: they are usually branch-protection races. There is
    no upper bound; the caretaker interrupts the process to give up.
    """
    number = pull_request.id
    console.newline()
    console.success(f"Pull request #{number} is sent out for review: {pull_request.url}")
    console.warning("Do not merge it manually. The tool will automatically merge it.")
    console.warning("The tool is not ensuring that all tests pass. Branch protection")
    console.warning("rules always apply, but other non-required checks can be skipped.")
    console.info("If you think it is ready (i.e. has the necessary approvals), you can continue")
    console.info("by confirming the prompt. The tool will then auto-merge the PR if possible.")

    while True:
        if not prompt.confirm(f"Do you want to continue with merging PR #{number}?"):
            continue

        console.info(f"Attempting to merge pull request #{number}..")
        already = _merged_or_false(github, number, console)
        if isinstance(already, Err):
            return already
        if already.value:
            break

        merged = github.merge_pull_request(number, method="rebase")
        if isinstance(merged, Err):
            if merged.error.status == 401:
                return Err(api_failure(merged.error, f"failed to merge pull request #{number}"))
            console.error(f"Pull request #{number} could not be merged.")
            console.error(f"{merged.error.message} ({merged.error.status})")
            continue
        if merged.value:
            break
        console.error(f"Pull request #{number} could not be merged.")

    console.success(f"Pull request #{number} has been merged.")
    return Ok(None)
