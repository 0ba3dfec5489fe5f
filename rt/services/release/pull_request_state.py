from __future__ import annotations

import re
from typing import Protocol

from rt.core.result import Err, Ok, Result
from rt.core.structured import StrDict, get_bool, get_str
from rt.services.release.gh import CommitInfo, GhApiError


class PullRequestReader(Protocol):
    def get_pull_request(self, number: int) -> Result[StrDict, GhApiError]: ...

    def list_issue_events(self, number: int) -> Result[list[StrDict], GhApiError]: ...

    def get_commit(self, ref: str) -> Result[CommitInfo, GhApiError]: ...


def closes_pull_request(message: str, number: int) -> bool:
    """Whether a commit message closes ``#number`` with a GitHub closing keyword."""
    pattern = rf"(?:close[sd]?|fix(?:e[sd])?|resolve[sd]?):? #{number}(?!\d)"
    return re.search(pattern, message, re.IGNORECASE) is not None


def is_pull_request_merged(api: PullRequestReader, number: int) -> Result[bool, GhApiError]:
    """Merged through GitHub, or closed by a commit that landed out of band.

    Squash merges done by other tooling close the pull request without the
    ``merged`` flag; the event timeline is scanned newest first for the
    closing commit instead.
    """
    pr = api.get_pull_request(number)
    if isinstance(pr, Err):
        return pr
    if get_bool(pr.value, "merged"):
        return Ok(True)
    return _is_closed_with_associated_commit(api, number)


def _is_closed_with_associated_commit(
    api: PullRequestReader, number: int
) -> Result[bool, GhApiError]:
    events = api.list_issue_events(number)
    if isinstance(events, Err):
        return events

    for event in reversed(events.value):
        kind = get_str(event, "event")
        commit_id = get_str(event, "commit_id")
        if kind == "reopened":
            return Ok(False)
        if kind == "closed" and commit_id:
            return Ok(True)
        if kind == "referenced" and commit_id:
            commit = api.get_commit(commit_id)
            if isinstance(commit, Err):
                return commit
            if closes_pull_request(commit.value.message, number):
                return Ok(True)
    return Ok(False)
