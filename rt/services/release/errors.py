from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

ReleaseErrorKind = Literal[
    "user_aborted",
    "gh_missing",
    "gh_auth_required",
    "gh_api_failed",
    "registry_failed",
    "git_failed",
    "pm_failed",
    "build_failed",
    "precheck_failed",
    "invalid_config",
    "invalid_trains",
    "invalid_input",
    "status_failed",
    "pr_not_merged",
    "integrity_violation",
    "lineage_violation",
    "version_mismatch",
    "invariant_violation",
    "publish_failed",
]


@dataclass(frozen=True, slots=True)
class ReleaseError:
    """Failure of a release step.

    ``user_aborted`` is the graceful outcome of a declined confirmation;
    every other kind is fatal and aborts the release.
    """

    kind: ReleaseErrorKind
    message: str
    hint: str | None = None

    @property
    def is_user_aborted(self) -> bool:
        return self.kind == "user_aborted"


def user_aborted(message: str = "Aborted by user.") -> ReleaseError:
    return ReleaseError(kind="user_aborted", message=message)
