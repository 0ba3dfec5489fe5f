from __future__ import annotations

from pathlib import Path

from rt.core.errors import ErrorCode
from rt.services.release.tool import CompletionState, ReleaseTool
from rt.test.services.release_fakes import (
    CORE,
    LABS,
    Harness,
    make_harness,
    write_built_package,
)

REGISTRY_DOC = {
    "dist-tags": {"latest": "12.1.3", "next": "12.2.0-next.2"},
    "versions": {"12.1.3": {}, "12.2.0-next.2": {}},
    "time": {},
}


def _harness(tmp_path: Path, answers: list[object] | None = None) -> Harness:
    h = make_harness(
        tmp_path,
        answers=answers,
        heads={"main": "sha-main", "12.1.x": "sha-1213"},
        project_version="12.2.0-next.2",
        registry_doc=REGISTRY_DOC,
    )
    h.github.package_jsons = {
        "main": {"version": "12.2.0-next.2"},
        "12.1.x": {"version": "12.1.3"},
    }
    return h


def test_exit_codes() -> None:
    assert CompletionState.SUCCESS.exit_code == ErrorCode.OK
    assert CompletionState.FATAL_ERROR.exit_code == ErrorCode.FATAL
    assert CompletionState.MANUALLY_ABORTED.exit_code == ErrorCode.ABORTED


# =============================================================================
# Pre-flight
# =============================================================================


def test_uncommitted_changes_are_fatal(tmp_path: Path) -> None:
    h = _harness(tmp_path)
    h.git.uncommitted = True

    assert ReleaseTool(h.ctx).run() is CompletionState.FATAL_ERROR
    assert h.console.find("not committed")
    assert h.prompt.asked == []
    assert h.pm.logouts == 0


def test_outdated_local_branch_is_fatal(tmp_path: Path) -> None:
    h = _harness(tmp_path)
    h.git.head = "sha-old"

    assert ReleaseTool(h.ctx).run() is CompletionState.FATAL_ERROR
    assert h.console.find("outdated local branch")
    assert h.console.find('running from the "main" branch')


def test_shallow_repository_is_fatal(tmp_path: Path) -> None:
    h = _harness(tmp_path)
    h.git.shallow = True

    assert ReleaseTool(h.ctx).run() is CompletionState.FATAL_ERROR
    assert h.console.find("--unshallow")


def test_declined_npm_login_aborts(tmp_path: Path) -> None:
    h = _harness(tmp_path, answers=[False])
    h.pm.logged_in = False

    assert ReleaseTool(h.ctx).run() is CompletionState.MANUALLY_ABORTED
    assert h.prompt.asked == ["Would you like to log into NPM now?"]
    assert h.pm.logins == 0
    assert h.git.checkouts == []


# =============================================================================
# Run
# =============================================================================


def test_cleanup_runs_after_failure(tmp_path: Path) -> None:
    h = _harness(tmp_path, answers=[True])
    h.pm.logged_in = False
    h.github.package_jsons = {}

    assert ReleaseTool(h.ctx).run() is CompletionState.FATAL_ERROR
    assert h.pm.logins == 1
    assert h.git.checkouts == ["main"]
    assert h.pm.logouts == 1
    assert h.console.find("Release action has been aborted due to fatal errors.")


def test_still_logged_in_after_logout_warns(tmp_path: Path) -> None:
    h = _harness(tmp_path)
    h.pm.stays_logged_in = True
    h.github.package_jsons = {}

    ReleaseTool(h.ctx).run()
    assert h.console.find("Still logged into NPM at the default registry.")


def test_declined_release_commit_is_a_manual_abort(tmp_path: Path) -> None:
    h = _harness(tmp_path, answers=[1, False])

    assert ReleaseTool(h.ctx).run() is CompletionState.MANUALLY_ABORTED
    assert h.console.has_warning()
    assert h.git.checkouts[-1] == "main"


def test_next_prerelease(tmp_path: Path) -> None:
    h = _harness(tmp_path, answers=[1, True, True])
    h.pm.built = [
        write_built_package(tmp_path, CORE.name, "12.2.0-next.3"),
        write_built_package(tmp_path, LABS.name, "0.1202.0-next.3"),
    ]

    assert ReleaseTool(h.ctx).run() is CompletionState.SUCCESS

    assert h.prompt.asked[0] == "Please select an action:"
    assert h.console.find("Current version branches in the project:")
    assert h.git.commit_messages == ["release: cut the v12.2.0-next.3 release"]
    assert h.pm.published_tags == ["next", "next"]
    assert h.github.tags == [("12.2.0-next.3", "main-merged-1")]
    assert h.github.releases[0]["prerelease"] is True
    assert h.console.find("Release action has completed successfully")
    assert h.git.checkouts == ["upstream/main", "main"]
    assert h.pm.logouts == 1
