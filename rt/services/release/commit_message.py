"""Commit messages created by the release tool.

These strings are matched exactly when verifying the upstream release
commit before publishing, so they must not change.
"""

from __future__ import annotations

from rt.services.release.semver import SemVer


def release_commit_message(version: SemVer) -> str:
    return f"release: cut the v{version.format()} release"


def next_branch_major_switch_commit_message(version: SemVer) -> str:
    return f"release: switch the next branch to v{version.format()}"


def next_branch_bump_commit_message(version: SemVer) -> str:
    return f"release: bump the next branch to v{version.format()}"


def release_notes_cherry_pick_commit_message(version: SemVer) -> str:
    return f"docs: release notes for the v{version.format()} release"
