"""Collaborators of a release run.

Every client a release action talks to is carried explicitly in a
``ReleaseContext``. The protocols below are the exact surface the release
core consumes; ``GitClient``, ``GithubClient`` and ``PackageManagerClient``
implement them, and tests substitute in-memory fakes.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from rt.core.config import NpmPackage, ProjectConfig
from rt.core.result import Result
from rt.core.structured import StrDict
from rt.git.repository import GitError
from rt.output.console import ConsoleProtocol
from rt.output.prompt import PromptProtocol
from rt.platform.process import ProcessOutput
from rt.services.release.errors import ReleaseError
from rt.services.release.gh import CommitInfo, CreatedPullRequest, GhApiError
from rt.services.release.model import BuiltPackage, BuiltPackageWithInfo, Fork, GithubStatus
from rt.services.release.npm_registry import NpmRegistry
from rt.services.release.semver import SemVer


class VersionControlClient(Protocol):
    def run(self, args: list[str], *, input: str | None = None) -> Result[str, GitError]: ...

    def run_graceful(self, args: list[str], *, input: str | None = None) -> ProcessOutput: ...

    def is_shallow_repo(self) -> Result[bool, GitError]: ...

    def head_sha(self) -> Result[str, GitError]: ...

    def get_current_branch_or_revision(self) -> Result[str, GitError]: ...

    def has_uncommitted_changes(self) -> bool: ...

    def checkout(self, branch_or_revision: str, *, clean_state: bool) -> bool: ...

    def fetch_and_checkout_detached(self, branch: str) -> Result[None, GitError]: ...

    def create_local_branch(self, branch: str) -> Result[None, GitError]: ...

    def fetch_tag(self, tag: str) -> Result[None, GitError]: ...

    def log(self, revision_range: str, *, format: str) -> Result[str, GitError]: ...

    def create_commit(self, message: str, files: list[str]) -> Result[None, GitError]: ...

    def push_head(
        self,
        branch: str,
        *,
        owner: str | None = None,
        name: str | None = None,
    ) -> Result[None, GitError]: ...


class CodeHostClient(Protocol):
    @property
    def slug(self) -> str: ...

    def get_branch_head(self, branch: str) -> Result[str, GhApiError]: ...

    def branch_exists(self, *, owner: str, name: str, branch: str) -> Result[bool, GhApiError]: ...

    def list_protected_branches(self) -> Result[list[str], ReleaseError]: ...

    def get_package_json(self, ref: str) -> Result[StrDict, ReleaseError]: ...

    def get_commit(self, ref: str) -> Result[CommitInfo, GhApiError]: ...

    def combined_status(self, sha: str) -> Result[GithubStatus | None, GhApiError]: ...

    def current_user_login(self) -> Result[str, GhApiError]: ...

    def find_fork_of_user(self, login: str) -> Result[Fork | None, GhApiError]: ...

    def create_pull_request(
        self, *, head: str, base: str, title: str, body: str
    ) -> Result[CreatedPullRequest, GhApiError]: ...

    def add_labels(self, number: int, labels: list[str]) -> Result[None, GhApiError]: ...

    def get_pull_request(self, number: int) -> Result[StrDict, GhApiError]: ...

    def merge_pull_request(
        self, number: int, *, method: str = "rebase"
    ) -> Result[bool, GhApiError]: ...

    def list_issue_events(self, number: int) -> Result[list[StrDict], GhApiError]: ...

    def create_tag_ref(self, tag: str, sha: str) -> Result[None, GhApiError]: ...

    def create_release(
        self,
        *,
        tag: str,
        name: str,
        body: str,
        prerelease: bool,
        make_latest: bool,
    ) -> Result[None, GhApiError]: ...

    def get_release_id_by_tag(self, tag: str) -> Result[int, GhApiError]: ...

    def update_release(self, release_id: int, *, prerelease: bool) -> Result[None, GhApiError]: ...

    def commits_url(self, branch: str) -> str: ...

    def file_url(self, ref: str, path: str) -> str: ...


class PackageManagerOps(Protocol):
    def install(self) -> Result[None, ReleaseError]: ...

    def build(
        self, build_command: tuple[str, ...]
    ) -> Result[list[BuiltPackage], ReleaseError]: ...

    def info(self) -> Result[tuple[NpmPackage, ...], ReleaseError]: ...

    def precheck(
        self,
        precheck_command: tuple[str, ...],
        *,
        new_version: SemVer,
        built_packages: list[BuiltPackageWithInfo],
    ) -> Result[None, ReleaseError]: ...

    def publish(
        self, package_path: Path, dist_tag: str, registry: str | None
    ) -> Result[None, ReleaseError]: ...

    def set_dist_tag(
        self, package_name: str, dist_tag: str, version: SemVer, registry: str | None
    ) -> Result[None, ReleaseError]: ...

    def delete_dist_tag(
        self, package_name: str, dist_tag: str, registry: str | None
    ) -> Result[None, ReleaseError]: ...

    def is_logged_in(self, registry: str | None) -> bool: ...

    def login(self, registry: str | None) -> Result[None, ReleaseError]: ...

    def logout(self, registry: str | None) -> bool: ...


def _no_env() -> dict[str, str]:
    return {}


@dataclass(frozen=True, slots=True)
class ReleaseContext:
    """Everything one release run needs; built once per CLI invocation."""

    config: ProjectConfig
    project_dir: Path
    git: VersionControlClient
    github: CodeHostClient
    pm: PackageManagerOps
    registry: NpmRegistry
    console: ConsoleProtocol
    prompt: PromptProtocol
    env: Mapping[str, str] = field(default_factory=_no_env)

    @property
    def next_branch(self) -> str:
        return self.config.github.main_branch
