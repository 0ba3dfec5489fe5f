"""Shared machinery of release actions.

A release action is selected from the menu when its ``is_active`` check
holds for the current release trains. ``is_active`` is a pure function of
the trains, the context and one pre-fetched registry read; ``perform`` is
the only place where side effects happen.

The primitives below implement the staging and publish pipeline: status
gate, version bump, changelog, release commit, fork push, pull request,
merge gate, build, integrity-checked publish and changelog propagation to
the next branch. Every primitive returns a ``Result``; the first ``Err``
ends the action.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from time import sleep

from rt.core.result import Err, Ok, Result
from rt.git.repository import GitError
from rt.platform.files import read_json_object, write_json
from rt.services.release.built_packages import (
    analyze_and_extend_built_packages,
    assert_integrity_of_built_packages,
    verify_package_versions,
)
from rt.services.release.changelog import github_release_body, prepend_release_notes
from rt.services.release.commit_message import (
    release_commit_message,
    release_notes_cherry_pick_commit_message,
)
from rt.services.release.context import ReleaseContext
from rt.services.release.dist_tags import set_npm_dist_tag_for_packages
from rt.services.release.errors import ReleaseError, user_aborted
from rt.services.release.gh import GhApiError, api_failure
from rt.services.release.merge_prompt import prompt_and_wait_for_merge
from rt.services.release.model import (
    ActiveReleaseTrains,
    BuiltPackageWithInfo,
    Fork,
    NpmPackageInfo,
    PullRequest,
    ReleaseNotes,
    ReleaseTrain,
    StagingOptions,
    StagingResult,
)
from rt.services.release.notes import GIT_LOG_FORMAT, build_release_notes, commits_in_range
from rt.services.release.renovate import (
    TARGET_PATCH_LABEL,
    TARGET_RC_LABEL,
    update_renovate_config_target_labels,
)
from rt.services.release.semver import SemVer, release_tag_for_version
from rt.services.release.timeouts import LINEAGE_RETRY_DELAY_SECONDS

PACKAGE_JSON = "package.json"


def required_train(train: ReleaseTrain | None, role: str) -> ReleaseTrain:
    """Train an action relies on; its `is_active` predicate guarantees it exists."""
    if train is None:
        raise RuntimeError(f"action requires an active {role} release train")
    return train


class StagingPhase(Enum):
    """Progress of one action through the release pipeline, in order."""

    IDLE = "idle"
    BRANCH_CHECKED_OUT = "branch-checked-out"
    VERSION_BUMPED = "version-bumped"
    CHANGELOG_UPDATED = "changelog-updated"
    COMMIT_CREATED = "commit-created"
    BUILT = "built"
    PUSHED = "pushed"
    PULL_REQUEST_OPEN = "pull-request-open"
    MERGED = "merged"
    VERIFIED = "verified"
    PUBLISHED = "published"
    CHANGELOG_PROPAGATED = "changelog-propagated"


def git_failure(error: GitError, message: str) -> ReleaseError:
    return ReleaseError(kind="git_failed", message=message, hint=error.message or error.command)


def gh_failure(error: GhApiError, message: str) -> ReleaseError:
    return api_failure(error, message)


class ReleaseAction(ABC):
    """Base class of the menu entries of the release tool."""

    def __init__(
        self,
        active: ActiveReleaseTrains,
        ctx: ReleaseContext,
        npm_info: NpmPackageInfo,
    ) -> None:
        self.active = active
        self.ctx = ctx
        self.npm_info = npm_info
        self.phase = StagingPhase.IDLE

    @staticmethod
    @abstractmethod
    def is_active(
        active: ActiveReleaseTrains, ctx: ReleaseContext, npm_info: NpmPackageInfo
    ) -> bool:
        """Whether the action applies to the given release trains."""

    @abstractmethod
    def description(self) -> str:
        """Menu label of the action."""

    @abstractmethod
    def perform(self) -> Result[None, ReleaseError]:
        """Run the action."""

    # ------------------------------------------------------------------
    # small helpers

    def _advance(self, phase: StagingPhase) -> None:
        self.ctx.console.debug(f"release phase: {self.phase.value} -> {phase.value}")
        self.phase = phase

    def _latest_commit_of_branch(self, branch: str) -> Result[str, ReleaseError]:
        head = self.ctx.github.get_branch_head(branch)
        if isinstance(head, Err):
            return Err(gh_failure(head.error, f'failed to read the head of "{branch}"'))
        return Ok(head.value)

    def _checkout_upstream_branch(self, branch: str) -> Result[None, ReleaseError]:
        result = self.ctx.git.fetch_and_checkout_detached(branch)
        if isinstance(result, Err):
            return Err(git_failure(result.error, f'failed to check out the "{branch}" branch'))
        return Ok(None)

    def _create_commit(self, message: str, files: list[str]) -> Result[None, ReleaseError]:
        result = self.ctx.git.create_commit(message, files)
        if isinstance(result, Err):
            return Err(git_failure(result.error, f'failed to create commit "{message}"'))
        return Ok(None)

    def _create_local_branch_from_head(self, branch: str) -> Result[None, ReleaseError]:
        result = self.ctx.git.create_local_branch(branch)
        if isinstance(result, Err):
            return Err(git_failure(result.error, f'failed to create local branch "{branch}"'))
        return Ok(None)

    def _push_head_to_remote_branch(self, branch: str) -> Result[None, ReleaseError]:
        """Push HEAD directly to ``branch`` in the upstream repository."""
        result = self.ctx.git.push_head(branch)
        if isinstance(result, Err):
            return Err(git_failure(result.error, f'failed to push "{branch}" upstream'))
        return Ok(None)

    def _install_dependencies(self) -> Result[None, ReleaseError]:
        result = self.ctx.pm.install()
        if isinstance(result, Err):
            return result
        self.ctx.console.success("Installed project dependencies.")
        return Ok(None)

    def _changelog_file(self) -> str:
        return self.ctx.config.release.changelog_file

    # ------------------------------------------------------------------
    # status gate

    def _verify_passing_github_status(self, sha: str, branch: str) -> Result[None, ReleaseError]:
        """Refuse to stage on a commit whose checks fail or are pending.

        The caretaker may override the gate; the override is logged.
        """
        console = self.ctx.console
        status = self.ctx.github.combined_status(sha)
        if isinstance(status, Err):
            return Err(gh_failure(status.error, f"failed to read the status of {sha}"))
        commits_url = self.ctx.github.commits_url(branch)

        if status.value in ("failing", None):
            console.error(
                f'Cannot stage release. Commit "{sha}" does not pass all github status checks. '
                "Please make sure this commit passes all checks before re-running."
            )
            console.error(f"Please have a look at: {commits_url}")
            if self.ctx.prompt.confirm("Do you want to ignore the Github status and proceed?"):
                console.warning(
                    "Upstream commit is failing CI checks, but status has been forcibly ignored."
                )
                return Ok(None)
            return Err(user_aborted())

        if status.value == "pending":
            console.error(
                f'Commit "{sha}" still has pending github statuses that need to succeed before '
                "staging a release."
            )
            console.error(f"Please have a look at: {commits_url}")
            if self.ctx.prompt.confirm("Do you want to ignore the Github status and proceed?"):
                console.warning(
                    "Upstream commit is pending CI, but status has been forcibly ignored."
                )
                return Ok(None)
            return Err(user_aborted())

        console.success("Upstream commit is passing all github status checks.")
        return Ok(None)

    # ------------------------------------------------------------------
    # version and changelog

    def _update_project_version(
        self, version: SemVer, options: StagingOptions | None = None
    ) -> Result[None, ReleaseError]:
        path = self.ctx.project_dir / PACKAGE_JSON
        loaded = read_json_object(path)
        if isinstance(loaded, Err):
            return Err(ReleaseError(kind="invalid_input", message=loaded.error, hint=str(path)))

        data = loaded.value
        data["version"] = version.format()
        if options is not None and options.update_pkg_json is not None:
            options.update_pkg_json(data)
        write_json(path, data)
        self.ctx.console.success(f"Updated project version to {version}")
        return Ok(None)

    def _release_notes_for(
        self, version: SemVer, compare_version: SemVer
    ) -> Result[ReleaseNotes, ReleaseError]:
        """Notes for everything since the release tag of ``compare_version``."""
        tag = release_tag_for_version(compare_version)
        fetched = self.ctx.git.fetch_tag(tag)
        if isinstance(fetched, Err):
            return Err(git_failure(fetched.error, f'failed to fetch the release tag "{tag}"'))

        commits = commits_in_range(
            lambda revisions: self.ctx.git.log(revisions, format=GIT_LOG_FORMAT), tag, "HEAD"
        )
        if isinstance(commits, Err):
            return Err(git_failure(commits.error, f"failed to read commits since {tag}"))

        github = self.ctx.config.github
        return Ok(
            build_release_notes(version, commits.value, owner=github.owner, name=github.name)
        )

    def _prepend_release_notes_to_changelog(
        self, notes: ReleaseNotes
    ) -> Result[None, ReleaseError]:
        path = self.ctx.project_dir / self._changelog_file()
        result = prepend_release_notes(path, notes)
        if isinstance(result, Err):
            return result
        self.ctx.console.success(f"Updated the changelog to capture changes for {notes.version}.")
        return Ok(None)

    def _wait_for_edits_and_create_release_commit(
        self, version: SemVer
    ) -> Result[None, ReleaseError]:
        console = self.ctx.console
        console.warning(
            "Please review the changelog and ensure that the log contains only changes that "
            "apply to the public API surface."
        )
        console.warning(
            "Manual changes can be made. When done, please proceed with the prompt below."
        )
        if not self.ctx.prompt.confirm("Do you want to proceed and commit the changes?"):
            return Err(user_aborted())

        committed = self._create_commit(
            release_commit_message(version), [PACKAGE_JSON, self._changelog_file()]
        )
        if isinstance(committed, Err):
            return committed

        if self.ctx.git.has_uncommitted_changes():
            console.error("Unrelated changes have been made as part of the changelog editing.")
            return Err(
                ReleaseError(
                    kind="invariant_violation",
                    message="Unrelated changes have been made as part of the changelog editing.",
                    hint="Only package.json and the changelog may change in the release commit.",
                )
            )
        console.success(f'Created release commit for: "{version}".')
        return Ok(None)

    # ------------------------------------------------------------------
    # forks and pull requests

    def _fork_of_authenticated_user(self) -> Result[Fork, ReleaseError]:
        console = self.ctx.console
        login = self.ctx.github.current_user_login()
        if isinstance(login, Err):
            return Err(gh_failure(login.error, "failed to read the authenticated GitHub user"))
        fork = self.ctx.github.find_fork_of_user(login.value)
        if isinstance(fork, Err):
            return Err(gh_failure(fork.error, "failed to list repository forks"))
        if fork.value is None:
            slug = self.ctx.github.slug
            console.error("Unable to find fork for currently authenticated user.")
            console.error(f"Please ensure you created a fork of: {slug}.")
            return Err(
                ReleaseError(
                    kind="gh_api_failed",
                    message="Unable to find fork for currently authenticated user.",
                    hint=f"Please ensure you created a fork of: {slug}.",
                )
            )
        return Ok(fork.value)

    def _find_available_fork_branch(
        self, fork: Fork, proposed: str
    ) -> Result[str, ReleaseError]:
        """``proposed``, or ``proposed_N`` for the first N not taken in the fork."""
        name = proposed
        suffix = 0
        while True:
            exists = self.ctx.github.branch_exists(owner=fork.owner, name=fork.name, branch=name)
            if isinstance(exists, Err):
                return Err(gh_failure(exists.error, f'failed to look up fork branch "{name}"'))
            if not exists.value:
                return Ok(name)
            suffix += 1
            name = f"{proposed}_{suffix}"

    def _push_head_to_fork(self, proposed_branch: str) -> Result[tuple[Fork, str], ReleaseError]:
        fork = self._fork_of_authenticated_user()
        if isinstance(fork, Err):
            return fork
        branch = self._find_available_fork_branch(fork.value, proposed_branch)
        if isinstance(branch, Err):
            return branch

        local = self._create_local_branch_from_head(branch.value)
        if isinstance(local, Err):
            return local
        pushed = self.ctx.git.push_head(
            branch.value, owner=fork.value.owner, name=fork.value.name
        )
        if isinstance(pushed, Err):
            return Err(git_failure(pushed.error, f'failed to push "{branch.value}" to the fork'))
        self._advance(StagingPhase.PUSHED)
        return Ok((fork.value, branch.value))

    def _push_changes_to_fork_and_create_pull_request(
        self,
        target_branch: str,
        proposed_fork_branch: str,
        title: str,
        body: str = "",
        *,
        labels: tuple[str, ...] = (),
    ) -> Result[PullRequest, ReleaseError]:
        pushed = self._push_head_to_fork(proposed_fork_branch)
        if isinstance(pushed, Err):
            return pushed
        fork, branch = pushed.value

        created = self.ctx.github.create_pull_request(
            head=f"{fork.owner}:{branch}", base=target_branch, title=title, body=body
        )
        if isinstance(created, Err):
            return Err(gh_failure(created.error, f'failed to open pull request "{title}"'))
        number = created.value.number

        if labels:
            labelled = self.ctx.github.add_labels(number, list(labels))
            if isinstance(labelled, Err):
                return Err(gh_failure(labelled.error, f"failed to label pull request #{number}"))

        self._advance(StagingPhase.PULL_REQUEST_OPEN)
        self.ctx.console.success(f"Created pull request #{number} in {self.ctx.github.slug}.")
        return Ok(PullRequest(id=number, url=created.value.url, fork=fork, fork_branch=branch))

    def _wait_for_merge(self, pull_request: PullRequest) -> Result[None, ReleaseError]:
        merged = prompt_and_wait_for_merge(
            self.ctx.github, pull_request, console=self.ctx.console, prompt=self.ctx.prompt
        )
        if isinstance(merged, Err):
            return merged
        self._advance(StagingPhase.MERGED)
        return Ok(None)

    # ------------------------------------------------------------------
    # staging

    def _build_release_for_current_branch(
        self,
    ) -> Result[list[BuiltPackageWithInfo], ReleaseError]:
        packages = self.ctx.pm.info()
        if isinstance(packages, Err):
            return packages
        built = self.ctx.pm.build(self.ctx.config.release.build_command)
        if isinstance(built, Err):
            return built
        with_info = analyze_and_extend_built_packages(
            built.value, packages.value, console=self.ctx.console
        )
        if isinstance(with_info, Err):
            return with_info
        self._advance(StagingPhase.BUILT)
        self.ctx.console.success("Built release output for all packages.")
        return with_info

    def _run_precheck(
        self, version: SemVer, built: list[BuiltPackageWithInfo]
    ) -> Result[None, ReleaseError]:
        command = self.ctx.config.release.precheck_command
        if command is None:
            self.ctx.console.warning("No release precheck command is configured. Skipping.")
            return Ok(None)
        result = self.ctx.pm.precheck(command, new_version=version, built_packages=built)
        if isinstance(result, Err):
            return result
        self.ctx.console.success("Release pre-checks passed.")
        return Ok(None)

    def _stage_version_for_branch_and_create_pull_request(
        self,
        new_version: SemVer,
        compare_version_for_notes: SemVer,
        pull_request_target_branch: str,
        options: StagingOptions | None = None,
    ) -> Result[tuple[PullRequest, ReleaseNotes, list[BuiltPackageWithInfo]], ReleaseError]:
        """Bump, document, commit, build and open the staging pull request.

        HEAD must already be the commit to stage on top of.
        """
        notes = self._release_notes_for(new_version, compare_version_for_notes)
        if isinstance(notes, Err):
            return notes

        bumped = self._update_project_version(new_version, options)
        if isinstance(bumped, Err):
            return bumped
        self._advance(StagingPhase.VERSION_BUMPED)

        changelog = self._prepend_release_notes_to_changelog(notes.value)
        if isinstance(changelog, Err):
            return changelog
        self._advance(StagingPhase.CHANGELOG_UPDATED)

        committed = self._wait_for_edits_and_create_release_commit(new_version)
        if isinstance(committed, Err):
            return committed
        self._advance(StagingPhase.COMMIT_CREATED)

        installed = self._install_dependencies()
        if isinstance(installed, Err):
            return installed
        built = self._build_release_for_current_branch()
        if isinstance(built, Err):
            return built
        prechecked = self._run_precheck(new_version, built.value)
        if isinstance(prechecked, Err):
            return prechecked
        verified = verify_package_versions(new_version, built.value, console=self.ctx.console)
        if isinstance(verified, Err):
            return verified

        pull_request = self._push_changes_to_fork_and_create_pull_request(
            pull_request_target_branch,
            f"release-stage-{new_version}",
            f'Bump version to "v{new_version}" with changelog.',
            labels=self.ctx.config.release.release_pr_labels,
        )
        if isinstance(pull_request, Err):
            return pull_request

        self.ctx.console.success(
            f"Release staging pull-request has been created: {pull_request.value.url}"
        )
        return Ok((pull_request.value, notes.value, built.value))

    def _checkout_branch_and_stage_version(
        self,
        new_version: SemVer,
        compare_version_for_notes: SemVer,
        staging_branch: str,
        options: StagingOptions | None = None,
    ) -> Result[StagingResult, ReleaseError]:
        """Stage a release on top of the current upstream head of ``staging_branch``."""
        before_sha = self._latest_commit_of_branch(staging_branch)
        if isinstance(before_sha, Err):
            return before_sha
        gate = self._verify_passing_github_status(before_sha.value, staging_branch)
        if isinstance(gate, Err):
            return gate
        checked = self._checkout_upstream_branch(staging_branch)
        if isinstance(checked, Err):
            return checked
        self._advance(StagingPhase.BRANCH_CHECKED_OUT)

        staged = self._stage_version_for_branch_and_create_pull_request(
            new_version, compare_version_for_notes, staging_branch, options
        )
        if isinstance(staged, Err):
            return staged
        pull_request, notes, built = staged.value
        return Ok(
            StagingResult(
                pull_request=pull_request,
                release_notes=notes,
                built_packages=tuple(built),
                before_staging_sha=before_sha.value,
            )
        )

    def _stage_merge_and_publish(
        self,
        new_version: SemVer,
        compare_version_for_notes: SemVer,
        branch: str,
        npm_dist_tag: str,
        *,
        show_as_latest: bool,
        options: StagingOptions | None = None,
    ) -> Result[ReleaseNotes, ReleaseError]:
        """Stage on ``branch``, wait for the merge and publish under ``npm_dist_tag``."""
        staged = self._checkout_branch_and_stage_version(
            new_version, compare_version_for_notes, branch, options
        )
        if isinstance(staged, Err):
            return staged
        merged = self._wait_for_merge(staged.value.pull_request)
        if isinstance(merged, Err):
            return merged
        published = self._publish(
            staged.value.built_packages,
            staged.value.release_notes,
            staged.value.before_staging_sha,
            branch,
            npm_dist_tag,
            show_as_latest=show_as_latest,
        )
        if isinstance(published, Err):
            return published
        return Ok(staged.value.release_notes)

    # ------------------------------------------------------------------
    # after publishing

    def _cherry_pick_changelog_into_next_branch(
        self, notes: ReleaseNotes, staging_branch: str
    ) -> Result[None, ReleaseError]:
        next_branch = self.ctx.next_branch
        message = release_notes_cherry_pick_commit_message(notes.version)

        checked = self._checkout_upstream_branch(next_branch)
        if isinstance(checked, Err):
            return checked
        changelog = self._prepend_release_notes_to_changelog(notes)
        if isinstance(changelog, Err):
            return changelog
        files = [self._changelog_file()]
        version = notes.version
        if version.patch == 0 and not version.prerelease:
            # A new stable minor or major: its Renovate PRs target patch again.
            renovate = update_renovate_config_target_labels(
                self.ctx.project_dir,
                from_label=TARGET_RC_LABEL,
                to_label=TARGET_PATCH_LABEL,
                console=self.ctx.console,
            )
            if isinstance(renovate, Err):
                return renovate
            if renovate.value is not None:
                files.append(renovate.value)
        committed = self._create_commit(message, files)
        if isinstance(committed, Err):
            return committed
        self.ctx.console.success(f'Created changelog cherry-pick commit for: "{notes.version}".')

        pull_request = self._push_changes_to_fork_and_create_pull_request(
            next_branch,
            f"changelog-cherry-pick-{notes.version}",
            message,
            f'Cherry-picks the changelog from the "{staging_branch}" branch to the next '
            f"branch ({next_branch}).",
        )
        if isinstance(pull_request, Err):
            return pull_request
        self.ctx.console.info(
            "Pull request for cherry-picking the changelog into "
            f'"{next_branch}" has been created.'
        )

        merged = self._wait_for_merge(pull_request.value)
        if isinstance(merged, Err):
            return merged
        self._advance(StagingPhase.CHANGELOG_PROPAGATED)
        return Ok(None)

    # ------------------------------------------------------------------
    # publishing

    def _validated_release_commit(
        self, branch: str, version: SemVer, before_staging_sha: str
    ) -> Result[str, ReleaseError]:
        """Sha of the release commit, which must sit directly on ``before_staging_sha``."""
        head = self._latest_commit_of_branch(branch)
        if isinstance(head, Err):
            return head
        commit = self.ctx.github.get_commit(head.value)
        if isinstance(commit, Err):
            return Err(gh_failure(commit.error, f"failed to read commit {head.value}"))

        if not commit.value.message.startswith(release_commit_message(version)):
            return Err(
                ReleaseError(
                    kind="lineage_violation",
                    message=f'Latest commit in "{branch}" branch is not a staging commit.',
                    hint="Please make sure the staging pull request has been merged.",
                )
            )
        parents = commit.value.parents
        if not parents or parents[0] != before_staging_sha:
            return Err(
                ReleaseError(
                    kind="lineage_violation",
                    message="Unexpected additional commits have landed while staging the release.",
                    hint="Please revert the bump commit and retry, or cut a new version on top.",
                )
            )
        return Ok(commit.value.sha)

    def _release_commit_for_publishing(
        self, branch: str, version: SemVer, before_staging_sha: str
    ) -> Result[str, ReleaseError]:
        """Validate the merged release commit, re-reading the branch once on mismatch.

        The code host can briefly serve the pre-merge head right after a merge.
        """
        first = self._validated_release_commit(branch, version, before_staging_sha)
        if isinstance(first, Ok) or first.error.kind != "lineage_violation":
            return first
        self.ctx.console.debug(f"{first.error.message} Retrying once.")
        sleep(LINEAGE_RETRY_DELAY_SECONDS)
        second = self._validated_release_commit(branch, version, before_staging_sha)
        if isinstance(second, Err):
            self.ctx.console.error(second.error.message)
            if second.error.hint:
                self.ctx.console.error(second.error.hint)
        return second

    def _create_github_release_for_version(
        self,
        notes: ReleaseNotes,
        sha: str,
        *,
        prerelease: bool,
        show_as_latest: bool,
    ) -> Result[None, ReleaseError]:
        github = self.ctx.github
        tag = release_tag_for_version(notes.version)
        tagged = github.create_tag_ref(tag, sha)
        if isinstance(tagged, Err):
            return Err(gh_failure(tagged.error, f'failed to create the release tag "{tag}"'))
        self.ctx.console.success(f"Tagged v{notes.version} release upstream.")

        changelog_url = github.file_url(tag, self._changelog_file())
        released = github.create_release(
            tag=tag,
            name=notes.version.format(),
            body=github_release_body(notes, changelog_url=changelog_url),
            prerelease=prerelease,
            make_latest=show_as_latest,
        )
        if isinstance(released, Err):
            return Err(gh_failure(released.error, f'failed to create the "{tag}" GitHub release'))
        self.ctx.console.success(f"Created v{notes.version} release in Github.")
        return Ok(None)

    def _publish(
        self,
        built_packages: tuple[BuiltPackageWithInfo, ...],
        notes: ReleaseNotes,
        before_staging_sha: str,
        publish_branch: str,
        npm_dist_tag: str,
        *,
        show_as_latest: bool,
    ) -> Result[None, ReleaseError]:
        """Publish the staged output, then record the release on GitHub.

        Nothing is written to the registry unless the release commit lineage
        and the built output digests both check out.
        """
        version = notes.version
        sha = self._release_commit_for_publishing(publish_branch, version, before_staging_sha)
        if isinstance(sha, Err):
            return sha

        intact = assert_integrity_of_built_packages(built_packages)
        if isinstance(intact, Err):
            self.ctx.console.error(intact.error.message)
            return intact
        self._advance(StagingPhase.VERIFIED)

        registry = self.ctx.config.release.publish_registry
        for pkg in built_packages:
            published = self.ctx.pm.publish(pkg.output_path, npm_dist_tag, registry)
            if isinstance(published, Err):
                return published
            self.ctx.console.success(f'Successfully published "{pkg.name}".')
        self._advance(StagingPhase.PUBLISHED)

        released = self._create_github_release_for_version(
            notes, sha.value, prerelease=npm_dist_tag == "next", show_as_latest=show_as_latest
        )
        if isinstance(released, Err):
            return released

        self.ctx.console.success(f"Published all packages successfully as v{version}.")
        return Ok(None)

    # ------------------------------------------------------------------
    # dist tags

    def _set_dist_tag_for_checked_out_branch(
        self, dist_tag: str, version: SemVer, *, skip_experimental: bool = False
    ) -> Result[None, ReleaseError]:
        """Tag the packages declared by the checked-out branch's own config."""
        packages = self.ctx.pm.info()
        if isinstance(packages, Err):
            return packages
        return set_npm_dist_tag_for_packages(
            self.ctx.pm,
            packages.value,
            dist_tag=dist_tag,
            version=version,
            registry=self.ctx.config.release.publish_registry,
            console=self.ctx.console,
            skip_experimental=skip_experimental,
        )
