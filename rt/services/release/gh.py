from __future__ import annotations

import base64
import binascii
import json
import os
import re
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from rt.core.result import Err, Ok, Result
from rt.core.structured import (
    StrDict,
    as_dict_list,
    as_str_dict,
    get_bool,
    get_int,
    get_str,
    get_table,
)
from rt.platform.process import ProcessError
from rt.platform.process import run as run_process
from rt.services.release.errors import ReleaseError
from rt.services.release.model import Fork, GithubStatus
from rt.services.release.timeouts import GH_TIMEOUT_SECONDS

GITHUB_TOKEN_SETTINGS_URL = "https://github.com/settings/tokens"

_HTTP_STATUS_RE = re.compile(r"\(HTTP (\d{3})\)")
_PAGE_SIZE = 100

HttpMethod = Literal["GET", "POST", "PUT", "PATCH", "DELETE"]


@dataclass(frozen=True, slots=True)
class GhApiError:
    """A failed ``gh api`` call.

    ``status`` is the HTTP status reported by gh, or 0 when the request never
    produced one (gh missing, network failure, timeout).
    """

    endpoint: str
    status: int
    message: str

    def __str__(self) -> str:
        if self.status:
            return f"GitHub API {self.endpoint} failed (HTTP {self.status}): {self.message}"
        return f"GitHub API {self.endpoint} failed: {self.message}"


@dataclass(frozen=True, slots=True)
class CommitInfo:
    sha: str
    message: str
    parents: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class CreatedPullRequest:
    number: int
    url: str


def _to_api_error(endpoint: str, error: ProcessError) -> GhApiError:
    text = f"{error.stderr}\n{error.stdout}"
    m = _HTTP_STATUS_RE.search(text)
    status = int(m.group(1)) if m else 0
    return GhApiError(endpoint=endpoint, status=status, message=error.detail)


def api_failure(error: GhApiError, message: str) -> ReleaseError:
    """Convert a GitHub API error into a release error.

    A 401 always means the token is missing or expired, and the release
    cannot continue.
    """
    if error.status == 401:
        return ReleaseError(
            kind="gh_auth_required",
            message="GitHub rejected the access token (HTTP 401).",
            hint=(
                "Make sure GITHUB_TOKEN (or `gh auth login`) provides a valid token with repo "
                f"scope: {GITHUB_TOKEN_SETTINGS_URL}"
            ),
        )
    return ReleaseError(kind="gh_api_failed", message=message, hint=str(error))


def ensure_gh_available() -> Result[None, ReleaseError]:
    if shutil.which("gh") is None:
        return Err(
            ReleaseError(
                kind="gh_missing",
                message="gh: missing",
                hint="Install GitHub CLI: https://cli.github.com/",
            )
        )
    return Ok(None)


def resolve_github_token(*, project_dir: Path) -> Result[str, ReleaseError]:
    """Token used for authenticated git pushes.

    ``GITHUB_TOKEN`` / ``GH_TOKEN`` win; otherwise the token of the current
    ``gh`` login is used.
    """
    for name in ("GITHUB_TOKEN", "GH_TOKEN"):
        value = os.environ.get(name, "").strip()
        if value:
            return Ok(value)

    result = run_process(["gh", "auth", "token"], cwd=project_dir, timeout=GH_TIMEOUT_SECONDS)
    if isinstance(result, Err) or not result.value.strip():
        return Err(
            ReleaseError(
                kind="gh_auth_required",
                message="no GitHub token available",
                hint=f"Set GITHUB_TOKEN or run: gh auth login ({GITHUB_TOKEN_SETTINGS_URL})",
            )
        )
    return Ok(result.value.strip())


class GithubClient:
    """Code host access for one upstream repository, through ``gh api``.

    Every call is a single attempt; failures are returned to the caller.
    """

    def __init__(self, *, project_dir: Path, owner: str, name: str) -> None:
        self.project_dir = project_dir
        self.owner = owner
        self.name = name

    @property
    def slug(self) -> str:
        return f"{self.owner}/{self.name}"

    # ------------------------------------------------------------------
    # transport

    def api(
        self,
        endpoint: str,
        *,
        method: HttpMethod = "GET",
        body: StrDict | None = None,
    ) -> Result[object, GhApiError]:
        cmd = ["gh", "api", "-X", method, "-H", "Accept: application/vnd.github+json", endpoint]
        payload: str | None = None
        if body is not None:
            cmd += ["--input", "-"]
            payload = json.dumps(body)

        result = run_process(cmd, cwd=self.project_dir, input=payload, timeout=GH_TIMEOUT_SECONDS)
        if isinstance(result, Err):
            return Err(_to_api_error(endpoint, result.error))

        text = result.value.strip()
        if not text:
            return Ok(None)
        try:
            return Ok(json.loads(text))
        except json.JSONDecodeError as e:
            return Err(GhApiError(endpoint, 0, f"invalid JSON response: {e}"))

    def _api_dict(
        self,
        endpoint: str,
        *,
        method: HttpMethod = "GET",
        body: StrDict | None = None,
    ) -> Result[StrDict, GhApiError]:
        result = self.api(endpoint, method=method, body=body)
        if isinstance(result, Err):
            return result
        data = as_str_dict(result.value)
        if data is None:
            return Err(GhApiError(endpoint, 0, "unexpected payload (expected an object)"))
        return Ok(data)

    def _paginate(self, endpoint: str) -> Result[list[StrDict], GhApiError]:
        sep = "&" if "?" in endpoint else "?"
        out: list[StrDict] = []
        page = 1
        while True:
            result = self.api(f"{endpoint}{sep}per_page={_PAGE_SIZE}&page={page}")
            if isinstance(result, Err):
                return result
            items = as_dict_list(result.value)
            out.extend(items)
            if len(items) < _PAGE_SIZE:
                return Ok(out)
            page += 1

    # ------------------------------------------------------------------
    # branches and contents

    def get_branch_head(self, branch: str) -> Result[str, GhApiError]:
        endpoint = f"repos/{self.slug}/branches/{branch}"
        data = self._api_dict(endpoint)
        if isinstance(data, Err):
            return data
        sha = get_str(get_table(data.value, "commit") or {}, "sha")
        if sha is None:
            return Err(GhApiError(endpoint, 0, "missing commit sha"))
        return Ok(sha)

    def branch_exists(self, *, owner: str, name: str, branch: str) -> Result[bool, GhApiError]:
        result = self.api(f"repos/{owner}/{name}/branches/{branch}")
        if isinstance(result, Err):
            if result.error.status == 404:
                return Ok(False)
            return result
        return Ok(True)

    def list_protected_branches(self) -> Result[list[str], ReleaseError]:
        result = self._paginate(f"repos/{self.slug}/branches?protected=true")
        if isinstance(result, Err):
            return Err(api_failure(result.error, f"failed to list branches of {self.slug}"))
        return Ok([n for n in (get_str(b, "name") for b in result.value) if n is not None])

    def get_file_text(self, path: str, *, ref: str) -> Result[str, GhApiError]:
        endpoint = f"repos/{self.slug}/contents/{path}?ref={ref}"
        data = self._api_dict(endpoint)
        if isinstance(data, Err):
            return data
        content = get_str(data.value, "content")
        if get_str(data.value, "encoding") != "base64" or content is None:
            return Err(GhApiError(endpoint, 0, f"unexpected contents encoding for {path}"))
        try:
            return Ok(base64.b64decode(content, validate=False).decode("utf-8"))
        except (binascii.Error, ValueError) as e:
            return Err(GhApiError(endpoint, 0, f"failed to decode contents: {e}"))

    def get_package_json(self, ref: str) -> Result[StrDict, ReleaseError]:
        text = self.get_file_text("package.json", ref=ref)
        if isinstance(text, Err):
            return Err(
                api_failure(text.error, f'Unable to read "package.json" file from branch {ref}.')
            )
        try:
            data = as_str_dict(json.loads(text.value))
        except json.JSONDecodeError as e:
            data = None
            detail = str(e)
        else:
            detail = "expected a JSON object"
        if data is None:
            return Err(
                ReleaseError(
                    kind="invalid_trains",
                    message=f"invalid package.json in {ref}: {detail}",
                )
            )
        return Ok(data)

    # ------------------------------------------------------------------
    # commits and statuses

    def get_commit(self, ref: str) -> Result[CommitInfo, GhApiError]:
        endpoint = f"repos/{self.slug}/commits/{ref}"
        data = self._api_dict(endpoint)
        if isinstance(data, Err):
            return data
        sha = get_str(data.value, "sha")
        message = (get_table(data.value, "commit") or {}).get("message")
        if sha is None or not isinstance(message, str):
            return Err(GhApiError(endpoint, 0, "unexpected commit payload"))
        parents = tuple(
            p for p in (get_str(d, "sha") for d in as_dict_list(data.value.get("parents"))) if p
        )
        return Ok(CommitInfo(sha=sha, message=message, parents=parents))

    def combined_status(self, sha: str) -> Result[GithubStatus | None, GhApiError]:
        """Fold check runs and commit statuses into one result.

        Returns None when the commit has neither checks nor statuses.
        """
        checks = self._api_dict(f"repos/{self.slug}/commits/{sha}/check-runs?per_page=100")
        if isinstance(checks, Err):
            return checks
        statuses = self._api_dict(f"repos/{self.slug}/commits/{sha}/status")
        if isinstance(statuses, Err):
            return statuses

        results: list[str] = []
        for run in as_dict_list(checks.value.get("check_runs")):
            state = get_str(run, "status")
            if state == "completed":
                results.append(get_str(run, "conclusion") or "")
            else:
                results.append(state or "")
        for status in as_dict_list(statuses.value.get("statuses")):
            results.append(get_str(status, "state") or "")

        combined: GithubStatus | None = None
        for result in results:
            if combined == "pending" or result in ("queued", "in_progress", "pending"):
                combined = "pending"
            elif combined == "failing" or result in ("failure", "error", "timed_out", "cancelled"):
                combined = "failing"
            else:
                combined = "passing"
        return Ok(combined)

    # ------------------------------------------------------------------
    # users and forks

    def current_user_login(self) -> Result[str, GhApiError]:
        data = self._api_dict("user")
        if isinstance(data, Err):
            return data
        login = get_str(data.value, "login")
        if login is None:
            return Err(GhApiError("user", 0, "missing login"))
        return Ok(login)

    def find_fork_of_user(self, login: str) -> Result[Fork | None, GhApiError]:
        forks = self._paginate(f"repos/{self.slug}/forks")
        if isinstance(forks, Err):
            return forks
        for repo in forks.value:
            owner = get_str(get_table(repo, "owner") or {}, "login")
            name = get_str(repo, "name")
            if owner is not None and name is not None and owner.lower() == login.lower():
                return Ok(Fork(owner=owner, name=name))
        return Ok(None)

    # ------------------------------------------------------------------
    # pull requests

    def create_pull_request(
        self, *, head: str, base: str, title: str, body: str
    ) -> Result[CreatedPullRequest, GhApiError]:
        endpoint = f"repos/{self.slug}/pulls"
        data = self._api_dict(
            endpoint,
            method="POST",
            body={"head": head, "base": base, "title": title, "body": body},
        )
        if isinstance(data, Err):
            return data
        number = get_int(data.value, "number")
        url = get_str(data.value, "html_url")
        if number is None or url is None:
            return Err(GhApiError(endpoint, 0, "unexpected pull request payload"))
        return Ok(CreatedPullRequest(number=number, url=url))

    def add_labels(self, number: int, labels: list[str]) -> Result[None, GhApiError]:
        result = self.api(
            f"repos/{self.slug}/issues/{number}/labels", method="POST", body={"labels": labels}
        )
        if isinstance(result, Err):
            return result
        return Ok(None)

    def get_pull_request(self, number: int) -> Result[StrDict, GhApiError]:
        return self._api_dict(f"repos/{self.slug}/pulls/{number}")

    def merge_pull_request(
        self, number: int, *, method: str = "rebase"
    ) -> Result[bool, GhApiError]:
        """Ask GitHub to merge; Ok(False) when GitHub answered but did not merge."""
        data = self._api_dict(
            f"repos/{self.slug}/pulls/{number}/merge", method="PUT", body={"merge_method": method}
        )
        if isinstance(data, Err):
            return data
        return Ok(get_bool(data.value, "merged") is True)

    def list_issue_events(self, number: int) -> Result[list[StrDict], GhApiError]:
        return self._paginate(f"repos/{self.slug}/issues/{number}/events")

    # ------------------------------------------------------------------
    # tags and releases

    def create_tag_ref(self, tag: str, sha: str) -> Result[None, GhApiError]:
        result = self.api(
            f"repos/{self.slug}/git/refs",
            method="POST",
            body={"ref": f"refs/tags/{tag}", "sha": sha},
        )
        if isinstance(result, Err):
            return result
        return Ok(None)

    def create_release(
        self,
        *,
        tag: str,
        name: str,
        body: str,
        prerelease: bool,
        make_latest: bool,
    ) -> Result[None, GhApiError]:
        result = self.api(
            f"repos/{self.slug}/releases",
            method="POST",
            body={
                "tag_name": tag,
                "name": name,
                "body": body,
                "prerelease": prerelease,
                "make_latest": "true" if make_latest else "false",
            },
        )
        if isinstance(result, Err):
            return result
        return Ok(None)

    def get_release_id_by_tag(self, tag: str) -> Result[int, GhApiError]:
        endpoint = f"repos/{self.slug}/releases/tags/{tag}"
        data = self._api_dict(endpoint)
        if isinstance(data, Err):
            return data
        release_id = get_int(data.value, "id")
        if release_id is None:
            return Err(GhApiError(endpoint, 0, "missing release id"))
        return Ok(release_id)

    def update_release(self, release_id: int, *, prerelease: bool) -> Result[None, GhApiError]:
        result = self.api(
            f"repos/{self.slug}/releases/{release_id}",
            method="PATCH",
            body={"prerelease": prerelease},
        )
        if isinstance(result, Err):
            return result
        return Ok(None)

    # ------------------------------------------------------------------
    # urls

    def commits_url(self, branch: str) -> str:
        return f"https://github.com/{self.slug}/commits/{branch}"

    def file_url(self, ref: str, path: str) -> str:
        return f"https://github.com/{self.slug}/blob/{ref}/{path}"
