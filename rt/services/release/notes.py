"""Release notes rendered from conventional commits.

Only ``feat``, ``fix`` and ``perf`` commits are listed; breaking changes and
deprecations are always surfaced whatever the commit type.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import date
from typing import TypeVar

from rt.core.result import Err, Ok, Result
from rt.services.release.model import ReleaseNotes
from rt.services.release.semver import SemVer

VISIBLE_TYPES = frozenset({"feat", "fix", "perf"})

_RECORD_SEP = "\x1e"
_FIELD_SEP = "\x1f"
GIT_LOG_FORMAT = f"%H{_FIELD_SEP}%h{_FIELD_SEP}%B{_RECORD_SEP}"

_HEADER_RE = re.compile(r"^(\w+)(?:\(([^)]+)\))?: (.*)$")
_REVERT_RE = re.compile(r'^revert:? "?(.*?)"?$', re.IGNORECASE)
_NOTE_RE = re.compile(r"^(BREAKING CHANGE|DEPRECATED):\s*", re.MULTILINE)
_PR_REF_RE = re.compile(r"#(\d+)")


@dataclass(frozen=True, slots=True)
class Commit:
    hash: str
    short_hash: str
    header: str
    type: str
    scope: str
    subject: str
    breaking_changes: tuple[str, ...] = ()
    deprecations: tuple[str, ...] = ()
    is_revert: bool = False


def _split_notes(body: str) -> tuple[tuple[str, ...], tuple[str, ...]]:
    breaking: list[str] = []
    deprecated: list[str] = []
    matches = list(_NOTE_RE.finditer(body))
    for i, m in enumerate(matches):
        end = matches[i + 1].start() if i + 1 < len(matches) else len(body)
        text = body[m.end() : end].strip()
        if not text:
            continue
        if m.group(1) == "BREAKING CHANGE":
            breaking.append(text)
        else:
            deprecated.append(text)
    return tuple(breaking), tuple(deprecated)


def parse_commit(sha: str, short_sha: str, message: str) -> Commit:
    lines = message.strip().splitlines()
    header = lines[0].strip() if lines else ""
    body = "\n".join(lines[1:])
    revert = _REVERT_RE.match(header)
    m = _HEADER_RE.match(header)
    breaking, deprecated = _split_notes(body)
    return Commit(
        hash=sha,
        short_hash=short_sha,
        header=revert.group(1) if revert else header,
        type=m.group(1) if m else "",
        scope=(m.group(2) or "") if m else "",
        subject=m.group(3) if m else header,
        breaking_changes=breaking,
        deprecations=deprecated,
        is_revert=revert is not None,
    )


def parse_git_log(output: str) -> list[Commit]:
    """Parse ``git log --format=GIT_LOG_FORMAT`` output, dropping reverted pairs."""
    commits: dict[str, Commit] = {}
    records = [r for r in output.split(_RECORD_SEP) if r.strip()]
    # git log lists newest first; walk oldest first so reverts see their target.
    for record in reversed(records):
        parts = record.strip("\n").split(_FIELD_SEP, 2)
        if len(parts) != 3:
            continue
        commit = parse_commit(parts[0].strip(), parts[1].strip(), parts[2])
        if commit.is_revert:
            commits.pop(commit.header, None)
        else:
            commits[commit.header] = commit
    return list(reversed(commits.values()))


E = TypeVar("E")


def commits_in_range(
    log: Callable[[str], Result[str, E]], base_ref: str, head_ref: str
) -> Result[list[Commit], E]:
    """Commits in ``base..head`` minus cherry-picks already present in ``head..base``."""
    head_out = log(f"{base_ref}..{head_ref}")
    if isinstance(head_out, Err):
        return head_out
    base_out = log(f"{head_ref}..{base_ref}")
    if isinstance(base_out, Err):
        return base_out

    only_in_base: dict[str, int] = {}
    for commit in parse_git_log(base_out.value):
        only_in_base[commit.header] = only_in_base.get(commit.header, 0) + 1

    out: list[Commit] = []
    for commit in parse_git_log(head_out.value):
        seen = only_in_base.get(commit.header, 0)
        if seen > 0:
            only_in_base[commit.header] = seen - 1
            continue
        out.append(commit)
    return Ok(out)


@dataclass(frozen=True, slots=True)
class _RenderContext:
    version: SemVer
    owner: str
    name: str
    date_stamp: str

    def commit_url(self, commit: Commit) -> str:
        return f"https://github.com/{self.owner}/{self.name}/commit/{commit.hash}"

    def pull_request_links(self, text: str) -> str:
        base = f"https://github.com/{self.owner}/{self.name}/pull"
        return _PR_REF_RE.sub(lambda m: f"[#{m.group(1)}]({base}/{m.group(1)})", text)


def _groups(commits: Iterable[Commit]) -> list[tuple[str, list[Commit]]]:
    grouped: dict[str, list[Commit]] = {}
    for commit in commits:
        grouped.setdefault(commit.scope, []).append(commit)
    return [
        (title, sorted(items, key=lambda c: (c.type, c.subject)))
        for title, items in sorted(grouped.items())
    ]


def _bulletize(text: str) -> str:
    return "- " + text.replace("\n", "\n  ")


def _include(commit: Commit) -> bool:
    return bool(commit.breaking_changes or commit.deprecations) or commit.type in VISIBLE_TYPES


def _notes_sections(commits: list[Commit]) -> list[str]:
    lines: list[str] = []
    breaking = [c for c in commits if c.breaking_changes]
    if breaking:
        lines += ["## Breaking Changes", ""]
        for title, items in _groups(breaking):
            lines.append(f"### {title}")
            lines += [_bulletize(text) for c in items for text in c.breaking_changes]
        lines.append("")
    deprecations = [c for c in commits if c.deprecations]
    if deprecations:
        lines += ["## Deprecations"]
        for title, items in _groups(deprecations):
            lines.append(f"### {title}")
            lines += [_bulletize(text) for c in items for text in c.deprecations]
        lines.append("")
    return lines


def _render_changelog_entry(ctx: _RenderContext, commits: list[Commit]) -> str:
    lines = [f'<a name="{ctx.version}"></a>', f"# {ctx.version} ({ctx.date_stamp})", ""]
    lines += _notes_sections(commits)
    for title, items in _groups(c for c in commits if _include(c)):
        lines += ["", f"### {title}", "| Commit | Type | Description |", "| -- | -- | -- |"]
        for c in items:
            link = f"[{c.short_hash}]({ctx.commit_url(c)})"
            lines.append(f"| {link} | {c.type} | {ctx.pull_request_links(c.subject)} |")
    return "\n".join(lines).strip() + "\n"


def _render_github_release_entry(ctx: _RenderContext, commits: list[Commit]) -> str:
    lines = [f'<a name="{ctx.version}"></a>', f"# {ctx.version} ({ctx.date_stamp})"]
    for title, items in _groups(c for c in commits if _include(c)):
        lines += ["", f"### {title}", "| Commit | Description |", "| -- | -- |"]
        for c in items:
            color = {"fix": "green", "feat": "blue", "perf": "orange"}.get(c.type, "yellow")
            badge = f"https://img.shields.io/badge/{c.short_hash}-{c.type}-{color}"
            image = f"[![{c.type} - {c.short_hash}]({badge})]({ctx.commit_url(c)})"
            lines.append(f"| {image} | {c.subject} |")
    lines.append("")
    lines += _notes_sections(commits)
    return "\n".join(lines).strip() + "\n"


def build_release_notes(
    version: SemVer,
    commits: list[Commit],
    *,
    owner: str,
    name: str,
    today: date | None = None,
) -> ReleaseNotes:
    ctx = _RenderContext(
        version=version,
        owner=owner,
        name=name,
        date_stamp=(today or date.today()).isoformat(),
    )
    return ReleaseNotes(
        version=version,
        markdown=_render_changelog_entry(ctx, commits),
        github_release_body=_render_github_release_entry(ctx, commits),
    )
