"""CHANGELOG.md maintenance.

The file is a list of entries separated by ``SPLIT_MARKER``, newest first.
Every entry starts with an ``<a name="<version>"></a>`` anchor which is
used to identify it.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

from rt.core.result import Err, Ok, Result
from rt.platform.files import atomic_write_text
from rt.services.release.errors import ReleaseError
from rt.services.release.model import ReleaseNotes
from rt.services.release.semver import SemVer, parse_semver

SPLIT_MARKER = "<!-- CHANGELOG SPLIT MARKER -->"
_JOIN_MARKER = f"\n\n{SPLIT_MARKER}\n\n"
_ANCHOR_RE = re.compile(r'<a name="(.*)"></a>')

# GitHub rejects release bodies above this size.
GITHUB_RELEASE_BODY_LIMIT = 125_000


@dataclass(frozen=True, slots=True)
class ChangelogEntry:
    version: SemVer
    content: str


def parse_entry(content: str) -> Result[ChangelogEntry, ReleaseError]:
    m = _ANCHOR_RE.search(content)
    if m is None:
        return Err(
            ReleaseError(
                kind="invalid_input",
                message="Unable to determine version for changelog entry.",
                hint=content.strip()[:200],
            )
        )
    version = parse_semver(m.group(1))
    if version is None:
        return Err(
            ReleaseError(
                kind="invalid_input",
                message=f"Unable to determine version for changelog entry, with tag: {m.group(1)}",
            )
        )
    return Ok(ChangelogEntry(version=version, content=content.strip()))


def read_entries(path: Path) -> Result[list[ChangelogEntry], ReleaseError]:
    if not path.exists():
        return Ok([])
    entries: list[ChangelogEntry] = []
    for chunk in path.read_text(encoding="utf-8").split(SPLIT_MARKER):
        if not chunk.strip():
            continue
        entry = parse_entry(chunk)
        if isinstance(entry, Err):
            return entry
        entries.append(entry.value)
    return Ok(entries)


def write_entries(path: Path, entries: list[ChangelogEntry]) -> None:
    atomic_write_text(path, _JOIN_MARKER.join(e.content for e in entries))


def without_prerelease_entries(
    entries: list[ChangelogEntry], version: SemVer
) -> list[ChangelogEntry]:
    """Drop prerelease entries (``-next.N``, ``-rc.N``) of the given release."""
    return [
        e
        for e in entries
        if not e.version.prerelease
        or (e.version.major, e.version.minor, e.version.patch)
        != (version.major, version.minor, version.patch)
    ]


def prepend_release_notes(path: Path, notes: ReleaseNotes) -> Result[None, ReleaseError]:
    """Add the entry for ``notes`` on top of the changelog.

    A stable release replaces the prerelease entries that led up to it.
    """
    entries = read_entries(path)
    if isinstance(entries, Err):
        return entries
    current = entries.value
    if not notes.version.prerelease:
        current = without_prerelease_entries(current, notes.version)

    new_entry = parse_entry(notes.markdown)
    if isinstance(new_entry, Err):
        return new_entry
    write_entries(path, [new_entry.value, *current])
    return Ok(None)


def github_release_body(notes: ReleaseNotes, *, changelog_url: str) -> str:
    """Release body for GitHub, or a link to the changelog when it is too large."""
    if len(notes.github_release_body) > GITHUB_RELEASE_BODY_LIMIT:
        return (
            "Release notes are too large to be captured here. "
            f"[View all changes here]({changelog_url}#{notes.url_fragment})."
        )
    return notes.github_release_body
