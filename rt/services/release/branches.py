from __future__ import annotations

import re

from rt.services.release.semver import SemVer

EXCEPTIONAL_MINOR_MARKER = "__rtExceptionalMinor__"

_VERSION_BRANCH_RE = re.compile(r"^(\d+)\.(\d+)\.x$")


def is_version_branch(name: str) -> bool:
    return _VERSION_BRANCH_RE.match(name) is not None


def version_branch_to_semver(name: str) -> SemVer | None:
    """``13.1.x`` -> ``13.1.0``; None for anything else."""
    m = _VERSION_BRANCH_RE.match(name)
    if m is None:
        return None
    return SemVer(int(m.group(1)), int(m.group(2)), 0)


def version_branch_name(version: SemVer) -> str:
    return f"{version.major}.{version.minor}.x"


def select_version_branches(
    names: list[str], *, majors: list[int]
) -> list[tuple[str, SemVer]]:
    """Version branches of the given majors, newest first."""
    out: list[tuple[str, SemVer]] = []
    for name in names:
        parsed = version_branch_to_semver(name)
        if parsed is not None and parsed.major in majors:
            out.append((name, parsed))
    out.sort(key=lambda item: item[1], reverse=True)
    return out
