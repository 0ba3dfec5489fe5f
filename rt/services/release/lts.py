"""Long-term support lines derived from registry dist tags."""

from __future__ import annotations

import calendar
import re
from datetime import datetime, timezone

from rt.services.release.branches import version_branch_name
from rt.services.release.model import LtsBranch, LtsBranches, NpmPackageInfo
from rt.services.release.semver import parse_semver

MAJOR_ACTIVE_SUPPORT_MONTHS = 6
MAJOR_LTS_MONTHS = 12

_LTS_DIST_TAG_RE = re.compile(r"^v(\d+)-lts$")


def is_lts_dist_tag(tag: str) -> bool:
    return _LTS_DIST_TAG_RE.match(tag) is not None


def lts_dist_tag_of_major(major: int) -> str:
    return f"v{major}-lts"


def _add_months(moment: datetime, months: int) -> datetime:
    month_index = moment.month - 1 + months
    year = moment.year + month_index // 12
    month = month_index % 12 + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def compute_lts_end_date(major_release_date: datetime) -> datetime:
    """Active support plus LTS period after the ``X.0.0`` release."""
    return _add_months(major_release_date, MAJOR_ACTIVE_SUPPORT_MONTHS + MAJOR_LTS_MONTHS)


def _parse_registry_time(raw: str) -> datetime | None:
    try:
        parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def lts_branches_from_package_info(
    info: NpmPackageInfo, *, today: datetime | None = None
) -> LtsBranches:
    """Split LTS dist tags into active and inactive lines, newest first.

    A line whose major release date is unknown is treated as inactive.
    """
    now = today or datetime.now(timezone.utc)
    active: list[LtsBranch] = []
    inactive: list[LtsBranch] = []

    for tag, raw_version in info.dist_tags.items():
        if not is_lts_dist_tag(tag):
            continue
        version = parse_semver(raw_version)
        if version is None:
            continue
        branch = LtsBranch(name=version_branch_name(version), version=version, npm_dist_tag=tag)
        released = _parse_registry_time(info.time.get(f"{version.major}.0.0", ""))
        if released is not None and now <= compute_lts_end_date(released):
            active.append(branch)
        else:
            inactive.append(branch)

    active.sort(key=lambda b: b.version, reverse=True)
    inactive.sort(key=lambda b: b.version, reverse=True)
    return LtsBranches(active=tuple(active), inactive=tuple(inactive))
