from __future__ import annotations

from rt.output.console import ConsoleProtocol, Style
from rt.services.release.model import ActiveReleaseTrains, LtsBranches, NpmPackageInfo


def _phase_of(train_prerelease_tag: str | None) -> str:
    return "feature-freeze" if train_prerelease_tag == "next" else "release-candidate"


def print_active_release_trains(
    active: ActiveReleaseTrains,
    lts: LtsBranches,
    npm_info: NpmPackageInfo,
    *,
    console: ConsoleProtocol,
) -> None:
    """Summarise the version branches and LTS lines of the project."""
    em = active.exceptional_minor
    rc = active.release_candidate
    latest = active.latest
    nxt = active.next

    console.print("Current version branches in the project:", Style.BOLD)

    if em is not None:
        phase = "next" if em.version.prerelease_tag == "next" else "release-candidate"
        console.print(
            f"- {em.branch_name} contains changes for an exceptional minor that is currently "
            f"in {phase} phase."
        )
        if npm_info.is_published(em.version):
            console.print(f'  Most recent pre-release for this branch is "v{em.version}".')
        else:
            console.print(f'  Version is set to "v{em.version}", but has not been published yet.')

    if rc is not None:
        kind = "major" if rc.is_major else "minor"
        console.print(
            f"- {rc.branch_name} contains changes for an upcoming {kind} that is currently "
            f"in {_phase_of(rc.version.prerelease_tag)} phase."
        )
        console.print(f'  Most recent pre-release for this branch is "v{rc.version}".')

    console.print(f"- {latest.branch_name} contains changes for the most recent patch.")
    console.print(f'  Most recent patch version for this branch is "v{latest.version}".')

    kind = "major" if nxt.is_major else "minor"
    console.print(
        f"- {nxt.branch_name} contains changes for a {kind} currently in active development."
    )
    if npm_info.is_published(nxt.version):
        console.print(f'  Most recent pre-release version for this branch is "v{nxt.version}".')
    else:
        console.print(
            f'  Version is currently set to "v{nxt.version}", but has not been published yet.'
        )

    if rc is None:
        console.print("- No release-candidate or feature-freeze branch currently active.")

    console.newline()
    console.print("Current active LTS version branches:", Style.BOLD)
    for branch in lts.active:
        console.print(f"- {branch.name} is currently in active long-term support phase.")
        console.print(f'  Most recent patch version for this branch is "v{branch.version}".')
    if not lts.active:
        console.print("- No active LTS version branches.")
    console.newline()
