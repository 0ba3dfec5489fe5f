from __future__ import annotations

from rt.output.console import MockConsole
from rt.services.release.model import LtsBranch, LtsBranches
from rt.services.release.print_trains import print_active_release_trains
from rt.test.services.release_fakes import npm_info, trains, v


def test_latest_and_unpublished_next() -> None:
    console = MockConsole()
    print_active_release_trains(
        trains(latest=("12.1.x", "12.1.3"), next=("main", "12.2.0-next.0")),
        LtsBranches(),
        npm_info(versions=("12.1.3",)),
        console=console,
    )
    text = console.text
    assert "- 12.1.x contains changes for the most recent patch." in text
    assert 'Most recent patch version for this branch is "v12.1.3".' in text
    assert "- main contains changes for a minor currently in active development." in text
    assert 'set to "v12.2.0-next.0", but has not been published yet.' in text
    assert "- No release-candidate or feature-freeze branch currently active." in text
    assert "- No active LTS version branches." in text


def test_feature_freeze_exceptional_minor_and_lts() -> None:
    console = MockConsole()
    lts_11 = LtsBranch(name="11.2.x", version=v("11.2.9"), npm_dist_tag="v11-lts")
    lts = LtsBranches(active=(lts_11,))
    print_active_release_trains(
        trains(
            latest=("12.2.x", "12.2.5"),
            next=("main", "13.1.0-next.0"),
            rc=("13.0.x", "13.0.0-next.4"),
            exceptional_minor=("12.3.x", "12.3.0-next.1"),
        ),
        lts,
        npm_info(versions=("12.3.0-next.1", "13.1.0-next.0")),
        console=console,
    )
    text = console.text
    assert "12.3.x contains changes for an exceptional minor" in text
    assert 'Most recent pre-release for this branch is "v12.3.0-next.1".' in text
    assert "13.0.x contains changes for an upcoming major" in text
    assert "currently in feature-freeze phase." in text
    assert 'Most recent pre-release version for this branch is "v13.1.0-next.0".' in text
    assert "No release-candidate" not in text
    assert "- 11.2.x is currently in active long-term support phase." in text
