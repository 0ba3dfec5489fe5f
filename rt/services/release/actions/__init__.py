"""Release actions, in the order they are offered in the menu."""

from __future__ import annotations

from rt.services.release.actions.base import ReleaseAction, StagingPhase
from rt.services.release.actions.branch_off_next import (
    MoveNextIntoFeatureFreeze,
    MoveNextIntoReleaseCandidate,
)
from rt.services.release.actions.configure_next_as_major import ConfigureNextAsMajor
from rt.services.release.actions.cut_lts import (
    CutLongTermSupportPatch,
    SpecialCutLongTermSupportMinor,
)
from rt.services.release.actions.cut_new_patch import CutNewPatch
from rt.services.release.actions.cut_stable import CutStable
from rt.services.release.actions.exceptional_minor import (
    CutExceptionalMinorPrerelease,
    CutExceptionalMinorReleaseCandidate,
    PrepareExceptionalMinor,
)
from rt.services.release.actions.prerelease import (
    CutNpmNextPrerelease,
    CutNpmNextReleaseCandidate,
)
from rt.services.release.actions.tag_recent_major import TagRecentMajorAsLatest

__all__ = [
    "RELEASE_ACTIONS",
    "ReleaseAction",
    "StagingPhase",
    "ConfigureNextAsMajor",
    "CutExceptionalMinorPrerelease",
    "CutExceptionalMinorReleaseCandidate",
    "CutLongTermSupportPatch",
    "CutNewPatch",
    "CutNpmNextPrerelease",
    "CutNpmNextReleaseCandidate",
    "CutStable",
    "MoveNextIntoFeatureFreeze",
    "MoveNextIntoReleaseCandidate",
    "PrepareExceptionalMinor",
    "SpecialCutLongTermSupportMinor",
    "TagRecentMajorAsLatest",
]

RELEASE_ACTIONS: tuple[type[ReleaseAction], ...] = (
    CutExceptionalMinorReleaseCandidate,
    CutExceptionalMinorPrerelease,
    TagRecentMajorAsLatest,
    CutStable,
    CutNpmNextReleaseCandidate,
    CutNewPatch,
    CutNpmNextPrerelease,
    MoveNextIntoFeatureFreeze,
    MoveNextIntoReleaseCandidate,
    ConfigureNextAsMajor,
    PrepareExceptionalMinor,
    CutLongTermSupportPatch,
    SpecialCutLongTermSupportMinor,
)
