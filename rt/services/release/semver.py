from __future__ import annotations

import re
from dataclasses import dataclass, field
from functools import total_ordering
from typing import Literal

IncKind = Literal["major", "minor", "patch", "prerelease"]
Identifier = str | int

_SEMVER_RE = re.compile(
    r"^v?(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    r"(?:-((?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*)"
    r"(?:\.(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*))*))?"
    r"(?:\+([0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*))?$"
)


def _parse_identifier(raw: str) -> Identifier:
    return int(raw) if raw.isdigit() else raw


def _compare_identifiers(a: Identifier, b: Identifier) -> int:
    if isinstance(a, int) and isinstance(b, int):
        return (a > b) - (a < b)
    # Numeric identifiers have lower precedence than alphanumeric ones.
    if isinstance(a, int):
        return -1
    if isinstance(b, int):
        return 1
    return (a > b) - (a < b)


@total_ordering
@dataclass(frozen=True, slots=True)
class SemVer:
    """A semantic version with npm-compatible precedence and increments."""

    major: int
    minor: int
    patch: int
    prerelease: tuple[Identifier, ...] = ()
    # Build metadata never takes part in equality or precedence.
    build: tuple[str, ...] = field(default=(), compare=False)

    def format(self) -> str:
        out = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            out += "-" + ".".join(str(p) for p in self.prerelease)
        return out

    def __str__(self) -> str:
        return self.format()

    @property
    def is_prerelease(self) -> bool:
        return bool(self.prerelease)

    @property
    def prerelease_tag(self) -> str | None:
        """The leading prerelease identifier, e.g. ``"rc"`` for ``1.0.0-rc.2``."""
        if not self.prerelease:
            return None
        head = self.prerelease[0]
        return head if isinstance(head, str) else None

    def compare(self, other: SemVer) -> int:
        for a, b in (
            (self.major, other.major),
            (self.minor, other.minor),
            (self.patch, other.patch),
        ):
            if a != b:
                return 1 if a > b else -1

        if not self.prerelease and not other.prerelease:
            return 0
        if not self.prerelease:
            return 1
        if not other.prerelease:
            return -1

        for a, b in zip(self.prerelease, other.prerelease):
            c = _compare_identifiers(a, b)
            if c != 0:
                return c
        n, m = len(self.prerelease), len(other.prerelease)
        return (n > m) - (n < m)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, SemVer):
            return NotImplemented
        return self.compare(other) < 0

    def same_precedence(self, other: SemVer) -> bool:
        return self.compare(other) == 0

    def without_prerelease(self) -> SemVer:
        return SemVer(self.major, self.minor, self.patch)

    def inc(self, kind: IncKind, identifier: str | None = None) -> SemVer:
        """Increment like ``npm version`` / node-semver ``inc``.

        ``1.2.3-next.1`` -> prerelease -> ``1.2.3-next.2``;
        ``1.2.3-next.4`` -> prerelease("rc") -> ``1.2.3-rc.0``;
        ``1.2.3`` -> prerelease("rc") -> ``1.2.4-rc.0``;
        ``2.0.0-rc.1`` -> major -> ``2.0.0``.
        """
        match kind:
            case "major":
                if self.minor != 0 or self.patch != 0 or not self.prerelease:
                    return SemVer(self.major + 1, 0, 0)
                return SemVer(self.major, 0, 0)
            case "minor":
                if self.patch != 0 or not self.prerelease:
                    return SemVer(self.major, self.minor + 1, 0)
                return SemVer(self.major, self.minor, 0)
            case "patch":
                if not self.prerelease:
                    return SemVer(self.major, self.minor, self.patch + 1)
                return SemVer(self.major, self.minor, self.patch)
            case "prerelease":
                if not self.prerelease:
                    base = SemVer(self.major, self.minor, self.patch + 1)
                    return base._with_prerelease(_initial_prerelease(identifier))
                return self._with_prerelease(_bump_prerelease(self.prerelease, identifier))
            case _:
                raise AssertionError(f"unexpected increment kind: {kind}")

    def _with_prerelease(self, prerelease: tuple[Identifier, ...]) -> SemVer:
        return SemVer(self.major, self.minor, self.patch, prerelease)


def _initial_prerelease(identifier: str | None) -> tuple[Identifier, ...]:
    return (identifier, 0) if identifier else (0,)


def _bump_prerelease(
    current: tuple[Identifier, ...], identifier: str | None
) -> tuple[Identifier, ...]:
    if identifier is not None and current[0] != identifier:
        return (identifier, 0)

    parts = list(current)
    for i in range(len(parts) - 1, -1, -1):
        part = parts[i]
        if isinstance(part, int):
            parts[i] = part + 1
            return tuple(parts)
    parts.append(0)
    return tuple(parts)


def parse_semver(raw: str) -> SemVer | None:
    """Parse ``MAJOR.MINOR.PATCH[-PRERELEASE][+BUILD]`` (a leading ``v`` is allowed)."""
    m = _SEMVER_RE.match(raw.strip())
    if m is None:
        return None
    prerelease = tuple(_parse_identifier(p) for p in m.group(4).split(".")) if m.group(4) else ()
    build = tuple(m.group(5).split(".")) if m.group(5) else ()
    return SemVer(int(m.group(1)), int(m.group(2)), int(m.group(3)), prerelease, build)


def is_first_next_prerelease(version: SemVer) -> bool:
    """True for ``X.Y.Z-next.0``, the version a freshly bumped next branch carries."""
    return version.prerelease == ("next", 0)


def is_experimental_semver(version: SemVer) -> bool:
    return version.major == 0 and version.minor >= 100


def create_experimental_semver(version: SemVer) -> SemVer:
    """Map ``M.m.p[-pre]`` onto the experimental line ``0.(M*100+m).p[-pre]``."""
    return SemVer(0, version.major * 100 + version.minor, version.patch, version.prerelease)


def release_tag_for_version(version: SemVer) -> str:
    return version.format()
