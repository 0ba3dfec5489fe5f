"""Explicit success/failure values.

Release steps never raise for expected failures (a failed git push, a
missing fork, a declined prompt). They return ``Ok(value)`` or
``Err(error)`` and the caller decides whether to continue:

    def read_version(path: Path) -> Result[SemVer, ReleaseError]:
        ...

    version = read_version(pkg_json)
    if isinstance(version, Err):
        return version
    print(version.value.format())

Pattern matching works too:

    match read_version(pkg_json):
        case Ok(v):
            ...
        case Err(e):
            ...
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeAlias, TypeVar

T = TypeVar("T")
E = TypeVar("E")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Successful outcome carrying ``value``."""

    value: T

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """Failed outcome carrying ``error``."""

    error: E

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


Result: TypeAlias = Ok[T] | Err[E]
