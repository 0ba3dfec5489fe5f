"""Typed loading of the project's ``release.toml``.

Example::

    [github]
    owner = "acme"
    name = "widgets"
    main_branch = "main"

    [release]
    representative_npm_package = "@acme/core"
    build_command = ["pnpm", "run", "release:build"]
    precheck_command = ["pnpm", "run", "release:precheck"]
    release_pr_labels = ["action: merge"]

    [[release.npm_packages]]
    name = "@acme/core"

    [[release.npm_packages]]
    name = "@acme/labs"
    experimental = true
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from .result import Err, Ok, Result
from .structured import (
    StrDict,
    as_str_dict,
    get_bool,
    get_list,
    get_str,
    get_str_list,
    get_table,
)

__all__ = [
    "CONFIG_FILE_NAME",
    "ConfigError",
    "GithubConfig",
    "NpmPackage",
    "ReleaseConfig",
    "ProjectConfig",
    "load_config",
    "parse_config",
]

CONFIG_FILE_NAME = "release.toml"


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when release.toml cannot be loaded or is invalid."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class GithubConfig:
    owner: str
    name: str
    main_branch: str = "main"
    use_ssh: bool = False

    @property
    def slug(self) -> str:
        return f"{self.owner}/{self.name}"


@dataclass(frozen=True, slots=True)
class NpmPackage:
    """A package published by the release tool.

    Experimental packages are published with the experimental version
    (``0.<major*100+minor>.<patch>``) and never receive LTS tags.
    """

    name: str
    experimental: bool = False


@dataclass(frozen=True, slots=True)
class ReleaseConfig:
    npm_packages: tuple[NpmPackage, ...]
    representative_npm_package: str
    build_command: tuple[str, ...]
    precheck_command: tuple[str, ...] | None = None
    publish_registry: str | None = None
    release_pr_labels: tuple[str, ...] = ()
    changelog_file: str = "CHANGELOG.md"


@dataclass(frozen=True, slots=True)
class ProjectConfig:
    github: GithubConfig
    release: ReleaseConfig

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Result[ProjectConfig, list[str]]:
        """Build a config from parsed TOML, collecting every validation error."""
        errors: list[str] = []
        github: StrDict = get_table(data, "github") or {}
        release: StrDict = get_table(data, "release") or {}

        owner = get_str(github, "owner")
        name = get_str(github, "name")
        if owner is None:
            errors.append("[github] owner is required")
        if name is None:
            errors.append("[github] name is required")

        packages: list[NpmPackage] = []
        for index, item in enumerate(get_list(release, "npm_packages") or []):
            entry = as_str_dict(item)
            pkg_name = get_str(entry, "name") if entry is not None else None
            if entry is None or pkg_name is None:
                errors.append(f"[[release.npm_packages]] entry {index} needs a name")
                continue
            packages.append(
                NpmPackage(name=pkg_name, experimental=get_bool(entry, "experimental") or False)
            )
        if not packages:
            errors.append("[release] npm_packages must list at least one package")

        representative = get_str(release, "representative_npm_package")
        if representative is None:
            errors.append("[release] representative_npm_package is required")
        else:
            match = next((p for p in packages if p.name == representative), None)
            if match is None:
                errors.append(
                    f'representative_npm_package "{representative}" is not listed in npm_packages'
                )
            elif match.experimental:
                errors.append(
                    f'representative_npm_package "{representative}" must not be experimental'
                )

        build_command = get_str_list(release, "build_command")
        if not build_command:
            errors.append("[release] build_command is required")

        if errors or owner is None or name is None or representative is None:
            return Err(errors)

        precheck = get_str_list(release, "precheck_command")
        return Ok(
            cls(
                github=GithubConfig(
                    owner=owner,
                    name=name,
                    main_branch=get_str(github, "main_branch") or "main",
                    use_ssh=get_bool(github, "use_ssh") or False,
                ),
                release=ReleaseConfig(
                    npm_packages=tuple(packages),
                    representative_npm_package=representative,
                    build_command=tuple(build_command),
                    precheck_command=tuple(precheck) if precheck else None,
                    publish_registry=get_str(release, "publish_registry"),
                    release_pr_labels=tuple(get_str_list(release, "release_pr_labels")),
                    changelog_file=get_str(release, "changelog_file") or "CHANGELOG.md",
                ),
            )
        )


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    import tomllib

    try:
        data_obj: object = tomllib.loads(path.read_bytes().decode("utf-8"))
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))

    data = as_str_dict(data_obj)
    if data is None:
        return Err(ConfigError("Config root must be a TOML table", path=path))
    return Ok(data)


def parse_config(
    data: Mapping[str, object], *, path: Path | None = None
) -> Result[ProjectConfig, ConfigError]:
    built = ProjectConfig.from_dict(data)
    if isinstance(built, Err):
        lines = "\n".join(f"  - {e}" for e in built.error)
        return Err(ConfigError(f"Invalid release configuration:\n{lines}", path=path))
    return built


def load_config(path: Path) -> Result[ProjectConfig, ConfigError]:
    """Load and validate ``release.toml``.

    Args:
        path: Path to the config file (usually ``<project>/release.toml``).

    Returns:
        Ok(ProjectConfig) on success, Err(ConfigError) listing every problem.
    """
    parsed = _parse_toml(path)
    if isinstance(parsed, Err):
        return parsed
    return parse_config(parsed.value, path=path)
