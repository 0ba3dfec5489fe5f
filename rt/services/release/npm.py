"""Package manager invocations for the checked-out project.

The release tool never builds or publishes packages by itself: it drives
``npm``/``pnpm``/``yarn`` and the project's own build and precheck commands.

Build contract: ``build_command`` prints a JSON array of
``{"name": ..., "outputPath": ...}`` objects on stdout.
Precheck contract: ``precheck_command`` receives
``{"newVersion": ..., "builtPackagesWithInfo": [...]}`` on stdin and exits
non-zero to block the release.
"""

from __future__ import annotations

import json
import shutil
from pathlib import Path
from typing import Literal

from rt.core.config import CONFIG_FILE_NAME, NpmPackage, load_config
from rt.core.result import Err, Ok, Result
from rt.core.structured import as_dict_list, get_str
from rt.platform.process import ProcessError
from rt.platform.process import run as run_process
from rt.platform.process import run_streaming
from rt.services.release.errors import ReleaseError, ReleaseErrorKind
from rt.services.release.model import BuiltPackage, BuiltPackageWithInfo
from rt.services.release.semver import SemVer
from rt.services.release.timeouts import BUILD_TIMEOUT_SECONDS, NPM_TIMEOUT_SECONDS

PackageManager = Literal["npm", "pnpm", "yarn"]


def detect_package_manager(project_dir: Path) -> PackageManager:
    if (project_dir / "pnpm-lock.yaml").exists():
        return "pnpm"
    if (project_dir / "yarn.lock").exists():
        return "yarn"
    return "npm"


def _registry_args(registry: str | None) -> list[str]:
    return ["--registry", registry] if registry is not None else []


def _failure(kind: ReleaseErrorKind, message: str, error: ProcessError) -> ReleaseError:
    return ReleaseError(kind=kind, message=message, hint=error.detail)


def _built_package_payload(pkg: BuiltPackageWithInfo) -> dict[str, object]:
    return {
        "name": pkg.name,
        "outputPath": str(pkg.output_path),
        "version": pkg.version.format(),
        "experimental": pkg.experimental,
        "hash": pkg.hash,
    }


class PackageManagerClient:
    """Package manager and project script runner rooted at the project clone."""

    def __init__(self, project_dir: Path) -> None:
        self.project_dir = project_dir

    @property
    def package_manager(self) -> PackageManager:
        return detect_package_manager(self.project_dir)

    # ------------------------------------------------------------------
    # project scripts

    def install(self) -> Result[None, ReleaseError]:
        """Install dependencies exactly as locked for the checked-out branch."""
        pm = self.package_manager
        if pm == "pnpm":
            cmd = ["pnpm", "install", "--frozen-lockfile", "--config.confirmModulesPurge=false"]
        elif pm == "yarn":
            if (self.project_dir / ".yarnrc.yml").exists():
                cmd = ["yarn", "install", "--immutable"]
            else:
                cmd = ["yarn", "install", "--frozen-lockfile", "--non-interactive"]
            shutil.rmtree(self.project_dir / "node_modules", ignore_errors=True)
        else:
            cmd = ["npm", "ci"]

        result = run_streaming(cmd, cwd=self.project_dir)
        if isinstance(result, Err):
            return Err(
                _failure(
                    "pm_failed", "An error occurred while installing dependencies.", result.error
                )
            )
        return Ok(None)

    def build(self, build_command: tuple[str, ...]) -> Result[list[BuiltPackage], ReleaseError]:
        result = run_process(
            list(build_command), cwd=self.project_dir, timeout=BUILD_TIMEOUT_SECONDS
        )
        if isinstance(result, Err):
            return Err(
                _failure(
                    "build_failed",
                    "An error occurred while building the release packages.",
                    result.error,
                )
            )

        try:
            raw: object = json.loads(result.value.strip())
        except json.JSONDecodeError as e:
            return Err(
                ReleaseError(
                    kind="build_failed",
                    message="build command did not print a JSON package list",
                    hint=str(e),
                )
            )

        packages: list[BuiltPackage] = []
        for entry in as_dict_list(raw):
            name = get_str(entry, "name")
            output = get_str(entry, "outputPath")
            if name is None or output is None:
                return Err(
                    ReleaseError(
                        kind="build_failed",
                        message="build output entry is missing name or outputPath",
                        hint=json.dumps(entry),
                    )
                )
            output_path = Path(output)
            if not output_path.is_absolute():
                output_path = self.project_dir / output_path
            packages.append(BuiltPackage(name=name, output_path=output_path))
        return Ok(packages)

    def info(self) -> Result[tuple[NpmPackage, ...], ReleaseError]:
        """Release packages declared by the checked-out branch's own config."""
        loaded = load_config(self.project_dir / CONFIG_FILE_NAME)
        if isinstance(loaded, Err):
            return Err(
                ReleaseError(
                    kind="invalid_config",
                    message="An error occurred while retrieving the release information for "
                    "the currently checked-out branch.",
                    hint=loaded.error.message,
                )
            )
        return Ok(loaded.value.release.npm_packages)

    def precheck(
        self,
        precheck_command: tuple[str, ...],
        *,
        new_version: SemVer,
        built_packages: list[BuiltPackageWithInfo],
    ) -> Result[None, ReleaseError]:
        payload = {
            "newVersion": new_version.format(),
            "builtPackagesWithInfo": [_built_package_payload(p) for p in built_packages],
        }
        result = run_process(
            list(precheck_command),
            cwd=self.project_dir,
            input=json.dumps(payload),
            timeout=BUILD_TIMEOUT_SECONDS,
        )
        if isinstance(result, Err):
            return Err(
                _failure(
                    "precheck_failed",
                    "An error occurred while running release pre-checks.",
                    result.error,
                )
            )
        return Ok(None)

    # ------------------------------------------------------------------
    # registry writes

    def publish(
        self, package_path: Path, dist_tag: str, registry: str | None
    ) -> Result[None, ReleaseError]:
        cmd = ["npm", "publish", "--access", "public", "--tag", dist_tag, *_registry_args(registry)]
        result = run_process(cmd, cwd=package_path, timeout=NPM_TIMEOUT_SECONDS)
        if isinstance(result, Err):
            return Err(
                _failure("publish_failed", f"failed to publish {package_path}", result.error)
            )
        return Ok(None)

    def set_dist_tag(
        self, package_name: str, dist_tag: str, version: SemVer, registry: str | None
    ) -> Result[None, ReleaseError]:
        cmd = [
            "npm",
            "dist-tag",
            "add",
            f"{package_name}@{version.format()}",
            dist_tag,
            *_registry_args(registry),
        ]
        result = run_process(cmd, cwd=self.project_dir, timeout=NPM_TIMEOUT_SECONDS)
        if isinstance(result, Err):
            return Err(
                _failure(
                    "pm_failed",
                    f'An error occurred while setting the NPM dist tag for "{package_name}".',
                    result.error,
                )
            )
        return Ok(None)

    def delete_dist_tag(
        self, package_name: str, dist_tag: str, registry: str | None
    ) -> Result[None, ReleaseError]:
        cmd = ["npm", "dist-tag", "rm", package_name, dist_tag, *_registry_args(registry)]
        result = run_process(cmd, cwd=self.project_dir, timeout=NPM_TIMEOUT_SECONDS)
        if isinstance(result, Err):
            return Err(
                _failure(
                    "pm_failed",
                    f'An error occurred while deleting the NPM dist tag for "{package_name}".',
                    result.error,
                )
            )
        return Ok(None)

    # ------------------------------------------------------------------
    # session

    def is_logged_in(self, registry: str | None) -> bool:
        result = run_process(
            ["npm", "whoami", *_registry_args(registry)],
            cwd=self.project_dir,
            timeout=NPM_TIMEOUT_SECONDS,
        )
        return isinstance(result, Ok)

    def login(self, registry: str | None) -> Result[None, ReleaseError]:
        result = run_streaming(
            ["npm", "login", *_registry_args(registry), "--no-browser"], cwd=self.project_dir
        )
        if isinstance(result, Err):
            return Err(_failure("pm_failed", "npm login failed", result.error))
        return Ok(None)

    def logout(self, registry: str | None) -> bool:
        """Log out; returns whether a session is still active afterwards."""
        run_process(
            ["npm", "logout", *_registry_args(registry)],
            cwd=self.project_dir,
            timeout=NPM_TIMEOUT_SECONDS,
        )
        return self.is_logged_in(registry)
