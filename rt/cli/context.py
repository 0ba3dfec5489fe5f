from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import NoReturn

import typer

from rt.core.config import CONFIG_FILE_NAME, ProjectConfig, load_config
from rt.core.errors import ErrorCode
from rt.core.result import Err
from rt.git.repository import GitClient
from rt.output.console import ConsoleProtocol, RichConsole
from rt.output.prompt import TyperPrompt
from rt.platform.http import RealHttpClient
from rt.services.release.context import ReleaseContext
from rt.services.release.gh import GithubClient, ensure_gh_available, resolve_github_token
from rt.services.release.npm import PackageManagerClient
from rt.services.release.npm_registry import DEFAULT_REGISTRY_URL, NpmRegistry
from rt.services.release.timeouts import REGISTRY_TIMEOUT_SECONDS


@dataclass(frozen=True, slots=True)
class CLIContext:
    project_dir: Path
    config: ProjectConfig
    console: ConsoleProtocol


def _exit_env(message: str, hint: str | None = None) -> NoReturn:
    typer.echo(f"error: {message}", err=True)
    if hint:
        typer.echo(f"hint: {hint}", err=True)
    raise typer.Exit(code=int(ErrorCode.ENV_ERROR))


def build_context(*, project_dir: Path | None = None, verbose: bool = False) -> CLIContext:
    root = (project_dir or Path.cwd()).resolve()
    loaded = load_config(root / CONFIG_FILE_NAME)
    if isinstance(loaded, Err):
        _exit_env(loaded.error.message, f"expected {CONFIG_FILE_NAME} in {root}")
    return CLIContext(project_dir=root, config=loaded.value, console=RichConsole(verbose=verbose))


def build_release_context(cli: CLIContext) -> ReleaseContext:
    """Wire the real git, GitHub, package manager and registry clients."""
    gh = ensure_gh_available()
    if isinstance(gh, Err):
        _exit_env(gh.error.message, gh.error.hint)
    token = resolve_github_token(project_dir=cli.project_dir)
    if isinstance(token, Err):
        _exit_env(token.error.message, token.error.hint)

    config = cli.config
    github = config.github
    release = config.release
    return ReleaseContext(
        config=config,
        project_dir=cli.project_dir,
        git=GitClient(cli.project_dir, github=github, token=token.value),
        github=GithubClient(project_dir=cli.project_dir, owner=github.owner, name=github.name),
        pm=PackageManagerClient(cli.project_dir),
        registry=NpmRegistry(
            RealHttpClient(timeout=REGISTRY_TIMEOUT_SECONDS),
            package_name=release.representative_npm_package,
            registry_url=release.publish_registry or DEFAULT_REGISTRY_URL,
        ),
        console=cli.console,
        prompt=TyperPrompt(cli.console),
        env=dict(os.environ),
    )


def build_package_manager(cli: CLIContext) -> PackageManagerClient:
    """Package manager for registry-only commands; needs no GitHub tooling."""
    return PackageManagerClient(cli.project_dir)
