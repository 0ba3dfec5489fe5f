from __future__ import annotations

from pathlib import Path
from typing import NoReturn, TypeVar

import typer

from rt.cli.context import (
    CLIContext,
    build_context,
    build_package_manager,
    build_release_context,
)
from rt.core.errors import ErrorCode
from rt.core.result import Err, Result
from rt.output.console import Style
from rt.services.release.dist_tags import (
    delete_npm_dist_tag_for_packages,
    set_npm_dist_tag_for_packages,
)
from rt.services.release.errors import ReleaseError
from rt.services.release.lts import lts_branches_from_package_info
from rt.services.release.print_trains import print_active_release_trains
from rt.services.release.semver import is_experimental_semver, parse_semver
from rt.services.release.tool import ReleaseTool
from rt.services.release.trains import fetch_active_release_trains

release_app = typer.Typer(add_completion=False, no_args_is_help=True)
dist_tag_app = typer.Typer(add_completion=False, no_args_is_help=True)
release_app.add_typer(dist_tag_app, name="npm-dist-tag", help="Manage NPM dist tags.")

_PROJECT_OPTION = typer.Option(
    None, "--project", help="Project root containing release.toml (default: cwd)"
)
_VERBOSE_OPTION = typer.Option(False, "--verbose", "-v", help="Show debug output")


def _exit(err: str, *, code: ErrorCode) -> NoReturn:
    typer.echo(f"error: {err}", err=True)
    raise typer.Exit(code=int(code))


T = TypeVar("T")


def _exit_on_error(
    result: Result[T, ReleaseError], ctx: CLIContext, code: ErrorCode = ErrorCode.FATAL
) -> T:
    if isinstance(result, Err):
        ctx.console.error(result.error.message)
        if result.error.hint:
            ctx.console.print(f"hint: {result.error.hint}", Style.DIM)
        raise typer.Exit(code=int(code))
    return result.value


@release_app.command("publish")
def publish_cmd(
    project: Path | None = _PROJECT_OPTION,
    verbose: bool = _VERBOSE_OPTION,
) -> None:
    """Run the interactive release tool."""
    ctx = build_context(project_dir=project, verbose=verbose)
    state = ReleaseTool(build_release_context(ctx)).run()
    raise typer.Exit(code=int(state.exit_code))


@release_app.command("info")
def info_cmd(
    project: Path | None = _PROJECT_OPTION,
    verbose: bool = _VERBOSE_OPTION,
) -> None:
    """Print the active release trains and LTS branches."""
    ctx = build_context(project_dir=project, verbose=verbose)
    release = build_release_context(ctx)
    active = _exit_on_error(
        fetch_active_release_trains(release.github, next_branch=release.next_branch), ctx
    )
    npm_info = _exit_on_error(release.registry.package_info(), ctx)
    print_active_release_trains(
        active, lts_branches_from_package_info(npm_info), npm_info, console=ctx.console
    )


@dist_tag_app.command("set")
def set_dist_tag_cmd(
    tag_name: str = typer.Argument(..., help="Dist tag to set, e.g. latest"),
    target_version: str = typer.Argument(..., help="Version the tag should point to"),
    skip_experimental_packages: bool = typer.Option(
        False,
        "--skip-experimental-packages",
        help="Leave experimental packages untouched (used for LTS tags)",
    ),
    project: Path | None = _PROJECT_OPTION,
    verbose: bool = _VERBOSE_OPTION,
) -> None:
    """Point a dist tag at a version for every configured package."""
    version = parse_semver(target_version)
    if version is None:
        _exit(f"invalid version: {target_version}", code=ErrorCode.USER_ERROR)
    if is_experimental_semver(version):
        # Experimental packages get their mapping of the given version automatically.
        _exit(
            "unexpected experimental SemVer version; specify the non-experimental version",
            code=ErrorCode.USER_ERROR,
        )

    ctx = build_context(project_dir=project, verbose=verbose)
    release = ctx.config.release
    _exit_on_error(
        set_npm_dist_tag_for_packages(
            build_package_manager(ctx),
            release.npm_packages,
            dist_tag=tag_name,
            version=version,
            registry=release.publish_registry,
            console=ctx.console,
            skip_experimental=skip_experimental_packages,
        ),
        ctx,
    )


@dist_tag_app.command("delete")
def delete_dist_tag_cmd(
    tag_name: str = typer.Argument(..., help="Dist tag to delete"),
    project: Path | None = _PROJECT_OPTION,
    verbose: bool = _VERBOSE_OPTION,
) -> None:
    """Delete a dist tag from every configured package."""
    ctx = build_context(project_dir=project, verbose=verbose)
    release = ctx.config.release
    _exit_on_error(
        delete_npm_dist_tag_for_packages(
            build_package_manager(ctx),
            release.npm_packages,
            dist_tag=tag_name,
            registry=release.publish_registry,
            console=ctx.console,
        ),
        ctx,
    )
