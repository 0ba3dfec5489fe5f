from __future__ import annotations

from pathlib import Path

import pytest
from typer.testing import CliRunner

import rt.cli.commands.release_cmd as release_cmd
import rt.services.release.gh as gh_mod
from rt import __version__
from rt.cli.app import app
from rt.cli.context import CLIContext
from rt.core.config import CONFIG_FILE_NAME
from rt.core.errors import ErrorCode
from rt.core.result import Ok, Result
from rt.services.release.errors import ReleaseError
from rt.services.release.npm import PackageManagerClient
from rt.services.release.semver import SemVer
from rt.test.services.release_fakes import CORE, LABS, FakePackageManager, make_harness

runner = CliRunner()

RELEASE_TOML = """\
[github]
owner = "acme"
name = "widgets"

[release]
representative_npm_package = "@acme/core"
build_command = ["pnpm", "build"]

[[release.npm_packages]]
name = "@acme/core"

[[release.npm_packages]]
name = "@acme/labs"
experimental = true
"""


@pytest.fixture
def project(tmp_path: Path) -> Path:
    (tmp_path / CONFIG_FILE_NAME).write_text(RELEASE_TOML, encoding="utf-8")
    return tmp_path


@pytest.fixture
def fake_pm(
    project: Path, tmp_path_factory: pytest.TempPathFactory, monkeypatch: pytest.MonkeyPatch
) -> FakePackageManager:
    harness = make_harness(tmp_path_factory.mktemp("release"))

    def fake_build_package_manager(cli: CLIContext) -> FakePackageManager:
        assert cli.project_dir == project.resolve()
        return harness.pm

    monkeypatch.setattr(release_cmd, "build_package_manager", fake_build_package_manager)
    return harness.pm


@pytest.fixture
def without_github_tooling(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(gh_mod.shutil, "which", lambda name: None)
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)
    monkeypatch.delenv("GH_TOKEN", raising=False)


def test_version() -> None:
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_missing_config_is_an_environment_error(tmp_path: Path) -> None:
    result = runner.invoke(app, ["release", "info", "--project", str(tmp_path)])
    assert result.exit_code == int(ErrorCode.ENV_ERROR)


@pytest.mark.parametrize("version", ["not-a-version", "0.1300.0"])
def test_dist_tag_set_rejects_version(version: str) -> None:
    result = runner.invoke(app, ["release", "npm-dist-tag", "set", "latest", version])
    assert result.exit_code == int(ErrorCode.USER_ERROR)


def test_dist_tag_set(project: Path, fake_pm: FakePackageManager) -> None:
    result = runner.invoke(
        app, ["release", "npm-dist-tag", "set", "latest", "13.0.0", "--project", str(project)]
    )
    assert result.exit_code == 0, result.output
    assert fake_pm.dist_tags == [
        (CORE.name, "latest", "13.0.0"),
        (LABS.name, "latest", "0.1300.0"),
    ]


def test_dist_tag_set_can_skip_experimental_packages(
    project: Path, fake_pm: FakePackageManager
) -> None:
    result = runner.invoke(
        app,
        [
            "release",
            "npm-dist-tag",
            "set",
            "v12-lts",
            "12.2.5",
            "--skip-experimental-packages",
            "--project",
            str(project),
        ],
    )
    assert result.exit_code == 0, result.output
    assert fake_pm.dist_tags == [(CORE.name, "v12-lts", "12.2.5")]


def test_dist_tag_delete(project: Path, fake_pm: FakePackageManager) -> None:
    result = runner.invoke(
        app, ["release", "npm-dist-tag", "delete", "next", "--project", str(project)]
    )
    assert result.exit_code == 0, result.output
    assert fake_pm.deleted_tags == [(CORE.name, "next"), (LABS.name, "next")]


@pytest.mark.usefixtures("without_github_tooling")
def test_dist_tag_commands_do_not_need_github_tooling(
    project: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    calls: list[tuple[str, str, str | None]] = []

    def fake_set(
        self: PackageManagerClient,
        package_name: str,
        dist_tag: str,
        version: SemVer,
        registry: str | None,
    ) -> Result[None, ReleaseError]:
        del self, registry
        calls.append((package_name, dist_tag, version.format()))
        return Ok(None)

    def fake_delete(
        self: PackageManagerClient, package_name: str, dist_tag: str, registry: str | None
    ) -> Result[None, ReleaseError]:
        del self, registry
        calls.append((package_name, dist_tag, None))
        return Ok(None)

    monkeypatch.setattr(PackageManagerClient, "set_dist_tag", fake_set)
    monkeypatch.setattr(PackageManagerClient, "delete_dist_tag", fake_delete)

    result = runner.invoke(
        app, ["release", "npm-dist-tag", "set", "latest", "1.2.3", "--project", str(project)]
    )
    assert result.exit_code == 0, result.output
    result = runner.invoke(
        app, ["release", "npm-dist-tag", "delete", "next", "--project", str(project)]
    )
    assert result.exit_code == 0, result.output

    assert calls == [
        (CORE.name, "latest", "1.2.3"),
        (LABS.name, "latest", "0.102.3"),
        (CORE.name, "next", None),
        (LABS.name, "next", None),
    ]


@pytest.mark.usefixtures("without_github_tooling")
def test_info_still_requires_github_tooling(project: Path) -> None:
    result = runner.invoke(app, ["release", "info", "--project", str(project)])
    assert result.exit_code == int(ErrorCode.ENV_ERROR)
