from __future__ import annotations

import json
from pathlib import Path

import pytest

from rt.core.result import Err, Ok, Result
from rt.platform.process import ProcessError
from rt.services.release import npm as npm_mod
from rt.services.release.model import BuiltPackageWithInfo
from rt.services.release.semver import SemVer

_RELEASE_TOML = """\
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


def _fail(cmd: list[str], *, stderr: str = "boom") -> Err[ProcessError]:
    return Err(ProcessError(command=tuple(cmd), returncode=1, stdout="", stderr=stderr))


def test_detect_package_manager(tmp_path: Path) -> None:
    assert npm_mod.detect_package_manager(tmp_path) == "npm"
    (tmp_path / "yarn.lock").write_text("", encoding="utf-8")
    assert npm_mod.detect_package_manager(tmp_path) == "yarn"
    (tmp_path / "pnpm-lock.yaml").write_text("", encoding="utf-8")
    assert npm_mod.detect_package_manager(tmp_path) == "pnpm"


def test_install_uses_frozen_lockfile(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    (tmp_path / "pnpm-lock.yaml").write_text("", encoding="utf-8")
    calls: list[list[str]] = []

    def fake_streaming(cmd: list[str], *, cwd: Path) -> Result[None, ProcessError]:
        del cwd
        calls.append(cmd)
        return Ok(None)

    monkeypatch.setattr(npm_mod, "run_streaming", fake_streaming)

    result = npm_mod.PackageManagerClient(tmp_path).install()
    assert isinstance(result, Ok)
    assert calls[0][:3] == ["pnpm", "install", "--frozen-lockfile"]


def test_install_failure_is_reported(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    def fake_streaming(cmd: list[str], *, cwd: Path) -> Result[None, ProcessError]:
        del cwd
        return _fail(cmd)

    monkeypatch.setattr(npm_mod, "run_streaming", fake_streaming)

    result = npm_mod.PackageManagerClient(tmp_path).install()
    assert isinstance(result, Err)
    assert result.error.kind == "pm_failed"


def test_build_parses_package_list(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    stdout = json.dumps(
        [
            {"name": "@acme/core", "outputPath": "dist/core"},
            {"name": "@acme/labs", "outputPath": "/abs/dist/labs"},
        ]
    )

    def fake_run(
        cmd: list[str], *, cwd: Path, timeout: float | None = None
    ) -> Result[str, ProcessError]:
        del cwd
        del timeout
        assert cmd == ["pnpm", "build"]
        return Ok(stdout)

    monkeypatch.setattr(npm_mod, "run_process", fake_run)

    result = npm_mod.PackageManagerClient(tmp_path).build(("pnpm", "build"))
    assert isinstance(result, Ok)
    assert [p.name for p in result.value] == ["@acme/core", "@acme/labs"]
    assert result.value[0].output_path == tmp_path / "dist" / "core"
    assert result.value[1].output_path == Path("/abs/dist/labs")


@pytest.mark.parametrize("stdout", ["not json", '[{"name": "@acme/core"}]'])
def test_build_rejects_malformed_output(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path, stdout: str
) -> None:
    def fake_run(
        cmd: list[str], *, cwd: Path, timeout: float | None = None
    ) -> Result[str, ProcessError]:
        del cmd, cwd, timeout
        return Ok(stdout)

    monkeypatch.setattr(npm_mod, "run_process", fake_run)

    result = npm_mod.PackageManagerClient(tmp_path).build(("pnpm", "build"))
    assert isinstance(result, Err)
    assert result.error.kind == "build_failed"


def test_precheck_receives_payload_on_stdin(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    seen: list[str | None] = []

    def fake_run(
        cmd: list[str],
        *,
        cwd: Path,
        input: str | None = None,
        timeout: float | None = None,
    ) -> Result[str, ProcessError]:
        del cmd, cwd, timeout
        seen.append(input)
        return Ok("")

    monkeypatch.setattr(npm_mod, "run_process", fake_run)

    built = BuiltPackageWithInfo(
        name="@acme/core",
        output_path=tmp_path,
        version=SemVer(12, 1, 4),
        experimental=False,
        hash="abc",
    )
    result = npm_mod.PackageManagerClient(tmp_path).precheck(
        ("node", "precheck.js"), new_version=SemVer(12, 1, 4), built_packages=[built]
    )
    assert isinstance(result, Ok)
    assert seen[0] is not None
    payload = json.loads(seen[0])
    assert payload["newVersion"] == "12.1.4"
    assert payload["builtPackagesWithInfo"][0]["name"] == "@acme/core"
    assert payload["builtPackagesWithInfo"][0]["hash"] == "abc"


def test_precheck_failure_blocks(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    def fake_run(
        cmd: list[str],
        *,
        cwd: Path,
        input: str | None = None,
        timeout: float | None = None,
    ) -> Result[str, ProcessError]:
        del cwd, input, timeout
        return _fail(cmd, stderr="bundle size limit exceeded")

    monkeypatch.setattr(npm_mod, "run_process", fake_run)

    result = npm_mod.PackageManagerClient(tmp_path).precheck(
        ("node", "precheck.js"), new_version=SemVer(12, 1, 4), built_packages=[]
    )
    assert isinstance(result, Err)
    assert result.error.kind == "precheck_failed"
    assert result.error.hint == "bundle size limit exceeded"


def test_publish_and_dist_tag_commands(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    calls: list[tuple[list[str], Path]] = []

    def fake_run(
        cmd: list[str], *, cwd: Path, timeout: float | None = None
    ) -> Result[str, ProcessError]:
        del timeout
        calls.append((cmd, cwd))
        return Ok("")

    monkeypatch.setattr(npm_mod, "run_process", fake_run)

    client = npm_mod.PackageManagerClient(tmp_path)
    out = tmp_path / "dist" / "core"
    assert isinstance(client.publish(out, "next", "https://npm.example"), Ok)
    assert isinstance(client.set_dist_tag("@acme/core", "v12-lts", SemVer(12, 2, 5), None), Ok)
    assert isinstance(client.delete_dist_tag("@acme/core", "do-not-use", None), Ok)

    assert calls[0] == (
        [
            "npm",
            "publish",
            "--access",
            "public",
            "--tag",
            "next",
            "--registry",
            "https://npm.example",
        ],
        out,
    )
    assert calls[1][0] == ["npm", "dist-tag", "add", "@acme/core@12.2.5", "v12-lts"]
    assert calls[2][0] == ["npm", "dist-tag", "rm", "@acme/core", "do-not-use"]


def test_logout_reports_remaining_session(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    calls: list[list[str]] = []

    def fake_run(
        cmd: list[str], *, cwd: Path, timeout: float | None = None
    ) -> Result[str, ProcessError]:
        del cwd, timeout
        calls.append(cmd)
        if cmd[1] == "whoami":
            return _fail(cmd, stderr="ENEEDAUTH")
        return Ok("")

    monkeypatch.setattr(npm_mod, "run_process", fake_run)

    assert npm_mod.PackageManagerClient(tmp_path).logout(None) is False
    assert [c[1] for c in calls] == ["logout", "whoami"]


def test_info_reads_the_checked_out_config(tmp_path: Path) -> None:
    (tmp_path / "release.toml").write_text(_RELEASE_TOML, encoding="utf-8")

    result = npm_mod.PackageManagerClient(tmp_path).info()
    assert isinstance(result, Ok)
    assert [(p.name, p.experimental) for p in result.value] == [
        ("@acme/core", False),
        ("@acme/labs", True),
    ]


def test_info_without_config_fails(tmp_path: Path) -> None:
    result = npm_mod.PackageManagerClient(tmp_path).info()
    assert isinstance(result, Err)
    assert result.error.kind == "invalid_config"
