from __future__ import annotations

import json
from pathlib import Path

from rt.core.result import Err, Ok
from rt.output.console import MockConsole
from rt.platform.files import write_json
from rt.services.release.renovate import (
    RENOVATE_CONFIG_FILE,
    TARGET_PATCH_LABEL,
    TARGET_RC_LABEL,
    update_renovate_config,
    update_renovate_config_target_labels,
)


def _write(project_dir: Path, config: object) -> None:
    write_json(project_dir / RENOVATE_CONFIG_FILE, config)


def _read(project_dir: Path) -> object:
    return json.loads((project_dir / RENOVATE_CONFIG_FILE).read_text(encoding="utf-8"))


def test_branch_off_points_renovate_at_the_new_branch(tmp_path: Path) -> None:
    _write(
        tmp_path,
        {
            "baseBranchPatterns": ["main", "12.1.x"],
            "packageRules": [
                {"matchPackageNames": ["*"], "addLabels": ["area: build", TARGET_PATCH_LABEL]},
                {"matchPackageNames": ["typescript"]},
            ],
        },
    )
    console = MockConsole()

    result = update_renovate_config(
        tmp_path, next_branch="main", new_branch="12.2.x", console=console
    )

    assert result == Ok(RENOVATE_CONFIG_FILE)
    assert _read(tmp_path) == {
        "baseBranchPatterns": ["main", "12.2.x"],
        "packageRules": [
            {"matchPackageNames": ["*"], "addLabels": ["area: build", TARGET_RC_LABEL]},
            {"matchPackageNames": ["typescript"]},
        ],
    }
    assert console.find("Updated Renovate config.")


def test_missing_config_is_skipped(tmp_path: Path) -> None:
    console = MockConsole()

    assert update_renovate_config(
        tmp_path, next_branch="main", new_branch="12.2.x", console=console
    ) == Ok(None)
    assert update_renovate_config_target_labels(
        tmp_path, from_label=TARGET_RC_LABEL, to_label=TARGET_PATCH_LABEL, console=console
    ) == Ok(None)
    assert len(console.find("not found")) == 2
    assert not (tmp_path / RENOVATE_CONFIG_FILE).exists()


def test_unexpected_base_branches_are_left_alone(tmp_path: Path) -> None:
    original = {"baseBranchPatterns": ["main"], "packageRules": []}
    _write(tmp_path, original)
    console = MockConsole()

    result = update_renovate_config(
        tmp_path, next_branch="main", new_branch="12.2.x", console=console
    )

    assert result == Ok(None)
    assert _read(tmp_path) == original
    assert console.has_warning()


def test_invalid_config_is_an_error(tmp_path: Path) -> None:
    (tmp_path / RENOVATE_CONFIG_FILE).write_text("{", encoding="utf-8")

    result = update_renovate_config_target_labels(
        tmp_path, from_label=TARGET_RC_LABEL, to_label=TARGET_PATCH_LABEL, console=MockConsole()
    )

    assert isinstance(result, Err)
    assert result.error.kind == "invalid_input"


def test_target_labels_are_swapped_back(tmp_path: Path) -> None:
    _write(
        tmp_path,
        {
            "baseBranchPatterns": ["main", "12.2.x"],
            "packageRules": [{"addLabels": [TARGET_RC_LABEL]}, {"addLabels": ["other"]}],
        },
    )

    result = update_renovate_config_target_labels(
        tmp_path, from_label=TARGET_RC_LABEL, to_label=TARGET_PATCH_LABEL, console=MockConsole()
    )

    assert result == Ok(RENOVATE_CONFIG_FILE)
    assert _read(tmp_path) == {
        "baseBranchPatterns": ["main", "12.2.x"],
        "packageRules": [{"addLabels": [TARGET_PATCH_LABEL]}, {"addLabels": ["other"]}],
    }


def test_unchanged_labels_are_not_rewritten(tmp_path: Path) -> None:
    _write(tmp_path, {"baseBranchPatterns": ["main", "12.2.x"], "packageRules": []})
    before = (tmp_path / RENOVATE_CONFIG_FILE).stat().st_mtime_ns
    console = MockConsole()

    result = update_renovate_config_target_labels(
        tmp_path, from_label=TARGET_RC_LABEL, to_label=TARGET_PATCH_LABEL, console=console
    )

    assert result == Ok(None)
    assert (tmp_path / RENOVATE_CONFIG_FILE).stat().st_mtime_ns == before
    assert console.find("No changes to target labels")
