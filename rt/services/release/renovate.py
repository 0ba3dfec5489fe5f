"""Keep the project's ``renovate.json`` in step with the release trains.

Renovate opens dependency PRs against two base branches: next and the active
version branch. When next branches off, the new version branch replaces the
old one and Renovate PRs target the release-candidate. Once that minor ships
as stable, its Renovate PRs target patch again.

A missing or differently shaped config is skipped with a warning.
"""

from __future__ import annotations

from pathlib import Path

from rt.core.result import Err, Ok, Result
from rt.core.structured import StrDict, as_dict_list, as_obj_list
from rt.output.console import ConsoleProtocol
from rt.platform.files import read_json_object, write_json
from rt.services.release.errors import ReleaseError

RENOVATE_CONFIG_FILE = "renovate.json"

TARGET_PATCH_LABEL = "target: patch"
TARGET_RC_LABEL = "target: rc"


def _load(project_dir: Path, console: ConsoleProtocol) -> Result[StrDict | None, ReleaseError]:
    path = project_dir / RENOVATE_CONFIG_FILE
    if not path.exists():
        console.warning("Skipped updating Renovate config as it was not found.")
        return Ok(None)

    loaded = read_json_object(path)
    if isinstance(loaded, Err):
        return Err(ReleaseError(kind="invalid_input", message=loaded.error, hint=str(path)))

    patterns = as_obj_list(loaded.value.get("baseBranchPatterns"))
    if patterns is None or len(patterns) != 2:
        console.warning(
            'Skipped updating Renovate config: "baseBranchPatterns" must contain exactly 2 '
            "branches."
        )
        return Ok(None)
    return Ok(loaded.value)


def _replace_target_label(config: StrDict, from_label: str, to_label: str) -> bool:
    updated = False
    for rule in as_dict_list(config.get("packageRules")):
        labels = as_obj_list(rule.get("addLabels"))
        if labels is None or from_label not in labels:
            continue
        labels[labels.index(from_label)] = to_label
        updated = True
    return updated


def update_renovate_config(
    project_dir: Path, *, next_branch: str, new_branch: str, console: ConsoleProtocol
) -> Result[str | None, ReleaseError]:
    """Point Renovate at ``next_branch`` and the freshly created ``new_branch``.

    Returns the file to commit, or None when nothing was written.
    """
    loaded = _load(project_dir, console)
    if isinstance(loaded, Err):
        return loaded
    config = loaded.value
    if config is None:
        return Ok(None)

    config["baseBranchPatterns"] = [next_branch, new_branch]
    _replace_target_label(config, TARGET_PATCH_LABEL, TARGET_RC_LABEL)
    write_json(project_dir / RENOVATE_CONFIG_FILE, config)
    console.success("Updated Renovate config.")
    return Ok(RENOVATE_CONFIG_FILE)


def update_renovate_config_target_labels(
    project_dir: Path, *, from_label: str, to_label: str, console: ConsoleProtocol
) -> Result[str | None, ReleaseError]:
    """Swap ``from_label`` for ``to_label`` in every package rule.

    Returns the file to commit, or None when nothing changed.
    """
    loaded = _load(project_dir, console)
    if isinstance(loaded, Err):
        return loaded
    config = loaded.value
    if config is None:
        return Ok(None)

    if not _replace_target_label(config, from_label, to_label):
        console.info("No changes to target labels in Renovate config.")
        return Ok(None)
    write_json(project_dir / RENOVATE_CONFIG_FILE, config)
    console.success("Updated target label in Renovate config.")
    return Ok(RENOVATE_CONFIG_FILE)
