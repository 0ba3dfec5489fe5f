from __future__ import annotations

import json
import os
from pathlib import Path

import pytest

from rt.core.result import Err, Ok
from rt.platform.files import atomic_write_text, read_json_object, write_json


def test_atomic_write_text_creates_parent_dirs(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "CHANGELOG.md"
    atomic_write_text(path, "# 1.0.0\n")
    assert path.read_text(encoding="utf-8") == "# 1.0.0\n"


def test_atomic_write_text_cleans_temp_file_on_replace_failure(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    path = tmp_path / "package.json"

    def fail_replace(_src: Path, _dst: Path) -> None:
        raise OSError("replace failed")

    monkeypatch.setattr(os, "replace", fail_replace)

    with pytest.raises(OSError, match="replace failed"):
        atomic_write_text(path, "{}")

    assert list(tmp_path.glob(f".{path.name}.*.tmp")) == []
    assert not path.exists()


def test_write_json_uses_npm_formatting(tmp_path: Path) -> None:
    path = tmp_path / "package.json"
    write_json(path, {"name": "widgets", "version": "1.2.3"})

    text = path.read_text(encoding="utf-8")
    assert text.endswith("}\n")
    assert '\n  "version": "1.2.3"' in text
    assert json.loads(text) == {"name": "widgets", "version": "1.2.3"}


def test_read_json_object(tmp_path: Path) -> None:
    path = tmp_path / "package.json"
    write_json(path, {"version": "1.2.3"})
    assert read_json_object(path) == Ok({"version": "1.2.3"})


@pytest.mark.parametrize(
    ("content", "reason"),
    [
        (None, "failed to read package.json"),
        ("{not json", "invalid JSON in package.json"),
        ("[1, 2]", "invalid JSON root in package.json"),
    ],
)
def test_read_json_object_errors(tmp_path: Path, content: str | None, reason: str) -> None:
    path = tmp_path / "package.json"
    if content is not None:
        path.write_text(content, encoding="utf-8")

    result = read_json_object(path)
    assert isinstance(result, Err)
    assert result.error.startswith(reason)
