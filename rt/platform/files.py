"""Filesystem helpers for the files a release edits in place."""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path

from rt.core.result import Err, Ok, Result
from rt.core.structured import StrDict, as_str_dict

__all__ = ["atomic_write_text", "read_json_object", "write_json"]


def atomic_write_text(path: Path, content: str, *, encoding: str = "utf-8") -> None:
    """Replace ``path`` with ``content`` so readers never see a partial file."""
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "w", encoding=encoding, newline="") as handle:
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_path, path)
    finally:
        tmp_path.unlink(missing_ok=True)


def read_json_object(path: Path) -> Result[StrDict, str]:
    """Read a file whose JSON root must be an object (package.json and friends).

    The error is a one-line reason naming the file.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        return Err(f"failed to read {path.name}: {e.strerror or e}")

    try:
        obj: object = json.loads(text)
    except json.JSONDecodeError as e:
        return Err(f"invalid JSON in {path.name}: {e}")

    data = as_str_dict(obj)
    if data is None:
        return Err(f"invalid JSON root in {path.name}")
    return Ok(data)


def write_json(path: Path, data: object) -> None:
    """Write ``data`` as two-space indented JSON with a trailing newline.

    Matches the formatting npm itself uses for package.json.
    """
    atomic_write_text(path, json.dumps(data, indent=2) + "\n")
