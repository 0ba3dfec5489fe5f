"""Platform abstraction layer."""

from .files import atomic_write_text, write_json
from .process import ProcessError, ProcessOutput, run, run_graceful, run_streaming

__all__ = [
    "ProcessError",
    "ProcessOutput",
    "atomic_write_text",
    "run",
    "run_graceful",
    "run_streaming",
    "write_json",
]
