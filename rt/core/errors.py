"""Process exit codes for the ``rt`` CLI."""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands.

    Values are part of the CLI contract and must stay stable:
    - 0: Release completed
    - 1: Fatal release error (invariant violated, external call failed)
    - 2: Release manually aborted by the caretaker
    - 3: Bad command line input
    - 4: Environment problem (missing config, not a project directory)
    """

    OK = 0
    FATAL = 1
    ABORTED = 2
    USER_ERROR = 3
    ENV_ERROR = 4

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK
