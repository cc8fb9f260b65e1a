"""Process exit codes.

The values follow the BSD ``sysexits.h`` convention so shell scripts and CI
jobs can tell a missing login apart from a broken project or a failed
remote call.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands.

    - 0: Success (including a declined confirmation)
    - 64: Usage error (bad command line input)
    - 67: No user (not logged in)
    - 70: Software error (build, artifact, lookup or remote call failed)
    - 78: Configuration error (project not initialized or unreadable)
    """

    OK = 0
    USAGE = 64
    NO_USER = 67
    SOFTWARE = 70
    CONFIG = 78

    def __str__(self) -> str:
        """Return human-readable name."""
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK

    @property
    def is_error(self) -> bool:
        return self != ErrorCode.OK
