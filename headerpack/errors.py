#!/usr/bin/env python3

from enum import Enum
from pathlib import Path


class FailureKind(str, Enum):
    CONFIGURATION = "configuration"
    MISSING_INCLUDE = "missing_include"
    CIRCULAR_DEPENDENCY = "circular_dependency"
    UNLINKED_REFERENCE = "unlinked_reference"


class HeaderpackError(Exception):
    """Base class for user-facing packing failures."""

    kind: FailureKind

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ConfigurationError(HeaderpackError):
    """Settings are missing or invalid."""

    kind = FailureKind.CONFIGURATION


class MissingInclude(HeaderpackError):
    """An internal include points at a file that does not exist."""

    kind = FailureKind.MISSING_INCLUDE

    def __init__(self, missing: Path, included_from: str | None = None):
        self.missing = missing
        self.included_from = included_from
        if included_from is None:
            message = f'Failed to locate included file "{missing}"!'
        else:
            message = f'Failed to find include "{missing}", included in "{included_from}"'
        super().__init__(message)


class CircularDependency(HeaderpackError):
    """The include graph contains a cycle, so no emission order exists."""

    kind = FailureKind.CIRCULAR_DEPENDENCY

    def __init__(self, cycle: list[str]):
        # Members in include order; the first file includes the second, and so on,
        # with the last one including the first.
        self.cycle = cycle
        chain = " -> ".join([*cycle, cycle[0]]) if cycle else "<unknown>"
        super().__init__(f"Circular dependency between included files: {chain}")


class UnlinkedReference(HeaderpackError):
    """A discovered include has no node during linking."""

    kind = FailureKind.UNLINKED_REFERENCE

    def __init__(self, path: Path, referenced_from: str):
        self.path = path
        self.referenced_from = referenced_from
        super().__init__(
            f'Include "{path}" referenced from "{referenced_from}" was never discovered'
        )
