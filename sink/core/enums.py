"""
Enums for the Sink Framework
============================

Type-safe enumerations for configuration values and stage results.
Eliminates hardcoded strings throughout the codebase.
"""

from enum import Enum


class ProjectionType(str, Enum):
    """
    Field projection modes.

    - NONE: No projection, documents pass through untouched
    - BLACKLIST: Listed field paths are removed
    - WHITELIST: Only listed field paths (and their ancestors) are kept
    """
    NONE = "none"
    BLACKLIST = "blacklist"
    WHITELIST = "whitelist"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, value: str) -> "ProjectionType":
        """
        Parse a projection mode, ignoring case.

        Raises:
            ValueError: If the value is not a known mode.
        """
        return cls(value.strip().lower())


class StageResult(str, Enum):
    """
    Outcome of running one post processor on a document.

    - CONTINUE: Hand the document to the next stage
    - STOP: Short-circuit, remaining stages are skipped
    """
    CONTINUE = "continue"
    STOP = "stop"

    def __str__(self) -> str:
        return self.value


class OperationType(str, Enum):
    """
    Change-data-capture operation kinds.

    Codes follow the change event envelope: c=create, r=read (snapshot),
    u=update, d=delete.
    """
    CREATE = "c"
    READ = "r"
    UPDATE = "u"
    DELETE = "d"

    def __str__(self) -> str:
        return self.value
