"""
Projection Lists
================

Turns a projection mode and a raw comma separated field list into the set
of field paths a projector works with.

For whitelists every ancestor path is added as well ("a.b.c" brings in
"a.b" and "a"), so a projector can decide whether a subtree is allowed by
a single membership test on the subtree's own path.
"""

import re
from typing import Union

from sink.core.enums import ProjectionType
from sink.core.exceptions import ConfigurationError

FIELD_LIST_SPLIT_CHAR = ","
FIELD_LIST_SPLIT_EXPR = re.compile(r"\s*" + FIELD_LIST_SPLIT_CHAR + r"\s*")


def split_field_list(entries: str) -> list[str]:
    """
    Split a comma separated list, trimming tokens and dropping empty ones.

    Example:
        split_field_list(" f1 , f2,,") -> ["f1", "f2"]
    """
    return [token for token in FIELD_LIST_SPLIT_EXPR.split(entries.strip()) if token]


def expand_whitelist(fields: list[str]) -> set[str]:
    """Add every strict dot-separated prefix of each field path."""
    expanded = set()
    for entry in fields:
        expanded.add(entry)
        while "." in entry:
            entry = entry[:entry.rindex(".")]
            if entry:
                expanded.add(entry)
    return expanded


def build_projection_list(mode: Union[str, ProjectionType], field_list: str) -> set[str]:
    """
    Build the resolved field path set for a projection.

    Args:
        mode: Projection mode, case-insensitive ("none", "blacklist", "whitelist").
        field_list: Comma separated field paths.

    Returns:
        Empty set for NONE, the tokens for BLACKLIST, the tokens plus all
        their ancestor paths for WHITELIST.

    Raises:
        ConfigurationError: If the mode is not a known projection mode.
    """
    if not isinstance(mode, str):
        raise ConfigurationError(f"Error: invalid projection mode {mode!r}", value=mode)
    try:
        projection = ProjectionType.parse(mode)
    except ValueError:
        raise ConfigurationError(f"Error: invalid projection mode {mode!r}", value=mode) from None

    if projection == ProjectionType.NONE:
        return set()

    fields = split_field_list(field_list)
    if projection == ProjectionType.BLACKLIST:
        return set(fields)

    return expand_whitelist(fields)
