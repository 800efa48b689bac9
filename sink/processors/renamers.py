"""
Field Renamers
==============

Post processors renaming fields of the key and value documents.

Field paths are prefixed with the document they belong to, e.g.
``value.address.city`` or ``key.id``.

- rename_by_mapping: exact path -> new field name table
- rename_by_regexp: ordered rules; a rule whose ``regexp`` fully matches the
  path rewrites the current field name with ``pattern`` -> ``replace``
"""

import logging
import re
from abc import abstractmethod
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, field_validator, model_validator

from sink.core.enums import StageResult
from sink.core.exceptions import ConfigurationError
from sink.core.records import Document, SinkDocument, SinkRecord
from sink.core.resolver import ConfigResolver
from sink.processors.base import PostProcessor, register_stage

logger = logging.getLogger(__name__)

SUB_FIELD_SEPARATOR = "."


class FieldNameMapping(BaseModel):
    """One ``{"oldName": ..., "newName": ...}`` entry."""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    old_name: str = Field(alias="oldName", min_length=1)
    new_name: str = Field(alias="newName", min_length=1)


class RegExpSettings(BaseModel):
    """One ``{"regexp": ..., "pattern": ..., "replace": ...}`` rule."""
    model_config = ConfigDict(frozen=True)

    regexp: str
    pattern: str
    replace: str = ""

    @field_validator("regexp", "pattern")
    @classmethod
    def _compiles(cls, value: str) -> str:
        try:
            re.compile(value)
        except re.error as e:
            raise ValueError(f"invalid regular expression {value!r}: {e}") from e
        return value

    @model_validator(mode="after")
    def _replacement_parses(self) -> "RegExpSettings":
        try:
            re.compile(self.pattern).sub(self.replace, "")
        except re.error as e:
            raise ValueError(f"invalid replacement {self.replace!r}: {e}") from e
        return self


_MAPPINGS_ADAPTER = TypeAdapter(list[FieldNameMapping])
_REGEXP_ADAPTER = TypeAdapter(list[RegExpSettings])


def _parse_settings(adapter: TypeAdapter, option: str, raw: str) -> list:
    if not raw.strip():
        return []
    try:
        return adapter.validate_json(raw)
    except ValidationError as e:
        # pydantic reports malformed JSON and bad entries alike
        raise ConfigurationError(
            f"Error: parsing {option} failed: {e.errors()[0]['msg']} in {raw}",
            option=option,
            value=raw,
        ) from e


def parse_rename_field_mappings(config: ConfigResolver, destination: str) -> dict[str, str]:
    """
    Parse the exact rename table of a destination.

    Returns:
        Mapping of prefixed field path to new field name.

    Raises:
        ConfigurationError: If the setting is not a JSON array of complete
            ``oldName``/``newName`` objects.
    """
    raw = config.resolve("field_renamer_mapping", destination)
    mappings = _parse_settings(_MAPPINGS_ADAPTER, "field_renamer_mapping", raw)
    return {m.old_name: m.new_name for m in mappings}


def parse_rename_regexp_settings(config: ConfigResolver, destination: str) -> list[RegExpSettings]:
    """
    Parse the ordered regexp rename rules of a destination.

    Raises:
        ConfigurationError: If the setting is malformed or a regex does not compile.
    """
    raw = config.resolve("field_renamer_regexp", destination)
    return _parse_settings(_REGEXP_ADAPTER, "field_renamer_regexp", raw)


class Renamer(PostProcessor):
    """Rebuilds the key and value documents, keeping field order, with renamed fields."""

    @abstractmethod
    def renamed(self, path: str, name: str) -> Optional[str]:
        """New name for the field at ``path``, or None to keep ``name``."""
        pass

    def process(self, doc: SinkDocument, record: SinkRecord) -> StageResult:
        if doc.key_doc is not None:
            doc.key_doc = self._rename(doc.key_doc, "key")
        if doc.value_doc is not None:
            doc.value_doc = self._rename(doc.value_doc, "value")
        return StageResult.CONTINUE

    def _rename(self, document: Document, prefix: str) -> Document:
        result = {}
        for name, value in document.items():
            path = prefix + SUB_FIELD_SEPARATOR + name
            if isinstance(value, dict):
                value = self._rename(value, path)
            elif isinstance(value, list):
                value = [self._rename(v, path) if isinstance(v, dict) else v for v in value]
            new_name = self.renamed(path, name)
            result[new_name if new_name else name] = value
        return result


@register_stage("rename_by_mapping")
class RenameByMapping(Renamer):

    def __init__(self, config: ConfigResolver, destination: str):
        super().__init__(config, destination)
        self.mappings = parse_rename_field_mappings(config, destination)

    def renamed(self, path, name):
        return self.mappings.get(path)


@register_stage("rename_by_regexp")
class RenameByRegExp(Renamer):

    def __init__(self, config: ConfigResolver, destination: str):
        super().__init__(config, destination)
        self.rules = [
            (re.compile(s.regexp), re.compile(s.pattern), s.replace)
            for s in parse_rename_regexp_settings(config, destination)
        ]

    def renamed(self, path, name):
        new_name = name
        for regexp, pattern, replace in self.rules:
            if regexp.fullmatch(path):
                new_name = pattern.sub(replace, new_name)
        if new_name != name:
            logger.debug(f"Renaming field '{path}' to '{new_name}'")
            return new_name
        return None
