"""
CDC Handlers
============

Handlers translating change-data-capture envelopes into ``ChangeEvent``s.

Two envelope shapes are supported:
- MongoDB: key ``{"id": "<json>"}``, value ``{"op", "after": "<json>", "patch": "<json>"}``
- Relational (MySQL, Postgres): key holds the primary key columns, value
  ``{"op", "before": {...}, "after": {...}}``

A record whose value is null is a tombstone and decodes to None.
"""

import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Optional, Type

from sink.core.enums import OperationType
from sink.core.exceptions import DataError
from sink.core.records import ID_FIELD, ChangeEvent, Document, SinkDocument
from sink.core.registry import StrategyRegistry
from sink.core.resolver import ConfigResolver

logger = logging.getLogger(__name__)

OPERATION_FIELD = "op"


class CdcHandler(ABC):
    """Abstract base class for CDC handlers."""

    def __init__(self, config: ConfigResolver):
        self.config = config

    @abstractmethod
    def decode(self, doc: SinkDocument) -> Optional[ChangeEvent]:
        """
        Decode a change envelope.

        Returns:
            The change event, or None for tombstones.

        Raises:
            DataError: If the envelope is malformed.
        """
        pass

    def operation(self, value_doc: Document) -> OperationType:
        code = value_doc.get(OPERATION_FIELD)
        try:
            return OperationType(code)
        except ValueError:
            raise DataError(f"Error: unknown cdc operation {code!r}") from None

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


# Global registry instance
_cdc_handler_registry = StrategyRegistry("cdc handler", CdcHandler)


def get_cdc_handler_registry() -> StrategyRegistry:
    """Get the global CDC handler registry."""
    return _cdc_handler_registry


def register_cdc_handler(name: str):
    """Decorator to register a CDC handler class with the global registry."""
    def decorator(cls: Type[CdcHandler]) -> Type[CdcHandler]:
        get_cdc_handler_registry().register(name, cls)
        return cls
    return decorator


def _parse_json(raw: Any, field: str) -> Any:
    if not isinstance(raw, str):
        return raw
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        raise DataError(f"Error: cdc field '{field}' is not valid JSON: {e}") from e


# =============================================================================
# Implementations
# =============================================================================

@register_cdc_handler("mongodb")
class MongoDbHandler(CdcHandler):
    """Handles change events captured from a MongoDB source."""

    def decode(self, doc):
        if not doc.value_doc:
            logger.debug("Skipping tombstone record")
            return None
        if not doc.key_doc or "id" not in doc.key_doc:
            raise DataError("Error: key document must contain an 'id' field for mongodb cdc")

        operation = self.operation(doc.value_doc)
        filter_doc = {ID_FIELD: _parse_json(doc.key_doc["id"], "id")}

        if operation == OperationType.DELETE:
            return ChangeEvent(operation=operation, filter=filter_doc)

        # Older connectors only ship an update description for updates
        if operation == OperationType.UPDATE and doc.value_doc.get("after") is None:
            field = "patch"
        else:
            field = "after"
        document = _parse_json(doc.value_doc.get(field), field)
        if not isinstance(document, dict):
            raise DataError(f"Error: cdc field '{field}' must hold a document for operation {operation}")
        return ChangeEvent(operation=operation, filter=filter_doc, document=document)


@register_cdc_handler("rdbms")
class RdbmsHandler(CdcHandler):
    """Handles change events captured from a relational source."""

    def decode(self, doc):
        if not doc.value_doc:
            logger.debug("Skipping tombstone record")
            return None
        if not doc.key_doc:
            raise DataError("Error: key document must hold the primary key for rdbms cdc")

        operation = self.operation(doc.value_doc)
        filter_doc = {ID_FIELD: dict(doc.key_doc)}

        if operation == OperationType.DELETE:
            return ChangeEvent(operation=operation, filter=filter_doc)

        after = doc.value_doc.get("after")
        if not isinstance(after, dict):
            raise DataError(f"Error: 'after' must hold the row for operation {operation}")
        return ChangeEvent(
            operation=operation,
            filter=filter_doc,
            document={ID_FIELD: dict(doc.key_doc), **after},
        )


@register_cdc_handler("mysql")
class MysqlHandler(RdbmsHandler):
    """Relational handler for MySQL sources."""


@register_cdc_handler("postgres")
class PostgresHandler(RdbmsHandler):
    """Relational handler for Postgres sources."""


PREDEFINED_CDC_HANDLERS = frozenset({"mongodb", "rdbms", "mysql", "postgres"})
