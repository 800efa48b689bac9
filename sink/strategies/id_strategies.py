"""
Id Strategies
=============

Strategies generating the ``_id`` of a sink document.

Key-bearing strategies derive the id from the record key. They are the only
ones usable for deletes, since a tombstone record carries nothing but its key.
"""

import copy
import uuid
from abc import ABC, abstractmethod
from typing import Any, Optional, Type

from sink.core.exceptions import DataError
from sink.core.records import ID_FIELD, SinkDocument, SinkRecord
from sink.core.registry import StrategyRegistry
from sink.processors.projectors import FieldProjector


class IdStrategy(ABC):
    """Abstract base class for id strategies."""

    @abstractmethod
    def generate_id(self, doc: SinkDocument, record: Optional[SinkRecord]) -> Any:
        """
        Generate the document id.

        Args:
            doc: Working document (key and value).
            record: Original record. May be None when called from a delete
                path, which only key-bearing strategies serve.

        Returns:
            The ``_id`` value.

        Raises:
            DataError: If the data the strategy needs is missing.
        """
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


# Global registry instance
_id_strategy_registry = StrategyRegistry("id strategy", IdStrategy)


def get_id_strategy_registry() -> StrategyRegistry:
    """Get the global id strategy registry."""
    return _id_strategy_registry


def register_id_strategy(name: str):
    """Decorator to register an id strategy class with the global registry."""
    def decorator(cls: Type[IdStrategy]) -> Type[IdStrategy]:
        get_id_strategy_registry().register(name, cls)
        return cls
    return decorator


# =============================================================================
# Implementations
# =============================================================================

@register_id_strategy("uuid")
class UuidStrategy(IdStrategy):

    def generate_id(self, doc, record):
        return str(uuid.uuid4())


@register_id_strategy("full_key")
class FullKeyStrategy(IdStrategy):
    """Uses a copy of the whole key document as the id."""

    def generate_id(self, doc, record):
        if doc.key_doc is None:
            raise DataError("Error: key document must not be missing for full key id strategy")
        return copy.deepcopy(doc.key_doc)


class ProvidedStrategy(IdStrategy):
    """Takes an ``_id`` that the key or value document already carries."""

    source = "value"

    def generate_id(self, doc, record):
        document = doc.key_doc if self.source == "key" else doc.value_doc
        if document is None:
            raise DataError(f"Error: provided id strategy used but {self.source} document is missing")
        if ID_FIELD not in document:
            raise DataError(
                f"Error: provided id strategy is used but the {self.source} document has no {ID_FIELD} field"
            )
        return document[ID_FIELD]


@register_id_strategy("provided_in_key")
class ProvidedInKeyStrategy(ProvidedStrategy):
    source = "key"


@register_id_strategy("provided_in_value")
class ProvidedInValueStrategy(ProvidedStrategy):
    source = "value"


@register_id_strategy("partial_key")
class PartialKeyStrategy(IdStrategy):
    """Id is the key document reduced by the key projection settings."""

    def __init__(self, projector: FieldProjector):
        self.projector = projector

    def generate_id(self, doc, record):
        if doc.key_doc is None:
            raise DataError("Error: key document must not be missing for partial key id strategy")
        return self.projector.project(copy.deepcopy(doc.key_doc))

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(projector={self.projector!r})"


@register_id_strategy("partial_value")
class PartialValueStrategy(IdStrategy):
    """Id is the value document reduced by the key projection settings."""

    def __init__(self, projector: FieldProjector):
        self.projector = projector

    def generate_id(self, doc, record):
        if doc.value_doc is None:
            raise DataError("Error: value document must not be missing for partial value id strategy")
        return self.projector.project(copy.deepcopy(doc.value_doc))

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(projector={self.projector!r})"


@register_id_strategy("record_metadata")
class RecordMetadataStrategy(IdStrategy):
    """Id built from the record coordinates: ``topic#partition#offset``."""

    DELIMITER = "#"

    def generate_id(self, doc, record):
        if record is None:
            raise DataError("Error: record metadata id strategy needs the original record")
        return self.DELIMITER.join((record.topic, str(record.partition), str(record.offset)))


# Names allowed without being declared in document_id_strategies
PREDEFINED_ID_STRATEGIES = frozenset({
    "uuid",
    "full_key",
    "partial_key",
    "partial_value",
    "provided_in_key",
    "provided_in_value",
    "record_metadata",
})

# Strategies constructed with a FieldProjector argument
PARTIAL_ID_STRATEGIES = frozenset({"partial_key", "partial_value"})

# Strategies usable by the delete-on-null write model
KEY_BEARING_ID_STRATEGIES = (FullKeyStrategy, PartialKeyStrategy, ProvidedInKeyStrategy)
