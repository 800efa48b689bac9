"""
Write Model Strategies
======================

Strategies turning a processed sink document into the write operation that
the external writer sends to the destination store.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Type, Union

from sink.core.exceptions import DataError
from sink.core.records import ID_FIELD, DeleteOne, ReplaceOne, SinkDocument, UpdateOne
from sink.core.registry import StrategyRegistry
from sink.strategies.id_strategies import IdStrategy

WriteModel = Union[ReplaceOne, UpdateOne, DeleteOne]

# Name of the delete-on-null variant; built only through the delete path
DELETE_ONE_STRATEGY = "delete_one"


class WriteModelStrategy(ABC):
    """Abstract base class for write-model strategies."""

    @abstractmethod
    def create_write_model(self, doc: SinkDocument) -> WriteModel:
        """
        Build the write operation for a document.

        Raises:
            DataError: If the document lacks what the write model needs.
        """
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


# Global registry instance
_write_model_registry = StrategyRegistry("write model strategy", WriteModelStrategy)


def get_write_model_registry() -> StrategyRegistry:
    """Get the global write model strategy registry."""
    return _write_model_registry


def register_write_model_strategy(name: str):
    """Decorator to register a write model strategy class with the global registry."""
    def decorator(cls: Type[WriteModelStrategy]) -> Type[WriteModelStrategy]:
        get_write_model_registry().register(name, cls)
        return cls
    return decorator


def _require_value_id(doc: SinkDocument):
    if doc.value_doc is None:
        raise DataError("Error: value document must not be missing for this write model")
    if ID_FIELD not in doc.value_doc:
        raise DataError(f"Error: value document must contain an {ID_FIELD} field")
    return doc.value_doc[ID_FIELD]


# =============================================================================
# Implementations
# =============================================================================

@register_write_model_strategy("replace_one_default")
class ReplaceOneDefaultStrategy(WriteModelStrategy):
    """Upserting replace filtered on ``_id``."""

    def create_write_model(self, doc):
        document_id = _require_value_id(doc)
        return ReplaceOne(
            filter={ID_FIELD: document_id},
            replacement=doc.value_doc,
            upsert=True,
        )


@register_write_model_strategy("replace_one_business_key")
class ReplaceOneBusinessKeyStrategy(WriteModelStrategy):
    """
    Upserting replace filtered on a business key.

    The ``_id`` must be a document (as produced by the partial id
    strategies); its fields become the filter and the ``_id`` itself is left
    out of the replacement.
    """

    def create_write_model(self, doc):
        business_key = _require_value_id(doc)
        if not isinstance(business_key, dict):
            raise DataError(
                f"Error: {ID_FIELD} must be a document holding the business key, got {type(business_key).__name__}"
            )
        replacement = {k: v for k, v in doc.value_doc.items() if k != ID_FIELD}
        return ReplaceOne(filter=dict(business_key), replacement=replacement, upsert=True)


@register_write_model_strategy("update_one_timestamps")
class UpdateOneTimestampsStrategy(WriteModelStrategy):
    """Upserting update that stamps insert and modification times."""

    FIELD_NAME_MODIFIED_TS = "_modifiedTS"
    FIELD_NAME_INSERTED_TS = "_insertedTS"

    def create_write_model(self, doc):
        document_id = _require_value_id(doc)
        now = datetime.now(timezone.utc)
        fields = {k: v for k, v in doc.value_doc.items() if k != ID_FIELD}
        fields[self.FIELD_NAME_MODIFIED_TS] = now
        return UpdateOne(
            filter={ID_FIELD: document_id},
            update={
                "$set": fields,
                "$setOnInsert": {self.FIELD_NAME_INSERTED_TS: now},
            },
            upsert=True,
        )


@register_write_model_strategy(DELETE_ONE_STRATEGY)
class DeleteOneDefaultStrategy(WriteModelStrategy):
    """
    Delete by key for records with a null value.

    Needs a key-bearing id strategy, which is checked where this strategy is
    built (see ``get_delete_strategy``).
    """

    def __init__(self, id_strategy: IdStrategy):
        self.id_strategy = id_strategy

    def create_write_model(self, doc):
        if doc.key_doc is None:
            raise DataError("Error: key document must not be missing for delete operation")
        return DeleteOne(filter={ID_FIELD: self.id_strategy.generate_id(doc, None)})

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(id_strategy={self.id_strategy!r})"
