"""
Record and Document Models
==========================

Value objects passed between the record-processing driver, the
post processor chain, id strategies and write-model strategies.
"""

import copy
from dataclasses import dataclass, field
from typing import Any, Optional

from sink.core.enums import OperationType

# Document alias: a nested mapping of field name to value
Document = dict[str, Any]

ID_FIELD = "_id"


@dataclass(frozen=True)
class SinkRecord:
    """
    One record consumed from the upstream topic.

    Key and value are already decoded into documents (or None for
    tombstones / keyless records).
    """
    topic: str
    partition: int = 0
    offset: int = 0
    key: Optional[Document] = None
    value: Optional[Document] = None


@dataclass
class SinkDocument:
    """
    Mutable working copy of a record's key and value documents.

    Post processors transform these in place. The original record
    is never modified.
    """
    key_doc: Optional[Document] = None
    value_doc: Optional[Document] = None

    @classmethod
    def from_record(cls, record: SinkRecord) -> "SinkDocument":
        """Create a deep copy of the record's key and value."""
        return cls(
            key_doc=copy.deepcopy(record.key),
            value_doc=copy.deepcopy(record.value),
        )

    def clone(self) -> "SinkDocument":
        return SinkDocument(
            key_doc=copy.deepcopy(self.key_doc),
            value_doc=copy.deepcopy(self.value_doc),
        )


# =============================================================================
# Write operations (handed to the external writer)
# =============================================================================

@dataclass(frozen=True)
class ReplaceOne:
    filter: Document
    replacement: Document
    upsert: bool = True


@dataclass(frozen=True)
class UpdateOne:
    filter: Document
    update: Document
    upsert: bool = True


@dataclass(frozen=True)
class DeleteOne:
    filter: Document


@dataclass(frozen=True)
class ChangeEvent:
    """
    Decoded change-data-capture event.

    Attributes:
        operation: Kind of change.
        filter: Document identifying the target (usually {"_id": ...}).
        document: Full document for create/read/update, None for delete.
    """
    operation: OperationType
    filter: Document
    document: Optional[Document] = field(default=None)
