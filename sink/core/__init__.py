"""
Sink Core
=========

Leaf components every other part of the sink builds on:
- Enums and exceptions
- Record, document and write operation value objects
- ConfigResolver: override-then-default option lookup
- Projection list building
- StrategyRegistry: name-based construction of pluggable implementations
- RateLimitSettings
"""

from sink.core.enums import OperationType, ProjectionType, StageResult
from sink.core.exceptions import (
    CompatibilityError,
    ConfigurationError,
    ContractViolationError,
    DataError,
    SinkError,
)
from sink.core.records import (
    ID_FIELD,
    ChangeEvent,
    DeleteOne,
    ReplaceOne,
    SinkDocument,
    SinkRecord,
    UpdateOne,
)
from sink.core.projection import build_projection_list, split_field_list
from sink.core.rate_limit import RateLimitSettings
from sink.core.registry import StrategyHandle, StrategyRegistry
from sink.core.resolver import DEFAULT_DESTINATION, ConfigResolver

__all__ = [
    # Enums
    "OperationType",
    "ProjectionType",
    "StageResult",
    # Exceptions
    "SinkError",
    "ConfigurationError",
    "ContractViolationError",
    "CompatibilityError",
    "DataError",
    # Records
    "ID_FIELD",
    "SinkRecord",
    "SinkDocument",
    "ReplaceOne",
    "UpdateOne",
    "DeleteOne",
    "ChangeEvent",
    # Resolution
    "DEFAULT_DESTINATION",
    "ConfigResolver",
    "build_projection_list",
    "split_field_list",
    "StrategyHandle",
    "StrategyRegistry",
    "RateLimitSettings",
]
