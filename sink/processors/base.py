"""Abstract post processor interface and its registry."""
from abc import ABC, abstractmethod
from typing import Optional, Type
import logging

from sink.core.enums import StageResult
from sink.core.records import SinkDocument, SinkRecord
from sink.core.registry import StrategyRegistry
from sink.core.resolver import ConfigResolver

logger = logging.getLogger(__name__)


class PostProcessor(ABC):
    """
    Abstract base class for all post processors (pipeline stages).

    Post processors are:
    - Constructed once per destination from ``(config, destination)``
    - Linked in order with ``chain(next)``
    - Run on a record's working document, returning CONTINUE or STOP
    """

    def __init__(self, config: ConfigResolver, destination: str):
        """
        Initialize post processor.

        Args:
            config: Resolver for option values.
            destination: Destination this instance serves.
        """
        self.config = config
        self.destination = destination
        self.next: Optional["PostProcessor"] = None

    def chain(self, next_processor: "PostProcessor") -> "PostProcessor":
        """
        Link the stage that runs after this one.

        Returns:
            ``next_processor``, so links can be built left to right.
        """
        self.next = next_processor
        return next_processor

    @abstractmethod
    def process(self, doc: SinkDocument, record: SinkRecord) -> StageResult:
        """
        Transform the working document in place.

        Args:
            doc: Working copy of the record's key and value.
            record: The original record (read only).

        Returns:
            StageResult.CONTINUE to run the next stage, StageResult.STOP to
            short-circuit the rest of the chain.
        """
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(destination='{self.destination}')"


# Global registry instance
_stage_registry = StrategyRegistry("post processor", PostProcessor)


def get_stage_registry() -> StrategyRegistry:
    """Get the global post processor registry."""
    return _stage_registry


def register_stage(name: str):
    """
    Decorator to register a post processor class with the global registry.

    Example:
        @register_stage("document_id_adder")
        class DocumentIdAdder(PostProcessor):
            ...
    """
    def decorator(cls: Type[PostProcessor]) -> Type[PostProcessor]:
        get_stage_registry().register(name, cls)
        return cls
    return decorator
