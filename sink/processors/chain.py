"""
Post Processor Chain
====================

Builds the ordered, de-duplicated chain of post processors for a
destination from ``post_processor_chain``.

Ordering rules:
- Declared names keep their first occurrence
- When ``document_id_adder`` is not declared it heads the chain
- When it is declared it stays where it was declared
- An empty declaration yields ``document_id_adder`` alone
"""

import logging
from typing import Iterator

from sink.core.enums import StageResult
from sink.core.projection import split_field_list
from sink.core.records import SinkDocument, SinkRecord
from sink.core.resolver import DEFAULT_DESTINATION, ConfigResolver
from sink.processors.base import PostProcessor, get_stage_registry
from sink.processors import id_adder  # noqa: F401  registers document_id_adder

logger = logging.getLogger(__name__)

IDENTITY_STAGE = "document_id_adder"


class PostProcessorChain:
    """
    Ordered post processors for one destination.

    Documents flow through the stages sequentially:
    document -> stage1 -> stage2 -> ... -> document

    A stage returning STOP short-circuits the remaining stages.
    """

    def __init__(self, processors: list[PostProcessor]):
        """
        Initialize chain.

        Args:
            processors: Stages in execution order, already linked with ``chain``.
        """
        self.processors = list(processors)
        self.stats = {
            "documents_processed": 0,
            "documents_stopped": 0,
        }

    @property
    def head(self) -> PostProcessor:
        return self.processors[0]

    @property
    def names(self) -> list[str]:
        """Class names of the stages, in order."""
        return [p.__class__.__name__ for p in self.processors]

    def process(self, doc: SinkDocument, record: SinkRecord) -> StageResult:
        """Apply all stages sequentially to ``doc`` (in place)."""
        self.stats["documents_processed"] += 1
        for processor in self.processors:
            if processor.process(doc, record) == StageResult.STOP:
                logger.debug(f"{processor!r} stopped the chain")
                self.stats["documents_stopped"] += 1
                return StageResult.STOP
        return StageResult.CONTINUE

    def get_stats(self) -> dict:
        return self.stats.copy()

    def __iter__(self) -> Iterator[PostProcessor]:
        return iter(self.processors)

    def __len__(self) -> int:
        return len(self.processors)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({' -> '.join(self.names)})"


def build_post_processor_chain(config: ConfigResolver, destination: str = DEFAULT_DESTINATION) -> PostProcessorChain:
    """
    Build the post processor chain for a destination.

    Args:
        config: Resolver for option values.
        destination: Destination name, or the default sentinel.

    Returns:
        PostProcessorChain with stages linked in order.

    Raises:
        ConfigurationError: If a stage name is unknown or a stage rejects its settings.
        ContractViolationError: If a stage cannot be constructed from
            ``(config, destination)`` or is not a PostProcessor.
    """
    declared = list(dict.fromkeys(split_field_list(config.resolve("post_processor_chain", destination))))

    if IDENTITY_STAGE in declared:
        names = declared
    else:
        names = [IDENTITY_STAGE] + declared

    registry = get_stage_registry()
    processors = []
    for name in names:
        processor = registry.resolve(name).create(config, destination)
        logger.debug(f"Built post processor '{name}' for destination '{destination}'")
        processors.append(processor)

    for current, following in zip(processors, processors[1:]):
        current.chain(following)

    return PostProcessorChain(processors)


def build_post_processor_chains(config: ConfigResolver) -> dict[str, PostProcessorChain]:
    """Chains for the default destination and each configured destination."""
    chains = {DEFAULT_DESTINATION: build_post_processor_chain(config, DEFAULT_DESTINATION)}
    for destination in config.destinations:
        chains[destination] = build_post_processor_chain(config, destination)
    return chains
