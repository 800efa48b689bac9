"""
Sink Task Builder
=================

Assembles the per-destination artifacts a sink task reuses for its whole
lifetime: post processor chain, id strategy, write-model strategy, optional
delete strategy, rate limiter and optional CDC handler.

Usage:
    from config import load_config
    from sink.builder import SinkTaskBuilder

    builder = SinkTaskBuilder(load_config("config/config.yaml"))
    pipelines = builder.build_all()

    pipeline = pipelines["orders"]
    write_model = pipeline.build_write_model(record)
"""

import logging
from dataclasses import dataclass
from typing import Optional, Union

from config.config import SinkConfig, SinkOptions
from sink.cdc.handlers import CdcHandler
from sink.core.enums import OperationType, StageResult
from sink.core.rate_limit import RateLimitSettings
from sink.core.records import DeleteOne, ReplaceOne, SinkDocument, SinkRecord
from sink.core.resolver import DEFAULT_DESTINATION, ConfigResolver
from sink.processors.chain import PostProcessorChain, build_post_processor_chain
from sink.strategies.id_strategies import IdStrategy
from sink.strategies.selection import (
    get_cdc_handler,
    get_delete_strategy,
    get_id_strategy,
    get_rate_limit_settings,
    get_write_model_strategy,
)
from sink.strategies.writemodel import WriteModel, WriteModelStrategy

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DestinationPipeline:
    """
    Everything needed to turn records of one destination into write operations.

    Only ``rate_limit`` carries mutable state (its counter).
    """
    destination: str
    collection: str
    options: SinkOptions
    post_processors: PostProcessorChain
    id_strategy: IdStrategy
    write_model_strategy: WriteModelStrategy
    rate_limit: RateLimitSettings
    delete_strategy: Optional[WriteModelStrategy] = None
    cdc_handler: Optional[CdcHandler] = None

    def build_write_model(self, record: SinkRecord) -> Optional[WriteModel]:
        """
        Turn one record into its write operation.

        Returns:
            The write operation, or None when the record produces no write
            (tombstone without delete-on-null, or a stage stopped the chain).

        Raises:
            DataError: If the record lacks data a strategy needs.
        """
        doc = SinkDocument.from_record(record)

        if self.cdc_handler is not None:
            event = self.cdc_handler.decode(doc)
            if event is None:
                return None
            if event.operation == OperationType.DELETE:
                return DeleteOne(filter=event.filter)
            return ReplaceOne(filter=event.filter, replacement=event.document, upsert=True)

        if doc.value_doc is None:
            if self.delete_strategy is None:
                logger.debug(f"Skipping record with null value for destination '{self.destination}'")
                return None
            return self.delete_strategy.create_write_model(doc)

        if self.post_processors.process(doc, record) == StageResult.STOP:
            return None
        return self.write_model_strategy.create_write_model(doc)


class SinkTaskBuilder:
    """
    Builds destination pipelines from a configuration.

    Errors surface on the first violation; use ``validate_all`` to collect
    every error of a configuration instead.
    """

    def __init__(self, config: Union[SinkConfig, ConfigResolver]):
        """
        Initialize builder.

        Args:
            config: Root configuration, or a resolver wrapping one.
        """
        if isinstance(config, ConfigResolver):
            self.config = config
        else:
            self.config = ConfigResolver(config)

    @property
    def destinations(self) -> list[str]:
        """Default destination followed by each configured destination."""
        return [DEFAULT_DESTINATION] + self.config.destinations

    def build(self, destination: str = DEFAULT_DESTINATION) -> DestinationPipeline:
        """
        Build the pipeline for one destination.

        Raises:
            ConfigurationError: Any invalid or incompatible setting (including
                its ContractViolationError and CompatibilityError subclasses).
        """
        config = self.config
        delete_strategy = None
        if config.is_delete_on_null_values(destination):
            delete_strategy = get_delete_strategy(config, destination)

        pipeline = DestinationPipeline(
            destination=destination,
            collection=config.collection_name(destination),
            options=config.snapshot(destination),
            post_processors=build_post_processor_chain(config, destination),
            id_strategy=get_id_strategy(config, destination),
            write_model_strategy=get_write_model_strategy(config, destination),
            rate_limit=get_rate_limit_settings(config, destination),
            delete_strategy=delete_strategy,
            cdc_handler=get_cdc_handler(config, destination),
        )

        logger.info(
            f"Built pipeline for destination '{destination}': {pipeline.post_processors!r}, "
            f"write model {pipeline.write_model_strategy!r}"
        )
        return pipeline

    def build_all(self) -> dict[str, DestinationPipeline]:
        return {destination: self.build(destination) for destination in self.destinations}

    # =========================================================================
    # Per-artifact maps
    # =========================================================================

    def post_processor_chains(self) -> dict[str, PostProcessorChain]:
        return {d: build_post_processor_chain(self.config, d) for d in self.destinations}

    def write_model_strategies(self) -> dict[str, WriteModelStrategy]:
        return {d: get_write_model_strategy(self.config, d) for d in self.destinations}

    def delete_strategies(self) -> dict[str, WriteModelStrategy]:
        """Delete strategies of the destinations with delete_on_null_values enabled."""
        return {
            d: get_delete_strategy(self.config, d)
            for d in self.destinations
            if self.config.is_delete_on_null_values(d)
        }

    def rate_limit_settings(self) -> dict[str, RateLimitSettings]:
        """One fresh limiter per destination."""
        return {d: get_rate_limit_settings(self.config, d) for d in self.destinations}

    def cdc_handlers(self) -> dict[str, CdcHandler]:
        """CDC handlers of the configured destinations that use one."""
        handlers = {}
        for destination in self.config.destinations:
            handler = get_cdc_handler(self.config, destination)
            if handler is not None:
                handlers[destination] = handler
        return handlers
