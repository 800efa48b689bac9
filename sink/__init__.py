"""
Docsink Sink Layer
==================

Resolves a two-tier sink configuration (shared default plus per-destination
overrides) into validated, ready-to-run pipelines.

Modules:
    core/       - Resolver, registry, projection lists, records, errors
    processors/ - Post processors (id adder, projectors, renamers) and the chain
    strategies/ - Id strategies, write-model strategies, cross-validated selection
    cdc/        - Change-data-capture handlers

Usage:
    from config import load_config
    from sink import SinkTaskBuilder, validate_all

    config = load_config("config/config.yaml")
    pipelines = SinkTaskBuilder(config).build_all()
"""

from sink.builder import DestinationPipeline, SinkTaskBuilder
from sink.processors.chain import PostProcessorChain, build_post_processor_chain, build_post_processor_chains
from sink.validation import run_validators, validate_all

__all__ = [
    "DestinationPipeline",
    "SinkTaskBuilder",
    "PostProcessorChain",
    "build_post_processor_chain",
    "build_post_processor_chains",
    "run_validators",
    "validate_all",
]
