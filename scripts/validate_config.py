#!/usr/bin/env python3
"""
Validate a Docsink Configuration
================================

Checks a sink configuration file and reports every error per option.
Optionally builds the pipeline of each destination and prints a summary.

Usage:
    # Validate the auto-detected config (DOCSINK_CONFIG or config/config.yaml)
    python scripts/validate_config.py

    # Validate a specific file and build all destination pipelines
    python scripts/validate_config.py --config config/config.yaml --build

    # Write an example config to start from
    python scripts/validate_config.py --write-example config/config.example.yaml
"""

import argparse
import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from config.config import SinkConfig, find_config_path, load_raw_config, save_example_config
from sink.builder import SinkTaskBuilder
from sink.core.exceptions import ConfigurationError
from sink.validation import validate_all

logger = logging.getLogger(__name__)


def print_errors(results: dict[str, list[str]]) -> int:
    """Print errors grouped by option and return how many there were."""
    count = 0
    for option, messages in results.items():
        if not messages:
            continue
        print(f"{option}:")
        for message in messages:
            print(f"  - {message}")
            count += 1
    return count


def print_summary(builder: SinkTaskBuilder) -> None:
    print("=" * 60)
    print("DESTINATION PIPELINES")
    print("=" * 60)
    for destination, pipeline in builder.build_all().items():
        print(f"{destination}:")
        print(f"  collection:   {pipeline.collection or '(destination name)'}")
        print(f"  chain:        {' -> '.join(pipeline.post_processors.names)}")
        print(f"  id strategy:  {pipeline.id_strategy!r}")
        print(f"  write model:  {pipeline.write_model_strategy!r}")
        if pipeline.delete_strategy is not None:
            print(f"  delete model: {pipeline.delete_strategy!r}")
        if pipeline.cdc_handler is not None:
            print(f"  cdc handler:  {pipeline.cdc_handler!r}")
        if pipeline.rate_limit.every_n:
            print(
                f"  rate limit:   every {pipeline.rate_limit.every_n} batches, "
                f"pause {pipeline.rate_limit.timeout_ms}ms"
            )


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Validate a Docsink configuration file"
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to config.yaml (auto-detected if not specified)"
    )
    parser.add_argument(
        "--build",
        action="store_true",
        help="Also build every destination pipeline and print a summary"
    )
    parser.add_argument(
        "--default-only",
        action="store_true",
        help="Only validate the default destination, not each configured one"
    )
    parser.add_argument(
        "--write-example",
        type=str,
        default=None,
        metavar="PATH",
        help="Write an example config to PATH and exit"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging"
    )

    args = parser.parse_args()

    if args.write_example:
        save_example_config(args.write_example)
        return 0

    try:
        config_path = find_config_path(args.config)
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    raw = load_raw_config(config_path)

    # Configure logging
    defaults = SinkConfig.model_fields
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else raw.get("log_level", defaults["log_level"].default),
        format=raw.get("log_format", defaults["log_format"].default),
    )
    logger.info(f"Validating config: {config_path}")

    results = validate_all(raw, all_destinations=not args.default_only)
    error_count = print_errors(results)
    if error_count:
        print(f"\n{error_count} error(s) found in {config_path}")
        return 1

    print(f"{config_path}: OK")

    if args.build:
        try:
            print_summary(SinkTaskBuilder(SinkConfig(**raw)))
        except ConfigurationError as e:
            logger.error(f"Failed to build pipelines: {e}")
            return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
