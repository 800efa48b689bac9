"""
Validate-All
============

Collects every configuration error at once instead of failing on the first.

Phase 1 checks the schema: each global value and each per-destination
override against its option's declared validator. A failing value is
reported on its own option and replaced by the option's default.

Phase 2 runs one independent validator per concern against the repaired
configuration. Validators build and discard the artifact they check, and
report failures as ``(option, message)`` pairs.
"""

import logging
from typing import Any, Callable, Optional

from pydantic import ValidationError

from config.config import OPTION_NAMES, SinkConfig
from sink.core.exceptions import ConfigurationError
from sink.core.resolver import DEFAULT_DESTINATION, ConfigResolver, is_default_destination
from sink.processors.chain import build_post_processor_chain
from sink.processors.renamers import parse_rename_field_mappings, parse_rename_regexp_settings
from sink.strategies.selection import get_cdc_handler, get_delete_strategy, get_id_strategy

logger = logging.getLogger(__name__)

ValidationResult = tuple[str, str]


class Validator:
    """
    One validation concern.

    Attributes:
        option: Option errors are reported on.
        check: Callable raising ConfigurationError when the concern is violated.
            Any other exception is reported on the option as well.
        applies: Optional predicate; the validator is skipped when it returns False.
    """

    def __init__(
        self,
        option: str,
        check: Callable[[ConfigResolver, str], Any],
        applies: Optional[Callable[[ConfigResolver, str], bool]] = None,
    ):
        self.option = option
        self.check = check
        self.applies = applies

    def __call__(self, config: ConfigResolver, destination: str) -> Optional[ValidationResult]:
        if self.applies is not None and not self.applies(config, destination):
            return None
        try:
            self.check(config, destination)
        except ConfigurationError as e:
            return self.option, str(e)
        except Exception as e:
            logger.debug(f"Validator for '{self.option}' failed unexpectedly", exc_info=True)
            return self.option, f"{type(e).__name__}: {e}"
        return None

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(option='{self.option}')"


VALIDATORS = [
    Validator("connection_uri", lambda cfg, dest: cfg.connection_uri()),
    Validator("key_projection_type", lambda cfg, dest: cfg.key_projection_list(dest)),
    Validator("value_projection_type", lambda cfg, dest: cfg.value_projection_list(dest)),
    Validator("field_renamer_mapping", parse_rename_field_mappings),
    Validator("field_renamer_regexp", parse_rename_regexp_settings),
    Validator("post_processor_chain", build_post_processor_chain),
    Validator(
        "change_data_capture_handler",
        get_cdc_handler,
        applies=lambda cfg, dest: cfg.is_using_cdc_handler(dest),
    ),
    Validator("document_id_strategy", get_id_strategy),
    Validator(
        "delete_on_null_values",
        get_delete_strategy,
        applies=lambda cfg, dest: cfg.is_delete_on_null_values(dest),
    ),
]


def run_validators(config: ConfigResolver, destination: str = DEFAULT_DESTINATION) -> list[ValidationResult]:
    """
    Run every validator for one destination.

    Returns:
        ``(option, message)`` for each violated concern; empty when valid.
    """
    results = []
    for validator in VALIDATORS:
        result = validator(config, destination)
        if result is not None:
            results.append(result)
    return results


def _schema_errors(raw: dict[str, Any]) -> tuple[SinkConfig, dict[str, list[str]]]:
    """Validate the schema, dropping failing top-level values until the rest validates."""
    errors: dict[str, list[str]] = {}
    values = dict(raw)

    while True:
        try:
            return SinkConfig.model_validate(values), errors
        except ValidationError as e:
            failed = set()
            for err in e.errors():
                field = str(err["loc"][0]) if err["loc"] else "config"
                errors.setdefault(field, []).append(f"{'.'.join(map(str, err['loc']))}: {err['msg']}")
                failed.add(field)
            dropped = failed & set(values)
            if not dropped:
                return SinkConfig(), errors
            for field in dropped:
                del values[field]


def _override_errors(config: SinkConfig) -> dict[str, list[str]]:
    """Resolve each override once, dropping the ones failing their option's validator."""
    errors: dict[str, list[str]] = {}
    resolver = ConfigResolver(config)

    for destination, options in config.overrides.items():
        for option in list(options):
            try:
                resolver.resolve(option, destination)
            except ConfigurationError as e:
                errors.setdefault(option, []).append(str(e))
                del options[option]
    return errors


def validate_all(raw: dict[str, Any], all_destinations: bool = False) -> dict[str, list[str]]:
    """
    Validate a raw configuration and collect every error.

    Args:
        raw: Configuration mapping as loaded from YAML.
        all_destinations: Also run the concern validators for each
            configured destination, not just the shared default.

    Returns:
        Error messages per option. Every recognized option is present
        (with an empty list when valid); unknown keys and malformed
        overrides appear under their own key.
    """
    results: dict[str, list[str]] = {name: [] for name in sorted(OPTION_NAMES)}

    config, schema_errors = _schema_errors(raw)
    for option, messages in schema_errors.items():
        results.setdefault(option, []).extend(messages)

    for option, messages in _override_errors(config).items():
        results[option].extend(messages)

    resolver = ConfigResolver(config)
    destinations = [DEFAULT_DESTINATION]
    if all_destinations:
        destinations += resolver.destinations

    for destination in destinations:
        for option, message in run_validators(resolver, destination):
            if not is_default_destination(destination):
                message = f"[{destination}] {message}"
            results[option].append(message)

    error_count = sum(len(messages) for messages in results.values())
    if error_count:
        logger.warning(f"Configuration has {error_count} error(s)")
    else:
        logger.debug("Configuration is valid")

    return results
