"""
Strategy Selection
==================

Builds a destination's strategies from configuration and enforces the rules
that span more than one independently configured strategy:

- Partial id strategies need a key projector chosen by crossing the key
  projection mode with the strategy kind.
- Deleting on null values needs a key-bearing id strategy.
"""

import logging
from typing import Optional

from sink.cdc.handlers import PREDEFINED_CDC_HANDLERS, CdcHandler, get_cdc_handler_registry
from sink.core.enums import ProjectionType
from sink.core.exceptions import CompatibilityError, ConfigurationError
from sink.core.projection import split_field_list
from sink.core.rate_limit import RateLimitSettings
from sink.core.resolver import ConfigResolver
from sink.processors.projectors import (
    BlacklistKeyProjector,
    BlacklistValueProjector,
    FieldProjector,
    WhitelistKeyProjector,
    WhitelistValueProjector,
)
from sink.strategies.id_strategies import (
    KEY_BEARING_ID_STRATEGIES,
    PARTIAL_ID_STRATEGIES,
    PREDEFINED_ID_STRATEGIES,
    IdStrategy,
    get_id_strategy_registry,
)
from sink.strategies.writemodel import (
    DELETE_ONE_STRATEGY,
    WriteModelStrategy,
    get_write_model_registry,
)

logger = logging.getLogger(__name__)

# (key projection mode, id strategy) -> projector class
_KEY_PROJECTORS = {
    (ProjectionType.BLACKLIST, "partial_key"): BlacklistKeyProjector,
    (ProjectionType.BLACKLIST, "partial_value"): BlacklistValueProjector,
    (ProjectionType.WHITELIST, "partial_key"): WhitelistKeyProjector,
    (ProjectionType.WHITELIST, "partial_value"): WhitelistValueProjector,
}


# =============================================================================
# Id strategy
# =============================================================================

def get_id_strategy_name(config: ConfigResolver, destination: str) -> str:
    return config.resolve("document_id_strategy", destination).strip()


def get_key_projector(config: ConfigResolver, destination: str) -> FieldProjector:
    """
    Build the projector a partial id strategy reduces its document with.

    The key projection settings select blacklist/whitelist, the id strategy
    selects key/value document.

    Raises:
        ConfigurationError: If the combination is not one of the four valid ones.
    """
    strategy = get_id_strategy_name(config, destination)
    mode = config.resolve("key_projection_type", destination).strip().lower()

    projector_class = None
    if mode in (ProjectionType.BLACKLIST.value, ProjectionType.WHITELIST.value):
        projector_class = _KEY_PROJECTORS.get((ProjectionType(mode), strategy))

    if projector_class is None:
        raise ConfigurationError(
            f"Error: invalid key projection settings for key_projection_type={mode!r} "
            f"with document_id_strategy={strategy!r}",
            option="key_projection_type",
            value=mode,
        )

    def predicate(cfg: ConfigResolver) -> bool:
        if mode == ProjectionType.BLACKLIST.value:
            return cfg.is_using_blacklist_key_projection(destination)
        return cfg.is_using_whitelist_key_projection(destination)

    return projector_class(config, config.key_projection_list(destination), predicate, destination)


def get_id_strategy(config: ConfigResolver, destination: str) -> IdStrategy:
    """
    Resolve and construct a destination's id strategy.

    Raises:
        ConfigurationError: Unknown or unregistered strategy name, or invalid
            key projection settings for a partial strategy.
        ContractViolationError: The implementation violates its contract.
    """
    name = get_id_strategy_name(config, destination)
    # custom allow-list may be overridden per destination
    custom = split_field_list(config.resolve("document_id_strategies", destination))

    handle = get_id_strategy_registry().resolve(name, PREDEFINED_ID_STRATEGIES, custom)
    logger.debug(f"Using id strategy '{name}' for destination '{destination}'")

    if name in PARTIAL_ID_STRATEGIES:
        return handle.create(get_key_projector(config, destination))
    return handle.create()


# =============================================================================
# Write models
# =============================================================================

def get_write_model_strategy(config: ConfigResolver, destination: str) -> WriteModelStrategy:
    name = config.resolve("writemodel_strategy", destination).strip()
    return get_write_model_registry().resolve(name).create()


def get_delete_strategy(config: ConfigResolver, destination: str) -> WriteModelStrategy:
    """
    Build the delete-on-null write model for a destination.

    Raises:
        CompatibilityError: If the destination's id strategy does not derive
            the id from the record key.
    """
    id_strategy = get_id_strategy(config, destination)

    if not isinstance(id_strategy, KEY_BEARING_ID_STRATEGIES):
        allowed = " or ".join(cls.__name__ for cls in KEY_BEARING_ID_STRATEGIES)
        raise CompatibilityError(
            f"Error: {DELETE_ONE_STRATEGY} can only be applied when the configured "
            f"id strategy is either {allowed}, got {type(id_strategy).__name__}",
            option="delete_on_null_values",
            value=True,
        )

    return get_write_model_registry().resolve(DELETE_ONE_STRATEGY).create(id_strategy)


# =============================================================================
# CDC / rate limiting
# =============================================================================

def get_cdc_handler(config: ConfigResolver, destination: str) -> Optional[CdcHandler]:
    """
    Resolve and construct a destination's CDC handler.

    Returns:
        The handler, or None when no handler is configured.
    """
    name = config.resolve("change_data_capture_handler", destination).strip()
    if not name:
        return None

    custom = split_field_list(config.resolve("change_data_capture_handlers", destination))
    handle = get_cdc_handler_registry().resolve(name, PREDEFINED_CDC_HANDLERS, custom)
    return handle.create(config)


def get_rate_limit_settings(config: ConfigResolver, destination: str) -> RateLimitSettings:
    return RateLimitSettings(
        timeout_ms=config.resolve("rate_limiting_timeout", destination),
        every_n=config.resolve("rate_limiting_every_n", destination),
    )
