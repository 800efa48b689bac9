"""Id and write-model strategies, and their configuration-driven selection."""
from .id_strategies import IdStrategy, get_id_strategy_registry, register_id_strategy
from .writemodel import WriteModelStrategy, get_write_model_registry, register_write_model_strategy
from .selection import (
    get_cdc_handler,
    get_delete_strategy,
    get_id_strategy,
    get_key_projector,
    get_rate_limit_settings,
    get_write_model_strategy,
)

__all__ = [
    "IdStrategy",
    "get_id_strategy_registry",
    "register_id_strategy",
    "WriteModelStrategy",
    "get_write_model_registry",
    "register_write_model_strategy",
    # Selection
    "get_cdc_handler",
    "get_delete_strategy",
    "get_id_strategy",
    "get_key_projector",
    "get_rate_limit_settings",
    "get_write_model_strategy",
]
