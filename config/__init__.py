"""Config package."""
from .config import (
    OPTION_NAMES,
    find_config_path,
    SinkConfig,
    SinkOptions,
    load_config,
    load_raw_config,
    save_example_config,
)

__all__ = [
    "OPTION_NAMES",
    "find_config_path",
    "SinkConfig",
    "SinkOptions",
    "load_config",
    "load_raw_config",
    "save_example_config",
]
