"""
Config Resolver
===============

Resolves an option's value for a destination: the destination's override
when one exists, the global value otherwise.

Nothing is cached. Every call reads the underlying ``SinkConfig`` so a
reloaded config is picked up by simply constructing a new resolver.
"""

import logging
from typing import Any

from pydantic import MongoDsn, TypeAdapter, ValidationError

from config.config import OPTION_NAMES, SinkConfig, SinkOptions
from sink.core.enums import ProjectionType
from sink.core.exceptions import ConfigurationError
from sink.core.projection import build_projection_list, split_field_list

logger = logging.getLogger(__name__)

# Sentinel destination meaning "no override, use the shared default"
DEFAULT_DESTINATION = "__default__"

_CONNECTION_URI_ADAPTER = TypeAdapter(MongoDsn)


def is_default_destination(destination: str) -> bool:
    """The sentinel and the empty string both denote the shared default."""
    return not destination or destination == DEFAULT_DESTINATION


class ConfigResolver:
    """
    Override-then-default option lookup for a ``SinkConfig``.

    Example:
        resolver = ConfigResolver(config)
        resolver.resolve("document_id_strategy", "orders")  # override or global
        resolver.resolve("document_id_strategy")             # global
    """

    def __init__(self, config: SinkConfig):
        """
        Initialize resolver.

        Args:
            config: Validated root configuration.
        """
        self.config = config

    # =========================================================================
    # Resolution
    # =========================================================================

    def resolve(self, option: str, destination: str = DEFAULT_DESTINATION) -> Any:
        """
        Resolve an option value for a destination.

        Args:
            option: Option name (a ``SinkOptions`` field).
            destination: Destination name, or the default sentinel.

        Returns:
            The validated override value if the destination overrides the
            option, otherwise the global value.

        Raises:
            ConfigurationError: If the option is unknown or the override's raw
                value fails the option's declared validator.
        """
        if option not in OPTION_NAMES:
            raise ConfigurationError(f"Error: unknown option '{option}'", option=option)

        if not is_default_destination(destination):
            overrides = self.config.overrides.get(destination, {})
            if option in overrides:
                logger.debug(f"Using override for '{option}' on destination '{destination}'")
                return self._validate_override(option, overrides[option], destination)

        return getattr(self.config, option)

    def get(self, option: str, destination: str = DEFAULT_DESTINATION) -> Any:
        """Alias of :meth:`resolve` matching the upstream ``get(option, destination)`` shape."""
        return self.resolve(option, destination)

    def snapshot(self, destination: str = DEFAULT_DESTINATION) -> SinkOptions:
        """
        Materialize every resolved option for one destination.

        Returns:
            A fresh ``SinkOptions`` holding the destination's effective values.
        """
        values = {name: self.resolve(name, destination) for name in SinkOptions.model_fields}
        return SinkOptions.model_construct(**values)

    def _validate_override(self, option: str, raw: Any, destination: str) -> Any:
        scoped = SinkOptions.model_construct()
        try:
            setattr(scoped, option, raw)
        except ValidationError as e:
            message = "; ".join(err["msg"] for err in e.errors())
            raise ConfigurationError(
                f"Error: invalid value {raw!r} for '{option}' "
                f"(destination '{destination}'): {message}",
                option=option,
                value=raw,
            ) from e
        return getattr(scoped, option)

    # =========================================================================
    # Destinations
    # =========================================================================

    @property
    def destinations(self) -> list[str]:
        """Configured destination names, in declaration order, without duplicates."""
        return list(dict.fromkeys(split_field_list(self.config.destinations)))

    def collection_name(self, destination: str) -> str:
        """Target collection for a destination (falls back to the destination name)."""
        name = self.resolve("collection", destination)
        if name:
            return name
        return "" if is_default_destination(destination) else destination

    def connection_uri(self) -> MongoDsn:
        """
        Parse the connection URI.

        Raises:
            ConfigurationError: If the URI is not a valid connection string.
        """
        uri = self.resolve("connection_uri")
        try:
            return _CONNECTION_URI_ADAPTER.validate_python(uri)
        except ValidationError as e:
            raise ConfigurationError(
                f"Error: invalid connection uri {uri!r}: {e.errors()[0]['msg']}",
                option="connection_uri",
                value=uri,
            ) from e

    # =========================================================================
    # Projection lists
    # =========================================================================

    def key_projection_list(self, destination: str) -> set[str]:
        return build_projection_list(
            self.resolve("key_projection_type", destination),
            self.resolve("key_projection_list", destination),
        )

    def value_projection_list(self, destination: str) -> set[str]:
        return build_projection_list(
            self.resolve("value_projection_type", destination),
            self.resolve("value_projection_list", destination),
        )

    # =========================================================================
    # Convenience predicates
    # =========================================================================

    def _projection_type(self, option: str, destination: str) -> str:
        return self.resolve(option, destination).strip().lower()

    def is_using_blacklist_value_projection(self, destination: str) -> bool:
        return self._projection_type("value_projection_type", destination) == ProjectionType.BLACKLIST.value

    def is_using_whitelist_value_projection(self, destination: str) -> bool:
        return self._projection_type("value_projection_type", destination) == ProjectionType.WHITELIST.value

    def is_using_blacklist_key_projection(self, destination: str) -> bool:
        return self._projection_type("key_projection_type", destination) == ProjectionType.BLACKLIST.value

    def is_using_whitelist_key_projection(self, destination: str) -> bool:
        return self._projection_type("key_projection_type", destination) == ProjectionType.WHITELIST.value

    def is_using_cdc_handler(self, destination: str) -> bool:
        return bool(self.resolve("change_data_capture_handler", destination).strip())

    def is_delete_on_null_values(self, destination: str) -> bool:
        return self.resolve("delete_on_null_values", destination)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(destinations={self.destinations})"
