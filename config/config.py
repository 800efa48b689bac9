"""Configuration management for Docsink."""
import json
import os
import yaml
from pathlib import Path
from typing import Optional, Dict, Any
from pydantic import BaseModel, ConfigDict, Field, field_validator


# Dotted identifier, e.g. "partial_key" or "acme.strategies.custom_key"
IDENTIFIER = r"[A-Za-z_][A-Za-z0-9_]*(?:\.[A-Za-z_][A-Za-z0-9_]*)*"
IDENTIFIER_LIST = rf"{IDENTIFIER}(?:\s*,\s*{IDENTIFIER})*"

OPTIONAL_IDENTIFIER_PATTERN = rf"^\s*(?:{IDENTIFIER})?\s*$"
OPTIONAL_IDENTIFIER_LIST_PATTERN = rf"^\s*(?:{IDENTIFIER_LIST})?\s*$"
IDENTIFIER_PATTERN = rf"^\s*{IDENTIFIER}\s*$"
PROJECTION_TYPE_PATTERN = r"^(?i:none|blacklist|whitelist)$"

DEFAULT_CONNECTION_URI = "mongodb://localhost:27017/docsink?w=1&journal=true"


class SinkOptions(BaseModel):
    """
    Every recognized sink option with its default and declared validator.

    The same model validates the global values and, one field at a time,
    each per-destination override (see ``ConfigResolver.resolve``).
    """
    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    # Connection
    connection_uri: str = Field(
        default=DEFAULT_CONNECTION_URI,
        description="Connection URI of the destination store",
    )
    collection: str = Field(
        default="",
        description="Target collection name; empty means the destination name is used",
    )
    destinations: str = Field(
        default="",
        description="Comma separated destination names which may carry their own overrides",
    )

    # Retries (relayed to the writer, never executed here)
    max_num_retries: int = Field(default=3, ge=0, description="How often a write is retried on error")
    retries_defer_timeout: int = Field(default=5000, ge=0, description="How long in ms a retry is deferred")

    # Projections
    value_projection_type: str = Field(default="none", pattern=PROJECTION_TYPE_PATTERN)
    value_projection_list: str = Field(default="", description="Comma separated field paths for value projection")
    key_projection_type: str = Field(default="none", pattern=PROJECTION_TYPE_PATTERN)
    key_projection_list: str = Field(default="", description="Comma separated field paths for key projection")

    # Id strategy
    document_id_strategy: str = Field(
        default="uuid",
        pattern=OPTIONAL_IDENTIFIER_PATTERN,
        description="Name of the strategy generating the document _id",
    )
    document_id_strategies: str = Field(
        default="",
        pattern=OPTIONAL_IDENTIFIER_LIST_PATTERN,
        description="Comma separated custom id strategy names allowed in addition to the predefined ones",
    )

    # Field renaming (inline JSON arrays)
    field_renamer_mapping: str = Field(
        default="[]",
        description='JSON array of {"oldName": ..., "newName": ...} objects',
    )
    field_renamer_regexp: str = Field(
        default="[]",
        description='JSON array of {"regexp": ..., "pattern": ..., "replace": ...} objects',
    )

    # Post processing
    post_processor_chain: str = Field(
        default="document_id_adder",
        pattern=OPTIONAL_IDENTIFIER_LIST_PATTERN,
        description="Comma separated post processor names building the chain",
    )

    # Change data capture
    change_data_capture_handler: str = Field(
        default="",
        pattern=OPTIONAL_IDENTIFIER_PATTERN,
        description="CDC handler name; empty disables CDC",
    )
    change_data_capture_handlers: str = Field(
        default="",
        pattern=OPTIONAL_IDENTIFIER_LIST_PATTERN,
        description="Comma separated custom CDC handler names allowed in addition to the predefined ones",
    )

    # Write models
    delete_on_null_values: bool = Field(
        default=False,
        description="Delete documents by key when the record value is null",
    )
    writemodel_strategy: str = Field(
        default="replace_one_default",
        pattern=IDENTIFIER_PATTERN,
        description="How write models are built for sink documents",
    )

    # Batching / rate limiting
    max_batch_size: int = Field(default=0, ge=0, description="Max records batched together (0 = unbounded)")
    rate_limiting_timeout: int = Field(default=0, ge=0, description="How long in ms processing pauses when rate limited")
    rate_limiting_every_n: int = Field(
        default=0,
        ge=0,
        description="After how many processed batches the rate limit triggers (0 = never)",
    )

    @field_validator("field_renamer_mapping", "field_renamer_regexp", mode="before")
    @classmethod
    def _inline_json(cls, value: Any) -> Any:
        # YAML users may write the array natively instead of as a JSON string
        if isinstance(value, list):
            return json.dumps(value)
        return value

    @field_validator("destinations", mode="before")
    @classmethod
    def _join_destinations(cls, value: Any) -> Any:
        if isinstance(value, list):
            return ",".join(str(v) for v in value)
        return value


OPTION_NAMES = frozenset(SinkOptions.model_fields)


class SinkConfig(SinkOptions):
    """
    Root configuration for Docsink.

    Global option values live at the top level. ``overrides`` maps a
    destination name to raw option values that replace the global ones for
    that destination only. Override values are validated lazily, when they
    are resolved.
    """
    overrides: Dict[str, Dict[str, Any]] = Field(default_factory=dict)

    # Logging
    log_level: str = "INFO"
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    @field_validator("overrides")
    @classmethod
    def _known_override_options(cls, value: Dict[str, Dict[str, Any]]) -> Dict[str, Dict[str, Any]]:
        for destination, options in value.items():
            unknown = sorted(set(options) - OPTION_NAMES)
            if unknown:
                raise ValueError(
                    f"unknown option(s) {unknown} in overrides for destination '{destination}'"
                )
        return value


def find_config_path(config_path: Optional[str] = None) -> Path:
    """
    Locate the configuration file.

    Args:
        config_path: Path to config file. If None, looks for:
            1. DOCSINK_CONFIG environment variable
            2. ./config/config.yaml
            3. ~/.docsink/config.yaml

    Raises:
        FileNotFoundError: If no config file exists.
    """
    if config_path is None:
        config_path = os.environ.get("DOCSINK_CONFIG")

        if config_path is None:
            candidates = [
                Path("./config/config.yaml"),
                Path.home() / ".docsink" / "config.yaml",
            ]
            for candidate in candidates:
                if candidate.exists():
                    config_path = str(candidate)
                    break

    if config_path is None:
        raise FileNotFoundError(
            "No config file found. Set DOCSINK_CONFIG or create config/config.yaml"
        )

    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    return config_path


def load_config(config_path: Optional[str] = None) -> SinkConfig:
    """
    Load configuration from YAML file.

    Args:
        config_path: Path to config file, located with ``find_config_path``
            when None.

    Returns:
        SinkConfig instance
    """
    return SinkConfig(**load_raw_config(find_config_path(config_path)))


def load_raw_config(config_path) -> Dict[str, Any]:
    """Read a YAML config file into a plain dict without validating it."""
    with open(config_path, 'r') as f:
        yaml_data = yaml.safe_load(f)
    return yaml_data or {}


def save_example_config(output_path: str = "./config/config.example.yaml"):
    """
    Save an example configuration file.

    Args:
        output_path: Where to save the example config
    """
    example = {
        "connection_uri": DEFAULT_CONNECTION_URI,
        "destinations": "orders,customers",
        "document_id_strategy": "uuid",
        "post_processor_chain": "document_id_adder,blacklist_value_projector",
        "value_projection_type": "blacklist",
        "value_projection_list": "internal,audit.trace",
        "overrides": {
            "orders": {
                "document_id_strategy": "partial_key",
                "key_projection_type": "whitelist",
                "key_projection_list": "order_id",
                "delete_on_null_values": True,
            },
            "customers": {
                "field_renamer_mapping": [
                    {"oldName": "value.name", "newName": "full_name"},
                ],
                "rate_limiting_every_n": 100,
                "rate_limiting_timeout": 1000,
            },
        },
        "log_level": "INFO",
    }

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, 'w') as f:
        yaml.dump(example, f, default_flow_style=False, sort_keys=False)

    print(f"Example config saved to {output_path}")
