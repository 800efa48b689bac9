"""
Unit Tests for Configuration Loading
====================================

Tests for SinkOptions defaults, schema validation and YAML loading.
"""

import json

import pytest
import yaml
from pydantic import ValidationError

from config.config import (
    DEFAULT_CONNECTION_URI,
    OPTION_NAMES,
    SinkConfig,
    SinkOptions,
    find_config_path,
    load_config,
    load_raw_config,
    save_example_config,
)


class TestSinkOptions:
    """Tests for option defaults and declared validators."""

    def test_defaults(self):
        options = SinkOptions()

        assert options.connection_uri == DEFAULT_CONNECTION_URI
        assert options.max_num_retries == 3
        assert options.retries_defer_timeout == 5000
        assert options.value_projection_type == "none"
        assert options.document_id_strategy == "uuid"
        assert options.field_renamer_mapping == "[]"
        assert options.post_processor_chain == "document_id_adder"
        assert options.change_data_capture_handler == ""
        assert options.delete_on_null_values is False
        assert options.writemodel_strategy == "replace_one_default"
        assert options.rate_limiting_every_n == 0

    def test_option_names(self):
        assert "document_id_strategy" in OPTION_NAMES
        assert "overrides" not in OPTION_NAMES
        assert "log_level" not in OPTION_NAMES

    def test_negative_int_rejected(self):
        with pytest.raises(ValidationError):
            SinkOptions(max_num_retries=-1)

    def test_projection_type_case_insensitive(self):
        assert SinkOptions(key_projection_type="WhiteList").key_projection_type == "WhiteList"
        with pytest.raises(ValidationError):
            SinkOptions(key_projection_type="greylist")

    def test_identifier_patterns(self):
        SinkOptions(document_id_strategy="acme.strategies.custom_key")
        SinkOptions(document_id_strategy="")
        SinkOptions(post_processor_chain="document_id_adder, rename_by_mapping")
        with pytest.raises(ValidationError):
            SinkOptions(writemodel_strategy="")
        with pytest.raises(ValidationError):
            SinkOptions(post_processor_chain="bad-name")

    def test_rename_list_accepted_natively(self):
        options = SinkOptions(field_renamer_mapping=[{"oldName": "value.a", "newName": "b"}])
        assert json.loads(options.field_renamer_mapping) == [{"oldName": "value.a", "newName": "b"}]

    def test_unknown_option_rejected(self):
        with pytest.raises(ValidationError):
            SinkOptions(no_such_option=1)


class TestLoadConfig:
    """Tests for YAML loading."""

    def test_load_from_path(self, temp_dir):
        path = temp_dir / "config.yaml"
        path.write_text(yaml.dump({
            "destinations": "orders",
            "overrides": {"orders": {"document_id_strategy": "full_key"}},
            "log_level": "DEBUG",
        }))

        config = load_config(str(path))

        assert isinstance(config, SinkConfig)
        assert config.destinations == "orders"
        assert config.overrides == {"orders": {"document_id_strategy": "full_key"}}
        assert config.log_level == "DEBUG"

    def test_load_from_env(self, temp_dir, monkeypatch):
        path = temp_dir / "env.yaml"
        path.write_text("max_batch_size: 10\n")
        monkeypatch.setenv("DOCSINK_CONFIG", str(path))

        assert load_config().max_batch_size == 10

    def test_missing_file(self, temp_dir):
        with pytest.raises(FileNotFoundError):
            load_config(str(temp_dir / "missing.yaml"))

    def test_no_config_found(self, temp_dir, monkeypatch):
        monkeypatch.delenv("DOCSINK_CONFIG", raising=False)
        monkeypatch.chdir(temp_dir)
        monkeypatch.setenv("HOME", str(temp_dir))

        with pytest.raises(FileNotFoundError, match="No config file found"):
            find_config_path()

    def test_empty_file(self, temp_dir):
        path = temp_dir / "empty.yaml"
        path.write_text("")

        assert load_raw_config(path) == {}
        assert load_config(str(path)) == SinkConfig()

    def test_example_config_is_loadable(self, temp_dir, capsys):
        path = temp_dir / "example" / "config.yaml"

        save_example_config(str(path))
        config = load_config(str(path))

        assert config.destinations == "orders,customers"
        assert config.overrides["orders"]["document_id_strategy"] == "partial_key"
