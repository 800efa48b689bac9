"""
Unit Tests for CDC Handlers
===========================

Tests for handler selection and change envelope decoding.
"""

import json

import pytest

from sink.cdc.handlers import (
    CdcHandler,
    MongoDbHandler,
    MysqlHandler,
    PostgresHandler,
    RdbmsHandler,
    get_cdc_handler_registry,
)
from sink.core.enums import OperationType
from sink.core.exceptions import ConfigurationError, ContractViolationError, DataError
from sink.core.records import ChangeEvent, SinkDocument
from sink.strategies.selection import get_cdc_handler


class CustomHandler(MongoDbHandler):
    pass


class TestGetCdcHandler:
    """Tests for CDC handler selection."""

    def test_empty_name_means_no_handler(self, make_config):
        assert get_cdc_handler(make_config(), "__default__") is None

    @pytest.mark.parametrize("name, expected", [
        ("mongodb", MongoDbHandler),
        ("rdbms", RdbmsHandler),
        ("mysql", MysqlHandler),
        ("postgres", PostgresHandler),
    ])
    def test_predefined(self, make_config, name, expected):
        handler = get_cdc_handler(make_config(change_data_capture_handler=name), "__default__")
        assert type(handler) is expected

    def test_handler_receives_config(self, make_config):
        config = make_config(change_data_capture_handler="mongodb")
        assert get_cdc_handler(config, "__default__").config is config

    def test_unknown(self, make_config):
        with pytest.raises(ConfigurationError, match="unknown cdc handler oracle"):
            get_cdc_handler(make_config(change_data_capture_handler="oracle"), "__default__")

    def test_declared_custom(self, make_config, registry_cleanup):
        registry = get_cdc_handler_registry()
        registry.register("custom_cdc", CustomHandler)
        registry_cleanup.append((registry, "custom_cdc"))

        config = make_config(change_data_capture_handler="custom_cdc", change_data_capture_handlers="custom_cdc")

        assert isinstance(get_cdc_handler(config, "__default__"), CustomHandler)

    def test_wrong_constructor(self, make_config, registry_cleanup):
        registry = get_cdc_handler_registry()
        registry.register_factory("no_config")(lambda: CustomHandler(None))
        registry_cleanup.append((registry, "no_config"))

        config = make_config(change_data_capture_handler="no_config", change_data_capture_handlers="no_config")

        with pytest.raises(ContractViolationError):
            get_cdc_handler(config, "__default__")

    def test_per_destination(self, make_config):
        config = make_config(
            destinations="orders",
            overrides={"orders": {"change_data_capture_handler": "postgres"}},
        )

        assert get_cdc_handler(config, "__default__") is None
        assert isinstance(get_cdc_handler(config, "orders"), PostgresHandler)


class TestMongoDbHandler:
    """Tests for MongoDB change envelopes."""

    @pytest.fixture
    def handler(self, make_config):
        return MongoDbHandler(make_config())

    def test_insert(self, handler):
        doc = SinkDocument(
            key_doc={"id": json.dumps({"$oid": "abc"})},
            value_doc={"op": "c", "after": json.dumps({"_id": {"$oid": "abc"}, "name": "Ada"})},
        )

        event = handler.decode(doc)

        assert event == ChangeEvent(
            operation=OperationType.CREATE,
            filter={"_id": {"$oid": "abc"}},
            document={"_id": {"$oid": "abc"}, "name": "Ada"},
        )

    def test_update_with_patch_only(self, handler):
        doc = SinkDocument(
            key_doc={"id": "1"},
            value_doc={"op": "u", "patch": json.dumps({"$set": {"name": "Bob"}})},
        )

        event = handler.decode(doc)

        assert event.operation == OperationType.UPDATE
        assert event.filter == {"_id": 1}
        assert event.document == {"$set": {"name": "Bob"}}

    def test_delete(self, handler):
        event = handler.decode(SinkDocument(key_doc={"id": "1"}, value_doc={"op": "d"}))

        assert event.operation == OperationType.DELETE
        assert event.document is None

    def test_tombstone(self, handler):
        assert handler.decode(SinkDocument(key_doc={"id": "1"}, value_doc=None)) is None

    def test_missing_key_id(self, handler):
        with pytest.raises(DataError, match="'id' field"):
            handler.decode(SinkDocument(key_doc={}, value_doc={"op": "c", "after": "{}"}))

    def test_unknown_operation(self, handler):
        with pytest.raises(DataError, match="unknown cdc operation"):
            handler.decode(SinkDocument(key_doc={"id": "1"}, value_doc={"op": "x"}))

    def test_invalid_json(self, handler):
        with pytest.raises(DataError, match="not valid JSON"):
            handler.decode(SinkDocument(key_doc={"id": "1"}, value_doc={"op": "c", "after": "{oops"}))


class TestRdbmsHandler:
    """Tests for relational change envelopes."""

    @pytest.fixture
    def handler(self, make_config):
        return MysqlHandler(make_config())

    def test_insert(self, handler):
        doc = SinkDocument(
            key_doc={"id": 3},
            value_doc={"op": "c", "before": None, "after": {"id": 3, "name": "Ada"}},
        )

        event = handler.decode(doc)

        assert event.filter == {"_id": {"id": 3}}
        assert event.document == {"_id": {"id": 3}, "id": 3, "name": "Ada"}

    def test_delete(self, handler):
        event = handler.decode(SinkDocument(key_doc={"id": 3}, value_doc={"op": "d", "before": {"id": 3}}))

        assert event.operation == OperationType.DELETE
        assert event.filter == {"_id": {"id": 3}}

    def test_missing_key(self, handler):
        with pytest.raises(DataError):
            handler.decode(SinkDocument(key_doc=None, value_doc={"op": "c", "after": {}}))

    def test_missing_after(self, handler):
        with pytest.raises(DataError, match="'after'"):
            handler.decode(SinkDocument(key_doc={"id": 3}, value_doc={"op": "u", "after": None}))

    def test_is_cdc_handler(self, handler):
        assert isinstance(handler, CdcHandler)
        assert isinstance(handler, RdbmsHandler)
