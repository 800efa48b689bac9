"""
Unit Tests for Sink Core
========================

Tests for enums, exceptions and record value objects.
"""

import pytest

from sink.core.enums import OperationType, ProjectionType, StageResult
from sink.core.exceptions import (
    CompatibilityError,
    ConfigurationError,
    ContractViolationError,
    DataError,
    SinkError,
)
from sink.core.records import SinkDocument, SinkRecord


class TestEnums:
    """Tests for enum values and conversions."""

    def test_projection_type_values(self):
        """Test ProjectionType enum values."""
        assert ProjectionType.NONE.value == "none"
        assert ProjectionType.BLACKLIST.value == "blacklist"
        assert ProjectionType.WHITELIST.value == "whitelist"

    def test_projection_type_parse(self):
        assert ProjectionType.parse(" WhiteList ") == ProjectionType.WHITELIST
        with pytest.raises(ValueError):
            ProjectionType.parse("greylist")

    def test_operation_type_codes(self):
        assert OperationType("c") == OperationType.CREATE
        assert OperationType("d") == OperationType.DELETE

    def test_enum_str_conversion(self):
        """Test that enums convert to strings properly."""
        assert str(ProjectionType.BLACKLIST) == "blacklist"
        assert str(StageResult.STOP) == "stop"
        assert str(OperationType.UPDATE) == "u"


class TestExceptions:
    """Tests for the error hierarchy."""

    def test_hierarchy(self):
        assert issubclass(ConfigurationError, SinkError)
        assert issubclass(ConfigurationError, ValueError)
        assert issubclass(ContractViolationError, ConfigurationError)
        assert issubclass(CompatibilityError, ConfigurationError)
        assert issubclass(DataError, SinkError)
        assert not issubclass(DataError, ConfigurationError)

    def test_configuration_error_context(self):
        error = ConfigurationError("bad", option="max_num_retries", value=-1)

        assert str(error) == "bad"
        assert error.option == "max_num_retries"
        assert error.value == -1


class TestSinkDocument:
    """Tests for the working document copy."""

    def test_from_record_deep_copies(self, sample_record):
        doc = SinkDocument.from_record(sample_record)

        doc.value_doc["customer"]["name"] = "Bob"

        assert sample_record.value["customer"]["name"] == "Ada"

    def test_clone(self):
        doc = SinkDocument(key_doc={"a": {"b": 1}}, value_doc=None)
        clone = doc.clone()

        clone.key_doc["a"]["b"] = 2

        assert doc.key_doc == {"a": {"b": 1}}
        assert clone.value_doc is None

    def test_record_defaults(self):
        record = SinkRecord(topic="t")
        assert (record.partition, record.offset, record.key, record.value) == (0, 0, None, None)
