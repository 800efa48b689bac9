"""
Pytest configuration and fixtures for all tests.
"""
import pytest

from config.config import SinkConfig
from sink.core.records import SinkDocument, SinkRecord
from sink.core.resolver import ConfigResolver


@pytest.fixture
def temp_dir(tmp_path):
    """
    Provide a temporary directory for tests.

    This wraps pytest's built-in tmp_path fixture for compatibility
    with existing test code that expects a `temp_dir` fixture.
    """
    return tmp_path


@pytest.fixture
def make_config():
    """Factory building a resolver from keyword option values."""
    def _make(**options) -> ConfigResolver:
        return ConfigResolver(SinkConfig(**options))
    return _make


@pytest.fixture
def base_config(make_config):
    """Resolver with two destinations, one of them overriding several options."""
    return make_config(
        destinations="orders,customers",
        post_processor_chain="document_id_adder,blacklist_value_projector",
        value_projection_type="blacklist",
        value_projection_list="internal,audit.trace",
        overrides={
            "orders": {
                "document_id_strategy": "partial_key",
                "key_projection_type": "whitelist",
                "key_projection_list": "order_id",
                "delete_on_null_values": True,
            },
            "customers": {
                "rate_limiting_every_n": 2,
                "rate_limiting_timeout": 100,
            },
        },
    )


@pytest.fixture
def sample_record():
    """Record with nested key and value documents."""
    return SinkRecord(
        topic="orders",
        partition=1,
        offset=42,
        key={"order_id": 7, "region": "eu"},
        value={
            "order_id": 7,
            "customer": {"name": "Ada", "email": "ada@example.com"},
            "items": [
                {"sku": "A1", "qty": 2, "price": 10.0},
                {"sku": "B2", "qty": 1, "price": 5.5},
            ],
            "internal": "drop me",
            "audit": {"trace": "xyz", "created_by": "svc"},
        },
    )


@pytest.fixture
def sample_doc(sample_record):
    return SinkDocument.from_record(sample_record)


@pytest.fixture
def tombstone_record():
    """Record whose value is null."""
    return SinkRecord(topic="orders", partition=0, offset=43, key={"order_id": 7, "region": "eu"}, value=None)


@pytest.fixture
def registry_cleanup():
    """
    Track names registered on global registries during a test and remove them afterwards.

    Usage:
        registry_cleanup.append((get_id_strategy_registry(), "custom"))
    """
    registered = []
    yield registered
    for registry, name in registered:
        registry.unregister(name)
