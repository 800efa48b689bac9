"""
Unit Tests for the Sink Task Builder
====================================

End-to-end tests turning configurations and records into write operations.
"""

import pytest

from config.config import SinkConfig
from sink.builder import DestinationPipeline, SinkTaskBuilder
from sink.cdc.handlers import PostgresHandler
from sink.core.exceptions import CompatibilityError, ConfigurationError
from sink.core.records import DeleteOne, ReplaceOne, SinkRecord
from sink.core.resolver import DEFAULT_DESTINATION
from sink.strategies.id_strategies import PartialKeyStrategy, UuidStrategy
from sink.strategies.writemodel import DeleteOneDefaultStrategy, ReplaceOneDefaultStrategy


class TestBuild:
    """Tests for building destination pipelines."""

    def test_build_all(self, base_config):
        pipelines = SinkTaskBuilder(base_config).build_all()

        assert list(pipelines) == [DEFAULT_DESTINATION, "orders", "customers"]
        assert all(isinstance(p, DestinationPipeline) for p in pipelines.values())

    def test_per_destination_artifacts(self, base_config):
        pipelines = SinkTaskBuilder(base_config).build_all()

        orders = pipelines["orders"]
        assert orders.collection == "orders"
        assert isinstance(orders.id_strategy, PartialKeyStrategy)
        assert isinstance(orders.delete_strategy, DeleteOneDefaultStrategy)
        assert orders.options.delete_on_null_values is True

        customers = pipelines["customers"]
        assert isinstance(customers.id_strategy, UuidStrategy)
        assert customers.delete_strategy is None
        assert customers.rate_limit.every_n == 2
        assert isinstance(customers.write_model_strategy, ReplaceOneDefaultStrategy)

    def test_accepts_sink_config(self):
        pipeline = SinkTaskBuilder(SinkConfig()).build()

        assert pipeline.destination == DEFAULT_DESTINATION
        assert pipeline.cdc_handler is None

    def test_incompatible_delete_raises(self, make_config):
        builder = SinkTaskBuilder(make_config(delete_on_null_values=True))

        with pytest.raises(CompatibilityError):
            builder.build()

    def test_first_error_raises(self, make_config):
        with pytest.raises(ConfigurationError):
            SinkTaskBuilder(make_config(writemodel_strategy="upsert_all")).build()


class TestArtifactMaps:
    """Tests for the per-artifact maps."""

    def test_delete_strategies_only_when_enabled(self, base_config):
        assert list(SinkTaskBuilder(base_config).delete_strategies()) == ["orders"]

    def test_rate_limit_settings(self, base_config):
        settings = SinkTaskBuilder(base_config).rate_limit_settings()

        assert set(settings) == {DEFAULT_DESTINATION, "orders", "customers"}
        assert settings["customers"].timeout_ms == 100

    def test_write_model_strategies(self, base_config):
        strategies = SinkTaskBuilder(base_config).write_model_strategies()
        assert set(strategies) == {DEFAULT_DESTINATION, "orders", "customers"}

    def test_post_processor_chains(self, base_config):
        chains = SinkTaskBuilder(base_config).post_processor_chains()
        assert chains["orders"].names == ["DocumentIdAdder", "BlacklistValueProjector"]

    def test_cdc_handlers_configured_destinations_only(self, make_config):
        config = make_config(
            destinations="orders,customers",
            change_data_capture_handler="mongodb",
            overrides={"orders": {"change_data_capture_handler": "postgres"}, "customers": {"change_data_capture_handler": ""}},
        )

        handlers = SinkTaskBuilder(config).cdc_handlers()

        assert list(handlers) == ["orders"]
        assert isinstance(handlers["orders"], PostgresHandler)


class TestBuildWriteModel:
    """Tests for DestinationPipeline.build_write_model."""

    def test_replace_with_generated_id(self, base_config, sample_record):
        pipeline = SinkTaskBuilder(base_config).build("orders")

        model = pipeline.build_write_model(sample_record)

        assert isinstance(model, ReplaceOne)
        assert model.filter == {"_id": {"order_id": 7}}
        assert list(model.replacement)[0] == "_id"
        assert "internal" not in model.replacement
        assert model.replacement["audit"] == {"created_by": "svc"}

    def test_record_is_not_modified(self, base_config, sample_record):
        SinkTaskBuilder(base_config).build("orders").build_write_model(sample_record)

        assert "internal" in sample_record.value
        assert "_id" not in sample_record.value

    def test_tombstone_deletes_by_key(self, base_config, tombstone_record):
        model = SinkTaskBuilder(base_config).build("orders").build_write_model(tombstone_record)

        assert model == DeleteOne(filter={"_id": {"order_id": 7}})

    def test_tombstone_without_delete_is_skipped(self, base_config, tombstone_record):
        assert SinkTaskBuilder(base_config).build("customers").build_write_model(tombstone_record) is None

    def test_cdc_pipeline(self, make_config):
        pipeline = SinkTaskBuilder(make_config(change_data_capture_handler="rdbms")).build()

        upsert = pipeline.build_write_model(SinkRecord(
            topic="db.public.users",
            key={"id": 1},
            value={"op": "u", "after": {"id": 1, "name": "Ada"}},
        ))
        delete = pipeline.build_write_model(SinkRecord(
            topic="db.public.users",
            key={"id": 1},
            value={"op": "d", "before": {"id": 1}},
        ))

        assert upsert == ReplaceOne(
            filter={"_id": {"id": 1}},
            replacement={"_id": {"id": 1}, "id": 1, "name": "Ada"},
            upsert=True,
        )
        assert delete == DeleteOne(filter={"_id": {"id": 1}})

    def test_rate_limit_counter_is_per_pipeline(self, base_config):
        builder = SinkTaskBuilder(base_config)
        first = builder.build("customers")
        second = builder.build("customers")

        first.rate_limit.is_triggered()

        assert first.rate_limit.counter == 1
        assert second.rate_limit.counter == 0
