"""Unit tests for the schema codec."""

from __future__ import annotations

import json

import pytest

from kvsql.adapters.outbound import InMemoryKeyValueStore
from kvsql.domain.entities import ColumnDefinition
from kvsql.domain.services import SchemaCodec
from kvsql.domain.value_objects import COLUMN_ORDER_KEY


@pytest.fixture
def codec() -> SchemaCodec:
    """Create a schema codec for testing."""
    return SchemaCodec()


@pytest.mark.unit
class TestSchemaCodec:
    """Tests for storing and listing column definitions."""

    def test_define_and_list(self, memory_store: InMemoryKeyValueStore, codec: SchemaCodec) -> None:
        """Listing returns exactly the declared columns with their definitions."""
        with memory_store.update() as tx:
            bucket = tx.create_bucket_if_not_exists("users")
            codec.define_column(bucket, ColumnDefinition("name", "name text"))
            codec.define_column(bucket, ColumnDefinition("age", "age integer"))

        with memory_store.view() as tx:
            columns = codec.list_columns(tx.bucket("users"))

        assert columns == [
            ColumnDefinition("name", "name text"),
            ColumnDefinition("age", "age integer"),
        ]

    def test_declaration_order_not_key_order(
        self, memory_store: InMemoryKeyValueStore, codec: SchemaCodec
    ) -> None:
        """Columns come back in the order declared, not sorted by name."""
        with memory_store.update() as tx:
            bucket = tx.create_bucket_if_not_exists("t")
            codec.define_columns(
                bucket,
                [ColumnDefinition(n, f"{n} text") for n in ("zeta", "alpha", "mid")],
            )

        with memory_store.view() as tx:
            assert codec.column_names(tx.bucket("t")) == ["zeta", "alpha", "mid"]

    def test_redefinition_keeps_position(
        self, memory_store: InMemoryKeyValueStore, codec: SchemaCodec
    ) -> None:
        """Redefining a column updates it in place."""
        with memory_store.update() as tx:
            bucket = tx.create_bucket_if_not_exists("t")
            codec.define_column(bucket, ColumnDefinition("b", "b text"))
            codec.define_column(bucket, ColumnDefinition("a", "a text"))
            codec.define_column(bucket, ColumnDefinition("b", "b integer"))

        with memory_store.view() as tx:
            columns = codec.list_columns(tx.bucket("t"))

        assert [c.definition for c in columns] == ["b integer", "a text"]

    def test_missing_order_record_falls_back_to_key_order(
        self, memory_store: InMemoryKeyValueStore, codec: SchemaCodec
    ) -> None:
        """Without meta:columns the col: key order is used."""
        with memory_store.update() as tx:
            bucket = tx.create_bucket_if_not_exists("t")
            bucket.put(b"col:b", b"b text")
            bucket.put(b"col:a", b"a text")

        with memory_store.view() as tx:
            assert codec.column_names(tx.bucket("t")) == ["a", "b"]

    def test_unreadable_order_record(
        self, memory_store: InMemoryKeyValueStore, codec: SchemaCodec
    ) -> None:
        """A corrupt order record is ignored in favour of key order."""
        with memory_store.update() as tx:
            bucket = tx.create_bucket_if_not_exists("t")
            bucket.put(b"col:b", b"b text")
            bucket.put(b"col:a", b"a text")
            bucket.put(COLUMN_ORDER_KEY, b"{not json")

        with memory_store.view() as tx:
            assert codec.column_names(tx.bucket("t")) == ["a", "b"]

    def test_order_record_is_json(
        self, memory_store: InMemoryKeyValueStore, codec: SchemaCodec
    ) -> None:
        """The order record is a JSON list of names."""
        with memory_store.update() as tx:
            bucket = tx.create_bucket_if_not_exists("t")
            codec.define_column(bucket, ColumnDefinition("x", "x text"))

        with memory_store.view() as tx:
            raw = tx.bucket("t").get(COLUMN_ORDER_KEY)

        assert raw is not None
        assert json.loads(raw) == ["x"]
