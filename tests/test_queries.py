"""Tests for the incremental, full-load and validity-window query shapes."""

import pytest

from scdkit.relations import RelationRef
from scdkit.scd.queries import full_load_query, historical_query, incremental_query, view_query
from scdkit.scd.strategies import scd_config

HISTORICAL = RelationRef(name="t_historical", schema="analytics")


@pytest.fixture
def check_config():
    return scd_config(
        "t", strategy="check", unique_key="id", check_cols=["value"],
        source={"schema": "s", "name": "src"},
    )


@pytest.fixture
def timestamp_config():
    return scd_config(
        "t", strategy="timestamp", unique_key=["user_id", "client_id"],
        timestamp_col="updated_at", source={"schema": "s", "name": "src"},
    )


class TestIncrementalQuery:
    def test_check_single_key(self, check_config, make_ctx):
        sql = incremental_query(check_config, make_ctx(incremental=True))
        assert sql == """SELECT
  s.*,
  TO_HEX(MD5(CAST(s.id AS STRING))) AS scd_id,
  CURRENT_TIMESTAMP() AS scd_valid_from,
  CAST(NULL AS TIMESTAMP) AS scd_valid_to
FROM s.src s
LEFT JOIN (
  SELECT *, ROW_NUMBER() OVER (PARTITION BY id ORDER BY scd_valid_from DESC) AS scd_version_rank
  FROM analytics.t_historical
) t
  ON s.id = t.id AND t.scd_version_rank = 1
WHERE t.id IS NULL OR (s.value != t.value)"""

    def test_check_scenario_fragments(self, check_config, make_ctx):
        sql = incremental_query(check_config, make_ctx(incremental=True))
        assert "LEFT JOIN" in sql
        assert "FROM analytics.t_historical" in sql
        assert "ON s.id = t.id" in sql
        assert "t.id IS NULL OR (s.value != t.value)" in sql
        assert "CURRENT_TIMESTAMP() AS scd_valid_from" in sql
        assert "CAST(NULL AS TIMESTAMP) AS scd_valid_to" in sql

    def test_timestamp_composite_key(self, timestamp_config, make_ctx):
        sql = incremental_query(timestamp_config, make_ctx(incremental=True))
        assert "ON s.user_id = t.user_id AND s.client_id = t.client_id AND t.scd_version_rank = 1" in sql
        assert "PARTITION BY user_id, client_id ORDER BY updated_at DESC" in sql
        assert "WHERE t.user_id IS NULL OR (CAST(s.updated_at AS TIMESTAMP) > t.updated_at)" in sql
        # appended versions are stamped with the load time, not the upstream timestamp
        assert "CURRENT_TIMESTAMP() AS scd_valid_from" in sql

    def test_duckdb_dialect(self, check_config, make_ctx):
        sql = incremental_query(check_config, make_ctx(dialect="duckdb", incremental=True))
        assert "MD5(CAST(s.id AS VARCHAR)) AS scd_id" in sql
        assert "CAST(CURRENT_TIMESTAMP AS TIMESTAMP) AS scd_valid_from" in sql


class TestFullLoadQuery:
    def test_timestamp_uses_source_timestamp(self, timestamp_config, make_ctx):
        sql = full_load_query(timestamp_config, make_ctx())
        assert sql == """SELECT
  s.*,
  TO_HEX(MD5(CONCAT(CAST(s.user_id AS STRING), CAST(s.client_id AS STRING)))) AS scd_id,
  s.updated_at AS scd_valid_from,
  CAST(NULL AS TIMESTAMP) AS scd_valid_to
FROM s.src s"""

    def test_check_uses_load_time(self, check_config, make_ctx):
        sql = full_load_query(check_config, make_ctx())
        assert "CURRENT_TIMESTAMP() AS scd_valid_from" in sql
        assert "LEFT JOIN" not in sql

    def test_does_not_reference_self(self, check_config, make_ctx):
        ctx = make_ctx()
        full_load_query(check_config, ctx)
        assert ctx.refs == [{"schema": "s", "name": "src"}]


class TestHistoricalQuery:
    def test_incremental_mode(self, check_config, make_ctx):
        sql = historical_query(check_config, make_ctx(incremental=True))
        assert sql == incremental_query(check_config, make_ctx(incremental=True))

    def test_full_load_mode(self, check_config, make_ctx):
        sql = historical_query(check_config, make_ctx(incremental=False))
        assert sql == full_load_query(check_config, make_ctx())


class TestViewQuery:
    def test_timestamp_view(self, timestamp_config, make_ctx):
        sql = view_query(timestamp_config, make_ctx(), HISTORICAL)
        assert sql == """SELECT
  * EXCEPT(scd_valid_from, scd_valid_to),
  updated_at AS scd_valid_from,
  LEAD(updated_at) OVER (PARTITION BY user_id, client_id ORDER BY updated_at ASC) AS scd_valid_to
FROM analytics.t_historical"""

    def test_check_view(self, check_config, make_ctx):
        sql = view_query(check_config, make_ctx(), HISTORICAL)
        assert sql == """SELECT
  * EXCEPT(scd_valid_to),
  LEAD(scd_valid_from) OVER (PARTITION BY id ORDER BY scd_valid_from ASC) AS scd_valid_to
FROM analytics.t_historical
ORDER BY id, scd_valid_from"""

    def test_duckdb_view(self, check_config, make_ctx):
        sql = view_query(check_config, make_ctx(dialect="duckdb"), HISTORICAL)
        assert sql.startswith("SELECT\n  * EXCLUDE(scd_valid_to),")


class TestIdempotence:
    @pytest.mark.parametrize("incremental", [True, False])
    def test_same_input_same_text(self, timestamp_config, make_ctx, incremental):
        first = historical_query(timestamp_config, make_ctx(incremental=incremental))
        second = historical_query(timestamp_config, make_ctx(incremental=incremental))
        assert first == second

    def test_rebuilt_config_same_text(self, make_ctx):
        def build():
            config = scd_config(
                "t", strategy="check", unique_key=["a", "b"], check_cols=["x", "y"], source="s.src",
            )
            return view_query(config, make_ctx(), HISTORICAL), incremental_query(config, make_ctx())

        assert build() == build()
