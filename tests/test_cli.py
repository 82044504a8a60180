"""Tests for the scdkit command line."""

import json

import pytest
from typer.testing import CliRunner

from scdkit import __version__
from scdkit.cli.main import app

runner = CliRunner()

PROJECT_TOML = """
[project]
default_schema = "analytics"

[scd.customers]
strategy = "check"
unique_key = "id"
check_cols = ["email"]
source = "raw.customers"
dependencies = ["load_customers"]
"""


@pytest.fixture
def project_file(tmp_path):
    path = tmp_path / "scdkit.toml"
    path.write_text(PROJECT_TOML)
    return path


class TestCompile:
    def test_compile_all(self, project_file):
        result = runner.invoke(app, ["compile", str(project_file)])
        assert result.exit_code == 0
        assert "-- analytics.customers_historical (incremental_table)" in result.output
        assert "-- analytics.customers_scd (view)" in result.output
        assert "LEFT JOIN" not in result.output

    def test_compile_incremental(self, project_file):
        result = runner.invoke(
            app, ["compile", str(project_file), "--name", "customers_historical", "--incremental"]
        )
        assert result.exit_code == 0
        assert "LEFT JOIN (" in result.output
        assert "customers_scd" not in result.output

    def test_compile_dialect(self, project_file):
        result = runner.invoke(app, ["compile", str(project_file), "-n", "customers_scd", "-d", "duckdb"])
        assert result.exit_code == 0
        assert "EXCLUDE(scd_valid_to)" in result.output

    def test_compile_unknown_artifact(self, project_file):
        result = runner.invoke(app, ["compile", str(project_file), "--name", "nope"])
        assert result.exit_code == 1
        assert "Artifact 'nope' not found" in result.output

    def test_invalid_strategy_file(self, tmp_path):
        path = tmp_path / "scdkit.toml"
        path.write_text('[scd.t]\nstrategy = "foo"\nunique_key = "id"\nsource = "raw.t"\n')
        result = runner.invoke(app, ["compile", str(path)])
        assert result.exit_code == 1
        assert "Invalid strategy: foo" in result.output

    def test_source_without_name(self, tmp_path):
        path = tmp_path / "scdkit.toml"
        path.write_text(
            '[scd.t]\nstrategy = "check"\nunique_key = "id"\ncheck_cols = ["v"]\nsource = { schema = "raw" }\n'
        )
        result = runner.invoke(app, ["compile", str(path)])
        assert result.exit_code == 1
        assert "Missing required field 'source'" in result.output

    def test_missing_file(self, tmp_path):
        result = runner.invoke(app, ["compile", str(tmp_path / "missing.toml")])
        assert result.exit_code == 1
        assert "not found" in result.output


class TestGraph:
    def test_graph_table(self, project_file):
        result = runner.invoke(app, ["graph", str(project_file)])
        assert result.exit_code == 0
        assert "customers_historical" in result.output
        assert "external" in result.output

    def test_graph_json(self, project_file):
        result = runner.invoke(app, ["--log-level", "warning", "graph", str(project_file), "--json"])
        assert result.exit_code == 0
        data = json.loads(result.output[result.output.index("{"):])
        assert data["groups"] == [["load_customers"], ["customers_historical"], ["customers_scd"]]


class TestRun:
    def test_run_on_duckdb(self, project_file, tmp_path):
        duckdb = pytest.importorskip("duckdb")
        db_path = str(tmp_path / "warehouse.duckdb")
        conn = duckdb.connect(db_path)
        conn.execute("CREATE SCHEMA raw")
        conn.execute("CREATE TABLE raw.customers (id INTEGER, email VARCHAR)")
        conn.execute("INSERT INTO raw.customers VALUES (1, 'a@x.io'), (2, 'b@x.io')")
        conn.close()

        result = runner.invoke(app, ["run", str(project_file), "--db", db_path])
        assert result.exit_code == 0
        assert "analytics.customers_historical (2 rows)" in result.output
        assert "success" in result.output

    def test_run_failure_exits_nonzero(self, project_file, tmp_path):
        pytest.importorskip("duckdb")
        result = runner.invoke(app, ["run", str(project_file), "--db", str(tmp_path / "empty.duckdb")])
        assert result.exit_code == 1
        assert "customers_scd skipped" in result.output


def test_version():
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert f"scdkit v{__version__}" in result.output
