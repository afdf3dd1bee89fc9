"""Tests for the ``rel`` command group."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from assetgraph.cli import cli
from assetgraph.infrastructure.database.engine import init_database
from tests.conftest import history_rows, insert_asset, insert_assets, insert_edge


@pytest.fixture
def seeded(tmp_path: Path) -> Path:
    """An inventory with assets db, web and api, and api depending on db."""
    engine = init_database(tmp_path)
    insert_asset(engine, "db", asset_tag="SRV-DB-01", name="Primary database")
    insert_assets(engine, "web", "api")
    insert_edge(engine, "db", "api", id="rel-db-api")
    engine.dispose()
    return tmp_path


def _json(result) -> dict:
    return json.loads(result.output)


@pytest.mark.usefixtures("_isolated_inventory")
class TestRelAdd:
    def test_add_dependency(self, cli_runner: CliRunner, seeded: Path) -> None:
        result = cli_runner.invoke(
            cli, ["--json", "--sync", "rel", "add", "db", "web", "--type", "dependency"]
        )
        assert result.exit_code == 0, result.output
        data = _json(result)
        assert data["ok"] is True
        assert data["op"] == "create_relationship"
        assert data["data"]["parent_asset_id"] == "db"
        assert data["data"]["child_asset_id"] == "web"
        assert data["data"]["relationship_type"] == "dependency"

    def test_add_records_history(self, cli_runner: CliRunner, seeded: Path) -> None:
        result = cli_runner.invoke(
            cli,
            [
                "--json", "--sync", "rel", "add", "db", "web",
                "--type", "component", "--actor", "alice",
            ],
        )
        assert result.exit_code == 0, result.output
        engine = init_database(seeded)
        try:
            rows = history_rows(engine)
        finally:
            engine.dispose()
        assert {row["asset_id"] for row in rows} == {"db", "web"}
        assert all(row["actor_id"] == "alice" for row in rows)

    def test_add_with_notes_human_output(self, cli_runner: CliRunner, seeded: Path) -> None:
        result = cli_runner.invoke(
            cli, ["--sync", "rel", "add", "web", "api", "--type", "related", "--notes", "same team"]
        )
        assert result.exit_code == 0, result.output
        assert "create_relationship" in result.output
        assert "same team" in result.output

    def test_add_quiet_prints_id(self, cli_runner: CliRunner, seeded: Path) -> None:
        result = cli_runner.invoke(
            cli, ["-q", "--sync", "rel", "add", "db", "web", "--type", "dependency"]
        )
        assert result.exit_code == 0, result.output
        assert len(result.output.strip().splitlines()) == 1

    def test_add_cycle_rejected(self, cli_runner: CliRunner, seeded: Path) -> None:
        # db -> api exists; api -> db would close the loop.
        result = cli_runner.invoke(
            cli, ["--json", "--sync", "rel", "add", "api", "db", "--type", "dependency"]
        )
        assert result.exit_code == 1
        data = _json(result)
        assert data["ok"] is False
        assert data["error"]["code"] == "CIRCULAR_DEPENDENCY"

    def test_add_invalid_type(self, cli_runner: CliRunner, seeded: Path) -> None:
        result = cli_runner.invoke(cli, ["--json", "rel", "add", "db", "web", "--type", "owns"])
        assert result.exit_code == 1
        assert _json(result)["error"]["code"] == "INVALID_RELATIONSHIP_TYPE"

    def test_add_missing_asset(self, cli_runner: CliRunner, seeded: Path) -> None:
        result = cli_runner.invoke(
            cli, ["--json", "rel", "add", "db", "ghost", "--type", "dependency"]
        )
        assert result.exit_code == 1
        assert _json(result)["error"]["code"] == "NOT_FOUND"

    def test_add_error_human_output(self, cli_runner: CliRunner, seeded: Path) -> None:
        result = cli_runner.invoke(cli, ["rel", "add", "db", "db", "--type", "dependency"])
        assert result.exit_code == 1
        assert "ERROR" in result.output
        assert "SELF_REFERENCE" in result.output

    def test_add_requires_type(self, cli_runner: CliRunner, seeded: Path) -> None:
        result = cli_runner.invoke(cli, ["rel", "add", "db", "web"])
        assert result.exit_code == 2


@pytest.mark.usefixtures("_isolated_inventory")
class TestRelRemove:
    def test_remove(self, cli_runner: CliRunner, seeded: Path) -> None:
        result = cli_runner.invoke(cli, ["--json", "--sync", "rel", "remove", "rel-db-api"])
        assert result.exit_code == 0, result.output
        data = _json(result)
        assert data["data"]["relationship_id"] == "rel-db-api"

        again = cli_runner.invoke(cli, ["--json", "rel", "remove", "rel-db-api"])
        assert again.exit_code == 1
        assert _json(again)["error"]["code"] == "NOT_FOUND"


@pytest.mark.usefixtures("_isolated_inventory")
class TestRelList:
    def test_list_children(self, cli_runner: CliRunner, seeded: Path) -> None:
        result = cli_runner.invoke(cli, ["--json", "rel", "list", "db"])
        assert result.exit_code == 0, result.output
        data = _json(result)["data"]
        assert data["direction"] == "child"
        assert data["count"] == 1
        assert data["items"][0]["child_asset_id"] == "api"

    def test_list_parents(self, cli_runner: CliRunner, seeded: Path) -> None:
        result = cli_runner.invoke(cli, ["--json", "rel", "list", "api", "--direction", "parent"])
        data = _json(result)["data"]
        assert [item["parent_asset_id"] for item in data["items"]] == ["db"]

    def test_list_table_output(self, cli_runner: CliRunner, seeded: Path) -> None:
        result = cli_runner.invoke(cli, ["rel", "list", "api", "--direction", "parent"])
        assert result.exit_code == 0, result.output
        assert "SRV-DB-01" in result.output
        assert "1 relationships (parent)" in result.output

    def test_list_both_rejected(self, cli_runner: CliRunner, seeded: Path) -> None:
        result = cli_runner.invoke(cli, ["--json", "rel", "list", "db", "--direction", "both"])
        assert result.exit_code == 1
        assert _json(result)["error"]["code"] == "INVALID_DIRECTION"


@pytest.mark.usefixtures("_isolated_inventory")
class TestRelAssets:
    def test_assets_both(self, cli_runner: CliRunner, seeded: Path) -> None:
        result = cli_runner.invoke(cli, ["--json", "rel", "assets", "api"])
        assert result.exit_code == 0, result.output
        data = _json(result)["data"]
        assert data["direction"] == "both"
        assert [item["id"] for item in data["items"]] == ["db"]

    def test_assets_quiet(self, cli_runner: CliRunner, seeded: Path) -> None:
        result = cli_runner.invoke(cli, ["-q", "rel", "assets", "db", "--type", "dependency"])
        assert result.exit_code == 0, result.output
        assert result.output.strip() == "api"

    def test_assets_invalid_direction(self, cli_runner: CliRunner, seeded: Path) -> None:
        result = cli_runner.invoke(cli, ["--json", "rel", "assets", "db", "--direction", "up"])
        assert result.exit_code == 1
        assert _json(result)["error"]["code"] == "INVALID_DIRECTION"
