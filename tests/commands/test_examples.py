"""Tests for the --examples flag on CLI commands."""

from __future__ import annotations

import pytest
from click.testing import CliRunner

from assetgraph.cli import cli

# (CLI args, expected keywords in output)
EXAMPLES_COMMANDS: list[tuple[list[str], list[str]]] = [
    (["rel", "--examples"], ["assetgraph rel add", "assetgraph rel list"]),
    (["rel", "add", "--examples"], ["--type dependency", "--actor alice"]),
    (["rel", "remove", "--examples"], ["assetgraph rel remove"]),
    (["rel", "list", "--examples"], ["--direction parent"]),
    (["rel", "assets", "--examples"], ["assetgraph rel assets"]),
    (["graph", "--examples"], ["assetgraph graph show", "assetgraph graph cycles"]),
    (["graph", "show", "--examples"], ["--depth 5"]),
    (["graph", "impact", "--examples"], ["assetgraph graph impact"]),
    (["graph", "cycles", "--examples"], ["assetgraph -q graph cycles"]),
]


def _examples_id(item: tuple[list[str], list[str]]) -> str:
    args, _ = item
    return "_".join(a for a in args if a != "--examples")


@pytest.mark.parametrize(
    "args,expected_keywords",
    EXAMPLES_COMMANDS,
    ids=[_examples_id(item) for item in EXAMPLES_COMMANDS],
)
def test_examples_flag(
    cli_runner: CliRunner, args: list[str], expected_keywords: list[str]
) -> None:
    result = cli_runner.invoke(cli, args)
    assert result.exit_code == 0
    assert "Examples for" in result.output
    for kw in expected_keywords:
        assert kw in result.output, f"Expected '{kw}' in examples output for {args}"


@pytest.mark.parametrize(
    "args",
    [["rel", "--help"], ["rel", "add", "--help"], ["graph", "--help"], ["graph", "show", "--help"]],
)
def test_examples_in_help(cli_runner: CliRunner, args: list[str]) -> None:
    result = cli_runner.invoke(cli, args)
    assert result.exit_code == 0
    assert "--examples" in result.output


def test_examples_exits_before_validation(cli_runner: CliRunner) -> None:
    # rel add requires two arguments and --type; --examples is eager.
    result = cli_runner.invoke(cli, ["rel", "add", "--examples"])
    assert result.exit_code == 0
    assert "Missing" not in result.output


def test_help_points_at_examples(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, ["graph", "impact", "--help"])
    assert result.exit_code == 0
    assert "Run with --examples for sample invocations." in result.output


def test_examples_are_dedented(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, ["graph", "cycles", "--examples"])
    lines = result.output.splitlines()
    assert "assetgraph graph cycles" in lines
