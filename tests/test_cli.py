from __future__ import annotations

from click.testing import CliRunner

from kepctl.cli import main


def test_cli_help_shows_query_command():
    runner = CliRunner()
    result = runner.invoke(main, ["--help"])
    assert result.exit_code == 0
    assert "query" in result.output


def test_cli_query_table(enhancements_repo):
    runner = CliRunner()
    result = runner.invoke(main, [
        "query", "--sig", "node", "--status", "implementable",
        "--repo-path", str(enhancements_repo),
    ])

    assert result.exit_code == 0, result.output
    assert "Searching for KEPs..." in result.output
    assert "Pod Overhead" in result.output
    assert "Swap Support" not in result.output
    assert "UPDATED" in result.output


def test_cli_query_yaml_output(enhancements_repo):
    runner = CliRunner()
    result = runner.invoke(main, [
        "query", "--sig", "sig-api-machinery", "-o", "yaml",
        "--repo-path", str(enhancements_repo),
    ])

    assert result.exit_code == 0, result.output
    assert "title: Server Side Apply" in result.output


def test_cli_query_missing_repo_fails(tmp_path):
    runner = CliRunner()
    result = runner.invoke(main, ["query", "--sig", "node", "--repo-path", str(tmp_path / "missing")])

    assert result.exit_code == 1
    assert "unable to search KEPs" in result.output


def test_cli_query_rejects_unknown_output(enhancements_repo):
    runner = CliRunner()
    result = runner.invoke(main, ["query", "--sig", "node", "-o", "html", "--repo-path", str(enhancements_repo)])

    assert result.exit_code != 0
