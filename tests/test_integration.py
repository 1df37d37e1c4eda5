"""Integration tests for end-to-end CLI workflows."""

from datetime import date

import pytest
import yaml

from banksync.cli.main import cli
from banksync.ledger.factories import create_sqlite_ledger
from banksync.providers.csv_export import sanitize_account_number

ACCOUNT = "325-0000000000001-11"


@pytest.fixture
def workspace(tmp_path, export_dir, fixtures_dir):
    """Config file, export directory and local ledger path for CLI runs."""
    (export_dir / f"{sanitize_account_number(ACCOUNT)}.csv").write_text(
        (fixtures_dir / "statement.csv").read_text(encoding="utf-8"), encoding="utf-8"
    )
    ledger_path = tmp_path / "ledger.db"
    config = {
        "ledger": {"type": "sqlite", "path": str(ledger_path)},
        "providers": {"csv-export": {"directory": str(export_dir)}},
        "accounts": [
            {
                "budget_id": "budget-1",
                "provider": "csv-export",
                "source_account_number": ACCOUNT,
                "target_account_id": "acct-1",
                "match_uncleared": True,
            }
        ],
    }
    config_path = tmp_path / "config.yaml"
    config_path.write_text(yaml.safe_dump(config), encoding="utf-8")
    return {"config": str(config_path), "ledger": str(ledger_path), "data": config}


def list_ledger(path):
    ledger = create_sqlite_ledger(path)
    try:
        return ledger.list_transactions_since("budget-1", "acct-1", date(2000, 1, 1))
    finally:
        ledger.close()


def test_sync_creates_then_converges(cli_runner, workspace):
    """First sync creates the export's rows; the second changes nothing."""
    args = ["--config", workspace["config"], "sync", "--since", "2024-01-01"]

    result = cli_runner.invoke(cli, args)
    assert result.exit_code == 0, result.output
    assert "created 5, updated 0" in result.output

    result = cli_runner.invoke(cli, args)
    assert result.exit_code == 0, result.output
    assert "created 0, updated 0" in result.output

    assert len(list_ledger(workspace["ledger"])) == 5


def test_sync_dry_run_leaves_ledger_untouched(cli_runner, workspace):
    """Dry runs report what would change."""
    result = cli_runner.invoke(
        cli, ["--config", workspace["config"], "sync", "--dry-run", "--since", "2024-01-01"]
    )

    assert result.exit_code == 0, result.output
    assert "would create 5, would update 0" in result.output
    assert list_ledger(workspace["ledger"]) == []


def test_sync_reports_failed_account(cli_runner, workspace, tmp_path):
    """A failing account is reported without failing the command."""
    data = workspace["data"]
    data["accounts"].append({**data["accounts"][0], "provider": "unknown-bank"})
    config_path = tmp_path / "two.yaml"
    config_path.write_text(yaml.safe_dump(data), encoding="utf-8")

    result = cli_runner.invoke(
        cli, ["--config", str(config_path), "sync", "--since", "2024-01-01"]
    )

    assert result.exit_code == 0, result.output
    assert "created 5, updated 0" in result.output
    assert "failed: Provider 'unknown-bank' not recognized" in result.output


def test_sync_invalid_since(cli_runner, workspace):
    """Unparseable --since values are rejected."""
    result = cli_runner.invoke(
        cli, ["--config", workspace["config"], "sync", "--since", "someday"]
    )

    assert result.exit_code == 1
    assert "Invalid since date" in result.output


def test_sync_missing_config(cli_runner, tmp_path):
    """A missing config file exits with an error."""
    result = cli_runner.invoke(cli, ["--config", str(tmp_path / "nope.yaml"), "sync"])

    assert result.exit_code == 1
    assert "Error: Config file not found" in result.output


def test_config_from_environment(cli_runner, workspace):
    """BANKSYNC_CONFIG points the CLI at a config file."""
    result = cli_runner.invoke(
        cli, ["check-config"], env={"BANKSYNC_CONFIG": workspace["config"]}
    )

    assert result.exit_code == 0, result.output
    assert f"{ACCOUNT} [csv-export] -> budget-1/acct-1 (match uncleared)" in result.output


def test_check_config_unknown_provider(cli_runner, workspace, tmp_path):
    """check-config fails when a pairing names an unknown provider."""
    data = workspace["data"]
    data["accounts"][0]["provider"] = "unknown-bank"
    config_path = tmp_path / "bad.yaml"
    config_path.write_text(yaml.safe_dump(data), encoding="utf-8")

    result = cli_runner.invoke(cli, ["--config", str(config_path), "check-config"])

    assert result.exit_code == 1
    assert "Provider 'unknown-bank' not recognized" in result.output


def test_providers_command(cli_runner):
    """The providers command lists built-in providers."""
    result = cli_runner.invoke(cli, ["providers"])

    assert result.exit_code == 0
    assert "csv-export" in result.output


def test_invalid_log_level(cli_runner, workspace):
    """Unknown log levels are rejected as bad parameters."""
    result = cli_runner.invoke(
        cli, ["--config", workspace["config"], "--log-level", "LOUD", "providers"]
    )

    assert result.exit_code == 2
    assert "Unknown log level" in result.output


def test_watch_rejects_since(cli_runner, workspace):
    """--since only applies to one-shot runs."""
    result = cli_runner.invoke(
        cli, ["--config", workspace["config"], "sync", "--watch", "--since", "2024-01-01"]
    )

    assert result.exit_code == 2
    assert "--since cannot be combined with --watch" in result.output


@pytest.mark.parametrize("command", [["sync"], ["check-config"]])
def test_malformed_provider_options_reported(cli_runner, workspace, tmp_path, command):
    """Bad provider options end with an error message, not a traceback."""
    data = workspace["data"]
    data["providers"]["csv-export"]["columns"] = ["Date", "Amount"]
    config_path = tmp_path / "bad-columns.yaml"
    config_path.write_text(yaml.safe_dump(data), encoding="utf-8")

    result = cli_runner.invoke(cli, ["--config", str(config_path), *command])

    assert result.exit_code == 1
    assert "Error: Provider 'csv-export': option 'columns'" in result.output
    assert not isinstance(result.exception, TypeError)


def test_check_config_shows_schedule(cli_runner, workspace):
    """check-config prints the cron schedule used by --watch."""
    result = cli_runner.invoke(cli, ["--config", workspace["config"], "check-config"])

    assert result.exit_code == 0, result.output
    assert "schedule: cron '*/30 * * * *'" in result.output
