"""Tests for the command-line interface."""

import json

import pytest
from click.testing import CliRunner

from catalog_sync.cli import cli
from catalog_sync.config import settings


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def db_args(tmp_path, monkeypatch):
    """CLI arguments pointing at a fresh database."""
    monkeypatch.setattr(settings, "quote_latency_scale", 0)
    monkeypatch.setattr(settings, "auto_import_on_empty", False)
    return ["--database-url", f"sqlite:///{tmp_path / 'cli.db'}"]


@pytest.fixture
def feed_file(tmp_path, midocean_record):
    path = tmp_path / "midocean.json"
    path.write_text(json.dumps([midocean_record]), encoding="utf-8")
    return path


class TestCli:
    """Test CLI commands end to end against SQLite."""

    def test_db_init(self, runner, db_args):
        """Test creating the tables."""
        result = runner.invoke(cli, db_args + ["db", "init"])

        assert result.exit_code == 0
        assert "Database initialized successfully" in result.output

    def test_import_and_browse(self, runner, db_args, feed_file):
        """Test importing a dump, then listing and showing the product."""
        runner.invoke(cli, db_args + ["db", "init"])

        result = runner.invoke(cli, db_args + ["import-file", "--supplier", "midocean", "--file", str(feed_file)])
        assert result.exit_code == 0
        assert "midocean: 1 saved (1 new, 0 updated)" in result.output

        result = runner.invoke(cli, db_args + ["products", "list", "--search", "cotton"])
        assert result.exit_code == 0
        assert "Zippered cotton bag" in result.output
        assert "Code: AR1249" in result.output

        result = runner.invoke(cli, db_args + ["products", "show", "1"])
        assert result.exit_code == 0
        assert "Variants (3):" in result.output
        assert "10134325 | SKU: AR1249-16" in result.output
        assert "Master assets (1):" in result.output

    def test_show_missing_product(self, runner, db_args):
        """Test showing an unknown product exits with an error."""
        runner.invoke(cli, db_args + ["db", "init"])

        result = runner.invoke(cli, db_args + ["products", "show", "42"])

        assert result.exit_code == 1

    def test_quote(self, runner, db_args, feed_file):
        """Test requesting seeded quotes for an imported product."""
        runner.invoke(cli, db_args + ["db", "init"])
        runner.invoke(cli, db_args + ["import-file", "--supplier", "midocean", "--file", str(feed_file)])

        args = db_args + ["quote", "--product-id", "1", "--quantity", "100", "--seed", "7"]
        first = runner.invoke(cli, args)
        second = runner.invoke(cli, args)

        assert first.exit_code == 0
        assert "Request 1: 100 x Zippered cotton bag" in first.output
        for provider in ("ProviderA", "ProviderB", "ProviderC"):
            assert provider in first.output
        # Same seed, same quotes
        assert first.output.splitlines()[1:] == second.output.splitlines()[1:]

    def test_quote_unknown_product(self, runner, db_args):
        """Test quoting a missing product fails cleanly."""
        runner.invoke(cli, db_args + ["db", "init"])

        result = runner.invoke(cli, db_args + ["quote", "--product-id", "9", "--quantity", "1"])

        assert result.exit_code == 1

    def test_sync_without_feeds(self, runner, db_args, monkeypatch):
        """Test sync refuses to run with nothing configured."""
        monkeypatch.setattr(settings, "midocean_api_key", None)
        monkeypatch.setattr(settings, "xd_connects_product_data_url", None)
        runner.invoke(cli, db_args + ["db", "init"])

        result = runner.invoke(cli, db_args + ["sync"])

        assert result.exit_code == 1
