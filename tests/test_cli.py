"""
Tests for the command line interface, driven through Typer's CliRunner.
"""

import pandas as pd
from typer.testing import CliRunner

from sales_analytics.cli import app
from sales_analytics.reporting.queries import CATALOG

runner = CliRunner()


def test_list_reports():
    result = runner.invoke(app, ["list-reports"])
    assert result.exit_code == 0
    for name in CATALOG:
        assert f"{name}:" in result.output


def test_clean_writes_csv(raw_sales_csv, sample_config_file, tmp_path):
    output = tmp_path / "out" / "clean.csv"
    result = runner.invoke(
        app, ["clean", str(raw_sales_csv), str(output), "--config", str(sample_config_file)]
    )
    assert result.exit_code == 0, result.output
    assert "7 raw rows -> 4 clean rows" in result.output
    assert len(pd.read_csv(output)) == 4


def test_run_then_report(raw_sales_csv, sample_config_file):
    result = runner.invoke(app, ["run", "--config", str(sample_config_file)])
    assert result.exit_code == 0, result.output
    assert "Loaded 4 of 7 raw rows" in result.output

    result = runner.invoke(app, ["report", "total_records", "--config", str(sample_config_file)])
    assert result.exit_code == 0, result.output
    assert "== total_records" in result.output


def test_report_unknown_name(raw_sales_csv, sample_config_file):
    runner.invoke(app, ["run", "--config", str(sample_config_file)])
    result = runner.invoke(app, ["report", "sales_forecast", "--config", str(sample_config_file)])
    assert result.exit_code == 2


def test_preferred_payment(raw_sales_csv, sample_config_file):
    runner.invoke(app, ["run", "--config", str(sample_config_file)])

    result = runner.invoke(app, ["preferred-payment", "WALM030", "--config", str(sample_config_file)])
    assert result.exit_code == 0, result.output
    assert "WALM030: Cash" in result.output

    result = runner.invoke(app, ["preferred-payment", "WALM999", "--config", str(sample_config_file)])
    assert result.exit_code == 0
    assert "No transactions recorded for branch WALM999" in result.output
