from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

import typer

from sales_analytics.config import ReportParams, load_config
from sales_analytics.etl.clean import DEFAULT_DATE_FORMAT, DEFAULT_TIME_FORMAT
from sales_analytics.etl.extract import extract_sales_from_file
from sales_analytics.etl.load_csv import write_sales_clean_csv
from sales_analytics.etl.load_store import DEFAULT_TABLE_NAME, DEFAULT_VIEW_NAME, create_store_engine
from sales_analytics.pipeline import clean_raw_sales, run_pipeline
from sales_analytics.reporting.queries import CATALOG
from sales_analytics.reporting.reports import (
    preferred_payment_for_branch,
    run_all_reports,
    run_report,
    write_reports_csv,
)

app = typer.Typer(help="Walmart sales cleaning and reporting CLI.")

CONFIG_OPTION = typer.Option(None, "--config", "-c", help="Path to config.yaml (default: packaged config).")


@app.command("list-reports")
def list_reports() -> None:
    """
    Show the report catalog with each report's output columns.
    """
    for query in CATALOG.values():
        typer.echo(f"{query.name}: {', '.join(query.columns)}")
        typer.echo(f"    {query.description}")


@app.command()
def clean(
    input_path: Path = typer.Argument(..., help="Raw sales CSV."),
    output_path: Path = typer.Argument(..., help="Where to write the clean CSV."),
    config_path: Optional[Path] = CONFIG_OPTION,
) -> None:
    """
    Clean a raw sales CSV without touching the store.
    """
    config = load_config(config_path)
    input_cfg = config.get("input") or {}

    raw_df = extract_sales_from_file(input_path)
    clean_df, input_dropped, output_dropped = clean_raw_sales(
        raw_df,
        date_format=input_cfg.get("date_format", DEFAULT_DATE_FORMAT),
        time_format=input_cfg.get("time_format", DEFAULT_TIME_FORMAT),
    )
    write_sales_clean_csv(clean_df, output_path)
    typer.echo(
        f"{len(raw_df)} raw rows -> {len(clean_df)} clean rows "
        f"({input_dropped + output_dropped} dropped by validation) written to {output_path}"
    )


@app.command()
def run(
    input_path: Optional[Path] = typer.Option(None, "--input", "-i", help="Override the raw CSV path."),
    config_path: Optional[Path] = CONFIG_OPTION,
) -> None:
    """
    Run the full local pipeline: extract, validate, clean, load, report.
    """
    config = load_config(config_path)
    result = run_pipeline(config, input_path=input_path)
    typer.echo(
        f"Loaded {result.loaded_rows} of {result.raw_rows} raw rows; "
        f"{len(result.reports)} reports produced."
    )


@app.command()
def report(
    name: str = typer.Argument("all", help="Report name, or 'all'."),
    output_dir: Optional[Path] = typer.Option(None, "--output-dir", "-o", help="Write CSV files here."),
    config_path: Optional[Path] = CONFIG_OPTION,
) -> None:
    """
    Run one or all reports against an already loaded store.
    """
    config = load_config(config_path)
    store_cfg = config.get("store") or {}
    params = ReportParams.from_config(config)
    table_name = store_cfg.get("table_name", DEFAULT_TABLE_NAME)
    view_name = store_cfg.get("view_name", DEFAULT_VIEW_NAME)

    engine = create_store_engine(store_cfg["url"])
    try:
        if name == "all":
            results = run_all_reports(engine, params, table_name, view_name)
        else:
            results = {name: run_report(engine, name, params, table_name, view_name)}
    except KeyError as exc:
        typer.echo(str(exc.args[0]), err=True)
        raise typer.Exit(code=2)
    finally:
        engine.dispose()

    if output_dir:
        write_reports_csv(results, output_dir)
    for report_name, df in results.items():
        typer.echo(f"== {report_name}")
        typer.echo(df.to_string(index=False))


@app.command("preferred-payment")
def preferred_payment(
    branch: str = typer.Argument(..., help="Branch identifier, e.g. WALM049."),
    config_path: Optional[Path] = CONFIG_OPTION,
) -> None:
    """
    Show the preferred payment method of one branch.
    """
    config = load_config(config_path)
    store_cfg = config.get("store") or {}

    engine = create_store_engine(store_cfg["url"])
    try:
        result = preferred_payment_for_branch(
            engine, branch, store_cfg.get("view_name", DEFAULT_VIEW_NAME)
        )
    finally:
        engine.dispose()

    if result.empty:
        typer.echo(f"No transactions recorded for branch {branch}.")
        return
    typer.echo(f"{branch}: {result.iloc[0]['preferred_payment_method']}")


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
