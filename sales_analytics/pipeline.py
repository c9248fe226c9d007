"""
Local run of the sales pipeline.

Mirrors the Airflow DAG step for step but reads and writes the local
filesystem instead of S3:

1. Extract: read the raw sales CSV
2. Validate: required columns present, numeric ranges sane
3. Clean: dedupe, drop incomplete/malformed rows, parse prices, derive total
4. Validate: final quality checks on the clean batch
5. Load: write the clean CSV and load the relational store
6. Report: run the query catalog and export each result set
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import pandas as pd

from sales_analytics.config import ReportParams
from sales_analytics.etl.clean import DEFAULT_DATE_FORMAT, DEFAULT_TIME_FORMAT, clean_sales
from sales_analytics.etl.extract import extract_sales_from_file
from sales_analytics.etl.load_csv import write_sales_clean_csv
from sales_analytics.etl.load_store import (
    DEFAULT_TABLE_NAME,
    DEFAULT_VIEW_NAME,
    create_store_engine,
    load_sales_clean_to_store,
)
from sales_analytics.logger import setup_logger
from sales_analytics.reporting.reports import run_all_reports, write_reports_csv
from sales_analytics.validations.validate_inputs import validate_raw_sales
from sales_analytics.validations.validate_outputs import validate_sales_clean

logger = setup_logger("pipeline")


@dataclass
class PipelineResult:
    raw_rows: int
    clean_rows: int
    loaded_rows: int
    dropped_input: int = 0
    dropped_output: int = 0
    reports: dict[str, pd.DataFrame] = field(default_factory=dict)


def clean_raw_sales(
    raw_df: pd.DataFrame,
    date_format: str = DEFAULT_DATE_FORMAT,
    time_format: str = DEFAULT_TIME_FORMAT,
) -> tuple[pd.DataFrame, int, int]:
    """
    Validate, clean and re-validate a raw batch.

    Returns the clean frame plus the number of rows dropped by the input and
    output validations.
    """
    validated_df, input_dropped = validate_raw_sales(raw_df)
    if validated_df.empty:
        raise ValueError("Input validation resulted in empty dataset")

    cleaned_df = clean_sales(validated_df, date_format=date_format, time_format=time_format)
    if cleaned_df.empty:
        raise ValueError("Cleaning removed every row, nothing to load")

    clean_df, output_dropped = validate_sales_clean(cleaned_df)
    return clean_df, input_dropped, output_dropped


def run_pipeline(config: dict[str, Any], input_path: Optional[Path] = None) -> PipelineResult:
    input_cfg = config.get("input") or {}
    store_cfg = config.get("store") or {}
    output_cfg = config.get("output") or {}

    source = Path(input_path or input_cfg["path"])
    table_name = store_cfg.get("table_name", DEFAULT_TABLE_NAME)
    view_name = store_cfg.get("view_name", DEFAULT_VIEW_NAME)

    raw_df = extract_sales_from_file(source)

    clean_df, input_dropped, output_dropped = clean_raw_sales(
        raw_df,
        date_format=input_cfg.get("date_format", DEFAULT_DATE_FORMAT),
        time_format=input_cfg.get("time_format", DEFAULT_TIME_FORMAT),
    )
    logger.info(f"Clean batch: {len(clean_df)} records ({input_dropped + output_dropped} dropped by validation)")

    if output_cfg.get("clean_csv"):
        write_sales_clean_csv(clean_df, output_cfg["clean_csv"])

    engine = create_store_engine(store_cfg["url"])
    try:
        loaded = load_sales_clean_to_store(
            engine,
            clean_df,
            table_name=table_name,
            view_name=view_name,
            truncate_before_load=store_cfg.get("truncate_before_load", True),
        )

        reports = run_all_reports(
            engine,
            ReportParams.from_config(config),
            table_name=table_name,
            view_name=view_name,
        )
    finally:
        engine.dispose()

    if output_cfg.get("reports_dir"):
        write_reports_csv(reports, output_cfg["reports_dir"])

    logger.info(f"Pipeline SUCCESS: {loaded} records loaded, {len(reports)} reports produced")
    return PipelineResult(
        raw_rows=len(raw_df),
        clean_rows=len(clean_df),
        loaded_rows=loaded,
        dropped_input=input_dropped,
        dropped_output=output_dropped,
        reports=reports,
    )
