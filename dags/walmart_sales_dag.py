from datetime import datetime, timedelta
from airflow.decorators import dag, task
from airflow.exceptions import AirflowException
from typing import Any

from sales_analytics.config import ReportParams, load_config
from sales_analytics.etl.clean import DEFAULT_DATE_FORMAT, DEFAULT_TIME_FORMAT
from sales_analytics.etl.load_store import DEFAULT_TABLE_NAME, DEFAULT_VIEW_NAME
from sales_analytics.logger import setup_logger
from sales_analytics.utils.s3_paths import build_s3_uri, sales_keys_from_config

config = load_config()

AWS_CONN_ID = config["aws_conn_id"]
S3_CONFIG = config["s3"]
BUCKET = S3_CONFIG["bucket"]
SALES_KEY, PROCESSED_KEY = sales_keys_from_config(S3_CONFIG)
INPUT_CONFIG = config.get("input") or {}
STORE_CONFIG = config.get("store") or {}
OUTPUT_CONFIG = config.get("output") or {}

DEFAULT_ARGS = {
    "owner": "data-engineering",
    "email_on_failure": False,
    "email_on_retry": False,
    "retries": 2,
    "retry_delay": timedelta(minutes=5),
    "execution_timeout": timedelta(hours=1),
}


@dag(
    dag_id="walmart_sales_pipeline",
    description="""
    Walmart Sales Pipeline - cleans the raw sales extract from S3, loads it
    into the relational store and runs the reporting query catalog.

    Data Flow:
    1. Extract: Load walmart_sales.csv from S3
    2. Validate: Required columns present, numeric ranges sane (Pandera)
    3. Clean: Dedupe, drop incomplete/malformed rows, parse prices, derive total
    4. Validate: Final quality checks, then publish the clean CSV to S3
    5. Load: Bulk load the clean batch into the store, refresh the view
    6. Report: Run every catalog query and export the result sets
    """,
    start_date=datetime(2026, 1, 1),
    schedule="@daily",
    catchup=False,
    max_active_runs=1,
    default_args=DEFAULT_ARGS,
    tags=["walmart", "sales", "reporting"],
)
def walmart_sales_pipeline():
    """
    Main Walmart Sales DAG

    Cleans the raw sales extract and produces the reporting result sets.
    Every stage logs how many rows it kept and dropped.
    """
    from sales_analytics.etl.extract_s3 import extract_sales_from_s3
    from sales_analytics.etl.clean import clean_sales
    from sales_analytics.etl.load_s3_csv import write_sales_clean_csv_to_s3
    from sales_analytics.etl.load_store import create_store_engine, load_sales_clean_to_store
    from sales_analytics.reporting.reports import run_all_reports, write_reports_csv
    from sales_analytics.validations.validate_inputs import validate_raw_sales
    from sales_analytics.validations.validate_outputs import validate_sales_clean

    logger = setup_logger("dags.walmart_sales_pipeline")

    @task(
        task_id="extract_raw_data",
        doc_md="""
        Extracts the raw Walmart sales CSV from S3.

        **Column Normalization:**
        - Converts all column names to lowercase
        - Replaces spaces with underscores
        """,
    )
    def extract():
        try:
            sales_df = extract_sales_from_s3(
                aws_conn_id=AWS_CONN_ID,
                bucket=BUCKET,
                sales_key=SALES_KEY,
            )
            logger.info(f"✓ Extracted {len(sales_df)} sales records")
            return sales_df
        except Exception as e:
            logger.error(f"✗ Extraction failed: {str(e)}")
            raise AirflowException(f"Data extraction failed: {str(e)}")

    @task(
        task_id="validate_input_data",
        doc_md="""
        Validates the raw extract against the input schema.

        **Quality Checks:**
        - All source columns present
        - quantity >= 0, rating within [0, 10]
        """,
    )
    def validate_inputs(sales_df: Any):
        clean_df, dropped = validate_raw_sales(sales_df)
        logger.info(f"✓ Input validation: {len(clean_df)} valid ({dropped} dropped)")

        if clean_df.empty:
            raise AirflowException("Validation resulted in empty dataset")
        return clean_df

    @task(
        task_id="clean_sales_data",
        doc_md="""
        Cleans the raw sales records.

        **Steps:**
        1. Drop exact duplicate rows
        2. Drop rows with missing required fields
        3. Parse "$12.34" prices, dates and times; drop malformed rows
        4. Keep the first row of each invoice_id
        5. Derive total = unit_price * quantity
        """,
    )
    def clean(sales_df: Any):
        try:
            cleaned_df = clean_sales(
                sales_df,
                date_format=INPUT_CONFIG.get("date_format", DEFAULT_DATE_FORMAT),
                time_format=INPUT_CONFIG.get("time_format", DEFAULT_TIME_FORMAT),
            )
            logger.info(f"✓ Cleaning completed: {len(cleaned_df)} records")
            return cleaned_df
        except Exception as e:
            logger.error(f"✗ Cleaning failed: {str(e)}")
            raise AirflowException(f"Data cleaning failed: {str(e)}")

    @task(
        task_id="validate_and_publish_clean_data",
        doc_md="""
        Final validation, then publishes the clean CSV to S3.

        **Output Location:**
        - {uri}
        """.format(uri=build_s3_uri(BUCKET, PROCESSED_KEY)),
    )
    def validate_and_publish(df):
        try:
            clean_df, dropped = validate_sales_clean(df)

            if clean_df.empty:
                raise AirflowException("No valid records to load")

            logger.info(f"✓ Output validation passed: {len(clean_df)} records")
            if dropped > 0:
                logger.warning(f"  ⚠ {dropped} rows failed validation and were excluded")

            write_sales_clean_csv_to_s3(
                df=clean_df,
                aws_conn_id=AWS_CONN_ID,
                bucket=BUCKET,
                key=PROCESSED_KEY
            )
            return clean_df

        except Exception as e:
            logger.error(f"✗ Validation/Publish failed: {str(e)}")
            raise AirflowException(f"Pipeline failed at publish stage: {str(e)}")

    @task(
        task_id="load_to_store",
        doc_md="""
        Loads the clean batch into the relational store (truncate + insert)
        and recreates the preferred_payment_per_branch view.
        """,
    )
    def load_to_store(df):
        engine = create_store_engine(STORE_CONFIG["url"])
        try:
            row_count = load_sales_clean_to_store(
                engine,
                df,
                table_name=STORE_CONFIG.get("table_name", DEFAULT_TABLE_NAME),
                view_name=STORE_CONFIG.get("view_name", DEFAULT_VIEW_NAME),
                truncate_before_load=STORE_CONFIG.get("truncate_before_load", True),
            )
        except Exception as e:
            logger.error(f"✗ Store load failed: {str(e)}")
            raise AirflowException(f"Store load failed: {str(e)}")
        finally:
            engine.dispose()
        return f"Store load complete: {row_count} rows"

    @task(
        task_id="run_reports",
        doc_md="""
        Runs the reporting catalog against the store and writes one CSV per
        report to the configured reports directory.
        """,
    )
    def run_reports():
        engine = create_store_engine(STORE_CONFIG["url"])
        try:
            results = run_all_reports(
                engine,
                ReportParams.from_config(config),
                table_name=STORE_CONFIG.get("table_name", DEFAULT_TABLE_NAME),
                view_name=STORE_CONFIG.get("view_name", DEFAULT_VIEW_NAME),
            )
        except Exception as e:
            logger.error(f"✗ Reporting failed: {str(e)}")
            raise AirflowException(f"Reporting failed: {str(e)}")
        finally:
            engine.dispose()

        paths = write_reports_csv(results, OUTPUT_CONFIG.get("reports_dir", "data/reports"))
        success_msg = f"✓ Pipeline SUCCESS: {len(paths)} reports written"
        logger.info(success_msg)
        return success_msg

    # Define task dependencies
    extracted = extract()
    validated = validate_inputs(extracted)
    cleaned = clean(validated)
    published = validate_and_publish(cleaned)
    loaded = load_to_store(published)
    loaded >> run_reports()


# Instantiate DAG
walmart_sales_pipeline()
