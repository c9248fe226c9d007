import pandas as pd
from pandera.errors import SchemaError, SchemaErrors
from .input_schemas import raw_sales_schema
from sales_analytics.etl.clean import SOURCE_COLUMNS, normalize_column_names
from sales_analytics.logger import setup_logger

logger = setup_logger('validation.input')


def drop_failure_cases(df: pd.DataFrame, failed: pd.DataFrame) -> pd.DataFrame:
    """Drop the rows referenced by a pandera failure_cases frame."""
    if len(failed) > 0:
        failed_indices = failed["index"].dropna().unique()
        if len(failed_indices) > 0:
            return df.drop(index=failed_indices)
    return df.copy()


def validate_raw_sales(df):
    logger.info(f"Starting raw sales validation on {len(df)} rows")
    df = normalize_column_names(df)

    missing = [c for c in SOURCE_COLUMNS if c not in df.columns]
    if missing:
        logger.error(f"Raw sales data is missing columns: {missing}")
        raise ValueError(f"Raw sales data is missing columns: {missing}")

    try:
        validated_df = raw_sales_schema.validate(df, lazy=True)
        logger.info("Raw sales validation passed")
        return validated_df, 0

    except SchemaErrors as err:
        failed = err.failure_cases
        invalid_count = int(failed["index"].dropna().nunique())
        logger.warning(f"Raw sales validation failed: {invalid_count} invalid rows")
        logger.warning(f"Errors summary:\n{failed.groupby(['column', 'check']).size()}")

        clean_df = drop_failure_cases(df, failed)

        try:
            clean_df = raw_sales_schema.validate(clean_df)  # re-validate clean data
            logger.info(f"Cleaned raw sales: {len(clean_df)} rows remaining")
        except SchemaError:
            logger.warning("Could not clean all invalid rows. Returning best effort.")

        return clean_df, invalid_count
