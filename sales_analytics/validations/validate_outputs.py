import pandas as pd
from pandera.errors import SchemaError, SchemaErrors
from .output_schemas import sales_clean_schema
from .validate_inputs import drop_failure_cases
from sales_analytics.logger import setup_logger

logger = setup_logger("validation.output")


def validate_sales_clean(df: pd.DataFrame) -> tuple[pd.DataFrame, int]:
    """
    Final quality gate on the cleaned batch before it is published and loaded.

    Records that break the clean schema are dropped and counted. A batch
    where nothing survives is rejected with ValueError.
    Returns (validated_df, dropped_rows).
    """
    logger.info(f"Output validation on {len(df)} clean records")

    try:
        validated_df = sales_clean_schema.validate(df, lazy=True)
    except SchemaErrors as err:
        failed = err.failure_cases
    else:
        logger.info("Output validation passed")
        return validated_df, 0

    dropped_rows = int(failed["index"].dropna().nunique())
    logger.error(f"{dropped_rows} clean records break the output schema ({len(failed)} failed checks)")
    logger.error(
        f"Failed checks per column:\n{failed.groupby(['column', 'check'], dropna=False).size()}"
    )

    survivors = drop_failure_cases(df, failed)
    if survivors.empty:
        raise ValueError("All rows failed output validation, aborting pipeline")

    try:
        survivors = sales_clean_schema.validate(survivors)
        logger.info(f"Output validation kept {len(survivors)} records")
    except SchemaError as err:
        logger.warning(f"Survivors still fail {err.check}; returning best effort")

    return survivors, dropped_rows
