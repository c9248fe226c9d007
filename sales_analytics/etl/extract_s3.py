import pandas as pd
from airflow.providers.amazon.aws.hooks.s3 import S3Hook
from io import StringIO
from sales_analytics.etl.extract import read_raw_sales
from sales_analytics.logger import setup_logger

logger = setup_logger('etl.extract_s3')


def extract_sales_from_s3(aws_conn_id: str, bucket: str, sales_key: str) -> pd.DataFrame:
    """
    Extract the raw Walmart sales CSV from S3 and return a DataFrame.
    """
    hook = S3Hook(aws_conn_id=aws_conn_id)

    logger.info(f"Extracting sales from s3://{bucket}/{sales_key}")
    sales_content = hook.read_key(key=sales_key, bucket_name=bucket)
    sales_df = read_raw_sales(StringIO(sales_content))
    logger.info(f"Successfully extracted {len(sales_df)} rows from sales")

    return sales_df


# Bucket layout:
# walmart-sales-analytics
# │
# ├── raw-data/
# │   └── walmart_sales.csv
# │
# └── cleansed-data/
#     └── walmart_sales_clean.csv
