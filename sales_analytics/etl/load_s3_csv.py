import pandas as pd
from airflow.providers.amazon.aws.hooks.s3 import S3Hook
from botocore.exceptions import ClientError, NoCredentialsError
from sales_analytics.etl.load_csv import sales_clean_to_csv
from sales_analytics.logger import setup_logger
from sales_analytics.utils.s3_paths import build_s3_uri

logger = setup_logger("etl.load_s3")


def s3_error_to_exception(error: ClientError, bucket: str) -> Exception:
    """
    Map an S3 ClientError to the exception the publish step raises:
    missing bucket -> ValueError, denied access -> PermissionError,
    anything else -> RuntimeError.
    """
    code = error.response.get("Error", {}).get("Code", "Unknown")
    if code == "NoSuchBucket":
        return ValueError(f"S3 bucket '{bucket}' not found")
    if code in ("AccessDenied", "403"):
        return PermissionError(
            f"Access denied to S3 bucket '{bucket}'. "
            "Check the AWS connection and the bucket policy."
        )
    return RuntimeError(f"S3 operation failed: {code} - {error}")


def write_sales_clean_csv_to_s3(
    df: pd.DataFrame,
    aws_conn_id: str,
    bucket: str,
    key: str
) -> str:
    """
    Publish the validated sales batch to S3 as CSV and return its URI.
    """
    if not bucket or not key:
        raise ValueError("Bucket and key must not be empty")

    uri = build_s3_uri(bucket, key)
    logger.info(f"Publishing {len(df)} clean records to {uri}")
    csv_data = sales_clean_to_csv(df)

    try:
        hook = S3Hook(aws_conn_id=aws_conn_id)
        hook.load_string(
            string_data=csv_data,
            key=key,
            bucket_name=bucket,
            replace=True
        )
    except NoCredentialsError as e:
        logger.error(f"No AWS credentials for connection '{aws_conn_id}'")
        raise ValueError(
            f"Invalid AWS connection '{aws_conn_id}'. "
            "Set AWS_ACCESS_KEY_ID and AWS_SECRET_ACCESS_KEY for it."
        ) from e
    except ClientError as e:
        mapped = s3_error_to_exception(e, bucket)
        logger.error(f"Publish to {uri} failed: {mapped}")
        raise mapped from e

    logger.info(f"Clean CSV published: {uri}")
    return uri
