"""
S3 path helpers.

Key construction for the raw extract and the cleansed output lives here so
the DAG and the publish step agree on where files land.
"""


def _ensure_trailing_slash(prefix: str) -> str:
    if not prefix:
        return ""
    return prefix if prefix.endswith("/") else f"{prefix}/"


def _strip_leading_slash(path: str) -> str:
    return path.lstrip("/") if path else ""


def join_s3_key(folder: str, relative_key: str) -> str:
    """
    Join a folder prefix and a relative key with exactly one slash.

    Example:
        join_s3_key("raw-data", "/walmart_sales.csv")
        -> "raw-data/walmart_sales.csv"
    """
    if not relative_key:
        raise ValueError("S3 key must not be empty")
    return f"{_ensure_trailing_slash(folder.lstrip('/'))}{_strip_leading_slash(relative_key)}"


def build_s3_uri(bucket: str, key: str) -> str:
    """
    Example:
        build_s3_uri("walmart-sales-analytics", "cleansed-data/walmart_sales_clean.csv")
        -> "s3://walmart-sales-analytics/cleansed-data/walmart_sales_clean.csv"
    """
    if not bucket:
        raise ValueError("S3 bucket must not be empty")
    return f"s3://{bucket}/{_strip_leading_slash(key)}"


def sales_keys_from_config(s3_config: dict) -> tuple[str, str]:
    """
    Return the (raw, cleansed) keys for the sales extract described by the
    ``s3`` config section.
    """
    raw_key = join_s3_key(s3_config.get("raw_folder", "raw-data/"), s3_config["sales_key"])
    cleansed_key = join_s3_key(
        s3_config.get("cleansed_folder", "cleansed-data/"),
        s3_config.get("processed_sales_key", "walmart_sales_clean.csv"),
    )
    return raw_key, cleansed_key
