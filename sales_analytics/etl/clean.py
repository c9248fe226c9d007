import pandas as pd
from sales_analytics.logger import setup_logger

logger = setup_logger("etl.clean")

# Output layout of a clean Sale Record, also the store's column order
SALE_COLUMNS = [
    "invoice_id",
    "branch",
    "city",
    "category",
    "unit_price",
    "quantity",
    "date",
    "time",
    "payment_method",
    "rating",
    "profit_margin",
    "total",
]

# Columns expected in the raw extract (total is derived)
SOURCE_COLUMNS = SALE_COLUMNS[:-1]

# Every source column except profit_margin must be populated
REQUIRED_COLUMNS = [c for c in SOURCE_COLUMNS if c != "profit_margin"]

# Free-text required fields; blank after stripping means missing
TEXT_COLUMNS = ["invoice_id", "branch", "city", "category", "payment_method"]

DEFAULT_DATE_FORMAT = "%d/%m/%y"
DEFAULT_TIME_FORMAT = "%H:%M:%S"


def normalize_column_names(df: pd.DataFrame) -> pd.DataFrame:
    df = df.copy()
    df.columns = df.columns.str.strip().str.lower().str.replace(" ", "_")
    return df


def parse_currency(values: pd.Series) -> pd.Series:
    """
    Parse currency strings such as "$1,234.50" into floats.

    Values that do not parse become NaN; callers decide what to do with them.
    """
    if pd.api.types.is_numeric_dtype(values):
        return values.astype("float64")
    cleaned = values.astype(str).str.strip().str.replace(r"^\$|,", "", regex=True)
    return pd.to_numeric(cleaned, errors="coerce")


def clean_sales(
    sales_df: pd.DataFrame,
    date_format: str = DEFAULT_DATE_FORMAT,
    time_format: str = DEFAULT_TIME_FORMAT,
) -> pd.DataFrame:

    logger.info(f"Starting cleaning of {len(sales_df)} raw rows")

    # --------------------------------------------------
    # 0. Normalize column names
    # --------------------------------------------------
    # Raw extract ships "Branch" and "City" capitalized.
    sales_df = normalize_column_names(sales_df)

    missing = [c for c in SOURCE_COLUMNS if c not in sales_df.columns]
    if missing:
        raise ValueError(f"Raw sales data is missing columns: {missing}")

    sales_df = sales_df[SOURCE_COLUMNS]

    # --------------------------------------------------
    # 1. Drop exact duplicate rows
    # --------------------------------------------------
    initial_count = len(sales_df)
    sales_df = sales_df.drop_duplicates()
    removed = initial_count - len(sales_df)
    if removed > 0:
        logger.warning(f"Deduplication: removed {removed} duplicate rows")

    # --------------------------------------------------
    # 2. Drop rows with missing required fields
    # --------------------------------------------------
    # No imputation.
    initial_count = len(sales_df)
    sales_df = sales_df.dropna(subset=REQUIRED_COLUMNS)
    removed = initial_count - len(sales_df)
    if removed > 0:
        logger.warning(f"Missing values: removed {removed} rows with empty required fields")

    # --------------------------------------------------
    # 3. Normalize types
    # --------------------------------------------------
    # Every parser coerces; a value that was present but did not parse marks
    # the row as malformed and the row is dropped in step 4.
    parsed = pd.DataFrame(index=sales_df.index)
    for column in TEXT_COLUMNS:
        parsed[column] = sales_df[column].astype(str).str.strip()

    parsed["unit_price"] = parse_currency(sales_df["unit_price"])
    parsed["quantity"] = pd.to_numeric(sales_df["quantity"], errors="coerce")
    parsed["rating"] = pd.to_numeric(sales_df["rating"], errors="coerce")
    parsed["profit_margin"] = pd.to_numeric(sales_df["profit_margin"], errors="coerce")

    parsed["date"] = pd.to_datetime(
        sales_df["date"].astype(str), format=date_format, errors="coerce"
    ).dt.date
    parsed["time"] = pd.to_datetime(
        sales_df["time"].astype(str), format=time_format, errors="coerce"
    ).dt.time

    # --------------------------------------------------
    # 4. Drop malformed rows
    # --------------------------------------------------
    malformed = parsed[REQUIRED_COLUMNS].isna().any(axis=1)
    # Whitespace-only text strips to "" and counts as missing
    for column in TEXT_COLUMNS:
        malformed |= parsed[column].eq("")
    malformed |= parsed["quantity"].notna() & (parsed["quantity"] % 1 != 0)
    # profit_margin may be empty, but not garbage
    malformed |= sales_df["profit_margin"].notna() & parsed["profit_margin"].isna()

    removed = int(malformed.sum())
    parsed = parsed[~malformed].copy()
    if removed > 0:
        logger.warning(f"Type normalization: removed {removed} malformed rows")

    parsed["quantity"] = parsed["quantity"].astype("int64")

    # --------------------------------------------------
    # 5. Enforce invoice_id uniqueness
    # --------------------------------------------------
    # Exact duplicates are gone already; what is left are conflicting rows
    # sharing an invoice. The first occurrence wins.
    conflicting = parsed["invoice_id"].duplicated(keep="first")
    if conflicting.any():
        logger.warning(
            f"Invoice uniqueness: removed {int(conflicting.sum())} rows reusing an invoice_id"
        )
        parsed = parsed[~conflicting].copy()

    # --------------------------------------------------
    # 6. Derived total
    # --------------------------------------------------
    # total = unit_price × quantity, computed on the normalized values.
    parsed["total"] = parsed["unit_price"] * parsed["quantity"]
    if len(parsed) > 0:
        logger.info(f"Total calculated: ${parsed['total'].sum():,.2f} across all invoices")

    final_df = parsed[SALE_COLUMNS].reset_index(drop=True)
    logger.info(f"Cleaning completed: {len(final_df)} records ready for the store")

    return final_df
