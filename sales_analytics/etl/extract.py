from pathlib import Path
from typing import Union

import pandas as pd
from sales_analytics.logger import setup_logger

logger = setup_logger('etl.extract')

# invoice_id is an identifier; keep it as text so "0042" or a missing value
# never turn it into a float.
RAW_DTYPES = {"invoice_id": str}


def read_raw_sales(source, sep: str = ",") -> pd.DataFrame:
    """
    Read the raw sales extract from a path or file-like object.
    Normalizes column names to lowercase with underscores.
    """
    sales_df = pd.read_csv(source, sep=sep, dtype=RAW_DTYPES)
    sales_df.columns = sales_df.columns.str.strip().str.lower().str.replace(' ', '_')
    logger.info(f"Normalized sales columns: {list(sales_df.columns)}")
    return sales_df


def extract_sales_from_file(path: Union[str, Path], sep: str = ",") -> pd.DataFrame:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Raw sales file not found: {path}")

    logger.info(f"Extracting sales from {path}")
    sales_df = read_raw_sales(path, sep=sep)
    logger.info(f"Successfully extracted {len(sales_df)} rows from sales")
    return sales_df
