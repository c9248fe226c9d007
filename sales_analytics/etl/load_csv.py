from io import StringIO
from pathlib import Path
from typing import Union

import pandas as pd
from sales_analytics.logger import setup_logger

logger = setup_logger("etl.load_csv")


def sales_clean_to_csv(df: pd.DataFrame) -> str:
    """
    Serialize the clean sales batch to CSV text with ISO dates and times.
    """
    if df.empty:
        raise ValueError("DataFrame is empty - nothing to write")

    df = df.copy()
    df["date"] = df["date"].map(lambda d: d.isoformat())
    df["time"] = df["time"].map(lambda t: t.strftime("%H:%M:%S"))

    buffer = StringIO()
    df.to_csv(buffer, index=False)
    csv_data = buffer.getvalue()

    if not csv_data:
        raise ValueError("CSV conversion resulted in empty data")

    logger.info(f"CSV prepared: {len(csv_data)} bytes")
    return csv_data


def write_sales_clean_csv(df: pd.DataFrame, path: Union[str, Path]) -> Path:
    path = Path(path)
    logger.info(f"Writing {len(df)} records to {path}")

    csv_data = sales_clean_to_csv(df)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(csv_data)

    logger.info(f"Clean CSV written to {path}")
    return path
