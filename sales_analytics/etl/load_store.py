"""
Relational store for the clean sales batch.

The store is addressed by a SQLAlchemy URL and every function here takes the
engine explicitly. Bootstrap is idempotent: the table is created if missing
and the preferred-payment view is recreated on each run.
"""

from typing import Optional

import pandas as pd
from sqlalchemy import (
    Column,
    Date,
    Engine,
    Integer,
    MetaData,
    Numeric,
    String,
    Table,
    Time,
    create_engine,
    func,
    select,
    text,
)
from sqlalchemy.exc import SQLAlchemyError

from sales_analytics.etl.clean import SALE_COLUMNS
from sales_analytics.logger import setup_logger

logger = setup_logger("etl.load_store")

DEFAULT_TABLE_NAME = "walmart"
DEFAULT_VIEW_NAME = "preferred_payment_per_branch"


def create_store_engine(url: str, echo: bool = False) -> Engine:
    if not url:
        raise ValueError("Store URL is required")
    engine = create_engine(url, echo=echo)
    logger.info("Store engine created for %s", engine.url.render_as_string(hide_password=True))
    return engine


def build_sales_table(metadata: MetaData, table_name: str = DEFAULT_TABLE_NAME) -> Table:
    # Decimals come back as floats; pandas does not need Decimal objects.
    return Table(
        table_name,
        metadata,
        Column("invoice_id", String(20), primary_key=True),
        Column("branch", String(10), nullable=False),
        Column("city", String(50), nullable=False),
        Column("category", String(50), nullable=False),
        Column("unit_price", Numeric(10, 2, asdecimal=False), nullable=False),
        Column("quantity", Integer, nullable=False),
        Column("date", Date, nullable=False),
        Column("time", Time, nullable=False),
        Column("payment_method", String(30), nullable=False),
        Column("rating", Numeric(3, 1, asdecimal=False), nullable=False),
        Column("profit_margin", Numeric(5, 2, asdecimal=False), nullable=True),
        Column("total", Numeric(10, 2, asdecimal=False), nullable=False),
    )


def preferred_payment_view_sql(table_name: str, view_name: str) -> str:
    """
    One row per branch: the most used payment method, ties resolved by
    payment method name so the view never returns two rows for a branch.
    """
    return f"""
    CREATE VIEW {view_name} AS
    WITH payment_rank AS (
        SELECT branch,
               payment_method,
               COUNT(*) AS num_transactions,
               ROW_NUMBER() OVER(
                   PARTITION BY branch
                   ORDER BY COUNT(*) DESC, payment_method ASC
               ) AS rnk
        FROM {table_name}
        GROUP BY branch, payment_method
    )
    SELECT branch, payment_method AS preferred_payment_method
    FROM payment_rank
    WHERE rnk = 1
    """


def ensure_store_schema(
    engine: Engine,
    table_name: str = DEFAULT_TABLE_NAME,
    view_name: str = DEFAULT_VIEW_NAME,
) -> Table:
    """
    Ensure the sales table and the preferred-payment view exist.
    Intended for idempotent bootstrap before every load.
    """
    metadata = MetaData()
    table = build_sales_table(metadata, table_name)

    try:
        with engine.begin() as conn:
            metadata.create_all(conn, checkfirst=True)
            conn.execute(text(f"DROP VIEW IF EXISTS {view_name}"))
            conn.execute(text(preferred_payment_view_sql(table_name, view_name)))

        logger.info("Store schema ensured: table %s, view %s", table_name, view_name)
        return table

    except SQLAlchemyError as exc:
        logger.error("Store bootstrap failed: %s", str(exc), exc_info=True)
        raise RuntimeError(f"Store bootstrap failed: {str(exc)}") from exc


def _to_records(df: pd.DataFrame) -> list[dict]:
    # Plain Python scalars for the DB-API driver; NaN becomes NULL.
    frame = df[SALE_COLUMNS].astype(object)
    frame = frame.where(frame.notna(), None)
    return frame.to_dict(orient="records")


def load_sales_clean_to_store(
    engine: Engine,
    df: pd.DataFrame,
    table_name: str = DEFAULT_TABLE_NAME,
    view_name: str = DEFAULT_VIEW_NAME,
    truncate_before_load: bool = True,
    table: Optional[Table] = None,
) -> int:
    """
    Load the clean sales batch into the store.
    Returns the row count after load.
    """
    if df.empty:
        raise ValueError("DataFrame is empty - nothing to load into the store")

    if table is None:
        table = ensure_store_schema(engine, table_name, view_name)

    logger.info("Preparing store load of %s rows into %s", len(df), table.name)

    try:
        with engine.begin() as conn:
            if truncate_before_load:
                conn.execute(table.delete())
            conn.execute(table.insert(), _to_records(df))

            row_count = conn.execute(select(func.count()).select_from(table)).scalar_one()

        logger.info("Store load complete: %s rows in %s", row_count, table.name)
        return int(row_count)

    except SQLAlchemyError as exc:
        logger.error("Store load failed: %s", str(exc), exc_info=True)
        raise RuntimeError(f"Store load failed: {str(exc)}") from exc
