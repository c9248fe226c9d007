import re
from pathlib import Path
from typing import Optional, Union

import pandas as pd
from sqlalchemy import Engine, text

from sales_analytics.config import ReportParams
from sales_analytics.etl.load_store import DEFAULT_TABLE_NAME, DEFAULT_VIEW_NAME
from sales_analytics.logger import setup_logger
from sales_analytics.reporting.dialects import SqlDialect, get_dialect
from sales_analytics.reporting.queries import BRANCH_LOOKUP_SQL, CATALOG, ReportQuery

logger = setup_logger("reporting.reports")

_BIND_PARAM = re.compile(r"(?<![:\w]):(\w+)")


def dialect_for(engine: Engine) -> SqlDialect:
    return get_dialect(engine.dialect.name)


def get_report(name: str) -> ReportQuery:
    try:
        return CATALOG[name]
    except KeyError:
        raise KeyError(
            f"Unknown report '{name}'. Available: {', '.join(CATALOG)}"
        ) from None


def _read(engine: Engine, sql: str, params: dict) -> pd.DataFrame:
    needed = set(_BIND_PARAM.findall(sql))
    bound = {k: v for k, v in params.items() if k in needed}
    with engine.connect() as conn:
        return pd.read_sql_query(text(sql), conn, params=bound)


def run_report(
    engine: Engine,
    name: str,
    params: Optional[ReportParams] = None,
    table_name: str = DEFAULT_TABLE_NAME,
    view_name: str = DEFAULT_VIEW_NAME,
) -> pd.DataFrame:
    """
    Run one catalog query against the store and return its result set.

    The returned frame has exactly the columns listed in the query's
    contract, in that order.
    """
    query = get_report(name)
    params = params or ReportParams()

    sql = query.render(dialect_for(engine), table_name, view_name)
    result = _read(engine, sql, params.as_bind_params())

    if list(result.columns) != list(query.columns):
        raise RuntimeError(
            f"Report '{name}' returned columns {list(result.columns)}, "
            f"expected {list(query.columns)}"
        )

    logger.info(f"Report {name}: {len(result)} rows")
    return result


def run_all_reports(
    engine: Engine,
    params: Optional[ReportParams] = None,
    table_name: str = DEFAULT_TABLE_NAME,
    view_name: str = DEFAULT_VIEW_NAME,
) -> dict[str, pd.DataFrame]:
    """Run every catalog query in order, one at a time."""
    logger.info(f"Running {len(CATALOG)} reports against {table_name}")
    return {
        name: run_report(engine, name, params, table_name, view_name)
        for name in CATALOG
    }


def preferred_payment_for_branch(
    engine: Engine,
    branch: str,
    view_name: str = DEFAULT_VIEW_NAME,
) -> pd.DataFrame:
    """
    Look up a branch's preferred payment method through the persisted view.

    An unknown branch yields an empty frame (columns branch,
    preferred_payment_method), not an error.
    """
    result = _read(engine, BRANCH_LOOKUP_SQL.format(view=view_name), {"branch": branch})
    if result.empty:
        logger.warning(f"No preferred payment method found for branch {branch!r}")
    return result


def write_reports_csv(
    results: dict[str, pd.DataFrame],
    output_dir: Union[str, Path],
) -> list[Path]:
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    written = []
    for name, df in results.items():
        path = output_dir / f"{name}.csv"
        df.to_csv(path, index=False)
        written.append(path)

    logger.info(f"Wrote {len(written)} report files to {output_dir}")
    return written
