"""
Per-engine SQL fragments used by the report catalog.

The catalog is written once; the handful of date, time and rounding
functions that differ between engines are rendered through a SqlDialect.
SQLite, MySQL and PostgreSQL are supported.
"""

from dataclasses import dataclass
from typing import Callable

_DAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]
_MONTH_NAMES = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]


def _sqlite_day_name(expr: str) -> str:
    whens = " ".join(f"WHEN '{i}' THEN '{name}'" for i, name in enumerate(_DAY_NAMES))
    return f"CASE strftime('%w', {expr}) {whens} END"


def _sqlite_month_name(expr: str) -> str:
    whens = " ".join(f"WHEN '{i:02d}' THEN '{name}'" for i, name in enumerate(_MONTH_NAMES, 1))
    return f"CASE strftime('%m', {expr}) {whens} END"


def _sqlite_floor(expr: str) -> str:
    return (
        f"(CASE WHEN {expr} < CAST({expr} AS INTEGER) "
        f"THEN CAST({expr} AS INTEGER) - 1 ELSE CAST({expr} AS INTEGER) END)"
    )


def _sqlite_ceil(expr: str) -> str:
    return (
        f"(CASE WHEN {expr} > CAST({expr} AS INTEGER) "
        f"THEN CAST({expr} AS INTEGER) + 1 ELSE CAST({expr} AS INTEGER) END)"
    )


@dataclass(frozen=True)
class SqlDialect:
    name: str
    year: Callable[[str], str]
    hour: Callable[[str], str]
    day_name: Callable[[str], str]
    month_name: Callable[[str], str]
    floor: Callable[[str], str]
    ceil: Callable[[str], str]
    concat: Callable[..., str]


SQLITE = SqlDialect(
    name="sqlite",
    year=lambda e: f"CAST(strftime('%Y', {e}) AS INTEGER)",
    hour=lambda e: f"CAST(strftime('%H', {e}) AS INTEGER)",
    day_name=_sqlite_day_name,
    month_name=_sqlite_month_name,
    floor=_sqlite_floor,
    ceil=_sqlite_ceil,
    concat=lambda *parts: " || ".join(parts),
)

MYSQL = SqlDialect(
    name="mysql",
    year=lambda e: f"YEAR({e})",
    hour=lambda e: f"HOUR({e})",
    day_name=lambda e: f"DAYNAME({e})",
    month_name=lambda e: f"MONTHNAME({e})",
    floor=lambda e: f"FLOOR({e})",
    ceil=lambda e: f"CEIL({e})",
    concat=lambda *parts: f"CONCAT({', '.join(parts)})",
)

POSTGRESQL = SqlDialect(
    name="postgresql",
    year=lambda e: f"CAST(EXTRACT(YEAR FROM {e}) AS INTEGER)",
    hour=lambda e: f"CAST(EXTRACT(HOUR FROM {e}) AS INTEGER)",
    day_name=lambda e: f"TRIM(TO_CHAR({e}, 'FMDay'))",
    month_name=lambda e: f"TRIM(TO_CHAR({e}, 'FMMonth'))",
    floor=lambda e: f"FLOOR({e})",
    ceil=lambda e: f"CEIL({e})",
    concat=lambda *parts: f"CONCAT({', '.join(parts)})",
)

DIALECTS = {d.name: d for d in (SQLITE, MYSQL, POSTGRESQL)}


def get_dialect(name: str) -> SqlDialect:
    try:
        return DIALECTS[name]
    except KeyError:
        raise ValueError(
            f"Unsupported store dialect '{name}'. Supported: {', '.join(sorted(DIALECTS))}"
        ) from None
