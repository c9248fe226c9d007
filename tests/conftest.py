"""
Pytest configuration and fixtures for the sales analytics tests.

This file is automatically discovered by pytest and provides
shared fixtures and configuration for all test modules.
"""

import pytest
import sys
from datetime import date, time
from pathlib import Path

import pandas as pd
import yaml

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from sales_analytics.etl.clean import SALE_COLUMNS
from sales_analytics.etl.load_store import create_store_engine, load_sales_clean_to_store


def make_clean_sales(rows):
    """
    Build a clean sales frame from
    (invoice_id, branch, city, category, unit_price, quantity, date, time,
    payment_method, rating, profit_margin) tuples; total is derived.
    """
    df = pd.DataFrame(rows, columns=SALE_COLUMNS[:-1])
    df["profit_margin"] = df["profit_margin"].astype("float64")
    df["total"] = df["unit_price"] * df["quantity"]
    return df[SALE_COLUMNS]


# Three branches over 2022 and 2023. Worked figures used across the report tests:
#   WALM001 revenue 2022 = 441.0, 2023 = 80.0  -> decrease 81.86 %
#   WALM002 revenue 2022 = 277.5, 2023 = 200.0 -> decrease 27.93 %
#   WALM003 only trades in 2023
SALES_ROWS = [
    ("1001", "WALM001", "San Antonio", "Health and beauty", 10.25, 4, date(2022, 1, 3), time(9, 30), "Cash", 7.0, 0.5),
    ("1002", "WALM001", "San Antonio", "Health and beauty", 20.0, 20, date(2022, 1, 3), time(13, 0), "Ewallet", 8.0, 0.5),
    ("1003", "WALM001", "San Antonio", "Sports and travel", 5.0, 10, date(2023, 2, 7), time(18, 0), "Ewallet", 9.0, None),
    ("1004", "WALM001", "San Antonio", "Sports and travel", 15.0, 2, date(2023, 2, 6), time(20, 15), "Credit card", 6.0, 0.3),
    ("1005", "WALM002", "Harlingen", "Health and beauty", 49.5, 5, date(2022, 3, 1), time(11, 59), "Cash", 4.0, 0.2),
    ("1006", "WALM002", "Harlingen", "Fashion accessories", 12.5, 16, date(2023, 3, 15), time(12, 0), "Cash", 5.0, 0.4),
    ("1007", "WALM002", "Harlingen", "Fashion accessories", 30.0, 1, date(2022, 3, 20), time(17, 59), "Credit card", 6.0, 0.4),
    ("1008", "WALM003", "Haltom City", "Home and lifestyle", 100.0, 15, date(2023, 5, 5), time(8, 0), "Credit card", 3.0, 0.1),
]


@pytest.fixture
def clean_sales_df():
    """Clean sales batch matching the store layout."""
    return make_clean_sales(SALES_ROWS)


@pytest.fixture
def raw_sales_df():
    """Raw extract as it comes out of the CSV: text prices, dd/mm/yy dates."""
    return pd.DataFrame({
        "invoice_id": ["1", "2", "3", "3", "4", "5", "6"],
        "Branch": ["WALM003", "WALM030", "WALM067", "WALM067", "WALM064", "WALM013", "WALM026"],
        "City": ["San Antonio", "Harlingen", "Haltom City", "Haltom City", "Bedford", "Irving", "Denton"],
        "category": [
            "Health and beauty", "Electronic accessories", "Home and lifestyle",
            "Home and lifestyle", "Health and beauty", "Sports and travel", "Electronic accessories",
        ],
        "unit_price": ["$74.69", "$15.28", "$46.33", "$46.33", None, "$abc", "$1,034.50"],
        "quantity": [7.0, 5.0, 7.0, 7.0, 8.0, 7.0, 2.0],
        "date": ["05/01/19", "08/03/19", "03/03/19", "03/03/19", "27/01/19", "08/02/19", "25/02/19"],
        "time": ["13:08:00", "10:29:00", "13:23:00", "13:23:00", "20:33:00", "10:37:00", "18:30:00"],
        "payment_method": ["Ewallet", "Cash", "Credit card", "Credit card", "Ewallet", "Ewallet", "Ewallet"],
        "rating": [9.1, 9.6, 7.4, 7.4, 8.4, 5.3, 5.3],
        "profit_margin": [0.48, 0.48, 0.33, 0.33, 0.33, 0.48, None],
    })


@pytest.fixture
def store_engine(tmp_path):
    """Empty SQLite store in a temporary directory."""
    engine = create_store_engine(f"sqlite:///{tmp_path / 'walmart.db'}")
    yield engine
    engine.dispose()


@pytest.fixture
def loaded_store(store_engine, clean_sales_df):
    """SQLite store with the clean sales batch loaded."""
    load_sales_clean_to_store(store_engine, clean_sales_df)
    return store_engine


@pytest.fixture
def sample_config(tmp_path):
    """
    Configuration pointing every path at a temporary directory.
    """
    return {
        "aws_conn_id": "test_aws_conn",
        "s3": {"bucket": "test-bucket", "sales_key": "walmart_sales.csv"},
        "input": {
            "path": str(tmp_path / "walmart_sales.csv"),
            "date_format": "%d/%m/%y",
            "time_format": "%H:%M:%S",
        },
        "store": {
            "url": f"sqlite:///{tmp_path / 'pipeline.db'}",
            "table_name": "walmart",
            "view_name": "preferred_payment_per_branch",
        },
        "reporting": {"revenue_last_year": 2019, "revenue_current_year": 2020},
        "output": {
            "clean_csv": str(tmp_path / "clean" / "walmart_sales_clean.csv"),
            "reports_dir": str(tmp_path / "reports"),
        },
    }


@pytest.fixture
def raw_sales_csv(sample_config, raw_sales_df):
    """The raw_sales_df fixture written where sample_config expects the input."""
    path = Path(sample_config["input"]["path"])
    raw_sales_df.to_csv(path, index=False)
    return path


@pytest.fixture
def sample_config_file(tmp_path, sample_config):
    """sample_config dumped to a YAML file, for the CLI."""
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump(sample_config))
    return path


# Add pytest CLI options
def pytest_addoption(parser):
    """Add custom pytest options."""
    parser.addoption(
        "--integration",
        action="store_true",
        default=False,
        help="Run integration tests (Airflow, the Amazon provider or a live database)"
    )


def pytest_collection_modifyitems(config, items):
    """Mark integration tests for conditional execution."""
    if config.getoption("--integration"):
        return

    skip_integration = pytest.mark.skip(reason="need --integration option to run")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip_integration)
