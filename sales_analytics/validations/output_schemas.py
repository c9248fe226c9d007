import datetime

import pandera.pandas as pa
from pandera.pandas import Check, Column, DataFrameSchema


sales_clean_schema = DataFrameSchema(
    {
        # Identifier
        "invoice_id": Column(str, Check.str_length(min_value=1), nullable=False, unique=True),

        # Dimensions
        "branch": Column(str, Check.str_length(min_value=1), nullable=False),
        "city": Column(str, Check.str_length(min_value=1), nullable=False),
        "category": Column(str, Check.str_length(min_value=1), nullable=False),

        # Measures
        "unit_price": Column(float, Check.ge(0), nullable=False),
        "quantity": Column(int, Check.ge(0), nullable=False),

        # Date dimensions
        "date": Column(pa.Date, nullable=False),
        "time": Column(
            checks=Check(lambda t: isinstance(t, datetime.time), element_wise=True),
            nullable=False,
        ),

        "payment_method": Column(str, Check.str_length(min_value=1), nullable=False),
        "rating": Column(float, Check.between(0, 10), nullable=False),
        "profit_margin": Column(float, nullable=True),
        "total": Column(float, Check.ge(0), nullable=False),
    },
    checks=[
        # Row-level invariant between the measures
        Check(
            lambda df: df["total"] == df["unit_price"] * df["quantity"],
            error="total must equal unit_price * quantity",
        ),
    ],
    strict=True,
    ordered=True,
)
