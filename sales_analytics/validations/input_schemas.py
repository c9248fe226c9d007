from pandera.pandas import Check, Column, DataFrameSchema


raw_sales_schema = DataFrameSchema(
    {
        # Identifiers (raw from source)
        "invoice_id": Column(nullable=True),

        # Dimensions
        "branch": Column(nullable=True),
        "city": Column(nullable=True),
        "category": Column(nullable=True),
        "payment_method": Column(nullable=True),

        # Measures. unit_price stays text ("$74.69"), the cleaner parses it.
        # Nulls are allowed here and dropped during cleaning.
        "unit_price": Column(nullable=True),
        "quantity": Column(float, Check.ge(0), nullable=True, coerce=True),
        "rating": Column(float, Check.between(0, 10), nullable=True, coerce=True),
        "profit_margin": Column(float, nullable=True, coerce=True),

        # Timestamp parts
        "date": Column(nullable=True),
        "time": Column(nullable=True),
    },
    strict=False  # Allow extra columns (will be dropped during cleaning)
)
