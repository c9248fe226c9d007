"""
Report catalog: the fixed set of read-only queries over the sales table.

Each entry is a function rendering the SQL for a dialect, a table name and
the preferred-payment view name. Numeric parameters (years, thresholds,
limits) are never inlined; they are bound at execution time from
``ReportParams.as_bind_params``. Every query aliases its output columns so
result sets match ``columns``.

Bucketed and derived keys (weekday, month, shift, size, branch_category)
are computed in a subquery and grouped by alias, which keeps the GROUP BY
valid on engines that compare expressions strictly.
"""

from dataclasses import dataclass
from typing import Callable

from sales_analytics.etl.clean import SALE_COLUMNS
from sales_analytics.etl.load_store import DEFAULT_TABLE_NAME, DEFAULT_VIEW_NAME
from sales_analytics.reporting.dialects import SqlDialect


@dataclass(frozen=True)
class ReportQuery:
    name: str
    description: str
    columns: tuple[str, ...]
    build: Callable[[SqlDialect, str, str], str]

    def render(
        self,
        dialect: SqlDialect,
        table: str = DEFAULT_TABLE_NAME,
        view: str = DEFAULT_VIEW_NAME,
    ) -> str:
        return self.build(dialect, table, view)


CATALOG: dict[str, ReportQuery] = {}


def report(name: str, columns, description: str):
    def register(build):
        if name in CATALOG:
            raise ValueError(f"Report '{name}' registered twice")
        CATALOG[name] = ReportQuery(name, description, tuple(columns), build)
        return build
    return register


@report("table_overview", SALE_COLUMNS, "All rows of the sales table")
def _table_overview(d, table, view):
    return f"SELECT {', '.join(SALE_COLUMNS)} FROM {table}"


@report("total_records", ["total_records"], "Number of transactions")
def _total_records(d, table, view):
    return f"SELECT COUNT(*) AS total_records FROM {table}"


@report("payment_method_counts", ["payment_method", "no_payments"],
        "Transactions per payment method")
def _payment_method_counts(d, table, view):
    return f"""
    SELECT payment_method,
           COUNT(*) AS no_payments
    FROM {table}
    GROUP BY payment_method
    ORDER BY payment_method
    """


@report("distinct_branches", ["distinct_branches"], "Number of distinct branches")
def _distinct_branches(d, table, view):
    return f"SELECT COUNT(DISTINCT branch) AS distinct_branches FROM {table}"


@report("min_quantity", ["min_quantity"], "Smallest quantity sold in one transaction")
def _min_quantity(d, table, view):
    return f"SELECT MIN(quantity) AS min_quantity FROM {table}"


@report("payment_method_quantities", ["payment_method", "no_payments", "no_qty_sold"],
        "Transactions and quantity sold per payment method")
def _payment_method_quantities(d, table, view):
    return f"""
    SELECT payment_method,
           COUNT(*) AS no_payments,
           SUM(quantity) AS no_qty_sold
    FROM {table}
    GROUP BY payment_method
    ORDER BY payment_method
    """


@report("top_rated_category_per_branch", ["branch", "category", "avg_rating"],
        "Category with the highest average rating in each branch (ties kept)")
def _top_rated_category_per_branch(d, table, view):
    return f"""
    SELECT branch, category, avg_rating
    FROM (
        SELECT branch,
               category,
               AVG(rating) AS avg_rating,
               RANK() OVER(PARTITION BY branch ORDER BY AVG(rating) DESC) AS rank_num
        FROM {table}
        GROUP BY branch, category
    ) ranked
    WHERE rank_num = 1
    ORDER BY branch, category
    """


@report("busiest_day_per_branch", ["branch", "day_name", "no_transactions"],
        "Weekday with the most transactions in each branch (ties kept)")
def _busiest_day_per_branch(d, table, view):
    return f"""
    SELECT branch, day_name, no_transactions
    FROM (
        SELECT branch,
               day_name,
               COUNT(*) AS no_transactions,
               RANK() OVER(PARTITION BY branch ORDER BY COUNT(*) DESC) AS rank_num
        FROM (SELECT branch, {d.day_name("date")} AS day_name FROM {table}) src
        GROUP BY branch, day_name
    ) ranked
    WHERE rank_num = 1
    ORDER BY branch, day_name
    """


@report("quantity_per_payment_method", ["payment_method", "no_qty_sold"],
        "Quantity sold per payment method")
def _quantity_per_payment_method(d, table, view):
    return f"""
    SELECT payment_method,
           SUM(quantity) AS no_qty_sold
    FROM {table}
    GROUP BY payment_method
    ORDER BY payment_method
    """


@report("rating_summary_per_city_category",
        ["city", "category", "min_rating", "max_rating", "avg_rating"],
        "Min, max and average rating of each category per city")
def _rating_summary(d, table, view):
    return f"""
    SELECT city,
           category,
           MIN(rating) AS min_rating,
           MAX(rating) AS max_rating,
           AVG(rating) AS avg_rating
    FROM {table}
    GROUP BY city, category
    ORDER BY city, category
    """


@report("profit_per_category", ["category", "total_profit"],
        "Total profit (unit_price * quantity * profit_margin) per category")
def _profit_per_category(d, table, view):
    return f"""
    SELECT category,
           SUM(unit_price * quantity * COALESCE(profit_margin, 0)) AS total_profit
    FROM {table}
    GROUP BY category
    ORDER BY total_profit DESC
    """


@report("preferred_payment_per_branch", ["branch", "preferred_payment_method"],
        "Most used payment method in each branch, one row per branch")
def _preferred_payment_per_branch(d, table, view):
    return f"""
    WITH cte AS (
        SELECT branch,
               payment_method,
               COUNT(*) AS total_trans,
               ROW_NUMBER() OVER(
                   PARTITION BY branch
                   ORDER BY COUNT(*) DESC, payment_method ASC
               ) AS rank_num
        FROM {table}
        GROUP BY branch, payment_method
    )
    SELECT branch, payment_method AS preferred_payment_method
    FROM cte
    WHERE rank_num = 1
    ORDER BY branch
    """


@report("invoices_per_shift", ["branch", "shift", "num_invoices"],
        "Invoices per branch and shift (Morning, Afternoon, Evening)")
def _invoices_per_shift(d, table, view):
    hour = d.hour("time")
    return f"""
    SELECT branch, shift, COUNT(*) AS num_invoices
    FROM (
        SELECT branch,
               CASE
                   WHEN {hour} < :afternoon_start THEN 'Morning'
                   WHEN {hour} < :evening_start THEN 'Afternoon'
                   ELSE 'Evening'
               END AS shift
        FROM {table}
    ) shifts
    GROUP BY branch, shift
    ORDER BY branch, num_invoices DESC, shift
    """


@report("revenue_decrease_by_branch",
        ["branch", "last_year_revenue", "current_year_revenue", "revenue_decrease_ratio"],
        "Branches with the largest revenue drop between two years")
def _revenue_decrease_by_branch(d, table, view):
    year = d.year("date")
    # Zero prior-period revenue yields a NULL ratio, never a division error.
    return f"""
    WITH revenue_last AS (
        SELECT branch, SUM(total) AS revenue
        FROM {table}
        WHERE {year} = :last_year
        GROUP BY branch
    ),
    revenue_current AS (
        SELECT branch, SUM(total) AS revenue
        FROM {table}
        WHERE {year} = :current_year
        GROUP BY branch
    )
    SELECT r_last.branch AS branch,
           r_last.revenue AS last_year_revenue,
           r_current.revenue AS current_year_revenue,
           ROUND(
               CASE WHEN r_last.revenue = 0 THEN NULL
                    ELSE (r_last.revenue - r_current.revenue) * 100.0 / r_last.revenue
               END, 2
           ) AS revenue_decrease_ratio
    FROM revenue_last r_last
    JOIN revenue_current r_current ON r_last.branch = r_current.branch
    WHERE r_last.revenue > r_current.revenue
      AND r_last.revenue <> 0
    ORDER BY revenue_decrease_ratio DESC, branch
    LIMIT :decrease_limit
    """


@report("top_invoices_per_category", ["category", "invoice_id", "total_amount"],
        "Top invoices by total amount within each category")
def _top_invoices_per_category(d, table, view):
    return f"""
    SELECT category, invoice_id, total_amount
    FROM (
        SELECT category,
               invoice_id,
               SUM(total) AS total_amount,
               ROW_NUMBER() OVER(
                   PARTITION BY category
                   ORDER BY SUM(total) DESC, invoice_id ASC
               ) AS rn
        FROM {table}
        GROUP BY category, invoice_id
    ) ranked
    WHERE rn <= :top_k
    ORDER BY category, total_amount DESC, invoice_id
    """


@report("best_month_per_branch", ["branch", "month_name", "monthly_revenue"],
        "Month with the highest revenue in each branch (ties kept)")
def _best_month_per_branch(d, table, view):
    return f"""
    SELECT branch, month_name, monthly_revenue
    FROM (
        SELECT branch,
               month_name,
               SUM(total) AS monthly_revenue,
               DENSE_RANK() OVER(PARTITION BY branch ORDER BY SUM(total) DESC) AS rnk
        FROM (SELECT branch, total, {d.month_name("date")} AS month_name FROM {table}) src
        GROUP BY branch, month_name
    ) ranked
    WHERE rnk = 1
    ORDER BY branch, month_name
    """


@report("transaction_size_per_branch", ["branch", "transaction_size", "num_transactions"],
        "Transactions per branch bucketed by quantity (Small, Medium, Large)")
def _transaction_size_per_branch(d, table, view):
    # Lower bounds are inclusive: Small < medium_min <= Medium < large_min <= Large
    return f"""
    SELECT branch, transaction_size, COUNT(*) AS num_transactions
    FROM (
        SELECT branch,
               CASE
                   WHEN quantity < :medium_min THEN 'Small'
                   WHEN quantity < :large_min THEN 'Medium'
                   ELSE 'Large'
               END AS transaction_size
        FROM {table}
    ) sizes
    GROUP BY branch, transaction_size
    ORDER BY branch, transaction_size
    """


@report("estimated_profit_per_invoice", ["invoice_id", "estimated_profit"],
        "Estimated profit per invoice, missing profit margin counted as 0")
def _estimated_profit_per_invoice(d, table, view):
    return f"""
    SELECT invoice_id,
           SUM(unit_price * quantity * COALESCE(profit_margin, 0)) AS estimated_profit
    FROM {table}
    GROUP BY invoice_id
    ORDER BY estimated_profit DESC, invoice_id
    """


@report("revenue_per_branch_category", ["branch_category", "total_revenue"],
        "Revenue per branch and category under a combined identifier")
def _revenue_per_branch_category(d, table, view):
    label = d.concat("branch", "' - '", "category")
    return f"""
    SELECT branch_category,
           SUM(total) AS total_revenue
    FROM (SELECT {label} AS branch_category, total FROM {table}) src
    GROUP BY branch_category
    ORDER BY total_revenue DESC, branch_category
    """


@report("price_range_per_category", ["category", "min_floor_price", "max_ceil_price"],
        "Lowest unit price rounded down and highest rounded up per category")
def _price_range_per_category(d, table, view):
    return f"""
    SELECT category,
           {d.floor("MIN(unit_price)")} AS min_floor_price,
           {d.ceil("MAX(unit_price)")} AS max_ceil_price
    FROM {table}
    GROUP BY category
    ORDER BY category
    """


@report("preferred_payment_view", ["branch", "preferred_payment_method"],
        "Contents of the persisted preferred-payment view")
def _preferred_payment_view(d, table, view):
    return f"""
    SELECT branch, preferred_payment_method
    FROM {view}
    ORDER BY branch
    """


BRANCH_LOOKUP_SQL = """
    SELECT branch, preferred_payment_method
    FROM {view}
    WHERE branch = :branch
"""


def available_reports() -> list[str]:
    return list(CATALOG)
