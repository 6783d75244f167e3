"""
Report aggregation over sales, expenses and payments.

Pure functions over entity lists; the caller loads the records from the
active store.
"""
import json
from collections import OrderedDict
from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Tuple

from easystock.entities import Expense, Payment, Product, Sale
from easystock.exceptions import BusinessLogicError
from easystock.utils.dates import add_months, day_end, day_start, end_of_month, start_of_month, start_of_week

PERIODS = ('this_week', 'last_week', 'this_month', 'last_month', 'this_year', 'last_year', 'all')

# More records than this under 'all' switches the chart to monthly buckets
DAILY_CHART_LIMIT = 30


@dataclass
class ReportSummary:
    total_sales: Decimal
    gross_profit: Decimal
    total_expenses: Decimal
    net_profit: Decimal
    receivables: Decimal


@dataclass
class ChartPoint:
    name: str
    sales: Decimal
    gross_profit: Decimal
    expenses: Decimal

    @property
    def net_profit(self) -> Decimal:
        return self.gross_profit - self.expenses


def period_bounds(range_name: str, now: datetime) -> Tuple[Optional[datetime], Optional[datetime]]:
    """
    Inclusive datetime bounds of a named report period.

    Weeks start on Sunday; "last" periods are the previous calendar week,
    month or year. ``all`` returns ``(None, None)``.

    Raises:
        BusinessLogicError: unknown period name
    """
    today = now.date()
    if range_name == 'this_week':
        return day_start(start_of_week(today)), now
    if range_name == 'last_week':
        start = start_of_week(today) - timedelta(days=7)
        return day_start(start), day_end(start + timedelta(days=6))
    if range_name == 'this_month':
        return day_start(start_of_month(today)), now
    if range_name == 'last_month':
        previous = add_months(start_of_month(today), -1)
        return day_start(previous), day_end(end_of_month(previous))
    if range_name == 'this_year':
        return day_start(today.replace(month=1, day=1)), now
    if range_name == 'last_year':
        year = today.year - 1
        return day_start(today.replace(year=year, month=1, day=1)), day_end(today.replace(year=year, month=12, day=31))
    if range_name == 'all':
        return None, None
    raise BusinessLogicError(f"Unknown report period '{range_name}'")


def filter_by_period(records: Iterable, start: Optional[datetime], end: Optional[datetime]) -> list:
    """Records whose ``date`` falls within [start, end]; no bounds keeps everything."""
    if start is None and end is None:
        return list(records)
    return [
        record for record in records
        if (start is None or record.date >= start) and (end is None or record.date <= end)
    ]


def summarize(sales: List[Sale], expenses: List[Expense], payments: List[Payment]) -> ReportSummary:
    """
    Totals for a report period.

    Gross profit uses the cost snapshots frozen on each sale line.
    Receivables are the sales total minus payments linked to those sales.
    """
    total_sales = sum((sale.total for sale in sales), Decimal('0'))
    gross_profit = sum((sale.gross_profit for sale in sales), Decimal('0'))
    total_expenses = sum((expense.amount for expense in expenses), Decimal('0'))

    linked_ids = {payment_id for sale in sales for payment_id in (sale.payment_ids or [])}
    total_paid = sum(
        (payment.amount for payment in payments if payment.id in linked_ids), Decimal('0')
    )

    return ReportSummary(
        total_sales=total_sales,
        gross_profit=gross_profit,
        total_expenses=total_expenses,
        net_profit=gross_profit - total_expenses,
        receivables=total_sales - total_paid,
    )


def use_monthly_buckets(range_name: str, sales_count: int, expenses_count: int) -> bool:
    if range_name in ('this_year', 'last_year'):
        return True
    return range_name == 'all' and (sales_count > DAILY_CHART_LIMIT or expenses_count > DAILY_CHART_LIMIT)


def build_chart(sales: List[Sale], expenses: List[Expense], monthly: bool = False) -> List[ChartPoint]:
    """Sales, gross profit and expenses bucketed per day (or per month), oldest first."""
    date_format = '%Y/%m' if monthly else '%Y/%m/%d'
    buckets: Dict[str, ChartPoint] = OrderedDict()

    def bucket(value: datetime) -> ChartPoint:
        name = value.strftime(date_format)
        if name not in buckets:
            buckets[name] = ChartPoint(name=name, sales=Decimal('0'), gross_profit=Decimal('0'), expenses=Decimal('0'))
        return buckets[name]

    for sale in sales:
        point = bucket(sale.date)
        point.sales += sale.total
        point.gross_profit += sale.gross_profit

    for expense in expenses:
        bucket(expense.date).expenses += expense.amount

    return sorted(buckets.values(), key=lambda point: point.name)


def build_stock_levels(products: List[Product]) -> str:
    """JSON snapshot ``[{name, quantity, lowStockThreshold}]`` for the recommendation service."""
    return json.dumps(
        [
            {'name': p.name, 'quantity': p.quantity, 'lowStockThreshold': p.low_stock_threshold}
            for p in products
        ],
        ensure_ascii=False,
    )


def build_sales_summary(sales: List[Sale]) -> str:
    """JSON object of total units sold per product name."""
    summary: Dict[str, int] = OrderedDict()
    for sale in sales:
        for item in sale.items:
            summary[item.product_name] = summary.get(item.product_name, 0) + item.quantity
    return json.dumps(summary, ensure_ascii=False)
