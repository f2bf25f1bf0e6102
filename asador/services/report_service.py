"""
Report service
Profit and loss over closed sales and expenses

Main features:
- period windows: today, week, biweekly, month, quarter, semester, year, all
- revenue, tips, expenses and net profit
- payment totals per method, average ticket and average daily revenue
- top products and expenses per category
- revenue / expense series for charts
"""

import calendar
from collections import defaultdict
from datetime import date, datetime, time, timedelta
from typing import Callable, Dict, List, Optional, Tuple

from ..models.expense import Expense
from ..models.report import PeriodRange, ProductStat, ReportSummary, SeriesPoint
from ..models.sale import PaymentMethod, PersistedSale
from .expense_service import ExpenseService
from .sale_repository import SaleRepository

PERIODS = ("today", "week", "biweekly", "month", "quarter", "semester", "year", "all")
TOP_PRODUCTS_LIMIT = 5


def start_of_day(day: date) -> datetime:
    return datetime.combine(day, time.min)


def end_of_day(day: date) -> datetime:
    return datetime.combine(day, time.max)


def _last_day_of_month(year: int, month: int) -> date:
    return date(year, month, calendar.monthrange(year, month)[1])


def _add_months(year: int, month: int, months: int) -> Tuple[int, int]:
    index = year * 12 + (month - 1) + months
    return index // 12, index % 12 + 1


def month_range(year: int, month: int) -> Tuple[datetime, datetime]:
    return start_of_day(date(year, month, 1)), end_of_day(_last_day_of_month(year, month))


def period_range(period: str, now: datetime) -> PeriodRange:
    """Window for a named period; unknown names fall back to the current month"""
    today = now.date()

    if period == "today":
        return PeriodRange(period=period, start=start_of_day(today), end=end_of_day(today))
    if period == "week":
        monday = today - timedelta(days=today.weekday())
        return PeriodRange(period=period, start=start_of_day(monday),
                           end=end_of_day(monday + timedelta(days=6)))
    if period == "biweekly":
        return PeriodRange(period=period, start=start_of_day(today - timedelta(days=13)),
                           end=end_of_day(today))
    if period in ("quarter", "semester", "year"):
        span = {"quarter": 3, "semester": 6, "year": 12}[period]
        first_month = (today.month - 1) // span * span + 1
        last_year, last_month = _add_months(today.year, first_month, span - 1)
        return PeriodRange(period=period, start=start_of_day(date(today.year, first_month, 1)),
                           end=end_of_day(_last_day_of_month(last_year, last_month)))
    if period == "all":
        return PeriodRange(period=period)

    start, end = month_range(today.year, today.month)
    return PeriodRange(period="month", start=start, end=end)


def sale_time(sale: PersistedSale) -> datetime:
    return sale.closed_at or sale.created_at


def payment_totals(sales: List[PersistedSale]) -> Dict[str, int]:
    """
    Money received per payment method

    Sales closed with a split use their breakdown; older rows without one
    count their whole total under the primary method.
    """
    totals = {method.value: 0 for method in PaymentMethod}
    for sale in sales:
        breakdown = sale.payment_breakdown
        if breakdown is not None and breakdown.total_cents > 0:
            for method, amount in breakdown.amounts().items():
                totals[method.value] += amount
        elif sale.payment_method is not None:
            totals[PaymentMethod(sale.payment_method).value] += sale.total_cents
    return totals


def top_products(sales: List[PersistedSale], limit: int = TOP_PRODUCTS_LIMIT) -> List[ProductStat]:
    quantities: Dict[str, int] = defaultdict(int)
    revenue: Dict[str, int] = defaultdict(int)
    for sale in sales:
        for line in sale.items:
            quantities[line.name] += line.quantity
            revenue[line.name] += line.subtotal_cents
    ranked = sorted(quantities, key=lambda name: quantities[name], reverse=True)
    return [ProductStat(name=name, quantity=quantities[name], revenue_cents=revenue[name])
            for name in ranked[:limit]]


def days_in_period(sales: List[PersistedSale], window: PeriodRange, now: datetime) -> int:
    if window.is_all_time:
        if not sales:
            return 1
        moments = [sale_time(sale).date() for sale in sales]
        return (max(moments) - min(moments)).days + 1
    end = min(window.end, now)
    return max(1, (end.date() - window.start.date()).days + 1)


def build_series(sales: List[PersistedSale], expenses: List[Expense],
                 window: PeriodRange) -> List[SeriesPoint]:
    """Revenue and expenses bucketed by hour, day or month depending on the window"""
    if window.period == "today":
        points = [SeriesPoint(label=f"{hour}:00") for hour in range(24)]
        for sale in sales:
            points[sale_time(sale).hour].revenue_cents += sale.total_cents
        # Expenses carry a date only, so they land in the first bucket
        for expense in expenses:
            points[0].expense_cents += expense.amount_cents
        return points

    if window.period in ("week", "biweekly", "month"):
        first = window.start.date()
        count = (window.end.date() - first).days + 1
        points = [SeriesPoint(label=(first + timedelta(days=i)).isoformat()) for i in range(count)]
        for sale in sales:
            index = (sale_time(sale).date() - first).days
            if 0 <= index < count:
                points[index].revenue_cents += sale.total_cents
        for expense in expenses:
            index = (expense.date - first).days
            if 0 <= index < count:
                points[index].expense_cents += expense.amount_cents
        return points

    if window.is_all_time:
        months = [sale_time(s).date() for s in sales] + [e.date for e in expenses]
        if not months:
            return []
        first, last = min(months), max(months)
    else:
        first, last = window.start.date(), window.end.date()

    points: Dict[Tuple[int, int], SeriesPoint] = {}
    year, month = first.year, first.month
    while (year, month) <= (last.year, last.month):
        points[(year, month)] = SeriesPoint(label=f"{year}-{month:02d}")
        year, month = _add_months(year, month, 1)
    for sale in sales:
        moment = sale_time(sale)
        point = points.get((moment.year, moment.month))
        if point is not None:
            point.revenue_cents += sale.total_cents
    for expense in expenses:
        point = points.get((expense.date.year, expense.date.month))
        if point is not None:
            point.expense_cents += expense.amount_cents
    return list(points.values())


class ReportService:
    """Report service"""

    def __init__(self, repository: SaleRepository = None, expense_service: ExpenseService = None,
                 clock: Callable[[], datetime] = datetime.now):
        self.repository = repository or SaleRepository()
        self.expense_service = expense_service or ExpenseService()
        self.clock = clock

    def closed_sales_in(self, window: PeriodRange) -> List[PersistedSale]:
        return self.repository.list_closed_between(window.start, window.end)

    def expenses_in(self, window: PeriodRange) -> List[Expense]:
        start = window.start.date() if window.start else None
        end = window.end.date() if window.end else None
        return self.expense_service.list_expenses(start, end)

    def build_summary(self, period: str, now: Optional[datetime] = None) -> ReportSummary:
        now = now or self.clock()
        window = period_range(period, now)
        sales = self.closed_sales_in(window)
        expenses = self.expenses_in(window)

        revenue = sum(sale.total_cents for sale in sales)
        tips = sum(sale.tip_cents or 0 for sale in sales)
        expense_total = sum(expense.amount_cents for expense in expenses)
        days = days_in_period(sales, window, now)

        by_category: Dict[str, int] = defaultdict(int)
        for expense in expenses:
            by_category[expense.category.value] += expense.amount_cents

        return ReportSummary(
            period=window,
            revenue_cents=revenue,
            tips_cents=tips,
            revenue_without_tips_cents=revenue - tips,
            expenses_cents=expense_total,
            net_profit_cents=revenue - expense_total,
            sales_count=len(sales),
            average_sale_cents=round(revenue / len(sales)) if sales else 0,
            days_in_period=days,
            average_daily_cents=round(revenue / days),
            payment_totals_cents=payment_totals(sales),
            top_products=top_products(sales),
            expenses_by_category_cents=dict(by_category),
            series=build_series(sales, expenses, window),
        )
