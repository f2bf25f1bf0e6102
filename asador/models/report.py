"""
Report data models
"""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class PeriodRange(BaseModel):
    """Inclusive report window; both bounds empty means all time"""
    period: str
    start: Optional[datetime] = None
    end: Optional[datetime] = None

    @property
    def is_all_time(self) -> bool:
        return self.start is None and self.end is None


class ProductStat(BaseModel):
    name: str
    quantity: int
    revenue_cents: int


class SeriesPoint(BaseModel):
    label: str
    revenue_cents: int = 0
    expense_cents: int = 0


class ReportSummary(BaseModel):
    """Profit and loss for one period"""
    period: PeriodRange
    revenue_cents: int = Field(..., description="Closed sales total, tips included")
    tips_cents: int
    revenue_without_tips_cents: int
    expenses_cents: int
    net_profit_cents: int
    sales_count: int
    average_sale_cents: int
    days_in_period: int
    average_daily_cents: int
    payment_totals_cents: Dict[str, int]
    top_products: List[ProductStat]
    expenses_by_category_cents: Dict[str, int]
    series: List[SeriesPoint]
