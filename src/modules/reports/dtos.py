"""Reporting output models (Pydantic v2, immutable).

Sales are never stored: they are projected from delivered orders on
every read.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class Sale(BaseModel):
    """One sold line item of a delivered order."""

    model_config = ConfigDict(frozen=True)

    id: str
    date: datetime
    product_name: str
    category: str
    quantity: int
    total_price: Decimal


class SalesSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    total_revenue: Decimal
    total_units_sold: int
    best_seller: Optional[str] = None


class DailyRevenue(BaseModel):
    model_config = ConfigDict(frozen=True)

    day: date
    revenue: Decimal


class CategoryRevenue(BaseModel):
    model_config = ConfigDict(frozen=True)

    category: str
    revenue: Decimal


class StatisticsReport(BaseModel):
    """Everything the statistics screen shows."""

    model_config = ConfigDict(frozen=True)

    summary: SalesSummary
    daily_revenue: List[DailyRevenue]
    category_revenue: List[CategoryRevenue]
    sales: List[Sale]
