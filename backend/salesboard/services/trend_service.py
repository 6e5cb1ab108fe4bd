"""
Trend analysis over the daily sales ledger.

The cumulative month-to-date value per recorded day is the series; trends
compare its first and last points.
"""
from typing import Optional

from sqlalchemy.orm import Session

from salesboard.core.config import settings
from salesboard.core.month_calendar import previous_month_key
from salesboard.core.serialization_helpers import serialize_decimal
from salesboard.models.user import User
from salesboard.services.daily_sales_service import list_daily_values, summarize_month


def percent_change(first: float, last: float) -> float:
    if first <= 0:
        return 0.0
    return (last - first) / first * 100


def classify_trend(change: float, threshold: Optional[float] = None) -> str:
    threshold = settings.trend_threshold_pct if threshold is None else threshold
    if change > threshold:
        return "up"
    if change < -threshold:
        return "down"
    return "stable"


def calculate_trend(
    db: Session,
    org_id: int,
    user: User,
    store_id: int,
    kpi_id: int,
    month_key: str,
    days: int = 7,
) -> dict:
    values = list_daily_values(db, org_id, store_id, kpi_id, month_key, user)
    series = [
        {"date": v.date_key, "value": serialize_decimal(v.mtd_sales)}
        for v in values[-days:]
    ] if days > 0 else []

    result = {
        "store_id": store_id,
        "kpi_id": kpi_id,
        "month_key": month_key,
        "trend": "stable",
        "percent_change": 0.0,
        "values": series,
    }
    if len(series) < 2:
        return result

    change = percent_change(series[0]["value"], series[-1]["value"])
    result["percent_change"] = change
    result["trend"] = classify_trend(change)
    return result


def _mtd_for(db: Session, org_id: int, user: User, store_id: int, kpi_id: int, month_key: str) -> float:
    for summary in summarize_month(db, org_id, month_key, user):
        if summary.store_id == store_id and summary.kpi_id == kpi_id:
            return serialize_decimal(summary.mtd_sales)
    return 0.0


def month_over_month(db: Session, org_id: int, user: User, store_id: int, kpi_id: int, month_key: str) -> dict:
    previous_key = previous_month_key(month_key)
    current = _mtd_for(db, org_id, user, store_id, kpi_id, month_key)
    previous = _mtd_for(db, org_id, user, store_id, kpi_id, previous_key)
    return {
        "store_id": store_id,
        "kpi_id": kpi_id,
        "month_key": month_key,
        "previous_month_key": previous_key,
        "current_month": current,
        "previous_month": previous,
        "percent_change": percent_change(previous, current),
    }
