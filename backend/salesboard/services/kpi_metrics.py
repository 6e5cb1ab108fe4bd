"""
Derived KPI metrics for dashboards, exports and reports.
"""
from datetime import date
from typing import Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from salesboard.core.config import settings
from salesboard.core.month_calendar import MonthDayInfo, month_day_info
from salesboard.core.serialization_helpers import serialize_decimal
from salesboard.models.kpi import Kpi
from salesboard.models.store import Store
from salesboard.models.user import User
from salesboard.services.daily_sales_service import summarize_month


def percent_to_goal(mtd_sales: float, monthly_goal: float) -> float:
    if monthly_goal == 0:
        return 0.0
    return mtd_sales / monthly_goal * 100


def daily_average(mtd_sales: float, day_of_month: int) -> float:
    if day_of_month == 0:
        return 0.0
    return mtd_sales / day_of_month


def projection(mtd_sales: float, day_of_month: int, days_in_month: int) -> float:
    """Projected end-of-month total at the current daily average."""
    return daily_average(mtd_sales, day_of_month) * days_in_month


def daily_target(monthly_goal: float, mtd_sales: float, days_remaining: int) -> float:
    """Sales needed per remaining day to hit the goal."""
    if days_remaining == 0:
        return 0.0
    remaining = monthly_goal - mtd_sales
    return remaining / days_remaining if remaining > 0 else 0.0


def expected_percent(info: MonthDayInfo) -> float:
    if info.days_in_month == 0:
        return 0.0
    return info.day_of_month / info.days_in_month * 100


def pace_status(mtd_sales: float, monthly_goal: float, info: MonthDayInfo, tolerance: Optional[float] = None) -> str:
    """'ahead', 'behind' or 'neutral' relative to the straight-line pace."""
    if monthly_goal <= 0:
        return "neutral"
    tolerance = settings.pace_tolerance_pct if tolerance is None else tolerance
    pct = percent_to_goal(mtd_sales, monthly_goal)
    expected = expected_percent(info)
    if pct > expected + tolerance:
        return "ahead"
    if pct < expected - tolerance:
        return "behind"
    return "neutral"


def metric_row(store: Store, kpi: Kpi, monthly_goal: float, mtd_sales: float, info: MonthDayInfo) -> dict:
    return {
        "store_id": store.id,
        "store_name": store.name,
        "kpi_id": kpi.id,
        "kpi_name": kpi.name,
        "monthly_goal": monthly_goal,
        "mtd_sales": mtd_sales,
        "percent_to_goal": percent_to_goal(mtd_sales, monthly_goal),
        "projection": projection(mtd_sales, info.day_of_month, info.days_in_month),
        "daily_average": daily_average(mtd_sales, info.day_of_month),
        "daily_target": daily_target(monthly_goal, mtd_sales, info.days_remaining),
        "status": pace_status(mtd_sales, monthly_goal, info),
    }


def build_metric_rows(
    stores: List[Store],
    kpis: List[Kpi],
    summary_map: Dict[Tuple[int, int], Tuple[float, float]],
    info: MonthDayInfo,
) -> List[dict]:
    """One row per store x KPI; pairs without ledger rows count as zero."""
    rows = []
    for store in stores:
        for kpi in kpis:
            monthly_goal, mtd_sales = summary_map.get((store.id, kpi.id), (0.0, 0.0))
            rows.append(metric_row(store, kpi, monthly_goal, mtd_sales, info))
    return rows


def load_month_metrics(
    db: Session,
    org_id: int,
    month_key: str,
    user: User,
    today: Optional[date] = None,
    store_ids: Optional[List[int]] = None,
) -> Tuple[List[Store], List[Kpi], List[dict], MonthDayInfo]:
    """
    Stores, KPIs and metric rows for a month. ``store_ids`` narrows the stores;
    an empty or missing list keeps them all.
    """
    summaries = summarize_month(db, org_id, month_key, user)
    summary_map = {
        (s.store_id, s.kpi_id): (serialize_decimal(s.monthly_goal), serialize_decimal(s.mtd_sales))
        for s in summaries
    }
    stores = db.query(Store).filter(Store.org_id == org_id).order_by(Store.id).all()
    if store_ids:
        stores = [s for s in stores if s.id in set(store_ids)]
    kpis = db.query(Kpi).filter(Kpi.org_id == org_id).order_by(Kpi.id).all()
    info = month_day_info(today or date.today(), month_key)
    return stores, kpis, build_metric_rows(stores, kpis, summary_map, info), info


def store_share(rows: List[dict], stores: List[Store]) -> List[dict]:
    """Each store's share of total MTD sales; empty when nothing is recorded."""
    total = sum(r["mtd_sales"] for r in rows)
    if total == 0:
        return []
    shares = []
    for store in stores:
        value = sum(r["mtd_sales"] for r in rows if r["store_id"] == store.id)
        shares.append({"store_id": store.id, "name": store.name, "value": value, "percentage": value / total * 100})
    return shares


def goal_vs_actual(rows: List[dict], kpis: List[Kpi], info: MonthDayInfo) -> List[dict]:
    results = []
    for kpi in kpis:
        kpi_rows = [r for r in rows if r["kpi_id"] == kpi.id]
        total_goal = sum(r["monthly_goal"] for r in kpi_rows)
        results.append({
            "kpi_id": kpi.id,
            "name": kpi.name,
            "mtd_sales": sum(r["mtd_sales"] for r in kpi_rows),
            "monthly_goal": total_goal,
            "expected_progress": expected_percent(info) / 100 * total_goal,
        })
    return results


def build_dashboard(db: Session, org_id: int, month_key: str, user: User, today: Optional[date] = None) -> dict:
    stores, kpis, rows, info = load_month_metrics(db, org_id, month_key, user, today=today)
    return {
        "month_key": month_key,
        "day_of_month": info.day_of_month,
        "days_in_month": info.days_in_month,
        "days_remaining": info.days_remaining,
        "stores": [{"id": s.id, "name": s.name} for s in stores],
        "kpis": [{"id": k.id, "name": k.name} for k in kpis],
        "metrics": rows,
        "store_share": store_share(rows, stores),
        "goal_vs_actual": goal_vs_actual(rows, kpis, info),
    }
