from datetime import date

import pytest

from salesboard.core.month_calendar import MonthDayInfo, month_day_info, previous_month_key
from salesboard.services import catalog_service
from salesboard.services.daily_sales_service import record_month_to_date_value
from salesboard.services import kpi_metrics


MID_MONTH = MonthDayInfo(day_of_month=15, days_in_month=30, days_remaining=15)


def test_percent_to_goal():
    assert kpi_metrics.percent_to_goal(500, 1000) == 50
    assert kpi_metrics.percent_to_goal(500, 0) == 0


def test_projection_and_daily_average():
    assert kpi_metrics.daily_average(300, 10) == 30
    assert kpi_metrics.daily_average(300, 0) == 0
    assert kpi_metrics.projection(300, 10, 30) == 900


def test_daily_target():
    assert kpi_metrics.daily_target(1000, 400, 20) == 30
    assert kpi_metrics.daily_target(1000, 1200, 20) == 0
    assert kpi_metrics.daily_target(1000, 400, 0) == 0


@pytest.mark.parametrize(
    "mtd_sales,goal,expected",
    [(600, 1000, "ahead"), (400, 1000, "behind"), (520, 1000, "neutral"), (100, 0, "neutral")],
)
def test_pace_status(mtd_sales, goal, expected):
    assert kpi_metrics.pace_status(mtd_sales, goal, MID_MONTH, tolerance=5) == expected


def test_month_day_info_for_past_current_and_future_months():
    today = date(2024, 3, 10)
    assert month_day_info(today) == MonthDayInfo(10, 31, 21)
    assert month_day_info(today, "2024-02") == MonthDayInfo(29, 29, 0)
    assert month_day_info(today, "2024-04") == MonthDayInfo(0, 30, 30)


def test_previous_month_key_wraps_year():
    assert previous_month_key("2024-01") == "2023-12"
    assert previous_month_key("2024-10") == "2024-09"


def test_dashboard_covers_every_store_and_kpi(db, org, store, kpi, owner):
    airport = catalog_service.create_store(db, org.id, owner, "Airport")
    record_month_to_date_value(db, org.id, store.id, kpi.id, "2024-03-10", "2024-03", 600, 3100, owner)
    record_month_to_date_value(db, org.id, airport.id, kpi.id, "2024-03-10", "2024-03", 200, 1000, owner)

    dashboard = kpi_metrics.build_dashboard(db, org.id, "2024-03", owner, today=date(2024, 3, 10))

    assert dashboard["day_of_month"] == 10
    assert dashboard["days_remaining"] == 21
    downtown = next(r for r in dashboard["metrics"] if r["store_id"] == store.id)
    assert downtown["mtd_sales"] == 600
    assert downtown["projection"] == pytest.approx(1860)
    assert downtown["daily_target"] == pytest.approx(2500 / 21)
    shares = {s["name"]: s["percentage"] for s in dashboard["store_share"]}
    assert shares == {"Downtown": pytest.approx(75), "Airport": pytest.approx(25)}
    assert dashboard["goal_vs_actual"][0]["monthly_goal"] == 4100


def test_dashboard_defaults_missing_pairs_to_zero(db, org, store, kpi, owner):
    dashboard = kpi_metrics.build_dashboard(db, org.id, "2024-03", owner, today=date(2024, 3, 10))

    assert len(dashboard["metrics"]) == 1
    assert dashboard["metrics"][0]["mtd_sales"] == 0
    assert dashboard["metrics"][0]["status"] == "neutral"
    assert dashboard["store_share"] == []
