"""
Monthly rollups: close out a month's ledger into one row per
(organization, store, KPI). Re-running a month overwrites its rollups.
"""
import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Dict, List, Optional, Set, Tuple

from sqlalchemy.orm import Session

from salesboard.core.month_calendar import month_key as to_month_key, parse_month_key, previous_month_key
from salesboard.models.daily_sale import DailySale
from salesboard.models.monthly_rollup import MonthlyRollup
from salesboard.models.user import User
from salesboard.services.access import assert_org_access


logger = logging.getLogger(__name__)


@dataclass
class _Accumulator:
    total_sales: Decimal
    monthly_goal: Decimal
    days: Set[str] = field(default_factory=set)


def default_rollup_month(today: Optional[date] = None) -> str:
    return previous_month_key(to_month_key(today or date.today()))


def perform_rollup(db: Session, month_key: str) -> int:
    """
    Aggregate every organization's ledger for ``month_key``.

    Returns:
        Number of rollup rows written
    """
    parse_month_key(month_key)
    rows = db.query(DailySale).filter(DailySale.month_key == month_key).all()

    groups: Dict[Tuple[int, int, int], _Accumulator] = {}
    for row in rows:
        key = (row.org_id, row.store_id, row.kpi_id)
        acc = groups.get(key)
        if acc is None:
            groups[key] = _Accumulator(
                total_sales=Decimal(row.daily_value),
                monthly_goal=Decimal(row.monthly_goal),
                days={row.date_key},
            )
            continue
        acc.total_sales += Decimal(row.daily_value)
        acc.monthly_goal = max(acc.monthly_goal, Decimal(row.monthly_goal))
        acc.days.add(row.date_key)

    closed_at = datetime.utcnow()
    for (org_id, store_id, kpi_id), acc in groups.items():
        rollup = (
            db.query(MonthlyRollup)
            .filter(
                MonthlyRollup.org_id == org_id,
                MonthlyRollup.store_id == store_id,
                MonthlyRollup.kpi_id == kpi_id,
                MonthlyRollup.month_key == month_key,
            )
            .first()
        )
        if rollup is None:
            rollup = MonthlyRollup(org_id=org_id, store_id=store_id, kpi_id=kpi_id, month_key=month_key)
            db.add(rollup)
        rollup.total_sales = acc.total_sales
        rollup.monthly_goal = acc.monthly_goal
        rollup.days_recorded = len(acc.days)
        rollup.closed_at = closed_at

    db.commit()
    logger.info("rollup month=%s groups=%s daily_rows=%s", month_key, len(groups), len(rows))
    return len(groups)


def list_rollups(db: Session, org_id: int, user: User, month_key: str) -> List[MonthlyRollup]:
    assert_org_access(db, org_id, user)
    parse_month_key(month_key)
    return (
        db.query(MonthlyRollup)
        .filter(MonthlyRollup.org_id == org_id, MonthlyRollup.month_key == month_key)
        .order_by(MonthlyRollup.store_id, MonthlyRollup.kpi_id)
        .all()
    )
