"""
Daily sales ledger.

Users submit a month-to-date total for a store/KPI; the ledger stores the
per-day delta that makes the month add up to that total. Summaries re-add
the deltas on every read and are never cached.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Dict, List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from salesboard.core.errors import InvalidInputError, NotFoundError
from salesboard.core.month_calendar import parse_month_key, resolve_month_key
from salesboard.models.daily_sale import DailySale
from salesboard.models.kpi import Kpi
from salesboard.models.store import Store
from salesboard.models.user import User
from salesboard.services.access import assert_org_access


logger = logging.getLogger(__name__)

ZERO = Decimal("0")


@dataclass
class SalesSummary:
    store_id: int
    kpi_id: int
    monthly_goal: Decimal
    mtd_sales: Decimal


@dataclass
class DailyValue:
    date_key: str
    daily_value: Decimal
    mtd_sales: Decimal
    monthly_goal: Decimal


def to_decimal(value) -> Decimal:
    try:
        amount = Decimal(str(value))
    except InvalidOperation:
        raise InvalidInputError(f"Invalid amount '{value}'")
    if not amount.is_finite():
        raise InvalidInputError(f"Amount must be a finite number, got '{value}'")
    return amount.quantize(Decimal("0.01"))


def _assert_store_and_kpi(db: Session, org_id: int, store_id: int, kpi_id: int) -> None:
    if not db.query(Store.id).filter(Store.id == store_id, Store.org_id == org_id).first():
        raise NotFoundError("Store not found")
    if not db.query(Kpi.id).filter(Kpi.id == kpi_id, Kpi.org_id == org_id).first():
        raise NotFoundError("KPI not found")


def record_month_to_date_value(
    db: Session,
    org_id: int,
    store_id: int,
    kpi_id: int,
    date_key: str,
    month_key: Optional[str],
    mtd_total,
    goal,
    actor: User,
) -> int:
    """
    Store the daily delta implied by a month-to-date total.

    The edited day absorbs whatever is needed for the month to sum to
    ``mtd_total``, clamped at zero. Other days are never touched, so editing a
    past day reattributes the delta to that day instead of shifting later days.

    Two concurrent calls for the same day both read the other days before
    either writes; the last one to commit wins.

    Args:
        db: Database session
        org_id, store_id, kpi_id: Ledger coordinates
        date_key: Day being edited (YYYY-MM-DD)
        month_key: Month containing date_key (derived when None)
        mtd_total: Month-to-date total as of date_key
        goal: Monthly goal; last write wins for the whole month
        actor: User performing the write

    Returns:
        Id of the written DailySale row

    Raises:
        AuthorizationError: actor has no access to the organization
        NotFoundError: store or KPI missing from the organization
        InvalidInputError: malformed keys, date outside month or non-finite amount
    """
    assert_org_access(db, org_id, actor)
    month_key = resolve_month_key(date_key, month_key)
    mtd_total = to_decimal(mtd_total)
    goal = to_decimal(goal)
    _assert_store_and_kpi(db, org_id, store_id, kpi_id)

    try:
        month_rows = (
            db.query(DailySale)
            .filter(
                DailySale.org_id == org_id,
                DailySale.store_id == store_id,
                DailySale.kpi_id == kpi_id,
                DailySale.month_key == month_key,
            )
            .all()
        )

        existing = None
        total_without_target = ZERO
        for row in month_rows:
            if row.date_key == date_key:
                existing = row
                continue
            total_without_target += Decimal(row.daily_value)

        daily_value = max(mtd_total - total_without_target, ZERO)

        if existing:
            existing.daily_value = daily_value
            existing.monthly_goal = goal
            existing.created_by = actor.id
            record = existing
        else:
            record = DailySale(
                org_id=org_id,
                store_id=store_id,
                kpi_id=kpi_id,
                date_key=date_key,
                month_key=month_key,
                daily_value=daily_value,
                monthly_goal=goal,
                created_by=actor.id,
                created_at=datetime.utcnow(),
            )
            db.add(record)

        db.commit()
        db.refresh(record)
    except SQLAlchemyError:
        db.rollback()
        raise

    logger.info(
        "daily sale recorded org=%s store=%s kpi=%s date=%s mtd=%s daily=%s",
        org_id, store_id, kpi_id, date_key, mtd_total, daily_value,
    )
    return record.id


def summarize_month(db: Session, org_id: int, month_key: str, actor: User) -> List[SalesSummary]:
    """
    Month-to-date sales and goal per (store, KPI).

    Pairs without rows in the month are absent; callers default them to zero.
    The goal is the maximum across the month's rows since older rows may carry
    a stale goal.
    """
    assert_org_access(db, org_id, actor)
    parse_month_key(month_key)

    rows = (
        db.query(DailySale)
        .filter(DailySale.org_id == org_id, DailySale.month_key == month_key)
        .all()
    )

    summary: Dict[Tuple[int, int], SalesSummary] = {}
    for row in rows:
        key = (row.store_id, row.kpi_id)
        existing = summary.get(key)
        if existing is None:
            summary[key] = SalesSummary(
                store_id=row.store_id,
                kpi_id=row.kpi_id,
                monthly_goal=Decimal(row.monthly_goal),
                mtd_sales=Decimal(row.daily_value),
            )
            continue
        existing.mtd_sales += Decimal(row.daily_value)
        existing.monthly_goal = max(existing.monthly_goal, Decimal(row.monthly_goal))

    return list(summary.values())


def list_daily_values(
    db: Session,
    org_id: int,
    store_id: int,
    kpi_id: int,
    month_key: str,
    actor: User,
) -> List[DailyValue]:
    """Ledger rows for one store/KPI in date order, with the running MTD total."""
    assert_org_access(db, org_id, actor)
    parse_month_key(month_key)

    rows = (
        db.query(DailySale)
        .filter(
            DailySale.org_id == org_id,
            DailySale.store_id == store_id,
            DailySale.kpi_id == kpi_id,
            DailySale.month_key == month_key,
        )
        .order_by(DailySale.date_key)
        .all()
    )

    values: List[DailyValue] = []
    running = ZERO
    for row in rows:
        running += Decimal(row.daily_value)
        values.append(
            DailyValue(
                date_key=row.date_key,
                daily_value=Decimal(row.daily_value),
                mtd_sales=running,
                monthly_goal=Decimal(row.monthly_goal),
            )
        )
    return values
