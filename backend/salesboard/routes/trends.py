from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from salesboard.core.database import get_db
from salesboard.core.deps import get_current_user, get_organization
from salesboard.core.month_calendar import month_key as to_month_key
from salesboard.models.organization import Organization
from salesboard.models.user import User
from salesboard.services import trend_service

router = APIRouter()


@router.get("")
def get_trend(
    store_id: int,
    kpi_id: int,
    month_key: Optional[str] = None,
    days: int = Query(7, ge=1, le=31),
    db: Session = Depends(get_db),
    org: Organization = Depends(get_organization),
    user: User = Depends(get_current_user),
):
    month_key = month_key or to_month_key(date.today())
    return trend_service.calculate_trend(db, org.id, user, store_id, kpi_id, month_key, days=days)


@router.get("/month-over-month")
def get_month_over_month(
    store_id: int,
    kpi_id: int,
    month_key: Optional[str] = None,
    db: Session = Depends(get_db),
    org: Organization = Depends(get_organization),
    user: User = Depends(get_current_user),
):
    month_key = month_key or to_month_key(date.today())
    return trend_service.month_over_month(db, org.id, user, store_id, kpi_id, month_key)
