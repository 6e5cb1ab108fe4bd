from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from salesboard.core.database import get_db
from salesboard.core.deps import get_current_user, get_organization
from salesboard.core.month_calendar import month_key as to_month_key
from salesboard.models.organization import Organization
from salesboard.models.user import User
from salesboard.services.kpi_metrics import build_dashboard

router = APIRouter()


@router.get("")
def get_dashboard(
    month_key: Optional[str] = None,
    db: Session = Depends(get_db),
    org: Organization = Depends(get_organization),
    user: User = Depends(get_current_user),
):
    """
    Store x KPI grid with percent to goal, projection, daily target and pace
    status, plus per-store share and per-KPI goal vs actual.
    """
    today = date.today()
    return build_dashboard(db, org.id, month_key or to_month_key(today), user, today=today)
