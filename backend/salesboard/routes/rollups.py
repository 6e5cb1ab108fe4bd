from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from salesboard.core.database import get_db
from salesboard.core.deps import get_current_user, get_organization, require_super_admin
from salesboard.core.serialization_helpers import serialize_decimal
from salesboard.models.organization import Organization
from salesboard.models.user import User
from salesboard.services import rollup_service

router = APIRouter()


class RollupRun(BaseModel):
    month_key: Optional[str] = None


class RollupOut(BaseModel):
    store_id: int
    kpi_id: int
    month_key: str
    total_sales: float
    monthly_goal: float
    days_recorded: int
    closed_at: Optional[datetime]


@router.post("/run", dependencies=[Depends(require_super_admin)])
def run_rollup(data: RollupRun, db: Session = Depends(get_db)):
    """Close out a month for every organization (defaults to the previous month)"""
    month_key = data.month_key or rollup_service.default_rollup_month()
    written = rollup_service.perform_rollup(db, month_key)
    return {"month_key": month_key, "rollups": written}


@router.get("", response_model=List[RollupOut])
def list_rollups(
    month_key: str,
    db: Session = Depends(get_db),
    org: Organization = Depends(get_organization),
    user: User = Depends(get_current_user),
):
    return [
        RollupOut(
            store_id=r.store_id,
            kpi_id=r.kpi_id,
            month_key=r.month_key,
            total_sales=serialize_decimal(r.total_sales),
            monthly_goal=serialize_decimal(r.monthly_goal),
            days_recorded=r.days_recorded,
            closed_at=r.closed_at,
        )
        for r in rollup_service.list_rollups(db, org.id, user, month_key)
    ]
