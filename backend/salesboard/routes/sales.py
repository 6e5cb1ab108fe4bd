from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from salesboard.core.database import get_db
from salesboard.core.deps import get_current_user, get_organization
from salesboard.core.month_calendar import month_key as to_month_key
from salesboard.core.serialization_helpers import serialize_decimal
from salesboard.models.organization import Organization
from salesboard.models.user import User
from salesboard.services import daily_sales_service

router = APIRouter()


class MtdUpsert(BaseModel):
    store_id: int
    kpi_id: int
    date_key: str
    month_key: Optional[str] = None
    mtd_sales: float = Field(allow_inf_nan=False)
    monthly_goal: float = Field(allow_inf_nan=False)


class RecordIdResponse(BaseModel):
    id: int


class SalesSummaryOut(BaseModel):
    store_id: int
    kpi_id: int
    monthly_goal: float
    mtd_sales: float


class DailyValueOut(BaseModel):
    date_key: str
    daily_value: float
    mtd_sales: float
    monthly_goal: float


@router.get("/summary", response_model=List[SalesSummaryOut])
def get_sales_summary(
    month_key: Optional[str] = Query(None, description="YYYY-MM, defaults to the current month"),
    db: Session = Depends(get_db),
    org: Organization = Depends(get_organization),
    user: User = Depends(get_current_user),
):
    """Month-to-date sales and goal per store/KPI; pairs with no entries are omitted"""
    month_key = month_key or to_month_key(date.today())
    return [
        SalesSummaryOut(
            store_id=s.store_id,
            kpi_id=s.kpi_id,
            monthly_goal=serialize_decimal(s.monthly_goal),
            mtd_sales=serialize_decimal(s.mtd_sales),
        )
        for s in daily_sales_service.summarize_month(db, org.id, month_key, user)
    ]


@router.post("/mtd", response_model=RecordIdResponse)
def upsert_from_mtd(
    data: MtdUpsert,
    db: Session = Depends(get_db),
    org: Organization = Depends(get_organization),
    user: User = Depends(get_current_user),
):
    """Record a month-to-date figure for one day; returns the ledger row id"""
    record_id = daily_sales_service.record_month_to_date_value(
        db,
        org.id,
        data.store_id,
        data.kpi_id,
        data.date_key,
        data.month_key,
        data.mtd_sales,
        data.monthly_goal,
        user,
    )
    return RecordIdResponse(id=record_id)


@router.get("/daily", response_model=List[DailyValueOut])
def get_daily_values(
    store_id: int,
    kpi_id: int,
    month_key: Optional[str] = None,
    db: Session = Depends(get_db),
    org: Organization = Depends(get_organization),
    user: User = Depends(get_current_user),
):
    month_key = month_key or to_month_key(date.today())
    return [
        DailyValueOut(
            date_key=v.date_key,
            daily_value=serialize_decimal(v.daily_value),
            mtd_sales=serialize_decimal(v.mtd_sales),
            monthly_goal=serialize_decimal(v.monthly_goal),
        )
        for v in daily_sales_service.list_daily_values(db, org.id, store_id, kpi_id, month_key, user)
    ]
