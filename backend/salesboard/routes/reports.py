from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse
from pydantic import BaseModel, ConfigDict
from sqlalchemy.orm import Session

from salesboard.core.database import get_db
from salesboard.core.deps import get_current_user, get_organization
from salesboard.models.organization import Organization
from salesboard.models.user import User
from salesboard.services import report_service

router = APIRouter()


class ReportCreate(BaseModel):
    name: str
    store_ids: List[int] = []
    month_key: Optional[str] = None


class ReportOut(BaseModel):
    id: int
    name: str
    month_key: Optional[str]
    url: str
    store_ids: List[int]
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


@router.post("", response_model=ReportOut)
def generate_report(
    data: ReportCreate,
    db: Session = Depends(get_db),
    org: Organization = Depends(get_organization),
    user: User = Depends(get_current_user),
):
    """Render a PDF sales performance report for the selected stores (all when empty)"""
    return report_service.generate_report(db, org.id, user, data.name, data.store_ids, data.month_key)


@router.get("", response_model=List[ReportOut])
def list_reports(
    db: Session = Depends(get_db),
    org: Organization = Depends(get_organization),
    user: User = Depends(get_current_user),
):
    return report_service.list_reports(db, org.id, user)


@router.get("/{report_id}/download")
def download_report(
    report_id: int,
    db: Session = Depends(get_db),
    org: Organization = Depends(get_organization),
    user: User = Depends(get_current_user),
):
    report = report_service.get_report(db, org.id, user, report_id)
    return FileResponse(
        report_service.report_path(report),
        media_type="application/pdf",
        filename=f"{report.name}.pdf",
    )


@router.delete("/{report_id}")
def delete_report(
    report_id: int,
    db: Session = Depends(get_db),
    org: Organization = Depends(get_organization),
    user: User = Depends(get_current_user),
):
    report_service.delete_report(db, org.id, user, report_id)
    return {"message": "Report deleted successfully"}
