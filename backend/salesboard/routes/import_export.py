from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, Response, UploadFile
from pydantic import BaseModel
from sqlalchemy.orm import Session

from salesboard.core.database import get_db
from salesboard.core.deps import get_current_user, get_organization
from salesboard.core.month_calendar import month_key as to_month_key
from salesboard.models.organization import Organization
from salesboard.models.user import User
from salesboard.services import catalog_service, csv_service

router = APIRouter()


class ParsedRowOut(BaseModel):
    store_name: str
    kpi_name: str
    monthly_goal: float
    mtd_sales: float


class ImportResultOut(BaseModel):
    success: bool
    message: str
    new_store_names: List[str]
    new_kpi_names: List[str]
    sales_rows: List[ParsedRowOut]
    errors: List[str]
    imported: int


@router.post("/sales", response_model=ImportResultOut)
async def import_sales(
    file: Optional[UploadFile] = File(None),
    text: Optional[str] = Form(None),
    dry_run: bool = Form(False),
    db: Session = Depends(get_db),
    org: Organization = Depends(get_organization),
    user: User = Depends(get_current_user),
):
    """
    Import month-to-date sales from CSV, uploaded as a file or pasted as text.

    Required columns: Store, KPI, Monthly Goal, MTD Sales.
    Unknown stores and KPIs are created; each row is recorded for today.
    dry_run only validates.
    """
    if file is not None:
        if not file.filename.lower().endswith(".csv"):
            raise HTTPException(status_code=400, detail="File must be a CSV (.csv)")
        raw = await file.read()
        try:
            content = raw.decode("utf-8-sig")
        except UnicodeDecodeError:
            raise HTTPException(status_code=400, detail="CSV file must be UTF-8 encoded")
    elif text:
        content = text
    else:
        raise HTTPException(status_code=400, detail="Provide a CSV file or text")

    result = csv_service.import_sales(db, org.id, user, content, dry_run=dry_run)
    return ImportResultOut(
        success=result.success,
        message=result.message,
        new_store_names=result.new_store_names,
        new_kpi_names=result.new_kpi_names,
        sales_rows=[ParsedRowOut(**vars(r)) for r in result.sales_rows],
        errors=result.errors,
        imported=result.imported,
    )


@router.get("/sales/template")
def export_template(
    db: Session = Depends(get_db),
    org: Organization = Depends(get_organization),
    user: User = Depends(get_current_user),
):
    """Download a CSV template prefilled with the organization's stores and KPIs"""
    stores = catalog_service.list_stores(db, org.id, user)
    kpis = catalog_service.list_kpis(db, org.id, user)
    content = csv_service.generate_csv_template(stores, kpis)
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="sales-import-template.csv"'},
    )


@router.get("/sales/export")
def export_sales(
    month_key: Optional[str] = None,
    format: str = Query("csv", pattern="^(csv|xlsx)$"),
    db: Session = Depends(get_db),
    org: Organization = Depends(get_organization),
    user: User = Depends(get_current_user),
):
    today = date.today()
    month_key = month_key or to_month_key(today)
    content = csv_service.export_sales(db, org.id, user, month_key, fmt=format, today=today)

    if format == "xlsx":
        media_type = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    else:
        media_type = "text/csv"
    filename = f"sales-data-{month_key}.{format}"
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
