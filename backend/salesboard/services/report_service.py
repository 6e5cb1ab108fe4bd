"""
PDF sales performance reports.

The PDF is drawn with reportlab's canvas, written under
settings.report_storage_dir and recorded as a Report row so it can be listed
and downloaded later.
"""
import logging
import time
from datetime import date, datetime
from pathlib import Path
from typing import List, Optional

from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.pdfgen import canvas
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from salesboard.core.config import settings
from salesboard.core.errors import NotFoundError, InvalidInputError
from salesboard.core.month_calendar import MonthDayInfo, month_key as to_month_key
from salesboard.core.roles import OrgRole
from salesboard.core.serialization_helpers import format_amount
from salesboard.models.kpi import Kpi
from salesboard.models.report import Report
from salesboard.models.store import Store
from salesboard.models.user import User
from salesboard.services.access import assert_org_access, assert_org_role
from salesboard.services.kpi_metrics import load_month_metrics


logger = logging.getLogger(__name__)

# Column x positions in mm: KPI, Goal, MTD Sales, % to Goal, Projected
COLUMNS = [("KPI", 20), ("Goal", 70), ("MTD Sales", 100), ("% to Goal", 130), ("Projected", 160)]


def storage_dir() -> Path:
    path = Path(settings.report_storage_dir)
    path.mkdir(parents=True, exist_ok=True)
    return path


def render_report_pdf(
    target: Path,
    report_name: str,
    stores: List[Store],
    kpis: List[Kpi],
    metric_rows: List[dict],
    info: MonthDayInfo,
    generated_on: date,
) -> None:
    by_pair = {(r["store_id"], r["kpi_id"]): r for r in metric_rows}
    c = canvas.Canvas(str(target), pagesize=A4)
    width, height = A4

    def y_at(offset_mm: float) -> float:
        # Layout is measured top-down in mm
        return height - offset_mm * mm

    c.setTitle(report_name)
    c.setFont("Helvetica-Bold", 20)
    c.drawCentredString(width / 2, y_at(20), "Sales Performance Report")
    c.setFont("Helvetica", 12)
    c.drawString(20 * mm, y_at(30), f"Report: {report_name}")
    c.drawString(20 * mm, y_at(37), f"Generated: {generated_on.isoformat()}")
    c.drawString(
        20 * mm,
        y_at(44),
        f"Day {info.day_of_month} of {info.days_in_month} ({info.days_remaining} days remaining)",
    )

    y = 55
    for index, store in enumerate(stores):
        c.setFont("Helvetica-Bold", 16)
        c.drawString(20 * mm, y_at(y), store.name)
        y += 10

        c.setFont("Helvetica-Bold", 10)
        for label, x in COLUMNS:
            c.drawString(x * mm, y_at(y), label)
        y += 5
        c.line(20 * mm, y_at(y), 190 * mm, y_at(y))
        y += 5

        c.setFont("Helvetica", 10)
        for kpi in kpis:
            row = by_pair.get((store.id, kpi.id))
            goal = row["monthly_goal"] if row else 0.0
            mtd = row["mtd_sales"] if row else 0.0
            pct = row["percent_to_goal"] if row else 0.0
            projected = row["projection"] if row else 0.0
            values = [kpi.name, format_amount(goal, 2), format_amount(mtd, 2), f"{pct:.1f}%", format_amount(projected)]
            for value, (_, x) in zip(values, COLUMNS):
                c.drawString(x * mm, y_at(y), value)
            y += 8
            if y > 270:
                c.showPage()
                c.setFont("Helvetica", 10)
                y = 20

        y += 10
        if y > 250 and index < len(stores) - 1:
            c.showPage()
            y = 20

    c.save()


def generate_report(
    db: Session,
    org_id: int,
    user: User,
    name: str,
    store_ids: Optional[List[int]] = None,
    month_key: Optional[str] = None,
    today: Optional[date] = None,
) -> Report:
    name = (name or "").strip()
    if not name:
        raise InvalidInputError("Report name is required")
    today = today or date.today()
    month_key = month_key or to_month_key(today)
    store_ids = list(store_ids or [])

    stores, kpis, rows, info = load_month_metrics(db, org_id, month_key, user, today=today, store_ids=store_ids)

    file_name = f"report-{org_id}-{int(time.time() * 1000)}.pdf"
    target = storage_dir() / file_name
    render_report_pdf(target, name, stores, kpis, rows, info, today)

    report = Report(
        org_id=org_id,
        name=name,
        month_key=month_key,
        file_name=file_name,
        url="",
        store_ids=store_ids,
        created_by=user.id,
        created_at=datetime.utcnow(),
    )
    try:
        db.add(report)
        db.flush()
        report.url = f"{settings.report_base_url}/{report.id}/download"
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        # No row points at the file any more
        target.unlink(missing_ok=True)
        raise
    db.refresh(report)
    logger.info("report generated id=%s org=%s file=%s stores=%s", report.id, org_id, file_name, len(stores))
    return report


def list_reports(db: Session, org_id: int, user: User) -> List[Report]:
    assert_org_access(db, org_id, user)
    return db.query(Report).filter(Report.org_id == org_id).order_by(Report.created_at.desc(), Report.id.desc()).all()


def get_report(db: Session, org_id: int, user: User, report_id: int) -> Report:
    assert_org_access(db, org_id, user)
    report = db.query(Report).filter(Report.id == report_id, Report.org_id == org_id).first()
    if not report:
        raise NotFoundError("Report not found")
    return report


def report_path(report: Report) -> Path:
    path = storage_dir() / report.file_name
    if not path.exists():
        raise NotFoundError("Report file not found")
    return path


def delete_report(db: Session, org_id: int, user: User, report_id: int) -> None:
    assert_org_role(db, org_id, user, OrgRole.admin)
    report = db.query(Report).filter(Report.id == report_id, Report.org_id == org_id).first()
    if not report:
        raise NotFoundError("Report not found")
    (storage_dir() / report.file_name).unlink(missing_ok=True)
    db.delete(report)
    db.commit()
