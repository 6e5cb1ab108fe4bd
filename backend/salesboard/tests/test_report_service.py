from datetime import date

import pytest
from sqlalchemy.exc import OperationalError

from salesboard.core.errors import ForbiddenError, NotFoundError, InvalidInputError
from salesboard.services import catalog_service, report_service
from salesboard.services.daily_sales_service import record_month_to_date_value
from salesboard.services.organization_service import invite_member


def test_generate_report_writes_pdf(db, org, store, kpi, owner):
    record_month_to_date_value(db, org.id, store.id, kpi.id, "2024-03-05", "2024-03", 1234.5, 10000, owner)

    report = report_service.generate_report(db, org.id, owner, "March review", month_key="2024-03", today=date(2024, 3, 5))

    path = report_service.report_path(report)
    assert path.read_bytes().startswith(b"%PDF")
    assert report.url == f"/reports/{report.id}/download"
    assert report.store_ids == []
    assert [r.id for r in report_service.list_reports(db, org.id, owner)] == [report.id]


def test_report_for_selected_stores(db, org, store, kpi, owner):
    catalog_service.create_store(db, org.id, owner, "Airport")

    report = report_service.generate_report(db, org.id, owner, "Downtown only", store_ids=[store.id])

    assert report.store_ids == [store.id]


def test_report_name_required(db, org, owner):
    with pytest.raises(InvalidInputError):
        report_service.generate_report(db, org.id, owner, "  ")


def test_delete_report_removes_file(db, org, store, kpi, owner):
    report = report_service.generate_report(db, org.id, owner, "Temp")
    path = report_service.report_path(report)

    report_service.delete_report(db, org.id, owner, report.id)

    assert not path.exists()
    with pytest.raises(NotFoundError):
        report_service.get_report(db, org.id, owner, report.id)


def test_members_cannot_delete_reports(db, org, store, kpi, owner, outsider):
    invite_member(db, org.id, owner, outsider.email, "member")
    report = report_service.generate_report(db, org.id, outsider, "Mine")

    with pytest.raises(ForbiddenError):
        report_service.delete_report(db, org.id, outsider, report.id)


def test_failed_save_removes_rendered_pdf(db, org, store, kpi, owner, monkeypatch):
    before = set(report_service.storage_dir().iterdir())

    def failing_commit():
        raise OperationalError("COMMIT", {}, Exception("disk full"))

    monkeypatch.setattr(db, "commit", failing_commit)
    with pytest.raises(OperationalError):
        report_service.generate_report(db, org.id, owner, "Lost")

    assert set(report_service.storage_dir().iterdir()) == before
    monkeypatch.undo()
    assert report_service.list_reports(db, org.id, owner) == []
