import pytest

from salesboard.core.errors import ForbiddenError, NotFoundError, InvalidInputError
from salesboard.models.daily_sale import DailySale
from salesboard.models.monthly_rollup import MonthlyRollup
from salesboard.services import catalog_service
from salesboard.services.daily_sales_service import record_month_to_date_value, summarize_month
from salesboard.services.organization_service import invite_member
from salesboard.services.rollup_service import perform_rollup


def test_store_names_are_trimmed_and_required(db, org, owner):
    store = catalog_service.create_store(db, org.id, owner, "  Mall  ")
    assert store.name == "Mall"

    with pytest.raises(InvalidInputError) as exc:
        catalog_service.create_store(db, org.id, owner, " ")
    assert exc.value.detail == "Store name is required"


def test_kpi_name_required(db, org, owner):
    with pytest.raises(InvalidInputError) as exc:
        catalog_service.create_kpi(db, org.id, owner, "")
    assert exc.value.detail == "KPI name is required"


def test_deleting_store_removes_its_sales(db, org, store, kpi, owner):
    other = catalog_service.create_store(db, org.id, owner, "Airport")
    record_month_to_date_value(db, org.id, store.id, kpi.id, "2024-03-01", "2024-03", 100, 1000, owner)
    record_month_to_date_value(db, org.id, other.id, kpi.id, "2024-03-01", "2024-03", 200, 1000, owner)
    perform_rollup(db, "2024-03")

    catalog_service.delete_store(db, org.id, owner, store.id)

    assert [s.id for s in catalog_service.list_stores(db, org.id, owner)] == [other.id]
    assert [s.store_id for s in summarize_month(db, org.id, "2024-03", owner)] == [other.id]
    assert db.query(DailySale).filter(DailySale.store_id == store.id).count() == 0
    assert db.query(MonthlyRollup).filter(MonthlyRollup.store_id == store.id).count() == 0


def test_deleting_kpi_removes_its_sales(db, org, store, kpi, owner):
    record_month_to_date_value(db, org.id, store.id, kpi.id, "2024-03-01", "2024-03", 100, 1000, owner)

    catalog_service.delete_kpi(db, org.id, owner, kpi.id)

    assert catalog_service.list_kpis(db, org.id, owner) == []
    assert db.query(DailySale).count() == 0


def test_members_cannot_delete(db, org, store, owner, outsider):
    invite_member(db, org.id, owner, outsider.email, "member")
    with pytest.raises(ForbiddenError):
        catalog_service.delete_store(db, org.id, outsider, store.id)


def test_delete_unknown_store(db, org, owner):
    with pytest.raises(NotFoundError):
        catalog_service.delete_store(db, org.id, owner, 9999)
