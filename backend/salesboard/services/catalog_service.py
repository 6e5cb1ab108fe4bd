"""
Stores and KPIs of an organization.

Deleting a store or KPI also deletes its ledger rows and monthly rollups so
summaries never carry ids without a name to display.
"""
import logging
from typing import List

from sqlalchemy.orm import Session

from salesboard.core.errors import NotFoundError, InvalidInputError
from salesboard.core.roles import OrgRole
from salesboard.models.daily_sale import DailySale
from salesboard.models.kpi import Kpi
from salesboard.models.monthly_rollup import MonthlyRollup
from salesboard.models.store import Store
from salesboard.models.user import User
from salesboard.services.access import assert_org_access, assert_org_role


logger = logging.getLogger(__name__)


def _clean_name(name: str, label: str) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise InvalidInputError(f"{label} name is required")
    return cleaned


def list_stores(db: Session, org_id: int, user: User) -> List[Store]:
    assert_org_access(db, org_id, user)
    return db.query(Store).filter(Store.org_id == org_id).order_by(Store.id).all()


def create_store(db: Session, org_id: int, user: User, name: str) -> Store:
    assert_org_access(db, org_id, user)
    store = Store(org_id=org_id, name=_clean_name(name, "Store"))
    db.add(store)
    db.commit()
    db.refresh(store)
    return store


def delete_store(db: Session, org_id: int, user: User, store_id: int) -> None:
    assert_org_role(db, org_id, user, OrgRole.admin)
    store = db.query(Store).filter(Store.id == store_id, Store.org_id == org_id).first()
    if not store:
        raise NotFoundError("Store not found")

    removed = db.query(DailySale).filter(DailySale.store_id == store_id).delete(synchronize_session=False)
    db.query(MonthlyRollup).filter(MonthlyRollup.store_id == store_id).delete(synchronize_session=False)
    db.delete(store)
    db.commit()
    logger.info("store deleted id=%s org=%s daily_rows=%s", store_id, org_id, removed)


def list_kpis(db: Session, org_id: int, user: User) -> List[Kpi]:
    assert_org_access(db, org_id, user)
    return db.query(Kpi).filter(Kpi.org_id == org_id).order_by(Kpi.id).all()


def create_kpi(db: Session, org_id: int, user: User, name: str) -> Kpi:
    assert_org_access(db, org_id, user)
    kpi = Kpi(org_id=org_id, name=_clean_name(name, "KPI"))
    db.add(kpi)
    db.commit()
    db.refresh(kpi)
    return kpi


def delete_kpi(db: Session, org_id: int, user: User, kpi_id: int) -> None:
    assert_org_role(db, org_id, user, OrgRole.admin)
    kpi = db.query(Kpi).filter(Kpi.id == kpi_id, Kpi.org_id == org_id).first()
    if not kpi:
        raise NotFoundError("KPI not found")

    removed = db.query(DailySale).filter(DailySale.kpi_id == kpi_id).delete(synchronize_session=False)
    db.query(MonthlyRollup).filter(MonthlyRollup.kpi_id == kpi_id).delete(synchronize_session=False)
    db.delete(kpi)
    db.commit()
    logger.info("kpi deleted id=%s org=%s daily_rows=%s", kpi_id, org_id, removed)
