from datetime import datetime
from typing import List

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict
from sqlalchemy.orm import Session

from salesboard.core.database import get_db
from salesboard.core.deps import get_current_user, get_organization
from salesboard.models.organization import Organization
from salesboard.models.user import User
from salesboard.services import catalog_service

stores_router = APIRouter()
kpis_router = APIRouter()


class NameCreate(BaseModel):
    name: str


class CatalogItemOut(BaseModel):
    id: int
    name: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


@stores_router.get("", response_model=List[CatalogItemOut])
def list_stores(
    db: Session = Depends(get_db),
    org: Organization = Depends(get_organization),
    user: User = Depends(get_current_user),
):
    return catalog_service.list_stores(db, org.id, user)


@stores_router.post("", response_model=CatalogItemOut)
def create_store(
    data: NameCreate,
    db: Session = Depends(get_db),
    org: Organization = Depends(get_organization),
    user: User = Depends(get_current_user),
):
    return catalog_service.create_store(db, org.id, user, data.name)


@stores_router.delete("/{store_id}")
def delete_store(
    store_id: int,
    db: Session = Depends(get_db),
    org: Organization = Depends(get_organization),
    user: User = Depends(get_current_user),
):
    """Delete a store together with its sales ledger and rollups (admin or owner)"""
    catalog_service.delete_store(db, org.id, user, store_id)
    return {"message": "Store deleted successfully"}


@kpis_router.get("", response_model=List[CatalogItemOut])
def list_kpis(
    db: Session = Depends(get_db),
    org: Organization = Depends(get_organization),
    user: User = Depends(get_current_user),
):
    return catalog_service.list_kpis(db, org.id, user)


@kpis_router.post("", response_model=CatalogItemOut)
def create_kpi(
    data: NameCreate,
    db: Session = Depends(get_db),
    org: Organization = Depends(get_organization),
    user: User = Depends(get_current_user),
):
    return catalog_service.create_kpi(db, org.id, user, data.name)


@kpis_router.delete("/{kpi_id}")
def delete_kpi(
    kpi_id: int,
    db: Session = Depends(get_db),
    org: Organization = Depends(get_organization),
    user: User = Depends(get_current_user),
):
    """Delete a KPI together with its sales ledger and rollups (admin or owner)"""
    catalog_service.delete_kpi(db, org.id, user, kpi_id)
    return {"message": "KPI deleted successfully"}
