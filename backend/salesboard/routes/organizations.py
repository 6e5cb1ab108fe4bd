from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, EmailStr
from sqlalchemy.orm import Session

from salesboard.core.database import get_db
from salesboard.core.deps import get_current_user, get_org_member, get_organization
from salesboard.models.organization import Organization
from salesboard.models.user import User
from salesboard.services import organization_service
from salesboard.services.access import get_org_role

router = APIRouter()


class OrganizationCreate(BaseModel):
    name: str
    slug: Optional[str] = None


class OrganizationOut(BaseModel):
    id: int
    name: str
    slug: str
    owner_id: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CurrentOrganizationOut(OrganizationOut):
    my_role: Optional[str] = None


class MemberOut(BaseModel):
    member_id: int
    user_id: int
    role: str
    joined_at: datetime
    name: Optional[str] = None
    email: Optional[str] = None


class MemberInvite(BaseModel):
    email: EmailStr
    role: str = "member"


class MemberRoleUpdate(BaseModel):
    role: str


@router.get("", response_model=List[OrganizationOut])
def list_organizations(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return organization_service.list_organizations(db, user)


@router.post("", response_model=OrganizationOut)
def create_organization(data: OrganizationCreate, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return organization_service.create_organization(db, user, data.name, data.slug)


@router.get("/current", response_model=CurrentOrganizationOut)
def get_current_organization(
    db: Session = Depends(get_db),
    org: Organization = Depends(get_organization),
    user: User = Depends(get_org_member),
):
    out = CurrentOrganizationOut.model_validate(org)
    out.my_role = get_org_role(db, org.id, user.id)
    return out


@router.get("/members", response_model=List[MemberOut])
def list_members(
    db: Session = Depends(get_db),
    org: Organization = Depends(get_organization),
    user: User = Depends(get_current_user),
):
    return organization_service.list_members(db, org.id, user)


@router.post("/members", response_model=MemberOut)
def invite_member(
    data: MemberInvite,
    db: Session = Depends(get_db),
    org: Organization = Depends(get_organization),
    user: User = Depends(get_current_user),
):
    member = organization_service.invite_member(db, org.id, user, data.email, data.role)
    return MemberOut(
        member_id=member.id,
        user_id=member.user_id,
        role=member.role,
        joined_at=member.joined_at,
        name=member.user.name,
        email=member.user.email,
    )


@router.put("/members/{member_id}", response_model=MemberOut)
def update_member_role(
    member_id: int,
    data: MemberRoleUpdate,
    db: Session = Depends(get_db),
    org: Organization = Depends(get_organization),
    user: User = Depends(get_current_user),
):
    member = organization_service.update_member_role(db, org.id, user, member_id, data.role)
    return MemberOut(
        member_id=member.id,
        user_id=member.user_id,
        role=member.role,
        joined_at=member.joined_at,
        name=member.user.name,
        email=member.user.email,
    )


@router.delete("/members/{member_id}")
def remove_member(
    member_id: int,
    db: Session = Depends(get_db),
    org: Organization = Depends(get_organization),
    user: User = Depends(get_current_user),
):
    organization_service.remove_member(db, org.id, user, member_id)
    return {"success": True}


@router.post("/leave")
def leave_organization(
    db: Session = Depends(get_db),
    org: Organization = Depends(get_organization),
    user: User = Depends(get_current_user),
):
    organization_service.leave_organization(db, org.id, user)
    return {"success": True}
