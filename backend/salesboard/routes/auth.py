from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, ConfigDict, EmailStr
from sqlalchemy.orm import Session

from salesboard.core.config import settings
from salesboard.core.database import get_db
from salesboard.core.deps import get_current_user
from salesboard.core.roles import AppRole
from salesboard.core.security import create_token_pair, decode_token, hash_password, verify_password
from salesboard.models.user import User
from salesboard.services import organization_service


router = APIRouter()


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str
    name: Optional[str] = None
    organization_name: Optional[str] = None


class TokenResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    organization_slug: Optional[str] = None


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class RefreshRequest(BaseModel):
    refresh_token: str


class OrganizationBrief(BaseModel):
    id: int
    name: str
    slug: str

    model_config = ConfigDict(from_attributes=True)


class MeResponse(BaseModel):
    id: int
    email: EmailStr
    name: Optional[str]
    app_role: Optional[str]
    created_at: datetime
    organizations: List[OrganizationBrief]


@router.post("/register", response_model=TokenResponse)
def register(data: RegisterRequest, db: Session = Depends(get_db)):
    if db.query(User).filter(User.email.ilike(data.email)).first():
        raise HTTPException(status_code=400, detail="Email already registered")

    user = User(
        email=data.email,
        hashed_password=hash_password(data.password),
        name=(data.name or "").strip() or None,
    )
    db.add(user)
    db.commit()
    db.refresh(user)

    if settings.bootstrap_admin_email and data.email.lower() == settings.bootstrap_admin_email.lower():
        organization_service.set_app_role(db, user.id, AppRole.super_admin.value)

    if data.organization_name:
        base = organization_service.to_slug(data.organization_name)
        org = organization_service.create_organization(
            db, user, data.organization_name, slug=organization_service.unique_slug(db, base)
        )
    else:
        org = organization_service.create_personal_organization(db, user)

    access, refresh = create_token_pair(user.id)
    return TokenResponse(access_token=access, refresh_token=refresh, organization_slug=org.slug)


@router.post("/login", response_model=TokenResponse)
def login(data: LoginRequest, db: Session = Depends(get_db)):
    user = db.query(User).filter(User.email.ilike(data.email)).first()
    if not user or not verify_password(data.password, user.hashed_password):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    access, refresh = create_token_pair(user.id)
    return TokenResponse(access_token=access, refresh_token=refresh)


@router.post("/refresh", response_model=TokenResponse)
def refresh_token_endpoint(data: RefreshRequest, db: Session = Depends(get_db)):
    payload = decode_token(data.refresh_token, expected_type="refresh")
    if not payload:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid refresh token")

    user = db.query(User).filter(User.id == int(payload["sub"])).first()
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")

    access, refresh = create_token_pair(user.id)
    return TokenResponse(access_token=access, refresh_token=refresh)


@router.get("/me", response_model=MeResponse)
def me(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return MeResponse(
        id=user.id,
        email=user.email,
        name=user.name,
        app_role=organization_service.get_app_role(db, user.id),
        created_at=user.created_at,
        organizations=[OrganizationBrief.model_validate(o) for o in organization_service.list_organizations(db, user)],
    )
