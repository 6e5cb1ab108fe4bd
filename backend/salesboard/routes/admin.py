from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from salesboard.core.database import get_db
from salesboard.core.deps import get_current_user, require_super_admin
from salesboard.models.user import User
from salesboard.services import organization_service

router = APIRouter()


class AppRoleUpdate(BaseModel):
    role: str


class AppRoleOut(BaseModel):
    user_id: int
    role: Optional[str]


@router.get("/app-role/me", response_model=AppRoleOut)
def my_app_role(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return AppRoleOut(user_id=user.id, role=organization_service.get_app_role(db, user.id))


@router.post("/app-role/bootstrap", response_model=AppRoleOut)
def bootstrap_super_admin(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    """First authenticated caller becomes super admin while no app roles exist"""
    assignment = organization_service.bootstrap_super_admin(db, user)
    return AppRoleOut(user_id=assignment.user_id, role=assignment.role)


@router.put("/users/{user_id}/app-role", response_model=AppRoleOut, dependencies=[Depends(require_super_admin)])
def set_user_app_role(user_id: int, data: AppRoleUpdate, db: Session = Depends(get_db)):
    if not db.query(User).filter(User.id == user_id).first():
        raise HTTPException(status_code=404, detail="User not found")
    assignment = organization_service.set_app_role(db, user_id, data.role)
    return AppRoleOut(user_id=assignment.user_id, role=assignment.role)
