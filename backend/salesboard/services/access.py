"""
Organization access checks.

Every read or write of organization data goes through assert_org_access or
assert_org_role before touching the ledger. Super admins pass every check and
resolve to owner-level access.
"""
from typing import Optional

from sqlalchemy.orm import Session

from salesboard.core.errors import AuthorizationError, ForbiddenError
from salesboard.core.roles import AppRole, OrgRole, has_role
from salesboard.models.app_role import AppRoleAssignment
from salesboard.models.member import Member
from salesboard.models.user import User


def is_super_admin(db: Session, user_id: int) -> bool:
    assignment = db.query(AppRoleAssignment).filter(AppRoleAssignment.user_id == user_id).first()
    return assignment is not None and assignment.role == AppRole.super_admin.value


def get_membership(db: Session, org_id: int, user_id: int) -> Optional[Member]:
    return db.query(Member).filter(Member.org_id == org_id, Member.user_id == user_id).first()


def get_org_role(db: Session, org_id: int, user_id: int) -> Optional[str]:
    if is_super_admin(db, user_id):
        return OrgRole.owner.value
    membership = get_membership(db, org_id, user_id)
    return membership.role if membership else None


def assert_org_access(db: Session, org_id: int, user: User) -> None:
    if is_super_admin(db, user.id):
        return
    if not get_membership(db, org_id, user.id):
        raise AuthorizationError("Not a member of this organization")


def assert_org_role(db: Session, org_id: int, user: User, required: OrgRole) -> str:
    role = get_org_role(db, org_id, user.id)
    if role is None:
        raise AuthorizationError("Not a member of this organization")
    if not has_role(role, required):
        raise ForbiddenError(f"Requires {required.value} role")
    return role
