"""
Organizations, memberships and application roles.
"""
import logging
import re
from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from salesboard.core.errors import AuthorizationError, ConflictError, ForbiddenError, NotFoundError, InvalidInputError
from salesboard.core.roles import AppRole, OrgRole
from salesboard.models.app_role import AppRoleAssignment
from salesboard.models.member import Member
from salesboard.models.organization import Organization
from salesboard.models.user import User
from salesboard.services.access import assert_org_access, get_membership, get_org_role, is_super_admin


logger = logging.getLogger(__name__)


def to_slug(value: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", (value or "").lower().strip())
    return slug.strip("-")


def unique_slug(db: Session, base: str) -> str:
    slug = base
    counter = 1
    while db.query(Organization).filter(Organization.slug == slug).first():
        slug = f"{base}-{counter}"
        counter += 1
    return slug


def _add_owner(db: Session, org: Organization, user: User) -> None:
    db.add(Member(org_id=org.id, user_id=user.id, role=OrgRole.owner.value, joined_at=datetime.utcnow()))


def create_organization(db: Session, user: User, name: str, slug: Optional[str] = None) -> Organization:
    name = (name or "").strip()
    if not name:
        raise InvalidInputError("Organization name is required")
    normalized = (slug and to_slug(slug)) or to_slug(name)
    if not normalized:
        raise InvalidInputError("Invalid organization slug")
    if db.query(Organization).filter(Organization.slug == normalized).first():
        raise ConflictError("Organization slug already exists")

    org = Organization(name=name, slug=normalized, owner_id=user.id)
    db.add(org)
    db.flush()
    _add_owner(db, org, user)
    db.commit()
    db.refresh(org)
    logger.info("organization created id=%s slug=%s owner=%s", org.id, org.slug, user.id)
    return org


def create_personal_organization(db: Session, user: User) -> Organization:
    """Default organization for a user with no memberships; slug gets -1, -2... on collision."""
    name = f"{user.name}'s Organization" if user.name else "My Organization"
    org = Organization(name=name, slug=unique_slug(db, to_slug(name)), owner_id=user.id)
    db.add(org)
    db.flush()
    _add_owner(db, org, user)
    db.commit()
    db.refresh(org)
    return org


def list_organizations(db: Session, user: User) -> List[Organization]:
    if is_super_admin(db, user.id):
        return db.query(Organization).order_by(Organization.id).all()
    return (
        db.query(Organization)
        .join(Member, Member.org_id == Organization.id)
        .filter(Member.user_id == user.id)
        .order_by(Organization.id)
        .all()
    )


def list_members(db: Session, org_id: int, user: User) -> List[dict]:
    assert_org_access(db, org_id, user)
    members = db.query(Member).filter(Member.org_id == org_id).order_by(Member.id).all()
    return [
        {
            "member_id": m.id,
            "user_id": m.user_id,
            "role": m.role,
            "joined_at": m.joined_at,
            "name": m.user.name if m.user else None,
            "email": m.user.email if m.user else None,
        }
        for m in members
    ]


def _owner_count(db: Session, org_id: int) -> int:
    return db.query(Member).filter(Member.org_id == org_id, Member.role == OrgRole.owner.value).count()


def _get_member(db: Session, org_id: int, member_id: int) -> Member:
    member = db.query(Member).filter(Member.id == member_id, Member.org_id == org_id).first()
    if not member:
        raise NotFoundError("Member not found")
    return member


def invite_member(db: Session, org_id: int, viewer: User, email: str, role: str) -> Member:
    if role not in {OrgRole.admin.value, OrgRole.member.value}:
        raise InvalidInputError("Role must be admin or member")

    viewer_role = get_org_role(db, org_id, viewer.id)
    if viewer_role not in {OrgRole.owner.value, OrgRole.admin.value}:
        raise ForbiddenError("Insufficient permissions to invite members")

    user = db.query(User).filter(User.email.ilike(email.strip())).first()
    if not user:
        raise NotFoundError("User not found. They must sign up first.")
    if get_membership(db, org_id, user.id):
        raise ConflictError("User is already a member of this organization")

    member = Member(org_id=org_id, user_id=user.id, role=role, joined_at=datetime.utcnow())
    db.add(member)
    db.commit()
    db.refresh(member)
    return member


def update_member_role(db: Session, org_id: int, viewer: User, member_id: int, role: str) -> Member:
    if role not in {r.value for r in OrgRole}:
        raise InvalidInputError("Invalid role")
    if get_org_role(db, org_id, viewer.id) != OrgRole.owner.value:
        raise ForbiddenError("Only owners can change member roles")

    member = _get_member(db, org_id, member_id)
    if member.role == OrgRole.owner.value and role != OrgRole.owner.value and _owner_count(db, org_id) <= 1:
        raise ConflictError("Cannot remove the last owner")

    member.role = role
    db.commit()
    db.refresh(member)
    return member


def remove_member(db: Session, org_id: int, viewer: User, member_id: int) -> None:
    """
    Owners remove admins and members, admins remove members, anyone removes
    themselves. Owners are never removed by someone else.
    """
    member = _get_member(db, org_id, member_id)
    viewer_role = get_org_role(db, org_id, viewer.id)
    is_self = member.user_id == viewer.id

    if not is_self:
        if not viewer_role:
            raise AuthorizationError("Not a member of this organization")
        if viewer_role == OrgRole.member.value:
            raise ForbiddenError("Members cannot remove other members")
        if viewer_role == OrgRole.admin.value and member.role == OrgRole.admin.value:
            raise ForbiddenError("Admins cannot remove other admins")
        if member.role == OrgRole.owner.value:
            raise ForbiddenError("Only owners can remove other owners")

    if member.role == OrgRole.owner.value and _owner_count(db, org_id) <= 1:
        raise ConflictError("Cannot remove the last owner")

    db.delete(member)
    db.commit()


def leave_organization(db: Session, org_id: int, user: User) -> None:
    membership = get_membership(db, org_id, user.id)
    if not membership:
        raise NotFoundError("You are not a member of this organization")
    if membership.role == OrgRole.owner.value and _owner_count(db, org_id) <= 1:
        raise ConflictError("Cannot leave: You are the last owner. Transfer ownership first.")
    db.delete(membership)
    db.commit()


def get_app_role(db: Session, user_id: int) -> Optional[str]:
    assignment = db.query(AppRoleAssignment).filter(AppRoleAssignment.user_id == user_id).first()
    return assignment.role if assignment else None


def set_app_role(db: Session, user_id: int, role: str) -> AppRoleAssignment:
    if role not in {r.value for r in AppRole}:
        raise InvalidInputError("Invalid app role")
    assignment = db.query(AppRoleAssignment).filter(AppRoleAssignment.user_id == user_id).first()
    if assignment:
        assignment.role = role
    else:
        assignment = AppRoleAssignment(user_id=user_id, role=role)
        db.add(assignment)
    db.commit()
    db.refresh(assignment)
    return assignment


def bootstrap_super_admin(db: Session, user: User) -> AppRoleAssignment:
    """First caller becomes super admin while no app roles exist yet."""
    if db.query(AppRoleAssignment).first():
        raise ConflictError("Super admin already initialized")
    logger.info("bootstrapping super admin user=%s", user.id)
    return set_app_role(db, user.id, AppRole.super_admin.value)
