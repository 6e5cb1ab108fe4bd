from typing import Optional

from fastapi import Depends, Header, HTTPException, Request, status
from sqlalchemy.orm import Session

from salesboard.core.config import settings
from salesboard.core.database import get_db
from salesboard.core.roles import OrgRole
from salesboard.core.security import decode_token
from salesboard.models.organization import Organization
from salesboard.models.user import User
from salesboard.services.access import assert_org_access, assert_org_role, is_super_admin


def get_org_slug(request: Request) -> str:
    slug = request.headers.get(settings.org_header)
    if slug:
        return slug
    # Fallback: subdomain e.g., acme.salesboard.app
    host = request.headers.get("host", "")
    parts = host.split(":")[0].split(".")
    if len(parts) >= 3:
        return parts[0]
    raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing organization header")


def get_organization(db: Session = Depends(get_db), org_slug: str = Depends(get_org_slug)) -> Organization:
    org = db.query(Organization).filter(Organization.slug == org_slug).first()
    if not org:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Organization not found")
    return org


def get_current_user(
    db: Session = Depends(get_db),
    authorization: Optional[str] = Header(None),
) -> User:
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    token = authorization.split(" ", 1)[1]
    payload = decode_token(token, expected_type="access")
    if not payload:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
    user = db.query(User).filter(User.id == int(payload["sub"])).first()
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")
    return user


def get_org_member(
    db: Session = Depends(get_db),
    org: Organization = Depends(get_organization),
    user: User = Depends(get_current_user),
) -> User:
    assert_org_access(db, org.id, user)
    return user


def require_admin(
    db: Session = Depends(get_db),
    org: Organization = Depends(get_organization),
    user: User = Depends(get_current_user),
) -> User:
    assert_org_role(db, org.id, user, OrgRole.admin)
    return user


def require_owner(
    db: Session = Depends(get_db),
    org: Organization = Depends(get_organization),
    user: User = Depends(get_current_user),
) -> User:
    assert_org_role(db, org.id, user, OrgRole.owner)
    return user


def require_super_admin(db: Session = Depends(get_db), user: User = Depends(get_current_user)) -> User:
    if not is_super_admin(db, user.id):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Super admin role required")
    return user
