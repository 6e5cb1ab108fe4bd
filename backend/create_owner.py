#!/usr/bin/env python3
"""
Create (or reset) a super admin user with its own organization.
Usage: python create_owner.py owner@example.com 'password' [org-slug]
"""
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from salesboard.core.database import SessionLocal
from salesboard.core.roles import AppRole
from salesboard.core.security import hash_password
from salesboard.models.organization import Organization
from salesboard.models.user import User
from salesboard.services.organization_service import create_organization, set_app_role


def create_owner(email: str, password: str, org_slug: str = "main") -> None:
    db = SessionLocal()
    try:
        user = db.query(User).filter(User.email == email).first()
        if user:
            user.hashed_password = hash_password(password)
            db.commit()
            print(f"Updated password for existing user '{email}'")
        else:
            user = User(email=email, hashed_password=hash_password(password), name="Owner")
            db.add(user)
            db.commit()
            db.refresh(user)
            print(f"Created user '{email}' with ID: {user.id}")

        set_app_role(db, user.id, AppRole.super_admin.value)

        org = db.query(Organization).filter(Organization.slug == org_slug).first()
        if not org:
            org = create_organization(db, user, org_slug.replace("-", " ").title(), slug=org_slug)
            print(f"Created organization '{org.slug}' with ID: {org.id}")
        else:
            print(f"Found organization '{org.slug}' with ID: {org.id}")

        print(f"\n{'=' * 50}")
        print(f"Email: {user.email}")
        print("App role: super_admin")
        print(f"Organization: {org.slug}")
        print(f"{'=' * 50}")
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == '__main__':
    if len(sys.argv) < 3:
        print(__doc__)
        sys.exit(1)
    create_owner(*sys.argv[1:4])
