import os
import tempfile

# Settings are read at import time, so the test environment goes in first
_tmp_dir = tempfile.mkdtemp(prefix="salesboard-tests-")
os.environ["ENV"] = "test"
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_tmp_dir, 'test.db')}"
os.environ["REPORT_STORAGE_DIR"] = os.path.join(_tmp_dir, "reports")
os.environ["BOOTSTRAP_ADMIN_EMAIL"] = "root@test.com"

import pytest
from fastapi.testclient import TestClient

import salesboard.models  # noqa: F401
from salesboard.core.database import SessionLocal, engine
from salesboard.core.roles import AppRole
from salesboard.core.security import create_token_pair, hash_password
from salesboard.main import app
from salesboard.models.organization import Base
from salesboard.models.user import User
from salesboard.services import catalog_service
from salesboard.services.organization_service import create_organization, set_app_role


@pytest.fixture(autouse=True)
def fresh_schema():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def make_user(db):
    def _make_user(email, name=None, password="secret123"):
        user = User(email=email, hashed_password=hash_password(password), name=name)
        db.add(user)
        db.commit()
        db.refresh(user)
        return user
    return _make_user


@pytest.fixture
def owner(make_user):
    return make_user("owner@test.com", name="Olivia")


@pytest.fixture
def outsider(make_user):
    return make_user("outsider@test.com", name="Oscar")


@pytest.fixture
def super_admin(db, make_user):
    user = make_user("admin@test.com", name="Ada")
    set_app_role(db, user.id, AppRole.super_admin.value)
    return user


@pytest.fixture
def org(db, owner):
    return create_organization(db, owner, "Acme", slug="acme")


@pytest.fixture
def store(db, org, owner):
    return catalog_service.create_store(db, org.id, owner, "Downtown")


@pytest.fixture
def kpi(db, org, owner):
    return catalog_service.create_kpi(db, org.id, owner, "Sales")


@pytest.fixture
def auth_headers():
    def _headers(user, org_slug="acme"):
        access, _ = create_token_pair(user.id)
        headers = {"Authorization": f"Bearer {access}"}
        if org_slug:
            headers["X-Org-ID"] = org_slug
        return headers
    return _headers
