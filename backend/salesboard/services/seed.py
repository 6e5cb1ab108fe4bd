from datetime import date, timedelta

from sqlalchemy.orm import Session

from salesboard.core.month_calendar import date_key, month_key
from salesboard.core.security import hash_password
from salesboard.models.organization import Organization
from salesboard.models.user import User
from salesboard.services import catalog_service
from salesboard.services.daily_sales_service import record_month_to_date_value
from salesboard.services.organization_service import create_organization


DEMO_STORES = ["Downtown", "Airport"]
DEMO_KPIS = [("Sales", 30000), ("Units", 1200)]


def seed_demo(db: Session, today: date = None):
    if db.query(Organization).filter(Organization.slug == 'demo').first():
        return
    today = today or date.today()

    user = db.query(User).filter(User.email == 'owner@demo.com').first()
    if not user:
        user = User(email='owner@demo.com', hashed_password=hash_password('secret123'), name='Demo Owner')
        db.add(user)
        db.commit()
        db.refresh(user)

    org = create_organization(db, user, 'Demo', slug='demo')
    stores = [catalog_service.create_store(db, org.id, user, name) for name in DEMO_STORES]
    kpis = [(catalog_service.create_kpi(db, org.id, user, name), goal) for name, goal in DEMO_KPIS]

    # Month-to-date figures for the first days of the current month
    for offset in range(min(today.day, 3)):
        day = today.replace(day=1) + timedelta(days=offset)
        for s_index, store in enumerate(stores):
            for kpi, goal in kpis:
                mtd = goal / 30 * (offset + 1) * (1 + s_index * 0.1)
                record_month_to_date_value(
                    db, org.id, store.id, kpi.id, date_key(day), month_key(day), round(mtd, 2), goal, user
                )
