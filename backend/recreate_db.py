"""
Script to recreate the database schema and seed demo data
"""
from salesboard.core.database import SessionLocal, engine
from salesboard.models.organization import Base
import salesboard.models  # noqa: F401
from salesboard.services.seed import seed_demo


def recreate_db():
    print("Dropping existing tables...")
    Base.metadata.drop_all(bind=engine)

    print("Creating tables...")
    Base.metadata.create_all(bind=engine)

    print("Seeding demo data...")
    with SessionLocal() as db:
        seed_demo(db)

    print("Database recreated successfully!")
    print("\nLogin credentials:")
    print("   Email: owner@demo.com")
    print("   Password: secret123")
    print("   Organization: demo")


if __name__ == "__main__":
    recreate_db()
