from datetime import datetime

from sqlalchemy import Column, Integer, String, Numeric, ForeignKey, DateTime, Index, UniqueConstraint

from salesboard.models.organization import Base


class DailySale(Base):
    """
    One row per (organization, store, KPI, calendar day).

    daily_value is the delta attributed to date_key, derived by subtracting the
    rest of the month from a submitted month-to-date figure. monthly_goal is a
    month-level value stored on every day; the latest write wins.
    """
    __tablename__ = "daily_sales"
    __table_args__ = (
        UniqueConstraint("org_id", "store_id", "kpi_id", "date_key", name="uq_daily_sales_org_store_kpi_date"),
        Index("ix_daily_sales_org_store_kpi_month", "org_id", "store_id", "kpi_id", "month_key"),
        Index("ix_daily_sales_org_month", "org_id", "month_key"),
        Index("ix_daily_sales_org_date", "org_id", "date_key"),
    )

    id = Column(Integer, primary_key=True, index=True)
    org_id = Column(Integer, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False)
    store_id = Column(Integer, ForeignKey("stores.id", ondelete="CASCADE"), nullable=False)
    kpi_id = Column(Integer, ForeignKey("kpis.id", ondelete="CASCADE"), nullable=False)

    date_key = Column(String(10), nullable=False)   # YYYY-MM-DD
    month_key = Column(String(7), nullable=False, index=True)   # YYYY-MM

    daily_value = Column(Numeric(14, 2), nullable=False, default=0)
    monthly_goal = Column(Numeric(14, 2), nullable=False, default=0)

    created_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
