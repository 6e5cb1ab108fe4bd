from sqlalchemy import Column, Integer, String, Numeric, ForeignKey, DateTime, UniqueConstraint

from salesboard.models.organization import Base


class MonthlyRollup(Base):
    __tablename__ = "monthly_rollups"
    __table_args__ = (
        UniqueConstraint("org_id", "store_id", "kpi_id", "month_key", name="uq_monthly_rollups_org_store_kpi_month"),
    )

    id = Column(Integer, primary_key=True, index=True)
    org_id = Column(Integer, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True)
    store_id = Column(Integer, ForeignKey("stores.id", ondelete="CASCADE"), nullable=False)
    kpi_id = Column(Integer, ForeignKey("kpis.id", ondelete="CASCADE"), nullable=False)
    month_key = Column(String(7), nullable=False, index=True)

    total_sales = Column(Numeric(14, 2), nullable=False, default=0)
    monthly_goal = Column(Numeric(14, 2), nullable=False, default=0)
    days_recorded = Column(Integer, nullable=False, default=0)
    closed_at = Column(DateTime, nullable=True)
