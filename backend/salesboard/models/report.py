from datetime import datetime

from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, JSON

from salesboard.models.organization import Base


class Report(Base):
    __tablename__ = "reports"

    id = Column(Integer, primary_key=True, index=True)
    org_id = Column(Integer, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    month_key = Column(String(7), nullable=True)
    # Path of the rendered PDF inside settings.report_storage_dir
    file_name = Column(String(255), nullable=False)
    url = Column(String(500), nullable=False)
    # Selected store ids; empty list means every store
    store_ids = Column(JSON, nullable=False, default=list)
    created_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
