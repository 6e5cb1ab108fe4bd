from datetime import datetime

from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, UniqueConstraint
from sqlalchemy.orm import relationship

from salesboard.models.organization import Base


class Member(Base):
    __tablename__ = "members"
    __table_args__ = (
        UniqueConstraint("org_id", "user_id", name="uq_members_org_user"),
    )

    id = Column(Integer, primary_key=True, index=True)
    org_id = Column(Integer, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    # role: 'owner' | 'admin' | 'member'
    role = Column(String(20), nullable=False, default="member")
    joined_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    user = relationship("User")
