from sqlalchemy import Column, Integer, String, ForeignKey, UniqueConstraint

from salesboard.models.organization import Base


class AppRoleAssignment(Base):
    """Application-wide role, independent of any organization."""
    __tablename__ = "app_roles"
    __table_args__ = (UniqueConstraint("user_id", name="uq_app_roles_user"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    # role: 'user' | 'super_admin'
    role = Column(String(20), nullable=False, default="user")
