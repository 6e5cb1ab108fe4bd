from .organization import Organization
from .user import User
from .member import Member
from .app_role import AppRoleAssignment
from .store import Store
from .kpi import Kpi
from .daily_sale import DailySale
from .monthly_rollup import MonthlyRollup
from .report import Report

__all__ = [
    "Organization",
    "User",
    "Member",
    "AppRoleAssignment",
    "Store",
    "Kpi",
    "DailySale",
    "MonthlyRollup",
    "Report",
]
