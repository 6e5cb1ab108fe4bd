from enum import Enum
from typing import Optional


class OrgRole(str, Enum):
    owner = "owner"
    admin = "admin"
    member = "member"


class AppRole(str, Enum):
    user = "user"
    super_admin = "super_admin"


# owner > admin > member
ROLE_RANK = {
    OrgRole.owner: 3,
    OrgRole.admin: 2,
    OrgRole.member: 1,
}


def has_role(role: Optional[str], required: OrgRole) -> bool:
    if role is None:
        return False
    return ROLE_RANK[OrgRole(role)] >= ROLE_RANK[required]
