"""
Session claims.

``build_claims`` turns a stored user into the claim set carried by the
access token. It is pure: signing happens in ``teller_iam.api.utils.jwt``.
"""

from datetime import UTC, datetime
from typing import FrozenSet, List
from uuid import UUID

from pydantic import BaseModel

from teller_iam.domain.entities import User, UserRole
from teller_iam.domain.rbac import Permission, parse_permissions, permissions_for


class SessionClaims(BaseModel):
    """Decoded access token payload"""

    sub: str
    email: str
    name: str
    role: UserRole
    permissions: List[str]
    sid: str
    auth_time: int
    iat: int = 0
    exp: int = 0

    @property
    def user_id(self) -> UUID:
        return UUID(self.sub)

    @property
    def session_id(self) -> UUID:
        return UUID(self.sid)

    def permission_set(self) -> FrozenSet[Permission]:
        return parse_permissions(self.permissions)


def _timestamp(value: datetime) -> int:
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return int(value.timestamp())


def build_claims(user: User, session_id: UUID, auth_time: datetime) -> SessionClaims:
    """Claims reflect the user's role and permissions at this moment"""
    permissions = sorted(p.value for p in permissions_for(user.role))
    return SessionClaims(
        sub=str(user.id),
        email=user.email,
        name=user.full_name,
        role=user.role,
        permissions=permissions,
        sid=str(session_id),
        auth_time=_timestamp(auth_time),
    )
