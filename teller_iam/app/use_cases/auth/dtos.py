"""
Authentication Use Case DTOs (Data Transfer Objects)

All Response classes for the auth domain.
"""

from typing import List, Optional

from teller_iam.app.use_cases.dtos import CamelModel


class UserInfo(CamelModel):
    """Identity summary returned with every issued token"""

    id: str
    email: str
    name: str
    role: str


class LoginResponse(CamelModel):
    """Response for login, passkey login and refresh"""

    token: str
    refresh_token: str
    session_id: str
    expires_at: str
    user: UserInfo
    permissions: List[str]


class LogoutResponse(CamelModel):
    status: str


class SessionResponse(CamelModel):
    """Current claims, plus a re-issued token when the update age has passed"""

    user: UserInfo
    permissions: List[str]
    expires_at: str
    token: Optional[str] = None
