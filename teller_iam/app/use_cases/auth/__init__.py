"""
Authentication Use Cases

All authentication-related business logic.
"""

from .login_use_case import LoginUseCase
from .refresh_token_use_case import RefreshTokenUseCase
from .logout_use_case import LogoutUseCase
from .dtos import LoginResponse, LogoutResponse, SessionResponse, UserInfo

__all__ = [
    # Use Cases
    "LoginUseCase",
    "RefreshTokenUseCase",
    "LogoutUseCase",
    # DTOs
    "LoginResponse",
    "LogoutResponse",
    "SessionResponse",
    "UserInfo",
]
