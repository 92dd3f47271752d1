"""
User Management Use Cases

All user-related business logic.
"""

from .load_context_use_case import LoadContextUseCase
from .change_status_use_case import ChangeUserStatusUseCase
from .change_role_use_case import ChangeUserRoleUseCase

__all__ = [
    "LoadContextUseCase",
    "ChangeUserStatusUseCase",
    "ChangeUserRoleUseCase",
]
