"""
Passkey Use Cases

WebAuthn registration and authentication ceremonies.
"""

from .authentication_use_cases import (
    BeginPasskeyAuthenticationUseCase,
    FinishPasskeyAuthenticationUseCase,
)
from .dtos import PasskeyInfo
from .registration_use_cases import (
    BeginPasskeyRegistrationUseCase,
    FinishPasskeyRegistrationUseCase,
)

__all__ = [
    "BeginPasskeyRegistrationUseCase",
    "FinishPasskeyRegistrationUseCase",
    "BeginPasskeyAuthenticationUseCase",
    "FinishPasskeyAuthenticationUseCase",
    "PasskeyInfo",
]
