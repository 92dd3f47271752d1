from typing import Optional

import redis.asyncio as redis
from fastapi import Depends, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from teller_iam.adapter.services.redis_challenge_store import RedisChallengeStore
from teller_iam.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from teller_iam.api.error import ClientError
from teller_iam.api.utils.jwt import decode_token
from teller_iam.app.services.challenge_store import IChallengeStore
from teller_iam.app.services.session_claims import SessionClaims
from teller_iam.domain.rbac import ADMIN_ROLES, Permission, has_any_permission
from teller_iam.libs.result import Error

engine = create_async_engine(ApplicationConfig.DB_URI, echo=False, future=True)

AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)

# Connects lazily on first command
redis_client = redis.from_url(ApplicationConfig.REDIS_URL, decode_responses=True)

security = HTTPBearer(auto_error=False)

UNAUTHORIZED = Error("UNAUTHORIZED", "Invalid or expired session")
FORBIDDEN = Error("FORBIDDEN", "You do not have access to this resource")


async def get_unit_of_work():
    async with AsyncSessionLocal() as session:
        yield SqlAlchemyUnitOfWork(session)


def get_challenge_store() -> IChallengeStore:
    return RedisChallengeStore(redis_client)


def read_session_token(
    request: Request, credentials: Optional[HTTPAuthorizationCredentials] = None
) -> Optional[str]:
    """Bearer header wins over the session cookie"""
    if credentials is not None and credentials.credentials:
        return credentials.credentials

    scheme, _, value = request.headers.get("Authorization", "").partition(" ")
    if scheme.lower() == "bearer" and value.strip():
        return value.strip()

    return request.cookies.get(ApplicationConfig.ACCESS_TOKEN_COOKIE)


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> SessionClaims:
    """
    Dependency to extract and verify the session token.

    Args:
        request: Incoming request (for the session cookie)
        credentials: Bearer token from Authorization header

    Returns:
        Decoded SessionClaims

    Raises:
        ClientError: 401 if token is missing, invalid or expired
    """
    token = read_session_token(request, credentials)
    claims = decode_token(token) if token else None

    if claims is None:
        raise ClientError(UNAUTHORIZED, status_code=status.HTTP_401_UNAUTHORIZED)

    return claims


def require_permissions(*required: Permission):
    """Dependency factory: any one of required (or the wildcard) grants access"""

    async def dependency(claims: SessionClaims = Depends(get_current_user)) -> SessionClaims:
        if not has_any_permission(claims.permission_set(), required):
            raise ClientError(FORBIDDEN, status_code=status.HTTP_403_FORBIDDEN)
        return claims

    return dependency


async def require_admin(claims: SessionClaims = Depends(get_current_user)) -> SessionClaims:
    if claims.role not in ADMIN_ROLES:
        raise ClientError(FORBIDDEN, status_code=status.HTTP_403_FORBIDDEN)
    return claims
