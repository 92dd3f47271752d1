"""
Session opening shared by password login, passkey login and refresh.
"""

import hashlib
import secrets
from datetime import UTC, datetime, timedelta
from typing import Tuple

from config import ApplicationConfig
from teller_iam.api.utils.jwt import decode_token, issue_token
from teller_iam.app.services.session_claims import build_claims
from teller_iam.app.services.unit_of_work import UnitOfWork
from teller_iam.domain.entities import Session, User

from .dtos import LoginResponse, UserInfo


def hash_refresh_token(refresh_token: str) -> str:
    return hashlib.sha256(refresh_token.encode("utf-8")).hexdigest()


def new_refresh_token() -> Tuple[str, str]:
    """Returns (token, sha256 hex digest)"""
    token = secrets.token_urlsafe(32)
    return token, hash_refresh_token(token)


def refresh_expiry(now: datetime) -> datetime:
    return now + timedelta(days=ApplicationConfig.REFRESH_TOKEN_TTL_DAYS)


async def open_session(uow: UnitOfWork, user: User, now: datetime) -> Tuple[Session, str]:
    refresh_token, refresh_token_hash = new_refresh_token()
    session = Session(
        user_id=user.id,
        refresh_token_hash=refresh_token_hash,
        expires_at=refresh_expiry(now),
    )
    session = await uow.sessions.create(session)
    return session, refresh_token


def user_info(user: User) -> UserInfo:
    return UserInfo(
        id=str(user.id), email=user.email, name=user.full_name, role=user.role.value
    )


def session_response(
    user: User, session: Session, refresh_token: str, auth_time: datetime
) -> LoginResponse:
    claims = build_claims(user, session.id, auth_time)
    token = issue_token(claims)
    expires_at = datetime.fromtimestamp(decode_token(token).exp, UTC)
    return LoginResponse(
        token=token,
        refresh_token=refresh_token,
        session_id=str(session.id),
        expires_at=expires_at.isoformat(),
        user=user_info(user),
        permissions=claims.permissions,
    )
