from datetime import UTC, datetime
from typing import Optional

from jose import JWTError, jwt
from pydantic import ValidationError

from config import ApplicationConfig
from teller_iam.app.services.session_claims import SessionClaims


def _now_ts(now: Optional[datetime]) -> int:
    return int((now or datetime.now(UTC)).timestamp())


def session_deadline(claims: SessionClaims) -> int:
    """Absolute cap; only a refresh-token exchange moves it"""
    return claims.auth_time + ApplicationConfig.SESSION_MAX_AGE_MINUTES * 60


def issue_token(claims: SessionClaims, now: Optional[datetime] = None) -> str:
    """
    Sign a session token.

    iat and exp are always computed here; values already on the claims
    object are ignored.

    Args:
        claims: Claim set from build_claims
        now: Issue time (defaults to the current time)

    Returns:
        JWT string
    """
    iat = _now_ts(now)
    exp = min(
        iat + ApplicationConfig.ACCESS_TOKEN_TTL_MINUTES * 60,
        session_deadline(claims),
    )
    payload = claims.model_dump(mode="json")
    payload.update(iat=iat, exp=exp)
    return jwt.encode(
        payload, ApplicationConfig.JWT_SECRET, algorithm=ApplicationConfig.JWT_ALGORITHM
    )


def decode_token(token: str) -> Optional[SessionClaims]:
    """
    Verify and decode a session token.

    Returns:
        SessionClaims, or None for expired, tampered or malformed tokens
    """
    try:
        payload = jwt.decode(
            token,
            ApplicationConfig.JWT_SECRET,
            algorithms=[ApplicationConfig.JWT_ALGORITHM],
        )
    except JWTError:
        return None

    try:
        return SessionClaims.model_validate(payload)
    except ValidationError:
        return None


def slide_token(claims: SessionClaims, now: Optional[datetime] = None) -> Optional[str]:
    """
    Re-issue a token that is older than the update age.

    Returns None when the token is still fresh or the session has hit
    its absolute cap.
    """
    now_ts = _now_ts(now)
    if now_ts - claims.iat < ApplicationConfig.SESSION_UPDATE_AGE_MINUTES * 60:
        return None
    if now_ts >= session_deadline(claims):
        return None
    return issue_token(claims, now)
