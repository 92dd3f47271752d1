"""
Route authorization gate.

``authorize_request`` decides what happens to a page request given the
caller's decoded claims (or None). It performs no I/O; the HTTP
middleware turns the decision into a response.
"""

from dataclasses import dataclass
from typing import Optional, Tuple, Union
from urllib.parse import quote, urlsplit

from config import ApplicationConfig
from teller_iam.app.services.session_claims import SessionClaims
from teller_iam.domain.rbac import has_any_permission, landing_route, required_permissions

PROTECTED_PREFIXES: Tuple[str, ...] = (
    "/dashboard",
    "/admin",
    "/manager",
    "/teller",
    "/compliance",
    "/clients",
    "/exchange",
    "/payout",
    "/settings",
    "/reports",
    "/kyc",
    "/transactions",
    "/send-money",
)


@dataclass(frozen=True)
class Allow:
    pass


@dataclass(frozen=True)
class RedirectTo:
    location: str


@dataclass(frozen=True)
class Reject:
    reason: str
    status_code: int = 403


GateDecision = Union[Allow, RedirectTo, Reject]


def _under(path: str, prefix: str) -> bool:
    return path == prefix or path.startswith(prefix + "/")


def _auth_pages() -> Tuple[str, str]:
    return ApplicationConfig.LOGIN_PATH, ApplicationConfig.REGISTER_PATH


def is_auth_page(path: str) -> bool:
    return any(_under(path, page) for page in _auth_pages())


def is_protected(path: str) -> bool:
    return any(_under(path, prefix) for prefix in PROTECTED_PREFIXES)


def is_gated(path: str) -> bool:
    return is_auth_page(path) or is_protected(path)


def login_redirect(path: str) -> RedirectTo:
    return RedirectTo(f"{ApplicationConfig.LOGIN_PATH}?callbackUrl={quote(path, safe='/')}")


def authorize_request(
    path: str, callback_url: Optional[str], claims: Optional[SessionClaims]
) -> GateDecision:
    """
    Decide the fate of one page request.

    Args:
        path: Request path, without query string
        callback_url: callbackUrl query parameter, if any
        claims: Decoded session claims; None for missing, expired or tampered tokens

    Returns:
        Allow, RedirectTo(location) or Reject(reason)
    """
    if is_auth_page(path):
        # A callback pointing back at an auth page would bounce forever
        if callback_url and is_auth_page(urlsplit(callback_url).path):
            return Allow()
        if claims is not None:
            return RedirectTo(landing_route(claims.role))
        return Allow()

    if not is_protected(path):
        return Allow()

    if claims is None:
        return login_redirect(path)

    required = required_permissions(path) or ()
    if has_any_permission(claims.permission_set(), required):
        return Allow()

    landing = landing_route(claims.role)
    if path.rstrip("/") == landing:
        return Reject("forbidden")
    return RedirectTo(landing)
