"""
py_webauthn argument helpers shared by the passkey use cases.
"""

import json
from typing import Any, Dict, Iterable, List

from webauthn import options_to_json
from webauthn.helpers import base64url_to_bytes, bytes_to_base64url
from webauthn.helpers.structs import AuthenticatorTransport, PublicKeyCredentialDescriptor

from config import ApplicationConfig
from teller_iam.domain.entities import Passkey


def rp_settings() -> Dict[str, str]:
    return {
        "rp_id": ApplicationConfig.WEBAUTHN_RP_ID,
        "rp_name": ApplicationConfig.WEBAUTHN_RP_NAME,
        "origin": ApplicationConfig.WEBAUTHN_ORIGIN,
    }


def _transports(values: Iterable[str]) -> List[AuthenticatorTransport]:
    transports = []
    for value in values or ():
        try:
            transports.append(AuthenticatorTransport(value))
        except ValueError:
            continue
    return transports


def descriptors(passkeys: Iterable[Passkey]) -> List[PublicKeyCredentialDescriptor]:
    return [
        PublicKeyCredentialDescriptor(
            id=base64url_to_bytes(p.credential_id), transports=_transports(p.transports)
        )
        for p in passkeys
    ]


def options_dict(options) -> Dict[str, Any]:
    """Browser-ready JSON form of a py_webauthn options object"""
    return json.loads(options_to_json(options))


def presented_credential_id(credential: Dict[str, Any]) -> str:
    """Canonical base64url credential ID from a browser assertion"""
    raw = credential.get("rawId") or credential.get("id") or ""
    return bytes_to_base64url(base64url_to_bytes(raw))


def presented_transports(credential: Dict[str, Any]) -> List[str]:
    response = credential.get("response") or {}
    return [t.value for t in _transports(response.get("transports") or [])]
