"""
Passkey Authentication Use Cases

Two-step WebAuthn assertion ceremony ending in a normal session.
"""

import logging
from typing import Any, Dict

from webauthn import generate_authentication_options, verify_authentication_response
from webauthn.helpers import base64url_to_bytes
from webauthn.helpers.exceptions import InvalidAuthenticationResponse, InvalidJSONStructure
from webauthn.helpers.structs import UserVerificationRequirement

from config import ApplicationConfig
from teller_iam.app.services.challenge_store import ChallengeKind, IChallengeStore
from teller_iam.app.services.unit_of_work import UnitOfWork
from teller_iam.app.use_cases.auth.dtos import LoginResponse
from teller_iam.app.use_cases.auth.login_use_case import (
    ACCOUNT_INACTIVE,
    ACCOUNT_LOCKED,
    ACCOUNT_TEMPORARILY_LOCKED,
)
from teller_iam.app.use_cases.auth.sessions import open_session, session_response
from teller_iam.domain.base import utcnow
from teller_iam.domain.entities import AuditEvent, UserStatus
from teller_iam.libs.result import Error, Result, Return

from .registration_use_cases import CHALLENGE_NOT_FOUND
from .webauthn_options import descriptors, options_dict, presented_credential_id, rp_settings

logger = logging.getLogger(__name__)

PASSKEY_NOT_FOUND = Error("PASSKEY_NOT_FOUND", "Passkey not recognised")


class BeginPasskeyAuthenticationUseCase:
    def __init__(self, uow: UnitOfWork, challenges: IChallengeStore):
        self.uow = uow
        self.challenges = challenges

    async def execute(self, email: str) -> Result[Dict[str, Any]]:
        async with self.uow:
            user = await self.uow.users.get_by_email(email)
            passkeys = await self.uow.passkeys.get_by_user_id(user.id) if user else []

            if not passkeys:
                return Return.err(
                    Error("NO_PASSKEYS", "No passkeys registered for this account")
                )

            ttl = ApplicationConfig.PASSKEY_CHALLENGE_TTL_SECONDS
            options = generate_authentication_options(
                rp_id=rp_settings()["rp_id"],
                timeout=ttl * 1000,
                allow_credentials=descriptors(passkeys),
                user_verification=UserVerificationRequirement.PREFERRED,
            )

            await self.challenges.put(
                ChallengeKind.authentication, str(user.id), options.challenge, ttl
            )
            return Return.ok(options_dict(options))


class FinishPasskeyAuthenticationUseCase:
    """
    Verifies an assertion and opens a session.

    Business Rules:
    - The credential must belong to the user named by email
    - The challenge is single-use
    - sign_count must move forward (compare-and-set in the store)
    - Account status is gated exactly like password login
    """

    def __init__(self, uow: UnitOfWork, challenges: IChallengeStore):
        self.uow = uow
        self.challenges = challenges

    async def execute(self, email: str, credential: Dict[str, Any]) -> Result[LoginResponse]:
        async with self.uow:
            user = await self.uow.users.get_by_email(email)
            if user is None:
                return Return.err(PASSKEY_NOT_FOUND)

            try:
                credential_id = presented_credential_id(credential)
            except ValueError:
                return Return.err(PASSKEY_NOT_FOUND)

            passkey = await self.uow.passkeys.get_by_credential_id(credential_id)
            if passkey is None or passkey.user_id != user.id:
                return Return.err(PASSKEY_NOT_FOUND)

            challenge = await self.challenges.pop(ChallengeKind.authentication, str(user.id))
            if challenge is None:
                return Return.err(CHALLENGE_NOT_FOUND)

            rp = rp_settings()
            try:
                verification = verify_authentication_response(
                    credential=credential,
                    expected_challenge=challenge,
                    expected_rp_id=rp["rp_id"],
                    expected_origin=rp["origin"],
                    credential_public_key=base64url_to_bytes(passkey.public_key),
                    credential_current_sign_count=passkey.sign_count,
                )
            except (InvalidAuthenticationResponse, InvalidJSONStructure) as exc:
                logger.warning(f"Passkey assertion rejected for user {user.id}: {exc}")
                return Return.err(
                    Error("PASSKEY_VERIFICATION_FAILED", "Passkey verification failed")
                )

            now = utcnow()
            if user.status in (UserStatus.locked, UserStatus.suspended):
                return Return.err(ACCOUNT_LOCKED)
            if user.lockout_active(now):
                return Return.err(ACCOUNT_TEMPORARILY_LOCKED)
            if user.status != UserStatus.active:
                return Return.err(ACCOUNT_INACTIVE)

            advanced = await self.uow.passkeys.advance_sign_count(
                passkey.id, verification.new_sign_count, now
            )
            if not advanced:
                logger.warning(f"Passkey {passkey.id} presented a stale sign count")
                return Return.err(
                    Error("PASSKEY_REPLAY_DETECTED", "Passkey verification failed")
                )

            user.last_login_at = now
            await self.uow.users.update(user)

            session, refresh_token = await open_session(self.uow, user, now)

            await self.uow.audit_events.create(
                AuditEvent(
                    user_id=user.id,
                    action="login",
                    event_metadata={
                        "method": "passkey",
                        "passkey_id": str(passkey.id),
                        "session_id": str(session.id),
                    },
                )
            )

            await self.uow.commit()

            return Return.ok(session_response(user, session, refresh_token, now))
