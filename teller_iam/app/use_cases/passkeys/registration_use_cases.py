"""
Passkey Registration Use Cases

Two-step WebAuthn registration ceremony for a signed-in user.
"""

import logging
from typing import Any, Dict, Optional
from uuid import UUID

from webauthn import generate_registration_options, verify_registration_response
from webauthn.helpers import bytes_to_base64url
from webauthn.helpers.cose import COSEAlgorithmIdentifier
from webauthn.helpers.exceptions import InvalidJSONStructure, InvalidRegistrationResponse
from webauthn.helpers.structs import (
    AuthenticatorSelectionCriteria,
    ResidentKeyRequirement,
    UserVerificationRequirement,
)

from config import ApplicationConfig
from teller_iam.app.services.challenge_store import ChallengeKind, IChallengeStore
from teller_iam.app.services.unit_of_work import UnitOfWork
from teller_iam.domain.entities import AuditEvent, Passkey
from teller_iam.libs.result import Error, Result, Return

from .dtos import PasskeyInfo
from .webauthn_options import descriptors, options_dict, presented_transports, rp_settings

logger = logging.getLogger(__name__)

CHALLENGE_NOT_FOUND = Error(
    "CHALLENGE_NOT_FOUND", "Passkey challenge expired or was already used"
)


class BeginPasskeyRegistrationUseCase:
    """
    Generates creation options and stores the challenge for PASSKEY_CHALLENGE_TTL_SECONDS.

    Credentials the user already owns are excluded.
    """

    def __init__(self, uow: UnitOfWork, challenges: IChallengeStore):
        self.uow = uow
        self.challenges = challenges

    async def execute(self, user_id: UUID) -> Result[Dict[str, Any]]:
        async with self.uow:
            user = await self.uow.users.get_by_id(user_id)
            if user is None:
                return Return.err(Error("USER_NOT_FOUND", "User not found"))

            existing = await self.uow.passkeys.get_by_user_id(user.id)

            rp = rp_settings()
            ttl = ApplicationConfig.PASSKEY_CHALLENGE_TTL_SECONDS
            options = generate_registration_options(
                rp_id=rp["rp_id"],
                rp_name=rp["rp_name"],
                user_id=user.id.bytes,
                user_name=user.email,
                user_display_name=user.full_name,
                timeout=ttl * 1000,
                exclude_credentials=descriptors(existing),
                authenticator_selection=AuthenticatorSelectionCriteria(
                    resident_key=ResidentKeyRequirement.PREFERRED,
                    user_verification=UserVerificationRequirement.PREFERRED,
                ),
                supported_pub_key_algs=[
                    COSEAlgorithmIdentifier.ECDSA_SHA_256,
                    COSEAlgorithmIdentifier.RSASSA_PKCS1_v1_5_SHA_256,
                ],
            )

            await self.challenges.put(
                ChallengeKind.registration, str(user.id), options.challenge, ttl
            )
            return Return.ok(options_dict(options))


class FinishPasskeyRegistrationUseCase:
    """
    Verifies the attestation and stores the credential.

    The challenge is consumed before verification, so a failed attempt
    needs a fresh set of options.
    """

    def __init__(self, uow: UnitOfWork, challenges: IChallengeStore):
        self.uow = uow
        self.challenges = challenges

    async def execute(
        self, user_id: UUID, credential: Dict[str, Any], name: Optional[str] = None
    ) -> Result[PasskeyInfo]:
        challenge = await self.challenges.pop(ChallengeKind.registration, str(user_id))
        if challenge is None:
            return Return.err(CHALLENGE_NOT_FOUND)

        rp = rp_settings()
        try:
            verification = verify_registration_response(
                credential=credential,
                expected_challenge=challenge,
                expected_rp_id=rp["rp_id"],
                expected_origin=rp["origin"],
            )
        except (InvalidRegistrationResponse, InvalidJSONStructure) as exc:
            logger.warning(f"Passkey registration rejected for user {user_id}: {exc}")
            return Return.err(
                Error("PASSKEY_VERIFICATION_FAILED", "Passkey verification failed")
            )

        credential_id = bytes_to_base64url(verification.credential_id)

        async with self.uow:
            if await self.uow.passkeys.get_by_credential_id(credential_id):
                return Return.err(
                    Error("PASSKEY_ALREADY_REGISTERED", "This passkey is already registered")
                )

            passkey = Passkey(
                user_id=user_id,
                credential_id=credential_id,
                public_key=bytes_to_base64url(verification.credential_public_key),
                sign_count=verification.sign_count,
                transports=presented_transports(credential),
                name=name or "Default Passkey",
            )
            passkey = await self.uow.passkeys.create(passkey)

            await self.uow.audit_events.create(
                AuditEvent(
                    user_id=user_id,
                    action="passkey_registered",
                    event_metadata={"passkey_id": str(passkey.id)},
                )
            )

            await self.uow.commit()

            return Return.ok(
                PasskeyInfo(
                    id=str(passkey.id),
                    name=passkey.name,
                    credential_id=passkey.credential_id,
                    created_at=passkey.created_at.isoformat(),
                )
            )
