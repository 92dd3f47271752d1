from datetime import timedelta
from unittest.mock import MagicMock, patch
from uuid import uuid4

import pytest
from webauthn.helpers import bytes_to_base64url
from webauthn.helpers.exceptions import InvalidAuthenticationResponse, InvalidRegistrationResponse

from teller_iam.app.services.challenge_store import ChallengeKind
from teller_iam.app.use_cases.passkeys import (
    BeginPasskeyAuthenticationUseCase,
    BeginPasskeyRegistrationUseCase,
    FinishPasskeyAuthenticationUseCase,
    FinishPasskeyRegistrationUseCase,
)
from teller_iam.domain.base import utcnow
from teller_iam.domain.entities import Passkey, UserStatus
from tests.fixtures.factories import make_user

REGISTRATION = "teller_iam.app.use_cases.passkeys.registration_use_cases"
AUTHENTICATION = "teller_iam.app.use_cases.passkeys.authentication_use_cases"

CREDENTIAL_ID = bytes_to_base64url(b"credential-one")


def make_passkey(user, sign_count=0):
    return Passkey(
        id=uuid4(),
        user_id=user.id,
        credential_id=CREDENTIAL_ID,
        public_key=bytes_to_base64url(b"public-key"),
        sign_count=sign_count,
        transports=["internal"],
    )


def assertion():
    return {"id": CREDENTIAL_ID, "rawId": CREDENTIAL_ID, "type": "public-key", "response": {}}


@pytest.mark.asyncio
async def test_begin_registration_stores_challenge(mock_uow, challenge_store):
    user = make_user()
    mock_uow.users.get_by_id.return_value = user
    mock_uow.passkeys.get_by_user_id.return_value = [make_passkey(user)]

    result = await BeginPasskeyRegistrationUseCase(mock_uow, challenge_store).execute(user.id)

    options = result.value
    assert options["rp"]["id"] == "localhost"
    assert options["user"]["name"] == user.email
    assert [c["id"] for c in options["excludeCredentials"]] == [CREDENTIAL_ID]
    stored = challenge_store.items[(ChallengeKind.registration, str(user.id))]
    assert bytes_to_base64url(stored) == options["challenge"]


@pytest.mark.asyncio
async def test_finish_registration_saves_passkey(mock_uow, challenge_store):
    user = make_user()
    await challenge_store.put(ChallengeKind.registration, str(user.id), b"challenge", 300)
    verified = MagicMock(
        credential_id=b"credential-one", credential_public_key=b"public-key", sign_count=0
    )
    credential = {"id": CREDENTIAL_ID, "response": {"transports": ["internal", "bogus"]}}

    with patch(f"{REGISTRATION}.verify_registration_response", return_value=verified) as verify:
        result = await FinishPasskeyRegistrationUseCase(mock_uow, challenge_store).execute(
            user.id, credential, "Work laptop"
        )

    assert result.is_ok()
    assert result.value.credential_id == CREDENTIAL_ID
    assert result.value.name == "Work laptop"
    assert verify.call_args.kwargs["expected_challenge"] == b"challenge"
    saved = mock_uow.passkeys.create.call_args.args[0]
    assert saved.transports == ["internal"]
    assert challenge_store.items == {}
    mock_uow.commit.assert_called_once()


@pytest.mark.asyncio
async def test_finish_registration_without_challenge(mock_uow, challenge_store):
    result = await FinishPasskeyRegistrationUseCase(mock_uow, challenge_store).execute(
        uuid4(), {"id": CREDENTIAL_ID}
    )

    assert result.error.code == "CHALLENGE_NOT_FOUND"


@pytest.mark.asyncio
async def test_finish_registration_rejected_attestation(mock_uow, challenge_store):
    user_id = uuid4()
    await challenge_store.put(ChallengeKind.registration, str(user_id), b"challenge", 300)

    with patch(
        f"{REGISTRATION}.verify_registration_response",
        side_effect=InvalidRegistrationResponse("bad origin"),
    ):
        result = await FinishPasskeyRegistrationUseCase(mock_uow, challenge_store).execute(
            user_id, {"id": CREDENTIAL_ID}
        )

    assert result.error.code == "PASSKEY_VERIFICATION_FAILED"
    mock_uow.passkeys.create.assert_not_called()


@pytest.mark.asyncio
async def test_finish_registration_duplicate_credential(mock_uow, challenge_store):
    user = make_user()
    await challenge_store.put(ChallengeKind.registration, str(user.id), b"challenge", 300)
    mock_uow.passkeys.get_by_credential_id.return_value = make_passkey(make_user())
    verified = MagicMock(
        credential_id=b"credential-one", credential_public_key=b"public-key", sign_count=0
    )

    with patch(f"{REGISTRATION}.verify_registration_response", return_value=verified):
        result = await FinishPasskeyRegistrationUseCase(mock_uow, challenge_store).execute(
            user.id, {"id": CREDENTIAL_ID}
        )

    assert result.error.code == "PASSKEY_ALREADY_REGISTERED"


@pytest.mark.asyncio
async def test_begin_authentication_without_passkeys(mock_uow, challenge_store):
    mock_uow.users.get_by_email.return_value = make_user()

    result = await BeginPasskeyAuthenticationUseCase(mock_uow, challenge_store).execute(
        "teller@globalremit.com"
    )

    assert result.error.code == "NO_PASSKEYS"
    assert challenge_store.items == {}


@pytest.mark.asyncio
async def test_begin_authentication_lists_credentials(mock_uow, challenge_store):
    user = make_user()
    mock_uow.users.get_by_email.return_value = user
    mock_uow.passkeys.get_by_user_id.return_value = [make_passkey(user)]

    result = await BeginPasskeyAuthenticationUseCase(mock_uow, challenge_store).execute(user.email)

    assert [c["id"] for c in result.value["allowCredentials"]] == [CREDENTIAL_ID]
    assert (ChallengeKind.authentication, str(user.id)) in challenge_store.items


@pytest.mark.asyncio
async def test_finish_authentication_opens_session(mock_uow, challenge_store):
    user = make_user()
    passkey = make_passkey(user, sign_count=3)
    mock_uow.users.get_by_email.return_value = user
    mock_uow.passkeys.get_by_credential_id.return_value = passkey
    await challenge_store.put(ChallengeKind.authentication, str(user.id), b"challenge", 300)

    with patch(
        f"{AUTHENTICATION}.verify_authentication_response",
        return_value=MagicMock(new_sign_count=4),
    ) as verify:
        result = await FinishPasskeyAuthenticationUseCase(mock_uow, challenge_store).execute(
            user.email, assertion()
        )

    assert result.is_ok()
    assert result.value.user.id == str(user.id)
    assert verify.call_args.kwargs["credential_current_sign_count"] == 3
    passkey_id, new_count, _ = mock_uow.passkeys.advance_sign_count.call_args.args
    assert (passkey_id, new_count) == (passkey.id, 4)
    mock_uow.sessions.create.assert_called_once()
    event = mock_uow.audit_events.create.call_args.args[0]
    assert event.event_metadata["method"] == "passkey"


@pytest.mark.asyncio
async def test_finish_authentication_challenge_is_single_use(mock_uow, challenge_store):
    user = make_user()
    mock_uow.users.get_by_email.return_value = user
    mock_uow.passkeys.get_by_credential_id.return_value = make_passkey(user)
    await challenge_store.put(ChallengeKind.authentication, str(user.id), b"challenge", 300)

    with patch(
        f"{AUTHENTICATION}.verify_authentication_response",
        return_value=MagicMock(new_sign_count=1),
    ):
        use_case = FinishPasskeyAuthenticationUseCase(mock_uow, challenge_store)
        first = await use_case.execute(user.email, assertion())
        second = await use_case.execute(user.email, assertion())

    assert first.is_ok()
    assert second.error.code == "CHALLENGE_NOT_FOUND"


@pytest.mark.asyncio
async def test_finish_authentication_with_someone_elses_passkey(mock_uow, challenge_store):
    user = make_user()
    mock_uow.users.get_by_email.return_value = user
    mock_uow.passkeys.get_by_credential_id.return_value = make_passkey(make_user())

    result = await FinishPasskeyAuthenticationUseCase(mock_uow, challenge_store).execute(
        user.email, assertion()
    )

    assert result.error.code == "PASSKEY_NOT_FOUND"


@pytest.mark.asyncio
async def test_finish_authentication_rejected_assertion(mock_uow, challenge_store):
    user = make_user()
    mock_uow.users.get_by_email.return_value = user
    mock_uow.passkeys.get_by_credential_id.return_value = make_passkey(user)
    await challenge_store.put(ChallengeKind.authentication, str(user.id), b"challenge", 300)

    with patch(
        f"{AUTHENTICATION}.verify_authentication_response",
        side_effect=InvalidAuthenticationResponse("bad signature"),
    ):
        result = await FinishPasskeyAuthenticationUseCase(mock_uow, challenge_store).execute(
            user.email, assertion()
        )

    assert result.error.code == "PASSKEY_VERIFICATION_FAILED"
    mock_uow.sessions.create.assert_not_called()


@pytest.mark.asyncio
async def test_finish_authentication_stale_sign_count(mock_uow, challenge_store):
    user = make_user()
    mock_uow.users.get_by_email.return_value = user
    mock_uow.passkeys.get_by_credential_id.return_value = make_passkey(user, sign_count=7)
    mock_uow.passkeys.advance_sign_count.return_value = False
    await challenge_store.put(ChallengeKind.authentication, str(user.id), b"challenge", 300)

    with patch(
        f"{AUTHENTICATION}.verify_authentication_response",
        return_value=MagicMock(new_sign_count=8),
    ):
        result = await FinishPasskeyAuthenticationUseCase(mock_uow, challenge_store).execute(
            user.email, assertion()
        )

    assert result.error.code == "PASSKEY_REPLAY_DETECTED"
    mock_uow.sessions.create.assert_not_called()


@pytest.mark.asyncio
async def test_finish_authentication_locked_account(mock_uow, challenge_store):
    user = make_user(status=UserStatus.locked)
    mock_uow.users.get_by_email.return_value = user
    mock_uow.passkeys.get_by_credential_id.return_value = make_passkey(user)
    await challenge_store.put(ChallengeKind.authentication, str(user.id), b"challenge", 300)

    with patch(
        f"{AUTHENTICATION}.verify_authentication_response",
        return_value=MagicMock(new_sign_count=1),
    ):
        result = await FinishPasskeyAuthenticationUseCase(mock_uow, challenge_store).execute(
            user.email, assertion()
        )

    assert result.error.code == "ACCOUNT_LOCKED"
    mock_uow.passkeys.advance_sign_count.assert_not_called()


@pytest.mark.asyncio
async def test_finish_authentication_during_password_lockout(mock_uow, challenge_store):
    user = make_user(failed_attempts=5, locked_until=utcnow() + timedelta(minutes=10))
    mock_uow.users.get_by_email.return_value = user
    mock_uow.passkeys.get_by_credential_id.return_value = make_passkey(user)
    await challenge_store.put(ChallengeKind.authentication, str(user.id), b"challenge", 300)

    with patch(
        f"{AUTHENTICATION}.verify_authentication_response",
        return_value=MagicMock(new_sign_count=1),
    ):
        result = await FinishPasskeyAuthenticationUseCase(mock_uow, challenge_store).execute(
            user.email, assertion()
        )

    assert result.error.code == "ACCOUNT_LOCKED"
    assert "temporarily locked" in result.error.message
    mock_uow.sessions.create.assert_not_called()
