import pytest
from unittest.mock import AsyncMock, MagicMock

from config import ApplicationConfig
from tests.fixtures.factories import FakeChallengeStore


@pytest.fixture(autouse=True)
def fast_bcrypt(monkeypatch):
    monkeypatch.setattr(ApplicationConfig, "BCRYPT_ROUNDS", 4)


def _returns_argument(value):
    return value


@pytest.fixture
def mock_uow():
    uow = MagicMock()
    uow.__aenter__ = AsyncMock(return_value=uow)
    uow.__aexit__ = AsyncMock(return_value=False)  # Must return False to not suppress exceptions
    uow.commit = AsyncMock()
    uow.rollback = AsyncMock()

    uow.users = MagicMock()
    uow.users.get_by_email = AsyncMock(return_value=None)
    uow.users.get_by_id = AsyncMock(return_value=None)
    uow.users.create = AsyncMock(side_effect=_returns_argument)
    uow.users.update = AsyncMock(side_effect=_returns_argument)
    uow.users.increment_failed_attempts = AsyncMock()

    uow.invitations = MagicMock()
    uow.invitations.get_by_id = AsyncMock(return_value=None)
    uow.invitations.get_by_token = AsyncMock(return_value=None)
    uow.invitations.get_pending_by_email = AsyncMock(return_value=None)
    uow.invitations.list = AsyncMock(return_value=[])
    uow.invitations.create = AsyncMock(side_effect=_returns_argument)
    uow.invitations.update = AsyncMock(side_effect=_returns_argument)
    uow.invitations.mark_used = AsyncMock(return_value=True)

    uow.sessions = MagicMock()
    uow.sessions.get_by_id = AsyncMock(return_value=None)
    uow.sessions.get_by_refresh_token_hash = AsyncMock(return_value=None)
    uow.sessions.create = AsyncMock(side_effect=_returns_argument)
    uow.sessions.rotate = AsyncMock(return_value=True)
    uow.sessions.revoke_by_id = AsyncMock(return_value=True)
    uow.sessions.revoke_all_by_user_id = AsyncMock(return_value=0)

    uow.passkeys = MagicMock()
    uow.passkeys.get_by_user_id = AsyncMock(return_value=[])
    uow.passkeys.get_by_credential_id = AsyncMock(return_value=None)
    uow.passkeys.create = AsyncMock(side_effect=_returns_argument)
    uow.passkeys.advance_sign_count = AsyncMock(return_value=True)

    uow.audit_events = MagicMock()
    uow.audit_events.create = AsyncMock()
    uow.audit_events.get_paginated = AsyncMock(return_value=([], None))

    return uow


@pytest.fixture
def challenge_store():
    return FakeChallengeStore()
