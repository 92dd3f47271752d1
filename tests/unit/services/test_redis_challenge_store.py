from unittest.mock import AsyncMock, MagicMock

import pytest

from teller_iam.adapter.services.redis_challenge_store import RedisChallengeStore
from teller_iam.app.services.challenge_store import ChallengeKind


@pytest.fixture
def redis_client():
    client = MagicMock()
    client.set = AsyncMock()
    client.getdel = AsyncMock(return_value=None)
    return client


@pytest.mark.asyncio
async def test_put_sets_expiring_key(redis_client):
    store = RedisChallengeStore(redis_client)

    await store.put(ChallengeKind.registration, "user-1", b"\x01\x02\x03", 300)

    redis_client.set.assert_called_once_with("passkey:reg:user-1", "AQID", ex=300)


@pytest.mark.asyncio
async def test_pop_reads_and_deletes(redis_client):
    redis_client.getdel.return_value = "AQID"
    store = RedisChallengeStore(redis_client)

    challenge = await store.pop(ChallengeKind.authentication, "user-1")

    assert challenge == b"\x01\x02\x03"
    redis_client.getdel.assert_called_once_with("passkey:auth:user-1")


@pytest.mark.asyncio
async def test_pop_accepts_bytes_replies(redis_client):
    redis_client.getdel.return_value = b"AQID"

    assert await RedisChallengeStore(redis_client).pop(ChallengeKind.registration, "u") == b"\x01\x02\x03"


@pytest.mark.asyncio
async def test_pop_missing_challenge(redis_client):
    assert await RedisChallengeStore(redis_client).pop(ChallengeKind.registration, "u") is None
