from typing import Optional

from redis.asyncio import Redis
from webauthn.helpers import base64url_to_bytes, bytes_to_base64url

from teller_iam.app.services.challenge_store import ChallengeKind, IChallengeStore


class RedisChallengeStore(IChallengeStore):
    """Challenge store backed by Redis (SET EX + GETDEL)"""

    KEY_PREFIX = "passkey"

    def __init__(self, client: Redis):
        self.client = client

    def _key(self, kind: ChallengeKind, subject: str) -> str:
        return f"{self.KEY_PREFIX}:{kind.value}:{subject}"

    async def put(
        self, kind: ChallengeKind, subject: str, challenge: bytes, ttl_seconds: int
    ) -> None:
        await self.client.set(
            self._key(kind, subject), bytes_to_base64url(challenge), ex=ttl_seconds
        )

    async def pop(self, kind: ChallengeKind, subject: str) -> Optional[bytes]:
        value = await self.client.getdel(self._key(kind, subject))
        if value is None:
            return None
        if isinstance(value, bytes):
            value = value.decode("utf-8")
        return base64url_to_bytes(value)
