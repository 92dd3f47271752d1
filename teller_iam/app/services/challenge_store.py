from abc import ABC, abstractmethod
from enum import Enum
from typing import Optional


class ChallengeKind(str, Enum):
    registration = "reg"
    authentication = "auth"


class IChallengeStore(ABC):
    """Short-lived, single-use storage for WebAuthn challenges"""

    @abstractmethod
    async def put(
        self, kind: ChallengeKind, subject: str, challenge: bytes, ttl_seconds: int
    ) -> None:
        """Store a challenge, replacing any previous one for the same subject"""
        pass

    @abstractmethod
    async def pop(self, kind: ChallengeKind, subject: str) -> Optional[bytes]:
        """Return and delete the challenge in one step; None if absent or expired"""
        pass
