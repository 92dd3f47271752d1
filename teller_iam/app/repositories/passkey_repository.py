from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from teller_iam.domain.entities import Passkey


class IPasskeyRepository(ABC):
    """Passkey repository interface - application layer"""

    @abstractmethod
    async def get_by_user_id(self, user_id: UUID) -> List[Passkey]:
        """Get all passkeys registered by a user"""
        pass

    @abstractmethod
    async def get_by_credential_id(self, credential_id: str) -> Optional[Passkey]:
        """Get passkey by its base64url credential ID"""
        pass

    @abstractmethod
    async def create(self, passkey: Passkey) -> Passkey:
        """Create a new passkey"""
        pass

    @abstractmethod
    async def advance_sign_count(
        self, passkey_id: UUID, new_count: int, used_at: datetime
    ) -> bool:
        """
        Store new_count only if it moves the counter forward.

        Authenticators that never count report 0 forever; 0 -> 0 is accepted.
        """
        pass
