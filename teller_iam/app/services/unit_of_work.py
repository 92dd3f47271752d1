from abc import ABC, abstractmethod

from teller_iam.app.repositories.audit_event_repository import IAuditEventRepository
from teller_iam.app.repositories.invitation_repository import IInvitationRepository
from teller_iam.app.repositories.passkey_repository import IPasskeyRepository
from teller_iam.app.repositories.session_repository import ISessionRepository
from teller_iam.app.repositories.user_repository import IUserRepository


class UnitOfWork(ABC):
    """Abstract UnitOfWork - defines repository access and transaction management"""

    # Repository properties (initialized in __aenter__)
    users: IUserRepository
    invitations: IInvitationRepository
    sessions: ISessionRepository
    passkeys: IPasskeyRepository
    audit_events: IAuditEventRepository

    @abstractmethod
    async def __aenter__(self):
        pass

    @abstractmethod
    async def __aexit__(self, *args):
        pass

    @abstractmethod
    async def commit(self):
        pass

    @abstractmethod
    async def rollback(self):
        pass
