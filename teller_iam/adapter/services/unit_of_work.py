from sqlmodel.ext.asyncio.session import AsyncSession

from teller_iam.adapter.repositories.audit_event_repository import AuditEventRepository
from teller_iam.adapter.repositories.invitation_repository import InvitationRepository
from teller_iam.adapter.repositories.passkey_repository import PasskeyRepository
from teller_iam.adapter.repositories.session_repository import SessionRepository
from teller_iam.adapter.repositories.user_repository import UserRepository
from teller_iam.app.services.unit_of_work import UnitOfWork


class SqlAlchemyUnitOfWork(UnitOfWork):
    """SQLAlchemy implementation of UnitOfWork pattern"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def __aenter__(self):
        self.users = UserRepository(self.session)
        self.invitations = InvitationRepository(self.session)
        self.sessions = SessionRepository(self.session)
        self.passkeys = PasskeyRepository(self.session)
        self.audit_events = AuditEventRepository(self.session)
        return self

    async def __aexit__(self, *args):
        # Anything not committed inside the block is discarded
        await self.rollback()

    async def commit(self):
        await self.session.commit()

    async def rollback(self):
        await self.session.rollback()
