import base64
from datetime import datetime
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import and_, or_
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from teller_iam.app.repositories.audit_event_repository import IAuditEventRepository
from teller_iam.domain.entities import AuditEvent


class AuditEventRepository(IAuditEventRepository):
    """AuditEvent repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, audit_event: AuditEvent) -> AuditEvent:
        """Create a new audit event (immutable)"""
        self.session.add(audit_event)
        await self.session.flush()
        await self.session.refresh(audit_event)
        return audit_event

    async def get_paginated(
        self,
        user_id: Optional[UUID] = None,
        limit: int = 50,
        cursor: Optional[str] = None,
    ) -> Tuple[List[AuditEvent], Optional[str]]:
        """
        Get audit events with keyset pagination on (created_at, id).

        Cursor format: base64 of "<created_at ISO>|<event id>" for the last
        event of the previous page
        """
        stmt = select(AuditEvent)
        if user_id is not None:
            stmt = stmt.where(AuditEvent.user_id == user_id)

        position = _decode_cursor(cursor) if cursor else None
        if position is not None:
            cursor_timestamp, cursor_id = position
            stmt = stmt.where(
                or_(
                    AuditEvent.created_at < cursor_timestamp,
                    and_(
                        AuditEvent.created_at == cursor_timestamp,
                        AuditEvent.id < cursor_id,
                    ),
                )
            )

        stmt = stmt.order_by(AuditEvent.created_at.desc(), AuditEvent.id.desc()).limit(
            limit + 1
        )

        result = await self.session.exec(stmt)
        events = list(result.all())

        has_more = len(events) > limit
        if has_more:
            events = events[:limit]

        next_cursor = None
        if has_more and events:
            next_cursor = _encode_cursor(events[-1])

        return events, next_cursor


def _encode_cursor(event: AuditEvent) -> str:
    raw = f"{event.created_at.isoformat()}|{event.id}"
    return base64.urlsafe_b64encode(raw.encode("utf-8")).decode("utf-8")


def _decode_cursor(cursor: str) -> Optional[Tuple[datetime, UUID]]:
    """Unreadable cursors restart from the newest event"""
    try:
        timestamp, _, event_id = base64.urlsafe_b64decode(cursor).decode("utf-8").partition("|")
        return datetime.fromisoformat(timestamp), UUID(event_id)
    except (ValueError, TypeError):
        return None
