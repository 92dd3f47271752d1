"""
Get Audit Events Use Case

Retrieves the user activity log with pagination.
"""

from typing import Any, Dict, Optional
from uuid import UUID

from teller_iam.app.services.unit_of_work import UnitOfWork
from teller_iam.libs.result import Result, Return


class GetAuditEventsUseCase:
    """
    Use case for reading the activity log.

    Business Rules:
    - Access is checked by the caller's audit:read permission at the route
    - Results ordered by newest first
    - Supports cursor-based pagination and an optional actor filter
    - Each event includes action, user_email, timestamp, metadata
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self,
        user_id: Optional[UUID] = None,
        limit: int = 50,
        cursor: Optional[str] = None,
    ) -> Result[Dict[str, Any]]:
        async with self.uow:
            events, next_cursor = await self.uow.audit_events.get_paginated(
                user_id=user_id, limit=limit, cursor=cursor
            )

            emails: Dict[UUID, Optional[str]] = {}
            events_list = []
            for event in events:
                user_email = None
                if event.user_id:
                    if event.user_id not in emails:
                        user = await self.uow.users.get_by_id(event.user_id)
                        emails[event.user_id] = user.email if user else None
                    user_email = emails[event.user_id]

                events_list.append(
                    {
                        "action": event.action,
                        "user_email": user_email,
                        "timestamp": event.created_at.isoformat() + "Z",
                        "metadata": event.event_metadata or {},
                    }
                )

            return Return.ok({"events": events_list, "next_cursor": next_cursor})
