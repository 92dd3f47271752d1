from datetime import timedelta

import pytest

from teller_iam.app.use_cases.invitations import (
    ListInvitationsUseCase,
    ResendInvitationUseCase,
    RevokeInvitationUseCase,
)
from teller_iam.domain.base import utcnow
from teller_iam.domain.entities import InvitationStatus, UserRole
from tests.fixtures.factories import make_invitation, make_user


@pytest.mark.asyncio
async def test_list_reports_derived_status(mock_uow):
    mock_uow.invitations.list.return_value = [
        make_invitation(),
        make_invitation(used=True),
        make_invitation(revoked=True),
        make_invitation(expires_in=timedelta(seconds=-1)),
    ]

    result = await ListInvitationsUseCase(mock_uow).execute()

    statuses = [i.status for i in result.value.invitations]
    assert statuses == ["PENDING", "ACCEPTED", "CANCELLED", "EXPIRED"]


@pytest.mark.asyncio
async def test_list_passes_status_filter(mock_uow):
    await ListInvitationsUseCase(mock_uow).execute(status="pending", email="x@globalremit.com")

    _, status, email = mock_uow.invitations.list.call_args.args
    assert status == InvitationStatus.pending
    assert email == "x@globalremit.com"


@pytest.mark.asyncio
async def test_list_rejects_unknown_status(mock_uow):
    result = await ListInvitationsUseCase(mock_uow).execute(status="bogus")

    assert result.error.code == "INVALID_STATUS"
    mock_uow.invitations.list.assert_not_called()


@pytest.mark.asyncio
async def test_revoke_pending_invitation(mock_uow):
    admin = make_user(role=UserRole.org_admin)
    invitation = make_invitation()
    mock_uow.invitations.get_by_id.return_value = invitation
    mock_uow.users.get_by_id.return_value = admin

    result = await RevokeInvitationUseCase(mock_uow).execute(admin.id, invitation.id)

    assert result.value.status == "CANCELLED"
    assert invitation.revoked_at is not None
    mock_uow.commit.assert_called_once()


@pytest.mark.asyncio
async def test_revoke_is_idempotent(mock_uow):
    admin = make_user(role=UserRole.org_admin)
    mock_uow.invitations.get_by_id.return_value = make_invitation(revoked=True)
    mock_uow.users.get_by_id.return_value = admin

    result = await RevokeInvitationUseCase(mock_uow).execute(admin.id, admin.id)

    assert result.value.status == "CANCELLED"
    mock_uow.invitations.update.assert_not_called()
    mock_uow.commit.assert_not_called()


@pytest.mark.asyncio
async def test_revoke_used_invitation(mock_uow):
    admin = make_user(role=UserRole.org_admin)
    mock_uow.invitations.get_by_id.return_value = make_invitation(used=True)
    mock_uow.users.get_by_id.return_value = admin

    result = await RevokeInvitationUseCase(mock_uow).execute(admin.id, admin.id)

    assert result.error.code == "INVITATION_ALREADY_USED"


@pytest.mark.asyncio
async def test_agent_admin_cannot_revoke_compliance_invitation(mock_uow):
    actor = make_user(role=UserRole.agent_admin)
    mock_uow.invitations.get_by_id.return_value = make_invitation(role=UserRole.compliance_user)
    mock_uow.users.get_by_id.return_value = actor

    result = await RevokeInvitationUseCase(mock_uow).execute(actor.id, actor.id)

    assert result.error.code == "FORBIDDEN"


@pytest.mark.asyncio
async def test_resend_issues_new_token(mock_uow):
    admin = make_user(role=UserRole.org_admin)
    invitation = make_invitation(expires_in=timedelta(seconds=-1))
    old_token = invitation.token
    mock_uow.invitations.get_by_id.return_value = invitation
    mock_uow.users.get_by_id.return_value = admin

    result = await ResendInvitationUseCase(mock_uow).execute(admin.id, invitation.id)

    assert result.is_ok()
    assert invitation.token != old_token
    assert result.value.invite_link.endswith(invitation.token)
    assert invitation.status_at(utcnow()) == InvitationStatus.pending
    mock_uow.commit.assert_called_once()


@pytest.mark.asyncio
async def test_resend_cancelled_invitation(mock_uow):
    admin = make_user(role=UserRole.org_admin)
    mock_uow.invitations.get_by_id.return_value = make_invitation(revoked=True)
    mock_uow.users.get_by_id.return_value = admin

    result = await ResendInvitationUseCase(mock_uow).execute(admin.id, admin.id)

    assert result.error.code == "INVITATION_CANCELLED"


@pytest.mark.asyncio
async def test_resend_unknown_invitation(mock_uow):
    admin = make_user(role=UserRole.org_admin)

    result = await ResendInvitationUseCase(mock_uow).execute(admin.id, admin.id)

    assert result.error.code == "INVITATION_NOT_FOUND"
