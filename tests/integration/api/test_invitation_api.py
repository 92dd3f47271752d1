from datetime import timedelta
from urllib.parse import parse_qs, urlsplit

import pytest
from httpx import AsyncClient

from teller_iam.domain.base import utcnow
from tests.fixtures.json_loader import TestDataLoader
from tests.fixtures.seed import API, bearer, fetch_invitation, fetch_user, login, seed_user


async def invite(client, token, **overrides):
    payload = TestDataLoader.get_copy("invite_request")
    payload.update(overrides)
    return await client.post(f"{API}/user/invite", json=payload, headers=bearer(token))


def token_from(invite_link):
    return parse_qs(urlsplit(invite_link).query)["token"][0]


@pytest.mark.asyncio
async def test_invite_validate_register_login(client: AsyncClient, db_session):
    """An invited teller registers once and can sign in with the invited role"""
    admin = await seed_user(db_session, "org_admin")
    tokens = await login(client, admin)

    invited = await invite(client, tokens["token"])
    assert invited.status_code == 200
    link = invited.json()["inviteLink"]
    assert link.startswith("http://localhost:3000/register?token=")
    token = token_from(link)
    assert len(token) == 64

    validated = await client.get(f"{API}/user/invite/validate", params={"token": token})
    assert validated.status_code == 200
    assert validated.json()["invite"]["email"] == "new.teller@globalremit.com"
    assert validated.json()["invite"]["role"] == "AGENT_USER"
    assert validated.json()["invite"]["invitedBy"] == admin["email"]
    assert validated.json()["invite"]["valid"] is True

    registration = TestDataLoader.get_copy("register_request")
    registered = await client.post(f"{API}/user/register", json={"token": token, **registration})
    assert registered.status_code == 200
    assert registered.json()["user"]["status"] == "ACTIVE"

    user = await fetch_user(db_session, "new.teller@globalremit.com")
    assert user.role.value == "AGENT_USER"
    assert user.department == "Operations"
    assert (await fetch_invitation(db_session, "new.teller@globalremit.com")).used_at is not None

    again = await client.post(f"{API}/user/register", json={"token": token, **registration})
    assert again.status_code == 400
    assert again.json()["error"]["code"] == "INVITATION_ALREADY_USED"

    session = await login(
        client, {"email": "new.teller@globalremit.com", "password": registration["password"]}
    )
    assert session["user"]["role"] == "AGENT_USER"


@pytest.mark.asyncio
async def test_validate_requires_token(client: AsyncClient):
    response = await client.get(f"{API}/user/invite/validate")

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "TOKEN_REQUIRED"


@pytest.mark.asyncio
async def test_validate_unknown_token(client: AsyncClient):
    response = await client.get(f"{API}/user/invite/validate", params={"token": "0" * 64})

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "INVITATION_NOT_FOUND"


@pytest.mark.asyncio
async def test_expired_invitation(client: AsyncClient, db_session):
    admin = await seed_user(db_session, "org_admin")
    tokens = await login(client, admin)
    token = token_from((await invite(client, tokens["token"])).json()["inviteLink"])

    invitation = await fetch_invitation(db_session, "new.teller@globalremit.com")
    invitation.expires_at = utcnow() - timedelta(minutes=1)
    db_session.add(invitation)
    await db_session.commit()

    response = await client.get(f"{API}/user/invite/validate", params={"token": token})

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVITATION_EXPIRED"


@pytest.mark.asyncio
async def test_teller_cannot_invite(client: AsyncClient, db_session):
    teller = await seed_user(db_session, "teller")
    tokens = await login(client, teller)

    response = await invite(client, tokens["token"])

    assert response.status_code == 403
    assert response.json()["error"]["code"] == "FORBIDDEN"


@pytest.mark.asyncio
async def test_invite_requires_session(client: AsyncClient):
    response = await client.post(
        f"{API}/user/invite", json=TestDataLoader.get_copy("invite_request")
    )

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_duplicate_pending_invitation(client: AsyncClient, db_session):
    admin = await seed_user(db_session, "org_admin")
    tokens = await login(client, admin)

    assert (await invite(client, tokens["token"])).status_code == 200
    response = await invite(client, tokens["token"], email="new.teller@globalremit.com")

    assert response.status_code == 409
    assert response.json()["error"]["code"] == "INVITE_ALREADY_EXISTS"


@pytest.mark.asyncio
async def test_invite_existing_user(client: AsyncClient, db_session):
    admin = await seed_user(db_session, "org_admin")
    teller = await seed_user(db_session, "teller")
    tokens = await login(client, admin)

    response = await invite(client, tokens["token"], email=teller["email"])

    assert response.status_code == 409
    assert response.json()["error"]["code"] == "EMAIL_ALREADY_EXISTS"


@pytest.mark.asyncio
async def test_invalid_role(client: AsyncClient, db_session):
    admin = await seed_user(db_session, "org_admin")
    tokens = await login(client, admin)

    response = await invite(client, tokens["token"], role="SUPERUSER")

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_ROLE"


@pytest.mark.asyncio
async def test_register_short_password(client: AsyncClient, db_session):
    admin = await seed_user(db_session, "org_admin")
    tokens = await login(client, admin)
    token = token_from((await invite(client, tokens["token"])).json()["inviteLink"])

    response = await client.post(
        f"{API}/user/register",
        json={"token": token, "firstName": "Nina", "lastName": "Newcomer", "password": "short"},
    )

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


@pytest.mark.asyncio
async def test_cancelled_invitation_cannot_be_redeemed(client: AsyncClient, db_session):
    admin = await seed_user(db_session, "org_admin")
    tokens = await login(client, admin)
    created = (await invite(client, tokens["token"])).json()
    token = token_from(created["inviteLink"])

    cancelled = await client.delete(
        f"{API}/admin/invitations/{created['inviteId']}", headers=bearer(tokens["token"])
    )
    assert cancelled.status_code == 200
    assert cancelled.json() == {"status": "CANCELLED"}

    registration = TestDataLoader.get_copy("register_request")
    response = await client.post(f"{API}/user/register", json={"token": token, **registration})

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVITATION_EXPIRED"


@pytest.mark.asyncio
async def test_list_and_resend_invitations(client: AsyncClient, db_session):
    admin = await seed_user(db_session, "org_admin")
    tokens = await login(client, admin)
    created = (await invite(client, tokens["token"])).json()

    listed = await client.get(
        f"{API}/admin/invitations", params={"status": "pending"}, headers=bearer(tokens["token"])
    )
    assert listed.status_code == 200
    assert [i["id"] for i in listed.json()["invitations"]] == [created["inviteId"]]

    resent = await client.post(
        f"{API}/admin/invitations/{created['inviteId']}/resend", headers=bearer(tokens["token"])
    )
    assert resent.status_code == 200
    assert resent.json()["inviteLink"] != created["inviteLink"]

    stale = await client.get(
        f"{API}/user/invite/validate", params={"token": token_from(created["inviteLink"])}
    )
    assert stale.status_code == 404
