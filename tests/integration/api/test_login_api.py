from datetime import timedelta

import pytest
from httpx import AsyncClient

from teller_iam.domain.base import utcnow
from tests.fixtures.seed import API, bearer, fetch_user, login, seed_user


@pytest.mark.asyncio
async def test_successful_login(client: AsyncClient, db_session):
    """Login returns the token pair, identity and permissions and sets the session cookie"""
    teller = await seed_user(db_session, "teller")

    response = await client.post(
        f"{API}/auth/login", json={"email": "Teller@GlobalRemit.com", "password": teller["password"]}
    )

    assert response.status_code == 200
    data = response.json()
    assert data["user"]["email"] == "teller@globalremit.com"
    assert data["user"]["role"] == "AGENT_USER"
    assert data["user"]["name"] == "Tina Teller"
    assert "transactions:create" in data["permissions"]
    assert data["token"] and data["refreshToken"] and data["sessionId"]
    assert "access_token" in response.headers["set-cookie"]

    user = await fetch_user(db_session, teller["email"])
    assert user.last_login_at is not None


@pytest.mark.asyncio
async def test_unknown_email_and_wrong_password_look_the_same(client: AsyncClient, db_session):
    teller = await seed_user(db_session, "teller")

    wrong = await client.post(
        f"{API}/auth/login", json={"email": teller["email"], "password": "WrongPassword!"}
    )
    unknown = await client.post(
        f"{API}/auth/login", json={"email": "nobody@globalremit.com", "password": "WrongPassword!"}
    )

    assert wrong.status_code == unknown.status_code == 401
    assert wrong.json() == unknown.json()
    assert wrong.json()["error"]["code"] == "INVALID_CREDENTIALS"


@pytest.mark.asyncio
async def test_failed_attempts_count_up_and_reset(client: AsyncClient, db_session):
    teller = await seed_user(db_session, "teller")

    counts = []
    for _ in range(3):
        response = await client.post(
            f"{API}/auth/login", json={"email": teller["email"], "password": "WrongPassword!"}
        )
        assert response.status_code == 401
        counts.append((await fetch_user(db_session, teller["email"])).failed_attempts)

    await login(client, teller)
    counts.append((await fetch_user(db_session, teller["email"])).failed_attempts)

    assert counts == [1, 2, 3, 0]


@pytest.mark.asyncio
async def test_account_locks_after_five_failures(client: AsyncClient, db_session):
    teller = await seed_user(db_session, "teller")

    for _ in range(5):
        await client.post(
            f"{API}/auth/login", json={"email": teller["email"], "password": "WrongPassword!"}
        )

    user = await fetch_user(db_session, teller["email"])
    assert user.status.value == "ACTIVE"
    assert user.locked_until is not None

    response = await client.post(
        f"{API}/auth/login", json={"email": teller["email"], "password": teller["password"]}
    )

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "ACCOUNT_LOCKED"
    assert "temporarily locked" in response.json()["error"]["message"]
    assert (await fetch_user(db_session, teller["email"])).failed_attempts == 5


@pytest.mark.asyncio
async def test_pending_account_is_forbidden(client: AsyncClient, db_session):
    teller = await seed_user(db_session, "teller", status="PENDING")

    response = await client.post(
        f"{API}/auth/login", json={"email": teller["email"], "password": teller["password"]}
    )

    assert response.status_code == 403
    assert response.json()["error"]["code"] == "ACCOUNT_INACTIVE"


@pytest.mark.asyncio
async def test_malformed_login_payload(client: AsyncClient):
    response = await client.post(f"{API}/auth/login", json={"email": "not-an-email", "password": ""})

    assert response.status_code == 400
    error = response.json()["error"]
    assert error["code"] == "VALIDATION_ERROR"
    assert {d["field"] for d in error["details"]} == {"email", "password"}


@pytest.mark.asyncio
async def test_me_returns_current_context(client: AsyncClient, db_session):
    compliance = await seed_user(db_session, "compliance")
    tokens = await login(client, compliance)

    response = await client.get(f"{API}/me", headers=bearer(tokens["token"]))

    assert response.status_code == 200
    data = response.json()
    assert data["user"]["email"] == compliance["email"]
    assert data["landingRoute"] == "/compliance"
    assert "kyc:approve" in data["permissions"]


@pytest.mark.asyncio
async def test_me_requires_session(client: AsyncClient):
    response = await client.get(f"{API}/me", headers=bearer("garbage"))

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "UNAUTHORIZED"


@pytest.mark.asyncio
async def test_lockout_expires_and_resets_counter(client: AsyncClient, db_session):
    teller = await seed_user(db_session, "teller")

    for _ in range(5):
        await client.post(
            f"{API}/auth/login", json={"email": teller["email"], "password": "WrongPassword!"}
        )

    user = await fetch_user(db_session, teller["email"])
    user.locked_until = utcnow() - timedelta(seconds=1)
    db_session.add(user)
    await db_session.commit()

    response = await client.post(
        f"{API}/auth/login", json={"email": teller["email"], "password": teller["password"]}
    )

    assert response.status_code == 200
    user = await fetch_user(db_session, teller["email"])
    assert user.failed_attempts == 0
    assert user.locked_until is None


@pytest.mark.asyncio
@pytest.mark.parametrize("status", ["LOCKED", "SUSPENDED"])
async def test_admin_locked_account_rejects_correct_password(
    client: AsyncClient, db_session, status
):
    teller = await seed_user(db_session, "teller", status=status)

    response = await client.post(
        f"{API}/auth/login", json={"email": teller["email"], "password": teller["password"]}
    )

    assert response.status_code == 401
    assert response.json()["error"] == {
        "code": "ACCOUNT_LOCKED",
        "message": "Account is locked. Please contact support.",
    }
    assert (await fetch_user(db_session, teller["email"])).failed_attempts == 0
