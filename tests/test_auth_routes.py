import asyncio

from tabletap.app.auth import decode_session_token, hash_password, verify_password
from tabletap.app.db import get_session
from tabletap.app.repos_sqlalchemy import users_repo_sql

CREDS = {"email": "Owner@Cafe.test", "password": "s3cret-pass"}


def _login(client) -> str:
    assert client.post("/auth/signup", json=CREDS).status_code == 200
    resp = client.post("/auth/login", json=CREDS)
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["callback"] == f"/auth/callback?code={data['code']}"
    return data["code"]


def test_password_hashing():
    hashed = hash_password("pw")
    assert verify_password("pw", hashed)
    assert not verify_password("nope", hashed)


def test_callback_sets_session_and_redirects_owner(client):
    code = _login(client)

    resp = client.get(f"/auth/callback?code={code}", follow_redirects=False)

    assert resp.status_code == 303
    assert resp.headers["location"] == "/dashboard"
    user = decode_session_token(resp.cookies["tt_session"])
    assert user.email == "owner@cafe.test"

    page = client.get("/dashboard")
    assert page.status_code == 200
    assert page.json()["data"]["cafe"] is None


def test_login_code_is_single_use(client):
    code = _login(client)
    client.get(f"/auth/callback?code={code}", follow_redirects=False)
    client.cookies.clear()

    resp = client.get(f"/auth/callback?code={code}", follow_redirects=False)

    assert resp.status_code == 303
    assert resp.headers["location"] == "/login?error=invalid_code"


def test_super_admin_lands_on_admin(client):
    code = _login(client)

    async def allow():
        async with get_session() as session:
            await users_repo_sql.add_super_admin(session, CREDS["email"])

    asyncio.run(allow())
    resp = client.get(f"/auth/callback?code={code}", follow_redirects=False)
    assert resp.headers["location"] == "/admin"


def test_bad_credentials_and_duplicate_signup(client):
    _login(client)
    assert client.post("/auth/signup", json=CREDS).status_code == 409
    resp = client.post("/auth/login", json={**CREDS, "password": "wrong-pass"})
    assert resp.status_code == 401
    assert resp.json()["ok"] is False


def test_route_guard_redirects(client):
    resp = client.get("/dashboard/orders", follow_redirects=False)
    assert resp.status_code == 307
    assert resp.headers["location"] == "/login"

    assert client.get("/login").status_code == 200

    code = _login(client)
    client.get(f"/auth/callback?code={code}", follow_redirects=False)
    resp = client.get("/login", follow_redirects=False)
    assert resp.status_code == 307
    assert resp.headers["location"] == "/dashboard"


def test_logout_clears_cookie(client):
    code = _login(client)
    client.get(f"/auth/callback?code={code}", follow_redirects=False)

    resp = client.post("/auth/logout", follow_redirects=False)

    assert resp.status_code == 303
    assert resp.headers["location"] == "/login"
    assert "tt_session" not in client.cookies


def test_api_requires_session(client):
    resp = client.get("/api/orders")
    assert resp.status_code == 401
    assert resp.json()["error"]["message"] == "Not authenticated"
