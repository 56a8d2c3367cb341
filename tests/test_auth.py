import datetime as dt

import jwt

from app.utils import decode_token
from app.version import API_PREFIX


def _signup(client, email="new@example.com", password="longpassword"):
    return client.post(f"{API_PREFIX}/auth/signup",
                       json={"name": "New Buyer", "email": email, "password": password})


def test_signup_returns_tokens(client):
    r = _signup(client)
    assert r.status_code == 201
    data = r.get_json()["data"]
    assert data["user"]["role"] == "customer"
    assert decode_token(data["access"])["sub"] == data["user"]["id"]
    assert data["expiresIn"] == 15 * 60


def test_signup_duplicate_email(client):
    _signup(client)
    r = _signup(client, email="NEW@example.com")
    assert r.status_code == 400
    assert r.get_json()["error"] == "A user with this email already exists"


def test_signup_short_password(client):
    r = _signup(client, password="short")
    assert r.status_code == 400
    assert r.get_json()["fields"] == ["password"]


def test_login_checks_password(client):
    _signup(client)
    r = client.post(f"{API_PREFIX}/auth/login", json={"email": "new@example.com", "password": "longpassword"})
    assert r.status_code == 200
    r = client.post(f"{API_PREFIX}/auth/login", json={"email": "new@example.com", "password": "wrong-one"})
    assert r.status_code == 401
    assert r.get_json()["error"] == "Invalid email or password"


def test_access_token_allows_request(client, login):
    toks = login("auth1@example.com")
    r = client.get(f"{API_PREFIX}/orders", headers={"Authorization": f"Bearer {toks['access']}"})
    assert r.status_code == 200


def test_expired_access_token_blocked(app, client, login):
    user = login("auth2@example.com")
    past = dt.datetime.now(dt.timezone.utc) - dt.timedelta(seconds=1)
    expired = jwt.encode({"sub": str(user["userId"]), "role": "customer", "type": "access", "exp": past},
                         app.config["JWT_SECRET"], algorithm="HS256")
    r = client.get(f"{API_PREFIX}/orders", headers={"Authorization": f"Bearer {expired}"})
    assert r.status_code == 401
    assert r.get_json()["error"] == "token expired"


def test_refresh_token_is_not_an_access_token(client, login):
    toks = login("auth3@example.com")
    r = client.get(f"{API_PREFIX}/orders", headers={"Authorization": f"Bearer {toks['refresh']}"})
    assert r.status_code == 401


def test_refresh_returns_new_access(client, login):
    toks = login("auth4@example.com")
    r = client.post(f"{API_PREFIX}/auth/refresh", json={"refresh_token": toks["refresh"]})
    assert r.status_code == 200
    new_access = r.get_json()["data"]["access"]
    r2 = client.get(f"{API_PREFIX}/orders", headers={"Authorization": f"Bearer {new_access}"})
    assert r2.status_code == 200


def test_token_for_deleted_user_rejected(app, client):
    from app.utils import create_access_token

    token = create_access_token(999, "admin")
    r = client.get(f"{API_PREFIX}/admin/vendor-registrations", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 401


def test_logout(client, login):
    toks = login("auth5@example.com")
    assert client.post(f"{API_PREFIX}/logout", headers={"Authorization": f"Bearer {toks['access']}"}).status_code == 200
    assert client.post(f"{API_PREFIX}/logout").status_code == 401


def test_long_password_signup_and_login(client):
    password = "x" * 100
    assert _signup(client, email="long@example.com", password=password).status_code == 201
    r = client.post(f"{API_PREFIX}/auth/login", json={"email": "long@example.com", "password": password})
    assert r.status_code == 200
