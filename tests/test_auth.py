import base64

import pytest
from jose import jwt

from quickcourt.core import core
from quickcourt.config import settings
from quickcourt.core.exceptions import AuthenticationError
from quickcourt.core.identity_provider import IdentityProviderClient
from quickcourt.models.enums import UserRole
from quickcourt.models.user import User
from tests.factories import auth_headers, create_user, make_token


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


def test_missing_token_is_rejected(client):
    assert client.get("/auth/me").status_code == 401


def test_invalid_token_is_rejected(client):
    assert client.get("/auth/me", headers=bearer("not-a-jwt")).status_code == 401


def test_token_signed_with_another_key_is_rejected(client):
    forged = jwt.encode({"sub": "idp|mallory", "email": "mallory@quickcourt.io"}, "wrong-secret", algorithm="HS256")
    assert client.get("/auth/me", headers=bearer(forged)).status_code == 401


def test_first_request_creates_player_account(client, db):
    token = make_token("idp|newcomer", "Newcomer@QuickCourt.io", first_name="Nia")

    response = client.get("/auth/me", headers=bearer(token))

    assert response.status_code == 200
    body = response.json()
    assert body["user"]["role"] == "user"
    assert body["user"]["email"] == "newcomer@quickcourt.io"
    assert body["home_route"] == "/"
    assert db.query(User).filter(User.external_id == "idp|newcomer").count() == 1


def test_sync_user_can_register_as_facility_owner(client):
    token = make_token("idp|club", "club@quickcourt.io")

    response = client.post("/auth/users", json={"role": "facility_owner", "first_name": "Club"}, headers=bearer(token))

    assert response.status_code == 200
    assert response.json()["user"]["role"] == "facility_owner"
    assert response.json()["home_route"] == "/owner/dashboard"


def test_sync_user_keeps_existing_role(client, player):
    response = client.post("/auth/users", json={"role": "facility_owner"}, headers=auth_headers(player))

    assert response.status_code == 200
    assert response.json()["user"]["role"] == "user"


def test_admin_role_cannot_be_self_assigned(client):
    token = make_token("idp|sneaky", "sneaky@quickcourt.io")
    response = client.post("/auth/users", json={"role": "admin"}, headers=bearer(token))
    assert response.status_code == 422


def test_deactivated_user_is_refused(client, db):
    banned = create_user(db, "banned", is_active=False)
    assert client.get("/auth/me", headers=auth_headers(banned)).status_code == 403


def test_update_profile(client, player):
    response = client.put(
        "/auth/profile",
        json={"first_name": "Priya", "phone_number": "+91 98765 43210"},
        headers=auth_headers(player),
    )

    assert response.status_code == 200
    assert response.json()["first_name"] == "Priya"
    assert response.json()["phone_number"] == "+91 98765 43210"


def test_every_role_has_a_home_route():
    for role in UserRole:
        assert core.home_route_for(role.value).startswith("/")


def test_unknown_role_has_no_home_route():
    with pytest.raises(ValueError):
        core.home_route_for("superuser")


def hmac_jwk(kid, secret):
    k = base64.urlsafe_b64encode(secret.encode()).rstrip(b"=").decode()
    return {"kty": "oct", "kid": kid, "alg": "HS256", "k": k}


def signed(kid, secret):
    return jwt.encode(
        {"sub": "idp|rotated", "email": "rotated@quickcourt.io"},
        secret,
        algorithm="HS256",
        headers={"kid": kid},
    )


@pytest.fixture
def jwks_provider(monkeypatch):
    monkeypatch.setattr(settings, "IDP_JWKS_URL", "https://idp.quickcourt.io/.well-known/jwks.json")
    provider = IdentityProviderClient()
    key_sets = [
        {"keys": [hmac_jwk("2024-a", "first-secret-key")]},
        {"keys": [hmac_jwk("2024-a", "first-secret-key"), hmac_jwk("2024-b", "second-secret-key")]},
    ]
    provider.fetches = 0

    def fetch():
        provider.fetches += 1
        return key_sets[min(provider.fetches, len(key_sets)) - 1]

    monkeypatch.setattr(provider, "_fetch_jwks", fetch)
    return provider


def test_known_signing_key_uses_cached_jwks(jwks_provider):
    for _ in range(2):
        assert jwks_provider.verify(signed("2024-a", "first-secret-key")).subject == "idp|rotated"
    assert jwks_provider.fetches == 1


def test_rotated_signing_key_is_accepted_on_first_use(jwks_provider):
    jwks_provider.verify(signed("2024-a", "first-secret-key"))

    claims = jwks_provider.verify(signed("2024-b", "second-secret-key"))

    assert claims.email == "rotated@quickcourt.io"
    assert jwks_provider.fetches == 2


def test_signing_key_missing_after_refetch_is_rejected(jwks_provider):
    with pytest.raises(AuthenticationError):
        jwks_provider.verify(signed("2023-z", "old-secret-key"))
