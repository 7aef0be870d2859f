from datetime import date, time, timedelta

from quickcourt.models.enums import UserRole
from tests.factories import auth_headers, create_booking_row, create_user


def test_list_users_with_filters(client, admin, player, owner):
    everyone = client.get("/admin/users", headers=auth_headers(admin)).json()
    assert everyone["total"] == 3

    owners = client.get("/admin/users", params={"role": "facility_owner"}, headers=auth_headers(admin)).json()
    assert [u["email"] for u in owners["users"]] == ["owner@quickcourt.io"]

    search = client.get("/admin/users", params={"search": "play"}, headers=auth_headers(admin)).json()
    assert [u["email"] for u in search["users"]] == ["player@quickcourt.io"]


def test_toggle_user_status(client, admin, player):
    response = client.put(f"/admin/users/{player.id}/toggle-status", headers=auth_headers(admin))
    assert response.status_code == 200
    assert response.json()["is_active"] is False

    # The deactivated account can no longer use the API
    assert client.get("/auth/me", headers=auth_headers(player)).status_code == 403

    inactive = client.get("/admin/users", params={"status": "inactive"}, headers=auth_headers(admin)).json()
    assert [u["id"] for u in inactive["users"]] == [player.id]


def test_admins_cannot_be_deactivated(client, db, admin):
    other_admin = create_user(db, "second-admin", UserRole.ADMIN)
    response = client.put(f"/admin/users/{other_admin.id}/toggle-status", headers=auth_headers(admin))
    assert response.status_code == 403


def test_change_role(client, admin, player):
    response = client.put(
        f"/admin/users/{player.id}/role",
        json={"role": "facility_owner"},
        headers=auth_headers(admin),
    )
    assert response.status_code == 200
    assert response.json()["role"] == "facility_owner"

    own = client.put(f"/admin/users/{admin.id}/role", json={"role": "user"}, headers=auth_headers(admin))
    assert own.status_code == 409


def test_user_booking_history(client, db, admin, player, court):
    create_booking_row(db, player, court, date.today() - timedelta(days=3), time(10, 0))

    response = client.get(f"/admin/users/{player.id}/bookings", headers=auth_headers(admin))

    assert response.status_code == 200
    assert response.json()["total"] == 1
    assert response.json()["bookings"][0]["status"] == "completed"
    assert client.get("/admin/users/9999/bookings", headers=auth_headers(admin)).status_code == 404


def test_platform_settings(client, admin):
    defaults = client.get("/admin/settings", headers=auth_headers(admin)).json()
    assert float(defaults["commission_percentage"]) == 10.0
    assert defaults["max_booking_advance_days"] == 7

    updated = client.put(
        "/admin/settings",
        json={"commission_percentage": "12.5", "max_booking_advance_days": 14},
        headers=auth_headers(admin),
    )
    assert updated.status_code == 200
    assert float(updated.json()["commission_percentage"]) == 12.5
    assert updated.json()["max_booking_advance_days"] == 14


def test_admin_venue_detail(client, admin, court):
    response = client.get(f"/admin/venues/{court.venue_id}", headers=auth_headers(admin))

    assert response.status_code == 200
    body = response.json()
    assert body["owner"]["role"] == "facility_owner"
    assert [c["id"] for c in body["courts"]] == [court.id]
