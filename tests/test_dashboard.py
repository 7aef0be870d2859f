from datetime import date, datetime, time, timedelta
from decimal import Decimal
from types import SimpleNamespace

from quickcourt.services import dashboard
from tests.factories import auth_headers, create_booking_row, create_court, create_user, create_venue

TODAY = date(2030, 5, 15)  # a Wednesday


def row(booking_date, status="confirmed", amount="400.00", start=time(10, 0)):
    return SimpleNamespace(booking_date=booking_date, status=status, total_amount=Decimal(amount), start_time=start)


def test_commission_and_net_add_up_to_revenue():
    commission, net = dashboard.split_commission(Decimal("1234.55"), 10)

    assert commission == Decimal("123.46")
    assert net == Decimal("1111.09")
    assert commission + net == Decimal("1234.55")


def test_revenue_counts_confirmed_and_completed_only():
    bookings = [row(TODAY), row(TODAY, "completed", "600.00"), row(TODAY, "cancelled", "999.00")]

    assert dashboard.total_revenue(bookings) == Decimal("1000.00")


def test_daily_trend_is_contiguous_and_zero_filled():
    trends = dashboard.booking_trends([row(TODAY), row(TODAY), row(TODAY - timedelta(days=3))], TODAY)
    daily = trends["daily"]

    assert len(daily) == 30
    assert daily[0]["date"] == (TODAY - timedelta(days=29)).isoformat()
    assert daily[-1] == {"date": TODAY.isoformat(), "bookings": 2}
    assert daily[-4]["bookings"] == 1
    assert sum(point["bookings"] for point in daily) == 3
    dates = [date.fromisoformat(point["date"]) for point in daily]
    assert all(later - earlier == timedelta(days=1) for earlier, later in zip(dates, dates[1:]))


def test_weekly_and_monthly_windows_start_on_period_boundaries():
    trends = dashboard.booking_trends([row(date(2030, 5, 13)), row(date(2030, 1, 2), "cancelled")], TODAY)

    weekly = trends["weekly"]
    assert len(weekly) == 12
    assert weekly[-1] == {"week": "2030-W20", "date": "2030-05-13", "bookings": 1}
    assert all(date.fromisoformat(w["date"]).weekday() == 0 for w in weekly)

    monthly = trends["monthly"]
    assert len(monthly) == 12
    assert monthly[0]["month"] == "2029-06"
    assert monthly[-1] == {"month": "2030-05", "date": "2030-05-01", "bookings": 1}
    # Cancelled bookings are not counted
    assert next(m for m in monthly if m["month"] == "2030-01")["bookings"] == 0


def test_earnings_series_applies_commission_per_bucket():
    series = dashboard.earnings_series([row(TODAY, amount="500.00"), row(TODAY, "cancelled")], TODAY, 10)

    assert series["daily"][-1] == {
        "date": TODAY.isoformat(),
        "gross_earnings": Decimal("500.00"),
        "net_earnings": Decimal("450.00"),
    }
    assert series["daily"][0]["gross_earnings"] == Decimal("0.00")
    assert series["monthly"][-1]["gross_earnings"] == Decimal("500.00")


def test_peak_hours_cover_the_whole_day():
    hours = dashboard.peak_hours([row(TODAY, start=time(18, 0)), row(TODAY, start=time(18, 0)),
                                  row(TODAY, "cancelled", start=time(7, 0))])

    assert len(hours) == 24
    assert hours[18] == {"hour": "18:00", "bookings": 2}
    assert hours[7]["bookings"] == 0


def test_owner_stats(db, owner, player, court):
    now = datetime(2030, 5, 15, 12, 0)
    create_booking_row(db, player, court, date(2030, 5, 10), time(10, 0), number_of_slots=2)  # 800
    create_booking_row(db, player, court, date(2030, 5, 16), time(10, 0))  # 400, upcoming
    create_booking_row(db, player, court, date(2030, 5, 15), time(18, 0), status="cancelled")

    stats = dashboard.owner_stats(db, owner, now=now)

    assert stats["venues"] == {"total": 1, "approved": 1, "pending": 0, "rejected": 0}
    assert stats["bookings"]["total"] == 3
    assert stats["bookings"]["completed"] == 1
    assert stats["bookings"]["upcoming"] == 1
    assert stats["bookings"]["cancelled"] == 1
    assert stats["bookings"]["today"] == 0
    assert stats["courts"]["total_active"] == 1
    assert stats["earnings"]["total_revenue"] == Decimal("1200.00")
    assert stats["earnings"]["admin_commission"] == Decimal("120.00")
    assert stats["earnings"]["net_earnings"] == Decimal("1080.00")


def test_owner_only_sees_own_venues(db, owner, player):
    other_owner = create_user(db, "other-owner")
    other_court = create_court(db, create_venue(db, other_owner))
    create_booking_row(db, player, other_court, date(2030, 5, 10), time(10, 0))

    stats = dashboard.owner_stats(db, owner, now=datetime(2030, 5, 15, 12, 0))
    assert stats["bookings"]["total"] == 0
    assert stats["earnings"]["total_revenue"] == Decimal("0.00")


def test_owner_charts_endpoint(client, owner, player):
    response = client.get("/bookings/owner/charts", headers=auth_headers(owner))

    assert response.status_code == 200
    body = response.json()
    assert len(body["booking_trends"]["daily"]) == 30
    assert len(body["booking_trends"]["weekly"]) == 12
    assert len(body["earnings"]["monthly"]) == 12
    assert len(body["peak_hours"]) == 24
    assert client.get("/bookings/owner/charts", headers=auth_headers(player)).status_code == 403


def test_admin_stats_endpoint(client, db, admin, player, court):
    create_booking_row(db, player, court, date.today() - timedelta(days=1), time(10, 0))

    body = client.get("/admin/stats", headers=auth_headers(admin)).json()

    assert body["venues"]["approved"] == 1
    assert body["users"]["players"] == 1
    assert body["bookings"]["completed"] == 1
    assert float(body["earnings"]["platform_earnings"]) == 40.0
    assert len(body["charts"]["daily_bookings"]) == 30


def test_user_stats_endpoint(client, db, player, court):
    create_booking_row(db, player, court, date.today() - timedelta(days=2), time(10, 0))
    create_booking_row(db, player, court, date.today() + timedelta(days=2), time(10, 0))

    body = client.get("/bookings/user/stats", headers=auth_headers(player)).json()

    assert body["total_bookings"] == 2
    assert body["completed"] == 1
    assert body["upcoming"] == 1
    assert body["venues_visited"] == 1
    assert float(body["total_amount_spent"]) == 800.0
    assert len(body["recent_bookings"]) == 2
