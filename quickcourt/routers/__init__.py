from . import auth, venues, courts, bookings, reviews, admin, upload

__all__ = ["auth", "venues", "courts", "bookings", "reviews", "admin", "upload"]
