import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from quickcourt.core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from quickcourt.models.booking import Booking
from quickcourt.models.enums import BookingStatus
from quickcourt.models.review import Review
from quickcourt.models.user import User
from quickcourt.schemas.review import ReviewCreate, ReviewUpdate
from quickcourt.services.booking_service import complete_elapsed_bookings
from quickcourt.services.pagination import paginate_query
from quickcourt.services.venue_service import get_venue_or_404

logger = logging.getLogger(__name__)

MIN_RATING = 1
MAX_RATING = 5


def _validate_rating(rating: int):
    if not isinstance(rating, int) or not MIN_RATING <= rating <= MAX_RATING:
        raise ValidationError(f"Rating must be an integer between {MIN_RATING} and {MAX_RATING}")


def eligible_bookings(db: Session, user: User, venue_id: int) -> List[Booking]:
    """Completed bookings of the user at the venue that have no review yet."""
    reviewed = select(Review.booking_id).where(Review.user_id == user.id)
    return db.query(Booking).filter(
        Booking.user_id == user.id,
        Booking.venue_id == venue_id,
        Booking.status == BookingStatus.COMPLETED.value,
        ~Booking.id.in_(reviewed),
    ).order_by(Booking.booking_date.desc(), Booking.start_time.desc()).all()


def can_review(db: Session, user: User, venue_id: int, now: Optional[datetime] = None) -> dict:
    get_venue_or_404(db, venue_id)
    complete_elapsed_bookings(db, now)
    bookings = eligible_bookings(db, user, venue_id)
    if bookings:
        return {"can_review": True, "reason": None, "eligible_bookings": bookings}

    has_completed = db.query(Booking.id).filter(
        Booking.user_id == user.id,
        Booking.venue_id == venue_id,
        Booking.status == BookingStatus.COMPLETED.value,
    ).first()
    if not has_completed:
        reason = "You need a completed booking at this venue to leave a review"
    elif _has_visible_review(db, user, venue_id):
        reason = "All your completed bookings at this venue are already reviewed"
    else:
        # Withdrawn reviews still count against their booking
        reason = "You withdrew your review of this venue and cannot review the same booking again"
    return {"can_review": False, "reason": reason, "eligible_bookings": []}


def _has_visible_review(db: Session, user: User, venue_id: int) -> bool:
    return db.query(Review.id).filter(
        Review.user_id == user.id,
        Review.venue_id == venue_id,
        Review.is_active.is_(True),
    ).first() is not None


def create_review(db: Session, user: User, payload: ReviewCreate, now: Optional[datetime] = None) -> Review:
    _validate_rating(payload.rating)
    complete_elapsed_bookings(db, now)

    booking = db.query(Booking).filter(Booking.id == payload.booking_id).first()
    if not booking:
        raise NotFoundError("Booking not found")
    if booking.user_id != user.id:
        raise AuthorizationError("You can only review your own bookings")
    if booking.venue_id != payload.venue_id:
        raise ValidationError("Booking does not belong to this venue")
    if booking.status != BookingStatus.COMPLETED.value:
        raise ValidationError("You can only review completed bookings")

    existing = db.query(Review).filter(
        Review.user_id == user.id,
        Review.booking_id == booking.id,
    ).first()
    if existing:
        raise ConflictError("You have already reviewed this booking")

    review = Review(
        user_id=user.id,
        venue_id=booking.venue_id,
        booking_id=booking.id,
        rating=payload.rating,
        comment=payload.comment.strip(),
    )
    db.add(review)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("You have already reviewed this booking")

    db.refresh(review)
    logger.info(f"Review {review.id} ({review.rating}/5) added to venue {review.venue_id}")
    return review


def get_review_or_404(db: Session, review_id: int) -> Review:
    review = db.query(Review).options(joinedload(Review.user)).filter(
        Review.id == review_id,
        Review.is_active.is_(True),
    ).first()
    if not review:
        raise NotFoundError("Review not found")
    return review


def _own_review(db: Session, user: User, review_id: int) -> Review:
    review = get_review_or_404(db, review_id)
    if review.user_id != user.id:
        raise AuthorizationError("You can only modify your own reviews")
    return review


def update_review(db: Session, user: User, review_id: int, payload: ReviewUpdate) -> Review:
    review = _own_review(db, user, review_id)
    data = payload.model_dump(exclude_unset=True)
    if data.get("rating") is not None:
        _validate_rating(data["rating"])
        review.rating = data["rating"]
    if data.get("comment") is not None:
        review.comment = data["comment"].strip()
    db.commit()
    db.refresh(review)
    return review


def delete_review(db: Session, user: User, review_id: int):
    review = _own_review(db, user, review_id)
    review.is_active = False
    db.commit()
    logger.info(f"Review {review.id} removed by its author")


def rating_stats(db: Session, venue_id: int) -> dict:
    rows = db.query(Review.rating, func.count(Review.id)).filter(
        Review.venue_id == venue_id,
        Review.is_active.is_(True),
    ).group_by(Review.rating).all()

    distribution = {star: 0 for star in range(MAX_RATING, MIN_RATING - 1, -1)}
    for rating, count in rows:
        distribution[rating] = count
    total = sum(distribution.values())
    average = sum(star * count for star, count in distribution.items()) / total if total else 0.0
    return {
        "average_rating": round(average, 1),
        "total_reviews": total,
        "rating_distribution": distribution,
    }


def list_venue_reviews(db: Session, venue_id: int, page: int = 1, limit: int = 10) -> dict:
    get_venue_or_404(db, venue_id)
    query = db.query(Review).options(joinedload(Review.user)).filter(
        Review.venue_id == venue_id,
        Review.is_active.is_(True),
    ).order_by(Review.created_at.desc(), Review.id.desc())
    result = paginate_query(query, page, limit)
    result["stats"] = rating_stats(db, venue_id)
    return result


def list_user_reviews(db: Session, user: User) -> List[Review]:
    return db.query(Review).options(joinedload(Review.user)).filter(
        Review.user_id == user.id,
        Review.is_active.is_(True),
    ).order_by(Review.created_at.desc(), Review.id.desc()).all()
