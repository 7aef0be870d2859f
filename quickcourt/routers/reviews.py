from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List

from quickcourt.core.security import get_current_user
from quickcourt.database import get_db
from quickcourt.models.user import User
from quickcourt.schemas.review import (
    CanReviewResponse,
    ReviewCreate,
    ReviewResponse,
    ReviewUpdate,
    VenueReviewsResponse,
)
from quickcourt.services import review_service

router = APIRouter()

@router.post("", response_model=ReviewResponse, status_code=status.HTTP_201_CREATED)
def create_review(
    payload: ReviewCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return review_service.create_review(db, current_user, payload)

@router.get("/my", response_model=List[ReviewResponse])
def my_reviews(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return review_service.list_user_reviews(db, current_user)

@router.get("/venue/{venue_id}", response_model=VenueReviewsResponse)
def venue_reviews(
    venue_id: int,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=50),
    db: Session = Depends(get_db),
):
    result = review_service.list_venue_reviews(db, venue_id, page, limit)
    return VenueReviewsResponse(
        reviews=result["items"],
        stats=result["stats"],
        total=result["total"],
        page=result["page"],
        limit=result["limit"],
        total_pages=result["total_pages"],
    )

@router.get("/can-review/{venue_id}", response_model=CanReviewResponse)
def can_review(
    venue_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return review_service.can_review(db, current_user, venue_id)

@router.get("/{review_id}", response_model=ReviewResponse)
def get_review(review_id: int, db: Session = Depends(get_db)):
    return review_service.get_review_or_404(db, review_id)

@router.put("/{review_id}", response_model=ReviewResponse)
def update_review(
    review_id: int,
    payload: ReviewUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return review_service.update_review(db, current_user, review_id, payload)

@router.delete("/{review_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_review(
    review_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    review_service.delete_review(db, current_user, review_id)
    return None
