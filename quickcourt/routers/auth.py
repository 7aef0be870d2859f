from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from quickcourt.core.core import home_route_for
from quickcourt.core.exceptions import AuthorizationError
from quickcourt.core.identity_provider import IdentityClaims
from quickcourt.core.security import get_current_user, get_or_create_user, get_token_claims
from quickcourt.database import get_db
from quickcourt.models.enums import UserRole
from quickcourt.models.user import User
from quickcourt.schemas.user import CurrentUserResponse, ProfileUpdate, UserResponse, UserSyncRequest

router = APIRouter()

@router.post("/users", response_model=CurrentUserResponse)
def sync_user(
    payload: UserSyncRequest,
    claims: IdentityClaims = Depends(get_token_claims),
    db: Session = Depends(get_db),
):
    """
    Create or refresh the local account behind an identity provider session.

    The requested role only applies when the account is created; existing
    accounts keep their role.
    """
    user = get_or_create_user(db, claims, payload.role or UserRole.USER)
    if not user.is_active:
        raise AuthorizationError("Account is deactivated")

    for field in ("first_name", "last_name", "avatar_url"):
        value = getattr(payload, field)
        if value:
            setattr(user, field, value)
    if user.email != claims.email:
        user.email = claims.email
    db.commit()
    db.refresh(user)

    return {"user": user, "home_route": home_route_for(user.role)}

@router.get("/me", response_model=CurrentUserResponse)
def read_me(current_user: User = Depends(get_current_user)):
    return {"user": current_user, "home_route": home_route_for(current_user.role)}

@router.put("/profile", response_model=UserResponse)
def update_profile(
    payload: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    for field, value in payload.model_dump(exclude_unset=True).items():
        setattr(current_user, field, value)
    db.commit()
    db.refresh(current_user)
    return current_user
