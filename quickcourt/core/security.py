import logging
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from quickcourt.core.core import allowed_roles
from quickcourt.core.exceptions import AuthenticationError, AuthorizationError
from quickcourt.core.identity_provider import IdentityClaims, identity_provider
from quickcourt.database import get_db
from quickcourt.models.enums import UserRole
from quickcourt.models.user import User

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def get_token_claims(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> IdentityClaims:
    if credentials is None:
        raise AuthenticationError("Access token required")
    return identity_provider.verify(credentials.credentials)


def get_or_create_user(db: Session, claims: IdentityClaims, role: UserRole = UserRole.USER) -> User:
    """
    Loads the user behind the token, creating it on first sight.

    Two first requests racing for the same identity both try to insert; the
    loser re-reads the row the winner created.
    """
    user = db.query(User).filter(User.external_id == claims.subject).first()
    if user:
        return user

    user = User(
        external_id=claims.subject,
        email=claims.email,
        first_name=claims.first_name,
        last_name=claims.last_name,
        avatar_url=claims.avatar_url,
        role=role.value,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        user = db.query(User).filter(User.external_id == claims.subject).first()
        if user is None:
            raise AuthenticationError("Email already linked to another account")
        return user
    db.refresh(user)
    logger.info(f"Created user {user.id} for identity {claims.subject}")
    return user


def get_current_user(
    claims: IdentityClaims = Depends(get_token_claims),
    db: Session = Depends(get_db),
) -> User:
    user = get_or_create_user(db, claims)
    if not user.is_active:
        raise AuthorizationError("Account is deactivated")
    return user


def get_current_user_optional(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> Optional[User]:
    """
    Same as get_current_user but returns None for anonymous visitors.
    Useful for public endpoints that show more to authenticated callers.
    """
    if credentials is None:
        return None
    try:
        claims = identity_provider.verify(credentials.credentials)
    except AuthenticationError:
        return None
    user = db.query(User).filter(User.external_id == claims.subject).first()
    if user is None or not user.is_active:
        return None
    return user


def require_roles(*roles: UserRole):
    def dependency(current_user: User = Depends(get_current_user)) -> User:
        if not allowed_roles(current_user, list(roles)):
            raise AuthorizationError(
                f"This action requires one of the roles: {', '.join(r.value for r in roles)}"
            )
        return current_user

    return dependency
