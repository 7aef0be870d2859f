# quickcourt/core/identity_provider.py
import logging
import threading
from dataclasses import dataclass
from typing import Optional

import requests
from jose import JWTError, jwt

from quickcourt.config import settings
from quickcourt.core.exceptions import AuthenticationError
from quickcourt.core.upstream import call_with_retry

logger = logging.getLogger(__name__)


@dataclass
class IdentityClaims:
    subject: str
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    avatar_url: Optional[str] = None


def _find_key(jwks: dict, kid: Optional[str]) -> Optional[dict]:
    for key in jwks.get("keys", []):
        if key.get("kid") == kid:
            return key
    return None


class IdentityProviderClient:
    """Verifies access tokens issued by the external identity provider."""

    def __init__(self):
        self._jwks = None
        self._lock = threading.Lock()

    def _fetch_jwks(self) -> dict:
        def fetch():
            response = requests.get(settings.IDP_JWKS_URL, timeout=settings.UPSTREAM_TIMEOUT_SECONDS)
            response.raise_for_status()
            return response.json()

        return call_with_retry(fetch, "JWKS fetch", retry_on=(requests.RequestException,))

    def _signing_key(self, token: str):
        if not settings.IDP_JWKS_URL:
            return settings.IDP_JWT_SECRET

        kid = jwt.get_unverified_header(token).get("kid")
        with self._lock:
            if self._jwks is None:
                self._jwks = self._fetch_jwks()
                logger.info("Loaded signing keys from identity provider")
            key = _find_key(self._jwks, kid)
            if key is None:
                # The provider may have rotated its keys since the last fetch
                self._jwks = self._fetch_jwks()
                logger.info(f"Reloaded signing keys from identity provider for kid {kid}")
                key = _find_key(self._jwks, kid)

        if key is None:
            raise AuthenticationError("Unknown token signing key")
        return key

    def verify(self, token: str) -> IdentityClaims:
        try:
            key = self._signing_key(token)
            options = {"verify_aud": settings.IDP_AUDIENCE is not None}
            payload = jwt.decode(
                token,
                key,
                algorithms=settings.jwt_algorithms,
                audience=settings.IDP_AUDIENCE,
                issuer=settings.IDP_ISSUER,
                options=options,
            )
        except JWTError as e:
            logger.info(f"Rejected access token: {e}")
            raise AuthenticationError("Invalid or expired token")

        subject = payload.get("sub")
        email = payload.get("email")
        if not subject or not email:
            raise AuthenticationError("Token is missing required claims")

        return IdentityClaims(
            subject=subject,
            email=email.lower(),
            first_name=payload.get("first_name") or payload.get("given_name"),
            last_name=payload.get("last_name") or payload.get("family_name"),
            avatar_url=payload.get("picture"),
        )


identity_provider = IdentityProviderClient()
