"""
NoteShare Backend — Identity Provider Adapter
===============================================

What:  Turns the hosted identity provider's access tokens into a Principal.
How:   Tokens are HS256 JWTs signed with the project secret. `sub` is the
       user id, `email` the address, `user_metadata.username` an optional
       display name. python-jose verifies signature, expiry and audience.
Who:   Route handlers depend on `get_current_principal`; sign-out uses
       `get_auth_session`.

Session model:
    There is no ambient "current user". Each request builds an AuthSession,
    resolves the bearer token into it (init) and passes it down explicitly.
    `sign_out()` (teardown) revokes the token with the provider and clears
    the principal, so later requests carrying the same token get a 401.

    Revocations are held in process memory until the revoked token expires.
"""

import hashlib
import logging
import time
import uuid
from typing import Dict, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from pydantic import BaseModel

from noteshare.config import settings
from noteshare.exceptions import AuthenticationError

logger = logging.getLogger(__name__)


class Principal(BaseModel):
    """The authenticated user performing an action."""
    id: uuid.UUID
    email: Optional[str] = None
    username: Optional[str] = None

    @property
    def display_name(self) -> str:
        if self.username:
            return self.username
        if self.email:
            return self.email.split("@", 1)[0]
        return str(self.id)[:8]


class IdentityProvider:
    """Verifies access tokens and tracks revoked ones."""

    def __init__(self, secret: str, audience: Optional[str] = None, algorithm: str = "HS256"):
        self.secret = secret
        self.audience = audience
        self.algorithm = algorithm
        # fingerprint -> the token's exp claim (None: no expiry)
        self._revoked: Dict[str, Optional[float]] = {}

    @staticmethod
    def _fingerprint(token: str) -> str:
        return hashlib.sha256(token.encode("utf-8")).hexdigest()

    def _forget_expired(self, now: float) -> None:
        # An expired token fails decode anyway, so its revocation can go
        expired = [fp for fp, exp in self._revoked.items() if exp is not None and exp <= now]
        for fp in expired:
            del self._revoked[fp]
        if expired:
            logger.debug("Dropped %d expired revocations", len(expired))

    def verify(self, token: str) -> Principal:
        """
        Decode and validate an access token.

        Raises:
            AuthenticationError: bad signature, expired, wrong audience,
                                 malformed subject, or revoked by sign-out.
        """
        if not self.secret:
            raise AuthenticationError(
                message="Authentication is not configured on this server",
                context={"reason": "missing_secret"},
            )
        self._forget_expired(time.time())
        if self._fingerprint(token) in self._revoked:
            raise AuthenticationError(message="Session has ended. Please sign in again.")

        try:
            claims = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                audience=self.audience,
            )
        except JWTError as e:
            logger.info("Rejected access token: %s", str(e))
            raise AuthenticationError(
                message="Invalid or expired access token",
                context={"error_type": type(e).__name__},
            )

        try:
            user_id = uuid.UUID(str(claims.get("sub")))
        except ValueError:
            raise AuthenticationError(
                message="Invalid or expired access token",
                context={"reason": "bad_subject"},
            )

        metadata = claims.get("user_metadata") or {}
        return Principal(
            id=user_id,
            email=claims.get("email"),
            username=metadata.get("username"),
        )

    def revoke(self, token: str) -> None:
        """Refuse `token` from now until it expires."""
        try:
            exp = jwt.get_unverified_claims(token).get("exp")
        except JWTError:
            exp = None
        self._revoked[self._fingerprint(token)] = float(exp) if exp is not None else None
        self._forget_expired(time.time())


class AuthSession:
    """
    Per-request authentication context.

    Lifecycle:
        resolve(token)  → principal is set (or AuthenticationError)
        current_user()  → Principal | None
        sign_out()      → token revoked, principal cleared
    """

    def __init__(self, provider: IdentityProvider):
        self._provider = provider
        self._token: Optional[str] = None
        self._principal: Optional[Principal] = None

    def resolve(self, token: str) -> Principal:
        self._principal = self._provider.verify(token)
        self._token = token
        return self._principal

    def current_user(self) -> Optional[Principal]:
        return self._principal

    def sign_out(self) -> None:
        if self._token is None:
            raise AuthenticationError(message="No active session to sign out of")
        self._provider.revoke(self._token)
        logger.info("Principal %s signed out", self._principal.id if self._principal else "-")
        self._token = None
        self._principal = None


identity_provider = IdentityProvider(
    secret=settings.auth_jwt_secret,
    audience=settings.auth_jwt_audience or None,
    algorithm=settings.auth_jwt_algorithm,
)

bearer_scheme = HTTPBearer(auto_error=False)


async def get_auth_session(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> AuthSession:
    """FastAPI dependency: an AuthSession resolved from the bearer token, if any."""
    session = AuthSession(identity_provider)
    if credentials is not None:
        session.resolve(credentials.credentials)
    return session


async def get_current_principal(
    session: AuthSession = Depends(get_auth_session),
) -> Principal:
    """FastAPI dependency: the authenticated principal, or a 401."""
    principal = session.current_user()
    if principal is None:
        raise AuthenticationError()
    return principal
