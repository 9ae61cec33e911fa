"""Candidate identity, admin credential check and the explicit portal context."""

from __future__ import annotations

from dataclasses import dataclass
import hmac
import logging
from uuid import NAMESPACE_URL, uuid5

from itsdangerous import BadSignature, URLSafeSerializer

logger = logging.getLogger(__name__)

_IDENTITY_SALT = "exam-portal-identity"


class AdminRequiredError(PermissionError):
    """Raised when a catalogue operation is attempted without an admin context."""


@dataclass(slots=True, frozen=True)
class UserIdentity:
    """Stable identity of a signed-in candidate."""

    user_id: str
    display_name: str
    email: str


@dataclass(slots=True, frozen=True)
class PortalContext:
    """Who is acting: passed explicitly to every session-owning operation."""

    identity: UserIdentity | None = None
    is_admin: bool = False

    @property
    def is_authenticated(self) -> bool:
        return self.identity is not None or self.is_admin

    @property
    def role(self) -> str | None:
        if self.is_admin:
            return "admin"
        if self.identity is not None:
            return "user"
        return None


def identity_from_email(email: str, display_name: str | None = None) -> UserIdentity:
    """Build an identity whose user id is stable for the same email address."""
    normalized = email.strip().lower()
    if not normalized or "@" not in normalized:
        raise ValueError("A valid email address is required.")
    name = (display_name or "").strip() or normalized.split("@", 1)[0]
    return UserIdentity(
        user_id=uuid5(NAMESPACE_URL, f"mailto:{normalized}").hex,
        display_name=name,
        email=normalized,
    )


class IdentityCookieCodec:
    """Signs identities into cookie values and reads them back."""

    def __init__(self, secret_key: str) -> None:
        self._serializer = URLSafeSerializer(secret_key, salt=_IDENTITY_SALT)

    def encode(self, identity: UserIdentity) -> str:
        return self._serializer.dumps(
            {"uid": identity.user_id, "name": identity.display_name, "email": identity.email}
        )

    def decode(self, value: str | None) -> UserIdentity | None:
        if not value:
            return None
        try:
            payload = self._serializer.loads(value)
        except BadSignature:
            logger.warning("Ignoring identity cookie with an invalid signature")
            return None
        try:
            return UserIdentity(
                user_id=str(payload["uid"]),
                display_name=str(payload["name"]),
                email=str(payload["email"]),
            )
        except (KeyError, TypeError):
            return None


class AdminCredentials:
    """Static-credential check against the two configured admin secrets."""

    def __init__(self, username: str, password: str) -> None:
        self._username = username
        self._password = password

    @property
    def configured(self) -> bool:
        return bool(self._username and self._password)

    def check(self, username: str, password: str) -> bool:
        if not self.configured:
            logger.error("Admin credentials are not configured; refusing admin login")
            return False
        user_ok = hmac.compare_digest(username.strip().encode(), self._username.encode())
        pass_ok = hmac.compare_digest(password.encode(), self._password.encode())
        return user_ok and pass_ok
