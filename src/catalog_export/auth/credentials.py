"""Credential providers for the catalog API client."""

from __future__ import annotations

import base64
import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, TYPE_CHECKING

from jose import jwt, JWTError

from ..errors import ConfigError

if TYPE_CHECKING:
    from .config import AuthConfig

logger = logging.getLogger(__name__)


class AuthMethod(str, Enum):
    """Authentication method used against the catalog service."""
    BASIC = "basic"
    BEARER = "bearer"


class Credentials(ABC):
    """Base class for credential providers."""

    @property
    @abstractmethod
    def method(self) -> AuthMethod:
        """Return the authentication method these credentials use."""
        ...

    @abstractmethod
    def headers(self) -> dict[str, str]:
        """Return the request headers that carry the credentials."""
        ...

    @abstractmethod
    def describe(self) -> str:
        """Human-readable description without secrets."""
        ...


@dataclass
class BasicCredentials(Credentials):
    """
    HTTP Basic credentials.

    Every request carries ``Authorization: Basic base64(username:password)``.
    """
    username: str
    password: str

    @property
    def method(self) -> AuthMethod:
        return AuthMethod.BASIC

    def headers(self) -> dict[str, str]:
        raw = f"{self.username}:{self.password}".encode("utf-8")
        return {"Authorization": f"Basic {base64.b64encode(raw).decode('ascii')}"}

    def describe(self) -> str:
        return f"basic auth as {self.username}"


@dataclass
class BearerTokenCredentials(Credentials):
    """
    Bearer token credentials.

    When the token is a JWT its claims are read (without signature
    verification - the catalog service does that) to report the subject
    and expiry. Opaque tokens are sent as-is.
    """
    token: str
    _claims: dict[str, Any] = field(default_factory=dict, init=False, repr=False)

    def __post_init__(self) -> None:
        try:
            self._claims = jwt.get_unverified_claims(self.token)
        except JWTError:
            logger.debug("Bearer token is not a JWT, using it as an opaque token")
            return

        if self.is_expired():
            logger.warning(f"Bearer token for {self.subject or 'unknown subject'} has expired")

    @property
    def method(self) -> AuthMethod:
        return AuthMethod.BEARER

    @property
    def subject(self) -> str | None:
        return self._claims.get("sub")

    @property
    def expires_at(self) -> float | None:
        exp = self._claims.get("exp")
        return float(exp) if exp is not None else None

    def is_expired(self, now: float | None = None) -> bool:
        if self.expires_at is None:
            return False
        return (now if now is not None else time.time()) >= self.expires_at

    def headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}

    def describe(self) -> str:
        if self.subject:
            return f"bearer token for {self.subject}"
        return "bearer token"


def create_credentials(config: AuthConfig) -> Credentials:
    """Create credentials from configuration."""
    try:
        method = AuthMethod(config.method.lower())
    except ValueError:
        raise ConfigError(f"Unknown auth method '{config.method}'") from None

    if method is AuthMethod.BASIC:
        if not config.basic.username or config.basic.password is None:
            raise ConfigError("Basic auth requires a username and password")
        return BasicCredentials(username=config.basic.username, password=config.basic.password)

    if not config.bearer.token:
        raise ConfigError("Bearer auth requires a token")
    return BearerTokenCredentials(token=config.bearer.token)
