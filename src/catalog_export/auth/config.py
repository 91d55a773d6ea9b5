"""Authentication configuration dataclasses."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class BasicAuthConfig:
    """Username/password credentials sent as HTTP Basic auth."""
    username: str | None = None
    password: str | None = None


@dataclass
class BearerTokenConfig:
    """Pre-issued access token (JWT or opaque) sent as a Bearer header."""
    token: str | None = None


@dataclass
class AuthConfig:
    """Main authentication configuration."""
    method: str = "basic"  # "basic" or "bearer"

    basic: BasicAuthConfig = field(default_factory=BasicAuthConfig)
    bearer: BearerTokenConfig = field(default_factory=BearerTokenConfig)

    @classmethod
    def from_dict(cls, data: dict) -> AuthConfig:
        """Create config from dictionary."""
        basic_data = data.get("basic", {})
        bearer_data = data.get("bearer", {})

        return cls(
            method=data.get("method", "basic"),
            basic=BasicAuthConfig(**basic_data),
            bearer=BearerTokenConfig(**bearer_data),
        )
