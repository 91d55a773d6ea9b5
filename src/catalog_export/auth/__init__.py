"""Authentication module for the catalog API client.

Supports HTTP Basic and Bearer token (JWT or opaque) credentials.
"""

from .config import AuthConfig, BasicAuthConfig, BearerTokenConfig
from .credentials import (
    AuthMethod,
    BasicCredentials,
    BearerTokenCredentials,
    Credentials,
    create_credentials,
)

__all__ = [
    # Config
    "AuthConfig",
    "BasicAuthConfig",
    "BearerTokenConfig",
    # Credentials
    "AuthMethod",
    "Credentials",
    "BasicCredentials",
    "BearerTokenCredentials",
    "create_credentials",
]
