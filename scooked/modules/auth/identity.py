"""
Identity providers.

This module follows Black Box Design principles:
- Implements the IdentityProvider protocol
- Accepts configuration via dependency injection
- No direct environment variable access
"""

import logging
import uuid
from typing import Optional

import jwt

from ...errors import AuthUnavailable

logger = logging.getLogger(__name__)


class TokenIdentityProvider:
    """
    Resolves identity from a pre-issued signed token.

    The token is an HS256 JWT whose ``sub`` claim is the identity.
    """

    method = "token"

    def __init__(self, token: str, secret: Optional[str]):
        """
        Initialize token provider.

        Args:
            token: Signed token, with or without Bearer prefix
            secret: Shared secret used to verify the signature
        """
        self.token = token[7:] if token.startswith("Bearer ") else token
        self.secret = secret

    async def resolve(self) -> str:
        if not self.secret:
            raise AuthUnavailable("Token auth requires AUTH_TOKEN_SECRET to verify the token")

        try:
            claims = jwt.decode(
                self.token,
                self.secret,
                algorithms=["HS256"],
                options={"require": ["sub"], "verify_exp": True},
            )
        except jwt.ExpiredSignatureError as e:
            raise AuthUnavailable("Initial auth token expired") from e
        except jwt.InvalidTokenError as e:
            raise AuthUnavailable(f"Invalid initial auth token: {e}") from e

        identity = str(claims["sub"]).strip()
        if not identity:
            raise AuthUnavailable("Initial auth token has an empty subject")
        logger.info("Initial token auth succeeded")
        return identity


class AnonymousIdentityProvider:
    """
    Anonymous sign-in.

    Returns the pre-provisioned identity when one is configured; otherwise a
    fresh UUID that stays fixed for the lifetime of this provider.
    """

    method = "anonymous"

    def __init__(self, identity: Optional[str] = None):
        self._identity = identity

    async def resolve(self) -> str:
        if not self._identity:
            self._identity = str(uuid.uuid4())
            logger.info("Signed in anonymously with a generated identity")
        return self._identity


class UnavailableIdentityProvider:
    """Provider used when no identity source is configured."""

    method = "none"

    def __init__(self, reason: str = "No identity source configured"):
        self.reason = reason

    async def resolve(self) -> str:
        raise AuthUnavailable(self.reason)
