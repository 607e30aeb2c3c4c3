"""
Auth Module - Black Box Interface

Purpose: Resolve the opaque identity that scopes the session record path
Interface: IdentityProvider.resolve(), IdentityFactory.build()
Hidden: Token verification, anonymous identity generation

Replaceable with any identity source that yields a stable string.
"""

from .factory import IdentityFactory
from .identity import (
    AnonymousIdentityProvider,
    TokenIdentityProvider,
    UnavailableIdentityProvider,
)
from .interfaces import IdentityProvider

__all__ = [
    "IdentityProvider",
    "IdentityFactory",
    "TokenIdentityProvider",
    "AnonymousIdentityProvider",
    "UnavailableIdentityProvider",
]
