"""
Identity Factory following Black Box Design principles.

This factory:
- Picks the identity source based on configuration
- Returns only the IdentityProvider interface
"""

import logging

from ...config.provider import AuthConfig
from .identity import AnonymousIdentityProvider, TokenIdentityProvider, UnavailableIdentityProvider
from .interfaces import IdentityProvider

logger = logging.getLogger(__name__)


class IdentityFactory:
    """Composition root for identity resolution."""

    @staticmethod
    def build(auth_config: AuthConfig) -> IdentityProvider:
        """
        Build the identity provider.

        Precedence: an initial token, then anonymous sign-in, then nothing.

        Args:
            auth_config: Identity configuration

        Returns:
            IdentityProvider implementation
        """
        if auth_config.initial_token:
            logger.info("Using initial token identity")
            return TokenIdentityProvider(auth_config.initial_token, auth_config.token_secret)

        if auth_config.anonymous_enabled:
            logger.info("Using anonymous identity")
            return AnonymousIdentityProvider(auth_config.identity)

        logger.warning("No identity source configured; remote sync disabled")
        return UnavailableIdentityProvider()
