"""Identity interfaces following Black Box Design principles."""
from typing import Protocol


class IdentityProvider(Protocol):
    """Protocol for identity sources - allows swappable implementations."""

    method: str

    async def resolve(self) -> str:
        """
        Resolve the identity of the current user.

        Returns:
            Opaque, stable identity string

        Raises:
            AuthUnavailable: If no identity can be obtained
        """
        ...
