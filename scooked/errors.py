"""
Scooked error taxonomy.

None of these is fatal to the process: each one degrades the service to a
local-only timer and ends in a logged, user-visible status line.
"""


class ScookedError(Exception):
    """Base class for all scooked errors."""


class PersistenceError(ScookedError):
    """A write or clear of the session record failed."""


class SubscriptionError(ScookedError):
    """The push channel for session record changes broke. Terminal."""


class AuthUnavailable(ScookedError):
    """No identity could be obtained; remote sync is disabled."""
