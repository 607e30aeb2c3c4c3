"""
Scooked - Synchronized Session Timer

A timed session whose authoritative end time lives in a remote document
store and is mirrored in real time to every client observing it.

Architecture:
- Each module is self-contained with clear interfaces
- Modules are completely replaceable
- No module knows the internals of another
- All communication through defined interfaces

Modules:
- clock: Wall clock, cooperative sleep and tick loop
- retry: Bounded exponential backoff for remote writes
- store: Session record persistence and change notifications
- session: Session lifecycle management (the core)
- auth: Identity resolution
- storage: Redis connection lifecycle
- api: Presentation adapter and HTTP models
"""

__version__ = "1.0.0"
