"""
Clock Module - Black Box Interface

Purpose: Provide wall-clock time and tick scheduling
Interface: Clock.now_ms(), Clock.sleep(), TickLoop.start(), TickLoop.cancel()
Hidden: Event loop scheduling, task bookkeeping

Replaceable with a manual clock for deterministic tests.
"""

from .clock import Clock, SystemClock, TickLoop

__all__ = ["Clock", "SystemClock", "TickLoop"]
