"""
Retry Module - Black Box Interface

Purpose: Re-run fallible remote writes with bounded exponential backoff
Interface: RetryExecutor.run()
Hidden: Attempt counting, delay scheduling

Backoff waits are cooperative suspends on the injected clock, never blocking.
"""

from .retry import RetryExecutor

__all__ = ["RetryExecutor"]
