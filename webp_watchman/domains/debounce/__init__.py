"""
Debounce Domain

Collapses bursts of filesystem events into one settled dispatch per path.
"""

from webp_watchman.domains.debounce.dispatcher import DebounceDispatcher, PendingTimer

__all__ = ["DebounceDispatcher", "PendingTimer"]
