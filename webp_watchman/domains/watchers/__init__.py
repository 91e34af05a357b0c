"""
Watchers Domain

Filesystem event sources feeding the debounce dispatcher.
"""

__all__ = ["filesystem"]
