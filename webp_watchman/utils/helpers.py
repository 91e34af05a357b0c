"""
Helper utilities for WebP Watchman.

Common functions used across domains.
"""

from pathlib import Path


def normalise_path(path: Path) -> Path:
    """Return a resolved version of ``path`` without forcing existence."""

    try:
        return path.expanduser().resolve()
    except FileNotFoundError:
        return path.expanduser().absolute()


def format_bytes(bytes_count: int) -> str:
    """Format bytes as human-readable string."""
    for unit in ['B', 'KB', 'MB', 'GB', 'TB']:
        if bytes_count < 1024.0:
            return f"{bytes_count:.1f} {unit}"
        bytes_count /= 1024.0
    return f"{bytes_count:.1f} PB"
