"""
Conversion Domain

Turns settled WebP paths into PNG files:
- filters.py - which paths qualify and where output goes
- converter.py - Pillow decode/encode and the settled-path service
- notifier.py - best-effort desktop notifications
"""

__all__ = ["converter", "filters", "notifier"]
