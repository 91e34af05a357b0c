"""
WebP Watchman

Watches folders for new WebP images and converts them to PNG:
- domains.watchers - watchdog-backed filesystem event source
- domains.debounce - per-path settle-window dispatcher
- domains.conversion - path filter, Pillow converter, desktop notifier
"""

__version__ = "1.0.0"
