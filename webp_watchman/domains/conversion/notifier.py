"""
Desktop notifications for finished conversions.

Shells out to the platform notification tool. Delivery is best-effort:
callers catch ``NotifyError`` and carry on.
"""

import subprocess
import sys
from pathlib import Path
from typing import Optional

from loguru import logger

from webp_watchman.models.errors import NotifyError

DEFAULT_TITLE = "WebP Converter"


class DesktopNotifier:
    """Sends desktop notifications via notify-send or osascript."""

    def __init__(self, enabled: bool = True, icon: Optional[Path] = None, timeout: float = 5.0):
        """
        Initialize notifier.

        Args:
            enabled: When False, ``notify`` does nothing. Forced off, with a
                single warning, on platforms without a notification tool
            icon: Optional icon shown with the notification (Linux only)
            timeout: Seconds to wait for the notification command
        """
        self.enabled = enabled
        if enabled and not supported_platform():
            logger.warning(f"Desktop notifications are not supported on {sys.platform}; disabling them")
            self.enabled = False
        self.icon = icon
        self.timeout = timeout

    def build_command(self, title: str, message: str) -> list[str]:
        """
        Build the platform notification command.

        Raises:
            NotifyError: If the platform has no supported notification tool
        """
        if sys.platform.startswith("linux"):
            command = ["notify-send", "--app-name", DEFAULT_TITLE]
            if self.icon:
                command += ["--icon", str(self.icon)]
            return command + [title, message]

        if sys.platform == "darwin":
            script = f"display notification {_quote(message)} with title {_quote(title)}"
            return ["osascript", "-e", script]

        raise NotifyError(f"Notifications are not supported on {sys.platform}")

    def notify(self, title: str, message: str) -> None:
        """
        Show a notification.

        Raises:
            NotifyError: If the notification command is missing or fails
        """
        if not self.enabled:
            return

        command = self.build_command(title, message)

        try:
            result = subprocess.run(command, capture_output=True, text=True, timeout=self.timeout)
        except (OSError, subprocess.TimeoutExpired) as e:
            raise NotifyError(f"{command[0]} failed: {e}") from e

        if result.returncode != 0:
            raise NotifyError(f"{command[0]} exited with {result.returncode}: {result.stderr.strip()}")

        logger.debug(f"Notification sent: {title} - {message}")


def supported_platform() -> bool:
    """Whether this platform has a notification tool ``build_command`` knows."""
    return sys.platform.startswith("linux") or sys.platform == "darwin"


def _quote(text: str) -> str:
    """Quote a string for AppleScript."""
    return '"' + text.replace("\\", "\\\\").replace('"', '\\"') + '"'
