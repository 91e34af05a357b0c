#!/usr/bin/env python3
"""
WebP Watchman - Main entry point

Watches download folders for new WebP images and converts each one to a
PNG next to it once the file has stopped changing.
"""

from __future__ import annotations

import argparse
import signal
import sys
import threading
from pathlib import Path
from typing import Optional

from loguru import logger

from webp_watchman.domains.conversion.converter import ConversionService
from webp_watchman.domains.conversion.notifier import DesktopNotifier
from webp_watchman.domains.debounce.dispatcher import DebounceDispatcher
from webp_watchman.domains.watchers.filesystem import FileSystemEventSource
from webp_watchman.utils.config import Settings, get_settings
from webp_watchman.utils.helpers import normalise_path

LOG_FORMAT = "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"


def configure_logging(level: str = "INFO", log_file: Optional[Path] = None) -> None:
    """Replace loguru's default sink with the application sinks."""
    logger.remove()
    logger.add(sys.stdout, format=LOG_FORMAT, level=level.upper())

    if log_file:
        logger.add(
            log_file,
            format=LOG_FORMAT,
            level=level.upper(),
            rotation="10 MB",
            retention=5,
            encoding="utf-8",
        )


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse CLI arguments."""

    parser = argparse.ArgumentParser(
        prog="webp-watchman",
        description="Convert new WebP images in watched folders to PNG.",
    )
    parser.add_argument(
        "--watch",
        type=Path,
        action="append",
        default=[],
        help="Directory to watch (can be repeated; replaces the configured roots).",
    )
    parser.add_argument(
        "--settle",
        type=float,
        default=None,
        help="Seconds a file must stay quiet before it is converted.",
    )
    parser.add_argument(
        "--max-wait",
        type=float,
        default=None,
        help="Convert after this many seconds even if events keep arriving.",
    )
    parser.add_argument(
        "--polling",
        action="store_true",
        help="Use the polling observer instead of native filesystem events.",
    )
    parser.add_argument(
        "--recursive",
        action="store_true",
        help="Also watch sub-directories of each root.",
    )
    parser.add_argument(
        "--no-notify",
        action="store_true",
        help="Disable desktop notifications.",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Log level (DEBUG, INFO, WARNING, ...).",
    )
    parser.add_argument(
        "--convert",
        type=Path,
        nargs="+",
        default=None,
        metavar="PATH",
        help="Convert the given files once and exit.",
    )

    return parser.parse_args(argv)


def apply_overrides(settings: Settings, args: argparse.Namespace) -> Settings:
    """Return a copy of ``settings`` with CLI options applied."""
    update = {}

    if args.settle is not None:
        update["settle_window"] = args.settle
    if args.max_wait is not None:
        update["max_wait"] = args.max_wait
    if args.polling:
        update["use_polling"] = True
    if args.recursive:
        update["recursive"] = True
    if args.no_notify:
        update["notifications_enabled"] = False
    if args.log_level:
        update["log_level"] = args.log_level

    return settings.model_copy(update=update)


def build_service(settings: Settings) -> ConversionService:
    """Create the conversion service used for settled paths."""
    notifier = DesktopNotifier(
        enabled=settings.notifications_enabled,
        icon=settings.notification_icon,
    )
    return ConversionService(notifier=notifier)


def resolve_roots(settings: Settings, args: argparse.Namespace) -> list[Path]:
    """
    Determine the directories to watch.

    Raises:
        RuntimeError: If the home directory cannot be resolved
    """
    roots = args.watch or settings.get_watch_roots()
    return [normalise_path(root) for root in roots]


def convert_once(service: ConversionService, paths: list[Path]) -> int:
    """Convert ``paths`` immediately, returning a process exit code."""
    results = [service.process(path) for path in paths]
    failed = [result for result in results if not result.ok]

    if failed:
        logger.error(f"{len(failed)} of {len(results)} conversion(s) failed")
        return 1
    return 0


def watch(settings: Settings, roots: list[Path], service: ConversionService) -> int:
    """Run the watcher until SIGINT or SIGTERM."""
    try:
        dispatcher = DebounceDispatcher(
            service.process,
            settings.settle_window,
            max_wait=settings.max_wait,
        )
    except ValueError as e:
        logger.error(f"Invalid debounce settings: {e}")
        return 1

    try:
        source = FileSystemEventSource(
            recursive=settings.recursive,
            use_polling=settings.use_polling,
            poll_interval=settings.poll_interval,
        )
        source.start()
    except Exception as e:
        logger.error(f"Failed to create file system watcher: {e}")
        return 1

    for root in roots:
        source.add(root)

    if not source.roots:
        logger.warning("No directories are being watched")

    consumer = threading.Thread(target=dispatcher.run, args=(source,), name="debounce-dispatcher", daemon=True)
    consumer.start()

    stop_event = threading.Event()

    def _signal_handler(signum, frame):  # noqa: D401
        logger.info(f"Received signal {signum}, shutting down.")
        stop_event.set()

    signal.signal(signal.SIGINT, _signal_handler)
    signal.signal(signal.SIGTERM, _signal_handler)

    logger.success("WebP Converter online; press CTRL+C to exit")

    try:
        while not stop_event.is_set():
            stop_event.wait(1.0)
    finally:
        source.close()
        consumer.join()
        dispatcher.shutdown()

    logger.info("WebP Watchman stopped.")
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """Entry point for the CLI."""

    args = parse_args(argv)
    settings = apply_overrides(get_settings(), args)
    try:
        configure_logging(settings.log_level, settings.log_file)
    except ValueError as e:
        logger.remove()
        logger.add(sys.stderr, format=LOG_FORMAT, level="ERROR")
        logger.error(f"Invalid log level {settings.log_level!r}: {e}")
        return 1

    service = build_service(settings)

    if args.convert:
        return convert_once(service, args.convert)

    logger.info("WebP Watchman - WebP to PNG converter")

    try:
        roots = resolve_roots(settings, args)
    except RuntimeError as e:
        logger.error(f"Unable to find home directory: {e}")
        return 1

    if not roots:
        logger.error("No directories configured to watch.")
        return 1

    return watch(settings, roots, service)


if __name__ == "__main__":  # pragma: no cover - CLI bridge
    sys.exit(main())
