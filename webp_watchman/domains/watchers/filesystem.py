"""
File system event source for the conversion pipeline.

Monitors the watched roots and turns watchdog notifications into
``RawEvent`` items on a closable queue. Transport errors travel on the
same queue so the consumer sees them in arrival order.
"""

import queue
from pathlib import Path
from typing import Iterator, Optional, Union

from loguru import logger
from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer
from watchdog.observers.polling import PollingObserver

from webp_watchman.models.errors import TransportError
from webp_watchman.models.schemas import EventKind, RawEvent

_CLOSED = object()


class QueueEventSource:
    """Closable stream of raw events and transport errors."""

    def __init__(self):
        self._queue: "queue.Queue[object]" = queue.Queue()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def publish(self, event: RawEvent) -> None:
        """Queue a filesystem event."""
        if not self._closed:
            self._queue.put(event)

    def report(self, error: TransportError) -> None:
        """Queue a transport error."""
        if not self._closed:
            self._queue.put(error)

    def close(self) -> None:
        """End the stream; consumers stop after draining queued items."""
        if self._closed:
            return
        self._closed = True
        self._queue.put(_CLOSED)

    def __iter__(self) -> Iterator[Union[RawEvent, TransportError]]:
        while True:
            item = self._queue.get()
            if item is _CLOSED:
                return
            yield item


class ConversionEventHandler(FileSystemEventHandler):
    """Translates watchdog file events into raw events."""

    def __init__(self, source: QueueEventSource):
        """
        Initialize event handler.

        Args:
            source: Stream receiving translated events
        """
        super().__init__()
        self.source = source

    def dispatch(self, event: FileSystemEvent) -> None:
        """Translate ``event``, reporting failures instead of raising."""
        try:
            super().dispatch(event)
        except Exception as e:
            self.source.report(TransportError(f"Failed to handle {event!r}: {e}"))

    def _publish(self, path: Union[str, bytes], kind: EventKind) -> None:
        if isinstance(path, bytes):
            path = path.decode()
        self.source.publish(RawEvent(path=path, kind=kind))

    def on_created(self, event: FileSystemEvent):
        """Handle file creation."""
        if event.is_directory:
            return
        self._publish(event.src_path, EventKind.CREATED)

    def on_modified(self, event: FileSystemEvent):
        """Handle file modification."""
        # Skip directory modifications (too noisy)
        if event.is_directory:
            return
        self._publish(event.src_path, EventKind.WRITTEN)

    def on_moved(self, event: FileSystemEvent):
        """Handle rename; downloads usually appear under their final name this way."""
        if event.is_directory:
            return
        self._publish(event.src_path, EventKind.OTHER)
        self._publish(event.dest_path, EventKind.CREATED)

    def on_deleted(self, event: FileSystemEvent):
        """Handle file deletion."""
        if event.is_directory:
            return
        self._publish(event.src_path, EventKind.OTHER)


class FileSystemEventSource(QueueEventSource):
    """Event source backed by a watchdog observer."""

    def __init__(self, recursive: bool = False, use_polling: bool = False, poll_interval: float = 1.0):
        """
        Initialize file system event source.

        Args:
            recursive: Watch sub-directories of each root
            use_polling: Use the polling observer instead of native OS events
            poll_interval: Seconds between polls when polling
        """
        super().__init__()
        self.recursive = recursive
        self.handler = ConversionEventHandler(self)

        if use_polling:
            self.observer = PollingObserver(timeout=poll_interval)
        else:
            self.observer = Observer()
        self.observer.daemon = True

        self.roots: list[Path] = []

    def add(self, root: Path) -> bool:
        """
        Start watching ``root``.

        Call after ``start`` so emitter failures surface here instead of
        aborting the whole observer.

        Returns:
            True if the root is watched, False if scheduling failed
        """
        if not root.is_dir():
            logger.error(f"Failed to watch {root}: not a directory")
            return False

        try:
            self.observer.schedule(self.handler, str(root), recursive=self.recursive)
        except Exception as e:
            logger.error(f"Failed to watch {root}: {e}")
            return False

        self.roots.append(root)
        logger.success(f"Started watching: {root}")
        return True

    def start(self) -> None:
        """Start the observer thread."""
        self.observer.start()
        logger.success("File system observer started")

    def close(self, timeout: Optional[float] = None) -> None:
        """Stop the observer and end the event stream."""
        if self.closed:
            return
        if self.observer.is_alive():
            self.observer.stop()
            self.observer.join(timeout)
        super().close()
        logger.info("File system observer stopped")
