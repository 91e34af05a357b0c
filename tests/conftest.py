import io
from pathlib import Path

import pytest
from loguru import logger

from webp_watchman.utils.config import get_settings


class FakeTimer:
    """Stand-in for ``threading.Timer`` driven by ``FakeScheduler``."""

    def __init__(self, scheduler, interval, function, args=()):
        self.scheduler = scheduler
        self.due = scheduler.now + interval
        self.function = function
        self.args = args
        self.daemon = False
        self.cancelled = False
        self.fired = False

    def start(self):
        self.scheduler.timers.append(self)

    def cancel(self):
        self.cancelled = True

    @property
    def armed(self) -> bool:
        return not (self.cancelled or self.fired)


class FakeScheduler:
    """Manual clock plus timer factory for deterministic debounce tests."""

    def __init__(self):
        self.now = 0.0
        self.timers: list[FakeTimer] = []

    def timer(self, interval, function, args=()):
        return FakeTimer(self, interval, function, args)

    def clock(self) -> float:
        return self.now

    def armed(self) -> list[FakeTimer]:
        return [t for t in self.timers if t.armed]

    def advance(self, seconds: float):
        """Move the clock forward, firing due timers in deadline order."""
        target = self.now + seconds
        while True:
            due = [t for t in self.armed() if t.due <= target + 1e-9]
            if not due:
                break
            timer = min(due, key=lambda t: t.due)
            self.now = timer.due
            timer.fired = True
            timer.function(*timer.args)
        self.now = target


@pytest.fixture
def scheduler() -> FakeScheduler:
    return FakeScheduler()


@pytest.fixture(autouse=True)
def reset_state():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
    logger.remove()


@pytest.fixture
def log_messages() -> list[str]:
    """Collect formatted loguru messages emitted during the test."""
    messages: list[str] = []
    handler_id = logger.add(lambda m: messages.append(str(m)), format="{level} {message}", level="DEBUG")
    yield messages
    try:
        logger.remove(handler_id)
    except ValueError:
        pass


@pytest.fixture
def webp_bytes():
    """Factory producing lossless WebP bytes for a solid-colour pattern."""
    from PIL import Image, features

    if not features.check("webp"):
        pytest.skip("Pillow was built without WebP support")

    def _make(color=(200, 30, 60), size=(8, 6)) -> bytes:
        image = Image.new("RGB", size, color)
        # Two marker pixels so round trips can detect swapped content.
        image.putpixel((0, 0), (0, 0, 0))
        image.putpixel((size[0] - 1, size[1] - 1), (255, 255, 255))
        buffer = io.BytesIO()
        image.save(buffer, format="WEBP", lossless=True)
        return buffer.getvalue()

    return _make


@pytest.fixture
def webp_file(tmp_path: Path, webp_bytes) -> Path:
    path = tmp_path / "photo.webp"
    path.write_bytes(webp_bytes())
    return path
