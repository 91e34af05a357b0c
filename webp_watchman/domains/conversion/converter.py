"""
WebP to PNG conversion for settled paths.

Decodes the source completely before the output is created, so a corrupt
or truncated source never leaves a PNG behind.
"""

from pathlib import Path
from typing import Optional, Union

from loguru import logger
from PIL import Image

from webp_watchman.domains.conversion.filters import output_path_for
from webp_watchman.domains.conversion.notifier import DEFAULT_TITLE, DesktopNotifier
from webp_watchman.models.errors import ConversionError, ConversionErrorKind, NotifyError
from webp_watchman.models.schemas import ConversionOutcome, ConversionResult
from webp_watchman.utils.helpers import format_bytes

# Pillow reports corrupt data through several exception types.
DECODE_ERRORS = (OSError, ValueError, SyntaxError, EOFError, RuntimeError)


class WebPConverter:
    """Converts a WebP file to a sibling PNG file."""

    def decode(self, source: Path) -> Image.Image:
        """
        Open and fully decode ``source``.

        Raises:
            ConversionError: OPEN_FAILED or DECODE_FAILED
        """
        try:
            handle = open(source, "rb")
        except OSError as e:
            raise ConversionError(source, ConversionErrorKind.OPEN_FAILED, e) from e

        with handle:
            try:
                image = Image.open(handle, formats=["WEBP"])
                image.load()
            except DECODE_ERRORS as e:
                raise ConversionError(source, ConversionErrorKind.DECODE_FAILED, e) from e

        return image

    def encode(self, image: Image.Image, output: Path) -> None:
        """
        Write ``image`` to ``output`` as PNG.

        A partially written output is removed when encoding fails.

        Raises:
            ConversionError: CREATE_OUTPUT_FAILED or ENCODE_FAILED
        """
        try:
            handle = open(output, "wb")
        except OSError as e:
            raise ConversionError(output, ConversionErrorKind.CREATE_OUTPUT_FAILED, e) from e

        try:
            with handle:
                image.save(handle, format="PNG")
        except (OSError, ValueError) as e:
            output.unlink(missing_ok=True)
            raise ConversionError(output, ConversionErrorKind.ENCODE_FAILED, e) from e

    def convert(self, path: Union[str, Path]) -> Path:
        """
        Convert a WebP file to PNG next to it.

        The source file is never modified or removed.

        Args:
            path: WebP source file

        Returns:
            Path of the written PNG

        Raises:
            ConversionError: If any stage of the conversion fails
        """
        source = Path(path)
        output = output_path_for(source)

        image = self.decode(source)
        try:
            self.encode(image, output)
        finally:
            image.close()

        return output


class ConversionService:
    """Settled-path handler: convert, log the outcome, notify on success."""

    def __init__(self, converter: Optional[WebPConverter] = None, notifier: Optional[DesktopNotifier] = None):
        self.converter = converter or WebPConverter()
        self.notifier = notifier or DesktopNotifier(enabled=False)

    def process(self, path: Union[str, Path]) -> ConversionResult:
        """
        Convert ``path`` and report the outcome.

        Conversion errors are logged and returned, never raised.

        Args:
            path: Settled WebP path

        Returns:
            ConversionResult describing the attempt
        """
        source = Path(path)

        try:
            output = self.converter.convert(source)
        except ConversionError as e:
            logger.error(f"Conversion failed for {source}: {e.kind.value} ({e.cause})")
            return ConversionResult(
                path=source,
                outcome=ConversionOutcome.FAILURE,
                reason=e.kind.value,
            )

        try:
            size = format_bytes(output.stat().st_size)
        except OSError:
            size = "size unknown"
        logger.success(f"Converted {source} -> {output.name} ({size})")
        self.send_notification(source)

        return ConversionResult(path=source, outcome=ConversionOutcome.SUCCESS, output_path=output)

    def send_notification(self, source: Path):
        """Notify about a finished conversion, logging any failure."""
        try:
            self.notifier.notify(DEFAULT_TITLE, f"Converted {source.name} to PNG")
        except NotifyError as e:
            logger.warning(f"Notification failed: {e}")
