"""
Path predicates for the conversion domain.

Extensions are compared case-insensitively, so ``photo.WEBP`` qualifies.
"""

from pathlib import Path
from typing import Union

SOURCE_EXTENSION = ".webp"
TARGET_EXTENSION = ".png"

PathLike = Union[str, Path]


def is_convertible(path: PathLike) -> bool:
    """
    Check whether ``path`` names a WebP source file.

    Only the final suffix counts: ``a.b.webp`` matches, ``a.webp.part``
    does not. A dotfile named ``.webp`` has no suffix and does not match.

    Args:
        path: File path, absolute or relative

    Returns:
        True if the path should be converted, False otherwise
    """
    return Path(path).suffix.lower() == SOURCE_EXTENSION


def output_path_for(path: PathLike) -> Path:
    """Sibling path with the target extension substituted."""
    return Path(path).with_suffix(TARGET_EXTENSION)
