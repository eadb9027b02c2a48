"""Utility functions for MangaBind.

This module contains common utility functions used throughout the application.
"""

import io
import re
import asyncio
import logging
import functools
from pathlib import Path
from typing import Callable, Optional, Union

from PIL import Image, UnidentifiedImageError

# Set up logging
logger = logging.getLogger(__name__)

# Pattern for characters that may cause issues in some shells or tools
PROBLEMATIC_CHARS = re.compile(r'[<>:"/|?*\\\x00-\x1f]')

# Pillow format names mapped to the file suffix we store them under
PIL_FORMAT_EXTENSIONS = {
    "JPEG": "jpg",
    "PNG": "png",
    "GIF": "gif",
    "WEBP": "webp",
    "BMP": "bmp",
}


def sanitize_filename(filename: str) -> str:
    """Remove invalid characters from a filename for filesystem compatibility.

    Spaces are kept since section names are shown to readers as the
    package filename.

    Args:
        filename: The filename to sanitize.

    Returns:
        A sanitized filename safe for file system operations.
    """
    if not filename:
        return "unnamed"

    sanitized = PROBLEMATIC_CHARS.sub('_', filename)

    # Leading dots make files hidden in POSIX systems
    sanitized = sanitized.strip('. ')

    if not sanitized:
        return "unnamed"

    return sanitized


def ensure_directory(directory_path: Union[str, Path]) -> Path:
    """Create directory if it doesn't exist.

    Args:
        directory_path: Path to the directory to create.

    Returns:
        Path: The Path object for the created directory.

    Raises:
        OSError: If directory creation fails.
    """
    path = Path(directory_path)
    try:
        path.mkdir(parents=True, exist_ok=True)
        return path
    except OSError as e:
        logger.error(f"Failed to create directory {path}: {e}")
        raise


def async_retry(max_attempts: int = 3, delay: float = 1.0, backoff: float = 2.0,
                exceptions: tuple = (Exception,)) -> Callable:
    """Retry decorator with exponential backoff for coroutines.

    Args:
        max_attempts: Maximum number of attempts.
        delay: Initial delay between attempts in seconds.
        backoff: Backoff multiplier.
        exceptions: Exceptions to catch and retry.

    Returns:
        Decorator function.
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            attempt = 1
            current_delay = delay

            while True:
                try:
                    return await func(*args, **kwargs)
                except exceptions as e:
                    if attempt >= max_attempts:
                        logger.error(f"Failed after {max_attempts} attempts: {e}")
                        raise

                    logger.warning(f"Attempt {attempt} failed: {e}. "
                                   f"Retrying in {current_delay:.2f}s...")
                    await asyncio.sleep(current_delay)
                    current_delay *= backoff
                    attempt += 1

        return wrapper

    return decorator


def is_valid_image(file_path: Union[str, Path]) -> bool:
    """Check if a file is a valid image.

    Args:
        file_path: Path to the image file.

    Returns:
        bool: True if the file exists, has non-zero size, and is a valid image.
    """
    path = Path(file_path)

    if not path.exists() or path.stat().st_size == 0:
        return False

    try:
        with Image.open(path) as img:
            img.verify()
        return True
    except (UnidentifiedImageError, OSError, SyntaxError) as e:
        logger.debug(f"Image validation failed for {file_path}: {e}")
        return False


def detect_image_extension(data: bytes) -> Optional[str]:
    """Detect the file extension of encoded image data.

    Args:
        data: Raw image bytes.

    Returns:
        The extension for the image format, or None if it is not an image.
    """
    try:
        with Image.open(io.BytesIO(data)) as img:
            image_format = img.format
    except (UnidentifiedImageError, OSError) as e:
        logger.debug(f"Could not identify image data: {e}")
        return None

    if image_format is None:
        return None
    return PIL_FORMAT_EXTENSIONS.get(image_format, image_format.lower())
