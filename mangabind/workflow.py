"""High-level export workflow for MangaBind.

This module ties configuration, section building and the EPUB exporter
together, and checks produced packages afterwards.
"""

import logging
import shutil
import subprocess
from pathlib import Path
from typing import Dict, Any, List, Optional, Union

import ebooklib
from ebooklib import epub

from .config import Config
from .epub import Epub
from .models import Platform, Section
from .utils import sanitize_filename

# Set up logging
logger = logging.getLogger(__name__)


def build_section(name: str, urls: List[str], source_url: str = "") -> Section:
    """Create a section whose pages are the given image URLs in order.

    Args:
        name: Title of the section; sanitized for use as a filename.
        urls: Image URLs, registered as pages 0..N-1.
        source_url: Page the chapter was found on.

    Returns:
        Section: The new section.
    """
    section = Section(sanitize_filename(name), source_url)
    for index, url in enumerate(urls):
        section.add_page(index, url)
    return section


def export_section(section: Section, platform: Platform,
                   output_dir: Optional[Union[str, Path]] = None,
                   config: Optional[Config] = None) -> str:
    """Export a section using the user's configuration.

    Args:
        section: Section to export.
        platform: Site the section comes from.
        output_dir: Directory for the package; the configured one if omitted.
        config: Configuration to use; loaded from disk if omitted.

    Returns:
        str: Path to the written EPUB file.
    """
    config = config or Config()
    if output_dir is None:
        output_dir = config.get_output_dir()

    session = Epub(platform, section, settings=config.export_settings())
    return session.save(str(output_dir))


def inspect_epub(epub_path: Union[str, Path]) -> Dict[str, Any]:
    """Read a package back and summarize its contents.

    Args:
        epub_path: Path to the EPUB file.

    Returns:
        Dict with title, identifier, item counts and spine order.
    """
    book = epub.read_epub(str(epub_path))

    titles = book.get_metadata('DC', 'title')
    identifiers = book.get_metadata('DC', 'identifier')

    return {
        "title": titles[0][0] if titles else None,
        "identifier": identifiers[0][0] if identifiers else None,
        "images": len(list(book.get_items_of_type(ebooklib.ITEM_IMAGE))),
        "documents": len(list(book.get_items_of_type(ebooklib.ITEM_DOCUMENT))),
        "spine": [idref for idref, _ in book.spine],
    }


def validate_epub(epub_path: Union[str, Path]) -> Dict[str, Any]:
    """Validate an EPUB file using epubcheck if available.

    Args:
        epub_path: Path to the EPUB file.

    Returns:
        Dict with validation results. ``valid`` is None when epubcheck is
        not installed.
    """
    epub_path = Path(epub_path)

    if not epub_path.exists():
        return {
            "valid": False,
            "error": f"File not found: {epub_path}"
        }

    if not shutil.which("epubcheck"):
        return {
            "valid": None,
            "error": "EpubCheck not found in PATH"
        }

    try:
        process = subprocess.run(
            ["epubcheck", str(epub_path)],
            capture_output=True,
            text=True,
            check=False
        )
    except OSError as e:
        logger.error(f"Error running epubcheck: {e}")
        return {
            "valid": False,
            "error": str(e)
        }

    if process.returncode == 0:
        return {
            "valid": True,
            "output": process.stdout
        }
    return {
        "valid": False,
        "error": process.stderr,
        "output": process.stdout
    }
