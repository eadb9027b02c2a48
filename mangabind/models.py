"""Data model for exportable manga sections.

A Section is one chapter: an ordered list of image pages fetched from a
source platform. These objects carry no I/O of their own.
"""

import posixpath
from dataclasses import dataclass, field
from typing import Iterator, List, Optional
from urllib.parse import urlparse

from . import __version__

# Extensions known to EPUB readers, mapped to their media types
IMAGE_MEDIA_TYPES = {
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
    "webp": "image/webp",
    "bmp": "image/bmp",
}

DEFAULT_OPERATOR = "manga-bot"
DEFAULT_LANGUAGE = "eng"
DEFAULT_CACHE_ROOT = "manga_res"


def mime_for_extension(extension: str) -> str:
    """Return the media type for an image file extension.

    Args:
        extension: File suffix without the leading dot.

    Returns:
        str: The matching media type, ``image/{extension}`` if unknown.
    """
    extension = extension.lower()
    return IMAGE_MEDIA_TYPES.get(extension, f"image/{extension}")


def extension_from_url(url: str) -> Optional[str]:
    """Guess an image extension from the path component of a URL."""
    suffix = posixpath.splitext(urlparse(url).path)[1].lower().lstrip(".")
    if suffix in IMAGE_MEDIA_TYPES:
        return suffix
    return None


@dataclass(frozen=True)
class Platform:
    """Source site a section was fetched from."""

    name: str
    url: str


@dataclass(frozen=True)
class Page:
    """One image of a section.

    The index doubles as reading order and filename stem. Extension and
    mime may be empty until resource acquisition has looked at the image.
    """

    index: int
    source_url: str
    extension: str = ""
    mime: str = ""

    def __post_init__(self):
        if self.index < 0:
            raise ValueError(f"Page index must be non-negative, got {self.index}")

    @classmethod
    def from_url(cls, index: int, source_url: str) -> "Page":
        extension = extension_from_url(source_url)
        if extension is None:
            return cls(index, source_url)
        return cls(index, source_url, extension, mime_for_extension(extension))

    def with_extension(self, extension: str) -> "Page":
        """Return a copy of this page carrying the given extension."""
        extension = extension.lower()
        return Page(self.index, self.source_url, extension, mime_for_extension(extension))

    @property
    def label(self) -> str:
        return str(self.index)


@dataclass
class Section:
    """One exportable chapter of ordered image pages.

    The name is used verbatim as a directory name and as the package base
    filename, so callers must sanitize it first.
    """

    name: str
    source_url: str = ""
    page_list: List[Page] = field(default_factory=list)

    def add_page(self, index: int, source_url: str) -> Page:
        """Register a page at the end of the reading order.

        Args:
            index: Page index, also its filename stem.
            source_url: Remote location of the image.

        Returns:
            Page: The registered page.
        """
        page = Page.from_url(index, source_url)
        self.page_list.append(page)
        return page

    @property
    def cover_page(self) -> Optional[Page]:
        """The page with index 0, which is the source of the cover image."""
        for page in self.page_list:
            if page.index == 0:
                return page
        return None

    def __len__(self) -> int:
        return len(self.page_list)

    def __iter__(self) -> Iterator[Page]:
        return iter(self.page_list)


@dataclass(frozen=True)
class ExportSettings:
    """Settings threaded through templating and export."""

    operator: str = DEFAULT_OPERATOR
    version: str = __version__
    language: str = DEFAULT_LANGUAGE
    cache_root: str = DEFAULT_CACHE_ROOT
    max_attempts: int = 3
    timeout: int = 30
