"""Fetching of page images into a section's origins directory.

Images are downloaded one page at a time into
``{root}/{section}/origins/{index}.{extension}``. Files already present
and readable as images are kept as they are.
"""

import asyncio
import logging
import os
from typing import Optional

import aiohttp
from tqdm import tqdm

from .error import AcquisitionError
from .models import ExportSettings, Page, Section
from .utils import async_retry, detect_image_extension, ensure_directory, is_valid_image

# Set up logging
logger = logging.getLogger(__name__)


class OriginDownloader:
    """Downloads the images of a section's pages."""

    def __init__(self, layout, settings: Optional[ExportSettings] = None,
                 show_progress: bool = True):
        """Initialize the downloader.

        Args:
            layout: EpubLayout of the section, giving the origin paths.
            settings: Export settings (retry attempts and timeout).
            show_progress: Whether to show a progress bar.
        """
        self.layout = layout
        self.settings = settings or ExportSettings()
        self.show_progress = show_progress
        self.session: Optional[aiohttp.ClientSession] = None

    async def initialize(self) -> None:
        if self.session is None:
            timeout = aiohttp.ClientTimeout(total=self.settings.timeout)
            self.session = aiohttp.ClientSession(timeout=timeout)

    async def close(self) -> None:
        """Close the HTTP session."""
        if self.session:
            await self.session.close()
            self.session = None

    async def _fetch_bytes(self, url: str) -> bytes:
        """Fetch one image, retrying on network errors."""
        @async_retry(max_attempts=self.settings.max_attempts, delay=1.0, backoff=2.0,
                     exceptions=(aiohttp.ClientError, asyncio.TimeoutError))
        async def fetch() -> bytes:
            async with self.session.get(url) as response:
                if response.status != 200:
                    raise AcquisitionError(
                        f"HTTP {response.status} fetching {url}",
                        details={"url": url, "status": response.status}
                    )
                return await response.read()

        return await fetch()

    def _existing_origin(self, page: Page) -> Optional[Page]:
        """Return the page if its image is already in the origins directory."""
        if page.extension:
            if is_valid_image(self.layout.origin_path(page)):
                return page
            return None

        # Type not known yet: look for any earlier download of this index
        for candidate in self.layout.find_origins(page.index):
            if is_valid_image(candidate):
                return page.with_extension(os.path.splitext(candidate)[1].lstrip("."))
        return None

    async def download_page(self, page: Page) -> Page:
        """Make sure one page's image is in the origins directory.

        Args:
            page: The page to fetch.

        Returns:
            Page: The page, carrying the detected extension if it had none.

        Raises:
            AcquisitionError: If the image cannot be fetched or decoded.
        """
        existing = self._existing_origin(page)
        if existing is not None:
            logger.debug(f"Page {page.index} already downloaded")
            return existing

        await self.initialize()

        try:
            data = await self._fetch_bytes(page.source_url)
        except AcquisitionError as e:
            e.details = {**(e.details or {}), "page": page.index}
            raise
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise AcquisitionError(
                f"Failed to download page {page.index} from {page.source_url}: {e}",
                original_error=e,
                details={"page": page.index, "url": page.source_url}
            ) from e

        extension = detect_image_extension(data)
        if extension is None:
            raise AcquisitionError(
                f"Page {page.index} from {page.source_url} is not an image",
                details={"page": page.index, "url": page.source_url}
            )
        if not page.extension:
            page = page.with_extension(extension)

        origin_path = self.layout.origin_path(page)
        try:
            with open(origin_path, "wb") as f:
                f.write(data)
        except OSError as e:
            raise AcquisitionError(
                f"Could not store page {page.index} at {origin_path}: {e}",
                original_error=e,
                details={"page": page.index, "path": origin_path}
            ) from e

        logger.debug(f"Downloaded page {page.index} to {origin_path}")
        return page

    async def download_section(self, section: Section) -> Section:
        """Fetch every page of a section, in reading order.

        Pages whose type was unknown are replaced in ``section.page_list``
        by copies carrying the detected extension and media type.
        """
        try:
            ensure_directory(self.layout.origins_dir)
        except OSError as e:
            raise AcquisitionError(
                f"Could not create {self.layout.origins_dir}: {e}",
                original_error=e,
                details={"path": self.layout.origins_dir}
            ) from e

        progress = tqdm(total=len(section.page_list), desc=section.name,
                        unit="page", disable=not self.show_progress)
        try:
            for position, page in enumerate(section.page_list):
                section.page_list[position] = await self.download_page(page)
                progress.update(1)
        finally:
            progress.close()
            await self.close()

        logger.info(f"Fetched {len(section.page_list)} pages of '{section.name}'")
        return section


def acquire_section(section: Section, layout, settings: Optional[ExportSettings] = None) -> None:
    """Populate the origins directory for every page of a section.

    Args:
        section: Section to fetch; its page list may be updated in place.
        layout: EpubLayout of the section.
        settings: Export settings.

    Raises:
        AcquisitionError: If any page cannot be fetched.
    """
    downloader = OriginDownloader(layout, settings)
    asyncio.run(downloader.download_section(section))
    for page in section:
        if not os.path.isfile(layout.origin_path(page)):
            raise AcquisitionError(
                f"Missing origin image for page {page.index}",
                details={"page": page.index, "path": layout.origin_path(page)}
            )
