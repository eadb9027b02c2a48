"""EPUB export of a manga section.

An Epub is one export session: it fetches the section's images, writes the
package tree under the section's cache directory and zips it into
``{output_dir}/{section name}.epub``.
"""

import logging
import os
import shutil
import uuid
from datetime import datetime, timezone
from typing import Callable, Optional

from .. import archive, storage
from ..error import AcquisitionError, ArchiveError, FilesystemError, InvalidSectionError, MangaBindError
from ..models import ExportSettings, Platform, Section
from ..utils import ensure_directory
from . import layout, templates
from .layout import EpubLayout

# Set up logging
logger = logging.getLogger(__name__)


class Epub:
    """Export session turning a section into an EPUB file."""

    def __init__(self, platform: Platform, section: Section,
                 settings: Optional[ExportSettings] = None,
                 acquire: Optional[Callable[[Section, EpubLayout, ExportSettings], None]] = None,
                 archiver: Optional[Callable[[str, str], object]] = None):
        """Initialize the export session.

        Args:
            platform: Site the section comes from.
            section: Section to export.
            settings: Export settings; defaults apply when omitted.
            acquire: Resource acquisition; fetches images by default.
            archiver: Packs a directory into a file; zips by default.
        """
        self.platform = platform
        self.section = section
        self.settings = settings or ExportSettings()
        self.uuid = str(uuid.uuid4())
        self.layout = EpubLayout(section.name, self.settings.cache_root)
        self._acquire = acquire or storage.acquire_section
        self._archiver = archiver or archive.pack_directory

    def render_start_xhtml(self) -> str:
        return templates.render_start_document(
            self.section, self.platform, self.settings.operator, self.settings.version
        )

    def render_metadata_opf(self, timestamp: Optional[datetime] = None) -> str:
        return templates.render_manifest(
            self.section, self.uuid, self.settings.version,
            timestamp or datetime.now(timezone.utc), self.settings.language
        )

    def render_toc_ncx(self) -> str:
        return templates.render_navigation(self.section, self.uuid)

    def _check_section(self) -> None:
        if not self.section.page_list:
            raise InvalidSectionError(
                f"Section '{self.section.name}' has no pages",
                details={"section": self.section.name}
            )
        if self.section.cover_page is None:
            raise InvalidSectionError(
                f"Section '{self.section.name}' has no page with index 0",
                details={"section": self.section.name}
            )

    def _acquire_resources(self) -> None:
        try:
            self._acquire(self.section, self.layout, self.settings)
        except AcquisitionError:
            raise
        except Exception as e:
            raise AcquisitionError(
                f"Failed to fetch pages of '{self.section.name}': {e}",
                original_error=e,
                details={"section": self.section.name}
            ) from e

    def _write(self, path: str, content: str) -> None:
        try:
            with open(path, "w", encoding="utf-8") as f:
                f.write(content)
        except OSError as e:
            raise FilesystemError(f"Could not write {path}: {e}",
                                  original_error=e, details={"path": path}) from e
        logger.debug(f"Wrote {path}")

    def _copy(self, source: str, destination: str) -> None:
        try:
            shutil.copyfile(source, destination)
        except OSError as e:
            raise FilesystemError(f"Could not copy {source} to {destination}: {e}",
                                  original_error=e,
                                  details={"source": source, "destination": destination}) from e
        logger.debug(f"Copied {source} to {destination}")

    def _clear_cache(self) -> None:
        """Remove files left in the cache tree by an earlier export."""
        if not os.path.isdir(self.layout.cache_dir):
            return
        try:
            shutil.rmtree(self.layout.cache_dir)
        except OSError as e:
            raise FilesystemError(f"Could not clear {self.layout.cache_dir}: {e}",
                                  original_error=e, details={"path": self.layout.cache_dir}) from e
        logger.debug(f"Cleared {self.layout.cache_dir}")

    def _make_dirs(self, *paths: str) -> None:
        for path in paths:
            try:
                ensure_directory(path)
            except OSError as e:
                raise FilesystemError(f"Could not create directory {path}: {e}",
                                      original_error=e, details={"path": path}) from e

    def save(self, output_dir: str) -> str:
        """Export the section as an EPUB file.

        Args:
            output_dir: Directory receiving the package file.

        Returns:
            str: Path to the written EPUB file.

        Raises:
            InvalidSectionError: If the section has no page with index 0.
            AcquisitionError: If the page images cannot be fetched.
            FilesystemError: If a directory or file cannot be written.
            ArchiveError: If the package file cannot be produced.
        """
        self._check_section()
        logger.info(f"Exporting '{self.section.name}' ({len(self.section)} pages)")

        self._acquire_resources()
        self._clear_cache()
        self._make_dirs(output_dir, self.layout.cache_dir, self.layout.meta_dir)

        self._write(self.layout.cache_path(layout.START_NAME), self.render_start_xhtml())

        for page in self.section:
            img_name = layout.image_name(page)
            self._write(self.layout.page_document_path(page),
                        templates.render_page_document(page.label, img_name))
            origin_path = self.layout.origin_path(page)
            self._copy(origin_path, self.layout.image_path(page))
            if page.index == 0:
                self._copy(origin_path, self.layout.cover_path(page))

        self._write(self.layout.cache_path(layout.MANIFEST_NAME), self.render_metadata_opf())
        self._write(self.layout.cache_path(layout.MIMETYPE_NAME), templates.MIMETYPE)
        self._write(self.layout.cache_path(layout.STYLESHEET_NAME), templates.render_stylesheet())
        self._write(self.layout.cache_path(layout.NAVIGATION_NAME), self.render_toc_ncx())
        self._write(self.layout.container_path(), templates.render_container_descriptor())

        dst_file = layout.package_path(output_dir, self.section.name)
        try:
            self._archiver(self.layout.cache_dir, dst_file)
        except MangaBindError:
            raise
        except Exception as e:
            raise ArchiveError(
                f"Failed to package '{self.section.name}': {e}",
                original_error=e,
                details={"source": self.layout.cache_dir, "destination": dst_file}
            ) from e

        logger.info(f"EPUB written to {dst_file}")
        return dst_file
