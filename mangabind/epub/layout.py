"""On-disk layout of an EPUB export.

Every file name, href and manifest id used by the exporter and by the
document templates comes from this module.
"""

import glob
import os
from typing import List, Union

from ..models import Page

PACKAGE_EXTENSION = "epub"

# Fixed members of the package
MIMETYPE_NAME = "mimetype"
META_INF_NAME = "META-INF"
CONTAINER_NAME = "container.xml"
MANIFEST_NAME = "metadata.opf"
NAVIGATION_NAME = "toc.ncx"
STYLESHEET_NAME = "stylesheet.css"
START_NAME = "start.xhtml"

# Manifest ids of the fixed members
NAVIGATION_ID = "ncx"
STYLESHEET_ID = "css"
START_ID = "start"
COVER_ID = "cover"
START_NAV_POINT_ID = "navPoint-00"

ORIGINS_NAME = "origins"
CACHE_NAME = ".cache"


def page_document_name(index: int) -> str:
    return f"{index}.html"


def image_name(page: Page) -> str:
    return f"{page.index}.{page.extension}"


def cover_name(page: Page) -> str:
    return f"cover.{page.extension}"


def page_id(index: int) -> str:
    return f"page{index}"


def image_id(index: int) -> str:
    return f"img{index}"


def nav_point_id(index: int) -> str:
    return f"navPoint-{index}"


def package_path(output_dir: Union[str, os.PathLike], section_name: str) -> str:
    """Destination of the packaged file for a section."""
    return os.path.join(os.fspath(output_dir), f"{section_name}.{PACKAGE_EXTENSION}")


class EpubLayout:
    """Directory tree used while exporting one section.

    ``{root}/{section}/origins`` holds fetched images and
    ``{root}/{section}/.cache`` is the tree that gets archived.
    """

    def __init__(self, section_name: str, root: Union[str, os.PathLike] = "manga_res"):
        self.section_name = section_name
        self.root = os.fspath(root)

    @property
    def section_dir(self) -> str:
        return os.path.join(self.root, self.section_name)

    @property
    def origins_dir(self) -> str:
        return os.path.join(self.section_dir, ORIGINS_NAME)

    @property
    def cache_dir(self) -> str:
        return os.path.join(self.section_dir, CACHE_NAME)

    @property
    def meta_dir(self) -> str:
        return os.path.join(self.cache_dir, META_INF_NAME)

    def origin_path(self, page: Page) -> str:
        return os.path.join(self.origins_dir, image_name(page))

    def find_origins(self, index: int) -> List[str]:
        """Origin files stored for a page index, whatever their extension."""
        pattern = os.path.join(glob.escape(self.origins_dir), f"{index}.*")
        return sorted(glob.glob(pattern))

    def cache_path(self, name: str) -> str:
        """Absolute location of a package member inside the cache tree."""
        return os.path.join(self.cache_dir, name)

    def page_document_path(self, page: Page) -> str:
        return self.cache_path(page_document_name(page.index))

    def image_path(self, page: Page) -> str:
        return self.cache_path(image_name(page))

    def cover_path(self, page: Page) -> str:
        return self.cache_path(cover_name(page))

    def container_path(self) -> str:
        return os.path.join(self.meta_dir, CONTAINER_NAME)

    def __repr__(self) -> str:
        return f"EpubLayout({self.section_name!r}, root={self.root!r})"
