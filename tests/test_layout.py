"""
Tests for the export directory layout.
"""

import os

from mangabind.epub import layout
from mangabind.epub.layout import EpubLayout
from mangabind.models import Page


def test_member_names():
    page = Page.from_url(7, "https://img.example.org/7.png")

    assert layout.page_document_name(7) == "7.html"
    assert layout.image_name(page) == "7.png"
    assert layout.cover_name(page) == "cover.png"
    assert layout.page_id(7) == "page7"
    assert layout.image_id(7) == "img7"
    assert layout.nav_point_id(7) == "navPoint-7"


def test_directories(tmp_path):
    tree = EpubLayout("Demo Ch1", tmp_path)

    assert tree.section_dir == os.path.join(str(tmp_path), "Demo Ch1")
    assert tree.origins_dir == os.path.join(str(tmp_path), "Demo Ch1", "origins")
    assert tree.cache_dir == os.path.join(str(tmp_path), "Demo Ch1", ".cache")
    assert tree.meta_dir == os.path.join(tree.cache_dir, "META-INF")


def test_page_paths(tmp_path):
    tree = EpubLayout("Demo Ch1", tmp_path)
    page = Page.from_url(0, "https://img.example.org/0.jpg")

    assert tree.origin_path(page) == os.path.join(tree.origins_dir, "0.jpg")
    assert tree.image_path(page) == os.path.join(tree.cache_dir, "0.jpg")
    assert tree.cover_path(page) == os.path.join(tree.cache_dir, "cover.jpg")
    assert tree.page_document_path(page) == os.path.join(tree.cache_dir, "0.html")
    assert tree.container_path() == os.path.join(tree.cache_dir, "META-INF", "container.xml")


def test_default_root_is_relative():
    assert EpubLayout("Ch").cache_dir == os.path.join("manga_res", "Ch", ".cache")


def test_package_path():
    assert layout.package_path("out", "Demo Ch1") == os.path.join("out", "Demo Ch1.epub")
