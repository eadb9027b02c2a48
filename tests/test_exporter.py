"""
Tests for the EPUB export session.
"""

import os
import re
import xml.etree.ElementTree as ET
import zipfile

import pytest

from mangabind.epub import Epub
from mangabind.error import (
    AcquisitionError,
    ArchiveError,
    FilesystemError,
    InvalidSectionError,
)
from mangabind.models import Section
from mangabind.workflow import inspect_epub

OPF = "{http://www.idpf.org/2007/opf}"
DC = "{http://purl.org/dc/elements/1.1/}"
NCX = "{http://www.daisy.org/z3986/2005/ncx/}"


def read_member(epub_path, name):
    with zipfile.ZipFile(epub_path) as zf:
        return zf.read(name)


def opf_of(epub_path):
    return ET.fromstring(read_member(epub_path, "metadata.opf"))


def identifier_of(epub_path):
    return opf_of(epub_path).find(f"{OPF}metadata").find(f"{DC}identifier").text


class TestSave:
    """Tests for Epub.save."""

    def test_demo_chapter(self, tmp_path, platform, demo_section, settings, acquire):
        output = tmp_path / "out"
        dst = Epub(platform, demo_section, settings=settings, acquire=acquire).save(str(output))

        assert dst == os.path.join(str(output), "Demo Ch1.epub")
        assert os.path.isfile(dst)

        root = opf_of(dst)
        items = root.find(f"{OPF}manifest").findall(f"{OPF}item")
        documents = [i.get("href") for i in items if i.get("id", "").startswith("page")]
        images = [i.get("href") for i in items if i.get("id", "").startswith("img")]
        covers = [i for i in items if i.get("id") == "cover"]
        spine = [r.get("idref") for r in root.find(f"{OPF}spine")]

        assert documents == ["0.html", "1.html", "2.html"]
        assert images == ["0.jpg", "1.jpg", "2.png"]
        assert len(covers) == 1
        assert covers[0].get("href") == "cover.jpg"
        assert covers[0].get("media-type") == "image/jpeg"
        assert spine == ["start", "page0", "page1", "page2"]

    def test_package_tree(self, tmp_path, platform, demo_section, settings, acquire):
        dst = Epub(platform, demo_section, settings=settings, acquire=acquire).save(str(tmp_path))

        with zipfile.ZipFile(dst) as zf:
            names = zf.namelist()
            assert names[0] == "mimetype"
            assert zf.read("mimetype") == b"application/epub+zip"
            cover = zf.read("cover.jpg")
            first = zf.read("0.jpg")

        assert set(names) == {
            "mimetype", "META-INF/container.xml", "metadata.opf", "toc.ncx",
            "stylesheet.css", "start.xhtml",
            "0.html", "1.html", "2.html",
            "0.jpg", "1.jpg", "2.png", "cover.jpg",
        }
        assert cover == first

    def test_cache_tree_on_disk(self, tmp_path, platform, demo_section, settings, acquire):
        session = Epub(platform, demo_section, settings=settings, acquire=acquire)
        session.save(str(tmp_path / "out"))

        cache = session.layout.cache_dir
        assert cache == os.path.join(settings.cache_root, "Demo Ch1", ".cache")
        assert os.path.isfile(os.path.join(cache, "META-INF", "container.xml"))
        assert os.path.isfile(os.path.join(cache, "2.png"))

    def test_viewer_pages_reference_images(self, tmp_path, platform, demo_section, settings, acquire):
        dst = Epub(platform, demo_section, settings=settings, acquire=acquire).save(str(tmp_path))

        page = read_member(dst, "2.html").decode("utf-8")
        assert 'src="2.png"' in page

    def test_identifier_shared_with_navigation(self, tmp_path, platform, demo_section, settings, acquire):
        session = Epub(platform, demo_section, settings=settings, acquire=acquire)
        dst = session.save(str(tmp_path))

        ncx = ET.fromstring(read_member(dst, "toc.ncx"))
        uid = [m.get("content") for m in ncx.find(f"{NCX}head") if m.get("name") == "dtb:uid"][0]

        assert identifier_of(dst) == uid == session.uuid

    def test_identifier_differs_between_sessions(self, tmp_path, platform, demo_section, settings, acquire):
        first = identifier_of(Epub(platform, demo_section, settings=settings, acquire=acquire).save(str(tmp_path / "a")))
        second = identifier_of(Epub(platform, demo_section, settings=settings, acquire=acquire).save(str(tmp_path / "b")))

        assert first != second

    def test_rerun_overwrites(self, tmp_path, platform, demo_section, settings, acquire):
        output = str(tmp_path / "out")
        first = Epub(platform, demo_section, settings=settings, acquire=acquire).save(output)
        with zipfile.ZipFile(first) as zf:
            first_names = sorted(zf.namelist())

        second = Epub(platform, demo_section, settings=settings, acquire=acquire).save(output)
        with zipfile.ZipFile(second) as zf:
            second_names = sorted(zf.namelist())

        assert first == second
        assert first_names == second_names
        assert os.listdir(output) == ["Demo Ch1.epub"]

    def test_rerun_drops_stale_files(self, tmp_path, platform, demo_section, settings, acquire):
        output = str(tmp_path / "out")
        Epub(platform, demo_section, settings=settings, acquire=acquire).save(output)

        shorter = Section(demo_section.name)
        shorter.add_page(0, "https://img.example.org/demo/1/cover.png")
        epub_path = Epub(platform, shorter, settings=settings, acquire=acquire).save(output)

        with zipfile.ZipFile(epub_path) as zf:
            names = set(zf.namelist())
        assert "cover.png" in names
        assert "cover.jpg" not in names
        assert not names & {"1.html", "1.jpg", "2.html", "2.png"}

    def test_date_is_iso_8601(self, tmp_path, platform, demo_section, settings, acquire):
        dst = Epub(platform, demo_section, settings=settings, acquire=acquire).save(str(tmp_path))
        date = opf_of(dst).find(f"{OPF}metadata").find(f"{DC}date").text

        assert re.match(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}", date)

    def test_readable_by_ebooklib(self, tmp_path, platform, demo_section, settings, acquire):
        session = Epub(platform, demo_section, settings=settings, acquire=acquire)
        summary = inspect_epub(session.save(str(tmp_path)))

        assert summary["title"] == "Demo Ch1"
        assert summary["identifier"] == session.uuid
        assert summary["documents"] == 4
        assert summary["spine"] == ["start", "page0", "page1", "page2"]


class TestFailures:
    """Tests for failure propagation during export."""

    def test_acquisition_failure(self, tmp_path, platform, demo_section, settings, image_writer):
        def failing_acquire(section, tree, export_settings):
            for page in section.page_list:
                if page.index == 1:
                    raise ConnectionError("connection reset")
                image_writer(tree.origin_path(page), page.extension)

        output = tmp_path / "out"
        with pytest.raises(AcquisitionError) as excinfo:
            Epub(platform, demo_section, settings=settings, acquire=failing_acquire).save(str(output))

        assert isinstance(excinfo.value.original_error, ConnectionError)
        assert not (output / "Demo Ch1.epub").exists()

    def test_acquisition_error_passes_through(self, tmp_path, platform, demo_section, settings):
        error = AcquisitionError("HTTP 404 fetching page 1")

        def failing_acquire(section, tree, export_settings):
            raise error

        with pytest.raises(AcquisitionError) as excinfo:
            Epub(platform, demo_section, settings=settings, acquire=failing_acquire).save(str(tmp_path))

        assert excinfo.value is error

    def test_missing_origin_image(self, tmp_path, platform, demo_section, settings):
        def no_images(section, tree, export_settings):
            pass

        with pytest.raises(FilesystemError) as excinfo:
            Epub(platform, demo_section, settings=settings, acquire=no_images).save(str(tmp_path))

        assert "0.jpg" in excinfo.value.details["source"]

    def test_archiver_failure(self, tmp_path, platform, demo_section, settings, acquire):
        def broken_archiver(source, destination):
            raise RuntimeError("disk full")

        with pytest.raises(ArchiveError) as excinfo:
            Epub(platform, demo_section, settings=settings, acquire=acquire,
                 archiver=broken_archiver).save(str(tmp_path))

        assert excinfo.value.details["destination"].endswith("Demo Ch1.epub")

    def test_archiver_receives_cache_dir(self, tmp_path, platform, demo_section, settings, acquire):
        calls = []
        session = Epub(platform, demo_section, settings=settings, acquire=acquire,
                       archiver=lambda source, destination: calls.append((source, destination)))

        dst = session.save(str(tmp_path))

        assert calls == [(session.layout.cache_dir, dst)]

    def test_section_without_pages(self, tmp_path, platform, settings):
        calls = []
        session = Epub(platform, Section("Empty"), settings=settings,
                       acquire=lambda *args: calls.append(args))

        with pytest.raises(InvalidSectionError):
            session.save(str(tmp_path / "out"))

        assert calls == []
        assert not (tmp_path / "out").exists()

    def test_section_without_cover(self, tmp_path, platform, settings, acquire):
        section = Section("No Cover")
        section.add_page(1, "https://img.example.org/1.jpg")

        with pytest.raises(InvalidSectionError):
            Epub(platform, section, settings=settings, acquire=acquire).save(str(tmp_path))
