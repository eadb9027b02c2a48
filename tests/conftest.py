"""
Pytest configuration and fixtures.
"""

import pytest
from pathlib import Path
from PIL import Image

from mangabind import config as config_module
from mangabind.models import ExportSettings, Platform, Section


def write_image(path, extension: str, color=(200, 30, 30)) -> Path:
    """Write a small real image in the format matching the extension."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    image_format = {"jpg": "JPEG", "jpeg": "JPEG"}.get(extension, extension.upper())
    Image.new("RGB", (8, 12), color).save(path, format=image_format)
    return path


def fake_acquire(section, layout, settings=None):
    """Acquisition stand-in writing every page image locally."""
    for page in section.page_list:
        write_image(layout.origin_path(page), page.extension)


@pytest.fixture
def platform():
    return Platform("Example Comics", "https://comics.example.org")


@pytest.fixture
def demo_section():
    """Section named 'Demo Ch1' with pages 0.jpg, 1.jpg and 2.png."""
    section = Section("Demo Ch1", "https://comics.example.org/demo/1")
    section.add_page(0, "https://img.example.org/demo/1/001.jpg")
    section.add_page(1, "https://img.example.org/demo/1/002.jpg")
    section.add_page(2, "https://img.example.org/demo/1/003.png")
    return section


@pytest.fixture
def settings(tmp_path):
    return ExportSettings(cache_root=str(tmp_path / "manga_res"))


@pytest.fixture
def config_home(tmp_path, monkeypatch):
    """Point the configuration file at a temporary directory."""
    config_dir = tmp_path / "config"
    monkeypatch.setattr(config_module, "CONFIG_DIR", config_dir)
    monkeypatch.setattr(config_module, "CONFIG_FILE", config_dir / "config.json")
    defaults = dict(config_module.DEFAULT_CONFIG)
    defaults["output_directory"] = str(tmp_path / "output")
    defaults["cache_root"] = str(tmp_path / "manga_res")
    monkeypatch.setattr(config_module, "DEFAULT_CONFIG", defaults)
    return config_dir


@pytest.fixture
def image_writer():
    return write_image


@pytest.fixture
def acquire():
    return fake_acquire
