"""EPUB generation package for MangaBind.

This package lays out, renders and exports the one-page-per-image EPUB
produced for a manga section.
"""

from .exporter import Epub
from .layout import EpubLayout

__all__ = ['Epub', 'EpubLayout']
