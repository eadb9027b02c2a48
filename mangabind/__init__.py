"""MangaBind: Package manga chapters as EPUB files.

MangaBind fetches the page images of a manga chapter and assembles them
into a minimal, standards-compliant EPUB with one viewer page per image.
"""

__version__ = "0.1.0"
