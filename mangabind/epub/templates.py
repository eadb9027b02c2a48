"""Text documents of an image EPUB.

Each function renders one finished document from the section model. They
do no I/O; every href and id is taken from the layout module so the
manifest, navigation map and written files always agree.
"""

import html
from datetime import datetime
from typing import List

from ..error import TemplateError
from ..models import Page, Platform, Section, DEFAULT_LANGUAGE
from . import layout

MIMETYPE = "application/epub+zip"

PUBLISHER = "mangabind"
CREATOR = "MANGA-BOT"
START_LABEL = "About"
PAGE_LABEL_SUFFIX = "P"

STYLESHEET = """
* {
   padding: 0;
   margin: 0;
}

.album {
   background: #000000;
   height: 100%;
   text-align: center;
   vertical-align: top;
}

.albumimg {
   margin: 0;
   height: 100%;
   text-align: center;
   vertical-align: top;
}
""".strip()

CONTAINER_XML = f"""
<?xml version="1.0" encoding="UTF-8"?>
<container xmlns="urn:oasis:names:tc:opendocument:xmlns:container" version="1.0">
   <rootfiles>
      <rootfile full-path="{layout.MANIFEST_NAME}" media-type="application/oebps-package+xml" />
   </rootfiles>
</container>
""".strip()


def _esc(value) -> str:
    return html.escape(str(value), quote=True)


def _require_pages(section: Section) -> Page:
    """Return the cover page, failing if the section cannot be rendered."""
    if not section.page_list:
        raise TemplateError(f"Section '{section.name}' has no pages to render",
                            details={"section": section.name})
    cover = section.cover_page
    if cover is None:
        raise TemplateError(f"Section '{section.name}' has no page with index 0 for the cover",
                            details={"section": section.name})
    if not cover.extension or not cover.mime:
        raise TemplateError(f"Cover page of '{section.name}' has no known image type",
                            details={"section": section.name, "url": cover.source_url})
    return cover


def render_start_document(section: Section, platform: Platform,
                          operator_tag: str, version_tag: str) -> str:
    """Render the attribution page shown before the first image.

    Args:
        section: Section being exported.
        platform: Site the pages were fetched from.
        operator_tag: Name of whoever runs the export.
        version_tag: Version of the exporting tool.

    Returns:
        str: The XHTML document.
    """
    name = _esc(section.name)
    return f"""
<?xml version="1.0" encoding="UTF-8"?>
<html xmlns="http://www.w3.org/1999/xhtml" lang="en">
   <head>
      <title>{name} - {START_LABEL}</title>
      <link href="{layout.STYLESHEET_NAME}" rel="stylesheet" type="text/css" />
   </head>
   <body>
      <h1>Copyright</h1>
      <p>Title: {name}</p>
      <p>
         Source: <a href="{_esc(platform.url)}">{_esc(platform.name)}</a>
      </p>
      <p>Operator: {_esc(operator_tag)}({_esc(version_tag)})</p>
      <hr />
      <p>
         This book was generated by the open source project mangabind;
         its images come from a third party.
      </p>
      <strong>Note: distributing it publicly may expose you to claims from the copyright holder.</strong>
   </body>
</html>
""".strip()


def render_page_document(page_label: str, image_href: str) -> str:
    """Render the viewer page for a single image."""
    return f"""
<?xml version="1.0" encoding="UTF-8"?>
<html xmlns="http://www.w3.org/1999/xhtml">
   <head>
      <title>{_esc(page_label)}</title>
      <link href="{layout.STYLESHEET_NAME}" rel="stylesheet" type="text/css" />
   </head>
   <body class="album">
      <img class="albumimg" src="{_esc(image_href)}" />
   </body>
</html>
""".strip()


def render_manifest(section: Section, uuid: str, version_tag: str,
                    timestamp: datetime, language: str = DEFAULT_LANGUAGE) -> str:
    """Render the OPF package document.

    Manifest items and spine entries follow ``section.page_list`` order.
    The cover item reuses the type of the page with index 0.

    Args:
        section: Section being exported.
        uuid: Identifier of this export session.
        version_tag: Version of the exporting tool.
        timestamp: Publication date written to the metadata.
        language: Language code of the book.

    Returns:
        str: The package document.

    Raises:
        TemplateError: If the section has no cover page.
    """
    cover = _require_pages(section)

    items: List[str] = []
    itemrefs: List[str] = []
    for page in section:
        items.append(
            f'      <item href="{layout.page_document_name(page.index)}" '
            f'id="{layout.page_id(page.index)}" media-type="application/xhtml+xml" />'
        )
        items.append(
            f'      <item href="{_esc(layout.image_name(page))}" '
            f'id="{layout.image_id(page.index)}" media-type="{_esc(page.mime)}" />'
        )
        itemrefs.append(f'      <itemref idref="{layout.page_id(page.index)}" />')

    manifest_items = "\n".join(items)
    spine_items = "\n".join(itemrefs)

    return f"""
<?xml version="1.0" encoding="UTF-8"?>
<package xmlns="http://www.idpf.org/2007/opf" unique-identifier="uuid_id" version="2.0">
   <metadata xmlns:dc="http://purl.org/dc/elements/1.1/" xmlns:opf="http://www.idpf.org/2007/opf">
      <dc:title>{_esc(section.name)}</dc:title>
      <dc:creator opf:role="aut" opf:file-as="{CREATOR}">{CREATOR}</dc:creator>
      <dc:identifier opf:scheme="uuid" id="uuid_id">{_esc(uuid)}</dc:identifier>
      <dc:publisher>{PUBLISHER}</dc:publisher>
      <dc:contributor opf:file-as="mangabind" opf:role="bkp">mangabind ({_esc(version_tag)})</dc:contributor>
      <dc:date>{timestamp.isoformat()}</dc:date>
      <dc:language>{_esc(language)}</dc:language>
      <meta name="cover" content="{layout.COVER_ID}" />
   </metadata>
   <manifest>
      <item href="{layout.NAVIGATION_NAME}" id="{layout.NAVIGATION_ID}" media-type="application/x-dtbncx+xml" />
      <item href="{layout.STYLESHEET_NAME}" id="{layout.STYLESHEET_ID}" media-type="text/css" />
      <item href="{layout.START_NAME}" id="{layout.START_ID}" media-type="application/xhtml+xml" />
{manifest_items}
      <item href="{_esc(layout.cover_name(cover))}" id="{layout.COVER_ID}" media-type="{_esc(cover.mime)}" />
   </manifest>
   <spine toc="{layout.NAVIGATION_ID}">
      <itemref idref="{layout.START_ID}" />
{spine_items}
   </spine>
   <guide />
</package>
""".strip()


def render_navigation(section: Section, uuid: str) -> str:
    """Render the NCX navigation map.

    The attribution page comes first with play order 0, followed by one
    point per page whose play order is the page index.
    """
    _require_pages(section)

    points = []
    for page in section:
        points.append(f"""
      <navPoint id="{layout.nav_point_id(page.index)}" playOrder="{page.index}">
         <navLabel>
            <text>{_esc(page.label)}{PAGE_LABEL_SUFFIX}</text>
         </navLabel>
         <content src="{layout.page_document_name(page.index)}" />
      </navPoint>""")
    nav_points = "".join(points)

    return f"""
<?xml version="1.0" encoding="UTF-8"?>
<ncx xmlns="http://www.daisy.org/z3986/2005/ncx/" version="2005-1" xml:lang="en">
   <head>
      <meta content="{_esc(uuid)}" name="dtb:uid" />
      <meta content="2" name="dtb:depth" />
      <meta content="mangabind" name="dtb:generator" />
      <meta content="0" name="dtb:totalPageCount" />
      <meta content="0" name="dtb:maxPageNumber" />
   </head>
   <docTitle>
      <text>{_esc(section.name)}</text>
   </docTitle>
   <navMap>
      <navPoint id="{layout.START_NAV_POINT_ID}" playOrder="0">
         <navLabel>
            <text>{START_LABEL}</text>
         </navLabel>
         <content src="{layout.START_NAME}" />
      </navPoint>{nav_points}
   </navMap>
</ncx>
""".strip()


def render_stylesheet() -> str:
    return STYLESHEET


def render_container_descriptor() -> str:
    return CONTAINER_XML
