"""Link processor for locating image references in post HTML."""

import logging
from typing import List, Optional
from urllib.parse import urljoin

from bs4 import BeautifulSoup

from models import ImageReference

logger = logging.getLogger('blogger_markdown_migrator.converters.linkprocessor')


def _parse(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, 'lxml')


def extract_image_references(html: str) -> List[ImageReference]:
    """
    Extract every <img> tag of a post in document order.

    The thumbnail is the tag's ``src``; the original is the ``href`` of the
    closest enclosing <a>, which is how Blogger links a resized preview to
    the full-size upload.

    Args:
        html: Post HTML fragment

    Returns:
        List of ImageReference (``original`` is None for unlinked images)
    """
    references = []

    for img in _parse(html).find_all('img'):
        src = img.get('src')
        if not src:
            logger.debug("Skipping <img> without src")
            continue

        link = img.find_parent('a')
        original = link.get('href') if link is not None else None
        references.append(ImageReference(thumbnail=src, original=original or None))

    return references


def find_first_image_src(html: str, base_url: Optional[str] = None) -> Optional[str]:
    """
    Return the ``src`` of the first <img> in an HTML document.

    Relative sources are resolved against ``base_url`` when given.
    """
    img = _parse(html).find('img', src=True)
    if img is None:
        return None

    src = img['src']
    if base_url:
        src = urljoin(base_url, src)
    return src
