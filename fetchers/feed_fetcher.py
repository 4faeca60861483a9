"""Atom feed reader for Blogger export documents."""

import logging
from pathlib import Path
from typing import BinaryIO, List, Optional, Union

from dateutil.parser import isoparse
from lxml import etree

from models import FeedEntry, MigrationError, PostCategoryMarker

logger = logging.getLogger('blogger_markdown_migrator.fetchers.feed_fetcher')

ATOM_NS = 'http://www.w3.org/2005/Atom'


class FeedParseError(MigrationError):
    """Raised when the export document is malformed or not an Atom feed."""
    pass


def _atom(tag: str) -> str:
    return f'{{{ATOM_NS}}}{tag}'


def _text(element: Optional[etree._Element]) -> str:
    if element is None:
        return ''
    return ''.join(element.itertext())


def _content(element: Optional[etree._Element]) -> Optional[str]:
    """Return the HTML payload of an atom:content element."""
    if element is None:
        return None

    if element.get('type') == 'xhtml':
        parts = [element.text or '']
        for child in element:
            parts.append(etree.tostring(child, encoding='unicode', with_tail=True))
        return ''.join(parts)

    return element.text or ''


def _parse_entry(element: etree._Element, index: int) -> FeedEntry:
    title = _text(element.find(_atom('title')))

    updated_text = _text(element.find(_atom('updated'))).strip()
    if not updated_text:
        raise FeedParseError(f"Entry {index} ('{title}') has no updated timestamp")
    try:
        updated = isoparse(updated_text)
    except ValueError as e:
        raise FeedParseError(
            f"Entry {index} ('{title}') has an invalid updated timestamp '{updated_text}': {e}"
        ) from e

    authors = []
    for author in element.findall(_atom('author')):
        name = _text(author.find(_atom('name'))).strip()
        if name:
            authors.append(name)

    categories = set()
    for category in element.findall(_atom('category')):
        term = category.get('term')
        if term is None:
            continue
        categories.add(PostCategoryMarker(scheme=category.get('scheme'), term=term))

    entry_id = _text(element.find(_atom('id'))).strip() or None

    return FeedEntry(
        title=title,
        updated=updated,
        content=_content(element.find(_atom('content'))),
        authors=tuple(authors),
        categories=frozenset(categories),
        id=entry_id,
    )


def parse_feed(stream: Union[BinaryIO, str]) -> List[FeedEntry]:
    """
    Parse an Atom feed document into entries, preserving document order.

    Args:
        stream: Readable binary stream (or filename) containing the feed

    Returns:
        List of FeedEntry objects

    Raises:
        FeedParseError: If the document is malformed or not an Atom feed
    """
    parser = etree.XMLParser(resolve_entities=False, no_network=True, huge_tree=True)
    try:
        tree = etree.parse(stream, parser)
    except etree.XMLSyntaxError as e:
        raise FeedParseError(f"Malformed feed document: {e}") from e

    root = tree.getroot()
    if root.tag != _atom('feed'):
        raise FeedParseError(f"Expected an Atom <feed> root element, found <{root.tag}>")

    entries = [
        _parse_entry(element, index)
        for index, element in enumerate(root.iterfind(_atom('entry')))
    ]
    logger.info(f"Parsed {len(entries)} entries from feed")
    return entries


def load_feed(path: Union[str, Path]) -> List[FeedEntry]:
    """Open and parse the feed file at ``path``."""
    logger.debug(f"Reading feed from {path}")
    with open(path, 'rb') as f:
        return parse_feed(f)
