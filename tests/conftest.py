"""Shared fixtures: an in-memory HTTP session and Atom feed builders."""

import logging
from typing import Dict, List, Optional

import pytest
import requests

from fetchers.post_filter import BLOGGER_KIND_SCHEME, BLOGGER_POST_TERM
from logger import LOGGER_NAME

BLOGGER_SETTINGS_TERM = 'http://schemas.google.com/blogger/2008/kind#settings'


class FakeResponse:
    """Minimal stand-in for requests.Response."""

    def __init__(self, url: str, status_code: int = 200, content_type: Optional[str] = None, body: bytes = b''):
        self.url = url
        self.status_code = status_code
        self.headers = {'Content-Type': content_type} if content_type else {}
        self.content = body
        self.closed = False

    @property
    def text(self) -> str:
        return self.content.decode('utf-8')

    def iter_content(self, chunk_size: int = 1):
        for start in range(0, len(self.content), chunk_size):
            yield self.content[start:start + chunk_size]

    def close(self) -> None:
        self.closed = True


class BrokenStreamResponse(FakeResponse):
    """Sends its body, then fails the way a dropped connection does."""

    def __init__(self, *args, error=None, **kwargs):
        super().__init__(*args, **kwargs)
        self.error = error or requests.exceptions.ChunkedEncodingError('connection reset')

    def iter_content(self, chunk_size: int = 1):
        yield self.content
        raise self.error


class FakeSession:
    """Serves canned responses by URL and records every request."""

    def __init__(self, routes: Optional[Dict[str, object]] = None):
        self.routes = dict(routes or {})
        self.headers: Dict[str, str] = {}
        self.requests: List[dict] = []

    def get(self, url, **kwargs):
        self.requests.append({'url': url, **kwargs})
        route = self.routes.get(url)
        if route is None:
            return FakeResponse(url, status_code=404, content_type='text/html')
        if isinstance(route, Exception):
            raise route
        return route

    @property
    def requested_urls(self) -> List[str]:
        return [request['url'] for request in self.requests]


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop handlers and levels installed by setup_logging during a test."""
    yield
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def fake_session():
    return FakeSession()


def atom_entry(
    title: str = 'A post',
    updated: str = '2020-01-02T00:00:00Z',
    content: Optional[str] = '<p>Body</p>',
    authors: tuple = ('Jane Doe',),
    term: str = BLOGGER_POST_TERM,
    scheme: str = BLOGGER_KIND_SCHEME,
    entry_id: str = 'tag:blogger.com,1999:blog-1.post-1',
) -> str:
    """Render one Atom <entry> the way Blogger exports it."""
    parts = [
        '<entry>',
        f'<id>{entry_id}</id>',
        f'<updated>{updated}</updated>',
        f'<category scheme="{scheme}" term="{term}"/>',
        f'<title type="text">{title}</title>',
    ]
    if content is not None:
        escaped = content.replace('&', '&amp;').replace('<', '&lt;').replace('>', '&gt;')
        parts.append(f'<content type="html">{escaped}</content>')
    for name in authors:
        parts.append(f'<author><name>{name}</name></author>')
    parts.append('</entry>')
    return ''.join(parts)


def atom_feed(*entries: str) -> bytes:
    """Wrap entries in a Blogger-style Atom feed document."""
    return (
        "<?xml version='1.0' encoding='UTF-8'?>"
        '<feed xmlns="http://www.w3.org/2005/Atom">'
        '<id>tag:blogger.com,1999:blog-1</id>'
        '<updated>2020-06-01T00:00:00Z</updated>'
        '<title type="text">Example blog</title>'
        + ''.join(entries)
        + '</feed>'
    ).encode('utf-8')
