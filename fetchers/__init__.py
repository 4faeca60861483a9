"""Fetchers package for reading the feed export and downloading post images."""

from .feed_fetcher import FeedParseError, load_feed, parse_feed
from .image_fetcher import (
    ConnectionFailedError,
    ImageFetchError,
    ImageResolver,
    NonImageError,
    RedirectError,
    UnknownStatusError,
)
from .post_filter import BLOGGER_KIND_SCHEME, BLOGGER_POST_TERM, PostFilter

__all__ = [
    'FeedParseError',
    'load_feed',
    'parse_feed',
    'PostFilter',
    'BLOGGER_KIND_SCHEME',
    'BLOGGER_POST_TERM',
    'ImageResolver',
    'ImageFetchError',
    'RedirectError',
    'NonImageError',
    'UnknownStatusError',
    'ConnectionFailedError'
]
