"""Selection of feed entries that are exportable blog posts."""

import logging
from typing import Iterable, Iterator, Optional

from models import FeedEntry, PostCategoryMarker

logger = logging.getLogger('blogger_markdown_migrator.fetchers.post_filter')

BLOGGER_KIND_SCHEME = 'http://schemas.google.com/g/2005#kind'
BLOGGER_POST_TERM = 'http://schemas.google.com/blogger/2008/kind#post'


class PostFilter:
    """
    Predicate deciding whether a feed entry is a blog post worth exporting.

    An entry qualifies when it carries the exact (scheme, term) post marker
    and has a non-blank title. Settings, templates, pages and comments in a
    Blogger export carry other kind markers and are skipped.
    """

    def __init__(
        self,
        scheme: str = BLOGGER_KIND_SCHEME,
        term: str = BLOGGER_POST_TERM,
        logger: Optional[logging.Logger] = None
    ):
        self.marker = PostCategoryMarker(scheme=scheme, term=term)
        self.logger = logger or logging.getLogger('blogger_markdown_migrator.fetchers.post_filter')

    def is_post(self, entry: FeedEntry) -> bool:
        return self.marker in entry.categories and bool(entry.title.strip())

    __call__ = is_post

    def filter(self, entries: Iterable[FeedEntry]) -> Iterator[FeedEntry]:
        """Yield the entries that are posts, in their original order."""
        for entry in entries:
            if self.is_post(entry):
                yield entry
            else:
                self.logger.debug(f"Skipping non-post entry '{entry.title}' ({entry.id})")
