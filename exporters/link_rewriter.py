"""Link rewriter pointing markdown image URLs at downloaded local files."""

import logging
import re
from typing import Optional, Tuple

from models import ImageReference

logger = logging.getLogger('blogger_markdown_migrator.exporters.link_rewriter')

# A URL ends where markdown or HTML delimits it
URL_END = r'''(?![^\s()<>\[\]"'])'''


class LinkRewriter:
    """
    Replaces remote image URLs in markdown with local filenames.

    The thumbnail and original URLs are substituted in a single pass, longest
    first, and only where the whole URL appears; a URL that merely starts
    with one of them is left alone. No markdown parsing is involved, so the
    same URL inside plain text is rewritten as well.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger('blogger_markdown_migrator.exporters.link_rewriter')

    def rewrite(self, markdown: str, reference: ImageReference, filename: str) -> Tuple[str, int]:
        """
        Rewrite one image's URLs.

        Args:
            markdown: Markdown content
            reference: Thumbnail/original URL pair
            filename: Local filename to substitute

        Returns:
            Tuple of (updated_markdown, replacement_count)
        """
        urls = sorted({url for url in (reference.thumbnail, reference.original) if url}, key=len, reverse=True)
        if not urls:
            return markdown, 0

        pattern = re.compile('(?:' + '|'.join(re.escape(url) for url in urls) + ')' + URL_END)
        markdown, count = pattern.subn(lambda _: filename, markdown)

        self.logger.debug(f"Rewrote {count} occurrence(s) to '{filename}'")
        return markdown, count
