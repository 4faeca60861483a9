"""
Content transformer turning post HTML into markdown with local images.

The HTML is converted as a whole by an HtmlToMarkdown backend. Independently,
the original HTML is scanned for images; each linked full-size image is
downloaded and its URLs in the markdown are replaced by the local filename.
"""

import logging
from pathlib import Path
from typing import TYPE_CHECKING, List, Optional, Tuple

from exporters.link_rewriter import LinkRewriter
from models import ResolvedImage

from .link_processor import extract_image_references
from .markdown_converter import HtmlToMarkdown

if TYPE_CHECKING:
    # fetchers.image_fetcher imports this package
    from fetchers.image_fetcher import ImageResolver

logger = logging.getLogger('blogger_markdown_migrator.converters.content_transformer')


class ContentTransformer:
    """Converts a post body and localizes the images it references."""

    def __init__(
        self,
        converter: HtmlToMarkdown,
        resolver: 'ImageResolver',
        rewriter: Optional[LinkRewriter] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize content transformer.

        Args:
            converter: HTML to Markdown backend
            resolver: ImageResolver used to download images
            rewriter: LinkRewriter (a default one is created if omitted)
            logger: Optional logger instance
        """
        self.converter = converter
        self.resolver = resolver
        self.logger = logger or logging.getLogger('blogger_markdown_migrator.converters.content_transformer')
        self.rewriter = rewriter or LinkRewriter(logger=self.logger)

    def transform(self, html: str, post_dir: Path) -> Tuple[str, List[ResolvedImage]]:
        """
        Convert ``html`` and download its images into ``post_dir``.

        Images without an enclosing link are left alone. A failed download
        is logged and leaves that image's URLs untouched.

        Returns:
            Tuple of (markdown, resolved images in document order)

        Raises:
            ConversionError: If the HTML to Markdown backend fails
        """
        markdown = self.converter.convert(html)
        images = []

        for reference in extract_image_references(html):
            if reference.original is None:
                self.logger.debug(f"Image {reference.thumbnail} has no link to an original, skipping")
                continue

            resolved = self.resolver.resolve(reference.original, post_dir)
            resolved.thumbnail = reference.thumbnail
            images.append(resolved)

            if not resolved.ok:
                self.logger.warning(str(resolved.error))
                continue

            markdown, _ = self.rewriter.rewrite(markdown, reference, resolved.filename)

        return markdown, images
