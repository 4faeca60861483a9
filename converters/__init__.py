"""Converters package for turning post HTML into Markdown with local images."""

import logging

from .content_transformer import ContentTransformer
from .link_processor import extract_image_references, find_first_image_src
from .markdown_converter import (
    ConversionError,
    HtmlToMarkdown,
    MarkdownConverter,
    PandocConverter,
    create_converter,
)

logger = logging.getLogger('blogger_markdown_migrator.converters')

__all__ = [
    'ContentTransformer',
    'ConversionError',
    'HtmlToMarkdown',
    'MarkdownConverter',
    'PandocConverter',
    'create_converter',
    'extract_image_references',
    'find_first_image_src'
]
