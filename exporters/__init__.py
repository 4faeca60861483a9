"""Export package writing post bundles to the filesystem.

Package Structure:
- post_writer: Derives slugs, creates bundle directories, writes index files
- link_rewriter: Points markdown image URLs at downloaded local files
"""

from .link_rewriter import LinkRewriter
from .post_writer import PostWriter, make_slug

__all__ = [
    'LinkRewriter',
    'PostWriter',
    'make_slug'
]
