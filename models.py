"""Data models for the Blogger to Markdown migration pipeline."""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, FrozenSet, List, Optional, Tuple

logger = logging.getLogger('blogger_markdown_migrator')


class MigrationError(Exception):
    """Base exception for migration errors."""
    pass


class MissingContentError(MigrationError):
    """Raised when an entry selected for export has no HTML body."""

    def __init__(self, title: str):
        super().__init__(f"No post content for '{title}'")
        self.title = title


class WriteError(MigrationError):
    """Raised when writing a bundle to the filesystem fails."""

    def __init__(self, path: Path, reason: str):
        super().__init__(f"Failed to write {path}: {reason}")
        self.path = path
        self.reason = reason


@dataclass(frozen=True)
class PostCategoryMarker:
    """A (scheme, term) category pair attached to a feed entry."""

    scheme: Optional[str]
    term: str


@dataclass(frozen=True)
class FeedEntry:
    """One syndication entry parsed from the export feed."""

    title: str
    updated: datetime
    content: Optional[str] = None  # HTML fragment
    authors: Tuple[str, ...] = ()
    categories: FrozenSet[PostCategoryMarker] = frozenset()
    id: Optional[str] = None

    @property
    def primary_author(self) -> Optional[str]:
        """Name of the first author, if any."""
        return self.authors[0] if self.authors else None


@dataclass(frozen=True)
class ExportTarget:
    """Slug and output directory derived for one exported entry."""

    slug: str
    directory: Path
    content_path: Path


@dataclass(frozen=True)
class ImageReference:
    """An <img> tag found in post HTML.

    ``original`` is the href of the closest enclosing link, or None when the
    image is not wrapped in a link.
    """

    thumbnail: str
    original: Optional[str] = None


@dataclass
class ResolvedImage:
    """Outcome of resolving one candidate image URL."""

    url: str
    filename: Optional[str] = None
    error: Optional[Exception] = None
    thumbnail: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.filename is not None and self.error is None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize resolution outcome to dictionary."""
        return {
            'url': self.url,
            'thumbnail': self.thumbnail,
            'filename': self.filename,
            'error': str(self.error) if self.error else None,
        }


@dataclass
class OutputBundle:
    """The written artifact for one post."""

    target: ExportTarget
    header: str
    body: str
    images: List[ResolvedImage] = field(default_factory=list)

    @property
    def images_downloaded(self) -> int:
        return sum(1 for image in self.images if image.ok)

    @property
    def images_failed(self) -> int:
        return sum(1 for image in self.images if not image.ok)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize bundle summary to dictionary."""
        return {
            'slug': self.target.slug,
            'directory': str(self.target.directory),
            'content_path': str(self.target.content_path),
            'images_downloaded': self.images_downloaded,
            'images_failed': self.images_failed,
            'images': [image.to_dict() for image in self.images],
        }
