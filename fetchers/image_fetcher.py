"""Image resolver that downloads post images next to their markdown file."""

import logging
import mimetypes
import threading
from pathlib import Path
from typing import Callable, Optional
from urllib.parse import unquote, urlparse

import requests

from converters.link_processor import find_first_image_src
from models import MigrationError, ResolvedImage, WriteError

logger = logging.getLogger('blogger_markdown_migrator.fetchers.image_fetcher')

DEFAULT_USER_AGENT = 'blogger-markdown-migrator/1.0'
CHUNK_SIZE = 64 * 1024


class ImageFetchError(MigrationError):
    """Base exception for per-image resolution failures."""
    pass


class RedirectError(ImageFetchError):
    """The image URL answered with a redirect, which is never followed."""

    def __init__(self, status: int, url: str):
        super().__init__(f"Error {status}: Image path is redirected ({url})")
        self.status = status
        self.url = url


class NonImageError(ImageFetchError):
    """The URL does not lead to an image."""

    def __init__(self, url: str, content_type: Optional[str] = None):
        detail = f" (Content-Type: {content_type})" if content_type else ""
        super().__init__(f"Error: This URL does not point to an image: {url}{detail}")
        self.url = url
        self.content_type = content_type


class UnknownStatusError(ImageFetchError):
    """The server answered with a status that is neither success nor redirect."""

    def __init__(self, status: int, url: str):
        super().__init__(f"Error {status}: Unable to download image ({url})")
        self.status = status
        self.url = url


class ConnectionFailedError(ImageFetchError):
    """The request timed out or the connection could not be made."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"Error: Unable to connect to {url}: {reason}")
        self.url = url
        self.reason = reason


class ImageResolver:
    """
    Resolves candidate image URLs to files saved in a post directory.

    A URL is fetched once without following redirects. Image responses are
    saved as-is. Text responses are treated as viewer pages: the first
    embedded <img> is fetched instead, at most ``max_indirection`` times.
    Every failure is folded into the returned ResolvedImage.
    """

    def __init__(
        self,
        connect_timeout: float = 1.0,
        read_timeout: Optional[float] = 30.0,
        max_indirection: int = 1,
        user_agent: str = DEFAULT_USER_AGENT,
        session_factory: Callable[[], requests.Session] = requests.Session,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the image resolver.

        Args:
            connect_timeout: Seconds to wait for a connection
            read_timeout: Seconds to wait between bytes (None = no limit)
            max_indirection: How many viewer pages may be followed
            user_agent: User-Agent header sent with every request
            session_factory: Callable returning a requests.Session
            logger: Logger instance
        """
        if max_indirection < 0:
            raise ValueError("max_indirection cannot be negative")

        self.connect_timeout = connect_timeout
        self.read_timeout = read_timeout
        self.max_indirection = max_indirection
        self.user_agent = user_agent
        self.session_factory = session_factory
        self.logger = logger or logging.getLogger('blogger_markdown_migrator.fetchers.image_fetcher')
        self._local = threading.local()

    @classmethod
    def from_config(cls, config: dict) -> 'ImageResolver':
        """Create a resolver from the ``http`` configuration section."""
        http = config.get('http', {})
        return cls(
            connect_timeout=http.get('connect_timeout', 1.0),
            read_timeout=http.get('read_timeout', 30.0),
            max_indirection=http.get('max_indirection', 1),
            user_agent=http.get('user_agent', DEFAULT_USER_AGENT),
        )

    @property
    def session(self) -> requests.Session:
        """Per-thread HTTP session."""
        session = getattr(self._local, 'session', None)
        if session is None:
            session = self.session_factory()
            session.headers['User-Agent'] = self.user_agent
            self._local.session = session
        return session

    def resolve(self, url: str, post_dir: Path) -> ResolvedImage:
        """
        Download the image behind ``url`` into ``post_dir``.

        Args:
            url: Candidate image URL
            post_dir: Directory of the post bundle

        Returns:
            ResolvedImage with either ``filename`` or ``error`` set

        Raises:
            WriteError: If the downloaded image cannot be written
        """
        self.logger.info(f"Downloading: {url}")
        try:
            filename = self._fetch(url, Path(post_dir))
        except ImageFetchError as e:
            return ResolvedImage(url=url, error=e)
        except requests.RequestException as e:
            return ResolvedImage(url=url, error=ConnectionFailedError(url, str(e)))

        return ResolvedImage(url=url, filename=filename)

    def _fetch(self, url: str, post_dir: Path) -> str:
        current = url
        for depth in range(self.max_indirection + 1):
            response = self.session.get(
                current,
                allow_redirects=False,
                timeout=(self.connect_timeout, self.read_timeout),
                stream=True,
            )
            try:
                status = response.status_code
                if 300 <= status < 400:
                    raise RedirectError(status, current)
                if not 200 <= status < 300:
                    raise UnknownStatusError(status, current)

                content_type = response.headers.get('Content-Type', '')
                media_type = content_type.split(';')[0].strip().lower()

                if media_type.startswith('image'):
                    return self._save(response, media_type, post_dir)

                if media_type.startswith('text') and depth < self.max_indirection:
                    embedded = find_first_image_src(response.text, base_url=response.url)
                    if embedded is None:
                        raise NonImageError(current, content_type)
                    self.logger.debug(f"Following embedded image {embedded} from {current}")
                    current = embedded
                    continue

                raise NonImageError(current, content_type or None)
            finally:
                response.close()

        # Unreachable: the last iteration either returns or raises
        raise NonImageError(current)

    def _save(self, response: requests.Response, media_type: str, post_dir: Path) -> str:
        filename = filename_from_url(response.url)
        if not filename:
            filename = 'image' + (mimetypes.guess_extension(media_type) or '')

        path = post_dir / filename
        try:
            with open(path, 'wb') as f:
                for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                    f.write(chunk)
        except requests.RequestException:
            # RequestException subclasses OSError; a dropped stream is a network failure
            self._discard(path)
            raise
        except OSError as e:
            self._discard(path)
            raise WriteError(path, str(e)) from e

        self.logger.debug(f"Saved image {response.url} -> {path}")
        return filename

    def _discard(self, path: Path) -> None:
        """Remove a partially written image."""
        try:
            if path.is_file():
                path.unlink()
        except OSError as e:
            self.logger.warning(f"Could not remove partial download {path}: {e}")


def filename_from_url(url: str) -> str:
    """Lowercased final path segment of ``url`` (empty for directory URLs)."""
    segment = unquote(urlparse(url).path.rsplit('/', 1)[-1]).lower()
    if segment in ('.', '..') or '/' in segment or '\\' in segment:
        return ''
    return segment
