"""HTML to Markdown conversion backends."""

import logging
import subprocess
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from markdownify import MarkdownConverter as MarkdownifyConverter

from models import MigrationError

logger = logging.getLogger('blogger_markdown_migrator.converters.markdownconverter')


class ConversionError(MigrationError):
    """Raised when the HTML to Markdown backend fails."""
    pass


class HtmlToMarkdown(ABC):
    """Capability interface: convert an HTML fragment to Markdown text."""

    @abstractmethod
    def convert(self, html: str) -> str:
        """
        Convert HTML to Markdown.

        Raises:
            ConversionError: If the backend reports a failure
        """
        pass


class MarkdownConverter(HtmlToMarkdown):
    """In-process conversion with markdownify."""

    def __init__(self, heading_style: str = 'ATX', bullets: str = '-', **options: Any):
        self.options = {
            'heading_style': heading_style,
            'bullets': bullets,
            **options,
        }

    def convert(self, html: str) -> str:
        try:
            return MarkdownifyConverter(**self.options).convert(html)
        except Exception as e:
            raise ConversionError(f"markdownify failed: {e}") from e


class PandocConverter(HtmlToMarkdown):
    """Conversion through an external ``pandoc`` process."""

    def __init__(self, pandoc_path: str = 'pandoc', output_format: str = 'gfm', timeout: Optional[float] = 120):
        self.pandoc_path = pandoc_path
        self.output_format = output_format
        self.timeout = timeout

    def convert(self, html: str) -> str:
        command = [self.pandoc_path, '--from=html', f'--to={self.output_format}']
        logger.debug(f"Running {' '.join(command)}")

        try:
            result = subprocess.run(
                command,
                input=html.encode('utf-8'),
                capture_output=True,
                timeout=self.timeout,
            )
        except FileNotFoundError as e:
            raise ConversionError(f"pandoc not found at '{self.pandoc_path}'") from e
        except subprocess.TimeoutExpired as e:
            raise ConversionError(f"pandoc timed out after {self.timeout}s") from e

        if result.returncode != 0:
            diagnostic = result.stderr.decode('utf-8', errors='replace')
            raise ConversionError(f"External command failed:\n {diagnostic}")

        try:
            return result.stdout.decode('utf-8')
        except UnicodeDecodeError as e:
            raise ConversionError(f"pandoc produced invalid UTF-8: {e}") from e


def create_converter(config: Optional[Dict[str, Any]] = None) -> HtmlToMarkdown:
    """
    Create the converter backend named by ``converter.backend``.

    Raises:
        ValueError: If the backend is unknown
    """
    settings = (config or {}).get('converter', {})
    backend = settings.get('backend', 'markdownify')

    if backend == 'markdownify':
        return MarkdownConverter(
            heading_style=settings.get('heading_style', 'ATX'),
            bullets=settings.get('bullets', '-'),
        )
    elif backend == 'pandoc':
        return PandocConverter(
            pandoc_path=settings.get('pandoc_path', 'pandoc'),
            output_format=settings.get('pandoc_format', 'gfm'),
        )
    else:
        raise ValueError(f"Invalid converter backend: {backend}. Must be 'markdownify' or 'pandoc'.")
