"""Post writer persisting each exported post as a page bundle directory."""

import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from slugify import slugify

from models import ExportTarget, FeedEntry, OutputBundle, ResolvedImage, WriteError

logger = logging.getLogger('blogger_markdown_migrator.exporters.post_writer')

FRONTMATTER_FORMATS = ('toml', 'yaml')


def make_slug(title: str, updated: datetime, date_prefix: bool = True) -> str:
    """
    Derive the bundle directory name for a post.

    >>> make_slug('Hello, World!', datetime(2020, 1, 2))
    '2020-01-02_hello-world'
    """
    slug = slugify(title) or 'untitled'
    if date_prefix:
        slug = f"{updated.strftime('%Y-%m-%d')}_{slug}"
    return slug


def _toml_string(value: str) -> str:
    escaped = (
        value.replace('\\', '\\\\')
        .replace('"', '\\"')
        .replace('\n', '\\n')
        .replace('\r', '\\r')
        .replace('\t', '\\t')
    )
    return f'"{escaped}"'


class PostWriter:
    """
    Writes post bundles: ``<output_directory>/<slug>/<content_filename>``.

    The content file holds a metadata header (TOML ``+++`` fences by default,
    or YAML ``---`` fences) followed by a blank line and the markdown body.
    Images are saved by the resolver into the same directory.
    """

    def __init__(
        self,
        output_directory: Union[str, Path],
        content_filename: str = 'index.md',
        frontmatter_format: str = 'toml',
        draft: bool = True,
        date_prefix: bool = True,
        logger: Optional[logging.Logger] = None
    ):
        if frontmatter_format not in FRONTMATTER_FORMATS:
            raise ValueError(f"frontmatter_format must be one of: {list(FRONTMATTER_FORMATS)}")

        self.output_directory = Path(output_directory)
        self.content_filename = content_filename
        self.frontmatter_format = frontmatter_format
        self.draft = draft
        self.date_prefix = date_prefix
        self.logger = logger or logging.getLogger('blogger_markdown_migrator.exporters.post_writer')

    @classmethod
    def from_config(cls, config: Dict[str, Any], output_directory: Optional[Union[str, Path]] = None) -> 'PostWriter':
        """Create a writer from the ``export`` configuration section."""
        export = config.get('export', {})
        return cls(
            output_directory=output_directory or export.get('output_directory', './blogger-export'),
            content_filename=export.get('content_filename', 'index.md'),
            frontmatter_format=export.get('frontmatter_format', 'toml'),
            draft=export.get('draft', True),
            date_prefix=export.get('date_prefix', True),
        )

    def target_for(self, entry: FeedEntry) -> ExportTarget:
        """Compute the slug and paths for ``entry`` without touching disk."""
        slug = make_slug(entry.title, entry.updated, self.date_prefix)
        directory = (self.output_directory / slug).absolute()
        return ExportTarget(slug=slug, directory=directory, content_path=directory / self.content_filename)

    def prepare_target(self, entry: FeedEntry) -> ExportTarget:
        """
        Create the bundle directory for ``entry``.

        An existing directory is reused; its files are overwritten by the
        subsequent write.

        Raises:
            WriteError: If the directory cannot be created
        """
        target = self.target_for(entry)
        try:
            target.directory.mkdir()
        except FileExistsError:
            self.logger.warning(f"Directory exists: {target.directory}")
        except OSError as e:
            raise WriteError(target.directory, str(e)) from e
        return target

    def render_header(self, entry: FeedEntry) -> str:
        """Build the metadata header for ``entry``."""
        author = entry.primary_author
        if author is None:
            self.logger.warning(f"Post '{entry.title}' has no author")
            author = ''

        if self.frontmatter_format == 'yaml':
            frontmatter = {
                'title': entry.title,
                'date': entry.updated.isoformat(),
                'draft': self.draft,
                'extra': {'author': author},
            }
            yaml_str = yaml.dump(
                frontmatter,
                default_flow_style=False,
                allow_unicode=True,
                sort_keys=False,
                width=1000
            )
            return f"---\n{yaml_str}---"

        lines = [
            '+++',
            f'title = {_toml_string(entry.title)}',
            f'date = {entry.updated.isoformat()}',
            f"draft = {'true' if self.draft else 'false'}",
            '',
            '[extra]',
            f'author = {_toml_string(author)}',
            '+++',
        ]
        return '\n'.join(lines)

    def write(
        self,
        entry: FeedEntry,
        markdown: str,
        target: Optional[ExportTarget] = None,
        images: Optional[List[ResolvedImage]] = None
    ) -> OutputBundle:
        """
        Persist the content file of ``entry``.

        Args:
            entry: The exported feed entry
            markdown: Converted markdown body
            target: Previously prepared target (prepared now if omitted)
            images: Image outcomes to record on the bundle

        Returns:
            OutputBundle describing what was written

        Raises:
            WriteError: On any filesystem error
        """
        if target is None:
            target = self.prepare_target(entry)

        header = self.render_header(entry)
        try:
            target.content_path.write_text(f"{header}\n\n{markdown}", encoding='utf-8')
        except OSError as e:
            raise WriteError(target.content_path, str(e)) from e

        self.logger.debug(f"Wrote {target.content_path}")
        return OutputBundle(target=target, header=header, body=markdown, images=list(images or []))
