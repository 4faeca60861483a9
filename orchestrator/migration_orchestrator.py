"""
Migration orchestrator for coordinating the complete export pipeline.

This module sequences the pipeline phases: Parse feed → Filter posts →
Convert and localize images → Write bundles → Report.
"""

import logging
import sys
import threading
import time
from collections import OrderedDict
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from tqdm import tqdm

from converters import ContentTransformer, HtmlToMarkdown, create_converter
from exporters import PostWriter
from fetchers import BLOGGER_KIND_SCHEME, BLOGGER_POST_TERM, ImageResolver, PostFilter, load_feed
from logger import ProgressTracker, log_section
from models import FeedEntry, MigrationError, MissingContentError, OutputBundle, WriteError
from orchestrator.migration_report import MigrationReport

logger = logging.getLogger('blogger_markdown_migrator.orchestrator')


class MigrationOrchestrator:
    """Central coordinator turning a feed export into post bundles."""

    def __init__(
        self,
        config: Dict[str, Any],
        logger: Optional[logging.Logger] = None,
        converter: Optional[HtmlToMarkdown] = None,
        resolver: Optional[ImageResolver] = None,
        writer: Optional[PostWriter] = None
    ):
        """
        Initialize migration orchestrator.

        Args:
            config: Configuration dictionary
            logger: Optional logger instance
            converter: HTML to Markdown backend (built from config if omitted)
            resolver: ImageResolver (built from config if omitted)
            writer: PostWriter (built from config if omitted)
        """
        self.config = config
        self.logger = logger or logging.getLogger('blogger_markdown_migrator.orchestrator')

        feed_config = config.get('feed', {})
        self.post_filter = PostFilter(
            scheme=feed_config.get('post_scheme', BLOGGER_KIND_SCHEME),
            term=feed_config.get('post_term', BLOGGER_POST_TERM),
        )

        self.writer = writer or PostWriter.from_config(config)
        self.transformer = ContentTransformer(
            converter=converter or create_converter(config),
            resolver=resolver or ImageResolver.from_config(config),
            logger=self.logger,
        )

        migration = config.get('migration', {})
        self.continue_on_error = migration.get('continue_on_error', False)
        self.max_workers = migration.get('max_workers', 1)
        self.dry_run = migration.get('dry_run', False)

        self.stats = {
            'entries_total': 0,
            'posts_selected': 0,
            'posts_exported': 0,
            'posts_failed': 0,
            'images_downloaded': 0,
            'images_failed': 0,
        }
        self.bundles: List[OutputBundle] = []
        self.failures: List[Dict[str, str]] = []
        self._lock = threading.Lock()

    def run(self, feed_path: Union[str, Path]) -> Dict[str, Any]:
        """
        Export every post in the feed at ``feed_path``.

        Returns:
            Migration report dictionary

        Raises:
            FeedParseError: If the feed cannot be parsed (nothing is written)
            MigrationError: On the first post failure unless continue_on_error
        """
        start_time = time.time()

        log_section("Parsing feed")
        entries = load_feed(feed_path)
        posts = list(self.post_filter.filter(entries))
        self.stats['entries_total'] = len(entries)
        self.stats['posts_selected'] = len(posts)
        self.logger.info(f"Selected {len(posts)} posts out of {len(entries)} entries")

        if self.dry_run:
            log_section("Dry run")
            for entry in posts:
                target = self.writer.target_for(entry)
                self.logger.info(f"Would export '{entry.title}' -> {target.directory}")
        else:
            self._prepare_output_root()
            log_section("Exporting posts")
            self._export_posts(posts)

        return MigrationReport(self.logger).generate_report(
            stats=self.stats,
            bundles=self.bundles,
            failures=self.failures,
            duration=time.time() - start_time,
            output_directory=str(self.writer.output_directory),
            dry_run=self.dry_run,
        )

    def export_entry(self, entry: FeedEntry) -> OutputBundle:
        """
        Convert one post and write its bundle.

        Raises:
            MissingContentError: If the entry has no HTML body
            ConversionError: If the HTML to Markdown backend fails
            WriteError: On filesystem errors
        """
        self.logger.info(f"Processing {entry.title}...")

        if entry.content is None:
            raise MissingContentError(entry.title)

        target = self.writer.prepare_target(entry)
        markdown, images = self.transformer.transform(entry.content, target.directory)
        return self.writer.write(entry, markdown, target=target, images=images)

    def _prepare_output_root(self) -> None:
        root = self.writer.output_directory
        try:
            root.mkdir(parents=True)
        except FileExistsError:
            if not root.is_dir():
                raise WriteError(root, "exists and is not a directory")
            self.logger.debug(f"Output directory exists: {root}")
        except OSError as e:
            raise WriteError(root, str(e)) from e

    def _export_posts(self, posts: List[FeedEntry]) -> None:
        show_progress = sys.stdout.isatty()

        with ProgressTracker(total_items=len(posts), item_type='posts') as tracker, \
                tqdm(total=len(posts), desc='Posts', unit='post', disable=not show_progress) as progress:
            if self.max_workers <= 1:
                for entry in posts:
                    self._export_one(entry, tracker, progress)
                return

            # Entries sharing a slug write the same directory, so they run
            # in order on a single worker.
            groups: Dict[str, List[FeedEntry]] = OrderedDict()
            for entry in posts:
                groups.setdefault(self.writer.target_for(entry).slug, []).append(entry)

            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                futures = [
                    executor.submit(self._export_group, group, tracker, progress)
                    for group in groups.values()
                ]
                try:
                    for future in as_completed(futures):
                        future.result()
                except MigrationError:
                    for future in futures:
                        future.cancel()
                    raise

    def _export_group(self, group: List[FeedEntry], tracker: ProgressTracker, progress) -> None:
        for entry in group:
            self._export_one(entry, tracker, progress)

    def _export_one(self, entry: FeedEntry, tracker: ProgressTracker, progress) -> Optional[OutputBundle]:
        try:
            bundle = self.export_entry(entry)
        except MigrationError as e:
            with self._lock:
                tracker.increment(success=False)
                progress.update(1)
                self.stats['posts_failed'] += 1
                self.failures.append({
                    'title': entry.title,
                    'id': entry.id or '',
                    'error_type': type(e).__name__,
                    'error': str(e),
                })
            if not self.continue_on_error:
                raise
            self.logger.error(f"Failed to export '{entry.title}': {e}")
            return None

        with self._lock:
            tracker.increment(success=True)
            progress.update(1)
            self.bundles.append(bundle)
            self.stats['posts_exported'] += 1
            self.stats['images_downloaded'] += bundle.images_downloaded
            self.stats['images_failed'] += bundle.images_failed

        return bundle
