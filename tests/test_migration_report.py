"""Tests for migration reports and logging helpers."""

import json
import logging
import tempfile
import unittest
from pathlib import Path

import pytest

from logger import LOGGER_NAME, ProgressTracker, format_elapsed, setup_logging
from models import ExportTarget, OutputBundle, ResolvedImage
from orchestrator import MigrationReport

STATS = {
    'entries_total': 5,
    'posts_selected': 2,
    'posts_exported': 1,
    'posts_failed': 1,
    'images_downloaded': 1,
    'images_failed': 0,
}
FAILURE = {'title': 'Broken', 'id': 'p2', 'error_type': 'WriteError', 'error': 'Failed to write x: denied'}


def make_bundle():
    directory = Path('/tmp/out/2020-01-02_hello')
    target = ExportTarget(slug='2020-01-02_hello', directory=directory, content_path=directory / 'index.md')
    images = [ResolvedImage(url='https://x/o.png', filename='o.png', thumbnail='https://x/t.png')]
    return OutputBundle(target=target, header='+++\n+++', body='body', images=images)


class TestMigrationReport(unittest.TestCase):
    def setUp(self):
        self.reporter = MigrationReport()

    def test_generate_report(self):
        report = self.reporter.generate_report(STATS, [make_bundle()], [FAILURE], 75.0, '/tmp/out')

        summary = report['summary']
        self.assertEqual(summary['entries'], 5)
        self.assertEqual(summary['total_errors'], 1)
        self.assertEqual(summary['success_rate'], 0.5)
        self.assertEqual(summary['duration_formatted'], '1m 15s')
        self.assertEqual(report['posts'][0]['slug'], '2020-01-02_hello')
        self.assertEqual(report['posts'][0]['images'][0]['filename'], 'o.png')
        self.assertEqual(report['errors'], [FAILURE])

    def test_console_report_lists_errors(self):
        report = self.reporter.generate_report(STATS, [], [FAILURE], 1.0, '/tmp/out', dry_run=True)

        text = self.reporter.format_console_report(report)

        self.assertIn('MIGRATION REPORT (DRY RUN)', text)
        self.assertIn('Broken: [WriteError]', text)

    def test_export_json_report(self):
        report = self.reporter.generate_report(STATS, [make_bundle()], [], 0.5, '/tmp/out')

        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / 'report.json'
            self.reporter.export_json_report(report, str(path))
            loaded = json.loads(path.read_text(encoding='utf-8'))

        self.assertEqual(loaded['summary']['posts_exported'], 1)


class TestLogging:

    def test_verbosity_levels(self):
        assert setup_logging(verbosity=0).level == logging.WARNING
        assert setup_logging(verbosity=1).level == logging.INFO
        assert setup_logging(verbosity=2).level == logging.DEBUG
        assert setup_logging(level='error').level == logging.ERROR

    def test_file_handler(self, tmp_path):
        log_file = tmp_path / 'run.log'

        logger = setup_logging(verbosity=1, log_file=str(log_file))
        logger.info('written to file')
        for handler in logger.handlers:
            handler.flush()

        assert 'written to file' in log_file.read_text(encoding='utf-8')

    def test_invalid_level(self):
        with pytest.raises(ValueError):
            setup_logging(level='LOUD')

    def test_format_elapsed(self):
        assert format_elapsed(12.34) == '12.3s'
        assert format_elapsed(3725) == '1h 2m 5s'

    def test_progress_tracker(self, caplog):
        with caplog.at_level(logging.INFO, logger=LOGGER_NAME):
            with ProgressTracker(total_items=2, item_type='posts') as tracker:
                tracker.increment(success=True)
                tracker.increment(success=False)

        stats = tracker.get_stats()
        assert stats['successful'] == 1
        assert stats['failed'] == 1
        assert stats['success_rate'] == 50.0
        assert 'Progress Summary: POSTS' in caplog.text
