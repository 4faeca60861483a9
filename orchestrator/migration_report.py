"""
Migration report generator for aggregating statistics and formatting reports.

Reports are plain dictionaries so they can be printed to the console and
exported as JSON.
"""

import json
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from logger import format_elapsed
from models import OutputBundle

logger = logging.getLogger(__name__)


class MigrationReport:
    """Generates migration reports from orchestrator statistics."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)

    def generate_report(
        self,
        stats: Dict[str, int],
        bundles: List[OutputBundle],
        failures: List[Dict[str, str]],
        duration: float,
        output_directory: str,
        dry_run: bool = False
    ) -> Dict[str, Any]:
        """
        Generate migration report.

        Args:
            stats: Orchestrator counters
            bundles: Bundles written during the run
            failures: Per-post failure records
            duration: Total run duration in seconds
            output_directory: Output root
            dry_run: Whether the run wrote anything

        Returns:
            Migration report dictionary
        """
        selected = stats.get('posts_selected', 0)
        summary = {
            'entries': stats.get('entries_total', 0),
            'posts_selected': selected,
            'posts_exported': stats.get('posts_exported', 0),
            'posts_failed': stats.get('posts_failed', 0),
            'images_downloaded': stats.get('images_downloaded', 0),
            'images_failed': stats.get('images_failed', 0),
            'total_errors': len(failures),
            'output_directory': output_directory,
            'dry_run': dry_run,
            'duration_seconds': duration,
            'duration_formatted': format_elapsed(duration),
        }
        if selected > 0 and not dry_run:
            summary['success_rate'] = summary['posts_exported'] / selected
        else:
            summary['success_rate'] = 1.0

        report = {
            'summary': summary,
            'posts': [bundle.to_dict() for bundle in bundles],
            'errors': list(failures),
            'timestamp': datetime.now().isoformat(),
        }

        self.logger.info(
            f"Report generated: {summary['posts_exported']} posts, "
            f"{summary['total_errors']} errors"
        )
        return report

    def format_console_report(self, report: Dict[str, Any]) -> str:
        """
        Format report for console display.

        Args:
            report: Migration report dictionary

        Returns:
            Formatted console string
        """
        summary = report.get('summary', {})
        sections = [
            "=" * 60,
            "MIGRATION REPORT" + (" (DRY RUN)" if summary.get('dry_run') else ""),
            "=" * 60,
            "",
            "Summary:",
            f"  Entries:     {summary.get('entries', 0)}",
            f"  Posts:       {summary.get('posts_selected', 0)} selected, "
            f"{summary.get('posts_exported', 0)} exported, {summary.get('posts_failed', 0)} failed",
            f"  Images:      {summary.get('images_downloaded', 0)} downloaded, "
            f"{summary.get('images_failed', 0)} failed",
            f"  Output:      {summary.get('output_directory', '')}",
            f"  Duration:    {summary.get('duration_formatted', '0s')}",
            f"  Success:     {summary.get('success_rate', 1.0) * 100:.1f}%",
        ]

        errors = report.get('errors', [])
        if errors:
            sections.append("")
            sections.append("Errors:")
            sections.append("-" * 60)
            for error in errors[:10]:
                sections.append(f"  {error.get('title')}: [{error.get('error_type')}] {error.get('error')}")
            if len(errors) > 10:
                sections.append(f"  ... and {len(errors) - 10} more")

        sections.append("=" * 60)
        return "\n".join(sections)

    def export_json_report(self, report: Dict[str, Any], filepath: str) -> None:
        """
        Export report to JSON file.

        Raises:
            OSError: If the file cannot be written
        """
        with open(filepath, 'w', encoding='utf-8') as f:
            json.dump(report, f, indent=2, ensure_ascii=False, default=str)

        self.logger.info(f"JSON report exported to {filepath}")
