#!/usr/bin/env python3
"""
Blogger to Markdown Migration Tool - Main CLI Entry Point

Exports the posts of a Blogger Atom export into static-site page bundles:
one directory per post holding an index file with a metadata header and the
images the post links to.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

import yaml

from config_loader import ConfigLoader, get_nested
from fetchers import FeedParseError
from logger import log_config, log_section, setup_logging
from models import MigrationError
from orchestrator import MigrationOrchestrator, MigrationReport

__version__ = "1.0.0"


def create_argument_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser for CLI."""
    parser = argparse.ArgumentParser(
        description="Export Blogger posts to Markdown page bundles with local images",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Export posts into ./content/blog
  python migrate.py blog-01-02-2020.xml content/blog

  # Use pandoc for conversion and YAML frontmatter
  python migrate.py --converter pandoc --frontmatter yaml blog.xml out

  # Keep going when a post fails, four posts at a time
  python migrate.py --continue-on-error --max-workers 4 blog.xml out

  # Preview the bundles without downloading anything
  python migrate.py --dry-run -v blog.xml out
        """
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'%(prog)s {__version__}'
    )

    parser.add_argument(
        'xml',
        type=Path,
        help='The location of the Blogger XML file'
    )

    parser.add_argument(
        'outdir',
        type=Path,
        help='The directory to save the Markdown files and images'
    )

    parser.add_argument(
        '--config',
        type=str,
        default=None,
        help='Path to configuration YAML file'
    )

    parser.add_argument(
        '--converter',
        choices=['markdownify', 'pandoc'],
        default=None,
        help='HTML to Markdown backend (default: markdownify)'
    )

    parser.add_argument(
        '--frontmatter',
        choices=['toml', 'yaml'],
        default=None,
        help='Metadata header format (default: toml)'
    )

    parser.add_argument(
        '--continue-on-error',
        action=argparse.BooleanOptionalAction,
        default=None,
        help='Log failing posts and keep exporting the rest'
    )

    parser.add_argument(
        '--max-workers',
        type=int,
        default=None,
        help='Number of posts exported in parallel (default: 1)'
    )

    parser.add_argument(
        '--dry-run',
        action=argparse.BooleanOptionalAction,
        default=None,
        help='List the bundles that would be written without writing them'
    )

    parser.add_argument(
        '--report',
        type=str,
        default=None,
        help='Write a JSON migration report to this path'
    )

    parser.add_argument(
        '--log-file',
        type=str,
        default=None,
        help='Also write logs to this file'
    )

    parser.add_argument(
        '-v', '--verbose',
        action='count',
        default=0,
        help='Increase verbosity (-v for INFO, -vv for DEBUG)'
    )

    return parser


def run_migration(config: dict, feed_path: Path, logger: logging.Logger) -> int:
    """Execute the export pipeline and return the process exit code."""
    try:
        orchestrator = MigrationOrchestrator(config, logger=logger)
        report = orchestrator.run(feed_path)
    except FeedParseError as e:
        logger.error(f"Could not parse feed {feed_path}: {e}")
        return 2
    except FileNotFoundError as e:
        logger.error(f"Feed file not found: {e}")
        return 2
    except MigrationError as e:
        logger.error(f"Migration failed: {e}")
        return 1
    except KeyboardInterrupt:
        logger.error("Migration interrupted by user")
        return 130

    report_generator = MigrationReport(logger)
    print("\n" + report_generator.format_console_report(report))

    report_path = get_nested(config, 'migration.report_path')
    if report_path:
        try:
            report_generator.export_json_report(report, report_path)
        except OSError as e:
            logger.warning(f"Failed to export JSON report: {str(e)}")

    errors = report['summary']['total_errors']
    if errors > 0:
        logger.warning(f"Migration completed with {errors} errors")
        return 1

    logger.info("Migration completed successfully")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    logger = setup_logging(verbosity=args.verbose)

    try:
        config = ConfigLoader.load(args.config)
        config = ConfigLoader.merge_with_args(config, args)
        ConfigLoader.validate(config)
    except FileNotFoundError as e:
        print(f"ERROR: File not found: {e}", file=sys.stderr)
        return 2
    except (ValueError, yaml.YAMLError) as e:
        print(f"ERROR: Configuration error: {e}", file=sys.stderr)
        return 2

    logger = setup_logging(
        verbosity=args.verbose,
        log_file=get_nested(config, 'logging.file'),
        level=get_nested(config, 'logging.level'),
    )

    log_section("Blogger to Markdown Migration Tool")
    logger.info(f"Version: {__version__}")
    log_config(config)

    return run_migration(config, args.xml, logger)


if __name__ == "__main__":
    sys.exit(main())
