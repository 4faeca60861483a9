"""
Orchestration package for coordinating migration pipeline phases.

This package sequences the export: Parse → Filter → Convert → Write → Report.
"""

from .migration_orchestrator import MigrationOrchestrator
from .migration_report import MigrationReport

__all__ = [
    'MigrationOrchestrator',
    'MigrationReport'
]
