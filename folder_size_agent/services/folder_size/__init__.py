"""
Folder size measurement.

Components:
- FolderSizeOrchestrator: start -> poll -> finish protocol with bounded restarts
- ResultCache: Latest measurement and last run report
- HourlySchedule: Hour window the scheduler fires in
- FolderSizeScheduler: Startup and scheduled triggers, skips overlapping runs
"""

from .orchestrator import FolderSizeOrchestrator
from .result_cache import ResultCache
from .schedule import HourlySchedule
from .scheduler import FolderSizeScheduler

__all__ = ["FolderSizeOrchestrator", "ResultCache", "HourlySchedule", "FolderSizeScheduler"]
