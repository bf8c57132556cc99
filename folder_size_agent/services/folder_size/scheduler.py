import asyncio
import logging
from datetime import datetime
from typing import Optional, Set

from .orchestrator import FolderSizeOrchestrator
from .schedule import HourlySchedule
from ...config import Settings


class FolderSizeScheduler:
    """
    Triggers folder size runs at startup and on every schedule tick.

    Runs execute as separate asyncio tasks so a long polling wait never delays
    the schedule loop. A tick that arrives while a run is active is skipped.
    """

    def __init__(
        self,
        settings: Settings,
        orchestrator: FolderSizeOrchestrator,
        schedule: HourlySchedule,
    ):
        self._settings = settings
        self._orchestrator = orchestrator
        self._schedule = schedule

        self._is_running = False
        self._scheduler_task: Optional[asyncio.Task] = None
        self._run_tasks: Set[asyncio.Task] = set()

    @property
    def is_running(self) -> bool:
        return self._is_running

    @property
    def run_in_progress(self) -> bool:
        return self._orchestrator.is_running

    async def start_scheduling(self) -> None:
        if self._is_running:
            logging.warning("Folder size scheduling already running")
            return

        self._is_running = True

        if self._settings.run_on_startup:
            logging.info("Initial run of the folder size calculation")
            self.trigger()

        self._scheduler_task = asyncio.create_task(self._scheduling_loop())
        logging.info("Folder size scheduling started")

    async def stop_scheduling(self) -> None:
        if not self._is_running:
            return

        self._is_running = False

        tasks = list(self._run_tasks)
        if self._scheduler_task:
            tasks.append(self._scheduler_task)

        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

        self._run_tasks.clear()
        logging.info("Folder size scheduling stopped")

    def trigger(self) -> Optional[asyncio.Task]:
        """Start a run in the background unless one is already active."""
        if self._orchestrator.is_running:
            logging.warning("Previous folder size run still active - skipping trigger")
            return None

        task = asyncio.create_task(self._orchestrator.run())
        self._run_tasks.add(task)
        task.add_done_callback(self._run_tasks.discard)
        return task

    async def _scheduling_loop(self) -> None:
        try:
            while self._is_running:
                now = datetime.now()
                next_run = self._schedule.next_run_after(now)
                logging.info(f"Next folder size calculation scheduled at {next_run:%Y-%m-%d %H:%M}")

                await asyncio.sleep(max((next_run - now).total_seconds(), 0))

                logging.info("Scheduled task started: folder size calculation")
                self.trigger()

        except asyncio.CancelledError:
            logging.debug("Folder size scheduling loop cancelled")
        except Exception as e:
            logging.error(f"Unexpected error in scheduling loop: {e}")
