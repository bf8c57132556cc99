import asyncio
import logging
from datetime import datetime
from typing import Dict, Optional, Set

from .result_cache import ResultCache
from ..dsm.api_client import DsmApiClient, encode_path_list
from ..dsm.error_codes import describe_error
from ..dsm.session_manager import DIRSIZE_API, SessionManager
from ...config import Settings
from ...core.exceptions import (
    FolderSizeError,
    InvalidTransitionError,
    ProtocolError,
    TaskPollApplicationError,
    TaskStartError,
    TransportError,
    UnexpectedError,
)
from ...models import (
    CalculationTask,
    DsmSession,
    RunOutcome,
    RunReport,
    RunState,
    SizeMeasurement,
    TaskState,
)


class FolderSizeOrchestrator:
    """
    Drives one folder size measurement on the appliance to completion.

    Flow per run: login -> start DirSize task -> poll status -> publish
    result -> stop task -> logout. A status poll answered with success=false
    restarts the whole flow, at most max_restarts times per run() call.
    Nothing raised inside a run escapes run().
    """

    def __init__(
        self,
        settings: Settings,
        api_client: DsmApiClient,
        session_manager: SessionManager,
        result_cache: ResultCache,
    ):
        self._settings = settings
        self._api_client = api_client
        self._session_manager = session_manager
        self._result_cache = result_cache

        self._state = RunState.IDLE
        self._is_running = False
        self._restarts = 0

        # Every state may also fall back to IDLE
        self._transitions: Dict[RunState, Set[RunState]] = {
            RunState.IDLE: {RunState.AUTHENTICATING},
            RunState.AUTHENTICATING: {RunState.STARTING},
            RunState.STARTING: {RunState.POLLING},
            RunState.POLLING: {RunState.FINALIZING, RunState.RETRYING},
            RunState.RETRYING: {RunState.AUTHENTICATING},
            RunState.FINALIZING: set(),
        }

    @property
    def state(self) -> RunState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._is_running

    async def run(self) -> RunReport:
        started_at = datetime.now()

        if self._is_running:
            logging.warning("Folder size calculation already in progress - skipping")
            return RunReport(outcome=RunOutcome.SKIPPED, started_at=started_at)

        self._is_running = True
        self._restarts = 0
        logging.info("Folder size calculation initiated")

        try:
            measurement = await self._run_with_restarts()
            report = RunReport(
                outcome=RunOutcome.SUCCEEDED,
                started_at=started_at,
                restarts=self._restarts,
                measurement=measurement,
            )
        except FolderSizeError as e:
            logging.error(
                f"Folder size run failed during {e.operation} "
                f"({type(e).__name__}): {e}",
                extra={"operation": e.operation, "state": self._state.value},
            )
            report = self._failed_report(started_at, e)
        except Exception as e:
            error = UnexpectedError(f"Unexpected error: {e}", self._state.value)
            logging.error(
                f"Unexpected exception in folder size run while {self._state.value}: {e}",
                exc_info=True,
                extra={"operation": error.operation, "state": self._state.value},
            )
            report = self._failed_report(started_at, error)
        finally:
            self._transition(RunState.IDLE)
            self._is_running = False

        self._result_cache.record_run(report)
        return report

    async def _run_with_restarts(self) -> SizeMeasurement:
        while True:
            try:
                return await self._measure_once()
            except TaskPollApplicationError:
                if self._restarts >= self._settings.max_restarts:
                    logging.error(
                        f"Status poll failed again after {self._restarts} restart(s) - giving up"
                    )
                    raise
                self._restarts += 1
                self._transition(RunState.RETRYING)
                logging.warning(
                    f"Restarting folder size calculation "
                    f"({self._restarts}/{self._settings.max_restarts})"
                )

    async def _measure_once(self) -> SizeMeasurement:
        self._transition(RunState.AUTHENTICATING)
        session = await self._session_manager.open()

        self._transition(RunState.STARTING)
        try:
            task = await self._start_task(session)
        except FolderSizeError:
            await self._session_manager.close(session)
            raise

        self._transition(RunState.POLLING)
        total_size = await self._poll_until_finished(session, task)

        self._transition(RunState.FINALIZING)
        measurement = SizeMeasurement.from_total_size(
            total_size, self._settings.max_size_bytes
        )
        self._result_cache.publish(measurement)
        logging.info(
            f"Folder size data: {measurement.current_size_bytes} bytes of "
            f"{measurement.max_size_bytes} ({measurement.used_percentage:.2f}%)"
        )

        await self._stop_task(session, task)
        await self._session_manager.close(session)
        logging.info("Folder size calculation completed")
        return measurement

    async def _start_task(self, session: DsmSession) -> CalculationTask:
        target_path = self._settings.shared_folder_path
        logging.info(f"Starting folder size calculation for {target_path}")

        response = await self._api_client.request(
            session.dirsize_path,
            DIRSIZE_API,
            2,
            "start",
            path=encode_path_list([target_path]),
            _sid=session.sid,
        )

        if not response.success:
            raise TaskStartError(
                f"Failed to start folder size calculation for {target_path}",
                operation="start",
                error=response.error,
                description=describe_error(DIRSIZE_API, response.error),
            )

        task_id: Optional[str] = response.data.get("taskid")
        if not task_id:
            raise ProtocolError("DirSize start response has no taskid", "start")

        logging.info(f"Folder size calculation started - task {task_id}")
        return CalculationTask(task_id=task_id, target_path=target_path)

    async def _poll_until_finished(self, session: DsmSession, task: CalculationTask) -> int:
        while True:
            logging.debug(f"Polling folder size status for task {task.task_id}")
            try:
                response = await self._api_client.request(
                    session.dirsize_path,
                    DIRSIZE_API,
                    2,
                    "status",
                    taskid=task.task_id,
                    _sid=session.sid,
                )
            except TransportError:
                # Appliance presumed unreachable: no stop, no logout
                task.state = TaskState.FAILED
                raise

            if not response.success:
                task.state = TaskState.FAILED
                error = TaskPollApplicationError(
                    f"Failed to retrieve folder size status for task {task.task_id}",
                    operation="status",
                    error=response.error,
                    description=describe_error(DIRSIZE_API, response.error),
                )
                logging.warning(
                    f"{error} - releasing task and session",
                    extra={"operation": "status", "state": self._state.value},
                )
                await self._stop_task(session, task)
                await self._session_manager.close(session)
                raise error

            if response.data.get("finished"):
                task.state = TaskState.FINISHED
                logging.info("Folder size calculation finished")
                try:
                    return self._extract_total_size(response.data)
                except ProtocolError:
                    await self._stop_task(session, task)
                    await self._session_manager.close(session)
                    raise

            task.state = TaskState.IN_PROGRESS
            logging.info(
                f"Folder size calculation in progress... "
                f"({response.data.get('num_file', '?')} files, "
                f"{response.data.get('total_size', '?')} bytes so far)"
            )
            await asyncio.sleep(self._settings.poll_interval_seconds)

    def _extract_total_size(self, data: dict) -> int:
        total_size = data.get("total_size")
        if (
            isinstance(total_size, bool)
            or not isinstance(total_size, (int, float))
            or total_size < 0
        ):
            raise ProtocolError(
                f"Finished DirSize status has no valid total_size: {total_size!r}",
                "status",
            )
        return int(total_size)

    async def _stop_task(self, session: DsmSession, task: CalculationTask) -> None:
        """Release the appliance task. Failures are logged only."""
        try:
            response = await self._api_client.request(
                session.dirsize_path,
                DIRSIZE_API,
                2,
                "stop",
                taskid=task.task_id,
                _sid=session.sid,
            )
        except FolderSizeError as e:
            logging.warning(f"Could not stop folder size task {task.task_id}: {e}")
            return

        if response.success:
            logging.info(f"Folder size task {task.task_id} stopped")
        else:
            logging.warning(
                f"Stopping folder size task {task.task_id} rejected: {response.error}"
            )

    def _transition(self, new_state: RunState) -> None:
        old_state = self._state
        if new_state == old_state:
            return

        if new_state != RunState.IDLE and new_state not in self._transitions[old_state]:
            raise InvalidTransitionError(old_state.value, new_state.value)

        logging.debug(f"Run state: {old_state.value} -> {new_state.value}")
        self._state = new_state

    def _failed_report(self, started_at: datetime, error: FolderSizeError) -> RunReport:
        return RunReport(
            outcome=RunOutcome.FAILED,
            started_at=started_at,
            restarts=self._restarts,
            error=f"{type(error).__name__}: {error}",
        )
