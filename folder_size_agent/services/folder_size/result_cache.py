from typing import Any, Dict, Optional

from ...models import RunReport, SizeMeasurement


class ResultCache:
    """
    Latest folder size measurement plus the report of the last run.

    Written only by the orchestrator. Both values are immutable objects
    replaced by a single assignment, so readers never see a partial update.
    """

    def __init__(self):
        self._measurement: Optional[SizeMeasurement] = None
        self._last_run: Optional[RunReport] = None

    def publish(self, measurement: SizeMeasurement) -> None:
        self._measurement = measurement

    def record_run(self, report: RunReport) -> None:
        self._last_run = report

    @property
    def measurement(self) -> Optional[SizeMeasurement]:
        return self._measurement

    @property
    def last_run(self) -> Optional[RunReport]:
        return self._last_run

    def as_payload(self) -> Dict[str, Any]:
        measurement = self._measurement
        return measurement.to_payload() if measurement else {}

    def get_status(self) -> dict:
        measurement = self._measurement
        last_run = self._last_run
        return {
            "has_measurement": measurement is not None,
            "measured_at": measurement.measured_at if measurement else None,
            "last_run": last_run.model_dump(exclude={"measurement"}) if last_run else None,
        }
