from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class RunState(str, Enum):
    """
    Protocol state of a folder size run.

    Normal Workflow: Idle -> Authenticating -> Starting -> Polling -> Finalizing -> Idle
    Recovery: Polling -> Retrying -> Authenticating
    Alternative: -> Idle (on unrecoverable error)
    """

    IDLE = "Idle"
    AUTHENTICATING = "Authenticating"
    STARTING = "Starting"
    POLLING = "Polling"
    RETRYING = "Retrying"
    FINALIZING = "Finalizing"


class TaskState(str, Enum):
    """State of the appliance-side DirSize task"""

    PENDING = "Pending"  # Start requested, no status seen yet
    IN_PROGRESS = "InProgress"  # Appliance is still walking the folder
    FINISHED = "Finished"  # total_size is final
    FAILED = "Failed"  # Status poll reported success=false


class RunOutcome(str, Enum):
    SUCCEEDED = "Succeeded"
    FAILED = "Failed"
    SKIPPED = "Skipped"  # Another run was already active


@dataclass
class ApiResponse:
    """Envelope returned by every DSM web API call."""

    success: bool
    data: Dict[str, Any] = field(default_factory=dict)
    error: Dict[str, Any] = field(default_factory=dict)

    @property
    def error_code(self) -> Optional[int]:
        return self.error.get("code")


@dataclass(frozen=True)
class DsmSession:
    sid: str
    auth_path: str
    dirsize_path: str
    created_at: datetime = field(default_factory=datetime.now)

    @property
    def masked_sid(self) -> str:
        return f"{self.sid[:4]}..." if len(self.sid) > 4 else "***"


@dataclass
class CalculationTask:
    task_id: str
    target_path: str
    state: TaskState = TaskState.PENDING


class SizeMeasurement(BaseModel):
    """
    Result of one successful folder size run.

    Immutable once built; the result cache swaps whole instances.
    """

    model_config = ConfigDict(frozen=True)

    current_size_bytes: int = Field(..., ge=0, description="Total folder size reported by DSM")
    max_size_bytes: int = Field(..., gt=0, description="Configured folder capacity")
    used_percentage: float = Field(..., description="current/max * 100, not clamped")
    measured_at: datetime = Field(default_factory=datetime.now)

    @classmethod
    def from_total_size(cls, total_size: int, max_size_bytes: int) -> "SizeMeasurement":
        return cls(
            current_size_bytes=total_size,
            max_size_bytes=max_size_bytes,
            used_percentage=(total_size / max_size_bytes) * 100,
        )

    def to_payload(self) -> Dict[str, Any]:
        """Fields served by GET /api/folder-size"""
        return self.model_dump(
            include={"current_size_bytes", "max_size_bytes", "used_percentage"}
        )


class RunReport(BaseModel):
    """Summary of one externally triggered orchestrator invocation"""

    outcome: RunOutcome
    started_at: datetime
    finished_at: datetime = Field(default_factory=datetime.now)
    restarts: int = 0
    measurement: Optional[SizeMeasurement] = None
    error: Optional[str] = None
