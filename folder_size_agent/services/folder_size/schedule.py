from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import FrozenSet

ALL_HOURS = frozenset(range(24))


@dataclass(frozen=True)
class HourlySchedule:
    """Fires once an hour at `minute`, but only during `hours`."""

    hours: FrozenSet[int]
    minute: int = 0

    def __post_init__(self):
        if not self.hours:
            raise ValueError("Schedule needs at least one hour")
        if not all(0 <= hour <= 23 for hour in self.hours):
            raise ValueError(f"Schedule hours must be within 0-23: {sorted(self.hours)}")
        if not 0 <= self.minute <= 59:
            raise ValueError(f"Schedule minute must be within 0-59: {self.minute}")

    @classmethod
    def from_expression(cls, hours: str, minute: int = 0) -> "HourlySchedule":
        """
        Parse an hour expression.

        Accepted forms: "*", "8-22", "6,12,18" and combinations such as "0-2,20-23".
        """
        expression = hours.strip()
        if expression == "*":
            return cls(hours=ALL_HOURS, minute=minute)

        selected = set()
        for part in expression.split(","):
            part = part.strip()
            if "-" in part:
                start, end = (int(value) for value in part.split("-", 1))
                if start > end:
                    raise ValueError(f"Invalid hour range: {part}")
                selected.update(range(start, end + 1))
            else:
                selected.add(int(part))

        return cls(hours=frozenset(selected), minute=minute)

    def next_run_after(self, now: datetime) -> datetime:
        candidate = now.replace(minute=self.minute, second=0, microsecond=0)
        if candidate <= now:
            candidate += timedelta(hours=1)

        # At most one day ahead since hours is never empty
        while candidate.hour not in self.hours:
            candidate += timedelta(hours=1)

        return candidate
