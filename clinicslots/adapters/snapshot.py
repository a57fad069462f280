"""
Loader for schedule and booking snapshots stored as YAML or JSON files.

Row keys follow the clinic database columns (``day_of_week``,
``appointment_start_time``, ...), so an export of the tables can be fed to
the engine unchanged.
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import time
from pathlib import Path
from typing import Any, Dict, List, Optional

import pendulum
import yaml
from pendulum import DateTime

from ..domain.exceptions import SnapshotError
from ..domain.models import Appointment, AppointmentStatus, ScheduleItem, WorkingPeriod

logger = logging.getLogger(__name__)


@dataclass
class Snapshot:
    """Everything the engine needs for one professional, read once."""
    working_periods: List[WorkingPeriod] = field(default_factory=list)
    appointments: List[Appointment] = field(default_factory=list)
    items: List[ScheduleItem] = field(default_factory=list)
    treatment_durations: Dict[str, int] = field(default_factory=dict)
    professional_id: Optional[str] = None
    patient_id: Optional[str] = None


class SnapshotLoader:
    """
    Parses snapshot files into domain objects.

    Naive timestamps are interpreted in the configured timezone. Items
    without an estimated duration get ``default_duration_minutes``.
    """

    def __init__(self, timezone: str = "America/Sao_Paulo", default_duration_minutes: int = 60):
        self.timezone = timezone
        self.default_duration_minutes = default_duration_minutes

    def load(self, path: Path) -> Snapshot:
        """
        Load a snapshot file.

        Args:
            path: .yaml, .yml or .json file

        Returns:
            Snapshot instance

        Raises:
            FileNotFoundError: If the file doesn't exist
            SnapshotError: If the file or one of its rows is malformed
        """
        if not path.exists():
            raise FileNotFoundError(f"Snapshot file not found: {path}")

        try:
            with open(path, "r", encoding="utf-8") as f:
                if path.suffix.lower() == ".json":
                    data = json.load(f)
                else:
                    data = yaml.safe_load(f) or {}
        except (json.JSONDecodeError, yaml.YAMLError) as exc:
            raise SnapshotError(f"Invalid snapshot file {path}: {exc}") from exc

        if not isinstance(data, dict):
            raise SnapshotError("Snapshot file must contain a mapping at the root level.")

        return self.from_dict(data)

    def from_dict(self, data: Dict[str, Any]) -> Snapshot:
        snapshot = Snapshot(
            professional_id=data.get("professional_id"),
            patient_id=data.get("patient_id"),
            treatment_durations={
                str(key): int(value) for key, value in (data.get("treatments") or {}).items()
            },
        )

        for index, row in enumerate(data.get("schedules") or []):
            snapshot.working_periods.append(self._parse_row(self.parse_working_period, "schedules", index, row))
        for index, row in enumerate(data.get("appointments") or []):
            snapshot.appointments.append(self._parse_row(self.parse_appointment, "appointments", index, row))
        for index, row in enumerate(data.get("items") or []):
            snapshot.items.append(self._parse_row(self.parse_item, "items", index, row))

        logger.debug(
            "Loaded snapshot: %d schedule rows, %d appointments, %d items",
            len(snapshot.working_periods), len(snapshot.appointments), len(snapshot.items),
        )
        return snapshot

    def parse_working_period(self, row: Dict[str, Any]) -> WorkingPeriod:
        return WorkingPeriod(
            professional_id=str(row["professional_id"]),
            weekday=int(row["day_of_week"]),
            start=parse_time_of_day(row["start_time"]),
            end=parse_time_of_day(row["end_time"]),
        )

    def parse_appointment(self, row: Dict[str, Any]) -> Appointment:
        patient_id = row.get("patient_id")
        return Appointment(
            id=str(row["id"]),
            professional_id=str(row["professional_id"]),
            patient_id=str(patient_id) if patient_id is not None else None,
            start=self.parse_instant(row["appointment_start_time"]),
            end=self.parse_instant(row["appointment_end_time"]),
            status=AppointmentStatus(row.get("status", AppointmentStatus.SCHEDULED.value)),
        )

    def parse_item(self, row: Dict[str, Any]) -> ScheduleItem:
        treatment_id = row.get("treatment_id")
        return ScheduleItem(
            id=str(row["id"]),
            estimated_duration_minutes=int(row.get("estimated_duration") or self.default_duration_minutes),
            priority=int(row.get("priority") or 1),
            treatment_id=str(treatment_id) if treatment_id is not None else None,
            tooth_number=row.get("tooth_number"),
            description=row.get("procedure_description", ""),
        )

    def parse_instant(self, value: Any) -> DateTime:
        parsed = pendulum.parse(str(value), tz=self.timezone)
        if not isinstance(parsed, DateTime):
            raise ValueError(f"Expected a date and time, got {value!r}")
        return parsed

    def _parse_row(self, parser, section: str, index: int, row: Any):
        if not isinstance(row, dict):
            raise SnapshotError(f"{section}[{index}] must be a mapping, got {type(row).__name__}")
        try:
            return parser(row)
        except KeyError as exc:
            raise SnapshotError(f"{section}[{index}] is missing field {exc}") from exc
        except (TypeError, ValueError) as exc:
            raise SnapshotError(f"{section}[{index}] is invalid: {exc}") from exc


def parse_time_of_day(value: Any) -> time:
    """
    Parse "HH:MM" or "HH:MM:SS".

    YAML 1.1 reads unquoted values such as 12:00 as base-60 integers, so an
    integer is taken as minutes since midnight.
    """
    if isinstance(value, time):
        return value
    if isinstance(value, int):
        hours, minutes = divmod(value, 60)
        return time(hour=hours, minute=minutes)
    return time.fromisoformat(str(value))
