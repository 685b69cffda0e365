from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Protocol

from ..core.enums import AttendanceStatus, EventKind

MANAGERS_TOPIC = "managers"


def department_topic(department: str) -> str:
    return f"department:{department}"


def employee_topic(employee_id: int) -> str:
    return f"employee:{int(employee_id)}"


@dataclass(frozen=True)
class AttendanceEvent:
    kind: EventKind
    employee_id: int
    employee_name: str
    department: Optional[str]
    timestamp: datetime
    status: AttendanceStatus
    total_hours: Optional[float] = None

    def topics(self) -> list[str]:
        """Everyone who may care: all managers, the department, the employee."""
        topics = [MANAGERS_TOPIC]
        if self.department:
            topics.append(department_topic(self.department))
        topics.append(employee_topic(self.employee_id))
        return topics

    def to_dict(self) -> dict:
        data = {
            "type": self.kind.value,
            "employeeId": self.employee_id,
            "employeeName": self.employee_name,
            "department": self.department,
            "timestamp": self.timestamp.isoformat(),
            "status": self.status.value,
        }
        if self.total_hours is not None:
            data["totalHours"] = self.total_hours
        return data


class EventPublisher(Protocol):
    def publish_event(self, event: AttendanceEvent) -> int:
        raise NotImplementedError
