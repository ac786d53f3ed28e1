# src/task_timer/tasks/task_models.py

from __future__ import annotations

import re
import uuid
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

MAX_HOURS = 24

_DURATION_RE = re.compile(r"^\s*(\d+)\s*h\s+(\d+)\s*m\s*$", re.IGNORECASE)
_SCHEME_RE = re.compile(r"^[a-z][a-z0-9+.\-]*:(?!\d)", re.IGNORECASE)


class Tag(StrEnum):
    PERSONAL = "Personal"
    OFFICE = "Office"
    URGENT = "Urgent"

    @classmethod
    def parse(cls, raw: str | None) -> Tag:
        if not raw:
            return cls.PERSONAL
        for t in cls:
            if t.value.lower() == raw.strip().lower():
                return t
        raise ValueError(f"unknown tag: {raw!r}")


class Priority(StrEnum):
    LOW = "Low"
    HIGH = "High"

    @classmethod
    def parse(cls, raw: str | None) -> Priority:
        if not raw:
            return cls.LOW
        for p in cls:
            if p.value.lower() == raw.strip().lower():
                return p
        raise ValueError(f"unknown priority: {raw!r}")


@dataclass(slots=True, frozen=True, order=True)
class Duration:
    """
    Allotted or remaining time with one-minute resolution.

    String form is "<h>h <mm>m" (minutes zero-padded), e.g. "0h 05m".
    Parsing also accepts the unpadded "0h 5m" form.
    """

    hours: int = 0
    minutes: int = 0

    def __post_init__(self) -> None:
        if not 0 <= self.hours <= MAX_HOURS:
            raise ValueError(f"hours out of range: {self.hours}")
        if not 0 <= self.minutes <= 59:
            raise ValueError(f"minutes out of range: {self.minutes}")

    @property
    def total_minutes(self) -> int:
        return self.hours * 60 + self.minutes

    @classmethod
    def from_minutes(cls, total: int) -> Duration:
        total = max(0, int(total))
        return cls(hours=total // 60, minutes=total % 60)

    @classmethod
    def parse(cls, raw: str) -> Duration:
        m = _DURATION_RE.match(raw or "")
        if not m:
            raise ValueError(f"malformed duration: {raw!r}")
        return cls(hours=int(m.group(1)), minutes=int(m.group(2)))

    def __str__(self) -> str:
        return f"{self.hours}h {self.minutes:02d}m"


def normalize_link(raw: str) -> str:
    """Prefix https:// onto links typed without a scheme ("docs.example.com")."""
    value = (raw or "").strip()
    if not value or _SCHEME_RE.match(value):
        return value
    return f"https://{value}"


def new_task_id() -> str:
    return uuid.uuid4().hex


@dataclass(slots=True)
class Task:
    title: str
    description: str = ""
    tag: Tag = Tag.PERSONAL
    priority: Priority = Priority.LOW
    duration: Duration = field(default_factory=Duration)
    id: str = field(default_factory=new_task_id)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "tag": self.tag.value,
            "priority": self.priority.value,
            "time": str(self.duration),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Task:
        """
        Build a Task from its stored form.

        Raises ValueError/KeyError/TypeError on malformed records; the store
        turns those into StorageReadError. A missing id gets a fresh one.
        """
        task_id = data.get("id") or new_task_id()
        return cls(
            id=str(task_id),
            title=str(data["title"]),
            description=str(data.get("description") or ""),
            tag=Tag.parse(data.get("tag")),
            priority=Priority.parse(data.get("priority")),
            duration=Duration.parse(str(data["time"])),
        )


@dataclass(slots=True)
class TaskStatus:
    """Per-task run state. `remaining` never exceeds `original`."""

    running: bool
    original: Duration
    remaining: Duration

    @classmethod
    def idle(cls, duration: Duration) -> TaskStatus:
        return cls(running=False, original=duration, remaining=duration)

    def reset(self) -> None:
        self.running = False
        self.remaining = self.original

    def to_dict(self) -> dict[str, Any]:
        return {
            "running": self.running,
            "originalDuration": str(self.original),
            "remainingDuration": str(self.remaining),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TaskStatus:
        """Read the stored form; the older doing/originalTime/remainingTime names are accepted too."""
        raw_original = data["originalDuration"] if "originalDuration" in data else data["originalTime"]
        original = Duration.parse(str(raw_original))
        raw_remaining = data.get("remainingDuration") or data.get("remainingTime") or original
        remaining = Duration.parse(str(raw_remaining))
        return cls(
            running=bool(data.get("running", data.get("doing", False))),
            original=original,
            remaining=min(remaining, original),
        )
