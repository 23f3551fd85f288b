from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Literal, Optional, List
from uuid import uuid4
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


Priority = Literal["low", "medium", "high"]

MAX_WINDOW_DAYS = 366


def normalize_clock(value) -> Optional[str]:
    """Coerce a time-of-day value to a zero-padded HH:MM string.

    Accepts datetime.time objects, "H:MM", "HH:MM" and "HH:MM:SS" strings.
    "24:00" is allowed so that a block ending at midnight stays expressible.
    """
    if value is None:
        return None
    if isinstance(value, time):
        return value.strftime("%H:%M")
    text = str(value).strip()
    if not text:
        return None
    parts = text.split(":")
    if len(parts) not in (2, 3) or not all(p.isdigit() for p in parts):
        raise ValueError(f"invalid time of day: {value!r}")
    hour, minute = int(parts[0]), int(parts[1])
    if not 0 <= minute <= 59 or not 0 <= hour <= 24 or (hour == 24 and minute != 0):
        raise ValueError(f"invalid time of day: {value!r}")
    return f"{hour:02d}:{minute:02d}"


def _new_id() -> str:
    return uuid4().hex


class Task(BaseModel):
    id: str = Field(default_factory=_new_id)
    title: str = Field(..., min_length=1)
    description: Optional[str] = None

    priority: Priority = "medium"
    estimated_minutes: Optional[int] = Field(None, ge=1)

    # unset due_date == inbox
    due_date: Optional[date] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None

    completed: bool = False
    completed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: str) -> str:
        v2 = v.strip()
        if not v2:
            raise ValueError("title must not be blank")
        return v2

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def clock_format(cls, v):
        return normalize_clock(v)

    @property
    def is_inbox(self) -> bool:
        return self.due_date is None and not self.completed


class TaskCreate(BaseModel):
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    priority: Priority = "medium"
    estimated_minutes: Optional[int] = Field(None, ge=1)
    due_date: Optional[date] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def clock_format(cls, v):
        return normalize_clock(v)


class TaskPatch(BaseModel):
    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    priority: Optional[Priority] = None
    estimated_minutes: Optional[int] = Field(None, ge=1)
    due_date: Optional[date] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    completed: Optional[bool] = None

    # None means "leave unchanged"; these columns cannot be cleared
    @field_validator("title", "priority", "completed", mode="before")
    @classmethod
    def not_null(cls, v, info):
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return v

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: str) -> str:
        v2 = v.strip()
        if not v2:
            raise ValueError("title must not be blank")
        return v2

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def clock_format(cls, v):
        return normalize_clock(v)


class TaskUpdate(BaseModel):
    """One row of an accepted plan, applied back onto a task record."""

    model_config = ConfigDict(populate_by_name=True)

    task_id: str = Field(..., alias="taskId")
    priority: Optional[Priority] = None
    estimated_minutes: Optional[int] = Field(None, ge=1, alias="estimatedMinutes")
    due_date: Optional[date] = Field(None, alias="dueDate")
    start_time: Optional[str] = Field(None, alias="startTime")
    end_time: Optional[str] = Field(None, alias="endTime")

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def clock_format(cls, v):
        return normalize_clock(v)

    def as_patch(self) -> dict:
        return self.model_dump(exclude={"task_id"}, exclude_none=True)


class PrioritySuggestion(BaseModel):
    task_id: str
    title: str
    current_priority: Priority
    suggested_priority: Priority
    reason: str


class DurationEstimate(BaseModel):
    task_id: str
    title: str
    current_minutes: Optional[int] = None
    estimated_minutes: int
    reason: str


class ScheduleWindow(BaseModel):
    start_date: date
    end_date: date
    work_start_hour: int = Field(9, ge=0, le=23)
    work_end_hour: int = Field(18, ge=1, le=24)

    @model_validator(mode="after")
    def check_bounds(self) -> "ScheduleWindow":
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        if (self.end_date - self.start_date).days + 1 > MAX_WINDOW_DAYS:
            raise ValueError(f"window must not span more than {MAX_WINDOW_DAYS} days")
        if self.work_end_hour <= self.work_start_hour:
            raise ValueError("work_end_hour must be after work_start_hour")
        return self

    def days(self) -> List[date]:
        span = (self.end_date - self.start_date).days
        return [self.start_date + timedelta(days=i) for i in range(span + 1)]


class Placement(BaseModel):
    task_id: str
    due_date: date
    start_time: str
    end_time: str


class PlannerPreferences(BaseModel):
    timezone: str = "America/Sao_Paulo"

    work_start_hour: int = Field(9, ge=0, le=23)
    work_end_hour: int = Field(18, ge=1, le=24)
    horizon_days: int = Field(7, ge=0, le=MAX_WINDOW_DAYS - 1)

    @field_validator("timezone")
    @classmethod
    def known_timezone(cls, v: str) -> str:
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"unknown timezone: {v!r}") from None
        return v

    @model_validator(mode="after")
    def check_hours(self) -> "PlannerPreferences":
        if self.work_end_hour <= self.work_start_hour:
            raise ValueError("work_end_hour must be after work_start_hour")
        return self
