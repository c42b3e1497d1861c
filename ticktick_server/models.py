"""Pydantic input models for TickTick tools.

Every tool uses a Pydantic BaseModel for input validation, so a missing
required argument is rejected before any request reaches TickTick.
Arguments travel in camelCase on the wire (taskId, projectId, ...) and
are snake_case attributes in Python.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ticktick_server.queries import DEFAULT_TIMEZONE_OFFSET_HOURS


# ---------------------------------------------------------------------------
# Shared model config
# ---------------------------------------------------------------------------

_STRICT_CONFIG = ConfigDict(
    str_strip_whitespace=True,
    validate_assignment=True,
    extra="forbid",
    populate_by_name=True,
)


def _check_date_format(v: str | None) -> str | None:
    if v is not None and "T" not in v:
        raise ValueError(
            f"Date must be in ISO format 'yyyy-MM-ddTHH:mm:ssZ' (e.g., '2026-03-15T09:00:00+0000'), got: {v}"
        )
    return v


# ---------------------------------------------------------------------------
# Query models
# ---------------------------------------------------------------------------

class GetTasksInput(BaseModel):
    """Input for listing tasks of one project or of every project."""
    model_config = _STRICT_CONFIG

    project_id: Optional[str] = Field(
        default=None,
        alias="projectId",
        description="Optional project ID to filter tasks; omit for all projects plus the inbox",
    )


class GetTodaysTasksInput(BaseModel):
    """Input for listing tasks due today."""
    model_config = _STRICT_CONFIG

    project_id: Optional[str] = Field(
        default=None,
        alias="projectId",
        description="Optional project ID to filter today's tasks",
    )


class GetOverdueTasksInput(BaseModel):
    """Input for listing overdue tasks."""
    model_config = _STRICT_CONFIG

    project_id: Optional[str] = Field(
        default=None,
        alias="projectId",
        description="Optional project ID to filter overdue tasks",
    )
    timezone_offset_hours: int = Field(
        default=DEFAULT_TIMEZONE_OFFSET_HOURS,
        alias="timezoneOffsetHours",
        description="Timezone offset in hours from UTC (e.g., 8 for UTC+8). Defaults to 8",
        ge=-12,
        le=14,
    )


# ---------------------------------------------------------------------------
# Task models
# ---------------------------------------------------------------------------

class CreateTaskInput(BaseModel):
    """Input for creating a new task."""
    model_config = _STRICT_CONFIG

    title: str = Field(
        ...,
        description="Task title (required)",
        min_length=1,
        max_length=500,
    )
    content: Optional[str] = Field(
        default=None,
        description="Task description/content",
        max_length=5000,
    )
    project_id: Optional[str] = Field(
        default=None,
        alias="projectId",
        description="Project ID where the task should be created (defaults to the inbox)",
        min_length=1,
    )
    due_date: Optional[str] = Field(
        default=None,
        alias="dueDate",
        description="Due date in ISO format: 'yyyy-MM-ddTHH:mm:ssZ' (e.g., '2026-03-15T09:00:00+0000')",
    )
    start_date: Optional[str] = Field(
        default=None,
        alias="startDate",
        description="Start date in ISO format: 'yyyy-MM-ddTHH:mm:ssZ'",
    )
    is_all_day: Optional[bool] = Field(
        default=None,
        alias="isAllDay",
        description="Whether this is an all-day task",
    )
    time_zone: Optional[str] = Field(
        default=None,
        alias="timeZone",
        description="Time zone (e.g., 'Asia/Shanghai', 'America/New_York')",
    )
    priority: Optional[int] = Field(
        default=None,
        description="Task priority (0=None, 1=Low, 3=Medium, 5=High)",
        ge=0,
    )
    tags: Optional[list[str]] = Field(
        default=None,
        description="Task tags (e.g., ['work', 'urgent'])",
    )

    @field_validator("due_date", "start_date")
    @classmethod
    def validate_date_format(cls, v: str | None) -> str | None:
        return _check_date_format(v)

    @field_validator("tags")
    @classmethod
    def dedupe_tags(cls, v: list[str] | None) -> list[str] | None:
        if v is None:
            return v
        return list(dict.fromkeys(v))


class UpdateTaskInput(BaseModel):
    """Input for updating an existing task. Only provided fields change."""
    model_config = _STRICT_CONFIG

    task_id: str = Field(..., alias="taskId", description="Task ID to update (required)", min_length=1)
    project_id: Optional[str] = Field(default=None, alias="projectId", description="Project ID containing the task", min_length=1)
    title: Optional[str] = Field(default=None, description="New task title", min_length=1, max_length=500)
    content: Optional[str] = Field(default=None, description="New task description/content", max_length=5000)
    due_date: Optional[str] = Field(default=None, alias="dueDate", description="New due date in ISO format")
    start_date: Optional[str] = Field(default=None, alias="startDate", description="New start date in ISO format")
    is_all_day: Optional[bool] = Field(default=None, alias="isAllDay", description="Whether this is an all-day task")
    time_zone: Optional[str] = Field(default=None, alias="timeZone", description="Time zone")
    priority: Optional[int] = Field(default=None, description="New task priority (0=None, 1=Low, 3=Medium, 5=High)", ge=0)
    tags: Optional[list[str]] = Field(default=None, description="New task tags (replaces existing)")

    @field_validator("due_date", "start_date")
    @classmethod
    def validate_date_format(cls, v: str | None) -> str | None:
        return _check_date_format(v)

    @field_validator("tags")
    @classmethod
    def dedupe_tags(cls, v: list[str] | None) -> list[str] | None:
        if v is None:
            return v
        return list(dict.fromkeys(v))


class TaskRefInput(BaseModel):
    """A task addressed by task ID and the project that contains it."""
    model_config = _STRICT_CONFIG

    task_id: str = Field(..., alias="taskId", description="Task ID (required)", min_length=1)
    project_id: str = Field(..., alias="projectId", description="Project ID containing the task (required)", min_length=1)


class GetTaskInput(TaskRefInput):
    """Input for getting a single task."""


class CompleteTaskInput(TaskRefInput):
    """Input for completing a task."""


class DeleteTaskInput(TaskRefInput):
    """Input for deleting a task."""
