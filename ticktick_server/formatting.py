"""Response formatting helpers for the TickTick server.

Tasks are returned as pretty-printed JSON, each one carrying a
human-readable priority label next to TickTick's numeric priority.
"""

from __future__ import annotations

import json
import logging
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)

CHARACTER_LIMIT = 25_000


class TaskPriority(int, Enum):
    """TickTick task priority levels."""
    NONE = 0
    LOW = 1
    MEDIUM = 3
    HIGH = 5


# ---------------------------------------------------------------------------
# Priority display
# ---------------------------------------------------------------------------

PRIORITY_LABELS = {
    TaskPriority.NONE: "None",
    TaskPriority.LOW: "Low",
    TaskPriority.MEDIUM: "Medium",
    TaskPriority.HIGH: "High",
}


def priority_label(value: int | None) -> str:
    """Convert priority int to human label. Unknown levels are 'Custom (n)'."""
    if not value:
        return PRIORITY_LABELS[TaskPriority.NONE]
    label = PRIORITY_LABELS.get(value)
    if label is None:
        return f"Custom ({value})"
    return label


def enhance_task(task: dict) -> dict:
    """Copy a task and add its priorityText. Dates pass through untouched."""
    enhanced = dict(task)
    enhanced["priorityText"] = priority_label(task.get("priority"))
    return enhanced


def enhance_tasks(tasks: list[dict]) -> list[dict]:
    return [enhance_task(t) for t in tasks]


# ---------------------------------------------------------------------------
# JSON formatter
# ---------------------------------------------------------------------------

def format_json(data: Any) -> str:
    """Format data as indented JSON string."""
    return json.dumps(data, indent=2, ensure_ascii=False, default=str)


# ---------------------------------------------------------------------------
# Truncation
# ---------------------------------------------------------------------------

def format_json_list(items: list, limit: int = CHARACTER_LIMIT) -> str:
    """Format a list as JSON, dropping whole entries from the end to fit limit.

    The result is always a parseable JSON array.
    """
    response = format_json(items)
    if len(response) <= limit:
        return response

    # Largest prefix whose JSON still fits.
    low, high = 0, len(items) - 1
    while low < high:
        mid = (low + high + 1) // 2
        if len(format_json(items[:mid])) <= limit:
            low = mid
        else:
            high = mid - 1
    logger.warning(
        "Response truncated: %d of %d entries dropped (%s chars > %s). "
        "Pass a projectId to narrow the results.",
        len(items) - low, len(items), f"{len(response):,}", f"{limit:,}",
    )
    return format_json(items[:low])
