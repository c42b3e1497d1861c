"""Cross-project task gathering.

TickTick has no "all tasks" endpoint, so tasks are collected project by
project plus the inbox. A project that cannot be read is skipped and
recorded instead of failing the whole request.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field

from ticktick_server.client import TickTickClient
from ticktick_server.errors import RemoteError

logger = logging.getLogger(__name__)

INBOX_SOURCE = "inbox"


@dataclass(frozen=True)
class FetchFailure:
    """One task source that could not be read."""
    source: str
    error: RemoteError

    def __str__(self) -> str:
        return f"{self.source}: {self.error}"


@dataclass
class TaskAggregate:
    """Tasks from every readable source, plus the sources that were skipped."""
    tasks: list[dict] = field(default_factory=list)
    failures: list[FetchFailure] = field(default_factory=list)


def _project_label(project: dict) -> str:
    return f"{project.get('id', '?')} ({project.get('name', 'Unknown')})"


async def _fetch_project(
    client: TickTickClient, project: dict,
) -> tuple[dict, list[dict] | None, RemoteError | None]:
    project_id = project.get("id")
    if not project_id:
        return (project, None, RemoteError("get tasks", None, "Project has no id"))
    try:
        tasks = await client.get_project_tasks(project_id)
    except RemoteError as exc:
        return (project, None, exc)
    return (project, tasks, None)


async def fetch_all_tasks(client: TickTickClient) -> TaskAggregate:
    """Fetch tasks from every project, then the inbox.

    Project fetches run concurrently but results are concatenated in the
    order projects were listed, with inbox tasks last. Nothing is
    de-duplicated: if the inbox also shows up as a regular project, its
    tasks appear twice.
    """
    projects = await client.get_projects()
    aggregate = TaskAggregate()

    fetch_results = await asyncio.gather(
        *(_fetch_project(client, p) for p in projects)
    )
    for project, tasks, error in fetch_results:
        if error is not None:
            label = _project_label(project)
            logger.warning("Could not access tasks for project %s: %s", label, error)
            aggregate.failures.append(FetchFailure(label, error))
            continue
        aggregate.tasks.extend(tasks)

    try:
        aggregate.tasks.extend(await client.fetch_inbox_tasks())
    except RemoteError as exc:
        logger.warning("Could not access inbox tasks: %s", exc)
        aggregate.failures.append(FetchFailure(INBOX_SOURCE, exc))

    return aggregate


async def fetch_tasks(client: TickTickClient, project_id: str | None = None) -> list[dict]:
    """Tasks of one project, or of everything when no project is given."""
    if project_id:
        return await client.get_project_tasks(project_id)
    aggregate = await fetch_all_tasks(client)
    return aggregate.tasks
