"""Async TickTick API client using httpx.

Wraps the TickTick Open API v1 (https://api.ticktick.com/open/v1).
Designed to be used as a lifespan-managed singleton: one httpx.AsyncClient
and one TickTickSession are created at server start and reused for all
requests. Every call authenticates lazily through the session first.
"""

from __future__ import annotations

import logging

import httpx

from ticktick_server.auth import TickTickSession
from ticktick_server.config import TickTickConfig
from ticktick_server.errors import RemoteError

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 30.0
USER_AGENT = "ticktick-server/0.1.0"
INBOX_PROJECT_ID = "inbox"


class TickTickClient:
    """Async wrapper around the TickTick Open API v1.

    Usage with lifespan:
        client = TickTickClient(TickTickConfig.from_env())
        tasks = await client.get_project_tasks(project_id)
        await client.close()
    """

    def __init__(
        self,
        config: TickTickConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._http = httpx.AsyncClient(
            base_url=config.api_base_url,
            headers={
                "Content-Type": "application/json",
                "User-Agent": USER_AGENT,
            },
            timeout=REQUEST_TIMEOUT,
            transport=transport,
        )
        self.session = TickTickSession(config, self._http)

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._http.aclose()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _request(
        self,
        operation: str,
        method: str,
        path: str,
        *,
        json_body: dict | list | None = None,
        params: dict | None = None,
    ) -> dict | list | None:
        """Make an authenticated API request and handle errors consistently."""
        await self.session.ensure_authenticated()
        logger.debug("%s %s", method, path)
        try:
            response = await self._http.request(
                method,
                path,
                json=json_body,
                params=params,
            )
        except httpx.HTTPError as e:
            raise RemoteError(operation, None, str(e) or type(e).__name__) from e
        if response.status_code >= 400:
            detail = response.text or f"HTTP {response.status_code}"
            raise RemoteError(operation, response.status_code, detail, response.reason_phrase)
        if response.status_code == 204 or not response.text:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise RemoteError(operation, response.status_code, f"Invalid JSON: {response.text[:200]}") from e

    # ------------------------------------------------------------------
    # Projects
    # ------------------------------------------------------------------

    async def get_projects(self) -> list[dict]:
        """GET /project: list all projects in the order TickTick returns them."""
        result = await self._request("get projects", "GET", "/project")
        return result if isinstance(result, list) else []

    async def get_project_tasks(self, project_id: str) -> list[dict]:
        """GET /project/{id}/data: tasks of one project."""
        result = await self._request("get tasks", "GET", f"/project/{project_id}/data")
        if isinstance(result, dict):
            return result.get("tasks") or []
        return []

    async def fetch_inbox_tasks(self) -> list[dict]:
        """Inbox tasks via /project/inbox/data, falling back to /task?projectId=inbox.

        Raises the fallback route's RemoteError when both routes fail.
        """
        try:
            return await self.get_project_tasks(INBOX_PROJECT_ID)
        except RemoteError as e:
            logger.debug("Inbox data route failed, trying task query: %s", e)
        result = await self._request(
            "get inbox tasks", "GET", "/task", params={"projectId": INBOX_PROJECT_ID},
        )
        return result if isinstance(result, list) else []

    async def get_inbox_tasks(self) -> list[dict]:
        """Inbox tasks, or [] with a logged warning if the inbox is unreachable."""
        try:
            return await self.fetch_inbox_tasks()
        except RemoteError as e:
            logger.warning("Could not access inbox tasks: %s", e)
            return []

    # ------------------------------------------------------------------
    # Tasks
    # ------------------------------------------------------------------

    async def get_task(self, task_id: str, project_id: str) -> dict:
        """GET /project/{pid}/task/{tid}: get a single task."""
        result = await self._request("get task", "GET", f"/project/{project_id}/task/{task_id}")
        return result if isinstance(result, dict) else {}

    async def create_task(self, body: dict) -> dict:
        """POST /task: create a new task."""
        result = await self._request("create task", "POST", "/task", json_body=body)
        return result if isinstance(result, dict) else {}

    async def update_task(self, task_id: str, body: dict) -> dict:
        """POST /task/{id}: update an existing task."""
        result = await self._request("update task", "POST", f"/task/{task_id}", json_body=body)
        return result if isinstance(result, dict) else {}

    async def complete_task(self, task_id: str, project_id: str) -> dict:
        """POST /project/{pid}/task/{tid}/complete: complete a task.

        The endpoint usually answers with an empty body, in which case the
        task is read back so the caller sees its completed state.
        """
        result = await self._request(
            "complete task", "POST", f"/project/{project_id}/task/{task_id}/complete",
        )
        if isinstance(result, dict) and result:
            return result
        try:
            return await self.get_task(task_id, project_id)
        except RemoteError as e:
            logger.warning("Task %s completed but could not be read back: %s", task_id, e)
            return {"id": task_id, "projectId": project_id, "status": 2}

    async def delete_task(self, task_id: str, project_id: str) -> None:
        """DELETE /project/{pid}/task/{tid}: delete a task."""
        await self._request("delete task", "DELETE", f"/project/{project_id}/task/{task_id}")
