"""TickTick MCP Server: task and project tools for Claude and other MCP clients.

Provides nine tools over the TickTick Open API v1: task listing (all,
due today, overdue), project listing, and task create/read/update/
complete/delete. Designed for use as a stdio MCP server, or over
Streamable HTTP when MCP_TRANSPORT says so.

Usage:
    python -m ticktick_server          # stdio transport (default)
    uv run python -m ticktick_server   # via uv
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastmcp import FastMCP, Context
from fastmcp.exceptions import ToolError

from ticktick_server.aggregate import fetch_tasks
from ticktick_server.client import TickTickClient
from ticktick_server.config import TickTickConfig
from ticktick_server.errors import (
    AuthenticationError,
    ConfigurationError,
    RemoteError,
)
from ticktick_server.formatting import (
    enhance_task,
    enhance_tasks,
    format_json,
    format_json_list,
)
from ticktick_server.models import (
    CompleteTaskInput,
    CreateTaskInput,
    DeleteTaskInput,
    GetOverdueTasksInput,
    GetTaskInput,
    GetTasksInput,
    GetTodaysTasksInput,
    UpdateTaskInput,
)
from ticktick_server.queries import filter_due_today, filter_overdue_tasks

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Lifespan: one shared client per process
# ---------------------------------------------------------------------------

@asynccontextmanager
async def app_lifespan(server: FastMCP) -> AsyncIterator[dict]:
    """Create the API client at startup, close on shutdown.

    Credentials are only checked on the first tool call, so the server
    starts even when none are configured yet.
    """
    client = TickTickClient(TickTickConfig.from_env())
    try:
        yield {"ticktick": client}
    finally:
        await client.close()


# ---------------------------------------------------------------------------
# Server
# ---------------------------------------------------------------------------

mcp = FastMCP(
    "ticktick-mcp-server",
    instructions=(
        "TickTick task management. Use get_projects to discover project IDs. "
        "get_tasks, get_todays_tasks and get_overdue_tasks work across ALL "
        "projects plus the inbox when no projectId is given. Tasks are "
        "returned as JSON with a readable priorityText field. "
        "Requires TICKTICK_ACCESS_TOKEN or TICKTICK_USERNAME/PASSWORD."
    ),
    lifespan=app_lifespan,
)


# ---------------------------------------------------------------------------
# Error handler
# ---------------------------------------------------------------------------

def _describe_error(e: Exception) -> str:
    """Convert exceptions to LLM-friendly error messages."""
    if isinstance(e, ConfigurationError):
        return f"Configuration error: {e}"
    if isinstance(e, AuthenticationError):
        return f"{e}. Check TICKTICK_USERNAME/TICKTICK_PASSWORD or use TICKTICK_ACCESS_TOKEN."
    if isinstance(e, RemoteError):
        if e.status_code == 401:
            return (
                f"{e}. Your TickTick access token may be expired or invalid. "
                "Run `python -m ticktick_server.oauth` to get a new one."
            )
        if e.status_code == 403:
            return f"{e}. Permission denied; check your OAuth scopes include 'tasks:write'."
        if e.status_code == 404:
            return (
                f"{e}. Resource not found; check that the projectId and taskId are correct. "
                "Use get_projects to find valid project IDs."
            )
        if e.status_code == 429:
            return f"{e}. Rate limit exceeded; wait a moment before retrying."
        return str(e)
    return f"{type(e).__name__}: {e}"


def _tool_error(tool_name: str, e: Exception) -> ToolError:
    logger.error("Tool %s failed: %s", tool_name, e)
    return ToolError(f"Error executing tool {tool_name}: {_describe_error(e)}")


def _get_client(ctx) -> TickTickClient:
    """Extract the TickTick client from request context."""
    return ctx.request_context.lifespan_context["ticktick"]


# ===================================================================
# TASK QUERY TOOLS
# ===================================================================


@mcp.tool(
    name="get_tasks",
    annotations={"title": "Get Tasks", "readOnlyHint": True, "destructiveHint": False, "idempotentHint": True, "openWorldHint": True},
)
async def get_tasks(params: GetTasksInput, ctx: Context) -> str:
    """Get all tasks or tasks from a specific project.

    Without a projectId, tasks are gathered from every project and then
    the inbox. Projects that cannot be read are skipped.

    Args:
        params: Contains optional projectId.

    Returns:
        JSON array of tasks, each with a priorityText label.
    """
    try:
        client = _get_client(ctx)
        tasks = await fetch_tasks(client, params.project_id)
        return format_json_list(enhance_tasks(tasks))
    except Exception as e:
        raise _tool_error("get_tasks", e) from e


@mcp.tool(
    name="get_overdue_tasks",
    annotations={"title": "Overdue Tasks", "readOnlyHint": True, "destructiveHint": False, "idempotentHint": True, "openWorldHint": True},
)
async def get_overdue_tasks(params: GetOverdueTasksInput, ctx: Context) -> str:
    """Get all overdue tasks (incomplete tasks past their due date).

    Args:
        params: Contains optional projectId and timezoneOffsetHours (default 8).

    Returns:
        JSON array of overdue tasks.
    """
    try:
        client = _get_client(ctx)
        tasks = await fetch_tasks(client, params.project_id)
        overdue = filter_overdue_tasks(tasks, timezone_offset_hours=params.timezone_offset_hours)
        return format_json_list(enhance_tasks(overdue))
    except Exception as e:
        raise _tool_error("get_overdue_tasks", e) from e


@mcp.tool(
    name="get_todays_tasks",
    annotations={"title": "Tasks Due Today", "readOnlyHint": True, "destructiveHint": False, "idempotentHint": True, "openWorldHint": True},
)
async def get_todays_tasks(params: GetTodaysTasksInput, ctx: Context) -> str:
    """Get tasks that are specifically due today.

    Args:
        params: Contains optional projectId.

    Returns:
        JSON array of tasks due today.
    """
    try:
        client = _get_client(ctx)
        tasks = await fetch_tasks(client, params.project_id)
        return format_json_list(enhance_tasks(filter_due_today(tasks)))
    except Exception as e:
        raise _tool_error("get_todays_tasks", e) from e


# ===================================================================
# PROJECT TOOLS
# ===================================================================


@mcp.tool(
    name="get_projects",
    annotations={"title": "Get Projects", "readOnlyHint": True, "destructiveHint": False, "idempotentHint": True, "openWorldHint": True},
)
async def get_projects(ctx: Context) -> str:
    """Get all projects from TickTick.

    Use this first to discover project IDs needed by other tools.
    """
    try:
        client = _get_client(ctx)
        projects = await client.get_projects()
        return format_json_list(projects)
    except Exception as e:
        raise _tool_error("get_projects", e) from e


# ===================================================================
# TASK TOOLS
# ===================================================================


@mcp.tool(
    name="create_task",
    annotations={"title": "Create Task", "readOnlyHint": False, "destructiveHint": False, "idempotentHint": False, "openWorldHint": True},
)
async def create_task(params: CreateTaskInput, ctx: Context) -> str:
    """Create a new task in TickTick.

    Args:
        params: Contains title (required), plus optional content, projectId,
                dueDate, startDate, isAllDay, timeZone, priority and tags.

    Returns:
        Confirmation with the created task as JSON.

    Examples:
        - "Add 'Buy milk' to my inbox" -> title="Buy milk"
        - "Create a high-priority task due tomorrow" -> title=..., priority=5, dueDate=...
    """
    try:
        client = _get_client(ctx)
        result = await client.create_task(_build_task_body(params))
        return f"Task created successfully: {format_json(enhance_task(result))}"
    except Exception as e:
        raise _tool_error("create_task", e) from e


@mcp.tool(
    name="update_task",
    annotations={"title": "Update Task", "readOnlyHint": False, "destructiveHint": False, "idempotentHint": True, "openWorldHint": True},
)
async def update_task(params: UpdateTaskInput, ctx: Context) -> str:
    """Update an existing task. Only the fields you provide will be changed.

    Args:
        params: Contains taskId (required), plus optional fields to update.

    Returns:
        Confirmation with the updated task as JSON.
    """
    try:
        client = _get_client(ctx)
        body = _build_update_body(params)
        result = await client.update_task(params.task_id, body)
        return f"Task updated successfully: {format_json(enhance_task(result))}"
    except Exception as e:
        raise _tool_error("update_task", e) from e


@mcp.tool(
    name="delete_task",
    annotations={"title": "Delete Task", "readOnlyHint": False, "destructiveHint": True, "idempotentHint": True, "openWorldHint": True},
)
async def delete_task(params: DeleteTaskInput, ctx: Context) -> str:
    """Permanently delete a task.

    WARNING: This is irreversible.

    Args:
        params: Contains taskId and projectId.
    """
    try:
        client = _get_client(ctx)
        await client.delete_task(params.task_id, params.project_id)
        return "Task deleted successfully"
    except Exception as e:
        raise _tool_error("delete_task", e) from e


@mcp.tool(
    name="complete_task",
    annotations={"title": "Complete Task", "readOnlyHint": False, "destructiveHint": False, "idempotentHint": True, "openWorldHint": True},
)
async def complete_task(params: CompleteTaskInput, ctx: Context) -> str:
    """Mark a task as completed.

    Args:
        params: Contains taskId and projectId.
    """
    try:
        client = _get_client(ctx)
        result = await client.complete_task(params.task_id, params.project_id)
        return f"Task completed successfully: {format_json(enhance_task(result))}"
    except Exception as e:
        raise _tool_error("complete_task", e) from e


@mcp.tool(
    name="get_task",
    annotations={"title": "Get Task", "readOnlyHint": True, "destructiveHint": False, "idempotentHint": True, "openWorldHint": True},
)
async def get_task(params: GetTaskInput, ctx: Context) -> str:
    """Get a specific task by ID.

    Args:
        params: Contains taskId and projectId.
    """
    try:
        client = _get_client(ctx)
        task = await client.get_task(params.task_id, params.project_id)
        return format_json(enhance_task(task))
    except Exception as e:
        raise _tool_error("get_task", e) from e


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------

def _build_task_body(params: CreateTaskInput) -> dict:
    """Build a TickTick API task body from CreateTaskInput."""
    body: dict = {"title": params.title}
    if params.project_id:
        body["projectId"] = params.project_id
    if params.content:
        body["content"] = params.content
    if params.due_date:
        body["dueDate"] = params.due_date
    if params.start_date:
        body["startDate"] = params.start_date
    if params.is_all_day is not None:
        body["isAllDay"] = params.is_all_day
    if params.time_zone:
        body["timeZone"] = params.time_zone
    if params.priority is not None:
        body["priority"] = params.priority
    if params.tags:
        body["tags"] = params.tags
    return body


def _build_update_body(params: UpdateTaskInput) -> dict:
    """Build a partial update body; only fields that were given are sent."""
    body: dict = {"id": params.task_id}
    if params.project_id is not None:
        body["projectId"] = params.project_id
    if params.title is not None:
        body["title"] = params.title
    if params.content is not None:
        body["content"] = params.content
    if params.due_date is not None:
        body["dueDate"] = params.due_date
    if params.start_date is not None:
        body["startDate"] = params.start_date
    if params.is_all_day is not None:
        body["isAllDay"] = params.is_all_day
    if params.time_zone is not None:
        body["timeZone"] = params.time_zone
    if params.priority is not None:
        body["priority"] = params.priority
    if params.tags is not None:
        body["tags"] = params.tags
    return body
