"""Tests for the TickTick API client (the request gateway).

A real httpx.AsyncClient runs against an httpx.MockTransport that routes
requests to canned responses, so URLs, headers and bodies are exercised.
"""

import json

import httpx
import pytest

from ticktick_server.client import TickTickClient
from ticktick_server.config import TickTickConfig
from ticktick_server.errors import ConfigurationError, RemoteError


def _make_client(routes, config=None, seen=None):
    """Build a client whose transport answers from a {(method, path): response} map.

    A route value may be a callable taking the request.
    """
    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        key = (request.method, request.url.path)
        route = routes.get(key)
        if route is None:
            return httpx.Response(404, text=f"no route for {key}")
        if callable(route):
            return route(request)
        return route

    config = config or TickTickConfig(access_token="tok")
    return TickTickClient(config, transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_requests_carry_bearer_token():
    seen = []
    client = _make_client({("GET", "/open/v1/project"): httpx.Response(200, json=[])}, seen=seen)

    await client.get_projects()
    await client.close()

    assert seen[0].headers["Authorization"] == "Bearer tok"
    assert str(seen[0].url) == "https://api.ticktick.com/open/v1/project"


@pytest.mark.asyncio
async def test_get_projects_keeps_remote_order():
    projects = [{"id": "b", "name": "Second"}, {"id": "a", "name": "First"}]
    client = _make_client({("GET", "/open/v1/project"): httpx.Response(200, json=projects)})

    assert [p["id"] for p in await client.get_projects()] == ["b", "a"]
    await client.close()


@pytest.mark.asyncio
async def test_get_project_tasks_reads_tasks_field():
    data = {"project": {"id": "p1"}, "tasks": [{"id": "t1", "title": "One"}]}
    client = _make_client({("GET", "/open/v1/project/p1/data"): httpx.Response(200, json=data)})

    tasks = await client.get_project_tasks("p1")
    await client.close()

    assert tasks == [{"id": "t1", "title": "One"}]


@pytest.mark.asyncio
async def test_http_error_becomes_remote_error_with_details():
    client = _make_client({
        ("GET", "/open/v1/project/p1/task/t1"): httpx.Response(404, text='{"errorCode":"task_not_found"}'),
    })

    with pytest.raises(RemoteError) as exc_info:
        await client.get_task("t1", "p1")
    await client.close()

    err = exc_info.value
    assert err.operation == "get task"
    assert err.status_code == 404
    assert err.reason == "Not Found"
    assert "task_not_found" in err.detail
    assert str(err).startswith("Failed to get task: 404 Not Found")


@pytest.mark.asyncio
async def test_transport_error_becomes_remote_error():
    def boom(request):
        raise httpx.ConnectError("network down", request=request)

    client = _make_client({("GET", "/open/v1/project"): boom})

    with pytest.raises(RemoteError, match="network down") as exc_info:
        await client.get_projects()
    await client.close()
    assert exc_info.value.status_code is None


@pytest.mark.asyncio
async def test_inbox_uses_data_route_first():
    seen = []
    client = _make_client(
        {("GET", "/open/v1/project/inbox/data"): httpx.Response(200, json={"tasks": [{"id": "i1"}]})},
        seen=seen,
    )

    assert await client.get_inbox_tasks() == [{"id": "i1"}]
    await client.close()
    assert len(seen) == 1


@pytest.mark.asyncio
async def test_inbox_falls_back_to_task_query():
    seen = []
    client = _make_client(
        {
            ("GET", "/open/v1/project/inbox/data"): httpx.Response(500, text="oops"),
            ("GET", "/open/v1/task"): httpx.Response(200, json=[{"id": "i2"}]),
        },
        seen=seen,
    )

    assert await client.get_inbox_tasks() == [{"id": "i2"}]
    await client.close()
    assert seen[-1].url.params["projectId"] == "inbox"


@pytest.mark.asyncio
async def test_inbox_unavailable_returns_empty(caplog):
    client = _make_client({})

    with caplog.at_level("WARNING"):
        assert await client.get_inbox_tasks() == []
    await client.close()
    assert "Could not access inbox tasks" in caplog.text


@pytest.mark.asyncio
async def test_fetch_inbox_tasks_raises_when_both_routes_fail():
    client = _make_client({})

    with pytest.raises(RemoteError) as exc_info:
        await client.fetch_inbox_tasks()
    await client.close()
    assert exc_info.value.operation == "get inbox tasks"


@pytest.mark.asyncio
async def test_create_and_update_send_bodies():
    seen = []
    client = _make_client(
        {
            ("POST", "/open/v1/task"): lambda r: httpx.Response(200, json={"id": "new", **json.loads(r.content)}),
            ("POST", "/open/v1/task/new"): lambda r: httpx.Response(200, json=json.loads(r.content)),
        },
        seen=seen,
    )

    created = await client.create_task({"title": "Buy milk"})
    updated = await client.update_task("new", {"id": "new", "priority": 5})
    await client.close()

    assert created == {"id": "new", "title": "Buy milk"}
    assert updated == {"id": "new", "priority": 5}
    assert seen[0].headers["Content-Type"] == "application/json"


@pytest.mark.asyncio
async def test_delete_task_route():
    seen = []
    client = _make_client(
        {("DELETE", "/open/v1/project/p1/task/t1"): httpx.Response(200)},
        seen=seen,
    )

    assert await client.delete_task("t1", "p1") is None
    await client.close()
    assert seen[0].method == "DELETE"


@pytest.mark.asyncio
async def test_delete_task_failure_names_operation():
    client = _make_client({("DELETE", "/open/v1/project/p1/task/t1"): httpx.Response(500, text="boom")})

    with pytest.raises(RemoteError, match="Failed to delete task: 500"):
        await client.delete_task("t1", "p1")
    await client.close()


@pytest.mark.asyncio
async def test_complete_task_reads_back_when_body_empty():
    done = {"id": "t1", "projectId": "p1", "status": 2, "completedTime": "2026-02-13T09:00:00+0000"}
    client = _make_client({
        ("POST", "/open/v1/project/p1/task/t1/complete"): httpx.Response(200),
        ("GET", "/open/v1/project/p1/task/t1"): httpx.Response(200, json=done),
    })

    assert await client.complete_task("t1", "p1") == done
    await client.close()


@pytest.mark.asyncio
async def test_complete_task_failure_raises():
    client = _make_client({
        ("POST", "/open/v1/project/p1/task/t1/complete"): httpx.Response(403, text="forbidden"),
    })

    with pytest.raises(RemoteError) as exc_info:
        await client.complete_task("t1", "p1")
    await client.close()
    assert exc_info.value.operation == "complete task"
    assert exc_info.value.status_code == 403


@pytest.mark.asyncio
async def test_no_credentials_fails_before_any_request():
    seen = []
    client = _make_client({}, config=TickTickConfig(), seen=seen)

    with pytest.raises(ConfigurationError):
        await client.get_projects()
    await client.close()
    assert seen == []


@pytest.mark.asyncio
async def test_password_signon_then_reused_for_calls():
    seen = []
    client = _make_client(
        {
            ("POST", "/api/v2/user/signon"): httpx.Response(200, json={"token": "sess"}),
            ("GET", "/open/v1/project"): httpx.Response(200, json=[]),
        },
        config=TickTickConfig(username="u@test.com", password="pw"),
        seen=seen,
    )

    await client.get_projects()
    await client.get_projects()
    await client.close()

    paths = [r.url.path for r in seen]
    assert paths == ["/api/v2/user/signon", "/open/v1/project", "/open/v1/project"]
    assert seen[-1].headers["Authorization"] == "Bearer sess"
