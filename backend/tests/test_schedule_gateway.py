import asyncio
import json

import httpx
import pytest

from timegrid.core.config import Settings
from timegrid.core.exceptions import PersistenceError
from timegrid.services.entries import EntryFields, Persisted
from timegrid.services.schedule_gateway import HttpScheduleGateway

ROW = {
    "id": "s-1",
    "teacher_id": "t1",
    "subject_id": "maths",
    "year_group_id": "y7",
    "day_of_week": 1,
    "start_time": "08:00",
    "end_time": "09:00",
    "student_ids": ["b", "a"],
}


def run_with(handler, call):
    async def scenario():
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://store.local/api")
        async with HttpScheduleGateway(client) as gateway:
            return await call(gateway)

    return asyncio.run(scenario())


def test_list_schedules_parses_rows():
    def handler(request):
        assert request.url.path == "/api/schedules"
        return httpx.Response(200, json=[ROW])

    entries = run_with(handler, lambda gateway: gateway.list_schedules())

    assert len(entries) == 1
    assert entries[0].id == Persisted("s-1")
    assert entries[0].fields.student_ids == ("a", "b")


def test_create_posts_wire_payload():
    seen = {}

    def handler(request):
        seen["method"] = request.method
        seen["body"] = json.loads(request.content)
        return httpx.Response(201, json={**ROW, **seen["body"], "id": "s-9"})

    fields = EntryFields("t1", "maths", None, 2, "09:00", "10:00")
    entry = run_with(handler, lambda gateway: gateway.create_entry(fields))

    assert seen["method"] == "POST"
    assert seen["body"] == {
        "teacher_id": "t1",
        "subject_id": "maths",
        "year_group_id": None,
        "day_of_week": 2,
        "start_time": "09:00",
        "end_time": "10:00",
        "student_ids": [],
    }
    assert entry.id == Persisted("s-9")
    assert entry.fields == fields


def test_error_status_becomes_persistence_error():
    def handler(request):
        return httpx.Response(500, json={"message": "boom"})

    fields = EntryFields("t1", "maths", "y7", 0, "08:00", "09:00")
    with pytest.raises(PersistenceError) as excinfo:
        run_with(handler, lambda gateway: gateway.update_entry("s-1", fields))
    assert excinfo.value.details["status_code"] == 500


def test_transport_error_becomes_persistence_error():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(PersistenceError):
        run_with(handler, lambda gateway: gateway.list_schedules())


def test_delete_reports_missing_rows():
    def handler(request):
        if request.url.path.endswith("/gone"):
            return httpx.Response(404, json={"detail": "Schedule not found"})
        return httpx.Response(200, json={"success": True})

    assert run_with(handler, lambda gateway: gateway.delete_entry("s-1")) is True
    assert run_with(handler, lambda gateway: gateway.delete_entry("gone")) is False


def test_load_board_fetches_everything():
    payloads = {
        "/api/teachers": [{"id": "t1", "name": "Alice"}],
        "/api/subjects": [{"id": "maths", "name": "Maths"}],
        "/api/year-groups": [{"id": "y7", "name": "Year 7"}, {"id": "y8", "name": "Year 8"}],
        "/api/students": [],
        "/api/schedules": [ROW],
    }

    def handler(request):
        return httpx.Response(200, json=payloads[request.url.path])

    board = run_with(handler, lambda gateway: gateway.load_board())

    assert board.teachers[0]["name"] == "Alice"
    assert board.year_group_ids == ["y7", "y8"]
    assert [entry.id.value for entry in board.schedules] == ["s-1"]


def test_from_settings_configures_client():
    settings = Settings(gateway_base_url="http://store.local/api", gateway_timeout_seconds=3)

    async def scenario():
        async with HttpScheduleGateway.from_settings(settings, access_token="abc") as gateway:
            return gateway._client

    client = asyncio.run(scenario())
    assert client.headers["Authorization"] == "Bearer abc"
    assert str(client.base_url) == "http://store.local/api/"
    assert client.timeout.connect == 3
    assert client.is_closed
