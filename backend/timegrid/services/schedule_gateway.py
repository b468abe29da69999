from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Protocol

import httpx

from timegrid.core.config import Settings
from timegrid.core.exceptions import PersistenceError
from timegrid.services.entries import EntryFields, ScheduleEntry

logger = logging.getLogger(__name__)


class ScheduleGateway(Protocol):
    async def list_schedules(self) -> list[ScheduleEntry]: ...

    async def create_entry(self, fields: EntryFields) -> ScheduleEntry: ...

    async def update_entry(self, entry_id: str, fields: EntryFields) -> ScheduleEntry: ...

    async def delete_entry(self, entry_id: str) -> bool: ...


@dataclass(frozen=True)
class BoardData:
    teachers: list[dict]
    subjects: list[dict]
    year_groups: list[dict]
    students: list[dict]
    schedules: list[ScheduleEntry]

    @property
    def year_group_ids(self) -> list[str]:
        return [item["id"] for item in self.year_groups]


class HttpScheduleGateway:
    """Schedule store reached over the REST API."""

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    @classmethod
    def from_settings(cls, settings: Settings, *, access_token: str) -> "HttpScheduleGateway":
        client = httpx.AsyncClient(
            base_url=settings.gateway_base_url,
            timeout=settings.gateway_timeout_seconds,
            headers={"Authorization": f"Bearer {access_token}"},
        )
        return cls(client)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "HttpScheduleGateway":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def _request(self, method: str, url: str, *, allow_not_found: bool = False, **kwargs) -> httpx.Response:
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, url, exc)
            raise PersistenceError(f"{method} {url} failed: {exc}") from exc
        if allow_not_found and response.status_code == 404:
            return response
        if response.is_error:
            logger.warning("%s %s returned %s", method, url, response.status_code)
            raise PersistenceError(
                f"{method} {url} returned {response.status_code}",
                details={"status_code": response.status_code, "body": response.text[:500]},
            )
        return response

    async def _get_list(self, url: str) -> list[dict]:
        response = await self._request("GET", url)
        data = response.json()
        return data if isinstance(data, list) else []

    async def list_schedules(self) -> list[ScheduleEntry]:
        return [ScheduleEntry.from_payload(item) for item in await self._get_list("/schedules")]

    async def create_entry(self, fields: EntryFields) -> ScheduleEntry:
        response = await self._request("POST", "/schedules", json=fields.to_payload())
        return ScheduleEntry.from_payload(response.json())

    async def update_entry(self, entry_id: str, fields: EntryFields) -> ScheduleEntry:
        response = await self._request("PUT", f"/schedules/{entry_id}", json=fields.to_payload())
        return ScheduleEntry.from_payload(response.json())

    async def delete_entry(self, entry_id: str) -> bool:
        response = await self._request("DELETE", f"/schedules/{entry_id}", allow_not_found=True)
        return response.status_code != 404

    async def load_board(self) -> BoardData:
        teachers, subjects, year_groups, students, schedules = await asyncio.gather(
            self._get_list("/teachers"),
            self._get_list("/subjects"),
            self._get_list("/year-groups"),
            self._get_list("/students"),
            self.list_schedules(),
        )
        return BoardData(
            teachers=teachers,
            subjects=subjects,
            year_groups=year_groups,
            students=students,
            schedules=schedules,
        )
