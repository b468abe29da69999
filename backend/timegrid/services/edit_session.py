"""Client-side owner of the schedule list shown on the grid.

In ``LIVE`` mode every mutation is applied optimistically and sent to the
store straight away; a failed call undoes only its own local changes.
In ``BATCH`` mode mutations only touch a working copy until
``commit_batch`` sends the minimal set of calls or ``cancel_batch``
restores the snapshot taken by ``enter_batch``.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum

from timegrid.core.exceptions import EditSessionStateError, PersistenceError, ResolutionError
from timegrid.services.entries import EntryId, Pending, Persisted, ScheduleEntry, changed_fields
from timegrid.services.placement import CreateEntry, DeleteEntry, Mutation, MutationPlan, UpdateEntry
from timegrid.services.schedule_gateway import ScheduleGateway

logger = logging.getLogger(__name__)


class SessionMode(str, Enum):
    live = "live"
    batch = "batch"


@dataclass
class PendingChangeSet:
    snapshot: tuple[ScheduleEntry, ...]
    working: list[ScheduleEntry]
    deleted: set[str] = field(default_factory=set)


@dataclass(frozen=True)
class FailedOp:
    op: Mutation
    error: PersistenceError


@dataclass(frozen=True)
class CommitResult:
    succeeded: tuple[Mutation, ...]
    failed_ops: tuple[FailedOp, ...]

    @property
    def ok(self) -> bool:
        return not self.failed_ops


def apply_mutation(entries: list[ScheduleEntry], op: Mutation) -> ScheduleEntry | None:
    """Apply ``op`` to ``entries`` in place and return the entry it produced."""
    if isinstance(op, CreateEntry):
        created = ScheduleEntry(id=Pending.new(), fields=op.fields)
        entries.append(created)
        return created

    index = _index_of(entries, op.entry_id)
    if index is None:
        raise ResolutionError("Schedule entry no longer exists", details={"entry_id": str(op.entry_id)})
    if isinstance(op, UpdateEntry):
        updated = ScheduleEntry(id=entries[index].id, fields=op.fields)
        entries[index] = updated
        return updated
    del entries[index]
    return None


def _index_of(entries: list[ScheduleEntry], entry_id: EntryId) -> int | None:
    for index, entry in enumerate(entries):
        if entry.id == entry_id:
            return index
    return None


class EditSession:
    def __init__(self, gateway: ScheduleGateway, entries: Iterable[ScheduleEntry] = ()) -> None:
        self._gateway = gateway
        self._entries: list[ScheduleEntry] = list(entries)
        self._changes: PendingChangeSet | None = None

    @property
    def mode(self) -> SessionMode:
        return SessionMode.live if self._changes is None else SessionMode.batch

    @property
    def entries(self) -> tuple[ScheduleEntry, ...]:
        if self._changes is not None:
            return tuple(self._changes.working)
        return tuple(self._entries)

    @property
    def pending_deletions(self) -> frozenset[str]:
        if self._changes is None:
            return frozenset()
        return frozenset(self._changes.deleted)

    async def refresh(self) -> tuple[ScheduleEntry, ...]:
        if self._changes is not None:
            raise EditSessionStateError("Cannot reload schedules while batch edits are pending")
        self._entries = await self._gateway.list_schedules()
        return self.entries

    # Batch mode

    def enter_batch(self) -> None:
        if self._changes is not None:
            raise EditSessionStateError("Already in batch edit mode")
        snapshot = tuple(self._entries)
        self._changes = PendingChangeSet(snapshot=snapshot, working=list(snapshot))
        logger.info("Entered batch edit mode with %d entries", len(snapshot))

    def stage_mutation(self, op: Mutation) -> ScheduleEntry | None:
        changes = self._require_batch()
        result = apply_mutation(changes.working, op)
        if isinstance(op, DeleteEntry) and isinstance(op.entry_id, Persisted):
            changes.deleted.add(op.entry_id.value)
        return result

    def stage_plan(self, plan: MutationPlan) -> None:
        changes = self._require_batch()
        working = list(changes.working)
        deleted = set(changes.deleted)
        for op in plan.mutations:
            apply_mutation(working, op)
            if isinstance(op, DeleteEntry) and isinstance(op.entry_id, Persisted):
                deleted.add(op.entry_id.value)
        changes.working = working
        changes.deleted = deleted

    def cancel_batch(self) -> None:
        changes = self._require_batch()
        self._entries = list(changes.snapshot)
        self._changes = None
        logger.info("Discarded batch edits")

    def pending_operations(self) -> list[Mutation]:
        changes = self._require_batch()
        ops: list[Mutation] = [DeleteEntry(Persisted(entry_id)) for entry_id in sorted(changes.deleted)]
        originals = {entry.id: entry for entry in changes.snapshot}
        for entry in changes.working:
            if isinstance(entry.id, Pending):
                ops.append(CreateEntry(entry.fields))
                continue
            original = originals.get(entry.id)
            if original is None or changed_fields(original.fields, entry.fields):
                ops.append(UpdateEntry(entry.id, entry.fields))
        return ops

    async def commit_batch(self) -> CommitResult:
        changes = self._require_batch()
        ops = self.pending_operations()
        try:
            results = await asyncio.gather(*(self._send(op) for op in ops), return_exceptions=True)
        finally:
            self._entries = list(changes.working)
            self._changes = None

        succeeded: list[Mutation] = []
        failed: list[FailedOp] = []
        unexpected: list[BaseException] = []
        pending_ids = [entry.id for entry in self._entries if isinstance(entry.id, Pending)]
        created_iter = iter(pending_ids)
        for op, result in zip(ops, results):
            pending_id = next(created_iter) if isinstance(op, CreateEntry) else None
            if isinstance(result, PersistenceError):
                failed.append(FailedOp(op=op, error=result))
                continue
            if isinstance(result, BaseException):
                unexpected.append(result)
                continue
            succeeded.append(op)
            if isinstance(result, ScheduleEntry):
                self._replace(pending_id or result.id, result)

        if unexpected:
            logger.error("Batch commit hit %d unexpected error(s)", len(unexpected))
            raise unexpected[0]
        if failed:
            logger.warning("Batch commit finished with %d of %d operation(s) failed", len(failed), len(ops))
        else:
            logger.info("Batch commit sent %d operation(s)", len(ops))
        return CommitResult(succeeded=tuple(succeeded), failed_ops=tuple(failed))

    # Live mode

    async def apply_live(self, op: Mutation) -> ScheduleEntry | None:
        results = await self._apply_live_ops((op,))
        return results[0]

    async def apply_plan(self, plan: MutationPlan) -> list[ScheduleEntry | None]:
        if plan.is_noop:
            return []
        if self._changes is not None:
            self.stage_plan(plan)
            return []
        return await self._apply_live_ops(plan.mutations)

    async def _apply_live_ops(self, ops: Iterable[Mutation]) -> list[ScheduleEntry | None]:
        if self._changes is not None:
            raise EditSessionStateError("Live mutations are not allowed during batch edit mode")
        ops = list(ops)

        # Snapshot the entries this call touches, then apply optimistically.
        touched: dict[EntryId, tuple[int, ScheduleEntry]] = {}
        for op in ops:
            if isinstance(op, CreateEntry) or op.entry_id in touched:
                continue
            index = _index_of(self._entries, op.entry_id)
            if index is not None:
                touched[op.entry_id] = (index, self._entries[index])
        working = list(self._entries)
        local_results = [apply_mutation(working, op) for op in ops]
        self._entries = working

        # Commit, or undo this call's changes. Other calls may have landed meanwhile.
        results = await asyncio.gather(*(self._send(op) for op in ops), return_exceptions=True)
        failures = [result for result in results if isinstance(result, BaseException)]
        if failures:
            created = {local.id for op, local in zip(ops, local_results) if isinstance(op, CreateEntry)}
            self._undo(created, touched)
            logger.warning("Live mutation failed, rolled back %d local change(s)", len(ops))
            raise failures[0]

        confirmed: list[ScheduleEntry | None] = []
        for local, result in zip(local_results, results):
            if isinstance(result, ScheduleEntry):
                self._replace(local.id, result)
                confirmed.append(result)
            else:
                confirmed.append(None)
        return confirmed

    def _undo(self, created: set[EntryId], touched: dict[EntryId, tuple[int, ScheduleEntry]]) -> None:
        entries = [entry for entry in self._entries if entry.id not in created]
        for index, original in sorted(touched.values(), key=lambda item: item[0]):
            current = _index_of(entries, original.id)
            if current is None:
                entries.insert(min(index, len(entries)), original)
            else:
                entries[current] = original
        self._entries = entries

    async def _send(self, op: Mutation) -> ScheduleEntry | bool:
        try:
            if isinstance(op, CreateEntry):
                return await self._gateway.create_entry(op.fields)
            entry_id = _persisted_value(op.entry_id)
            if isinstance(op, UpdateEntry):
                return await self._gateway.update_entry(entry_id, op.fields)
            found = await self._gateway.delete_entry(entry_id)
            if not found:
                logger.warning("Schedule entry %s was already deleted", entry_id)
            return found
        except PersistenceError as exc:
            exc.op = op
            raise

    def _replace(self, entry_id: EntryId, entry: ScheduleEntry) -> None:
        index = _index_of(self._entries, entry_id)
        if index is None:
            self._entries.append(entry)
        else:
            self._entries[index] = entry

    def _require_batch(self) -> PendingChangeSet:
        if self._changes is None:
            raise EditSessionStateError("Not in batch edit mode")
        return self._changes


def _persisted_value(entry_id: EntryId) -> str:
    if not isinstance(entry_id, Persisted):
        raise PersistenceError(f"Entry {entry_id} has not been saved yet")
    return entry_id.value
