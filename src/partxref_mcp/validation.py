"""Background parts list validation.

A ValidationCoordinator owns a registry of sessions. Each session is one
asyncio task that posts its rows to the validation service, decodes the
NDJSON result stream in arrival order, merges each record into its row
collection by rowIndex and pushes snapshots to observers. Observers come and
go freely; unsubscribing never stops the work. Checkpoints go through a
CheckpointWriter so storage trouble never stalls the stream.
"""

import asyncio
import copy
import logging
from dataclasses import dataclass
from typing import Any, Callable, Literal

from .checkpoint import CheckpointStore, CheckpointWriter, get_store
from .config import CHECKPOINT_EVERY
from .models import (
    ROW_STATUSES,
    Part,
    PartAttributes,
    PartsListRow,
    XrefRecommendation,
)
from .ndjson import NDJSONDecoder
from .validation_client import ValidationServiceClient

logger = logging.getLogger(__name__)

SessionState = Literal["idle", "running", "completed", "failed", "cancelled"]
FINISHED_STATES = frozenset({"completed", "failed", "cancelled"})
RESUMABLE_DONE_STATUSES = frozenset({"resolved", "not-found"})  # Kept on resume; "error" rows are retried


class ValidationStreamError(Exception):
    """The producer reported a stream-level failure ({"error": ...} record)."""


@dataclass(frozen=True)
class ValidationSnapshot:
    """Point-in-time copy of a session. Observers must treat it as read-only."""
    session_id: str
    rows: list[PartsListRow]
    progress: float
    done: bool
    error: str | None
    state: SessionState
    processed: int = 0

    def to_dict(self, include_rows: bool = True) -> dict[str, Any]:
        data: dict[str, Any] = {
            "sessionId": self.session_id,
            "state": self.state,
            "progress": round(self.progress, 4),
            "done": self.done,
            "error": self.error,
            "processed": self.processed,
            "total": len(self.rows),
            "statusCounts": _status_counts(self.rows),
        }
        if include_rows:
            data["rows"] = [r.to_dict() for r in self.rows]
        return data


Observer = Callable[[ValidationSnapshot], None]


def _status_counts(rows: list[PartsListRow]) -> dict[str, int]:
    counts: dict[str, int] = {}
    for row in rows:
        counts[row.status] = counts.get(row.status, 0) + 1
    return counts


def _parse_record(record: Any) -> dict[str, Any]:
    """Validate one result record and convert its nested payloads.

    Raises:
        ValueError / KeyError / TypeError: record is malformed
    """
    if not isinstance(record, dict):
        raise TypeError(f"expected an object, got {type(record).__name__}")
    row_index = record.get("rowIndex")
    if not isinstance(row_index, int) or isinstance(row_index, bool):
        raise ValueError(f"invalid rowIndex {row_index!r}")
    status = record.get("status")
    if status not in ROW_STATUSES:
        raise ValueError(f"unknown status {status!r}")

    suggested = record.get("suggestedReplacement")
    source = record.get("sourceAttributes")
    resolved = record.get("resolvedPart")
    return {
        "row_index": row_index,
        "status": status,
        "resolved_part": Part.from_dict(resolved) if resolved else None,
        "source_attributes": PartAttributes.from_dict(source) if source else None,
        "suggested_replacement": XrefRecommendation.from_dict(suggested) if suggested else None,
        "all_recommendations": [XrefRecommendation.from_dict(r) for r in record.get("allRecommendations") or []],
        "error_message": record.get("errorMessage"),
    }


class ValidationSession:
    """Row collection and progress for one validation run."""

    def __init__(
        self,
        session_id: str,
        rows: list[PartsListRow],
        writer: CheckpointWriter,
        currency: str | None = None,
    ):
        self.session_id = session_id
        self.rows = rows
        self.writer = writer
        self.currency = currency
        self.state: SessionState = "idle"
        self.error: str | None = None
        self.processed = 0  # Records applied by this run
        self.skipped = 0  # Malformed or unmatched records
        self.superseded = False  # A newer run took over this list id
        self.task: asyncio.Task | None = None
        self._index = {row.row_index: i for i, row in enumerate(rows)}

    @property
    def done(self) -> bool:
        return self.state in FINISHED_STATES

    @property
    def progress(self) -> float:
        if not self.rows:
            return 1.0
        if self.state == "completed":
            return 1.0
        return sum(1 for r in self.rows if r.is_terminal) / len(self.rows)

    def pending_items(self) -> list[dict[str, Any]]:
        """Batch request items for rows that still need resolving."""
        items = []
        for row in self.rows:
            if row.status in RESUMABLE_DONE_STATUSES:
                continue
            item: dict[str, Any] = {"rowIndex": row.row_index, "mpn": row.raw_mpn}
            if row.raw_manufacturer:
                item["manufacturer"] = row.raw_manufacturer
            if row.raw_description:
                item["description"] = row.raw_description
            items.append(item)
        return items

    def apply_record(self, record: Any) -> bool:
        """Merge one result record into its row. Returns False when the record was skipped."""
        try:
            fields = _parse_record(record)
        except (KeyError, TypeError, ValueError) as e:
            self.skipped += 1
            logger.warning(f"Session {self.session_id}: skipping malformed record: {e}")
            return False

        idx = self._index.get(fields["row_index"])
        if idx is None:
            self.skipped += 1
            logger.warning(f"Session {self.session_id}: no row with rowIndex {fields['row_index']}")
            return False

        row = self.rows[idx]
        row.status = fields["status"]
        row.resolved_part = fields["resolved_part"]
        row.source_attributes = fields["source_attributes"]
        row.suggested_replacement = fields["suggested_replacement"]
        row.all_recommendations = fields["all_recommendations"]
        row.error_message = fields["error_message"]
        self.processed += 1
        return True

    def copy_rows(self) -> list[PartsListRow]:
        return copy.deepcopy(self.rows)

    def snapshot(self) -> ValidationSnapshot:
        return ValidationSnapshot(
            session_id=self.session_id,
            rows=self.copy_rows(),
            progress=self.progress,
            done=self.done,
            error=self.error,
            state=self.state,
            processed=self.processed,
        )


def _merge_resume(rows: list[PartsListRow], stored: list[PartsListRow]) -> list[PartsListRow]:
    """Take finished rows from the checkpoint, everything else from the caller."""
    if not rows:
        return stored
    finished = {r.row_index: r for r in stored if r.status in RESUMABLE_DONE_STATUSES}
    return [finished.get(r.row_index, r) for r in rows]


class ValidationCoordinator:
    """Registry of validation sessions with one active pointer.

    Starting a session makes it active. A session that is still running when
    another starts is abandoned: it keeps streaming into its own rows and
    checkpoints, but global observers move to the new session. Restarting the
    same list id supersedes the old run instead: it keeps streaming but no
    longer writes checkpoints or reaches that id's observers. Abandoned and
    superseded runs stay tracked until they finish, so cancel_all reaches them.
    """

    def __init__(
        self,
        store: CheckpointStore | None = None,
        client_factory: Callable[[], ValidationServiceClient] | None = None,
        checkpoint_every: int = CHECKPOINT_EVERY,
    ):
        self._store = store
        self._client_factory = client_factory or ValidationServiceClient
        self._checkpoint_every = max(1, checkpoint_every)
        self._sessions: dict[str, ValidationSession] = {}
        self._superseded: list[ValidationSession] = []  # Replaced in _sessions while still running
        self._active: ValidationSession | None = None
        self._global_observers: list[Observer] = []
        self._session_observers: dict[str, list[Observer]] = {}

    @property
    def store(self) -> CheckpointStore:
        if self._store is None:
            self._store = get_store()
        return self._store

    @property
    def active_session_id(self) -> str | None:
        return self._active.session_id if self._active else None

    def get_session(self, session_id: str) -> ValidationSession | None:
        return self._sessions.get(session_id)

    # =========================================================================
    # OBSERVERS
    # =========================================================================

    def subscribe(self, callback: Observer, session_id: str | None = None) -> Callable[[], None]:
        """Register an observer; returns a function that unregisters it.

        Without a session id the observer follows whichever session is active,
        across runs. The current snapshot is delivered immediately if one exists.
        """
        if session_id is None:
            observers = self._global_observers
            session = self._active
        else:
            observers = self._session_observers.setdefault(session_id, [])
            session = self._sessions.get(session_id)
        observers.append(callback)
        if session is not None:
            self._deliver(callback, session.snapshot())

        def unsubscribe() -> None:
            if callback in observers:
                observers.remove(callback)

        return unsubscribe

    def _deliver(self, callback: Observer, snapshot: ValidationSnapshot) -> None:
        try:
            callback(snapshot)
        except Exception:
            logger.exception(f"Observer failed for session {snapshot.session_id}")

    def _notify(self, session: ValidationSession) -> None:
        observers = [] if session.superseded else list(self._session_observers.get(session.session_id, ()))
        if session is self._active:
            observers.extend(self._global_observers)
        if not observers:
            return
        snapshot = session.snapshot()
        for callback in observers:
            self._deliver(callback, snapshot)

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    async def start(
        self,
        session_id: str,
        rows: list[PartsListRow],
        currency: str | None = None,
        resume: bool = True,
    ) -> ValidationSnapshot:
        """Start validating rows in the background and return the initial snapshot.

        With resume, a stored checkpoint for session_id supplies rows that were
        already resolved or not found; only the remainder is sent.
        """
        rows = copy.deepcopy(rows)
        if resume:
            try:
                stored = await self.store.load(session_id)
            except Exception as e:
                logger.warning(f"Could not read checkpoint for {session_id}, starting fresh: {e}")
                stored = None
            if stored:
                rows = _merge_resume(rows, stored)
                logger.info(f"Resuming {session_id}: {sum(1 for r in rows if r.status in RESUMABLE_DONE_STATUSES)} rows already done")

        previous = self._active
        if previous is not None and not previous.done:
            logger.warning(f"Session {previous.session_id} abandoned by new session {session_id}")

        replaced = self._sessions.get(session_id)
        if replaced is not None and not replaced.done:
            logger.warning(f"Earlier run of {session_id} superseded; its checkpoints are discarded")
            replaced.superseded = True
            replaced.writer.discard()
            self._superseded.append(replaced)
        self._superseded = [s for s in self._superseded if not s.done]

        session = ValidationSession(session_id, rows, CheckpointWriter(self.store, session_id), currency)
        self._sessions[session_id] = session
        self._active = session
        session.task = asyncio.get_running_loop().create_task(self._run(session))
        return session.snapshot()

    async def _run(self, session: ValidationSession) -> None:
        session.state = "running"
        self._notify(session)

        items = session.pending_items()
        if not items:
            await self._finish(session, "completed")
            return

        client: ValidationServiceClient | None = None
        try:
            client = self._client_factory()
            decoder = NDJSONDecoder()
            async for chunk in client.stream_results(items, session.currency):
                for record in decoder.feed(chunk):
                    self._handle_record(session, record)
            for record in decoder.finish():
                self._handle_record(session, record)
        except asyncio.CancelledError:
            await self._finish(session, "cancelled")
            raise
        except Exception as e:
            logger.warning(f"Session {session.session_id} failed after {session.processed} records: {e}")
            await self._finish(session, "failed", str(e) or type(e).__name__)
        else:
            await self._finish(session, "completed")
        finally:
            if client is not None:
                await client.close()

    def _handle_record(self, session: ValidationSession, record: Any) -> None:
        if isinstance(record, dict) and "error" in record and "rowIndex" not in record:
            raise ValidationStreamError(str(record["error"]))
        if not session.apply_record(record):
            return
        self._notify(session)
        if session.processed % self._checkpoint_every == 0:
            session.writer.enqueue(session.copy_rows())

    async def _finish(self, session: ValidationSession, state: SessionState, error: str | None = None) -> None:
        session.state = state
        session.error = error
        logger.info(
            f"Session {session.session_id} {state}: {session.processed} records applied, {session.skipped} skipped"
        )
        self._notify(session)
        session.writer.enqueue(session.copy_rows())
        await session.writer.flush()

    async def cancel(self, session_id: str) -> bool:
        """Cancel a running session and release its stream. Returns False if nothing was running."""
        session = self._sessions.get(session_id)
        if session is None:
            return False
        return await self._cancel_session(session)

    async def _cancel_session(self, session: ValidationSession) -> bool:
        if session.done or session.task is None:
            return False
        session.task.cancel()
        try:
            await session.task
        except asyncio.CancelledError:
            pass
        if not session.done:
            # Cancelled before the task got to run
            await self._finish(session, "cancelled")
        return True

    async def cancel_all(self) -> int:
        """Cancel every session that is still running, superseded runs included."""
        running = [s for s in [*self._sessions.values(), *self._superseded] if not s.done]
        cancelled = 0
        for session in running:
            if await self._cancel_session(session):
                cancelled += 1
        self._superseded.clear()
        return cancelled

    async def wait(self, session_id: str) -> ValidationSnapshot | None:
        """Wait for a session to finish and return its final snapshot."""
        session = self._sessions.get(session_id)
        if session is None:
            return None
        if session.task is not None and not session.task.done():
            await asyncio.shield(session.task)
        return session.snapshot()

    def get_snapshot(self, session_id: str | None = None) -> ValidationSnapshot | None:
        session = self._active if session_id is None else self._sessions.get(session_id)
        return session.snapshot() if session else None

    def checkpoint_stats(self, session_id: str) -> dict[str, Any] | None:
        session = self._sessions.get(session_id)
        return session.writer.stats() if session else None


# Global instance
_coordinator: ValidationCoordinator | None = None


def get_coordinator() -> ValidationCoordinator:
    """Get or create the process-wide coordinator."""
    global _coordinator
    if _coordinator is None:
        _coordinator = ValidationCoordinator()
    return _coordinator
