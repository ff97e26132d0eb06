"""Tests for streaming parts list validation: NDJSON decoding, checkpoints, the coordinator and its client."""

import asyncio
import json
from unittest.mock import AsyncMock

import httpx
import pytest

from partxref_mcp.checkpoint import CheckpointStore, CheckpointWriter
from partxref_mcp.models import Part, PartsListRow
from partxref_mcp.ndjson import NDJSONDecoder
from partxref_mcp.validation import ValidationCoordinator, ValidationSnapshot
from partxref_mcp.validation_client import ValidationServiceClient, ValidationServiceError


def _rows(n: int) -> list[PartsListRow]:
    return [PartsListRow(row_index=i, raw_mpn=f"MPN-{i}") for i in range(n)]


def _line(row_index: int, status: str = "resolved") -> str:
    record = {"rowIndex": row_index, "status": status}
    if status == "resolved":
        record["resolvedPart"] = {"mpn": f"MPN-{row_index}", "manufacturer": "Acme"}
    return json.dumps(record) + "\n"


def _chunked(text: str, size: int) -> list[bytes]:
    data = text.encode("utf-8")
    return [data[i:i + size] for i in range(0, len(data), size)]


async def _wait_until(predicate, attempts: int = 1000) -> None:
    for _ in range(attempts):
        if predicate():
            return
        await asyncio.sleep(0)
    raise AssertionError("condition not reached")


class FakeStore:
    """In-memory stand-in for CheckpointStore's async interface."""

    def __init__(self, stored: dict[str, list[PartsListRow]] | None = None, fail: bool = False):
        self.stored = stored or {}
        self.fail = fail
        self.saves: list[tuple[str, list[str]]] = []
        self.loads = 0

    async def save(self, list_id, rows):
        if self.fail:
            raise OSError("database is locked")
        self.saves.append((list_id, [r.status for r in rows]))
        self.stored[list_id] = rows

    async def load(self, list_id):
        self.loads += 1
        return self.stored.get(list_id)


class FakeClient:
    """Yields canned chunks, then optionally raises or blocks forever."""

    def __init__(self, chunks=(), error: Exception | None = None, hang: bool = False):
        self.chunks = list(chunks)
        self.error = error
        self.hang = hang
        self.items = None
        self.currency = None
        self.closed = False

    async def stream_results(self, items, currency=None):
        self.items = items
        self.currency = currency
        for chunk in self.chunks:
            yield chunk
        if self.error:
            raise self.error
        if self.hang:
            await asyncio.Event().wait()

    async def close(self):
        self.closed = True


def _coordinator(store, *clients, checkpoint_every: int = 5) -> ValidationCoordinator:
    pool = iter(clients)
    return ValidationCoordinator(store=store, client_factory=lambda: next(pool), checkpoint_every=checkpoint_every)


# =============================================================================
# NDJSON DECODER
# =============================================================================


class TestNDJSONDecoder:
    def test_record_split_across_chunks(self):
        decoder = NDJSONDecoder()
        assert decoder.feed(b'{"rowIndex": 0, "sta') == []
        assert decoder.feed(b'tus": "resolved"}\n{"rowIndex"') == [{"rowIndex": 0, "status": "resolved"}]
        assert decoder.feed(b': 1}\n') == [{"rowIndex": 1}]

    def test_multibyte_character_split(self):
        decoder = NDJSONDecoder()
        data = '{"value": "10kΩ"}\n'.encode("utf-8")
        cut = data.index("Ω".encode("utf-8")) + 1
        assert decoder.feed(data[:cut]) == []
        assert decoder.feed(data[cut:]) == [{"value": "10kΩ"}]

    def test_str_chunks_and_blank_lines(self):
        decoder = NDJSONDecoder()
        assert decoder.feed('{"a": 1}\n\n  \n{"b": 2}\n') == [{"a": 1}, {"b": 2}]

    def test_invalid_line_skipped(self):
        decoder = NDJSONDecoder()
        assert decoder.feed(b'{"a": 1}\nnot json\n{"b": 2}\n') == [{"a": 1}, {"b": 2}]
        assert decoder.skipped == 1

    def test_finish_flushes_last_line(self):
        decoder = NDJSONDecoder()
        assert decoder.feed(b'{"a": 1}\n{"b": 2}') == [{"a": 1}]
        assert decoder.finish() == [{"b": 2}]
        assert decoder.finish() == []


# =============================================================================
# CHECKPOINT STORE
# =============================================================================


class TestCheckpointStore:
    @pytest.fixture
    def store(self, tmp_path):
        store = CheckpointStore(tmp_path / "lists.db")
        yield store
        store.close()

    def test_missing_list(self, store):
        assert store.load_sync("nope") is None

    def test_save_and_load(self, store):
        rows = _rows(2)
        rows[0].status = "resolved"
        rows[0].resolved_part = Part(mpn="MPN-0", manufacturer="Acme")
        store.save_sync("bom-1", rows)
        loaded = store.load_sync("bom-1")
        assert [r.to_dict() for r in loaded] == [r.to_dict() for r in rows]

    def test_save_overwrites(self, store):
        store.save_sync("bom-1", _rows(3))
        store.save_sync("bom-1", _rows(1))
        assert len(store.load_sync("bom-1")) == 1

    def test_delete(self, store):
        store.save_sync("bom-1", _rows(1))
        assert store.delete_sync("bom-1")
        assert not store.delete_sync("bom-1")
        assert store.load_sync("bom-1") is None

    def test_malformed_stored_row_skipped(self, store):
        conn = store._ensure_db()
        payload = json.dumps([{"rowIndex": 0, "rawMpn": "A"}, {"rowIndex": 1, "status": "bogus"}, {"rawMpn": "C"}])
        conn.execute("INSERT INTO parts_lists (list_id, rows, updated_at) VALUES (?, ?, 0)", ("bom-2", payload))
        conn.commit()
        assert [r.raw_mpn for r in store.load_sync("bom-2")] == ["A"]

    @pytest.mark.asyncio
    async def test_async_api(self, store):
        await store.save("bom-3", _rows(2))
        assert len(await store.load("bom-3")) == 2
        assert await store.delete("bom-3")


# =============================================================================
# CHECKPOINT WRITER
# =============================================================================


class TestCheckpointWriter:
    @pytest.mark.asyncio
    async def test_newer_snapshot_supersedes_oldest(self):
        store = FakeStore()
        writer = CheckpointWriter(store, "bom", max_pending=4)
        for n in range(1, 7):
            writer.enqueue(_rows(n))
        await writer.flush()
        assert writer.superseded == 2
        assert writer.successful_writes == 4
        assert len(store.stored["bom"]) == 6
        assert writer.stats()["pending"] == 0

    @pytest.mark.asyncio
    async def test_retry_then_success(self):
        store = FakeStore()
        store.save = AsyncMock(side_effect=[OSError("disk full"), None])
        writer = CheckpointWriter(store, "bom", retry_delay=0)
        writer.enqueue(_rows(1))
        await writer.flush()
        assert store.save.await_count == 2
        assert writer.successful_writes == 1
        assert writer.failed_writes == 0
        assert writer.last_error == "disk full"

    @pytest.mark.asyncio
    async def test_gives_up_after_max_retries(self):
        store = FakeStore(fail=True)
        writer = CheckpointWriter(store, "bom", max_retries=3, retry_delay=0)
        writer.enqueue(_rows(1))
        await writer.flush()
        stats = writer.stats()
        assert stats["failedWrites"] == 1
        assert stats["successfulWrites"] == 0
        assert stats["lastError"] == "database is locked"

    @pytest.mark.asyncio
    async def test_flush_without_writes(self):
        writer = CheckpointWriter(FakeStore(), "bom")
        await writer.flush()
        assert writer.successful_writes == 0


# =============================================================================
# COORDINATOR
# =============================================================================


class TestValidationRun:
    @pytest.mark.asyncio
    async def test_malformed_line_leaves_row_pending(self):
        lines = [_line(i) for i in range(10)]
        lines[6] = '{"rowIndex": 6, "status": \n'
        client = FakeClient(_chunked("".join(lines), 7))
        coordinator = _coordinator(FakeStore(), client)

        await coordinator.start("bom", _rows(10))
        snapshot = await coordinator.wait("bom")

        assert snapshot.state == "completed"
        assert snapshot.done
        assert snapshot.error is None
        assert snapshot.progress == 1.0
        assert snapshot.rows[6].status == "pending"
        assert sum(1 for r in snapshot.rows if r.status == "resolved") == 9
        assert snapshot.to_dict(include_rows=False)["statusCounts"] == {"resolved": 9, "pending": 1}
        assert client.closed

    @pytest.mark.asyncio
    async def test_request_items(self):
        rows = [
            PartsListRow(row_index=0, raw_mpn="GRM188R71H104KA93D", raw_manufacturer="Murata"),
            PartsListRow(row_index=1, raw_mpn="", raw_description="100nF 0603 X7R"),
        ]
        client = FakeClient([_line(0), _line(1, "not-found")])
        coordinator = _coordinator(FakeStore(), client)
        await coordinator.start("bom", rows, currency="EUR")
        await coordinator.wait("bom")
        assert client.items == [
            {"rowIndex": 0, "mpn": "GRM188R71H104KA93D", "manufacturer": "Murata"},
            {"rowIndex": 1, "mpn": "", "description": "100nF 0603 X7R"},
        ]
        assert client.currency == "EUR"

    @pytest.mark.asyncio
    async def test_records_applied_by_row_index(self):
        client = FakeClient([_line(2), _line(0, "not-found"), _line(7), _line(1, "error")])
        coordinator = _coordinator(FakeStore(), client)
        await coordinator.start("bom", _rows(3))
        snapshot = await coordinator.wait("bom")
        assert [r.status for r in snapshot.rows] == ["not-found", "error", "resolved"]
        assert snapshot.rows[2].resolved_part.mpn == "MPN-2"
        assert coordinator.get_session("bom").skipped == 1  # rowIndex 7 does not exist

    @pytest.mark.asyncio
    async def test_initial_snapshot(self):
        coordinator = _coordinator(FakeStore(), FakeClient([_line(0)]))
        snapshot = await coordinator.start("bom", _rows(2))
        assert snapshot.session_id == "bom"
        assert snapshot.progress == 0.0
        assert not snapshot.done
        assert [r.status for r in snapshot.rows] == ["pending", "pending"]
        await coordinator.wait("bom")

    @pytest.mark.asyncio
    async def test_error_record_fails_session(self):
        client = FakeClient([_line(0), json.dumps({"error": "Upstream catalog offline"}) + "\n", _line(1)])
        coordinator = _coordinator(FakeStore(), client)
        await coordinator.start("bom", _rows(3))
        snapshot = await coordinator.wait("bom")
        assert snapshot.state == "failed"
        assert snapshot.done
        assert snapshot.error == "Upstream catalog offline"
        assert [r.status for r in snapshot.rows] == ["resolved", "pending", "pending"]
        assert snapshot.progress == pytest.approx(1 / 3)

    @pytest.mark.asyncio
    async def test_transport_failure_fails_session(self):
        client = FakeClient([_line(0)], error=ValidationServiceError("Validation service returned HTTP 503", 503))
        store = FakeStore()
        coordinator = _coordinator(store, client)
        await coordinator.start("bom", _rows(2))
        snapshot = await coordinator.wait("bom")
        assert snapshot.state == "failed"
        assert "503" in snapshot.error
        assert store.saves[-1] == ("bom", ["resolved", "pending"])
        assert client.closed

    @pytest.mark.asyncio
    async def test_client_factory_failure_fails_session(self):
        store = FakeStore()

        def broken_factory():
            raise RuntimeError("no validation service configured")

        coordinator = ValidationCoordinator(store=store, client_factory=broken_factory)
        await coordinator.start("bom", _rows(2), resume=False)
        snapshot = await coordinator.wait("bom")
        assert snapshot.state == "failed"
        assert snapshot.done
        assert snapshot.error == "no validation service configured"
        assert store.saves == [("bom", ["pending", "pending"])]

    @pytest.mark.asyncio
    async def test_empty_list_completes(self):
        coordinator = _coordinator(FakeStore())
        await coordinator.start("bom", [])
        snapshot = await coordinator.wait("bom")
        assert snapshot.state == "completed"
        assert snapshot.progress == 1.0


class TestCheckpointing:
    @pytest.mark.asyncio
    async def test_checkpoint_every_n_records_and_at_end(self):
        store = FakeStore()
        coordinator = _coordinator(store, FakeClient(["".join(_line(i) for i in range(10))]), checkpoint_every=5)
        await coordinator.start("bom", _rows(10))
        await coordinator.wait("bom")
        assert len(store.saves) == 3
        assert store.saves[0][1].count("resolved") == 5
        assert store.saves[-1][1] == ["resolved"] * 10
        assert coordinator.checkpoint_stats("bom")["successfulWrites"] == 3

    @pytest.mark.asyncio
    async def test_storage_failure_does_not_stop_validation(self):
        store = FakeStore(fail=True)
        coordinator = _coordinator(store, FakeClient([_line(0), _line(1)]), checkpoint_every=5)
        await coordinator.start("bom", _rows(2), resume=False)
        snapshot = await coordinator.wait("bom")
        assert snapshot.state == "completed"
        assert coordinator.checkpoint_stats("bom")["failedWrites"] == 1

    @pytest.mark.asyncio
    async def test_replayed_stream_gives_same_rows(self):
        stream = "".join([_line(0), _line(1, "not-found"), _line(2)])
        once, twice = FakeStore(), FakeStore()
        single = _coordinator(once, FakeClient([stream]))
        replayed = _coordinator(twice, FakeClient([stream, stream]))

        await single.start("bom", _rows(3), resume=False)
        await replayed.start("bom", _rows(3), resume=False)
        first = await single.wait("bom")
        second = await replayed.wait("bom")

        assert [r.to_dict() for r in second.rows] == [r.to_dict() for r in first.rows]
        assert [r.row_index for r in second.rows] == [0, 1, 2]
        assert twice.saves[-1] == once.saves[-1] == ("bom", ["resolved", "not-found", "resolved"])
        assert [r.to_dict() for r in twice.stored["bom"]] == [r.to_dict() for r in once.stored["bom"]]

    @pytest.mark.asyncio
    async def test_superseded_run_stops_checkpointing(self):
        store = FakeStore()
        first = FakeClient([_line(0)], hang=True)
        second = FakeClient([_line(0, "not-found"), _line(1, "not-found")])
        coordinator = _coordinator(store, first, second)
        await coordinator.start("bom", _rows(2), resume=False)
        old = coordinator.get_session("bom")
        await _wait_until(lambda: old.processed == 1)

        await coordinator.start("bom", _rows(2), resume=False)
        await coordinator.wait("bom")
        assert await coordinator.cancel_all() == 1

        assert old.state == "cancelled"
        assert old.writer.discarded
        assert first.closed
        assert store.saves == [("bom", ["not-found", "not-found"])]
        assert coordinator.get_snapshot("bom").state == "completed"

    def test_unknown_session_stats(self):
        assert _coordinator(FakeStore()).checkpoint_stats("nope") is None


class TestResume:
    @pytest.fixture
    def stored(self):
        rows = _rows(3)
        rows[0].status = "resolved"
        rows[0].resolved_part = Part(mpn="MPN-0")
        rows[1].status = "error"
        rows[1].error_message = "timeout"
        rows[2].status = "not-found"
        return {"bom": rows}

    @pytest.mark.asyncio
    async def test_only_unfinished_rows_sent(self, stored):
        client = FakeClient([_line(1)])
        coordinator = _coordinator(FakeStore(stored), client)
        initial = await coordinator.start("bom", _rows(3))
        assert initial.progress == pytest.approx(2 / 3)
        snapshot = await coordinator.wait("bom")
        assert [item["rowIndex"] for item in client.items] == [1]
        assert [r.status for r in snapshot.rows] == ["resolved", "resolved", "not-found"]
        assert snapshot.rows[0].resolved_part.mpn == "MPN-0"

    @pytest.mark.asyncio
    async def test_stored_rows_used_when_none_given(self, stored):
        client = FakeClient([_line(1)])
        coordinator = _coordinator(FakeStore(stored), client)
        await coordinator.start("bom", [])
        snapshot = await coordinator.wait("bom")
        assert len(snapshot.rows) == 3
        assert [item["rowIndex"] for item in client.items] == [1]

    @pytest.mark.asyncio
    async def test_resume_disabled(self, stored):
        store = FakeStore(stored)
        client = FakeClient([_line(0), _line(1), _line(2)])
        coordinator = _coordinator(store, client)
        await coordinator.start("bom", _rows(3), resume=False)
        await coordinator.wait("bom")
        assert store.loads == 0
        assert len(client.items) == 3

    @pytest.mark.asyncio
    async def test_nothing_left_to_do(self):
        rows = _rows(2)
        for row in rows:
            row.status = "resolved"
        coordinator = _coordinator(FakeStore({"bom": rows}))  # No client available
        await coordinator.start("bom", _rows(2))
        snapshot = await coordinator.wait("bom")
        assert snapshot.state == "completed"
        assert snapshot.progress == 1.0

    @pytest.mark.asyncio
    async def test_unreadable_checkpoint_starts_fresh(self):
        store = FakeStore()
        store.load = AsyncMock(side_effect=OSError("corrupt"))
        client = FakeClient([_line(0)])
        coordinator = _coordinator(store, client)
        await coordinator.start("bom", _rows(1))
        snapshot = await coordinator.wait("bom")
        assert snapshot.state == "completed"
        assert len(client.items) == 1


class TestCancel:
    @pytest.mark.asyncio
    async def test_cancel_running_session(self):
        store = FakeStore()
        client = FakeClient([_line(0)], hang=True)
        coordinator = _coordinator(store, client)
        await coordinator.start("bom", _rows(2))
        session = coordinator.get_session("bom")
        await _wait_until(lambda: session.processed == 1)

        assert await coordinator.cancel("bom")
        snapshot = coordinator.get_snapshot("bom")
        assert snapshot.state == "cancelled"
        assert snapshot.done
        assert store.saves[-1] == ("bom", ["resolved", "pending"])
        assert client.closed
        assert not await coordinator.cancel("bom")

    @pytest.mark.asyncio
    async def test_cancel_before_task_runs(self):
        coordinator = _coordinator(FakeStore())  # Client factory must never be called
        await coordinator.start("bom", _rows(2))
        assert await coordinator.cancel("bom")
        assert coordinator.get_snapshot("bom").state == "cancelled"

    @pytest.mark.asyncio
    async def test_cancel_unknown(self):
        assert not await _coordinator(FakeStore()).cancel("nope")

    @pytest.mark.asyncio
    async def test_cancel_all(self):
        coordinator = _coordinator(FakeStore(), FakeClient(hang=True), FakeClient(hang=True))
        await coordinator.start("a", _rows(1))
        await coordinator.start("b", _rows(1))
        assert await coordinator.cancel_all() == 2
        assert coordinator.get_snapshot("a").state == "cancelled"
        assert coordinator.get_snapshot("b").state == "cancelled"
        assert await coordinator.cancel_all() == 0

    @pytest.mark.asyncio
    async def test_cancel_all_reaches_restarted_list(self):
        first, second = FakeClient([_line(0)], hang=True), FakeClient(hang=True)
        coordinator = _coordinator(FakeStore(), first, second)
        await coordinator.start("bom", _rows(2), resume=False)
        old = coordinator.get_session("bom")
        await _wait_until(lambda: old.processed == 1)

        await coordinator.start("bom", _rows(2), resume=False)
        await _wait_until(lambda: second.items is not None)
        assert coordinator.get_session("bom") is not old

        assert await coordinator.cancel_all() == 2
        assert old.task.done()
        assert old.state == "cancelled"
        assert first.closed
        assert second.closed
        assert coordinator.get_snapshot("bom").state == "cancelled"


class TestObservers:
    @pytest.mark.asyncio
    async def test_snapshots_delivered_in_order(self):
        coordinator = _coordinator(FakeStore(), FakeClient([_line(i) for i in range(4)]))
        received: list[ValidationSnapshot] = []
        coordinator.subscribe(received.append)
        await coordinator.start("bom", _rows(4))
        await coordinator.wait("bom")

        assert received[0].state == "running"
        assert received[-1].done
        assert [s.processed for s in received[1:5]] == [1, 2, 3, 4]
        progress = [s.progress for s in received]
        assert progress == sorted(progress)

    @pytest.mark.asyncio
    async def test_snapshot_is_a_copy(self):
        coordinator = _coordinator(FakeStore(), FakeClient([_line(0)]))
        await coordinator.start("bom", _rows(1))
        snapshot = await coordinator.wait("bom")
        snapshot.rows[0].status = "error"
        assert coordinator.get_snapshot("bom").rows[0].status == "resolved"

    @pytest.mark.asyncio
    async def test_unsubscribe_does_not_stop_work(self):
        coordinator = _coordinator(FakeStore(), FakeClient([_line(0), _line(1)]))
        received = []
        unsubscribe = coordinator.subscribe(received.append)
        unsubscribe()
        unsubscribe()
        await coordinator.start("bom", _rows(2))
        snapshot = await coordinator.wait("bom")
        assert received == []
        assert snapshot.state == "completed"

    @pytest.mark.asyncio
    async def test_failing_observer_is_isolated(self):
        coordinator = _coordinator(FakeStore(), FakeClient([_line(0)]))

        def broken(snapshot):
            raise RuntimeError("render failed")

        received = []
        coordinator.subscribe(broken)
        coordinator.subscribe(received.append)
        await coordinator.start("bom", _rows(1))
        snapshot = await coordinator.wait("bom")
        assert snapshot.state == "completed"
        assert received[-1].done

    @pytest.mark.asyncio
    async def test_session_observer_gets_current_snapshot(self):
        coordinator = _coordinator(FakeStore(), FakeClient([_line(0)]))
        await coordinator.start("bom", _rows(1))
        await coordinator.wait("bom")
        received = []
        coordinator.subscribe(received.append, session_id="bom")
        assert len(received) == 1
        assert received[0].state == "completed"

    @pytest.mark.asyncio
    async def test_global_observers_follow_active_session(self):
        first = FakeClient([_line(0)], hang=True)
        coordinator = _coordinator(FakeStore(), first, FakeClient([_line(0)]))
        await coordinator.start("s1", _rows(2))
        await _wait_until(lambda: coordinator.get_session("s1").processed == 1)

        global_seen: list[str] = []
        s1_seen: list[str] = []
        coordinator.subscribe(lambda s: global_seen.append(s.session_id))
        coordinator.subscribe(lambda s: s1_seen.append(s.state), session_id="s1")

        await coordinator.start("s2", _rows(1))
        await coordinator.wait("s2")
        assert coordinator.active_session_id == "s2"
        assert global_seen[0] == "s1"
        assert set(global_seen[1:]) == {"s2"}
        # The abandoned session keeps running on its own
        assert not coordinator.get_snapshot("s1").done

        await coordinator.cancel("s1")
        assert set(global_seen[1:]) == {"s2"}
        assert s1_seen[-1] == "cancelled"
        assert coordinator.get_snapshot().session_id == "s2"


# =============================================================================
# VALIDATION SERVICE CLIENT
# =============================================================================


class TestValidationServiceClient:
    @pytest.mark.asyncio
    async def test_streams_response_body(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, content=(_line(0) + _line(1, "not-found")).encode())

        client = ValidationServiceClient("http://validator/", transport=httpx.MockTransport(handler))
        items = [{"rowIndex": 0, "mpn": "A"}, {"rowIndex": 1, "mpn": "B"}]
        chunks = [chunk async for chunk in client.stream_results(items, currency="USD")]
        await client.close()

        assert seen["path"] == "/api/parts-list/validate"
        assert seen["body"] == {"items": items, "currency": "USD"}
        decoder = NDJSONDecoder()
        records = [r for chunk in chunks for r in decoder.feed(chunk)]
        assert [r["status"] for r in records] == ["resolved", "not-found"]

    @pytest.mark.asyncio
    async def test_http_error_status(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(503, text="busy"))
        client = ValidationServiceClient("http://validator", transport=transport)
        with pytest.raises(ValidationServiceError) as exc_info:
            async for _ in client.stream_results([{"rowIndex": 0, "mpn": "A"}]):
                pass
        assert exc_info.value.status_code == 503
        await client.close()

    @pytest.mark.asyncio
    async def test_transport_error_sanitized(self):
        def handler(request):
            raise httpx.ConnectError("connection refused to http://validator/secret")

        client = ValidationServiceClient("http://validator", transport=httpx.MockTransport(handler))
        with pytest.raises(ValidationServiceError) as exc_info:
            async for _ in client.stream_results([{"rowIndex": 0, "mpn": "A"}]):
                pass
        assert "ConnectError" in str(exc_info.value)
        assert "secret" not in str(exc_info.value)
        await client.close()

    @pytest.mark.asyncio
    async def test_coordinator_over_http(self):
        body = (_line(0) + _line(1)).encode()
        transport = httpx.MockTransport(lambda request: httpx.Response(200, content=body))
        coordinator = ValidationCoordinator(
            store=FakeStore(),
            client_factory=lambda: ValidationServiceClient("http://validator", transport=transport),
        )
        await coordinator.start("bom", _rows(2))
        snapshot = await coordinator.wait("bom")
        assert snapshot.state == "completed"
        assert [r.status for r in snapshot.rows] == ["resolved", "resolved"]
