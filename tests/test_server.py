"""Tests for MCP tools and HTTP routes."""

import json
from unittest.mock import patch

import httpx
import pytest
from starlette.testclient import TestClient

import partxref_mcp.server as srv
from partxref_mcp.checkpoint import CheckpointStore
from partxref_mcp.config import MAX_BATCH_ROWS
from partxref_mcp.logic_tables import LOGIC_TABLES
from partxref_mcp.part_data import set_service
from partxref_mcp.validation import ValidationCoordinator
from partxref_mcp.validation_client import ValidationServiceClient

SOURCE_MPN = "GRM188R71H104KA93D"


def _call(tool):
    """Tool decorators may wrap the function; call the underlying coroutine."""
    return getattr(tool, "fn", tool)


@pytest.fixture(autouse=True)
def sample_service(service):
    set_service(service)
    yield service
    set_service(None)


@pytest.fixture
def coordinator(tmp_path):
    """Coordinator whose validation requests go to this app's own batch endpoint."""
    store = CheckpointStore(tmp_path / "lists.db")
    transport = httpx.ASGITransport(app=srv.app)
    coordinator = ValidationCoordinator(
        store=store,
        client_factory=lambda: ValidationServiceClient("http://testserver", transport=transport),
    )
    with patch("partxref_mcp.server.get_coordinator", return_value=coordinator):
        yield coordinator
    store.close()


# =============================================================================
# CROSS-REFERENCE TOOLS
# =============================================================================


class TestFindReplacementsTool:
    @pytest.mark.asyncio
    async def test_ranked_result(self):
        result = await _call(srv.xref_find_replacements)(mpn=SOURCE_MPN)
        assert result["familyId"] == "12"
        assert result["recommendations"][0]["part"]["mpn"] == "CL10B104KB8NNNC"
        assert result["recommendations"][0]["matchPercentage"] == 100
        assert result["total"] == 4

    @pytest.mark.asyncio
    async def test_limit_clamped(self):
        result = await _call(srv.xref_find_replacements)(mpn=SOURCE_MPN, limit=0)
        assert len(result["recommendations"]) == 1
        assert result["total"] == 4

    @pytest.mark.asyncio
    async def test_hide_obsolete(self):
        result = await _call(srv.xref_find_replacements)(mpn=SOURCE_MPN, hide_obsolete=True)
        mpns = [r["part"]["mpn"] for r in result["recommendations"]]
        assert "GRM188R71H104KA01D" not in mpns

    @pytest.mark.asyncio
    async def test_json_string_params(self):
        result = await _call(srv.xref_find_replacements)(
            mpn=SOURCE_MPN,
            overrides='{"voltage_rated": "16V"}',
            application_context='{"voltage_ratio": "high"}',
        )
        assert result["rejected"] == [
            {"mpn": "GRM188R61H104KA93D", "manufacturer": "Murata", "reason": "Failed mandatory: Dielectric / Temperature Characteristic"}
        ]

    @pytest.mark.asyncio
    async def test_errors(self):
        result = await _call(srv.xref_find_replacements)(mpn="NOPE-123")
        assert "Part not found" in result["error"]
        result = await _call(srv.xref_find_replacements)(mpn="ABM8-16.000MHZ-B2-T")
        assert "No cross-reference rules" in result["error"]


class TestContextQuestionsTool:
    @pytest.mark.asyncio
    async def test_family_questions(self):
        tool = _call(srv.xref_context_questions)
        driver = await tool(mpn="IR2104STRPBF")
        assert driver["familyId"] == "C3"
        assert driver["contextSensitivity"] == "critical"

        mlcc = await tool(mpn=SOURCE_MPN, answers='{"voltage_ratio": "low"}')
        assert mlcc["answered"] == {"voltage_ratio": "low"}

    @pytest.mark.asyncio
    async def test_error(self):
        result = await _call(srv.xref_context_questions)(mpn="NOPE-123")
        assert "error" in result


class TestListFamiliesTool:
    @pytest.mark.asyncio
    async def test_families(self):
        result = await _call(srv.xref_list_families)()
        ids = {f["familyId"] for f in result["families"]}
        assert ids == set(LOGIC_TABLES)
        assert {"13", "55", "72", "B8", "C4"} <= ids
        assert result["total"] == 27


# =============================================================================
# PARTS LIST TOOLS
# =============================================================================


class TestPartsListValidateTool:
    @pytest.mark.asyncio
    async def test_input_errors(self, coordinator):
        tool = _call(srv.parts_list_validate)
        assert (await tool(list_id=" ", rows=[{"mpn": "A"}]))["error"] == "list_id is required"
        assert (await tool(list_id="bom", rows=[]))["error"] == "No rows provided"
        assert (await tool(list_id="bom", rows="not json"))["error"] == "No rows provided"
        too_many = [{"mpn": "A"}] * (MAX_BATCH_ROWS + 1)
        assert "Too many rows" in (await tool(list_id="bom", rows=too_many))["error"]
        assert coordinator.active_session_id is None

    @pytest.mark.asyncio
    async def test_validate_then_status(self, coordinator):
        rows = [
            {"mpn": SOURCE_MPN},
            {"mpn": "NOPE-123"},
            {"mpn": "ABM8-16.000MHZ-B2-T", "manufacturer": "Abracon"},
        ]
        started = await _call(srv.parts_list_validate)(list_id="bom-1", rows=json.dumps(rows), currency="USD")
        assert started["sessionId"] == "bom-1"
        assert started["total"] == 3
        assert "rows" not in started

        await coordinator.wait("bom-1")
        status = await _call(srv.parts_list_status)(session_id="bom-1")
        assert status["state"] == "completed"
        assert [r["status"] for r in status["rows"]] == ["resolved", "not-found", "resolved"]
        assert status["rows"][0]["suggestedReplacement"]["part"]["mpn"] == "CL10B104KB8NNNC"
        assert status["checkpoint"]["successfulWrites"] >= 1

        # Final checkpoint holds every row
        stored = await coordinator.store.load("bom-1")
        assert [r.status for r in stored] == ["resolved", "not-found", "resolved"]

    @pytest.mark.asyncio
    async def test_status_defaults_to_latest(self, coordinator):
        await _call(srv.parts_list_validate)(list_id="bom-2", rows=[{"mpn": SOURCE_MPN}])
        await coordinator.wait("bom-2")
        status = await _call(srv.parts_list_status)(include_rows=False)
        assert status["sessionId"] == "bom-2"
        assert "rows" not in status

    @pytest.mark.asyncio
    async def test_status_without_session(self, coordinator):
        assert (await _call(srv.parts_list_status)())["error"] == "No validation has been started"
        assert (await _call(srv.parts_list_status)(session_id="x"))["error"] == "No validation session: x"

    @pytest.mark.asyncio
    async def test_cancel_unknown(self, coordinator):
        result = await _call(srv.parts_list_cancel)(session_id="nope")
        assert result["error"] == "No running validation for nope"


# =============================================================================
# HTTP ROUTES
# =============================================================================


class TestHttpRoutes:
    @pytest.fixture
    def client(self):
        # No context manager: the MCP lifespan (catalog load, store) is not needed here
        return TestClient(srv.app)

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_xref_get(self, client):
        response = client.get(f"/api/xref/{SOURCE_MPN}")
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert [r["part"]["mpn"] for r in body["data"]][0] == "CL10B104KB8NNNC"

    def test_xref_post_with_context(self, client):
        response = client.post(
            f"/api/xref/{SOURCE_MPN}",
            json={"overrides": {"voltage_rated": "16V"}, "applicationContext": {"voltage_ratio": "high"}},
        )
        mpns = [r["part"]["mpn"] for r in response.json()["data"]]
        assert "GRM188R61H104KA93D" not in mpns
        assert "CC0603KRX7R7BB104" in mpns

    def test_xref_errors(self, client):
        assert client.get("/api/xref/NOPE-123").status_code == 404
        response = client.get("/api/xref/ABM8-16.000MHZ-B2-T")
        assert response.status_code == 422
        assert response.json()["success"] is False
        bad = client.post(f"/api/xref/{SOURCE_MPN}", content=b"{nope", headers={"content-type": "application/json"})
        assert bad.status_code == 400

    def test_validate_stream(self, client):
        response = client.post("/api/parts-list/validate", json={"items": [
            {"rowIndex": 0, "mpn": SOURCE_MPN},
            {"rowIndex": 1, "mpn": "NOPE-123"},
        ]})
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("application/x-ndjson")
        records = [json.loads(line) for line in response.text.splitlines() if line]
        assert [(r["rowIndex"], r["status"]) for r in records] == [(0, "resolved"), (1, "not-found")]

    def test_validate_stream_currency(self, client):
        response = client.post(
            "/api/parts-list/validate",
            json={"items": [{"rowIndex": 0, "mpn": SOURCE_MPN}], "currency": "EUR"},
        )
        record = json.loads(response.text.splitlines()[0])
        assert record["currency"] == "EUR"
        assert "unitPrice" not in record["resolvedPart"]
        bad = client.post("/api/parts-list/validate", json={"items": [{"rowIndex": 0}], "currency": 5})
        assert bad.status_code == 400

    def test_validate_bad_requests(self, client):
        assert client.post("/api/parts-list/validate", json={"items": []}).status_code == 400
        assert client.post("/api/parts-list/validate", json=["x"]).status_code == 400
        response = client.post(
            "/api/parts-list/validate", content=b"not json", headers={"content-type": "application/json"}
        )
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid request"}
