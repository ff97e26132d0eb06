"""Part Cross-Reference MCP Server - Find drop-in replacements for electronic components."""

import json
import logging
from contextlib import asynccontextmanager
from typing import Any

from fastmcp import FastMCP
from mcp.types import ToolAnnotations
from starlette.requests import Request
from starlette.responses import JSONResponse, StreamingResponse
from starlette.routing import Route

from . import __version__
from .batch import stream_batch_results
from .checkpoint import close_store, get_store
from .config import DEFAULT_RECOMMENDATION_LIMIT, HTTP_PORT, MAX_BATCH_ROWS, MAX_RECOMMENDATIONS
from .context_questions import get_context_questions
from .families import get_supported_family_names
from .logic_tables import get_all_logic_tables
from .models import PartsListRow
from .part_data import PartNotFoundError, UnsupportedFamilyError, get_service
from .validation import get_coordinator

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app):
    """Load the parts catalog and open the checkpoint store on startup."""
    service = get_service()
    logger.info(f"Catalog ready: {len(service.catalog)} parts")
    get_store()._ensure_db()
    logger.info(f"Rule tables loaded for: {', '.join(get_supported_family_names())}")

    yield

    cancelled = await get_coordinator().cancel_all()
    if cancelled:
        logger.info(f"Cancelled {cancelled} running validation sessions on shutdown")
    close_store()


# Create MCP server
mcp = FastMCP(
    name="partxref",
    instructions="Electronic component cross-reference. Use xref_find_replacements to rank drop-in replacements for an MPN; answer xref_context_questions first when the application matters (e.g. flex PCB, automotive, switching frequency). Use parts_list_validate to resolve and cross-reference a whole BOM in the background, then poll parts_list_status.",
    lifespan=lifespan,
)


# Helpers to handle JSON string objects from MCP clients
def _parse_dict_param(value: dict[str, Any] | str | None) -> dict[str, Any] | None:
    """Parse an object parameter that may arrive as a JSON string."""
    if value is None or isinstance(value, dict):
        return value
    if isinstance(value, str):
        try:
            parsed = json.loads(value)
            if isinstance(parsed, dict):
                return parsed
        except json.JSONDecodeError:
            logger.debug(f"Failed to parse object parameter as JSON: {value[:100]!r}")
    return None


def _parse_rows_param(value: list[dict[str, Any]] | str | None) -> list[dict[str, Any]] | None:
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except json.JSONDecodeError:
            logger.debug(f"Failed to parse rows parameter as JSON: {value[:100]!r}")
            return None
    if not isinstance(value, list):
        return None
    return [r for r in value if isinstance(r, dict)]


def _to_parts_list_row(data: dict[str, Any], default_index: int) -> PartsListRow:
    """Accept either stored row shape (rawMpn...) or batch item shape (mpn...)."""
    return PartsListRow(
        row_index=int(data.get("rowIndex", default_index)),
        raw_mpn=str(data.get("rawMpn", data.get("mpn")) or ""),
        raw_manufacturer=str(data.get("rawManufacturer", data.get("manufacturer")) or ""),
        raw_description=str(data.get("rawDescription", data.get("description")) or ""),
    )


# Tools

@mcp.tool(
    annotations=ToolAnnotations(
        title="Find Replacement Parts",
        readOnlyHint=True,
        destructiveHint=False,
        idempotentHint=True,
        openWorldHint=False,
    )
)
async def xref_find_replacements(
    mpn: str,
    overrides: dict[str, str] | str | None = None,
    application_context: dict[str, str] | str | None = None,
    hide_obsolete: bool = False,
    limit: int = DEFAULT_RECOMMENDATION_LIMIT,
) -> dict:
    """Rank drop-in replacement candidates for a part by attribute-level matching.

    Each candidate is scored against the family's rule table. Candidates that
    fail any mandatory attribute (e.g. lower voltage rating, different package)
    are excluded and listed under "rejected".

    Args:
        mpn: Manufacturer part number of the part to replace (e.g., "GRM188R71H104KA93D")
        overrides: Corrected or missing source attribute values, attribute_id -> value
            (e.g., {"voltage_rated": "50V"}). See missingAttributes in the response.
        application_context: Answers to xref_context_questions, question_id -> option value
            (e.g., {"flex_pcb": "yes", "environment": "automotive"})
        hide_obsolete: Drop Obsolete/Discontinued candidates from the list
        limit: Maximum recommendations to return (default: 10, max: 50)

    Returns:
        sourcePart, familyId/familyName, recommendations (best first) with per-attribute
        matchDetails and matchPercentage, rejected candidates with reasons, and
        missingAttributes the source part lacks.
    """
    limit = min(max(1, limit), MAX_RECOMMENDATIONS)
    try:
        result = get_service().get_recommendations(
            mpn.strip(),
            overrides=_parse_dict_param(overrides),
            application_context=_parse_dict_param(application_context),
        )
    except (PartNotFoundError, UnsupportedFamilyError) as e:
        return {"error": str(e)}
    return result.to_dict(hide_obsolete=hide_obsolete, limit=limit)


@mcp.tool(
    annotations=ToolAnnotations(
        title="Application Context Questions",
        readOnlyHint=True,
        destructiveHint=False,
        idempotentHint=True,
        openWorldHint=False,
    )
)
async def xref_context_questions(
    mpn: str,
    answers: dict[str, str] | str | None = None,
) -> dict:
    """Get the application questions that change how strictly a part's attributes are matched.

    Follow-up questions appear once their parent question is answered
    (e.g. an LDO's upstream switching frequency only matters for noise-sensitive loads).
    Call again with the answers so far to reveal them.

    Args:
        mpn: Manufacturer part number
        answers: Answers so far, question_id -> option value

    Returns:
        familyId, familyName, contextSensitivity and visible questions with options
    """
    try:
        return get_service().context_questions_for(mpn.strip(), _parse_dict_param(answers))
    except (PartNotFoundError, UnsupportedFamilyError) as e:
        return {"error": str(e)}


@mcp.tool(
    annotations=ToolAnnotations(
        title="List Supported Families",
        readOnlyHint=True,
        destructiveHint=False,
        idempotentHint=True,
        openWorldHint=False,
    )
)
async def xref_list_families() -> dict:
    """List component families with cross-reference rules.

    Returns:
        families: id, name, category, rule count and whether application questions exist
    """
    families = []
    for table in get_all_logic_tables():
        context = get_context_questions(table.family_id)
        families.append({
            "familyId": table.family_id,
            "familyName": table.family_name,
            "category": table.category,
            "description": table.description,
            "ruleCount": len(table.rules),
            "contextSensitivity": context.context_sensitivity if context else None,
        })
    return {"families": families, "total": len(families)}


@mcp.tool(
    annotations=ToolAnnotations(
        title="Validate Parts List",
        readOnlyHint=False,
        destructiveHint=False,
        idempotentHint=False,
        openWorldHint=False,
    )
)
async def parts_list_validate(
    list_id: str,
    rows: list[dict[str, Any]] | str,
    currency: str | None = None,
    resume: bool = True,
) -> dict:
    """Start background validation of a parts list (BOM).

    Each row is resolved to a catalog part and cross-referenced. Work continues
    in the background; poll parts_list_status for progress and results.
    Starting a list again resumes from its last checkpoint unless resume=False.

    Args:
        list_id: Stable id for the list (used for checkpoints and status)
        rows: [{"mpn", "manufacturer"?, "description"?, "rowIndex"?}]
        currency: Display currency code for pricing (e.g., "USD")
        resume: Keep rows already resolved in the last checkpoint

    Returns:
        Session snapshot without rows (state, progress, statusCounts)
    """
    if not list_id or not list_id.strip():
        return {"error": "list_id is required"}
    parsed = _parse_rows_param(rows)
    if not parsed:
        return {"error": "No rows provided"}
    if len(parsed) > MAX_BATCH_ROWS:
        return {"error": f"Too many rows ({len(parsed)}, max {MAX_BATCH_ROWS})"}

    try:
        list_rows = [_to_parts_list_row(r, i) for i, r in enumerate(parsed)]
    except (TypeError, ValueError) as e:
        return {"error": f"Invalid row: {e}"}

    snapshot = await get_coordinator().start(list_id.strip(), list_rows, currency=currency, resume=resume)
    return snapshot.to_dict(include_rows=False)


@mcp.tool(
    annotations=ToolAnnotations(
        title="Parts List Status",
        readOnlyHint=True,
        destructiveHint=False,
        idempotentHint=True,
        openWorldHint=False,
    )
)
async def parts_list_status(session_id: str | None = None, include_rows: bool = True) -> dict:
    """Get progress and results of a parts list validation.

    Args:
        session_id: The list_id passed to parts_list_validate (default: most recent)
        include_rows: Include per-row results

    Returns:
        state (running/completed/failed/cancelled), progress 0-1, error, rows
    """
    coordinator = get_coordinator()
    snapshot = coordinator.get_snapshot(session_id)
    if snapshot is None:
        return {"error": f"No validation session: {session_id}" if session_id else "No validation has been started"}
    data = snapshot.to_dict(include_rows=include_rows)
    data["checkpoint"] = coordinator.checkpoint_stats(snapshot.session_id)
    return data


@mcp.tool(
    annotations=ToolAnnotations(
        title="Cancel Parts List Validation",
        readOnlyHint=False,
        destructiveHint=False,
        idempotentHint=True,
        openWorldHint=False,
    )
)
async def parts_list_cancel(session_id: str) -> dict:
    """Stop a running parts list validation. Rows resolved so far are kept and checkpointed.

    Args:
        session_id: The list_id passed to parts_list_validate
    """
    coordinator = get_coordinator()
    cancelled = await coordinator.cancel(session_id)
    if not cancelled:
        return {"error": f"No running validation for {session_id}"}
    snapshot = coordinator.get_snapshot(session_id)
    return snapshot.to_dict(include_rows=False) if snapshot else {"sessionId": session_id, "state": "cancelled"}


# HTTP API

async def xref_endpoint(request: Request):
    """GET or POST /api/xref/{mpn} -> {"success", "data" | "error"}."""
    mpn = request.path_params["mpn"]
    overrides = None
    application_context = None
    if request.method == "POST":
        try:
            body = await request.json()
        except json.JSONDecodeError:
            return JSONResponse({"success": False, "error": "Invalid JSON body"}, status_code=400)
        if not isinstance(body, dict):
            return JSONResponse({"success": False, "error": "Expected a JSON object"}, status_code=400)
        overrides = _parse_dict_param(body.get("overrides"))
        application_context = _parse_dict_param(body.get("applicationContext"))

    try:
        result = get_service().get_recommendations(mpn, overrides, application_context)
    except PartNotFoundError as e:
        return JSONResponse({"success": False, "error": str(e)}, status_code=404)
    except UnsupportedFamilyError as e:
        return JSONResponse({"success": False, "error": str(e)}, status_code=422)
    return JSONResponse({"success": True, "data": [r.to_dict() for r in result.recommendations]})


async def validate_endpoint(request: Request):
    """POST /api/parts-list/validate -> NDJSON stream, one record per item."""
    try:
        body = await request.json()
    except json.JSONDecodeError:
        return JSONResponse({"error": "Invalid request"}, status_code=400)
    items = body.get("items") if isinstance(body, dict) else None
    if not items or not isinstance(items, list):
        return JSONResponse({"error": "No items provided"}, status_code=400)
    if len(items) > MAX_BATCH_ROWS:
        return JSONResponse({"error": f"Too many items (max {MAX_BATCH_ROWS})"}, status_code=400)

    currency = body.get("currency")
    if currency is not None and not isinstance(currency, str):
        return JSONResponse({"error": "currency must be a string"}, status_code=400)

    items = [item for item in items if isinstance(item, dict)]
    return StreamingResponse(
        stream_batch_results(get_service(), items, currency=currency),
        media_type="application/x-ndjson",
    )


# Health check endpoint
async def health(request):
    return JSONResponse({
        "status": "healthy",
        "service": "partxref-mcp",
        "version": __version__,
    })


# Create ASGI app
def create_app():
    """Create the ASGI application."""
    # stateless_http=True: MCP clients don't reliably forward session cookies
    app = mcp.http_app(
        path="/mcp",
        transport="streamable-http",
        stateless_http=True,
    )

    app.routes.append(Route("/health", health))
    app.routes.append(Route("/api/xref/{mpn:path}", xref_endpoint, methods=["GET", "POST"]))
    app.routes.append(Route("/api/parts-list/validate", validate_endpoint, methods=["POST"]))

    return app


app = create_app()


class _HealthFilterLog(logging.Filter):
    """Suppress noisy /health access logs from container healthchecks."""

    def filter(self, record: logging.LogRecord) -> bool:
        return "/health" not in record.getMessage()


def main():
    """Run the server."""
    import uvicorn

    logging.getLogger("uvicorn.access").addFilter(_HealthFilterLog())

    uvicorn.run(
        "partxref_mcp.server:app",
        host="0.0.0.0",
        port=HTTP_PORT,
        lifespan="on",
    )


if __name__ == "__main__":
    main()
