"""Batch resolution: search -> attributes -> recommendations per row, streamed as NDJSON."""

import asyncio
import json
import logging
from typing import Any, AsyncIterator

from .config import BATCH_CONCURRENCY, CATALOG_CURRENCY
from .part_data import PartDataService, UnsupportedFamilyError

logger = logging.getLogger(__name__)


def _encode(record: dict[str, Any]) -> bytes:
    return (json.dumps(record, ensure_ascii=False) + "\n").encode("utf-8")


def _part_dicts(record: dict[str, Any]) -> list[dict[str, Any]]:
    parts = []
    if record.get("resolvedPart"):
        parts.append(record["resolvedPart"])
    if record.get("sourceAttributes"):
        parts.append(record["sourceAttributes"]["part"])
    if record.get("suggestedReplacement"):
        parts.append(record["suggestedReplacement"]["part"])
    parts.extend(rec["part"] for rec in record.get("allRecommendations") or [])
    return parts


def _apply_currency(record: dict[str, Any], currency: str | None) -> dict[str, Any]:
    """Tag prices with the catalog currency. Prices are withheld when another currency was asked for."""
    if record.get("status") != "resolved":
        return record
    requested = (currency or "").strip().upper()
    if requested and requested != CATALOG_CURRENCY.upper():
        for part in _part_dicts(record):
            part.pop("unitPrice", None)
        record["currency"] = requested
    else:
        record["currency"] = CATALOG_CURRENCY
    return record


def process_item(service: PartDataService, item: dict[str, Any], currency: str | None = None) -> dict[str, Any]:
    """Resolve one batch item into a result record. Never raises."""
    row_index = item.get("rowIndex")
    try:
        mpn = str(item.get("mpn") or "").strip()
        description = str(item.get("description") or "").strip()
        query = mpn or description
        if not query:
            return {"rowIndex": row_index, "status": "not-found"}

        # Description-only rows search better with the manufacturer in front
        manufacturer = str(item.get("manufacturer") or "").strip()
        if not mpn and manufacturer:
            query = f"{manufacturer} {query}"

        matches = service.search(query)
        if not matches:
            return {"rowIndex": row_index, "status": "not-found"}
        resolved = matches[0]

        source = service.get_attributes(resolved.mpn)
        if source is None:
            return _apply_currency(
                {"rowIndex": row_index, "status": "resolved", "resolvedPart": resolved.to_dict()}, currency
            )

        record: dict[str, Any] = {
            "rowIndex": row_index,
            "status": "resolved",
            "resolvedPart": resolved.to_dict(),
            "sourceAttributes": source.to_dict(),
        }
        try:
            result = service.get_recommendations(resolved.mpn)
        except UnsupportedFamilyError:
            logger.debug(f"Row {row_index}: {resolved.mpn} has no rule table, resolved without recommendations")
            return _apply_currency(record, currency)

        recs = [r.to_dict() for r in result.recommendations]
        if recs:
            record["suggestedReplacement"] = recs[0]
        record["allRecommendations"] = recs
        return _apply_currency(record, currency)
    except Exception as e:
        logger.warning(f"Row {row_index} failed: {e}")
        return {"rowIndex": row_index, "status": "error", "errorMessage": str(e) or "Unknown error"}


async def stream_batch_results(
    service: PartDataService,
    items: list[dict[str, Any]],
    concurrency: int = BATCH_CONCURRENCY,
    currency: str | None = None,
) -> AsyncIterator[bytes]:
    """Yield one NDJSON line per item, resolving `concurrency` items at a time.

    A failure outside per-item processing ends the stream with an {"error": ...} line.
    """
    concurrency = max(1, concurrency)
    try:
        for start in range(0, len(items), concurrency):
            chunk = items[start:start + concurrency]
            results = await asyncio.gather(
                *(asyncio.to_thread(process_item, service, item, currency) for item in chunk)
            )
            for result in results:
                yield _encode(result)
    except Exception as e:
        logger.error(f"Batch stream aborted: {e}")
        yield _encode({"error": str(e) or "Processing error"})
