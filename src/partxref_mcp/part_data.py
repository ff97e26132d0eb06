"""Part catalog and synchronous cross-reference service.

PartCatalog holds part attributes in memory (loaded from PARTS_CATALOG_PATH).
PartDataService resolves a source part, folds overrides and application
context into the family rule table, and scores the family's candidate pool.
"""

import dataclasses
import json
import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Iterator

from .config import PARTS_CATALOG_PATH
from .context_questions import get_context_questions
from .escalation import resolve_effective_table, visible_questions
from .families import resolve_family
from .logic_tables import get_logic_table
from .matching import detect_missing_attributes, find_replacements
from .models import (
    CandidateEvaluation,
    EffectiveRuleTable,
    LogicTable,
    Parameter,
    Part,
    PartAttributes,
    XrefRecommendation,
)
from .ranking import filter_obsolete

logger = logging.getLogger(__name__)

OVERRIDE_SORT_ORDER = 999  # Appended override parameters sort after catalog data


class PartNotFoundError(Exception):
    """No catalog entry for the requested MPN."""


class UnsupportedFamilyError(Exception):
    """The part resolves to no family with a rule table."""


# =============================================================================
# CATALOG
# =============================================================================


class PartCatalog:
    """In-memory part catalog keyed by upper-cased MPN."""

    def __init__(self, parts: Iterable[PartAttributes] = ()):
        self._parts: dict[str, PartAttributes] = {}
        for attrs in parts:
            self.add(attrs)

    def add(self, attrs: PartAttributes) -> None:
        key = attrs.mpn.strip().upper()
        if key in self._parts:
            logger.debug(f"Replacing duplicate catalog entry {attrs.mpn}")
        self._parts[key] = attrs

    @classmethod
    def from_dicts(cls, records: Iterable[dict[str, Any]]) -> "PartCatalog":
        catalog = cls()
        for record in records:
            try:
                catalog.add(PartAttributes.from_dict(record))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed catalog record: {e}")
        return catalog

    @classmethod
    def load(cls, path: Path) -> "PartCatalog":
        """Load a JSON catalog: either a list of parts or {"parts": [...]}."""
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        records = data.get("parts", []) if isinstance(data, dict) else data
        catalog = cls.from_dicts(records)
        logger.info(f"Loaded {len(catalog)} parts from {path}")
        return catalog

    def get(self, mpn: str) -> PartAttributes | None:
        return self._parts.get(mpn.strip().upper())

    def __len__(self) -> int:
        return len(self._parts)

    def __iter__(self) -> Iterator[PartAttributes]:
        return iter(self._parts.values())

    def family_of(self, attrs: PartAttributes) -> str | None:
        return resolve_family(attrs.part.subcategory, attrs)

    def candidates_for(self, family_id: str) -> list[PartAttributes]:
        return [attrs for attrs in self if self.family_of(attrs) == family_id]


# =============================================================================
# SERVICE
# =============================================================================


@dataclass
class RecommendationResult:
    source_attributes: PartAttributes
    family_id: str
    family_name: str
    recommendations: list[XrefRecommendation]
    rejected: list[CandidateEvaluation] = field(default_factory=list)
    missing_attributes: list[dict[str, Any]] = field(default_factory=list)
    effective_table: EffectiveRuleTable | None = None

    def to_dict(self, hide_obsolete: bool = False, limit: int | None = None) -> dict[str, Any]:
        """Serialize for API responses. Obsolete filtering and limits apply on read only."""
        recs = filter_obsolete(self.recommendations, hide_obsolete)
        total = len(recs)
        if limit is not None:
            recs = recs[:limit]
        return {
            "sourcePart": self.source_attributes.to_dict(),
            "familyId": self.family_id,
            "familyName": self.family_name,
            "recommendations": [r.to_dict() for r in recs],
            "total": total,
            "rejected": [e.rejection_dict() for e in self.rejected],
            "missingAttributes": self.missing_attributes,
        }


def _normalize_answers(application_context: dict[str, Any] | None) -> dict[str, str]:
    """Accept a flat questionId->answer map or one nested under "answers"."""
    if not application_context:
        return {}
    answers = application_context.get("answers", application_context)
    if not isinstance(answers, dict):
        return {}
    return {str(k): str(v) for k, v in answers.items() if v is not None and not isinstance(v, dict)}


def apply_overrides(
    attrs: PartAttributes,
    overrides: dict[str, str] | None,
    table: LogicTable | None = None,
) -> PartAttributes:
    """Return a copy with override values replacing or appending parameters.

    Replaced parameters drop their pre-parsed numeric value so the new text
    is re-parsed during matching.
    """
    if not overrides:
        return attrs
    params = list(attrs.parameters)
    index = {p.parameter_id: i for i, p in enumerate(params)}
    for attribute_id, value in overrides.items():
        value = str(value)
        if attribute_id in index:
            i = index[attribute_id]
            params[i] = dataclasses.replace(params[i], value=value, numeric_value=None)
            continue
        rule = table.get_rule(attribute_id) if table else None
        params.append(Parameter(
            parameter_id=attribute_id,
            parameter_name=rule.attribute_name if rule else attribute_id,
            value=value,
            sort_order=OVERRIDE_SORT_ORDER,
        ))
        index[attribute_id] = len(params) - 1
    return PartAttributes(part=attrs.part, parameters=tuple(params))


class PartDataService:
    def __init__(self, catalog: PartCatalog):
        self.catalog = catalog

    def search(self, query: str, limit: int = 10) -> list[Part]:
        """Exact MPN matches first, then MPN prefix, then parts whose text holds every query word."""
        q = query.strip().upper()
        if not q:
            return []
        words = q.split()
        exact: list[Part] = []
        prefix: list[Part] = []
        described: list[Part] = []
        for attrs in self.catalog:
            mpn = attrs.mpn.upper()
            if mpn == q:
                exact.append(attrs.part)
            elif mpn.startswith(q):
                prefix.append(attrs.part)
            else:
                text = f"{attrs.part.manufacturer} {mpn} {attrs.part.description}".upper()
                if all(word in text for word in words):
                    described.append(attrs.part)
        prefix.sort(key=lambda p: p.mpn)
        return (exact + prefix + described)[:limit]

    def get_attributes(self, mpn: str) -> PartAttributes | None:
        return self.catalog.get(mpn)

    def _require_part(self, mpn: str) -> PartAttributes:
        attrs = self.catalog.get(mpn)
        if attrs is None:
            raise PartNotFoundError(f"Part not found: {mpn}")
        return attrs

    def _require_table(self, attrs: PartAttributes) -> LogicTable:
        family_id = self.catalog.family_of(attrs)
        table = get_logic_table(family_id) if family_id else None
        if table is None:
            raise UnsupportedFamilyError(
                f"No cross-reference rules for {attrs.mpn} (subcategory: {attrs.part.subcategory or 'unknown'})"
            )
        return table

    def get_recommendations(
        self,
        mpn: str,
        overrides: dict[str, str] | None = None,
        application_context: dict[str, Any] | None = None,
    ) -> RecommendationResult:
        """Score the family candidate pool against one source part.

        Args:
            mpn: Source manufacturer part number
            overrides: attribute_id -> value, applied to a copy of the source
            application_context: question_id -> answer (optionally under "answers")

        Raises:
            PartNotFoundError: MPN not in the catalog
            UnsupportedFamilyError: Part has no family rule table
        """
        source = self._require_part(mpn)
        table = self._require_table(source)
        source = apply_overrides(source, overrides, table)

        answers = _normalize_answers(application_context)
        effective = resolve_effective_table(table, get_context_questions(table.family_id), answers)

        candidates = self.catalog.candidates_for(table.family_id)
        recommendations, rejected = find_replacements(effective, source, candidates)
        logger.info(
            f"{mpn}: family {table.family_id}, {len(candidates)} candidates, "
            f"{len(recommendations)} recommended, {len(rejected)} rejected"
        )
        return RecommendationResult(
            source_attributes=source,
            family_id=table.family_id,
            family_name=table.family_name,
            recommendations=recommendations,
            rejected=rejected,
            missing_attributes=detect_missing_attributes(source, table),
            effective_table=effective,
        )

    def context_questions_for(self, mpn: str, answers: dict[str, Any] | None = None) -> dict[str, Any]:
        """Visible application-context questions for a part's family."""
        source = self._require_part(mpn)
        table = self._require_table(source)
        context = get_context_questions(table.family_id)
        answers = _normalize_answers(answers)
        questions = visible_questions(context, answers) if context else []
        return {
            "mpn": source.mpn,
            "familyId": table.family_id,
            "familyName": table.family_name,
            "contextSensitivity": context.context_sensitivity if context else None,
            "questions": [q.to_dict() for q in questions],
            "answered": {k: v for k, v in answers.items() if any(q.question_id == k for q in questions)},
        }


# =============================================================================
# GLOBAL INSTANCE
# =============================================================================

_service: PartDataService | None = None
_service_lock = threading.Lock()


def get_service() -> PartDataService:
    """Get the global service, loading the catalog on first use."""
    global _service
    if _service is None:
        with _service_lock:
            if _service is None:
                if PARTS_CATALOG_PATH.exists():
                    catalog = PartCatalog.load(PARTS_CATALOG_PATH)
                else:
                    logger.warning(f"Parts catalog not found at {PARTS_CATALOG_PATH}, starting empty")
                    catalog = PartCatalog()
                _service = PartDataService(catalog)
    return _service


def set_service(service: PartDataService | None) -> None:
    """Replace the global service (None resets to lazy loading)."""
    global _service
    with _service_lock:
        _service = service
