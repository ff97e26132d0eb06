"""Data model for cross-reference matching and parts-list validation.

Every record that crosses the wire has a ``to_dict()`` producing the camelCase
JSON shape used by the HTTP API and the NDJSON stream, and a ``from_dict()``
that tolerates missing optional keys.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Literal

LogicType = Literal["identity", "identity_upgrade", "identity_flag", "threshold", "fit"]
ThresholdDirection = Literal["gte", "lte", "range_superset"]
EffectType = Literal["escalate_to_primary", "escalate_to_mandatory", "not_applicable", "add_review_flag"]
RuleResult = Literal["pass", "upgrade", "review", "fail", "info"]
MatchStatus = Literal["exact", "better", "worse", "compatible", "different"]
RowStatus = Literal["pending", "validating", "resolved", "not-found", "error"]

LOGIC_TYPES = frozenset({"identity", "identity_upgrade", "identity_flag", "threshold", "fit"})
EFFECT_TYPES = frozenset({"escalate_to_primary", "escalate_to_mandatory", "not_applicable", "add_review_flag"})
ROW_STATUSES = frozenset({"pending", "validating", "resolved", "not-found", "error"})
TERMINAL_ROW_STATUSES = frozenset({"resolved", "not-found", "error"})


class Tier(IntEnum):
    """Importance class of an attribute rule. Ordered, so escalation is max()."""

    NOT_APPLICABLE = 0
    SECONDARY = 1
    PRIMARY = 2
    MANDATORY = 3

    @property
    def label(self) -> str:
        return self.name.lower()

    @classmethod
    def parse(cls, value: "Tier | str") -> "Tier":
        if isinstance(value, Tier):
            return value
        return cls[value.strip().upper()]


def _compact(data: dict[str, Any]) -> dict[str, Any]:
    """Drop None values so optional wire fields are omitted rather than null."""
    return {k: v for k, v in data.items() if v is not None}


# =============================================================================
# PARTS
# =============================================================================


@dataclass(frozen=True)
class Part:
    """Part identity plus commercial data (price/stock)."""
    mpn: str
    manufacturer: str = ""
    description: str = ""
    category: str = ""
    subcategory: str = ""
    status: str = "Active"  # Active, Obsolete, Discontinued, NRND, LastTimeBuy
    unit_price: float | None = None
    quantity_available: int | None = None
    datasheet_url: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return _compact({
            "mpn": self.mpn,
            "manufacturer": self.manufacturer,
            "description": self.description,
            "category": self.category,
            "subcategory": self.subcategory,
            "status": self.status,
            "unitPrice": self.unit_price,
            "quantityAvailable": self.quantity_available,
            "datasheetUrl": self.datasheet_url,
        })

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Part":
        return cls(
            mpn=data["mpn"],
            manufacturer=data.get("manufacturer", ""),
            description=data.get("description", ""),
            category=data.get("category", ""),
            subcategory=data.get("subcategory", ""),
            status=data.get("status", "Active"),
            unit_price=data.get("unitPrice"),
            quantity_available=data.get("quantityAvailable"),
            datasheet_url=data.get("datasheetUrl"),
        )


@dataclass(frozen=True)
class Parameter:
    parameter_id: str
    parameter_name: str
    value: str  # Display string, e.g. "100nF", "X7R", "-55°C ~ 125°C"
    sort_order: int = 0
    numeric_value: float | None = None  # Pre-parsed value in base units, when the source provides one

    def to_dict(self) -> dict[str, Any]:
        return _compact({
            "parameterId": self.parameter_id,
            "parameterName": self.parameter_name,
            "value": self.value,
            "sortOrder": self.sort_order,
            "numericValue": self.numeric_value,
        })

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Parameter":
        return cls(
            parameter_id=data["parameterId"],
            parameter_name=data.get("parameterName", data["parameterId"]),
            value=str(data.get("value", "")),
            sort_order=int(data.get("sortOrder", 0)),
            numeric_value=data.get("numericValue"),
        )


@dataclass(frozen=True)
class PartAttributes:
    """A part with its ordered parametric data. Immutable once fetched."""
    part: Part
    parameters: tuple[Parameter, ...] = ()

    @property
    def mpn(self) -> str:
        return self.part.mpn

    def get(self, parameter_id: str) -> Parameter | None:
        for param in self.parameters:
            if param.parameter_id == parameter_id:
                return param
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "part": self.part.to_dict(),
            "parameters": [p.to_dict() for p in self.parameters],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PartAttributes":
        return cls(
            part=Part.from_dict(data["part"]),
            parameters=tuple(Parameter.from_dict(p) for p in data.get("parameters", [])),
        )


# =============================================================================
# RULE TABLES
# =============================================================================


@dataclass(frozen=True)
class AttributeRule:
    attribute_id: str
    attribute_name: str
    logic_type: LogicType
    base_tier: Tier
    base_weight: int  # 0-10
    direction: ThresholdDirection | None = None  # threshold rules only
    upgrade_hierarchy: tuple[str, ...] = ()  # identity_upgrade rules only, best -> worst
    tolerance: float | None = None  # fit window (fraction); None uses the configured default
    review_band: float | None = None  # threshold wrong-side band / fit outer band
    block_on_missing: bool = False  # table default; context answers can also set it
    engineering_reason: str = ""
    sort_order: int = 0

    def to_dict(self) -> dict[str, Any]:
        return _compact({
            "attributeId": self.attribute_id,
            "attributeName": self.attribute_name,
            "logicType": self.logic_type,
            "baseTier": self.base_tier.label,
            "baseWeight": self.base_weight,
            "thresholdDirection": self.direction,
            "upgradeHierarchy": list(self.upgrade_hierarchy) or None,
            "tolerance": self.tolerance,
            "reviewBand": self.review_band,
            "blockOnMissing": self.block_on_missing or None,
            "engineeringReason": self.engineering_reason or None,
            "sortOrder": self.sort_order,
        })


@dataclass(frozen=True)
class LogicTable:
    family_id: str
    family_name: str
    category: str
    description: str
    rules: tuple[AttributeRule, ...]

    def get_rule(self, attribute_id: str) -> AttributeRule | None:
        for rule in self.rules:
            if rule.attribute_id == attribute_id:
                return rule
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "familyId": self.family_id,
            "familyName": self.family_name,
            "category": self.category,
            "description": self.description,
            "rules": [r.to_dict() for r in self.rules],
        }


# =============================================================================
# CONTEXT QUESTIONS
# =============================================================================


@dataclass(frozen=True)
class QuestionCondition:
    """A question is only shown when ``depends_on`` was answered with one of ``allowed_values``."""
    depends_on: str
    allowed_values: frozenset[str]

    def to_dict(self) -> dict[str, Any]:
        return {"questionId": self.depends_on, "values": sorted(self.allowed_values)}


@dataclass(frozen=True)
class AttributeEffect:
    attribute_id: str
    effect: EffectType
    note: str
    block_on_missing: bool = False

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"attributeId": self.attribute_id, "effect": self.effect, "note": self.note}
        if self.block_on_missing:
            data["blockOnMissing"] = True
        return data


@dataclass(frozen=True)
class ContextOption:
    value: str
    label: str
    description: str = ""
    attribute_effects: tuple[AttributeEffect, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return _compact({
            "value": self.value,
            "label": self.label,
            "description": self.description or None,
            "attributeEffects": [e.to_dict() for e in self.attribute_effects],
        })


@dataclass(frozen=True)
class ContextQuestion:
    question_id: str
    question_text: str
    priority: int
    options: tuple[ContextOption, ...]
    condition: QuestionCondition | None = None
    allow_free_text: bool = False

    def get_option(self, value: str) -> ContextOption | None:
        for option in self.options:
            if option.value == value:
                return option
        return None

    def to_dict(self) -> dict[str, Any]:
        return _compact({
            "questionId": self.question_id,
            "questionText": self.question_text,
            "priority": self.priority,
            "options": [o.to_dict() for o in self.options],
            "condition": self.condition.to_dict() if self.condition else None,
            "allowFreeText": self.allow_free_text,
        })


@dataclass(frozen=True)
class FamilyContext:
    family_ids: tuple[str, ...]
    context_sensitivity: Literal["low", "moderate", "high", "critical"]
    questions: tuple[ContextQuestion, ...]


# =============================================================================
# EFFECTIVE RULES (per match, never persisted)
# =============================================================================


@dataclass
class EffectiveRule:
    rule: AttributeRule
    tier: Tier
    weight: int
    review_flags: list[str] = field(default_factory=list)
    blocking: bool = False
    notes: list[str] = field(default_factory=list)  # Rationale of applied escalations

    @property
    def attribute_id(self) -> str:
        return self.rule.attribute_id

    def to_dict(self) -> dict[str, Any]:
        return {
            "attributeId": self.rule.attribute_id,
            "attributeName": self.rule.attribute_name,
            "logicType": self.rule.logic_type,
            "tier": self.tier.label,
            "weight": self.weight,
            "reviewFlags": list(self.review_flags),
            "blocking": self.blocking,
            "notes": list(self.notes),
        }


@dataclass
class EffectiveRuleTable:
    family_id: str
    rules: dict[str, EffectiveRule]  # attribute_id -> rule, in base table order

    def get(self, attribute_id: str) -> EffectiveRule | None:
        return self.rules.get(attribute_id)

    def __iter__(self):
        return iter(self.rules.values())

    def __len__(self) -> int:
        return len(self.rules)

    def to_dict(self) -> dict[str, Any]:
        return {
            "familyId": self.family_id,
            "rules": [r.to_dict() for r in self.rules.values()],
        }


# =============================================================================
# MATCH RESULTS
# =============================================================================


@dataclass
class MatchDetail:
    parameter_id: str
    parameter_name: str
    source_value: str
    replacement_value: str
    match_status: MatchStatus
    rule_result: RuleResult
    tier: Tier = Tier.SECONDARY
    weight: int = 0
    note: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return _compact({
            "parameterId": self.parameter_id,
            "parameterName": self.parameter_name,
            "sourceValue": self.source_value,
            "replacementValue": self.replacement_value,
            "matchStatus": self.match_status,
            "ruleResult": self.rule_result,
            "tier": self.tier.label,
            "weight": self.weight,
            "note": self.note,
        })

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MatchDetail":
        return cls(
            parameter_id=data["parameterId"],
            parameter_name=data.get("parameterName", data["parameterId"]),
            source_value=data.get("sourceValue", ""),
            replacement_value=data.get("replacementValue", ""),
            match_status=data.get("matchStatus", "different"),
            rule_result=data.get("ruleResult", "info"),
            tier=Tier.parse(data.get("tier", "secondary")),
            weight=int(data.get("weight", 0)),
            note=data.get("note"),
        )


@dataclass
class XrefRecommendation:
    part: Part
    match_details: list[MatchDetail]
    match_percentage: int
    notes: str = ""
    mandatory_review: list[str] = field(default_factory=list)  # attribute ids with blocking data missing

    @property
    def fail_count(self) -> int:
        return sum(1 for d in self.match_details if d.rule_result == "fail")

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "part": self.part.to_dict(),
            "matchDetails": [d.to_dict() for d in self.match_details],
            "matchPercentage": self.match_percentage,
            "notes": self.notes,
        }
        if self.mandatory_review:
            data["mandatoryReview"] = list(self.mandatory_review)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "XrefRecommendation":
        return cls(
            part=Part.from_dict(data["part"]),
            match_details=[MatchDetail.from_dict(d) for d in data.get("matchDetails", [])],
            match_percentage=int(data.get("matchPercentage", 0)),
            notes=data.get("notes", ""),
            mandatory_review=list(data.get("mandatoryReview", [])),
        )


@dataclass
class CandidateEvaluation:
    """Evaluator output for one candidate, including rejections."""
    candidate: PartAttributes
    details: list[MatchDetail]
    rejected: bool
    match_percentage: int = 0
    notes: str = ""
    rejection_reason: str | None = None
    mandatory_review: list[str] = field(default_factory=list)

    def to_recommendation(self) -> XrefRecommendation | None:
        if self.rejected:
            return None
        return XrefRecommendation(
            part=self.candidate.part,
            match_details=list(self.details),
            match_percentage=self.match_percentage,
            notes=self.notes,
            mandatory_review=list(self.mandatory_review),
        )

    def rejection_dict(self) -> dict[str, Any]:
        return {
            "mpn": self.candidate.mpn,
            "manufacturer": self.candidate.part.manufacturer,
            "reason": self.rejection_reason,
        }


# =============================================================================
# PARTS LIST (batch validation)
# =============================================================================


@dataclass
class PartsListRow:
    row_index: int
    raw_mpn: str
    raw_manufacturer: str = ""
    raw_description: str = ""
    status: RowStatus = "pending"
    resolved_part: Part | None = None
    source_attributes: PartAttributes | None = None
    suggested_replacement: XrefRecommendation | None = None
    all_recommendations: list[XrefRecommendation] = field(default_factory=list)
    error_message: str | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_ROW_STATUSES

    def to_dict(self) -> dict[str, Any]:
        return _compact({
            "rowIndex": self.row_index,
            "rawMpn": self.raw_mpn,
            "rawManufacturer": self.raw_manufacturer,
            "rawDescription": self.raw_description,
            "status": self.status,
            "resolvedPart": self.resolved_part.to_dict() if self.resolved_part else None,
            "sourceAttributes": self.source_attributes.to_dict() if self.source_attributes else None,
            "suggestedReplacement": self.suggested_replacement.to_dict() if self.suggested_replacement else None,
            "allRecommendations": [r.to_dict() for r in self.all_recommendations] or None,
            "errorMessage": self.error_message,
        })

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PartsListRow":
        status = data.get("status", "pending")
        if status not in ROW_STATUSES:
            raise ValueError(f"Unknown row status: {status!r}")
        return cls(
            row_index=int(data["rowIndex"]),
            raw_mpn=data.get("rawMpn", ""),
            raw_manufacturer=data.get("rawManufacturer", ""),
            raw_description=data.get("rawDescription", ""),
            status=status,
            resolved_part=Part.from_dict(data["resolvedPart"]) if data.get("resolvedPart") else None,
            source_attributes=(
                PartAttributes.from_dict(data["sourceAttributes"]) if data.get("sourceAttributes") else None
            ),
            suggested_replacement=(
                XrefRecommendation.from_dict(data["suggestedReplacement"])
                if data.get("suggestedReplacement") else None
            ),
            all_recommendations=[XrefRecommendation.from_dict(r) for r in data.get("allRecommendations", [])],
            error_message=data.get("errorMessage"),
        )
