"""Candidate evaluation against a source part.

This module:
1. Compares each attribute of an effective rule table per its logic type
2. Rejects candidates that fail any mandatory-tier attribute
3. Scores everything else as a weighted percentage
4. Reports source attributes the rule table needs but the source lacks
"""

import logging
import math
from dataclasses import dataclass
from typing import Any, Callable

from .config import FIT_REVIEW_BAND, FIT_TOLERANCE, THRESHOLD_REVIEW_BAND
from .models import (
    AttributeRule,
    CandidateEvaluation,
    EffectiveRuleTable,
    LogicTable,
    MatchDetail,
    MatchStatus,
    Parameter,
    PartAttributes,
    RuleResult,
    Tier,
    XrefRecommendation,
)
from .ranking import rank_recommendations
from .values import normalize, parse_boolean, parse_msl, parse_percentage, parse_quantity, parse_range, values_equal

logger = logging.getLogger(__name__)

_SCORES: dict[str, float] = {"pass": 1.0, "upgrade": 1.0, "review": 0.5, "fail": 0.0}
_NOTE_PRIORITY: dict[str, int] = {"fail": 0, "review": 1, "info": 2}
_EPSILON = 1e-9


@dataclass
class Verdict:
    result: RuleResult
    status: MatchStatus
    note: str | None = None


# =============================================================================
# VALUE EXTRACTION
# =============================================================================


def _numeric_pair(rule: AttributeRule, src: Parameter, cand: Parameter) -> tuple[float | None, float | None]:
    """Parse both values with the parser the attribute calls for."""
    if rule.attribute_id == "msl":
        return parse_msl(src.value), parse_msl(cand.value)
    if "%" in src.value and "%" in cand.value:
        return parse_percentage(src.value), parse_percentage(cand.value)
    s = src.numeric_value if src.numeric_value is not None else parse_quantity(src.value)
    c = cand.numeric_value if cand.numeric_value is not None else parse_quantity(cand.value)
    return s, c


def _hierarchy_position(value: str, hierarchy: tuple[str, ...]) -> int:
    """Index in a best -> worst hierarchy; entries like 'C0G/NP0' are equivalents."""
    norm = normalize(value)
    for i, entry in enumerate(hierarchy):
        if any(alias.strip().upper() in norm for alias in entry.split("/")):
            return i
    return -1


# =============================================================================
# RULE EVALUATORS
# =============================================================================


def evaluate_identity(rule: AttributeRule, src: Parameter, cand: Parameter) -> Verdict:
    if normalize(src.value) == normalize(cand.value):
        return Verdict("pass", "exact")
    if src.numeric_value is not None and cand.numeric_value is not None:
        s, c = src.numeric_value, cand.numeric_value
    else:
        s, c = parse_quantity(src.value, strict=True), parse_quantity(cand.value, strict=True)
    if s is not None and c is not None and values_equal(s, c):
        return Verdict("pass", "exact")
    return Verdict("fail", "different", f"{rule.attribute_name} differs: {cand.value} vs {src.value}")


def evaluate_identity_upgrade(rule: AttributeRule, src: Parameter, cand: Parameter) -> Verdict:
    src_idx = _hierarchy_position(src.value, rule.upgrade_hierarchy)
    cand_idx = _hierarchy_position(cand.value, rule.upgrade_hierarchy)

    if src_idx == -1 and cand_idx == -1:
        return evaluate_identity(rule, src, cand)
    if src_idx == -1 or cand_idx == -1:
        return Verdict("fail", "different", f"Cannot rank {rule.attribute_name}: {cand.value} vs {src.value}")
    if cand_idx == src_idx:
        return Verdict("pass", "exact")
    if cand_idx < src_idx:
        return Verdict("upgrade", "better", f"{rule.attribute_name} upgrade: {cand.value} over {src.value}")
    return Verdict("fail", "worse", f"{rule.attribute_name} downgrade: {cand.value} below {src.value}")


def evaluate_identity_flag(rule: AttributeRule, src: Parameter, cand: Parameter) -> Verdict:
    required = parse_boolean(src.value)
    present = parse_boolean(cand.value)
    if required and not present:
        return Verdict("fail", "worse", f"Original requires {rule.attribute_name}, replacement does not have it")
    if present and not required:
        return Verdict("pass", "better", f"Replacement has {rule.attribute_name} (not required by original)")
    return Verdict("pass", "exact")


def _evaluate_range(rule: AttributeRule, src: Parameter, cand: Parameter) -> Verdict:
    src_range = parse_range(src.value)
    cand_range = parse_range(cand.value)
    if src_range is None or cand_range is None:
        return Verdict("review", "compatible", f"Could not parse {rule.attribute_name} range for comparison")
    if values_equal(src_range[0], cand_range[0]) and values_equal(src_range[1], cand_range[1]):
        return Verdict("pass", "exact")
    if cand_range[0] <= src_range[0] and cand_range[1] >= src_range[1]:
        return Verdict("pass", "better")
    return Verdict("fail", "worse", f"{rule.attribute_name} {cand.value} does not cover {src.value}")


def evaluate_threshold(rule: AttributeRule, src: Parameter, cand: Parameter) -> Verdict:
    if rule.direction == "range_superset":
        return _evaluate_range(rule, src, cand)

    s, c = _numeric_pair(rule, src, cand)
    if s is None or c is None:
        if normalize(src.value) == normalize(cand.value):
            return Verdict("pass", "exact")
        return Verdict("review", "compatible", f"Could not parse {rule.attribute_name} for threshold comparison")
    if values_equal(s, c):
        return Verdict("pass", "exact")

    direction = rule.direction or "gte"
    if (c > s) if direction == "gte" else (c < s):
        return Verdict("pass", "better")

    band = rule.review_band if rule.review_band is not None else THRESHOLD_REVIEW_BAND
    shortfall = abs(c - s) / abs(s) if s else math.inf
    if shortfall <= band + _EPSILON:
        return Verdict("review", "worse", f"{rule.attribute_name} {cand.value} is marginally short of {src.value}")
    return Verdict("fail", "worse", f"{rule.attribute_name} {cand.value} does not meet original {src.value}")


def evaluate_fit(rule: AttributeRule, src: Parameter, cand: Parameter) -> Verdict:
    s, c = _numeric_pair(rule, src, cand)
    if s is None or c is None:
        if normalize(src.value) == normalize(cand.value):
            return Verdict("pass", "exact")
        return Verdict("review", "compatible", f"Could not parse {rule.attribute_name} for fit comparison")
    if values_equal(s, c):
        return Verdict("pass", "exact")
    if not s:
        return Verdict("fail", "different", f"{rule.attribute_name} {cand.value} vs {src.value}")

    deviation = abs(c - s) / abs(s)
    tolerance = rule.tolerance if rule.tolerance is not None else FIT_TOLERANCE
    outer = rule.review_band if rule.review_band is not None else FIT_REVIEW_BAND
    if deviation <= tolerance + _EPSILON:
        return Verdict("pass", "compatible")
    if deviation <= outer + _EPSILON:
        return Verdict(
            "review", "different",
            f"{rule.attribute_name} {cand.value} is {deviation:.0%} from {src.value} (outside ±{tolerance:.0%})",
        )
    return Verdict("fail", "different", f"{rule.attribute_name} {cand.value} is {deviation:.0%} from {src.value}")


EVALUATORS: dict[str, Callable[[AttributeRule, Parameter, Parameter], Verdict]] = {
    "identity": evaluate_identity,
    "identity_upgrade": evaluate_identity_upgrade,
    "identity_flag": evaluate_identity_flag,
    "threshold": evaluate_threshold,
    "fit": evaluate_fit,
}


# =============================================================================
# AGGREGATION
# =============================================================================


def match_percentage(details: list[MatchDetail]) -> int:
    """Weighted score over pass/upgrade/review/fail details; info is excluded."""
    total = 0.0
    earned = 0.0
    for detail in details:
        score = _SCORES.get(detail.rule_result)
        if score is None:
            continue
        total += detail.weight
        earned += detail.weight * score
    if total <= 0:
        return 0
    return int(math.floor(100 * earned / total + 0.5))


def summarize_notes(details: list[MatchDetail]) -> str:
    """Note of the worst detail: fail before review before info, then heavier weight, then table order."""
    ranked = [
        (_NOTE_PRIORITY[d.rule_result], -d.weight, i, d)
        for i, d in enumerate(details)
        if d.rule_result in _NOTE_PRIORITY
    ]
    if not ranked:
        return ""
    worst = min(ranked, key=lambda item: item[:3])[3]
    return f"{worst.parameter_name}: {worst.note or worst.rule_result}"


def evaluate_candidate(
    effective: EffectiveRuleTable,
    source: PartAttributes,
    candidate: PartAttributes,
) -> CandidateEvaluation:
    """Compare one candidate to the source under an effective rule table.

    Never raises for missing or mismatched data; a mandatory-tier fail comes
    back as a rejected evaluation with the reason attached.
    """
    details: list[MatchDetail] = []
    mandatory_fails: list[str] = []
    mandatory_review: list[str] = []

    for eff in effective:
        if eff.tier == Tier.NOT_APPLICABLE:
            continue
        rule = eff.rule
        src = source.get(rule.attribute_id)
        cand = candidate.get(rule.attribute_id)

        if src is None:
            verdict = Verdict("info", "compatible", "No source value to compare")
        elif cand is None:
            if eff.blocking and eff.tier == Tier.MANDATORY:
                verdict = Verdict("review", "different", f"Mandatory review: replacement has no {rule.attribute_name} data")
                mandatory_review.append(rule.attribute_id)
            elif eff.blocking:
                verdict = Verdict("review", "different", f"Replacement has no {rule.attribute_name} data")
            else:
                verdict = Verdict("info", "different", "Missing attribute data")
        else:
            verdict = EVALUATORS[rule.logic_type](rule, src, cand)

        note = verdict.note
        if verdict.result == "review" and eff.review_flags:
            note = "; ".join([n for n in (note, *eff.review_flags) if n])

        details.append(MatchDetail(
            parameter_id=rule.attribute_id,
            parameter_name=rule.attribute_name,
            source_value=src.value if src else "N/A",
            replacement_value=cand.value if cand else "N/A",
            match_status=verdict.status,
            rule_result=verdict.result,
            tier=eff.tier,
            weight=eff.weight,
            note=note,
        ))
        if verdict.result == "fail" and eff.tier == Tier.MANDATORY:
            mandatory_fails.append(rule.attribute_name)

    if mandatory_fails:
        return CandidateEvaluation(
            candidate=candidate,
            details=details,
            rejected=True,
            rejection_reason=f"Failed mandatory: {', '.join(mandatory_fails)}",
        )

    return CandidateEvaluation(
        candidate=candidate,
        details=details,
        rejected=False,
        match_percentage=match_percentage(details),
        notes=summarize_notes(details),
        mandatory_review=mandatory_review,
    )


def find_replacements(
    effective: EffectiveRuleTable,
    source: PartAttributes,
    candidates: list[PartAttributes],
) -> tuple[list[XrefRecommendation], list[CandidateEvaluation]]:
    """Evaluate every candidate except the source itself.

    Returns:
        Tuple of (ranked recommendations, rejected evaluations)
    """
    recommendations: list[XrefRecommendation] = []
    rejected: list[CandidateEvaluation] = []
    source_mpn = normalize(source.mpn)

    for candidate in candidates:
        if normalize(candidate.mpn) == source_mpn:
            continue
        evaluation = evaluate_candidate(effective, source, candidate)
        if evaluation.rejected:
            logger.debug(f"Rejected {candidate.mpn} for {source.mpn}: {evaluation.rejection_reason}")
            rejected.append(evaluation)
            continue
        recommendations.append(evaluation.to_recommendation())

    return rank_recommendations(recommendations), rejected


def detect_missing_attributes(source: PartAttributes, table: LogicTable) -> list[dict[str, Any]]:
    """Rules whose attribute the source part lacks, most important first."""
    present = {p.parameter_id for p in source.parameters}
    missing = [r for r in table.rules if r.attribute_id not in present]
    missing.sort(key=lambda r: r.base_weight, reverse=True)
    return [
        {
            "attributeId": r.attribute_id,
            "attributeName": r.attribute_name,
            "logicType": r.logic_type,
            "weight": r.base_weight,
        }
        for r in missing
    ]
