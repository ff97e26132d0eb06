"""Fold answered application context into a family's base rule table.

resolve_effective_table() is pure: the same table, questions and answers
always produce the same EffectiveRuleTable, and the base table is untouched.
"""

import logging

from .models import (
    AttributeEffect,
    ContextQuestion,
    EffectiveRule,
    EffectiveRuleTable,
    FamilyContext,
    LogicTable,
    Tier,
)

logger = logging.getLogger(__name__)

# effect -> (target tier, minimum weight)
_ESCALATIONS: dict[str, tuple[Tier, int]] = {
    "escalate_to_primary": (Tier.PRIMARY, 9),
    "escalate_to_mandatory": (Tier.MANDATORY, 10),
}


def is_question_visible(question: ContextQuestion, answers: dict[str, str]) -> bool:
    """A question is visible when it has no condition or its parent answer is allowed."""
    if question.condition is None:
        return True
    parent_answer = answers.get(question.condition.depends_on)
    return parent_answer is not None and parent_answer in question.condition.allowed_values


def visible_questions(context: FamilyContext, answers: dict[str, str] | None = None) -> list[ContextQuestion]:
    """Visible questions in ascending priority (ties keep declaration order)."""
    answers = answers or {}
    shown = [q for q in context.questions if is_question_visible(q, answers)]
    return sorted(shown, key=lambda q: q.priority)


def _apply_effect(target: EffectiveRule, effect: AttributeEffect) -> None:
    if effect.effect in _ESCALATIONS:
        tier, min_weight = _ESCALATIONS[effect.effect]
        if target.tier == Tier.NOT_APPLICABLE:
            # Escalation overrides an exclusion made earlier in the same pass
            target.tier = max(target.rule.base_tier, tier)
        else:
            target.tier = max(target.tier, tier)
        target.weight = max(target.weight, min_weight)
        target.notes.append(effect.note)
    elif effect.effect == "not_applicable":
        target.tier = Tier.NOT_APPLICABLE
        target.blocking = False
        target.notes.append(effect.note)
    elif effect.effect == "add_review_flag":
        target.review_flags.append(effect.note)
    else:
        logger.warning(f"Unknown context effect {effect.effect!r} on {effect.attribute_id}")
        return

    if effect.block_on_missing and effect.effect != "not_applicable":
        target.blocking = True


def resolve_effective_table(
    table: LogicTable,
    context: FamilyContext | None = None,
    answers: dict[str, str] | None = None,
) -> EffectiveRuleTable:
    """Build the effective rule table for one matching run.

    Args:
        table: Base rule table for the family
        context: The family's question tree (None when the family has none)
        answers: question_id -> answered option value

    Returns:
        EffectiveRuleTable keyed by attribute id, in base table order.
    """
    rules = {
        r.attribute_id: EffectiveRule(rule=r, tier=r.base_tier, weight=r.base_weight, blocking=r.block_on_missing)
        for r in table.rules
    }

    if context is not None and answers:
        answers = {k: str(v) for k, v in answers.items() if v is not None and str(v) != ""}
        for question in visible_questions(context, answers):
            answer = answers.get(question.question_id)
            if answer is None:
                continue  # Unanswered: no default is assumed
            option = question.get_option(answer)
            if option is None:
                # Free-text answers without a matching option carry no effects
                logger.debug(f"No option {answer!r} for question {question.question_id}")
                continue
            for effect in option.attribute_effects:
                target = rules.get(effect.attribute_id)
                if target is None:
                    logger.debug(
                        f"Ignoring {effect.effect} on {effect.attribute_id}: "
                        f"not in family {table.family_id} rule table"
                    )
                    continue
                _apply_effect(target, effect)

    return EffectiveRuleTable(family_id=table.family_id, rules=rules)
