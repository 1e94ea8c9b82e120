"""
Adaptation advisor: turns a compliance report into a verdict and a
bounded volume correction for the next week.

The decision is a set of ordered rule tables:

- VERDICT_RULES: first matching rule sets verdict and volume change
- MODIFIER_RULES: may soften the verdict (cross-training override)
- TIP_RULES: every matching rule adds one optimization item

Each firing rule contributes one SuggestionItem, except that a modifier's
item replaces the one of the verdict it revises. advise() depends only
on its arguments, so identical inputs always give identical output.
"""

from dataclasses import dataclass, replace
from typing import Callable, List, Optional, Tuple

from ..config import Settings, get_settings
from ..models.adherence import (
    MAX_VOLUME_CHANGE,
    MIN_VOLUME_CHANGE,
    AdaptationSuggestion,
    ComplianceReport,
    Priority,
    SuggestionItem,
    Verdict,
)
from ..models.plans import PlannedWeek


# Default volume change of each verdict level, in percent
RECOVERY_VOLUME_CHANGE = -35
REDUCE_VOLUME_CHANGE = -20
ADJUST_VOLUME_CHANGE = -10
UNDER_CHALLENGED_VOLUME_CHANGE = 5

STEPPED_DOWN_VOLUME_CHANGE = {
    Verdict.REDUCE: REDUCE_VOLUME_CHANGE,
    Verdict.ADJUST: ADJUST_VOLUME_CHANGE,
}


@dataclass(frozen=True)
class AdviceInput:
    """Everything a rule may look at."""
    report: ComplianceReport
    next_week: Optional[PlannedWeek]
    override_minutes: float

    @property
    def compliance(self) -> int:
        return self.report.compliance_percent

    @property
    def rpe(self) -> Optional[float]:
        return self.report.avg_rpe

    @property
    def cross_training(self) -> float:
        return self.report.cross_training_equivalent_minutes


@dataclass(frozen=True)
class Decision:
    """Verdict and volume change reached so far."""
    verdict: Verdict
    volume_change_percent: int


@dataclass(frozen=True)
class VerdictRule:
    """predicate -> (verdict, volume change, item)."""
    name: str
    applies: Callable[[AdviceInput], bool]
    decide: Callable[[AdviceInput], Decision]
    item: Callable[[AdviceInput, Decision], SuggestionItem]


@dataclass(frozen=True)
class ModifierRule:
    """predicate on (input, decision) -> revised decision; item sees the revision."""
    name: str
    applies: Callable[[AdviceInput, Decision], bool]
    revise: Callable[[AdviceInput, Decision], Decision]
    item: Callable[[AdviceInput, Decision], SuggestionItem]


@dataclass(frozen=True)
class TipRule:
    """predicate on (input, decision) -> item."""
    name: str
    applies: Callable[[AdviceInput, Decision], bool]
    item: Callable[[AdviceInput, Decision], SuggestionItem]


def _rpe_above(threshold: float) -> Callable[[AdviceInput], bool]:
    return lambda i: i.rpe is not None and i.rpe > threshold


# ============================================================================
# Verdict rules (first match wins)
# ============================================================================

# A week without planned runs has compliance 0 by convention; that is
# not a missed week
REST_WEEK_RULE = VerdictRule(
    name="rest_week",
    applies=lambda i: i.report.sessions_planned == 0,
    decide=lambda i: Decision(Verdict.MAINTAIN, 0),
    item=lambda i, d: SuggestionItem(
        category="consistency",
        priority=Priority.LOW,
        title="No running planned",
        detail="This week had no running session to measure. Next week stays as planned.",
    ),
)

RECOVERY_RULE = VerdictRule(
    name="recovery",
    applies=lambda i: i.compliance < 50 or (i.rpe is not None and i.rpe >= 9),
    decide=lambda i: Decision(Verdict.RECOVERY, RECOVERY_VOLUME_CHANGE),
    item=lambda i, d: SuggestionItem(
        category="recovery",
        priority=Priority.HIGH,
        title="Recovery week",
        detail=(
            f"Compliance {i.compliance}%"
            + (f", average RPE {i.rpe:.1f}" if i.rpe is not None else "")
            + ". Cut volume and keep every session easy until energy comes back."
        ),
    ),
)

REDUCE_RULE = VerdictRule(
    name="reduce",
    applies=lambda i: 50 <= i.compliance < 70,
    decide=lambda i: Decision(Verdict.REDUCE, REDUCE_VOLUME_CHANGE),
    item=lambda i, d: SuggestionItem(
        category="volume",
        priority=Priority.HIGH,
        title="Reduce weekly volume",
        detail=(
            f"Only {i.report.sessions_done} of {i.report.sessions_planned} sessions done. "
            "A lighter week is easier to complete than a missed one."
        ),
    ),
)

ADJUST_RULE = VerdictRule(
    name="adjust",
    applies=lambda i: 70 <= i.compliance < 90,
    decide=lambda i: Decision(
        Verdict.ADJUST, ADJUST_VOLUME_CHANGE if _rpe_above(7)(i) else 0
    ),
    item=lambda i, d: SuggestionItem(
        category="volume",
        priority=Priority.MEDIUM,
        title="Fine-tune the week",
        detail=(
            "Most sessions were done but effort was high; trim session length slightly."
            if d.volume_change_percent < 0
            else "Most sessions were done; keep the volume and protect the key sessions."
        ),
    ),
)

STRAINED_RULE = VerdictRule(
    name="strained",
    applies=lambda i: i.compliance >= 90 and _rpe_above(7)(i),
    decide=lambda i: Decision(Verdict.ADJUST, ADJUST_VOLUME_CHANGE),
    item=lambda i, d: SuggestionItem(
        category="intensity",
        priority=Priority.MEDIUM,
        title="Hard but complete",
        detail=f"Every session was done at an average RPE of {i.rpe:.1f}. Ease the load a little.",
    ),
)

UNDER_CHALLENGED_RULE = VerdictRule(
    name="under_challenged",
    applies=lambda i: i.compliance >= 90 and i.rpe is not None and i.rpe < 4,
    decide=lambda i: Decision(Verdict.MAINTAIN, UNDER_CHALLENGED_VOLUME_CHANGE),
    item=lambda i, d: SuggestionItem(
        category="volume",
        priority=Priority.LOW,
        title="Room to progress",
        detail=f"Sessions felt easy (RPE {i.rpe:.1f}). Volume can grow slightly; paces stay the same.",
    ),
)

MAINTAIN_RULE = VerdictRule(
    name="maintain",
    applies=lambda i: i.compliance >= 90,
    decide=lambda i: Decision(Verdict.MAINTAIN, 0),
    item=lambda i, d: SuggestionItem(
        category="consistency",
        priority=Priority.LOW,
        title="Right on target",
        detail="The plan is working. Keep the same structure next week.",
    ),
)

VERDICT_RULES: Tuple[VerdictRule, ...] = (
    REST_WEEK_RULE,
    RECOVERY_RULE,
    REDUCE_RULE,
    ADJUST_RULE,
    STRAINED_RULE,
    UNDER_CHALLENGED_RULE,
    MAINTAIN_RULE,
)


# ============================================================================
# Modifier rules
# ============================================================================

def _step_down(i: AdviceInput, d: Decision) -> Decision:
    verdict = d.verdict.less_severe()
    return Decision(verdict, STEPPED_DOWN_VOLUME_CHANGE.get(verdict, d.volume_change_percent))


CROSS_TRAINING_OVERRIDE_RULE = ModifierRule(
    name="cross_training_override",
    applies=lambda i, d: (
        d.verdict in (Verdict.REDUCE, Verdict.RECOVERY)
        and i.cross_training >= i.override_minutes
    ),
    revise=_step_down,
    item=lambda i, d: SuggestionItem(
        category="cross_training",
        priority=Priority.HIGH if d.verdict == Verdict.REDUCE else Priority.MEDIUM,
        title="Aerobic load kept through cross-training",
        detail=(
            f"{i.cross_training:.0f} min running-equivalent of other endurance work. "
            f"Next week is a {d.verdict.value.lower()} week "
            f"(volume {d.volume_change_percent:+d}%) rather than a harsher correction."
        ),
    ),
)

MODIFIER_RULES: Tuple[ModifierRule, ...] = (CROSS_TRAINING_OVERRIDE_RULE,)


# ============================================================================
# Tip rules (all matches fire)
# ============================================================================

MISSING_FEEDBACK_RULE = TipRule(
    name="missing_feedback",
    applies=lambda i, d: i.rpe is None and i.report.sessions_done > 0,
    item=lambda i, d: SuggestionItem(
        category="feedback",
        priority=Priority.LOW,
        title="Log how sessions felt",
        detail="Rating each session (RPE 1-10) lets next week's adjustment take fatigue into account.",
    ),
)

SUGGEST_CROSS_TRAINING_RULE = TipRule(
    name="suggest_cross_training",
    applies=lambda i, d: i.report.sessions_missed > 0 and i.cross_training == 0,
    item=lambda i, d: SuggestionItem(
        category="cross_training",
        priority=Priority.LOW,
        title="Replace missed runs when you can",
        detail="When a run is impossible, 45-60 min of cycling or swimming keeps part of the aerobic work.",
    ),
)

RUN_OVER_CROSS_TRAINING_RULE = TipRule(
    name="run_over_cross_training",
    applies=lambda i, d: i.report.sessions_missed > 0 and i.cross_training >= i.override_minutes,
    item=lambda i, d: SuggestionItem(
        category="specificity",
        priority=Priority.MEDIUM,
        title="Swap one cross-training slot for an easy run",
        detail="Cross-training keeps the engine running, but running-specific load still matters for the goal.",
    ),
)

EASE_HARD_SESSION_RULE = TipRule(
    name="ease_hard_session",
    applies=lambda i, d: (
        d.verdict in (Verdict.REDUCE, Verdict.RECOVERY)
        and i.next_week is not None
        and any(s.is_hard for s in i.next_week.sessions)
    ),
    item=lambda i, d: SuggestionItem(
        category="intensity",
        priority=Priority.MEDIUM,
        title="Keep the hard session under control",
        detail="Next week's hard session should stay at the prescribed pace, never faster; stop early if legs are heavy.",
    ),
)

TIP_RULES: Tuple[TipRule, ...] = (
    EASE_HARD_SESSION_RULE,
    RUN_OVER_CROSS_TRAINING_RULE,
    SUGGEST_CROSS_TRAINING_RULE,
    MISSING_FEEDBACK_RULE,
)


# ============================================================================
# Advisor
# ============================================================================

OVERALL_MESSAGES = {
    Verdict.MAINTAIN: "Great week. The plan stays as it is",
    Verdict.ADJUST: "Good week overall. Small adjustments for next week",
    Verdict.REDUCE: "Tough week. Next week is lighter so you can get back on track",
    Verdict.RECOVERY: "Time to recover. Next week is a recovery week",
}


def clamp_volume_change(value: int) -> int:
    return max(MIN_VOLUME_CHANGE, min(MAX_VOLUME_CHANGE, value))


def overall_message(verdict: Verdict, volume_change_percent: int) -> str:
    base = OVERALL_MESSAGES[verdict]
    if volume_change_percent == 0:
        return f"{base} (volume unchanged)."
    return f"{base} (volume {volume_change_percent:+d}%)."


class AdaptationAdvisor:
    """
    Applies the rule tables to a compliance report.

    Rule tables can be replaced per instance to test or extend them.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        verdict_rules: Tuple[VerdictRule, ...] = VERDICT_RULES,
        modifier_rules: Tuple[ModifierRule, ...] = MODIFIER_RULES,
        tip_rules: Tuple[TipRule, ...] = TIP_RULES,
    ) -> None:
        self.settings = settings or get_settings()
        self.verdict_rules = verdict_rules
        self.modifier_rules = modifier_rules
        self.tip_rules = tip_rules

    def advise(
        self,
        report: ComplianceReport,
        next_week: Optional[PlannedWeek] = None,
    ) -> AdaptationSuggestion:
        """
        Produce the adaptation suggestion for the week after the report.

        Args:
            report: Compliance report of the completed week
            next_week: The week the suggestion will be applied to, if known

        Returns:
            AdaptationSuggestion with items ranked HIGH, MEDIUM, LOW
        """
        advice_input = AdviceInput(
            report=report,
            next_week=next_week,
            override_minutes=self.settings.cross_training_override_minutes,
        )
        # The last rule (compliance >= 90) together with recovery (< 50),
        # reduce and adjust covers every compliance value
        decision = Decision(Verdict.MAINTAIN, 0)
        verdict_item: Optional[SuggestionItem] = None
        for rule in self.verdict_rules:
            if rule.applies(advice_input):
                decision = rule.decide(advice_input)
                verdict_item = rule.item(advice_input, decision)
                break

        # A modifier's item describes the revised decision and replaces
        # the verdict item it overrides
        items: List[SuggestionItem] = []
        for modifier in self.modifier_rules:
            if modifier.applies(advice_input, decision):
                decision = modifier.revise(advice_input, decision)
                items.append(modifier.item(advice_input, decision))
                verdict_item = None

        if verdict_item is not None:
            items.insert(0, verdict_item)

        for tip in self.tip_rules:
            if tip.applies(advice_input, decision):
                items.append(tip.item(advice_input, decision))

        decision = replace(decision, volume_change_percent=clamp_volume_change(decision.volume_change_percent))
        ranked = sorted(items, key=lambda item: item.priority.rank)

        return AdaptationSuggestion(
            verdict=decision.verdict,
            volume_change_percent=decision.volume_change_percent,
            items=tuple(ranked),
            overall_message=overall_message(decision.verdict, decision.volume_change_percent),
        )


def advise(
    report: ComplianceReport,
    next_week: Optional[PlannedWeek] = None,
    settings: Optional[Settings] = None,
) -> AdaptationSuggestion:
    """Advise with the default rule tables."""
    return AdaptationAdvisor(settings).advise(report, next_week)
