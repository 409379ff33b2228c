"""Profile summaries for enrollment assessments.

The default summarizer is a fixed rule table standing in for a model-backed
analysis. Anything implementing :class:`ProfileSummarizer` can replace it
without touching the pipeline.
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Protocol

from .schemas import FocusArea, ProfileSummary

INTERESTS_PLACEHOLDER = "Not specified"
ABOVE_AVERAGE = "above average"
ADVANCED_COGNITION_STRENGTH = "Advanced problem-solving and cognitive abilities noted by parent."


class ProfileSummarizer(Protocol):
    def summarize(self, answers: Mapping[str, Any]) -> ProfileSummary: ...


@dataclass(frozen=True)
class FocusRule:
    triggers: frozenset[str]
    category: str
    reason: str

    def matches(self, concerns: set[str]) -> bool:
        return not self.triggers.isdisjoint(concerns)


def _rule(triggers: Sequence[str], category: str, reason: str) -> FocusRule:
    return FocusRule(frozenset(_normalize(t) for t in triggers), category, reason)


def _normalize(value: str) -> str:
    return value.strip().casefold()


FOCUS_RULES: tuple[FocusRule, ...] = (
    _rule(
        ("Speech Delay", "Difficulty Understanding"),
        "Language Skills",
        "Parent noted concerns about speech and comprehension.",
    ),
    _rule(
        ("Difficulty Sharing", "Shyness"),
        "Social & Emotional Skills",
        "Parent noted challenges with peer interaction and sharing.",
    ),
    _rule(
        ("Fine Motor Issues", "Clumsiness"),
        "Motor Skills",
        "Parent noted difficulties with fine motor tasks.",
    ),
)


def _concerns(answers: Mapping[str, Any]) -> set[str]:
    raw = answers.get("concerns") or []
    if isinstance(raw, str) or not isinstance(raw, Sequence):
        return set()
    return {_normalize(item) for item in raw if isinstance(item, str)}


class RuleBasedProfileSummarizer:
    def __init__(self, rules: Sequence[FocusRule] = FOCUS_RULES):
        self.rules = tuple(rules)

    def summarize(self, answers: Mapping[str, Any] | None) -> ProfileSummary:
        if not isinstance(answers, Mapping):
            answers = {}
        concerns = _concerns(answers)

        focus_areas = [
            FocusArea(category=rule.category, reason=rule.reason) for rule in self.rules if rule.matches(concerns)
        ]

        strengths = []
        cognitive = answers.get("cognitive_skills")
        if isinstance(cognitive, str) and _normalize(cognitive) == ABOVE_AVERAGE:
            strengths.append(ADVANCED_COGNITION_STRENGTH)

        interests = answers.get("interests")
        if not isinstance(interests, str) or not interests:
            interests = INTERESTS_PLACEHOLDER

        return ProfileSummary(focus_areas=focus_areas, strengths=strengths, interests=interests)
