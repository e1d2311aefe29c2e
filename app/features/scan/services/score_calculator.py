import math
from typing import Iterable, List

from app.features.scan.schemas.scan import Impact, Violation

IMPACT_WEIGHTS = {
    Impact.CRITICAL.value: 4,
    Impact.SERIOUS.value: 3,
    Impact.MODERATE.value: 2,
    Impact.MINOR.value: 1,
}
DEFAULT_IMPACT_WEIGHT = 1
MAX_IMPACT_WEIGHT = 4

WCAG_LEVEL_TAGS = {
    "A": ["wcag2a", "wcag21a"],
    "AA": ["wcag2a", "wcag2aa", "wcag21a", "wcag21aa"],
    "AAA": ["wcag2a", "wcag2aa", "wcag2aaa", "wcag21a", "wcag21aa"],
}


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positives, as score thresholds expect."""
    return int(math.floor(value + 0.5))


def impact_weight(impact) -> int:
    if isinstance(impact, Impact):
        impact = impact.value
    return IMPACT_WEIGHTS.get(impact, DEFAULT_IMPACT_WEIGHT)


def calculate_score(violations: Iterable[Violation], pass_count: int) -> int:
    """
    Accessibility score (0-100) of one page.

    Every violation weighs impact x affected nodes against a ceiling where
    each evaluated rule is a critical failure. With nothing evaluated the
    page scores 100. This is a relative health indicator, not a WCAG
    conformance measure.

    Args:
        violations: Violations reported for the page
        pass_count: Number of rules that passed

    Returns:
        Integer score clamped to [0, 100]
    """
    violations = list(violations)
    total_tests = pass_count + len(violations)
    if total_tests <= 0:
        return 100

    weighted_violations = sum(impact_weight(v.impact) * v.node_count for v in violations)
    max_possible_weight = total_tests * MAX_IMPACT_WEIGHT

    score = round_half_up(((max_possible_weight - weighted_violations) / max_possible_weight) * 100)
    return max(0, min(100, score))


def get_axe_tags(wcag_level: str, include_best_practices: bool = False, include_experimental: bool = False) -> List[str]:
    """Rule tags the engine should run for a WCAG level and rule-set flags."""
    tags = list(WCAG_LEVEL_TAGS.get((wcag_level or "").upper(), []))
    if include_best_practices:
        tags.append("best-practice")
    if include_experimental:
        tags.append("experimental")
    return tags
