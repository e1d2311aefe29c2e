import pytest

from app.features.scan.schemas.scan import Violation
from app.features.scan.services.score_calculator import (
    calculate_score,
    get_axe_tags,
    impact_weight,
    round_half_up,
)


def violation(impact="serious", nodes=1):
    return Violation(rule_id=f"rule-{impact}", impact=impact, affected_node_count=nodes)


class TestCalculateScore:

    def test_nothing_evaluated_scores_100(self):
        assert calculate_score([], 0) == 100

    def test_single_critical_without_passes_scores_0(self):
        assert calculate_score([violation("critical", 1)], 0) == 0

    def test_all_passing(self):
        assert calculate_score([], 25) == 100

    def test_weighted_example(self):
        # total 10 tests -> max 40; weighted = 3*2 + 1*1 = 7 -> 82.5 -> 83
        violations = [violation("serious", 2), violation("minor", 1)]
        assert calculate_score(violations, 8) == 83

    def test_clamped_at_zero(self):
        assert calculate_score([violation("critical", 50)], 3) == 0

    def test_unknown_impact_weighs_one(self):
        assert impact_weight("catastrophic") == 1
        assert impact_weight(None) == 1
        assert calculate_score([violation("catastrophic", 1)], 0) == 75

    def test_missing_node_count_uses_sample_size(self):
        v = Violation(rule_id="image-alt", impact="critical", nodes=[{"html": "<img>"}, {"html": "<img>"}])
        # total 2 tests -> max 8; weighted = 4*2 = 8
        assert calculate_score([v], 1) == 0

    @pytest.mark.parametrize("impact", ["minor", "moderate", "serious", "critical"])
    def test_monotonic_in_node_count(self, impact):
        scores = [calculate_score([violation(impact, n), violation("minor", 1)], 6) for n in range(0, 15)]
        assert all(later <= earlier for earlier, later in zip(scores, scores[1:]))


class TestHelpers:

    def test_round_half_up(self):
        assert round_half_up(0.5) == 1
        assert round_half_up(2.5) == 3
        assert round_half_up(2.49) == 2
        assert round_half_up(70.0) == 70

    def test_axe_tags_per_level(self):
        assert get_axe_tags("A") == ["wcag2a", "wcag21a"]
        assert get_axe_tags("AA") == ["wcag2a", "wcag2aa", "wcag21a", "wcag21aa"]
        assert get_axe_tags("AAA") == ["wcag2a", "wcag2aa", "wcag2aaa", "wcag21a", "wcag21aa"]

    def test_axe_tags_optional_rule_sets(self):
        tags = get_axe_tags("aa", include_best_practices=True, include_experimental=True)
        assert tags[-2:] == ["best-practice", "experimental"]
        assert get_axe_tags("unknown") == []
