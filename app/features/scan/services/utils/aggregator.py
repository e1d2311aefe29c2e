from typing import Dict, List, Optional

from app.features.scan.schemas.report import (
    AggregateReport,
    BusinessArea,
    BusinessImpactSummary,
    PageEnhancedSummary,
    PageSummary,
    RemediationPlanSummary,
    empty_severity_histogram,
)
from app.features.scan.schemas.scan import RemediationIssue, RiskLevel, ScanResult
from app.features.scan.services.score_calculator import round_half_up

TOP_PRIORITY_ISSUES = 5
TOP_BUSINESS_AREAS = 3

QUICK_FIX_HOURS = 0.5
MEDIUM_FIX_HOURS = 4
COMPLEX_FIX_HOURS = 16

RISK_ORDER = [RiskLevel.HIGH, RiskLevel.MEDIUM, RiskLevel.LOW]


def aggregate_results(results: List[ScanResult], scan_id: Optional[str] = None) -> AggregateReport:
    """
    Combine per-page scan results into one report.

    Failed pages are counted in total_scans but contribute nothing to the
    score average or the violation/pass totals. Never raises; an empty
    input gives a zero-valued report.

    Args:
        results: One ScanResult per scanned page
        scan_id: Identifier of the run, for correlation with external reporting

    Returns:
        AggregateReport over all pages
    """
    results = list(results or [])
    completed = [r for r in results if r.completed]
    failed = [r for r in results if not r.completed]

    total_violations = sum(r.violation_count for r in completed)
    total_passes = sum(r.pass_count for r in completed)

    overall_score = 0
    if completed:
        overall_score = round_half_up(sum(r.effective_score for r in completed) / len(completed))

    annotated = [r for r in completed if r.enhanced_analysis is not None]

    return AggregateReport(
        scan_id=scan_id,
        total_scans=len(results),
        completed_scans=len(completed),
        failed_scans=len(failed),
        overall_score=overall_score,
        total_violations=total_violations,
        total_passes=total_passes,
        violations_by_severity=count_violations_by_severity(completed),
        has_enhanced_analysis=bool(annotated),
        business_impact=aggregate_business_impact(annotated),
        remediation_plan=aggregate_remediation_plan(annotated),
        page_results=[summarize_page(r) for r in results],
    )


def count_violations_by_severity(completed: List[ScanResult]) -> Dict[str, int]:
    """
    Affected-node histogram per severity across completed pages.

    Violations without a node count count their sample size, or 1 when they
    carry no sample either. Unknown severities are not counted.
    """
    histogram = empty_severity_histogram()

    for scan in completed:
        for violation in scan.violations:
            if violation.impact not in histogram:
                continue
            if violation.affected_node_count is not None:
                histogram[violation.impact] += violation.affected_node_count
            else:
                histogram[violation.impact] += len(violation.nodes) or 1

    return histogram


def aggregate_business_impact(annotated: List[ScanResult]) -> Optional[BusinessImpactSummary]:
    """
    Business impact across pages carrying an enhanced analysis.

    Returns:
        None when no page is annotated
    """
    if not annotated:
        return None

    risk_levels = set()
    pages_at_risk = 0
    total_cost = 0.0

    for scan in annotated:
        impact = scan.enhanced_analysis.business_impact
        if impact is None:
            continue
        if impact.risk_level is not None:
            risk_levels.add(impact.risk_level)
        if impact.risk_level == RiskLevel.HIGH:
            pages_at_risk += 1
        if impact.estimated_remediation_cost is not None:
            total_cost += impact.estimated_remediation_cost.max or 0

    overall_risk = next((level for level in RISK_ORDER if level in risk_levels), RiskLevel.LOW)

    return BusinessImpactSummary(
        overall_risk=overall_risk,
        pages_at_risk=pages_at_risk,
        estimated_remediation_cost=round_half_up(total_cost),
        top_business_areas=get_top_business_areas(annotated),
    )


def get_top_business_areas(annotated: List[ScanResult], limit: int = TOP_BUSINESS_AREAS) -> List[BusinessArea]:
    """Business areas ranked by how many pages mention them; ties keep first-seen order."""
    area_count: Dict[str, int] = {}

    for scan in annotated:
        impact = scan.enhanced_analysis.business_impact
        if impact is None:
            continue
        for area in dict.fromkeys(impact.business_areas):
            area_count[area] = area_count.get(area, 0) + 1

    ranked = sorted(area_count.items(), key=lambda item: item[1], reverse=True)
    return [BusinessArea(area=area, affected_pages=count) for area, count in ranked[:limit]]


def aggregate_remediation_plan(annotated: List[ScanResult]) -> Optional[RemediationPlanSummary]:
    """
    Remediation effort and top priority-1 fixes across annotated pages.

    Returns:
        None when no page is annotated
    """
    if not annotated:
        return None

    plan = RemediationPlanSummary()
    priority1: List[RemediationIssue] = []

    for scan in annotated:
        remediation = scan.enhanced_analysis.remediation_plan
        if remediation is None:
            continue
        effort = remediation.estimated_effort
        if effort is not None:
            plan.total_quick_fixes += effort.quick_fixes
            plan.total_medium_fixes += effort.medium_fixes
            plan.total_complex_fixes += effort.complex_fixes
        priority1.extend(remediation.priority1)

    plan.estimated_total_hours = round_half_up(
        plan.total_quick_fixes * QUICK_FIX_HOURS
        + plan.total_medium_fixes * MEDIUM_FIX_HOURS
        + plan.total_complex_fixes * COMPLEX_FIX_HOURS
    )
    plan.top_priority1_issues = deduplicate_issues(priority1)

    return plan


def deduplicate_issues(issues: List[RemediationIssue], limit: int = TOP_PRIORITY_ISSUES) -> List[RemediationIssue]:
    """Drop repeated (title, description) pairs, keeping the first; cap at limit."""
    unique: List[RemediationIssue] = []
    seen = set()

    for issue in issues:
        if issue.dedup_key in seen:
            continue
        seen.add(issue.dedup_key)
        unique.append(issue)

    return unique[:limit]


def summarize_page(result: ScanResult) -> PageSummary:
    enhanced = None
    analysis = result.enhanced_analysis
    if analysis is not None:
        impact = analysis.business_impact
        remediation = analysis.remediation_plan
        enhanced = PageEnhancedSummary(
            risk_level=impact.risk_level if impact else None,
            user_impact_percentage=impact.user_impact_percentage if impact else None,
            priority1_fixes=len(remediation.priority1) if remediation else 0,
        )

    return PageSummary(
        url=result.url,
        status=result.status,
        score=result.effective_score if result.completed else 0,
        basic_score=result.score if result.completed else 0,
        violations=result.violation_count,
        enhanced_analysis=enhanced,
        error=result.error,
    )
