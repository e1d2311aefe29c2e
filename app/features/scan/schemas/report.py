"""
Report Schemas

The aggregate, organization-level view over all page scans of one run.
Structured data only; rendering belongs to downstream consumers.
"""
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from app.features.scan.schemas.scan import Impact, RemediationIssue, RiskLevel, ScanStatus


def empty_severity_histogram() -> Dict[str, int]:
    return {
        Impact.CRITICAL.value: 0,
        Impact.SERIOUS.value: 0,
        Impact.MODERATE.value: 0,
        Impact.MINOR.value: 0,
    }


class BusinessArea(BaseModel):
    area: str
    affected_pages: int


class BusinessImpactSummary(BaseModel):
    overall_risk: RiskLevel
    pages_at_risk: int
    estimated_remediation_cost: int
    top_business_areas: List[BusinessArea] = Field(default_factory=list)


class RemediationPlanSummary(BaseModel):
    total_quick_fixes: int = 0
    total_medium_fixes: int = 0
    total_complex_fixes: int = 0
    estimated_total_hours: int = 0
    top_priority1_issues: List[RemediationIssue] = Field(default_factory=list)


class PageEnhancedSummary(BaseModel):
    risk_level: Optional[RiskLevel] = None
    user_impact_percentage: Optional[float] = None
    priority1_fixes: int = 0


class PageSummary(BaseModel):
    url: str
    status: ScanStatus
    score: int
    basic_score: int
    violations: int
    enhanced_analysis: Optional[PageEnhancedSummary] = None
    error: Optional[str] = None


class AggregateReport(BaseModel):
    scan_id: Optional[str] = None
    total_scans: int = 0
    completed_scans: int = 0
    failed_scans: int = 0
    overall_score: int = 0
    total_violations: int = 0
    total_passes: int = 0
    violations_by_severity: Dict[str, int] = Field(default_factory=empty_severity_histogram)
    has_enhanced_analysis: bool = False
    business_impact: Optional[BusinessImpactSummary] = None
    remediation_plan: Optional[RemediationPlanSummary] = None
    page_results: List[PageSummary] = Field(default_factory=list)

    class Config:
        json_schema_extra = {
            "example": {
                "scan_id": "3f0c9a52-6c1e-4a8e-9d1b-1d5f0e2c7a11",
                "total_scans": 3,
                "completed_scans": 2,
                "failed_scans": 1,
                "overall_score": 70,
                "total_violations": 9,
                "total_passes": 58,
                "violations_by_severity": {"critical": 2, "serious": 5, "moderate": 4, "minor": 1},
                "has_enhanced_analysis": False,
                "business_impact": None,
                "remediation_plan": None,
                "page_results": [],
            }
        }
