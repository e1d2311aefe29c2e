"""
Scan Schemas

Per-page scan models: what the scan engine reports for one page, and the
scan configuration sent along with every engine call.
"""
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from app.platform.config import settings

MAX_NODE_SAMPLES = 10


class Impact(str, Enum):
    MINOR = "minor"
    MODERATE = "moderate"
    SERIOUS = "serious"
    CRITICAL = "critical"


class ScanStatus(str, Enum):
    COMPLETED = "completed"
    FAILED = "failed"


class EffortClass(str, Enum):
    QUICK = "quick"
    MEDIUM = "medium"
    COMPLEX = "complex"


class RiskLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


# ============================================================================
# Enhanced analysis (optional, externally sourced annotation)
# ============================================================================

class CostRange(BaseModel):
    min: float = 0
    max: float = 0


class BusinessImpact(BaseModel):
    risk_level: Optional[RiskLevel] = Field(default=None, alias="riskLevel")
    user_impact_percentage: Optional[float] = Field(default=None, alias="userImpactPercentage")
    estimated_remediation_cost: Optional[CostRange] = Field(default=None, alias="estimatedRemediationCost")
    business_areas: List[str] = Field(default_factory=list, alias="businessAreas")

    class Config:
        populate_by_name = True


class EstimatedEffort(BaseModel):
    quick_fixes: int = Field(default=0, alias="quickFixes")
    medium_fixes: int = Field(default=0, alias="mediumFixes")
    complex_fixes: int = Field(default=0, alias="complexFixes")

    class Config:
        populate_by_name = True


class RemediationIssue(BaseModel):
    """A fix recommendation; (title, description) identifies it."""
    title: str = ""
    description: str = ""
    effort_class: Optional[EffortClass] = Field(default=None, alias="effort")

    class Config:
        populate_by_name = True

    @field_validator("title", "description", mode="before")
    @classmethod
    def blank_if_missing(cls, v):
        return "" if v is None else v

    @property
    def dedup_key(self):
        return (self.title, self.description)


class RemediationPlan(BaseModel):
    estimated_effort: Optional[EstimatedEffort] = Field(default=None, alias="estimatedEffort")
    priority1: List[RemediationIssue] = Field(default_factory=list)

    class Config:
        populate_by_name = True


class EnhancedAnalysis(BaseModel):
    enhanced_score: Optional[int] = Field(default=None, alias="enhancedScore", ge=0, le=100)
    business_impact: Optional[BusinessImpact] = Field(default=None, alias="businessImpact")
    remediation_plan: Optional[RemediationPlan] = Field(default=None, alias="remediationPlan")

    class Config:
        populate_by_name = True


# ============================================================================
# Engine output
# ============================================================================

class ViolationNode(BaseModel):
    """One matched element, kept as a sample for the report."""
    html: Optional[str] = None
    target: List[Any] = Field(default_factory=list)
    failure_summary: Optional[str] = None


class Violation(BaseModel):
    rule_id: str
    impact: Optional[str] = None  # one of Impact; engines may omit or extend it
    affected_node_count: Optional[int] = Field(default=None, ge=0)
    description: str = ""
    help: str = ""
    help_url: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    nodes: List[ViolationNode] = Field(default_factory=list, max_length=MAX_NODE_SAMPLES)

    @property
    def node_count(self) -> int:
        """Affected nodes; the sample size stands in when the engine sent no count."""
        if self.affected_node_count is not None:
            return self.affected_node_count
        return len(self.nodes)


class ScanConfig(BaseModel):
    """Options forwarded to the scan engine for every page."""
    base_url: str
    wcag_level: str = Field(default_factory=lambda: settings.WCAG_LEVEL, pattern="^(A|AA|AAA)$")
    include_best_practices: bool = Field(default_factory=lambda: settings.INCLUDE_BEST_PRACTICES)
    include_experimental: bool = Field(default_factory=lambda: settings.INCLUDE_EXPERIMENTAL)
    custom_headers: Dict[str, str] = Field(default_factory=dict)
    user_agent: str = Field(default_factory=lambda: settings.SCAN_USER_AGENT)
    timeout: float = Field(default_factory=lambda: settings.SCANNER_TIMEOUT, gt=0)


class ScanResult(BaseModel):
    """Outcome of scanning one page."""
    url: str
    status: ScanStatus
    score: int = Field(default=0, ge=0, le=100)
    violations: List[Violation] = Field(default_factory=list)
    violation_count: int = 0
    pass_count: int = 0
    incomplete_count: int = 0
    enhanced_analysis: Optional[EnhancedAnalysis] = None
    error: Optional[str] = None
    scan_id: Optional[str] = None
    duration_ms: Optional[int] = None

    @property
    def completed(self) -> bool:
        return self.status == ScanStatus.COMPLETED

    @property
    def effective_score(self) -> int:
        """Enhanced score when the annotation carries one, raw score otherwise."""
        if self.enhanced_analysis and self.enhanced_analysis.enhanced_score is not None:
            return self.enhanced_analysis.enhanced_score
        return self.score

    @classmethod
    def failed(cls, url: str, error: str) -> "ScanResult":
        return cls(url=url, status=ScanStatus.FAILED, score=0, error=error)
