"""
Audit Schemas

Request and response models for a complete audit run: discovery, scanning
and aggregation against one target site.
"""
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, Field, HttpUrl

from app.features.scan.schemas.report import AggregateReport
from app.features.scan.schemas.scan import ScanResult
from app.platform.config import settings


class AuditRequest(BaseModel):
    """Everything one audit run needs to know about its target."""
    url: HttpUrl
    strategy: str = "single"
    scan_paths: Union[str, List[str]] = Field(default_factory=list)
    start_paths: List[str] = Field(default_factory=lambda: ["/"])
    max_pages: int = Field(default_factory=lambda: settings.MAX_PAGES, gt=0)

    wcag_level: str = Field(default_factory=lambda: settings.WCAG_LEVEL, pattern="^(A|AA|AAA)$")
    include_best_practices: bool = Field(default_factory=lambda: settings.INCLUDE_BEST_PRACTICES)
    include_experimental: bool = Field(default_factory=lambda: settings.INCLUDE_EXPERIMENTAL)
    custom_headers: Dict[str, str] = Field(default_factory=dict)
    user_agent: str = Field(default_factory=lambda: settings.SCAN_USER_AGENT)

    threshold: int = Field(default_factory=lambda: settings.SCORE_THRESHOLD, ge=0, le=100)
    health_check: bool = True
    health_check_path: str = "/"
    health_check_timeout: int = Field(default_factory=lambda: settings.HEALTH_CHECK_TIMEOUT, gt=0)

    class Config:
        json_schema_extra = {
            "example": {
                "url": "http://localhost:3000",
                "strategy": "paths",
                "scan_paths": "/\n/about\n/contact",
                "wcag_level": "AA",
                "threshold": 80,
            }
        }

    @property
    def base_url(self) -> str:
        return str(self.url).rstrip("/")


class AuditOutcome(BaseModel):
    scan_id: str
    base_url: str
    pages: List[str]
    threshold: int
    passed: bool
    report: AggregateReport
    duration_ms: Optional[int] = None


class AggregateRequest(BaseModel):
    """Scan results posted for aggregation only."""
    results: List[ScanResult]
    scan_id: Optional[str] = None
