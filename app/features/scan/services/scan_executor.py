import logging
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from app.features.scan.schemas.scan import (
    MAX_NODE_SAMPLES,
    EnhancedAnalysis,
    ScanConfig,
    ScanResult,
    ScanStatus,
    Violation,
    ViolationNode,
)
from app.features.scan.services.scanner_client import ScannerClient
from app.features.scan.services.score_calculator import calculate_score, round_half_up
from app.platform.exceptions import ScanEngineError

logger = logging.getLogger(__name__)


class ScanExecutorService:
    """
    Scans discovered pages one at a time against the scan engine.

    Pages are scanned sequentially: the engine is a single shared browser
    process, and one page failing never stops the others.
    """

    def __init__(self, client: Optional[ScannerClient] = None):
        self.client = client or ScannerClient()

    def execute_scans(self, pages: List[str], scan_config: ScanConfig) -> List[ScanResult]:
        results: List[ScanResult] = []

        for page in pages:
            full_url = self.page_url(page, scan_config.base_url)
            logger.info(f"📡 Scanning with self-hosted scanner: {full_url}")

            try:
                raw = self.client.scan(full_url, scan_config)
                result = self.build_result(full_url, raw)
            except (ScanEngineError, ValueError, TypeError, AttributeError) as e:
                logger.error(f"❌ Failed to scan {full_url}: {e}")
                results.append(ScanResult.failed(full_url, str(e)))
                continue

            if result.completed:
                logger.info(f"✅ Scan completed: {full_url} - Score: {result.score}")
            else:
                logger.error(f"❌ Scanner reported failure for {full_url}: {result.error}")
            results.append(result)

        return results

    @staticmethod
    def page_url(page: str, base_url: str) -> str:
        if page.startswith("http://") or page.startswith("https://"):
            return page
        return f"{base_url.rstrip('/')}{page}"

    @staticmethod
    def build_result(url: str, raw: Dict[str, Any]) -> ScanResult:
        """
        Convert a raw engine response into a ScanResult.

        Counts come from the engine summary when present, otherwise from the
        lengths of the returned lists. The engine's score wins over the
        locally computed one.
        """
        if not isinstance(raw, dict):
            return ScanResult.failed(url, "Scanner returned an unexpected payload")

        if raw.get("status") == ScanStatus.FAILED.value:
            return ScanResult.failed(url, raw.get("error") or "Scanner reported a failed scan")

        summary = raw.get("summary") or {}
        violations = [ScanExecutorService.parse_violation(v) for v in raw.get("violations") or []]
        passes = raw.get("passes") or []
        incomplete = raw.get("incomplete") or []

        pass_count = summary.get("passCount", len(passes))
        violation_count = summary.get("violationCount", len(violations))
        incomplete_count = summary.get("incompleteCount", len(incomplete))

        score = raw.get("score")
        if score is None:
            score = summary.get("score")
        if score is None:
            score = calculate_score(violations, pass_count)

        return ScanResult(
            url=url,
            status=ScanStatus.COMPLETED,
            score=max(0, min(100, round_half_up(float(score)))),
            violations=violations,
            violation_count=violation_count,
            pass_count=pass_count,
            incomplete_count=incomplete_count,
            enhanced_analysis=ScanExecutorService.parse_enhanced_analysis(url, raw.get("enhancedAnalysis")),
            scan_id=raw.get("scanId"),
            duration_ms=raw.get("duration"),
        )

    @staticmethod
    def parse_violation(raw: Dict[str, Any]) -> Violation:
        nodes = raw.get("nodes") or []
        node_count = raw.get("nodeCount")
        if node_count is None and "nodes" in raw:
            node_count = len(nodes)

        return Violation(
            rule_id=raw.get("id") or raw.get("ruleId") or "unknown",
            impact=raw.get("impact"),
            affected_node_count=node_count,
            description=raw.get("description") or "",
            help=raw.get("help") or "",
            help_url=raw.get("helpUrl"),
            tags=raw.get("tags") or [],
            nodes=[
                ViolationNode(
                    html=node.get("html"),
                    target=node.get("target") or [],
                    failure_summary=node.get("failureSummary"),
                )
                for node in nodes[:MAX_NODE_SAMPLES]
            ],
        )

    @staticmethod
    def parse_enhanced_analysis(url: str, raw: Optional[Dict[str, Any]]) -> Optional[EnhancedAnalysis]:
        """Best-effort: a malformed annotation is dropped, never fatal."""
        if not raw:
            return None
        try:
            return EnhancedAnalysis.model_validate(raw)
        except ValidationError as e:
            logger.warning(f"⚠️ Ignoring malformed enhanced analysis for {url}: {e.error_count()} error(s)")
            return None
