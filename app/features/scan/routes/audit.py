import requests
from fastapi import APIRouter

from app.features.scan.schemas.audit import AggregateRequest, AuditOutcome, AuditRequest
from app.features.scan.schemas.report import AggregateReport
from app.features.scan.services.orchestration.audit_runner import AuditRunner
from app.features.scan.services.utils.aggregator import aggregate_results
from app.platform.logger import get_logger
from app.platform.response import api_response

logger = get_logger(__name__)

router = APIRouter(prefix="/audit", tags=["audit"])


@router.post("", response_model=AuditOutcome)
def run_audit(data: AuditRequest):
    """
    Run a complete accessibility audit of a site.

    **Process:**
    1. Health checks the target server
    2. Waits for the self-hosted scan engine
    3. Discovers pages with the requested strategy
    4. Scans each page sequentially
    5. Aggregates results and compares the score with the threshold

    Failures of individual pages are reported inside the result; only an
    unreachable target, an unavailable scanner or an empty discovery fail
    the request.
    """
    with requests.Session() as http:
        outcome = AuditRunner(session=http).run(data)

    message = (
        f"Audit passed with score {outcome.report.overall_score}/100"
        if outcome.passed
        else f"Audit score {outcome.report.overall_score} below threshold {outcome.threshold}"
    )
    return api_response(data=outcome, message=message)


@router.post("/aggregate", response_model=AggregateReport)
def aggregate(data: AggregateRequest):
    """Aggregate already collected page results into a report."""
    report = aggregate_results(data.results, scan_id=data.scan_id)
    logger.info(f"Aggregated {report.total_scans} page results, overall score {report.overall_score}")
    return api_response(data=report, message="Results aggregated")
