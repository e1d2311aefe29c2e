import logging
import time
import uuid
from typing import Optional

import requests

from app.features.discovery.schemas.discovery import DiscoveryOptions
from app.features.discovery.services.page_discovery import PageDiscoveryService
from app.features.scan.schemas.audit import AuditOutcome, AuditRequest
from app.features.scan.schemas.scan import ScanConfig
from app.features.scan.services.scan_executor import ScanExecutorService
from app.features.scan.services.scanner_client import ScannerClient
from app.features.scan.services.utils.aggregator import aggregate_results
from app.platform.config import settings
from app.platform.exceptions import ServerUnreachable

logger = logging.getLogger(__name__)


class AuditRunner:
    """
    Runs one complete audit of a target site.

    Steps:
    1. Health check the target server
    2. Wait for the scan engine to be ready
    3. Discover pages to scan
    4. Scan every page, sequentially
    5. Aggregate and compare the overall score with the threshold
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        discovery: Optional[PageDiscoveryService] = None,
        scanner: Optional[ScannerClient] = None,
        executor: Optional[ScanExecutorService] = None,
        health_check_interval: Optional[float] = None,
    ):
        self.session = session or requests.Session()
        self.discovery = discovery or PageDiscoveryService(session=self.session)
        self.scanner = scanner or ScannerClient(session=self.session)
        self.executor = executor or ScanExecutorService(client=self.scanner)
        self.health_check_interval = (
            health_check_interval if health_check_interval is not None
            else settings.HEALTH_CHECK_INTERVAL_SECONDS
        )

    def run(self, request: AuditRequest) -> AuditOutcome:
        """
        Raises:
            ServerUnreachable: If the target never answers the health check
            ScannerUnavailable: If the scan engine never becomes ready
            NoPagesDiscovered: If discovery ends with nothing to scan
        """
        scan_id = str(uuid.uuid4())
        started = time.monotonic()
        base_url = request.base_url
        logger.info(f"🚀 Starting accessibility audit {scan_id} for {base_url}")

        if request.health_check:
            self.health_check_server(base_url, request.health_check_path, request.health_check_timeout)

        self.scanner.wait_until_ready()

        options = DiscoveryOptions(
            max_pages=request.max_pages,
            start_paths=request.start_paths or ["/"],
            paths=request.scan_paths,
        )
        pages = self.discovery.discover_or_raise(base_url, request.strategy, options)

        logger.info(f"🔬 Starting accessibility scans for {len(pages)} pages")
        scan_config = ScanConfig(
            base_url=base_url,
            wcag_level=request.wcag_level,
            include_best_practices=request.include_best_practices,
            include_experimental=request.include_experimental,
            custom_headers=request.custom_headers,
            user_agent=request.user_agent,
        )
        results = self.executor.execute_scans(pages, scan_config)

        logger.info("📊 Processing scan results")
        report = aggregate_results(results, scan_id=scan_id)
        passed = report.overall_score >= request.threshold
        duration_ms = int((time.monotonic() - started) * 1000)

        logger.info(f"✅ Audit {scan_id} completed in {duration_ms}ms")
        logger.info(f"📈 Overall Score: {report.overall_score}/100 (threshold {request.threshold})")
        logger.info(f"🚨 Violations Found: {report.total_violations}")

        return AuditOutcome(
            scan_id=scan_id,
            base_url=base_url,
            pages=pages,
            threshold=request.threshold,
            passed=passed,
            report=report,
            duration_ms=duration_ms,
        )

    def health_check_server(self, base_url: str, path: str = "/", timeout: int = 30) -> None:
        """
        Poll the target until it responds. A 404 counts as up: the server is
        answering even if the health path does not exist.

        Raises:
            ServerUnreachable: If the timeout elapses first
        """
        health_url = f"{base_url.rstrip('/')}{path if path.startswith('/') else '/' + path}"
        logger.info(f"🩺 Health checking server: {health_url}")
        deadline = time.monotonic() + timeout
        started = time.monotonic()

        while True:
            try:
                response = self.session.get(health_url, timeout=5)
                if response.ok or response.status_code == 404:
                    elapsed = round(time.monotonic() - started)
                    logger.info(f"✅ Server health check passed ({response.status_code}) after {elapsed}s")
                    return
                logger.info(f"🔄 Server returned {response.status_code}, retrying...")
            except requests.exceptions.ConnectionError:
                logger.info("🔄 Server not ready yet, retrying...")
            except requests.exceptions.RequestException as e:
                logger.info(f"🔄 Health check error: {e}, retrying...")

            if time.monotonic() + self.health_check_interval > deadline:
                break
            time.sleep(self.health_check_interval)

        raise ServerUnreachable(f"Server health check failed after {timeout}s at {health_url}")
