import logging
import time
from typing import Any, Dict, Optional

import requests

from app.features.scan.schemas.scan import ScanConfig
from app.features.scan.services.score_calculator import get_axe_tags
from app.platform.config import settings
from app.platform.exceptions import ScanEngineError, ScannerUnavailable

logger = logging.getLogger(__name__)


class ScannerClient:
    """HTTP client for the self-hosted scan engine."""

    def __init__(self, base_url: Optional[str] = None, session: Optional[requests.Session] = None):
        self.base_url = (base_url or settings.SCANNER_URL).rstrip("/")
        self.session = session or requests.Session()

    def scan(self, url: str, config: ScanConfig) -> Dict[str, Any]:
        """
        Run a synchronous scan of one page.

        Raises:
            ScanEngineError: On network error, timeout, non-2xx status or a
                body that is not JSON
        """
        payload = {
            "url": url,
            "options": {
                "wcagLevel": config.wcag_level,
                "includeBestPractices": config.include_best_practices,
                "includeExperimental": config.include_experimental,
                "customHeaders": config.custom_headers,
                "userAgent": config.user_agent,
                "tags": get_axe_tags(
                    config.wcag_level,
                    config.include_best_practices,
                    config.include_experimental,
                ),
            },
        }

        try:
            response = self.session.post(
                f"{self.base_url}/scan-sync",
                json=payload,
                timeout=config.timeout,
            )
        except requests.exceptions.Timeout:
            raise ScanEngineError(f"Scanner timed out after {config.timeout}s")
        except requests.exceptions.RequestException as e:
            raise ScanEngineError(f"Scanner request failed: {e}")

        if not response.ok:
            raise ScanEngineError(f"Scanner returned {response.status_code}", engine_status=response.status_code)

        try:
            return response.json()
        except ValueError as e:
            raise ScanEngineError(f"Scanner returned invalid JSON: {e}", engine_status=response.status_code)

    def is_healthy(self) -> bool:
        try:
            response = self.session.get(f"{self.base_url}/health", timeout=5)
        except requests.exceptions.RequestException:
            return False
        return response.ok

    def wait_until_ready(self, attempts: Optional[int] = None, interval: Optional[float] = None) -> None:
        """
        Poll the engine's health endpoint until it answers.

        Raises:
            ScannerUnavailable: If no attempt succeeds
        """
        attempts = attempts if attempts is not None else settings.SCANNER_READY_ATTEMPTS
        interval = interval if interval is not None else settings.SCANNER_READY_INTERVAL_SECONDS

        logger.info("⏳ Waiting for scanner service to be ready...")
        for attempt in range(attempts):
            if self.is_healthy():
                logger.info("✅ Scanner service is ready")
                return
            if attempt < attempts - 1:
                time.sleep(interval)

        raise ScannerUnavailable(f"Scanner service at {self.base_url} failed to start within timeout")
