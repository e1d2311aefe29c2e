from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # ── App ─────────────────────────────────────
    APP_NAME: str = "A11y Audit Core"
    ENVIRONMENT: Literal["local", "staging", "production", "ci"] = "local"
    DEBUG: bool = False
    LOG_DIR: str = "logs"

    # ── Scanner engine (self-hosted) ────────────
    SCANNER_URL: str = "http://localhost:3003"
    SCANNER_TIMEOUT: int = 60  # seconds per page scan
    SCANNER_READY_ATTEMPTS: int = 30
    SCANNER_READY_INTERVAL_SECONDS: float = 2.0

    # ── Page discovery ──────────────────────────
    DISCOVERY_TIMEOUT: int = 10  # seconds per sitemap/page fetch
    DISCOVERY_USER_AGENT: str = "A11y-Audit-Page-Discovery/1.0"
    MAX_PAGES: int = 10
    CRAWL_HARD_CAP: int = 50
    CRAWL_DELAY_SECONDS: float = 0.2
    SITEMAP_MAX_DEPTH: int = 5

    # ── Scan options ────────────────────────────
    WCAG_LEVEL: Literal["A", "AA", "AAA"] = "AA"
    INCLUDE_BEST_PRACTICES: bool = False
    INCLUDE_EXPERIMENTAL: bool = False
    SCAN_USER_AGENT: str = "A11y-Audit-Scanner/1.0"

    # ── Run evaluation ──────────────────────────
    HEALTH_CHECK_TIMEOUT: int = 30
    HEALTH_CHECK_INTERVAL_SECONDS: float = 2.0
    SCORE_THRESHOLD: int = 80

    class Config:
        env_file = str(Path(__file__).parent.parent.parent / ".env")
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"


settings = Settings()
