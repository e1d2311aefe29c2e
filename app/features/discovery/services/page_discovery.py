import logging
from typing import List, Optional, Union

import requests

from app.features.discovery.schemas.discovery import (
    DiscoveryOptions,
    DiscoverySession,
    DiscoveryStrategy,
)
from app.features.discovery.services.crawl_frontier import CrawlFrontier
from app.features.discovery.services.link_normalizer import LinkNormalizer
from app.features.discovery.services.sitemap_resolver import SitemapResolver
from app.platform.exceptions import NoPagesDiscovered

logger = logging.getLogger(__name__)

FALLBACK_PAGES = ["/"]


class PageDiscoveryService:
    """
    Picks the pages of a web application to scan.

    Supports four strategies: single page, sitemap, crawling and manually
    listed paths. Whatever the strategy produces is normalized and capped at
    options.max_pages.
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        sitemap_resolver: Optional[SitemapResolver] = None,
        crawl_frontier: Optional[CrawlFrontier] = None,
    ):
        http = session or requests.Session()
        self.sitemap_resolver = sitemap_resolver or SitemapResolver(session=http)
        self.crawl_frontier = crawl_frontier or CrawlFrontier(session=http)
        self.last_session: Optional[DiscoverySession] = None

    def discover(
        self,
        base_url: str,
        strategy: Union[str, DiscoveryStrategy] = DiscoveryStrategy.SINGLE,
        options: Optional[DiscoveryOptions] = None,
    ) -> List[str]:
        """
        Discover pages using the specified strategy.

        Never raises: any failure inside a strategy is logged and discovery
        falls back to the root page.

        Args:
            base_url: Base URL of the application
            strategy: single, sitemap, crawl or paths
            options: Page cap, crawl seeds and manual paths

        Returns:
            Canonical paths to scan, "/" first when present
        """
        options = options or DiscoveryOptions()
        resolved = self.resolve_strategy(strategy)
        session = DiscoverySession(page_budget=options.max_pages)
        self.last_session = session

        logger.info(f"🔍 Discovering pages using strategy: {resolved.value}")

        try:
            if resolved == DiscoveryStrategy.SITEMAP:
                pages = self.sitemap_resolver.resolve(base_url)
            elif resolved == DiscoveryStrategy.CRAWL:
                pages = self.crawl_frontier.crawl(
                    base_url,
                    options.start_paths or ["/"],
                    options.max_pages,
                    session=session,
                )
            elif resolved == DiscoveryStrategy.PATHS:
                pages = self.parse_manual_paths(options.paths)
            else:
                pages = list(FALLBACK_PAGES)

            pages = LinkNormalizer.normalize(pages)

            if not pages:
                logger.warning(f"⚠️ Strategy '{resolved.value}' produced no pages, using single page scan")
                pages = list(FALLBACK_PAGES)

            if len(pages) > options.max_pages:
                logger.info(f"📊 Limiting {len(pages)} discovered pages to {options.max_pages}")
                pages = pages[:options.max_pages]

            logger.info(f"✅ Discovered {len(pages)} pages to scan: {pages}")
            return pages

        except Exception as e:
            logger.error(f"❌ Page discovery failed: {e}")
            logger.info("📋 Falling back to single page scan")
            return list(FALLBACK_PAGES)

    def discover_or_raise(
        self,
        base_url: str,
        strategy: Union[str, DiscoveryStrategy] = DiscoveryStrategy.SINGLE,
        options: Optional[DiscoveryOptions] = None,
    ) -> List[str]:
        """Same as discover(), but an empty result is an error for the caller."""
        pages = self.discover(base_url, strategy, options)
        if not pages:
            raise NoPagesDiscovered("No pages discovered for scanning")
        return pages

    @staticmethod
    def resolve_strategy(strategy: Union[str, DiscoveryStrategy, None]) -> DiscoveryStrategy:
        """Map a strategy name to DiscoveryStrategy; unknown names mean single."""
        if isinstance(strategy, DiscoveryStrategy):
            return strategy
        try:
            return DiscoveryStrategy((strategy or "").strip().lower())
        except ValueError:
            logger.warning(f"⚠️ Unknown strategy '{strategy}', falling back to single page")
            return DiscoveryStrategy.SINGLE

    @staticmethod
    def parse_manual_paths(paths_input: Union[str, List[str], None]) -> List[str]:
        """
        Parse manually specified paths.

        A string is split on newlines; blank lines and lines starting with
        "#" are ignored. A list keeps its non-empty string entries.
        """
        paths: List[str] = []

        if isinstance(paths_input, str):
            for line in paths_input.splitlines():
                line = line.strip()
                if line and not line.startswith("#"):
                    paths.append(line)
        elif isinstance(paths_input, (list, tuple)):
            for entry in paths_input:
                if not isinstance(entry, str):
                    continue
                entry = entry.strip()
                if entry and not entry.startswith("#"):
                    paths.append(entry)

        logger.info(f"📝 Using {len(paths)} manually specified paths")
        return paths
