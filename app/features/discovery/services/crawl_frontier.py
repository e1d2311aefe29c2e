import logging
import re
import time
from collections import deque
from typing import List, Optional
from urllib.parse import urljoin, urlparse

import requests
from bs4 import BeautifulSoup

from app.features.discovery.schemas.discovery import DiscoverySession
from app.features.discovery.services.link_normalizer import LinkNormalizer
from app.platform.config import settings

logger = logging.getLogger(__name__)

SKIP_PATTERNS = [
    re.compile(r"^#"),
    re.compile(r"^javascript:", re.IGNORECASE),
    re.compile(r"^mailto:", re.IGNORECASE),
    re.compile(r"^tel:", re.IGNORECASE),
    re.compile(r"^ftp:", re.IGNORECASE),
    re.compile(r"\.(pdf|jpg|jpeg|png|gif|svg|ico|zip|tar|gz)$", re.IGNORECASE),
    re.compile(r"/admin"),
    re.compile(r"/api/"),
    re.compile(r"/logout"),
    re.compile(r"/download"),
]


class CrawlFrontier:
    """
    Breadth-first crawler over same-host links, bounded by a page budget.
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
        user_agent: Optional[str] = None,
        delay: Optional[float] = None,
        hard_cap: Optional[int] = None,
    ):
        self.session = session or requests.Session()
        self.timeout = timeout if timeout is not None else settings.DISCOVERY_TIMEOUT
        self.user_agent = user_agent or settings.DISCOVERY_USER_AGENT
        self.delay = delay if delay is not None else settings.CRAWL_DELAY_SECONDS
        self.hard_cap = hard_cap if hard_cap is not None else settings.CRAWL_HARD_CAP

    def crawl(
        self,
        base_url: str,
        seed_paths: List[str],
        page_budget: int,
        session: Optional[DiscoverySession] = None,
    ) -> List[str]:
        """
        Crawl the site starting from seed_paths.

        Args:
            base_url: Root of the target site
            seed_paths: Paths the frontier starts from, in order
            page_budget: Maximum pages to discover (never above the hard cap)
            session: Discovery state to record into; a fresh one is created
                when omitted

        Returns:
            Discovered paths in visit (BFS) order
        """
        budget = min(page_budget, self.hard_cap)
        if session is None:
            session = DiscoverySession(page_budget=budget)
        else:
            session.page_budget = min(session.page_budget, budget)

        root = base_url.rstrip("/")
        base_host = urlparse(base_url).hostname

        queue = deque()
        for seed in seed_paths:
            path = LinkNormalizer.canonicalize(seed)
            if path and path not in queue:
                queue.append(path)

        logger.info(f"🕷️ Starting website crawl from {len(queue)} seed path(s), budget {budget}")

        while queue and not session.exhausted:
            path = queue.popleft()
            if path in session.visited:
                continue

            logger.info(f"🔍 Crawling: {path}")
            session.mark_visited(path)

            page_url = f"{root}{path}"
            try:
                links = self.extract_links(page_url, base_host)
            except (requests.RequestException, ValueError) as e:
                logger.warning(f"⚠️ Error crawling {path}: {e}")
                links = []

            for link in links:
                if link not in session.visited and link not in queue:
                    queue.append(link)

            if queue and not session.exhausted and self.delay > 0:
                time.sleep(self.delay)

        logger.info(f"🕷️ Crawling completed: found {len(session.discovered)} pages")
        return list(session.discovered)

    def extract_links(self, page_url: str, base_host: Optional[str]) -> List[str]:
        """
        Fetch a page and return the same-host paths its anchors point to.

        Non-2xx and non-HTML responses yield no links. Network errors are
        raised to the caller.
        """
        response = self.session.get(
            page_url,
            timeout=self.timeout,
            headers={
                "User-Agent": self.user_agent,
                "Accept": "text/html,application/xhtml+xml",
            },
        )
        if not response.ok:
            return []

        content_type = response.headers.get("content-type", "")
        if "text/html" not in content_type:
            return []

        # Relative hrefs resolve against the final URL after redirects
        document_url = response.url or page_url
        soup = BeautifulSoup(response.text, "html.parser")
        links: List[str] = []

        for anchor in soup.find_all("a", href=True):
            href = anchor["href"].strip()
            if not href or self.should_skip_link(href):
                continue

            try:
                link_url = urljoin(document_url, href)
                parsed = urlparse(link_url)
            except ValueError:
                continue

            if parsed.scheme not in ("http", "https") or parsed.hostname != base_host:
                continue

            path = LinkNormalizer.canonicalize(parsed.path or "/")
            if path and path not in links:
                links.append(path)

        return links

    @staticmethod
    def should_skip_link(href: str) -> bool:
        return any(pattern.search(href) for pattern in SKIP_PATTERNS)
