import logging
from typing import List, Optional
from urllib.parse import urlparse

import requests
from bs4 import BeautifulSoup

from app.features.discovery.services.link_normalizer import LinkNormalizer
from app.platform.config import settings
from app.platform.exceptions import NoSitemapFound

logger = logging.getLogger(__name__)


class SitemapResolver:
    """
    Resolves a site's sitemap (or sitemap index) into a flat list of paths.
    """

    SITEMAP_PATHS = [
        "/sitemap.xml",
        "/sitemap_index.xml",
        "/sitemap/sitemap.xml",
        "/sitemaps/sitemap.xml",
    ]

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
        user_agent: Optional[str] = None,
        max_depth: Optional[int] = None,
    ):
        self.session = session or requests.Session()
        self.timeout = timeout if timeout is not None else settings.DISCOVERY_TIMEOUT
        self.user_agent = user_agent or settings.DISCOVERY_USER_AGENT
        self.max_depth = max_depth if max_depth is not None else settings.SITEMAP_MAX_DEPTH

    def resolve(self, base_url: str) -> List[str]:
        """
        Try each well-known sitemap location in order and return the pages of
        the first one that parses to a non-empty list.

        Args:
            base_url: Root of the target site (e.g. "https://example.com")

        Returns:
            Site-relative paths in sitemap document order

        Raises:
            NoSitemapFound: If every candidate is missing, broken or empty
        """
        logger.info("📄 Looking for sitemap.xml...")
        root = base_url.rstrip("/")

        for sitemap_path in self.SITEMAP_PATHS:
            sitemap_url = f"{root}{sitemap_path}"
            logger.info(f"🔗 Checking {sitemap_url}")

            try:
                response = self._get(sitemap_url)
                if not response.ok:
                    logger.info(f"⚠️ Sitemap not found at {sitemap_path} ({response.status_code})")
                    continue

                pages = self.parse_sitemap(response.text, base_url)
            except (requests.RequestException, ValueError) as e:
                logger.warning(f"⚠️ Error fetching sitemap at {sitemap_path}: {e}")
                continue

            if pages:
                logger.info(f"📄 Found sitemap at {sitemap_path} with {len(pages)} pages")
                return pages

        raise NoSitemapFound(f"No valid sitemap found for {base_url}")

    def parse_sitemap(self, sitemap_xml: str, base_url: str, depth: int = 0) -> List[str]:
        """
        Parse a urlset or sitemapindex document.

        Child sitemaps of an index are fetched and parsed recursively up to
        max_depth levels; a failing child is skipped.

        Raises:
            ValueError: If the document is neither a urlset nor a sitemapindex
        """
        soup = BeautifulSoup(sitemap_xml, "xml")
        base_host = urlparse(base_url).hostname
        pages: List[str] = []

        urlset = soup.find("urlset")
        index = soup.find("sitemapindex")
        if urlset is None and index is None:
            raise ValueError("Document is not a sitemap (no urlset or sitemapindex)")

        if urlset is not None:
            for entry in urlset.find_all("url"):
                loc = self._loc_text(entry)
                if not loc:
                    continue
                if urlparse(loc).hostname != base_host:
                    continue
                path = LinkNormalizer.to_path(loc)
                if path:
                    pages.append(path)

        if index is not None:
            if depth >= self.max_depth:
                logger.warning(
                    f"⚠️ Sitemap index nesting exceeds {self.max_depth} levels, ignoring deeper sitemaps"
                )
                return pages

            logger.info("📑 Found sitemap index, processing child sitemaps...")
            for entry in index.find_all("sitemap"):
                child_url = self._loc_text(entry)
                if not child_url:
                    continue
                try:
                    response = self._get(child_url)
                    if not response.ok:
                        logger.warning(f"⚠️ Child sitemap {child_url} returned {response.status_code}")
                        continue
                    pages.extend(self.parse_sitemap(response.text, base_url, depth + 1))
                except (requests.RequestException, ValueError) as e:
                    logger.warning(f"⚠️ Error processing child sitemap {child_url}: {e}")

        return pages

    def _get(self, url: str) -> requests.Response:
        return self.session.get(
            url,
            timeout=self.timeout,
            headers={"User-Agent": self.user_agent},
        )

    @staticmethod
    def _loc_text(entry) -> Optional[str]:
        loc = entry.find("loc")
        if loc is None or not loc.get_text(strip=True):
            return None
        return loc.get_text(strip=True)
