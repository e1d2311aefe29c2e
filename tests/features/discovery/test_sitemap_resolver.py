import pytest
import requests

from app.features.discovery.services.link_normalizer import LinkNormalizer
from app.features.discovery.services.sitemap_resolver import SitemapResolver
from app.platform.exceptions import NoSitemapFound

BASE = "https://example.com"


def urlset(*locs):
    entries = "".join(f"<url><loc>{loc}</loc></url>" for loc in locs)
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        f'<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">{entries}</urlset>'
    )


def sitemap_index(*locs):
    entries = "".join(f"<sitemap><loc>{loc}</loc></sitemap>" for loc in locs)
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        f'<sitemapindex xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">{entries}</sitemapindex>'
    )


class TestSitemapResolver:

    def test_direct_urlset(self, site_session, fake_response):
        site_session.routes[f"{BASE}/sitemap.xml"] = fake_response(
            200, urlset(f"{BASE}/", f"{BASE}/about", f"{BASE}/contact/")
        )

        pages = SitemapResolver(session=site_session).resolve(BASE)

        assert pages == ["/", "/about", "/contact"]

    def test_other_hosts_are_dropped(self, site_session, fake_response):
        site_session.routes[f"{BASE}/sitemap.xml"] = fake_response(
            200, urlset(f"{BASE}/about", "https://cdn.example.com/asset", "https://other.org/page")
        )

        assert SitemapResolver(session=site_session).resolve(BASE) == ["/about"]

    def test_falls_through_candidates_in_order(self, site_session, fake_response):
        site_session.routes[f"{BASE}/sitemap.xml"] = fake_response(500, "boom")
        site_session.routes[f"{BASE}/sitemap_index.xml"] = requests.exceptions.Timeout("slow")
        site_session.routes[f"{BASE}/sitemap/sitemap.xml"] = fake_response(200, "<html>not xml</html>")
        site_session.routes[f"{BASE}/sitemaps/sitemap.xml"] = fake_response(200, urlset(f"{BASE}/found"))

        pages = SitemapResolver(session=site_session).resolve(BASE)

        assert pages == ["/found"]
        requested = [call.args[0] for call in site_session.get.call_args_list]
        assert requested == [f"{BASE}{path}" for path in SitemapResolver.SITEMAP_PATHS]

    def test_empty_sitemap_tries_next_candidate(self, site_session, fake_response):
        site_session.routes[f"{BASE}/sitemap.xml"] = fake_response(200, urlset())
        site_session.routes[f"{BASE}/sitemap_index.xml"] = fake_response(200, urlset(f"{BASE}/x"))

        assert SitemapResolver(session=site_session).resolve(BASE) == ["/x"]

    def test_no_sitemap_found(self, site_session):
        with pytest.raises(NoSitemapFound):
            SitemapResolver(session=site_session).resolve(BASE)

    def test_index_concatenates_child_sitemaps(self, site_session, fake_response):
        site_session.routes[f"{BASE}/sitemap.xml"] = fake_response(
            200, sitemap_index(f"{BASE}/sitemap-pages.xml", f"{BASE}/sitemap-blog.xml")
        )
        site_session.routes[f"{BASE}/sitemap-pages.xml"] = fake_response(
            200, urlset(f"{BASE}/", f"{BASE}/about", f"{BASE}/contact")
        )
        site_session.routes[f"{BASE}/sitemap-blog.xml"] = fake_response(
            200, urlset(f"{BASE}/blog", f"{BASE}/blog/one", f"{BASE}/blog/two", f"{BASE}/blog/three")
        )

        pages = SitemapResolver(session=site_session).resolve(BASE)

        assert len(LinkNormalizer.normalize(pages)) == 7
        assert pages[:3] == ["/", "/about", "/contact"]

    def test_failing_child_sitemap_is_skipped(self, site_session, fake_response):
        site_session.routes[f"{BASE}/sitemap.xml"] = fake_response(
            200, sitemap_index(f"{BASE}/broken.xml", f"{BASE}/ok.xml")
        )
        site_session.routes[f"{BASE}/broken.xml"] = requests.exceptions.ConnectionError("refused")
        site_session.routes[f"{BASE}/ok.xml"] = fake_response(200, urlset(f"{BASE}/ok"))

        assert SitemapResolver(session=site_session).resolve(BASE) == ["/ok"]

    def test_recursion_depth_is_bounded(self, site_session, fake_response):
        # An index that references itself would recurse forever without a cap
        site_session.routes[f"{BASE}/sitemap.xml"] = fake_response(
            200, sitemap_index(f"{BASE}/loop.xml")
        )
        site_session.routes[f"{BASE}/loop.xml"] = fake_response(
            200, sitemap_index(f"{BASE}/loop.xml")
        )

        with pytest.raises(NoSitemapFound):
            SitemapResolver(session=site_session, max_depth=3).resolve(BASE)

        loop_fetches = [c for c in site_session.get.call_args_list if c.args[0] == f"{BASE}/loop.xml"]
        assert len(loop_fetches) == 3

    def test_parse_rejects_non_sitemap_documents(self):
        resolver = SitemapResolver(session=None)
        with pytest.raises(ValueError):
            resolver.parse_sitemap("<rss><channel></channel></rss>", BASE)
