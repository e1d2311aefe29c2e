import requests
from fastapi import APIRouter

from app.features.discovery.schemas.discovery import DiscoveryRequest, DiscoveryResponse
from app.features.discovery.services.page_discovery import PageDiscoveryService
from app.platform.logger import get_logger
from app.platform.response import api_response

logger = get_logger(__name__)

router = APIRouter(prefix="/discovery", tags=["discovery"])


@router.post("", response_model=DiscoveryResponse)
def discover_pages(data: DiscoveryRequest):
    """
    Discover the pages of a site that an audit would scan.

    Runs the requested strategy (single, sitemap, crawl or paths) and returns
    the normalized, capped page list. Discovery never fails outright; broken
    strategies fall back to the root page.
    """
    base_url = str(data.url).rstrip("/")
    with requests.Session() as http:
        pages = PageDiscoveryService(session=http).discover_or_raise(base_url, data.strategy, data.options)
    resolved = PageDiscoveryService.resolve_strategy(data.strategy)

    logger.info(f"Discovery for {base_url} returned {len(pages)} pages")

    return api_response(
        data=DiscoveryResponse(
            base_url=base_url,
            strategy=resolved.value,
            pages=pages,
            count=len(pages),
        ),
        message=f"Discovered {len(pages)} pages",
    )
