"""
Discovery Schemas

Models for page discovery: strategy selection, options, per-run session state
and the request/response bodies of the discovery endpoint.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Set, Union

from pydantic import BaseModel, Field, HttpUrl

from app.platform.config import settings


class DiscoveryStrategy(str, Enum):
    SINGLE = "single"
    SITEMAP = "sitemap"
    CRAWL = "crawl"
    PATHS = "paths"


class DiscoveryOptions(BaseModel):
    """Caller-supplied knobs for a discovery run."""
    max_pages: int = Field(default_factory=lambda: settings.MAX_PAGES, gt=0)
    start_paths: List[str] = Field(default_factory=lambda: ["/"])
    # Manual list for the `paths` strategy: newline-delimited text or a list
    paths: Union[str, List[str]] = Field(default_factory=list)


@dataclass
class DiscoverySession:
    """
    Mutable state of one discovery run.

    Created at the start of a discovery call and dropped at its end; never
    shared between calls.
    """
    page_budget: int
    visited: Set[str] = field(default_factory=set)
    discovered: List[str] = field(default_factory=list)

    def __post_init__(self):
        if self.page_budget <= 0:
            raise ValueError("page_budget must be greater than zero")

    @property
    def exhausted(self) -> bool:
        return len(self.discovered) >= self.page_budget

    def mark_visited(self, path: str) -> None:
        self.visited.add(path)
        self.discovered.append(path)

    def stats(self) -> Dict[str, int]:
        return {
            "visited": len(self.visited),
            "discovered": len(self.discovered),
            "max_pages": self.page_budget,
        }


class DiscoveryRequest(BaseModel):
    """Request for the discovery endpoint."""
    url: HttpUrl
    strategy: str = DiscoveryStrategy.SINGLE.value
    options: DiscoveryOptions = Field(default_factory=DiscoveryOptions)

    class Config:
        json_schema_extra = {
            "example": {
                "url": "https://example.com",
                "strategy": "crawl",
                "options": {"max_pages": 10, "start_paths": ["/"]},
            }
        }


class DiscoveryResponse(BaseModel):
    """Pages selected for scanning, in scan order."""
    base_url: str
    strategy: str
    pages: List[str]
    count: int
    message: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {
                "base_url": "https://example.com",
                "strategy": "sitemap",
                "pages": ["/", "/about", "/contact"],
                "count": 3,
            }
        }
