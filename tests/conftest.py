"""
Test configuration and fixtures for the A11y Audit Core API.

Provides the FastAPI test client plus helpers for faking HTTP responses, so
no test touches the network.
"""

import os
from typing import Generator
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

os.environ.setdefault("LOG_DIR", "logs")
os.environ.setdefault("CRAWL_DELAY_SECONDS", "0")


@pytest.fixture(scope="session")
def test_app():
    """Create FastAPI test application."""
    from app.main import app

    return app


@pytest.fixture(scope="function")
def client(test_app) -> Generator[TestClient, None, None]:
    """
    Create a test client for making HTTP requests.
    A fresh TestClient per test keeps tests isolated.
    """
    with TestClient(test_app) as test_client:
        yield test_client


def make_response(status_code: int = 200, text: str = "", json_data=None, content_type: str = "text/html", url=None):
    """Build a stand-in for requests.Response."""
    response = MagicMock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 400
    response.text = text
    response.headers = {"content-type": content_type}
    response.url = url
    if json_data is not None:
        response.json.return_value = json_data
    else:
        response.json.side_effect = ValueError("No JSON body")
    return response


@pytest.fixture
def fake_response():
    return make_response


@pytest.fixture
def site_session():
    """
    A mock requests.Session serving a dict of {url: response}.

    Unknown URLs answer 404. Assign routes via `session.routes[url] = response`.
    """
    session = MagicMock()
    session.routes = {}

    def _get(url, **kwargs):
        route = session.routes.get(url)
        if isinstance(route, Exception):
            raise route
        return route if route is not None else make_response(404, "Not Found")

    session.get.side_effect = _get
    return session
