"""Pytest configuration and fixtures."""

from collections.abc import Callable

import pytest
from bs4 import BeautifulSoup

from organic_verifier.config.settings import Settings
from organic_verifier.services.verification.errors import RecordNotFound

ScopeRow = tuple[str, str, str, str]

DEFAULT_SCOPES: list[ScopeRow] = [
    ("CROPS", "Certified", "01/15/2021", "Spices: ginger, turmeric (organic); Herbs: basil"),
    ("HANDLING", "Certified", "03/02/2019", "Oils: olive oil, sesame oil"),
    ("LIVESTOCK", "--", "N/A", ""),
]


def render_registry_page(
    operation_name: str | None = "Acme Organic Farms",
    certifier: str | None = "[CCOF] CCOF Certification Services, LLC",
    scopes: list[ScopeRow] | None = None,
) -> str:
    """Build registry-shaped HTML for extraction tests."""
    rows = "".join(
        f"<tr><td>{name}</td><td>{status}</td><td>{date}</td><td>{products}</td></tr>"
        for name, status, date, products in (DEFAULT_SCOPES if scopes is None else scopes)
    )
    name_block = (
        f"<div><label>Operation Name:</label> <span>{operation_name}</span></div>"
        if operation_name
        else ""
    )
    certifier_block = (
        f"<div><label>Certifier:</label> <span>{certifier}</span></div>" if certifier else ""
    )
    return (
        "<html><head><script>var label = 'Certifier: injected';</script></head><body>"
        "<h1>Operation Profile</h1>"
        f"{name_block}{certifier_block}"
        "<table><thead><tr><th>Scope</th><th>Status</th><th>Effective Date</th>"
        "<th>Certified Products</th></tr></thead>"
        f"<tbody>{rows}</tbody></table>"
        "</body></html>"
    )


class FakeDocumentSource:
    """Serves fixture pages by registry ID; unknown IDs raise RecordNotFound."""

    def __init__(self, pages: dict[str, str | Exception] | None = None):
        self.pages = pages or {}
        self.requested: list[str] = []
        self.closed = False

    async def fetch_document(self, registry_id: str) -> BeautifulSoup:
        self.requested.append(registry_id)
        page = self.pages.get(registry_id)
        if page is None:
            raise RecordNotFound(registry_id, f"ID {registry_id} not found in registry")
        if isinstance(page, Exception):
            raise page
        return BeautifulSoup(page, "html.parser")

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def settings():
    """Provide settings fixture."""
    return Settings(registry_renderer="http", verification_window_size=3)


@pytest.fixture
def registry_page() -> Callable[..., str]:
    """Factory for registry-shaped HTML."""
    return render_registry_page


@pytest.fixture
def registry_soup(registry_page) -> Callable[..., BeautifulSoup]:
    """Factory for parsed registry documents."""

    def _make(**kwargs) -> BeautifulSoup:
        return BeautifulSoup(registry_page(**kwargs), "html.parser")

    return _make


@pytest.fixture
def fake_source() -> Callable[..., FakeDocumentSource]:
    """Factory for fixture-backed document sources."""
    return FakeDocumentSource
