"""Document sources for the public organic-certification registry.

The registry detail page is server-rendered but populated client-side, so
the default source drives a headless browser and waits for the page to be
ready before handing its HTML to the extractor. A plain HTTP source is kept
for registry mirrors that serve fully rendered markup.
"""

import asyncio
import logging
from typing import Protocol
from urllib.parse import urlencode

import httpx
from bs4 import BeautifulSoup
from playwright.async_api import Browser, Playwright, async_playwright
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from organic_verifier.config.constants import OPERATION_NAME_LABEL, SCOPE_LABELS
from organic_verifier.config.settings import Settings
from organic_verifier.services.verification.errors import RecordNotFound, RegistryUnavailable

logger = logging.getLogger(__name__)

# Resolves once any scope label is present in the rendered text
_SCOPES_READY_JS = """
(labels) => {
    const text = ((document.body && document.body.innerText) || "").toUpperCase();
    return labels.some((label) => text.includes(label));
}
"""


def build_registry_url(settings: Settings, registry_id: str) -> str:
    """Build the registry detail URL for an operation."""
    return f"{settings.registry_base_url}?{urlencode({settings.registry_id_param: registry_id})}"


class DocumentSource(Protocol):
    """Fetches a registry page as a parsed document."""

    async def fetch_document(self, registry_id: str) -> BeautifulSoup:
        ...

    async def close(self) -> None:
        ...


class BrowserDocumentSource:
    """Render registry pages in headless Chromium via Playwright.

    One browser is launched lazily and shared; every fetch gets its own
    context so cookies and storage never leak between operations.
    """

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None
        self._lock = asyncio.Lock()

    async def _get_browser(self) -> Browser:
        async with self._lock:
            if self._browser is None:
                playwright = await async_playwright().start()
                try:
                    self._browser = await playwright.chromium.launch(headless=True)
                except Exception:
                    await playwright.stop()
                    raise
                self._playwright = playwright
                logger.info("Headless browser launched for registry rendering")
            return self._browser

    async def _discard_browser(self, browser: Browser) -> None:
        """Drop a disconnected browser so the next fetch relaunches it."""
        async with self._lock:
            if self._browser is not browser:
                return
            logger.warning("Registry browser disconnected, it will be relaunched")
            self._browser = None
            if self._playwright is not None:
                try:
                    await self._playwright.stop()
                except PlaywrightError as e:
                    logger.debug("Error stopping Playwright driver: %s", e)
                self._playwright = None

    async def fetch_document(self, registry_id: str) -> BeautifulSoup:
        url = build_registry_url(self.settings, registry_id)
        try:
            browser = await self._get_browser()
        except PlaywrightError as e:
            raise RegistryUnavailable(registry_id, f"Browser unavailable: {e}") from e

        context = None
        try:
            context = await browser.new_context(user_agent=self.settings.registry_user_agent)
            page = await context.new_page()
            response = await page.goto(
                url,
                wait_until="domcontentloaded",
                timeout=self.settings.registry_navigation_timeout * 1000,
            )
            if response is not None and response.status == 404:
                raise RecordNotFound(registry_id, f"ID {registry_id} not found in registry")
            if response is not None and response.status >= 400:
                raise RegistryUnavailable(
                    registry_id,
                    f"Registry returned status {response.status} for ID {registry_id}",
                )

            await page.wait_for_selector(
                f"text={OPERATION_NAME_LABEL}",
                timeout=self.settings.registry_label_timeout * 1000,
            )
            try:
                await page.wait_for_function(
                    _SCOPES_READY_JS,
                    arg=list(SCOPE_LABELS),
                    timeout=self.settings.registry_scope_timeout * 1000,
                )
            except PlaywrightTimeoutError:
                logger.warning("No scope table rendered for ID %s, extracting anyway", registry_id)

            html = await page.content()
        except PlaywrightTimeoutError as e:
            raise RegistryUnavailable(
                registry_id, f"Timed out rendering registry page for ID {registry_id}"
            ) from e
        except PlaywrightError as e:
            if not browser.is_connected():
                await self._discard_browser(browser)
            raise RegistryUnavailable(
                registry_id, f"Failed to render registry page for ID {registry_id}: {e}"
            ) from e
        finally:
            if context is not None:
                try:
                    await context.close()
                except PlaywrightError as e:
                    logger.debug("Error closing browser context for ID %s: %s", registry_id, e)

        return BeautifulSoup(html, "html.parser")

    async def close(self) -> None:
        async with self._lock:
            if self._browser is not None:
                await self._browser.close()
                self._browser = None
            if self._playwright is not None:
                await self._playwright.stop()
                self._playwright = None


class HttpDocumentSource:
    """Fetch registry pages with a plain HTTP GET (no script execution)."""

    def __init__(
        self,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.settings = settings
        self._client = httpx.AsyncClient(
            timeout=settings.registry_navigation_timeout,
            headers={"User-Agent": settings.registry_user_agent},
            follow_redirects=True,
            transport=transport,
        )

    async def fetch_document(self, registry_id: str) -> BeautifulSoup:
        url = build_registry_url(self.settings, registry_id)
        try:
            resp = await self._client.get(url)
        except httpx.RequestError as e:
            raise RegistryUnavailable(
                registry_id, f"Failed to reach registry for ID {registry_id}: {e}"
            ) from e

        if resp.status_code == 404:
            raise RecordNotFound(registry_id, f"ID {registry_id} not found in registry")
        if resp.status_code != 200:
            raise RegistryUnavailable(
                registry_id,
                f"Registry returned status {resp.status_code} for ID {registry_id}",
            )
        return BeautifulSoup(resp.text, "html.parser")

    async def close(self) -> None:
        await self._client.aclose()


def build_document_source(settings: Settings) -> DocumentSource:
    """Create the document source selected by ``registry_renderer``."""
    if settings.registry_renderer == "http":
        return HttpDocumentSource(settings)
    return BrowserDocumentSource(settings)
