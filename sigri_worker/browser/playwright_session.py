import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from playwright.sync_api import Download as PlaywrightDownload
from playwright.sync_api import Locator as PlaywrightLocator
from playwright.sync_api import Page
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError
from playwright.sync_api import sync_playwright

from sigri_worker.browser.locators import Locator
from sigri_worker.config import Settings
from sigri_worker.core.config import BROWSER_ARGS, CERT_ORIGIN

logger = logging.getLogger(__name__)


class PlaywrightElement:
    def __init__(self, locator: PlaywrightLocator):
        self._locator = locator

    def click(self, timeout_ms: int) -> None:
        self._locator.click(timeout=timeout_ms)

    def fill(self, value: str) -> None:
        self._locator.fill(value)

    def press(self, key: str) -> None:
        self._locator.press(key)


class PlaywrightSession:
    """BrowserSession backed by one Playwright page."""

    def __init__(self, page: Page):
        self.page = page

    def goto(self, url: str) -> None:
        self.page.goto(url, wait_until="domcontentloaded")

    def pause(self, ms: int) -> None:
        self.page.wait_for_timeout(ms)

    def find(self, locator: Locator, timeout_ms: int) -> Optional[PlaywrightElement]:
        target = self._resolve(locator).first
        try:
            target.wait_for(state="visible", timeout=timeout_ms)
        except PlaywrightTimeoutError:
            return None
        return PlaywrightElement(target)

    def click_at(self, x: int, y: int) -> None:
        self.page.mouse.click(x, y)

    def download(self, trigger: PlaywrightElement, timeout_ms: int) -> Optional[PlaywrightDownload]:
        try:
            with self.page.expect_download(timeout=timeout_ms) as info:
                trigger.click(timeout_ms)
        except PlaywrightTimeoutError:
            return None
        return info.value

    def screenshot(self, path: str) -> None:
        self.page.screenshot(path=path, full_page=True)

    def _resolve(self, locator: Locator) -> PlaywrightLocator:
        if locator.kind == "text":
            return self.page.get_by_text(locator.value, exact=locator.exact)
        if locator.kind == "role":
            return self.page.get_by_role(locator.value, name=locator.name, exact=locator.exact)
        return self.page.locator(locator.value)


def _client_certificates(settings: Settings) -> list:
    if not settings.ONR_PFX_PATH:
        return []
    cert = {"origin": CERT_ORIGIN, "pfxPath": settings.ONR_PFX_PATH}
    if settings.ONR_PFX_PASSWORD:
        cert["passphrase"] = settings.ONR_PFX_PASSWORD
    return [cert]


@contextmanager
def open_browser_session(settings: Settings) -> Iterator[PlaywrightSession]:
    """Launch Chromium for one run and close it on every exit path."""
    with sync_playwright() as pw:
        browser = pw.chromium.launch(headless=settings.BROWSER_HEADLESS, args=BROWSER_ARGS)
        try:
            context_kwargs = {"accept_downloads": True}
            certificates = _client_certificates(settings)
            if certificates:
                context_kwargs["client_certificates"] = certificates
            context = browser.new_context(**context_kwargs)
            page = context.new_page()
            page.set_default_timeout(settings.BROWSER_TIMEOUT_MS)
            yield PlaywrightSession(page)
        finally:
            browser.close()
            logger.debug("Browser closed")
