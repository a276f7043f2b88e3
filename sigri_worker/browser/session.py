from typing import Optional, Protocol

from sigri_worker.browser.locators import Locator


class Element(Protocol):
    def click(self, timeout_ms: int) -> None: ...

    def fill(self, value: str) -> None: ...

    def press(self, key: str) -> None: ...


class Download(Protocol):
    @property
    def suggested_filename(self) -> str: ...

    def save_as(self, path: str) -> None: ...


class BrowserSession(Protocol):
    """What the extraction steps need from a headless browser.

    Every wait is bounded by the timeout the caller passes in; "absent" is
    reported as ``None`` rather than as an exception.
    """

    def goto(self, url: str) -> None: ...

    def pause(self, ms: int) -> None: ...

    def find(self, locator: Locator, timeout_ms: int) -> Optional[Element]: ...

    def click_at(self, x: int, y: int) -> None: ...

    def download(self, trigger: Element, timeout_ms: int) -> Optional[Download]: ...

    def screenshot(self, path: str) -> None: ...
