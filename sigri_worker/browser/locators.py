from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterator, Literal, Optional, Sequence, Tuple

if TYPE_CHECKING:
    from sigri_worker.browser.session import BrowserSession, Element

LocatorKind = Literal["text", "role", "css"]


@dataclass(frozen=True)
class Locator:
    """One way of finding an element on the page."""
    kind: LocatorKind
    value: str
    exact: bool = False
    name: Optional[str] = None

    def describe(self) -> str:
        if self.kind == "role":
            return f"role={self.value} name={self.name!r}"
        return f"{self.kind}={self.value!r}{' (exact)' if self.exact else ''}"


def by_text(text: str, exact: bool = False) -> Locator:
    return Locator("text", text, exact=exact)


def by_role(role: str, name: Optional[str] = None, exact: bool = False) -> Locator:
    return Locator("role", role, exact=exact, name=name)


def by_css(selector: str) -> Locator:
    return Locator("css", selector)


def iter_matches(
    session: "BrowserSession", locators: Sequence[Locator], timeout_ms: int
) -> Iterator[Tuple[Locator, "Element"]]:
    """Yield visible matches in priority order, skipping locators that find nothing."""
    for locator in locators:
        element = session.find(locator, timeout_ms)
        if element is not None:
            yield locator, element


def first_match(
    session: "BrowserSession", locators: Sequence[Locator], timeout_ms: int
) -> Optional[Tuple[Locator, "Element"]]:
    """First locator in the chain that finds a visible element, or None."""
    return next(iter_matches(session, locators, timeout_ms), None)
