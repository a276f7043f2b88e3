from .locators import Locator, by_css, by_role, by_text, first_match, iter_matches
from .session import BrowserSession, Download, Element

__all__ = [
    "BrowserSession",
    "Download",
    "Element",
    "Locator",
    "by_css",
    "by_role",
    "by_text",
    "first_match",
    "iter_matches",
]
