"""Base page object - thin interaction primitives over a session page.

Page objects subclass BasePage and add selectors. BasePage itself knows
nothing about any application.

ARCHITECTURAL CONSTRAINTS:
- The page comes from the calling worker's session (or is injected)
- Every primitive performs exactly ONE attempt (no retries)
- Failures propagate to the test, except is_visible() which answers False
"""

import logging
from typing import Any, Optional

from core.config_provider import ConfigSnapshot


DEFAULT_TIMEOUT_MS = 5000


class BasePage:
    """Selector-level primitives shared by all page objects.

    Args:
        page: Playwright Page. Defaults to the calling worker's current page.
        config: Snapshot used for base.url. Defaults to the orchestrator's.
    """

    def __init__(self, page: Any = None, config: Optional[ConfigSnapshot] = None):
        if page is None or config is None:
            from core.session_lifecycle import SessionLifecycleOrchestrator
            lifecycle = SessionLifecycleOrchestrator.get()
            if page is None:
                page = lifecycle.current_page()
            if config is None:
                config = lifecycle.config
        self.page = page
        self.config = config

    def url_for(self, path: str = "") -> str:
        """Join base.url and path with exactly one slash."""
        base_url = (self.config.get_property("base.url") or "").rstrip("/")
        if not path:
            return base_url
        return f"{base_url}/{path.lstrip('/')}"

    def navigate(self, url: str) -> None:
        """Navigate and wait until the network is idle."""
        self.page.goto(url, wait_until="networkidle")
        logging.info(f"Navigated to: {url}")

    def click(self, selector: str) -> None:
        self.page.locator(selector).click()
        logging.info(f"Clicked element: {selector}")

    def fill(self, selector: str, value: str) -> None:
        self.page.locator(selector).fill(value)

    def clear(self, selector: str) -> None:
        self.page.locator(selector).clear()

    def clear_and_fill(self, selector: str, value: str) -> None:
        self.clear(selector)
        self.fill(selector, value)

    def get_inner_text(self, selector: str) -> str:
        return self.page.locator(selector).inner_text()

    def is_visible(self, selector: str, timeout_ms: float = DEFAULT_TIMEOUT_MS) -> bool:
        """Wait up to timeout_ms for selector to become visible.

        Single wait, no retries. A timeout answers False instead of raising.
        """
        try:
            self.page.wait_for_selector(selector, state="visible", timeout=timeout_ms)
            return True
        except Exception as e:
            logging.info(f"Element not visible within {timeout_ms}ms: {selector} ({e})")
            return False

    def get_title(self) -> str:
        return self.page.title()
