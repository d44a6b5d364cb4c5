"""Playwright Engine Host Implementation

Implements AbstractEngineHost using Playwright.
Uses the sync API, which is thread-affine: every worker thread gets its
own PlaywrightEngine.

Dependency: playwright
Setup: playwright install chromium firefox webkit
"""

import logging
from typing import Any, Optional

from core.engine_selector import EngineVariant
from .base import AbstractEngineHost


class PlaywrightEngine(AbstractEngineHost):
    """Playwright implementation of the engine host."""

    def __init__(self):
        self._playwright = None
        self._sync_playwright = None

    @property
    def started(self) -> bool:
        return self._playwright is not None

    def start(self) -> None:
        """Start Playwright for the calling thread (idempotent)."""
        if self._playwright is not None:
            return
        try:
            from playwright.sync_api import sync_playwright
        except ImportError:
            raise RuntimeError(
                "Playwright not installed. Run: pip install playwright && playwright install"
            )
        self._sync_playwright = sync_playwright()
        self._playwright = self._sync_playwright.start()
        logging.info("Playwright engine initialized")

    def launch(
        self,
        variant: EngineVariant,
        headless: bool = False,
        downloads_path: Optional[str] = None
    ) -> Any:
        """Launch the browser type matching variant.

        Chrome/Edge are chromium launches with a channel override.
        """
        self.start()

        launcher = getattr(self._playwright, variant.launcher_name)

        launch_opts = {"headless": headless}
        if variant.channel:
            launch_opts["channel"] = variant.channel
        if downloads_path:
            launch_opts["downloads_path"] = downloads_path

        browser = launcher.launch(**launch_opts)
        logging.info(
            f"Launched {variant.launcher_name}"
            f"{f' ({variant.channel})' if variant.channel else ''} (headless={headless})"
        )
        return browser

    def shutdown(self) -> None:
        """Gracefully stop Playwright.

        CRITICAL: sync_playwright().start() MUST be matched with .stop().
        Errors propagate so the caller can record them.
        """
        if self._playwright is None:
            return
        try:
            self._playwright.stop()
            logging.info("Playwright engine stopped")
        finally:
            self._playwright = None
            self._sync_playwright = None
