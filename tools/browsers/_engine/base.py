"""Abstract Engine Host Interface

Private abstraction layer for the browser automation driver.
NOT a test fixture. NOT used by page objects directly.

RESPONSIBILITY:
- Start/stop the automation driver connection
- Launch a browser process for a resolved EngineVariant

DOES NOT:
- Decide which browser to use (EngineSelector's job)
- Create contexts, traces or pages (SessionLifecycleOrchestrator's job)
- Track sessions (SessionRegistry's job)
"""

from abc import ABC, abstractmethod
from typing import Any, Optional

from core.engine_selector import EngineVariant


class AbstractEngineHost(ABC):
    """Interface for automation driver hosts.

    Implementations:
    - PlaywrightEngine (playwright.py)

    One instance per worker thread. All methods are synchronous and block
    the calling worker.
    """

    @abstractmethod
    def start(self) -> None:
        """Start or attach to the automation driver."""
        raise NotImplementedError

    @abstractmethod
    def launch(
        self,
        variant: EngineVariant,
        headless: bool = False,
        downloads_path: Optional[str] = None
    ) -> Any:
        """Launch a browser process and return its handle.

        Args:
            variant: Resolved engine family + optional channel
            headless: Run without a visible window
            downloads_path: Directory for downloaded files (None = driver default)

        Returns:
            Browser handle exposing new_context() and close()
        """
        raise NotImplementedError

    @abstractmethod
    def shutdown(self) -> None:
        """Stop the automation driver. Must be safe to call twice."""
        raise NotImplementedError
