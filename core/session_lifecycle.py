"""Session Lifecycle Orchestrator - Single Authority for Session Startup/Teardown

Mirrors the BrowserSessionManager pattern, scoped per worker thread.

RESPONSIBILITY:
- Bring up engine -> browser -> context -> tracing -> page, in that order
- Publish the ready page to the calling worker
- Tear everything down in reverse order, saving the trace artifact
- Roll back whatever was created when acquire() fails part way

DOES NOT:
- Decide browser settings (ConfigProvider / EngineSelector do that)
- Know about selectors or UI actions (page objects do that)
- Share anything between workers

Usage:
    lifecycle = SessionLifecycleOrchestrator.get()
    page = lifecycle.acquire()
    ...
    lifecycle.release("test_login")
"""

import logging
import re
import time
from dataclasses import dataclass, field
from pathlib import Path
from threading import Lock
from typing import Any, Callable, Hashable, List, Optional

from core import engine_selector
from core.config_provider import ConfigProvider, ConfigSnapshot
from core.exceptions import (
    NoActiveSessionError,
    SessionAcquireError,
    SessionAlreadyActiveError,
)
from core.session_registry import BrowserSession, SessionRegistry, SessionState


DEFAULT_TRACES_DIR = "traces"
TRACE_SUFFIX = ".zip"


@dataclass
class TeardownFailure:
    """One teardown step that raised."""
    step: str
    error: BaseException

    def __str__(self):
        return f"{self.step}: {self.error}"


@dataclass
class TeardownReport:
    """Outcome of a best-effort teardown.

    Every step is attempted regardless of earlier failures. Failures are
    collected here instead of being raised.
    """
    owner: Hashable
    attempted: List[str] = field(default_factory=list)
    failures: List[TeardownFailure] = field(default_factory=list)
    trace_path: Optional[Path] = None

    @property
    def ok(self) -> bool:
        return not self.failures


def _default_engine_factory():
    from tools.browsers._engine.playwright import PlaywrightEngine
    return PlaywrightEngine()


def _safe_label(label: str) -> str:
    """Make a test label usable as a file name component."""
    cleaned = re.sub(r"[^\w.\-]+", "_", label or "").strip("_")
    return cleaned or "session"


class SessionLifecycleOrchestrator:
    """Per-worker browser session lifecycle.

    Each worker thread owns at most one session at a time. Handles created
    by one worker are never touched by another.

    Args:
        config: Injected snapshot. Defaults to ConfigProvider.get() on first use.
        engine_factory: Zero-arg callable returning an AbstractEngineHost.
        registry: Session table. Defaults to a thread-keyed SessionRegistry.
        clock: Returns epoch seconds; used for trace file names.
    """

    _instance: Optional["SessionLifecycleOrchestrator"] = None
    _instance_lock = Lock()

    def __init__(
        self,
        config: Optional[ConfigSnapshot] = None,
        engine_factory: Optional[Callable[[], Any]] = None,
        registry: Optional[SessionRegistry] = None,
        clock: Optional[Callable[[], float]] = None,
    ):
        self._config = config
        self._engine_factory = engine_factory or _default_engine_factory
        self._registry = registry or SessionRegistry()
        self._clock = clock or time.time
        self._stamp_lock = Lock()
        self._last_stamp = 0

    @classmethod
    def get(cls) -> "SessionLifecycleOrchestrator":
        """Get the process-wide orchestrator."""
        if cls._instance is None:
            with cls._instance_lock:
                if cls._instance is None:
                    cls._instance = cls()
        return cls._instance

    @classmethod
    def install(cls, orchestrator: "SessionLifecycleOrchestrator") -> None:
        """Replace the process-wide orchestrator (fixtures, tests)."""
        with cls._instance_lock:
            cls._instance = orchestrator

    @classmethod
    def reset(cls) -> None:
        """Forget the process-wide orchestrator (for testing)."""
        with cls._instance_lock:
            cls._instance = None

    @property
    def config(self) -> ConfigSnapshot:
        if self._config is None:
            self._config = ConfigProvider.get()
        return self._config

    @property
    def registry(self) -> SessionRegistry:
        return self._registry

    # =========================================================================
    # ACQUIRE
    # =========================================================================

    def acquire(self) -> Any:
        """Bring up a fresh session for the calling worker and return its page.

        Raises:
            SessionAlreadyActiveError: caller already owns a session
            ConfigLoadError: configuration unusable (fatal, nothing created)
            SessionAcquireError: a stage failed; earlier stages rolled back
        """
        key = self._registry.key()
        if self._registry.lookup(key) is not None:
            raise SessionAlreadyActiveError(
                f"Worker {key} already owns a browser session; release() it first"
            )

        config = self.config
        variant = engine_selector.select(config.get_property("browser"))
        headless = config.get_bool("headless", default=False)
        downloads_path = config.get_property("downloads.path")

        session = BrowserSession(owner=key, variant=variant, headless=headless)
        stage = "engine"
        try:
            session.engine = self._engine_factory()
            session.engine.start()
            session.advance(SessionState.ENGINE_READY)

            stage = "browser"
            session.browser = session.engine.launch(
                variant,
                headless=headless,
                downloads_path=downloads_path
            )
            session.advance(SessionState.BROWSER_LAUNCHED)

            stage = "context"
            session.context = session.browser.new_context()
            session.advance(SessionState.CONTEXT_CREATED)

            stage = "tracing"
            session.context.tracing.start(screenshots=True, snapshots=True, sources=True)
            session.tracing_active = True
            session.advance(SessionState.TRACING_STARTED)

            stage = "page"
            session.page = session.context.new_page()
            session.advance(SessionState.PAGE_READY)
        except Exception as e:
            logging.error(f"Session acquire failed at '{stage}' for worker {key}: {e}")
            report = self._teardown(session, trace_label=None)
            for failure in report.failures:
                logging.warning(f"Rollback step failed for worker {key}: {failure}")
            raise SessionAcquireError(
                stage,
                f"Browser session startup failed: {e}",
                rollback_errors=report.failures
            ) from e
        except BaseException:
            # Interrupts (KeyboardInterrupt, test timeouts) still roll back, then propagate as-is
            logging.error(f"Session acquire interrupted at '{stage}' for worker {key}")
            self._teardown(session, trace_label=None)
            raise

        self._registry.register(session, key)
        logging.info(
            f"Browser session ready for worker {key} "
            f"({variant.launcher_name}, channel={variant.channel}, headless={headless})"
        )
        return session.page

    # =========================================================================
    # ACCESSORS
    # =========================================================================

    def current_session(self) -> BrowserSession:
        session = self._registry.lookup()
        if session is None:
            raise NoActiveSessionError(
                f"No browser session registered for worker {self._registry.key()}"
            )
        return session

    def current_page(self) -> Any:
        """Page owned by the calling worker. Page objects call this."""
        return self.current_session().page

    def has_session(self) -> bool:
        return self._registry.lookup() is not None

    # =========================================================================
    # RELEASE
    # =========================================================================

    def release(self, label: str) -> TeardownReport:
        """Tear down the calling worker's session and save its trace.

        Best effort: every step runs even if an earlier one failed, and the
        registry entry is always removed. Teardown failures are logged and
        returned in the report, never raised.

        Raises:
            NoActiveSessionError: caller has no registered session
        """
        key = self._registry.key()
        session = self._registry.lookup(key)
        if session is None:
            raise NoActiveSessionError(
                f"release('{label}') called but worker {key} has no browser session"
            )

        try:
            report = self._teardown(session, trace_label=label)
        finally:
            self._registry.remove(key)

        for failure in report.failures:
            logging.warning(f"Teardown step failed for '{label}' (worker {key}): {failure}")
        logging.info(
            f"Released browser session for '{label}' "
            f"(trace={report.trace_path}, failures={len(report.failures)})"
        )
        return report

    def _teardown(self, session: BrowserSession, trace_label: Optional[str]) -> TeardownReport:
        """Release handles in reverse creation order.

        trace_label=None means rollback: tracing is stopped without writing
        an artifact.
        """
        report = TeardownReport(owner=session.owner)
        session.advance(SessionState.TEARING_DOWN)

        if session.page is not None:
            self._attempt(report, "page", session.page.close)
            session.page = None

        if session.context is not None:
            context = session.context
            if session.tracing_active:
                if trace_label is not None:
                    self._attempt(report, "tracing", lambda: self._save_trace(context, trace_label, report))
                else:
                    self._attempt(report, "tracing", context.tracing.stop)
                session.tracing_active = False
            self._attempt(report, "context", context.close)
            session.context = None

        if session.browser is not None:
            self._attempt(report, "browser", session.browser.close)
            session.browser = None

        if session.engine is not None:
            self._attempt(report, "engine", session.engine.shutdown)
            session.engine = None

        session.advance(SessionState.CLOSED)
        return report

    def _attempt(self, report: TeardownReport, step: str, action: Callable[[], Any]) -> bool:
        report.attempted.append(step)
        try:
            action()
            return True
        except Exception as e:
            report.failures.append(TeardownFailure(step=step, error=e))
            return False

    # =========================================================================
    # TRACE ARTIFACTS
    # =========================================================================

    def _save_trace(self, context: Any, label: str, report: TeardownReport) -> None:
        path = self.trace_path_for(label)
        path.parent.mkdir(parents=True, exist_ok=True)
        context.tracing.stop(path=str(path))
        report.trace_path = path
        logging.info(f"Trace saved: {path}")

    def trace_path_for(self, label: str) -> Path:
        """{traces.dir}/{label}_{epoch-millis}.zip, unique per call.

        Stamps are strictly increasing within the process, and bumped past
        any file already on disk.
        """
        traces_dir = Path(self.config.get_property("traces.dir") or DEFAULT_TRACES_DIR)
        name = _safe_label(label)
        with self._stamp_lock:
            stamp = max(int(self._clock() * 1000), self._last_stamp + 1)
            path = traces_dir / f"{name}_{stamp}{TRACE_SUFFIX}"
            while path.exists():
                stamp += 1
                path = traces_dir / f"{name}_{stamp}{TRACE_SUFFIX}"
            self._last_stamp = stamp
        return path
