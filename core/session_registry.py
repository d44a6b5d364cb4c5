"""Session Registry - Single Authority for "which session belongs to whom"

Mirrors BrowserSessionManager's session table, keyed by worker identity
instead of free-form session ids.

RESPONSIBILITY:
- Hold at most one BrowserSession per worker key
- Refuse a second registration for the same key
- Hand back / drop entries on request

DOES NOT:
- Create or close any browser resource (SessionLifecycleOrchestrator's job)
- Share sessions between workers

INVARIANT: key -> session is one-to-one. Entries only appear once a session
is fully initialised and disappear when it is released.
"""

import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Hashable, List, Optional

from core.engine_selector import EngineVariant
from core.exceptions import SessionAlreadyActiveError, SessionUsageError


class SessionState(str, Enum):
    UNINITIALIZED = "uninitialized"
    ENGINE_READY = "engine_ready"
    BROWSER_LAUNCHED = "browser_launched"
    CONTEXT_CREATED = "context_created"
    TRACING_STARTED = "tracing_started"
    PAGE_READY = "page_ready"
    TEARING_DOWN = "tearing_down"
    CLOSED = "closed"


# Forward path walked by acquire(), one stage at a time
STARTUP_ORDER = (
    SessionState.UNINITIALIZED,
    SessionState.ENGINE_READY,
    SessionState.BROWSER_LAUNCHED,
    SessionState.CONTEXT_CREATED,
    SessionState.TRACING_STARTED,
    SessionState.PAGE_READY,
)


@dataclass
class BrowserSession:
    """One worker's chain of browser resources.

    Handles are typed loosely (Any) so the engine layer stays swappable.
    Creation order: engine -> browser -> context -> tracing -> page.
    Release order is the exact reverse.
    """
    owner: Hashable
    variant: Optional[EngineVariant] = None
    engine: Any = None  # AbstractEngineHost
    browser: Any = None  # Playwright Browser
    context: Any = None  # Playwright BrowserContext
    page: Any = None  # Playwright Page
    tracing_active: bool = False
    headless: bool = False
    state: SessionState = SessionState.UNINITIALIZED
    history: List[SessionState] = field(default_factory=list, repr=False)

    def advance(self, new_state: SessionState) -> None:
        """Move to new_state, refusing any skipped or backwards stage.

        Startup moves exactly one step along STARTUP_ORDER. TEARING_DOWN may
        be entered from any started state (full release or rollback), and
        CLOSED only from TEARING_DOWN.
        """
        current = self.state
        if new_state == SessionState.TEARING_DOWN:
            allowed = current not in (SessionState.TEARING_DOWN, SessionState.CLOSED)
        elif new_state == SessionState.CLOSED:
            allowed = current == SessionState.TEARING_DOWN
        elif current in STARTUP_ORDER and new_state in STARTUP_ORDER:
            allowed = STARTUP_ORDER.index(new_state) == STARTUP_ORDER.index(current) + 1
        else:
            allowed = False

        if not allowed:
            raise SessionUsageError(
                f"Illegal session transition {current.value} -> {new_state.value}"
            )
        self.history.append(current)
        self.state = new_state

    def is_ready(self) -> bool:
        return self.state == SessionState.PAGE_READY and self.page is not None


def current_worker() -> Hashable:
    """Default worker identity: the calling thread."""
    return threading.get_ident()


class SessionRegistry:
    """Worker-keyed session table.

    Every worker only ever touches its own key, so entries never race. The
    lock only guards the dict itself during insert/remove.
    """

    def __init__(self, key_func: Optional[Callable[[], Hashable]] = None):
        self._key_func = key_func or current_worker
        self._sessions: Dict[Hashable, BrowserSession] = {}
        self._lock = threading.Lock()

    def key(self) -> Hashable:
        """Identity of the calling worker."""
        return self._key_func()

    def register(self, session: BrowserSession, key: Optional[Hashable] = None) -> None:
        key = self.key() if key is None else key
        with self._lock:
            if key in self._sessions:
                raise SessionAlreadyActiveError(
                    f"Worker {key} already owns a live browser session"
                )
            self._sessions[key] = session

    def lookup(self, key: Optional[Hashable] = None) -> Optional[BrowserSession]:
        key = self.key() if key is None else key
        return self._sessions.get(key)

    def remove(self, key: Optional[Hashable] = None) -> Optional[BrowserSession]:
        key = self.key() if key is None else key
        with self._lock:
            return self._sessions.pop(key, None)

    def __contains__(self, key: Hashable) -> bool:
        return key in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)

    def list_sessions(self) -> Dict[Hashable, Dict[str, Any]]:
        """List registered sessions (for debugging)."""
        with self._lock:
            items = list(self._sessions.items())
        return {
            key: {
                "browser": s.variant.launcher_name if s.variant else None,
                "channel": s.variant.channel if s.variant else None,
                "headless": s.headless,
                "state": s.state.value,
            }
            for key, s in items
        }
