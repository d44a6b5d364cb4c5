"""Engine Selector - maps a configured browser name to an engine variant.

Pure mapping. No side effects, no launching.

Unknown names fall back to plain chromium. This is a permissive policy,
not an error path.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class EngineFamily(str, Enum):
    """Browser engine families supported by the automation library."""
    CHROMIUM = "chromium"
    WEBKIT = "webkit"
    GECKO = "firefox"


@dataclass(frozen=True)
class EngineVariant:
    """Resolved family/channel pairing used to launch a browser."""
    family: EngineFamily
    channel: Optional[str] = None

    @property
    def launcher_name(self) -> str:
        """Attribute name of the matching browser type on the engine host."""
        return self.family.value


# Browser names accepted in config (case-insensitive)
CHROMIUM = "chromium"
CHROME = "chrome"
EDGE = "edge"
WEBKIT = "webkit"
FIREFOX = "firefox"

DEFAULT_VARIANT = EngineVariant(EngineFamily.CHROMIUM)

_VARIANTS = {
    CHROMIUM: DEFAULT_VARIANT,
    CHROME: EngineVariant(EngineFamily.CHROMIUM, channel="chrome"),
    EDGE: EngineVariant(EngineFamily.CHROMIUM, channel="msedge"),
    WEBKIT: EngineVariant(EngineFamily.WEBKIT),
    FIREFOX: EngineVariant(EngineFamily.GECKO),
}


def select(name: Optional[str]) -> EngineVariant:
    """Resolve a browser name to its EngineVariant.

    Args:
        name: chromium | chrome | edge | webkit | firefox (any case).
              None or anything else resolves to plain chromium.
    """
    if not name:
        return DEFAULT_VARIANT
    return _VARIANTS.get(name.strip().lower(), DEFAULT_VARIANT)
