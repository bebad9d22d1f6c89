"""
User-agent classification for visitor analytics.

Order matters in every table below: the first match wins
(e.g. Chrome user agents also contain "Safari").
"""

from __future__ import annotations

import re
from typing import Final, Tuple

_TABLET_RE: Final = re.compile(r"(tablet|ipad|playbook|silk)|(android(?!.*mobi))", re.IGNORECASE)
_MOBILE_RE: Final = re.compile(
    r"Mobile|Android|iP(hone|od)|IEMobile|BlackBerry|Kindle|Silk-Accelerated"
    r"|(hpw|web)OS|Opera M(obi|ini)"
)

_BROWSERS: Final[Tuple[Tuple[Tuple[str, ...], str], ...]] = (
    (("Firefox",), "Firefox"),
    (("SamsungBrowser",), "Samsung Internet"),
    (("Opera", "OPR"), "Opera"),
    (("Trident",), "Internet Explorer"),
    (("Edge",), "Edge"),
    (("Chrome",), "Chrome"),
    (("Safari",), "Safari"),
)

_OPERATING_SYSTEMS: Final[Tuple[Tuple[str, str], ...]] = (
    ("Win", "Windows"),
    ("Android", "Android"),
    ("like Mac", "iOS"),
    ("Mac", "MacOS"),
    ("Linux", "Linux"),
)


def classify_device(user_agent: str) -> str:
    """Return 'tablet', 'mobile' or 'desktop'."""
    if _TABLET_RE.search(user_agent):
        return "tablet"
    if _MOBILE_RE.search(user_agent):
        return "mobile"
    return "desktop"


def browser_name(user_agent: str) -> str:
    for markers, name in _BROWSERS:
        if any(marker in user_agent for marker in markers):
            return name
    return "Unknown"


def os_name(user_agent: str) -> str:
    for marker, name in _OPERATING_SYSTEMS:
        if marker in user_agent:
            return name
    return "Unknown"
