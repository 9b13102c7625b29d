from __future__ import annotations

import re
from typing import Optional, Tuple

_VERSION_RE = re.compile(r"(\d+)\.(\d+)(?:\.(\d+))?")

Version = Tuple[int, ...]


def parse_version(text: str) -> Optional[Version]:
    """First dotted version found in text: 'git version 2.24.3 (Apple Git-128)' -> (2, 24, 3)."""

    m = _VERSION_RE.search(text or "")
    if not m:
        return None
    return tuple(int(g) for g in m.groups() if g is not None)


def at_least(found: Optional[Version], minimum: str) -> bool:
    want = parse_version(minimum)
    if found is None or want is None:
        return False
    width = max(len(found), len(want))
    return found + (0,) * (width - len(found)) >= want + (0,) * (width - len(want))
