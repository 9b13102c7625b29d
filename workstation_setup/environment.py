from __future__ import annotations

import logging
import os
from typing import Dict, List, Mapping, Optional

logger = logging.getLogger(__name__)


class Environment:
    """Environment variables a run reads and extends.

    Only ever grows: PATH entries are added when absent and variables introduced
    by steps are exported on top of what the user already has. Nothing is removed.
    """

    def __init__(self, base: Optional[Mapping[str, str]] = None) -> None:
        self._vars: Dict[str, str] = dict(os.environ if base is None else base)

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self._vars.get(key, default)

    def __contains__(self, key: str) -> bool:
        return key in self._vars

    def as_dict(self) -> Dict[str, str]:
        return dict(self._vars)

    @property
    def path_entries(self) -> List[str]:
        raw = self._vars.get("PATH", "")
        return [p for p in raw.split(os.pathsep) if p]

    def add_path(self, entry: str, *, front: bool = False) -> bool:
        """Add a PATH entry if it is not already present. Returns True if added."""

        entries = self.path_entries
        if entry in entries:
            return False
        entries = [entry, *entries] if front else [*entries, entry]
        self._vars["PATH"] = os.pathsep.join(entries)
        logger.debug("PATH += %s (front=%s)", entry, front)
        return True

    def export(self, key: str, value: str) -> None:
        """Set a variable introduced by a step (e.g. VIRTUAL_ENV after activation)."""

        if self._vars.get(key) != value:
            logger.debug("export %s=%s", key, value)
        self._vars[key] = value
