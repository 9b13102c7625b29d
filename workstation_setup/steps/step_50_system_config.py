from __future__ import annotations

import logging
from pathlib import Path

from ..context import SetupContext
from ..lib.git import config_get, config_set_global
from ..lib.sysfiles import write_system_file
from ..pipeline import Check

logger = logging.getLogger(__name__)


class MimeTypesStep:
    """Teach the system mime.types about our static asset extensions.

    Avoids "Cannot guess mime-type ... Using application/octet-stream" spew
    when deploying.
    """

    step_id = "50_mime_types"
    required = False

    def _path(self, ctx: SetupContext) -> Path:
        return Path(str(ctx.config.system.get("mime_types_path") or "/usr/local/etc/mime.types"))

    def _line(self, ctx: SetupContext) -> str:
        return str(ctx.config.system.get("mime_types_line") or "")

    def _marker(self, ctx: SetupContext) -> str:
        # "application/octet-stream  less eot ..." -> "less eot"
        return " ".join(self._line(ctx).split()[1:3])

    def check(self, ctx: SetupContext) -> Check:
        path = self._path(ctx)
        if not path.exists():
            return Check.unsatisfied(f"{path} missing")
        try:
            lines = path.read_text(encoding="utf-8").splitlines()
        except OSError as e:
            return Check.indeterminate(str(e))
        return Check.of(self._line(ctx) in lines, str(path))

    def apply(self, ctx: SetupContext) -> None:
        path = self._path(ctx)
        marker = self._marker(ctx)
        kept = []
        if path.exists():
            # Replace any older version of our line.
            kept = [l for l in path.read_text(encoding="utf-8").splitlines() if marker not in l]
        text = "\n".join([*kept, self._line(ctx)]) + "\n"
        write_system_file(ctx.cmd, path, text, use_sudo=ctx.config.use_sudo)


class GitExcludesStep:
    """Point git at a global ignore file unless the user configured one."""

    step_id = "50_git_excludes"
    required = False

    def check(self, ctx: SetupContext) -> Check:
        value = config_get(ctx.cmd, "core.excludesfile", scope="global")
        return Check.of(bool(value), value or "core.excludesfile unset")

    def apply(self, ctx: SetupContext) -> None:
        config_set_global(ctx.cmd, "core.excludesfile", str(ctx.root / ".gitignore"))
