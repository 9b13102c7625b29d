from __future__ import annotations

import logging
from pathlib import Path

from ..context import SetupContext
from ..pipeline import Check

logger = logging.getLogger(__name__)


def _python(ctx: SetupContext) -> str:
    return str(ctx.config.python.get("interpreter") or "python3")


class VirtualenvToolStep:
    step_id = "70_virtualenv_tool"
    required = True

    def check(self, ctx: SetupContext) -> Check:
        return Check.of(ctx.cmd.probe([_python(ctx), "-m", "virtualenv", "--version"]).ok, "virtualenv")

    def apply(self, ctx: SetupContext) -> None:
        ctx.cmd.run([_python(ctx), "-m", "pip", "install", "-q", "--user", "virtualenv"])


class VirtualenvStep:
    """Create the shared virtualenv and activate it for every later step."""

    step_id = "70_virtualenv"
    required = True

    def check(self, ctx: SetupContext) -> Check:
        return Check.of((ctx.virtualenv_dir / "bin" / "python").exists(), str(ctx.virtualenv_dir))

    def apply(self, ctx: SetupContext) -> None:
        python = _python(ctx)
        interpreter = ctx.cmd.which(python) or python
        ctx.cmd.run([python, "-m", "virtualenv", "-q", f"--python={interpreter}", str(ctx.virtualenv_dir)])

    def export(self, ctx: SetupContext) -> None:
        ctx.env.export("VIRTUAL_ENV", str(ctx.virtualenv_dir))
        ctx.env.add_path(str(ctx.virtualenv_dir / "bin"), front=True)


class _WebappMakeStep:
    target = ""
    marker_key = ""

    def _marker(self, ctx: SetupContext) -> Path:
        return ctx.webapp_dir / str(ctx.config.webapp_project.get(self.marker_key) or "")

    def check(self, ctx: SetupContext) -> Check:
        return Check.of(self._marker(ctx).exists(), str(self._marker(ctx)))

    def apply(self, ctx: SetupContext) -> None:
        logger.info("Running make %s in %s", self.target, ctx.webapp_dir)
        ctx.cmd.run(["make", self.target], cwd=str(ctx.webapp_dir), interactive=True)


class WebappDepsStep(_WebappMakeStep):
    """Python and npm dependencies of the webapp (needs the virtualenv active)."""

    step_id = "70_webapp_deps"
    required = True
    target = "install_deps"
    marker_key = "deps_marker"


class WebappHooksStep(_WebappMakeStep):
    step_id = "72_webapp_hooks"
    required = False
    target = "hooks"
    marker_key = "hooks_marker"
