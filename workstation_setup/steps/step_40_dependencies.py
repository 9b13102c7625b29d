from __future__ import annotations

import logging

from ..context import SetupContext
from ..errors import FatalError
from ..lib.git import git_version
from ..lib.versions import at_least
from ..pipeline import Check

logger = logging.getLogger(__name__)


class DependenciesStep:
    """Tools the rest of the run needs and cannot install itself."""

    step_id = "40_dependencies"
    required = True

    def _git_ok(self, ctx: SetupContext) -> bool:
        return at_least(git_version(ctx.cmd), ctx.config.git_min_version)

    def check(self, ctx: SetupContext) -> Check:
        if not self._git_ok(ctx):
            return Check.unsatisfied(f"git >= {ctx.config.git_min_version} not found")
        if ctx.cmd.which("npm") is None:
            return Check.unsatisfied("npm not found")
        return Check.satisfied("git, npm")

    def apply(self, ctx: SetupContext) -> None:
        if not self._git_ok(ctx):
            raise FatalError(
                f"Must have git >= {ctx.config.git_min_version}",
                remediation="see http://git-scm.com/downloads",
            )
        raise FatalError(
            "npm not found",
            remediation="install the platform binaries (node, npm) first",
        )
