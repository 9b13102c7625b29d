from __future__ import annotations

import logging

from ..context import SetupContext
from ..pipeline import Check

logger = logging.getLogger(__name__)


class SudoStep:
    """Ask for the password once, up front, so later steps don't stop halfway."""

    step_id = "08_sudo"
    required = True

    def check(self, ctx: SetupContext) -> Check:
        if not ctx.config.use_sudo:
            return Check.satisfied("sudo disabled")
        return Check.of(ctx.cmd.probe(["sudo", "-n", "true"]).ok, "cached sudo credentials")

    def apply(self, ctx: SetupContext) -> None:
        logger.info("This setup script needs your password to install things as root.")
        ctx.cmd.run(["sudo", "-v"], interactive=True)
