from __future__ import annotations

import logging

from ..context import SetupContext
from ..errors import FatalError
from ..lib.git import config_get, config_set_global
from ..pipeline import Check

logger = logging.getLogger(__name__)


class GitUserNameStep:
    step_id = "42_git_user_name"
    required = True

    def check(self, ctx: SetupContext) -> Check:
        name = config_get(ctx.cmd, "user.name")
        return Check.of(bool(name), name or "user.name unset")

    def apply(self, ctx: SetupContext) -> None:
        name = ctx.prompter.ask("Enter your full name (First Last)")
        if not name:
            raise FatalError(
                "git user.name is not set",
                remediation="run: git config --global user.name 'First Last'",
            )
        config_set_global(ctx.cmd, "user.name", name)


class KacloneEmailStep:
    """A sticky default email for ka-clone; every clone below passes it along."""

    step_id = "42_kaclone_email"
    required = True

    def check(self, ctx: SetupContext) -> Check:
        email = config_get(ctx.cmd, "kaclone.email")
        return Check.of(bool(email), email or "kaclone.email unset")

    def apply(self, ctx: SetupContext) -> None:
        domain = ctx.config.email_domain
        user = ctx.env.get("USER") or ""
        emailuser = ctx.prompter.ask(f"Enter your work email, without the @{domain}", default=user)
        if not emailuser:
            raise FatalError(
                "No email given for kaclone.email",
                remediation=f"run: git config --global kaclone.email you@{domain}",
            )
        email = emailuser if "@" in emailuser else f"{emailuser}@{domain}"
        config_set_global(ctx.cmd, "kaclone.email", email)
        logger.info("Setting kaclone default email to %s", email)
