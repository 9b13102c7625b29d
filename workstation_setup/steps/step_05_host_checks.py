from __future__ import annotations

import logging

from ..context import SetupContext
from ..errors import FatalError, StepWarning
from ..lib.hostinfo import SUPPORTED_PLATFORMS, macos_version, shell_name
from ..pipeline import Check

logger = logging.getLogger(__name__)


class PlatformSupportStep:
    step_id = "05_platform"
    required = True

    def check(self, ctx: SetupContext) -> Check:
        return Check.of(ctx.platform in SUPPORTED_PLATFORMS, ctx.platform)

    def apply(self, ctx: SetupContext) -> None:
        raise FatalError(
            f"Unsupported platform {ctx.platform!r}",
            remediation=f"run on one of: {', '.join(SUPPORTED_PLATFORMS)}",
        )


class MacVersionStep:
    """Advisory only: newer macOS releases usually work, they are just untested."""

    step_id = "05_macos_version"
    required = False

    def check(self, ctx: SetupContext) -> Check:
        version = macos_version(ctx.cmd)
        if version is None:
            return Check.indeterminate("sw_vers gave no version")
        found = ".".join(str(p) for p in version[:2])
        tested = [str(v) for v in ctx.config.darwin.get("tested_versions") or []]
        return Check.of(found in tested, f"macOS {found}")

    def apply(self, ctx: SetupContext) -> None:
        tested = ctx.config.darwin.get("tested_versions") or []
        newest = tested[-1] if tested else "?"
        raise StepWarning(
            f"This is only tested up to macOS {newest}. If it works on a newer "
            "version, please update the tested versions."
        )


class LoginShellStep:
    step_id = "05_login_shell"
    required = False

    def check(self, ctx: SetupContext) -> Check:
        shell = shell_name(ctx.env.get("SHELL"))
        if shell in ctx.config.supported_shells:
            return Check.satisfied(shell)
        if ctx.env.get("VIRTUAL_ENV"):
            return Check.satisfied(f"{shell or 'unknown shell'} with VIRTUAL_ENV set")
        return Check.unsatisfied(f"login shell is {shell or 'unknown'}")

    def apply(self, ctx: SetupContext) -> None:
        shell = shell_name(ctx.env.get("SHELL")) or "unknown"
        raise StepWarning(
            f"Your default shell is {shell}, not {' or '.join(ctx.config.supported_shells)}. "
            "The installed dotfiles won't be picked up; activate the virtualenv "
            f"({ctx.virtualenv_dir}) from your shell config yourself."
        )
