from __future__ import annotations

import logging

from ..context import SetupContext
from ..errors import StepWarning
from ..lib.ssh import auth_succeeds, copy_to_clipboard, find_private_key, find_public_key, generate_key, open_url
from ..pipeline import Check

logger = logging.getLogger(__name__)


def _key_names(ctx: SetupContext) -> list[str]:
    return list(ctx.config.ssh.get("key_names") or ["id_rsa", "id_dsa"])


class SshKeyStep:
    step_id = "10_ssh_key"
    required = False

    def check(self, ctx: SetupContext) -> Check:
        key = find_private_key(ctx.ssh_dir, _key_names(ctx))
        if key is None:
            return Check.unsatisfied("no ssh key")
        return Check.satisfied(str(key))

    def apply(self, ctx: SetupContext) -> None:
        key = ctx.ssh_dir / "id_rsa"
        generate_key(ctx.cmd, key)
        logger.info("Generated an rsa ssh key at %s", key, extra={"badge": "OK"})


class SshAuthStep:
    """Make sure the public key is registered with the code host.

    Interactive loop: [o]pen the registration page, [c]opy the public key,
    [t]est again, or [s]kip. The check already failed once, so one more
    failed test ends the loop with a warning. Unattended runs test once.
    """

    step_id = "12_ssh_auth"
    required = False

    def _host(self, ctx: SetupContext) -> str:
        return str(ctx.config.ssh.get("host") or "git@github.com")

    def check(self, ctx: SetupContext) -> Check:
        return Check.of(auth_succeeds(ctx.cmd, self._host(ctx)), self._host(ctx))

    def apply(self, ctx: SetupContext) -> None:
        ssh = ctx.config.ssh
        service = str(ssh.get("service_name") or "the code host")
        url = str(ssh.get("registration_url") or "")

        print(f"{service}'s ssh auth didn't seem to work. Let's add your public key to {service}.")
        if ssh.get("instruction"):
            print(f"  {ssh['instruction']}")
        print(f"  o. open {service} on the web")
        print("  c. copy your public key to your clipboard")
        print(f"  t. test ssh auth for {service}")
        print(f"  s. skip ssh setup for {service}")

        while True:
            choice = ctx.prompter.choose("o|c|t|s)", ["o", "c", "t", "s"], default="t")
            if choice == "o":
                logger.info("Opening %s's webpage to register your key", service)
                open_url(ctx.cmd, ctx.platform, url)
            elif choice == "c":
                pub = find_public_key(ctx.ssh_dir, _key_names(ctx))
                if pub is None:
                    raise StepWarning("no ssh public keys found")
                copy_to_clipboard(ctx.cmd, ctx.platform, pub.read_text(encoding="utf-8"))
                logger.info("Copied %s to your clipboard", pub.name)
            elif choice == "s":
                raise StepWarning(f"skipping {service} ssh registration")
            else:
                if auth_succeeds(ctx.cmd, self._host(ctx)):
                    logger.info("%s ssh auth succeeded!", service, extra={"badge": "OK"})
                    return
                raise StepWarning(f"Still no luck with {service} ssh auth. Ask a dev!")
