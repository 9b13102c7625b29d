from __future__ import annotations

import logging
import tempfile
from pathlib import Path
from typing import List

from ..context import SetupContext
from ..errors import StepWarning
from ..lib.dotfiles import LinkState, ensure_symlink, link_state
from ..lib.git import git_version
from ..lib.pkg import brew_has_formula, brew_install, brew_prefix
from ..lib.versions import at_least, parse_version
from ..pipeline import Check

logger = logging.getLogger(__name__)


class GitUpgradeStep:
    step_id = "28_git_upgrade"
    required = False

    def _minimum(self, ctx: SetupContext) -> str:
        return str(ctx.config.darwin.get("git_min_version") or "2.20")

    def check(self, ctx: SetupContext) -> Check:
        version = git_version(ctx.cmd)
        if version is None:
            return Check.unsatisfied("git not found")
        return Check.of(at_least(version, self._minimum(ctx)), "git " + ".".join(map(str, version)))

    def apply(self, ctx: SetupContext) -> None:
        logger.info("Installing an updated version of git using Homebrew")
        brew_install(ctx.cmd, "git")

        if at_least(git_version(ctx.cmd), self._minimum(ctx)):
            return
        r = ctx.cmd.probe(["brew", "ls", "--versions", "git"])
        if r.ok and at_least(parse_version(r.stdout), self._minimum(ctx)):
            raise StepWarning("Git has been updated, but you need to restart your terminal to pick it up.")
        raise StepWarning("Error installing git via brew; download and install it from http://git-scm.com/download/mac")


class NodeVersionStep:
    """We don't force a node version, but make clear which one is supported."""

    step_id = "28_node_version"
    required = False

    def _major(self, ctx: SetupContext) -> int:
        return int(ctx.config.darwin.get("node_major") or 10)

    def check(self, ctx: SetupContext) -> Check:
        r = ctx.cmd.probe(["node", "--version"])
        if not r.ok:
            return Check.unsatisfied("node not found")
        return Check.of(r.stdout.strip().startswith(f"v{self._major(ctx)}."), r.stdout.strip())

    def apply(self, ctx: SetupContext) -> None:
        major = self._major(ctx)
        formula = f"node@{major}"
        found = ctx.cmd.probe(["node", "--version"]).stdout.strip() or "missing"
        hint = f"brew link --force --overwrite {formula}"
        if not brew_has_formula(ctx.cmd, formula):
            hint = f"brew install {formula} && {hint}"
        raise StepWarning(f"Your version of node is {found}. We currently only support v{major}. Consider running: {hint}")


class PostgresRoleStep:
    """The local `postgres` role used in test and dev."""

    step_id = "29_postgres_role"
    required = False

    def check(self, ctx: SetupContext) -> Check:
        r = ctx.cmd.probe(["psql", "-tc", "SELECT rolname from pg_catalog.pg_roles", "postgres"])
        if not r.ok:
            return Check.indeterminate("could not query postgres roles")
        roles = {line.strip() for line in r.stdout.splitlines()}
        return Check.of("postgres" in roles, "postgres role")

    def apply(self, ctx: SetupContext) -> None:
        ctx.cmd.run(["psql", "--quiet", "-c", "CREATE ROLE postgres LOGIN SUPERUSER;", "postgres"])


class OpensslLinksStep:
    """Expose brew's openssl dylibs in /usr/local/lib (same symlink policy as dotfiles)."""

    step_id = "29_openssl_links"
    required = False

    def _pairs(self, ctx: SetupContext, prefix: str) -> List[tuple]:
        lib_dir = Path(str(ctx.config.darwin.get("openssl_lib_dir") or "/usr/local/lib"))
        return [(src, lib_dir / src.name) for src in sorted(Path(prefix, "lib").glob("*.dylib"))]

    def check(self, ctx: SetupContext) -> Check:
        prefix = brew_prefix(ctx.cmd, "openssl")
        if prefix is None:
            return Check.indeterminate("brew --prefix openssl failed")
        pending = [d for s, d in self._pairs(ctx, prefix) if link_state(s, d) is not LinkState.CORRECT]
        return Check.of(not pending, f"{len(pending)} links pending" if pending else "openssl links")

    def apply(self, ctx: SetupContext) -> None:
        prefix = brew_prefix(ctx.cmd, "openssl")
        if prefix is None:
            raise StepWarning("openssl is not installed through brew")
        for src, dest in self._pairs(ctx, prefix):
            if ensure_symlink(src, dest, dry_run=ctx.dry_run) is LinkState.CONFLICT:
                ctx.warn(f"Not symlinking to {dest} because it already exists.")


class ProtocStep:
    """A pinned protoc from the upstream release zip (brew's version drifts)."""

    step_id = "29_protoc"
    required = False

    def _version(self, ctx: SetupContext) -> str:
        return str(ctx.config.protoc.get("version") or "")

    def check(self, ctx: SetupContext) -> Check:
        r = ctx.cmd.probe(["protoc", "--version"])
        if not r.ok:
            return Check.unsatisfied("protoc not found")
        return Check.of(self._version(ctx) in r.stdout, r.stdout.strip())

    def apply(self, ctx: SetupContext) -> None:
        cfg = ctx.config.protoc
        url = (cfg.get("urls") or {}).get(ctx.platform)
        if not url:
            raise StepWarning(f"no protoc download configured for {ctx.platform}")

        if ctx.platform == "darwin" and brew_has_formula(ctx.cmd, "protobuf"):
            logger.info("Uninstalling homebrew version of protobuf")
            ctx.cmd.run(["brew", "uninstall", "protobuf"])

        archive = Path(tempfile.gettempdir()) / f"protoc-{self._version(ctx)}.zip"
        prefix = str(cfg.get("prefix") or "/usr/local")
        sudo = ["sudo"] if ctx.config.use_sudo else []
        ctx.cmd.run(["curl", "-fsSL", "-o", str(archive), str(url)])
        ctx.cmd.run([*sudo, "unzip", "-q", "-o", str(archive), "-d", prefix])
        ctx.cmd.run([*sudo, "chmod", "-R", "a+rX", f"{prefix}/bin/protoc", f"{prefix}/include/google"])
