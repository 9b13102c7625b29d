from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Tuple

from ..context import SetupContext
from ..errors import FatalError
from ..lib.dotfiles import LinkState, copy_file, default_dest_name, ensure_symlink, expand_patterns, link_state
from ..pipeline import Check

logger = logging.getLogger(__name__)


def _source_dir(ctx: SetupContext) -> Path:
    return ctx.dotfiles_dir.resolve()


class DotfileSymlinksStep:
    """Most dotfiles are installed as symlinks into the checkout.

    An existing correct link is left alone; anything else already at the
    destination is left alone too, with a warning.
    """

    step_id = "45_dotfiles_symlinks"
    required = False

    def _pairs(self, ctx: SetupContext) -> List[Tuple[Path, Path]]:
        src_dir = _source_dir(ctx)
        patterns = ctx.config.dotfiles.get("symlinks") or []
        return [(src_dir / rel, ctx.root / rel) for rel in expand_patterns(src_dir, patterns)]

    def check(self, ctx: SetupContext) -> Check:
        pairs = self._pairs(ctx)
        pending = [d for s, d in pairs if link_state(s, d) is not LinkState.CORRECT]
        if pending:
            return Check.unsatisfied(f"{len(pending)} of {len(pairs)} dotfile links pending")
        return Check.satisfied(f"{len(pairs)} dotfile links")

    def apply(self, ctx: SetupContext) -> None:
        for src, dest in self._pairs(ctx):
            if ensure_symlink(src, dest, dry_run=ctx.dry_run) is LinkState.CONFLICT:
                ctx.warn(f"Not symlinking to {dest} because it already exists.")


class DotfileDefaultsStep:
    """Copied (not linked) so users can edit them: bashrc.default -> ~/.bashrc.

    Each must pull in its organization counterpart (.bashrc.<namespace>);
    an existing file that doesn't is fatal, since later steps rely on it.
    """

    step_id = "45_dotfiles_defaults"
    required = True
    suffix = ".default"

    def _entries(self, ctx: SetupContext) -> List[Tuple[Path, Path, str]]:
        src_dir = _source_dir(ctx)
        pattern = str(ctx.config.dotfiles.get("defaults") or f"*{self.suffix}")
        out = []
        for rel in expand_patterns(src_dir, [pattern]):
            dest = ctx.root / default_dest_name(rel.name, self.suffix)
            include = f"{dest.name}.{ctx.config.namespace}"
            out.append((src_dir / rel, dest, include))
        return out

    def check(self, ctx: SetupContext) -> Check:
        for src, dest, include in self._entries(ctx):
            if not dest.exists():
                return Check.unsatisfied(f"{dest} missing")
            if not dest.is_file():
                return Check.unsatisfied(f"{dest} is not a regular file")
            if include not in dest.read_text(encoding="utf-8", errors="ignore"):
                return Check.unsatisfied(f"{dest} does not include {include}")
        return Check.satisfied("default dotfiles")

    def apply(self, ctx: SetupContext) -> None:
        for src, dest, include in self._entries(ctx):
            if not dest.exists():
                copy_file(src, dest, dry_run=ctx.dry_run)
            elif not dest.is_file():
                raise FatalError(
                    f"{dest} is in the way of {src.name}",
                    remediation=f"move {dest} aside and re-run",
                )
            elif include not in dest.read_text(encoding="utf-8", errors="ignore"):
                raise FatalError(
                    f"{dest} does not 'include' {include}",
                    remediation=f"see {src} and add the contents to {dest}",
                )


class DotfileTemplatesStep:
    """Useful defaults installed only when the user has nothing there yet."""

    step_id = "45_dotfiles_templates"
    required = False
    suffix = ".template"

    def _entries(self, ctx: SetupContext) -> List[Tuple[Path, Path]]:
        src_dir = _source_dir(ctx)
        pattern = str(ctx.config.dotfiles.get("templates") or f"*{self.suffix}")
        return [
            (src_dir / rel, ctx.root / default_dest_name(rel.name, self.suffix))
            for rel in expand_patterns(src_dir, [pattern])
        ]

    def check(self, ctx: SetupContext) -> Check:
        missing = [d for _, d in self._entries(ctx) if not d.exists()]
        return Check.of(not missing, f"missing: {', '.join(d.name for d in missing)}" if missing else "templates")

    def apply(self, ctx: SetupContext) -> None:
        for src, dest in self._entries(ctx):
            if not dest.exists():
                copy_file(src, dest, dry_run=ctx.dry_run)


class LegacyLinkCleanupStep:
    """Remove symlinks installed by older versions. Regular files are never touched."""

    step_id = "45_legacy_cleanup"
    required = False

    def _stale(self, ctx: SetupContext) -> List[Path]:
        names = ctx.config.dotfiles.get("legacy_links") or []
        return [ctx.root / n for n in names if (ctx.root / n).is_symlink()]

    def check(self, ctx: SetupContext) -> Check:
        stale = self._stale(ctx)
        return Check.of(not stale, ", ".join(p.name for p in stale) or "no legacy links")

    def apply(self, ctx: SetupContext) -> None:
        for p in self._stale(ctx):
            if ctx.dry_run:
                logger.info("Would remove %s", p)
                continue
            p.unlink()
            logger.info("Removed legacy link %s", p)
