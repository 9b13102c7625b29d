from __future__ import annotations

import argparse
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

from .config import load_config
from .context import SetupContext
from .environment import Environment
from .errors import FatalError
from .lib.command import CommandRunner
from .lib.hostinfo import detect_platform
from .logging_utils import DEFAULT_LOG_PATH, configure_logging
from .pipeline import PipelineResult, Step, run_with_restarts
from .prompt import Prompter
from .report_store import save_report
from .steps import (
    AptPackagesStep,
    BrewCaskStep,
    BrewDoctorStep,
    BrewFormulaStep,
    BrewServiceStep,
    BrewTapStep,
    CloneRepoStep,
    DbDumpStep,
    DependenciesStep,
    DotfileDefaultsStep,
    DotfileSymlinksStep,
    DotfileTemplatesStep,
    GcloudAuthStep,
    GcloudInstallStep,
    GitExcludesStep,
    GitUpgradeStep,
    GitUserNameStep,
    HomebrewStep,
    KacloneEmailStep,
    LegacyLinkCleanupStep,
    LoginShellStep,
    MacAppsStep,
    MacVersionStep,
    MimeTypesStep,
    NodeVersionStep,
    OpensslLinksStep,
    PlatformSupportStep,
    PostgresRoleStep,
    ProtocStep,
    RepairSelfStep,
    SshAuthStep,
    SshKeyStep,
    SudoStep,
    VirtualenvStep,
    VirtualenvToolStep,
    WebappDepsStep,
    WebappHooksStep,
    XcodeDevToolsStep,
)

logger = logging.getLogger(__name__)

PROG = "workstation-setup"
EXIT_INTERRUPTED = 130


def _darwin_steps(ctx: SetupContext) -> List[Step]:
    darwin = ctx.config.darwin
    steps: List[Step] = [XcodeDevToolsStep(), HomebrewStep(), BrewDoctorStep()]
    steps += [BrewTapStep(str(t)) for t in darwin.get("taps") or []]
    steps += [BrewFormulaStep(f) for f in ctx.config.formulas]
    steps += [BrewServiceStep(str(s)) for s in darwin.get("services") or []]
    steps += [PostgresRoleStep(), NodeVersionStep(), GitUpgradeStep(), OpensslLinksStep()]
    steps += [BrewCaskStep(str(c)) for c in darwin.get("casks") or []]
    steps += [ProtocStep(), MacAppsStep()]
    return steps


def _linux_steps(ctx: SetupContext) -> List[Step]:
    linux = ctx.config.linux
    return [
        AptPackagesStep("25_apt_required", linux.get("apt_required") or [], required=True),
        AptPackagesStep("25_apt_optional", linux.get("apt_optional") or [], required=False),
        ProtocStep(),
    ]


def build_steps(ctx: SetupContext) -> List[Step]:
    """The full ordered plan: host checks, platform packages, then the common setup."""

    steps: List[Step] = [PlatformSupportStep()]
    if ctx.platform == "darwin":
        steps.append(MacVersionStep())
    steps += [LoginShellStep(), SudoStep(), SshKeyStep(), SshAuthStep()]

    if ctx.platform == "darwin":
        steps += _darwin_steps(ctx)
    elif ctx.platform == "linux":
        steps += _linux_steps(ctx)

    webapp = ctx.config.webapp
    steps += [
        DependenciesStep(),
        GitUserNameStep(),
        KacloneEmailStep(),
        DotfileSymlinksStep(),
        DotfileDefaultsStep(),
        DotfileTemplatesStep(),
        LegacyLinkCleanupStep(),
        MimeTypesStep(),
        GitExcludesStep(),
    ]
    # Order matters from here on: deps need the clones, the db dump needs gcloud.
    steps += [CloneRepoStep(r) for r in ctx.config.repos if webapp or not r.webapp]
    steps += [RepairSelfStep(), VirtualenvToolStep(), VirtualenvStep()]
    if webapp:
        steps += [WebappDepsStep(), WebappHooksStep()]
    steps += [GcloudInstallStep(), GcloudAuthStep()]
    if webapp:
        steps.append(DbDumpStep())
    return steps


def print_summary(result: PipelineResult) -> None:
    print()
    print("---------------------------------------------------------------------")
    if result.fatal is not None:
        print(f"FATAL ERROR: {result.fatal}")
        print(f"FATAL ERROR: Fix this problem and then re-run {PROG}")
    if result.warnings:
        print("-- WARNINGS:")
        for w in result.warnings:
            print(f"WARNING: {w}")
    elif result.fatal is None:
        print("DONE!")
    if result.fatal is None:
        print()
        print("*** IMPORTANT: Please restart this terminal (and any ***")
        print("***   others you have open) to pick up the changes.  ***")


def run(
    *,
    root: Optional[str] = None,
    dotfiles_dir: Optional[str] = None,
    config_path: Optional[str] = None,
    platform_name: Optional[str] = None,
    log_path: str = DEFAULT_LOG_PATH,
    report_path: Optional[str] = None,
    dry_run: bool = False,
    assume_yes: bool = False,
    max_restarts: int = 3,
    webapp: Optional[bool] = None,
    verbose: bool = False,
    env: Optional[Environment] = None,
    cmd: Optional[CommandRunner] = None,
    prompter: Optional[Prompter] = None,
) -> PipelineResult:
    """Provision the workstation; safe to re-run at any point."""

    configure_logging(log_path=log_path, level=logging.DEBUG if verbose else logging.INFO)

    env = env or Environment()
    overrides: Dict[str, Any] = {}
    if webapp is not None:
        overrides["webapp"] = webapp
    cfg = load_config(config_path, environ=env.as_dict(), overrides=overrides)

    dest = Path(root).expanduser() if root else Path.home()
    if not dry_run:
        dest.mkdir(parents=True, exist_ok=True)
    if root:
        # `git config --global` reads and writes this file instead of ~/.gitconfig.
        env.export("GIT_CONFIG_GLOBAL", str(dest / ".gitconfig"))

    ctx = SetupContext(
        root=dest,
        dotfiles_dir=Path(dotfiles_dir or os.getcwd()),
        platform=platform_name or detect_platform(),
        config=cfg,
        env=env,
        cmd=cmd or CommandRunner(env, dry_run=dry_run),
        prompter=prompter or Prompter(assume_defaults=assume_yes),
        dry_run=dry_run,
    )
    logger.info("Setting up %s (platform=%s, webapp=%s)", ctx.root, ctx.platform, cfg.webapp)

    result = run_with_restarts(ctx=ctx, build_steps=build_steps, max_restarts=max_restarts)
    if report_path:
        save_report(report_path, result)
    return result


def main(argv: Optional[list[str]] = None) -> int:
    p = argparse.ArgumentParser(prog=PROG, description="Idempotent developer workstation setup.")
    p.add_argument("root", nargs="?", default=None, help="Destination root (default: your home directory)")
    p.add_argument("--dotfiles-dir", default=None, help="Checkout holding the dotfiles (default: current directory)")
    p.add_argument("--config", default=None, help="YAML file overlaid on the bundled manifest")
    p.add_argument("--platform", choices=["darwin", "linux"], default=None, help="Override platform detection")
    p.add_argument("--log", default=DEFAULT_LOG_PATH, help="Path to setup log")
    p.add_argument("--report", default=None, help="Write a run report (json|yaml)")
    p.add_argument("--dry-run", action="store_true", help="Check everything, change nothing")
    p.add_argument("--yes", action="store_true", help="Answer every prompt with its default")
    p.add_argument("--max-restarts", type=int, default=3, help="How often a step may restart the run")
    p.add_argument("--no-webapp", action="store_true", help="Skip the webapp clone and its dependencies")
    p.add_argument("-v", "--verbose", action="store_true")

    args = p.parse_args(argv)

    try:
        result = run(
            root=args.root,
            dotfiles_dir=args.dotfiles_dir,
            config_path=args.config,
            platform_name=args.platform,
            log_path=args.log,
            report_path=args.report,
            dry_run=bool(args.dry_run),
            assume_yes=bool(args.yes),
            max_restarts=args.max_restarts,
            webapp=False if args.no_webapp else None,
            verbose=bool(args.verbose),
        )
    except FatalError as e:
        # Raised before any step ran (bad configuration).
        logger.error("%s", e)
        print(f"FATAL ERROR: {e}")
        return e.exit_code
    except KeyboardInterrupt:
        print()
        logger.warning("Setup interrupted. Everything done so far is kept; re-run %s to finish.", PROG)
        return EXIT_INTERRUPTED

    print_summary(result)
    return result.exit_code


if __name__ == "__main__":
    raise SystemExit(main())
