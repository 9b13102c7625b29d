from .step_05_host_checks import LoginShellStep, MacVersionStep, PlatformSupportStep
from .step_08_sudo import SudoStep
from .step_10_ssh import SshAuthStep, SshKeyStep
from .step_15_devtools import XcodeDevToolsStep
from .step_20_homebrew import BrewDoctorStep, BrewTapStep, HomebrewStep
from .step_25_packages import AptPackagesStep, BrewCaskStep, BrewFormulaStep, BrewServiceStep
from .step_28_toolchain import GitUpgradeStep, NodeVersionStep, OpensslLinksStep, PostgresRoleStep, ProtocStep
from .step_30_mac_apps import MacAppsStep
from .step_40_dependencies import DependenciesStep
from .step_42_userinfo import GitUserNameStep, KacloneEmailStep
from .step_45_dotfiles import DotfileDefaultsStep, DotfileSymlinksStep, DotfileTemplatesStep, LegacyLinkCleanupStep
from .step_50_system_config import GitExcludesStep, MimeTypesStep
from .step_60_repos import CloneRepoStep, RepairSelfStep
from .step_70_python_env import VirtualenvStep, VirtualenvToolStep, WebappDepsStep, WebappHooksStep
from .step_80_gcloud import GcloudAuthStep, GcloudInstallStep
from .step_90_db_dump import DbDumpStep

__all__ = [
    "PlatformSupportStep",
    "MacVersionStep",
    "LoginShellStep",
    "SudoStep",
    "SshKeyStep",
    "SshAuthStep",
    "XcodeDevToolsStep",
    "HomebrewStep",
    "BrewDoctorStep",
    "BrewTapStep",
    "BrewFormulaStep",
    "BrewServiceStep",
    "BrewCaskStep",
    "AptPackagesStep",
    "GitUpgradeStep",
    "NodeVersionStep",
    "PostgresRoleStep",
    "OpensslLinksStep",
    "ProtocStep",
    "MacAppsStep",
    "DependenciesStep",
    "GitUserNameStep",
    "KacloneEmailStep",
    "DotfileSymlinksStep",
    "DotfileDefaultsStep",
    "DotfileTemplatesStep",
    "LegacyLinkCleanupStep",
    "MimeTypesStep",
    "GitExcludesStep",
    "CloneRepoStep",
    "RepairSelfStep",
    "VirtualenvToolStep",
    "VirtualenvStep",
    "WebappDepsStep",
    "WebappHooksStep",
    "GcloudInstallStep",
    "GcloudAuthStep",
    "DbDumpStep",
]
