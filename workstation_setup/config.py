from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from .errors import FatalError
from .lib.manifests import deep_merge, load_setup_manifest, load_yaml

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def _section(raw: Dict[str, Any], key: str) -> Dict[str, Any]:
    value = raw.get(key) or {}
    if not isinstance(value, dict):
        raise ValueError(f"config section {key!r} must be a mapping")
    return value


@dataclass(frozen=True)
class RepoSpec:
    url: str
    dest: str = "devtools"
    tool: str = "git"
    webapp: bool = False
    args: tuple = ()

    @property
    def name(self) -> str:
        return self.url.rstrip("/").rsplit("/", 1)[-1].rsplit(":", 1)[-1].removesuffix(".git")


@dataclass(frozen=True)
class FormulaSpec:
    formula: str
    command: Optional[str] = None
    link: bool = False
    version_args: tuple = ()
    min_version: Optional[str] = None


@dataclass(frozen=True)
class SetupConfig:
    raw: Dict[str, Any]

    @property
    def namespace(self) -> str:
        return str(_section(self.raw, "workspace").get("namespace") or "khan")

    @property
    def devtools_subdir(self) -> str:
        return str(_section(self.raw, "workspace").get("devtools_subdir") or "devtools")

    @property
    def email_domain(self) -> str:
        return str(_section(self.raw, "workspace").get("email_domain") or "example.com")

    @property
    def webapp(self) -> bool:
        return bool(self.raw.get("webapp", True))

    @property
    def use_sudo(self) -> bool:
        return bool(self.raw.get("use_sudo", True))

    @property
    def git_min_version(self) -> str:
        return str(_section(self.raw, "dependencies").get("git_min_version") or "1.7.11")

    @property
    def supported_shells(self) -> List[str]:
        return list(_section(self.raw, "shell").get("supported") or ["bash", "zsh"])

    @property
    def dotfiles(self) -> Dict[str, Any]:
        return _section(self.raw, "dotfiles")

    @property
    def system(self) -> Dict[str, Any]:
        return _section(self.raw, "system")

    @property
    def ssh(self) -> Dict[str, Any]:
        return _section(self.raw, "ssh")

    @property
    def repos(self) -> List[RepoSpec]:
        out: List[RepoSpec] = []
        for item in self.raw.get("repos") or []:
            if not isinstance(item, dict) or not item.get("url"):
                raise ValueError(f"repo entries need a url: {item!r}")
            out.append(
                RepoSpec(
                    url=str(item["url"]),
                    dest=str(item.get("dest") or "devtools"),
                    tool=str(item.get("tool") or "git"),
                    webapp=bool(item.get("webapp", False)),
                    args=tuple(str(a) for a in item.get("args") or ()),
                )
            )
        return out

    @property
    def kaclone_bin(self) -> str:
        return str(_section(self.raw, "kaclone").get("bin") or "ka-clone/bin/ka-clone")

    @property
    def python(self) -> Dict[str, Any]:
        return _section(self.raw, "python")

    @property
    def webapp_project(self) -> Dict[str, Any]:
        return _section(self.raw, "webapp_project")

    @property
    def gcloud(self) -> Dict[str, Any]:
        return _section(self.raw, "gcloud")

    @property
    def protoc(self) -> Dict[str, Any]:
        return _section(self.raw, "protoc")

    @property
    def darwin(self) -> Dict[str, Any]:
        return _section(self.raw, "darwin")

    @property
    def formulas(self) -> List[FormulaSpec]:
        out: List[FormulaSpec] = []
        for item in self.darwin.get("formulas") or []:
            if isinstance(item, str):
                item = {"formula": item}
            out.append(
                FormulaSpec(
                    formula=str(item["formula"]),
                    command=item.get("command"),
                    link=bool(item.get("link", False)),
                    version_args=tuple(item.get("version_args") or ()),
                    min_version=(str(item["min_version"]) if item.get("min_version") else None),
                )
            )
        return out

    @property
    def linux(self) -> Dict[str, Any]:
        return _section(self.raw, "linux")


def parse_bool(value: str) -> bool:
    v = value.strip().lower()
    if v in _TRUE:
        return True
    if v in _FALSE:
        return False
    raise ValueError(f"not a boolean: {value!r}")


def load_config(
    path: Optional[str] = None,
    *,
    environ: Optional[Mapping[str, str]] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> SetupConfig:
    """Bundled manifest <- user YAML file <- environment <- explicit overrides."""

    raw = load_setup_manifest()

    if path:
        p = Path(path)
        if not p.exists():
            raise FileNotFoundError(path)
        if p.suffix.lower() not in {".yaml", ".yml"}:
            raise ValueError("setup config must be YAML")
        raw = deep_merge(raw, load_yaml(p))

    env = environ or {}
    if env.get("WEBAPP"):
        try:
            raw["webapp"] = parse_bool(env["WEBAPP"])
        except ValueError as e:
            raise FatalError(f"WEBAPP: {e}", remediation="set WEBAPP to true or false", exit_code=2) from e

    if overrides:
        raw = deep_merge(raw, overrides)

    return SetupConfig(raw=raw)
