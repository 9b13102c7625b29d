from __future__ import annotations

from pathlib import Path
from typing import Any, Dict

import yaml


def _manifest_root() -> Path:
    # workstation_setup/lib/manifests.py -> workstation_setup/manifests
    return Path(__file__).resolve().parents[1] / "manifests"


def load_yaml(path: Path) -> Dict[str, Any]:
    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Manifest must be a mapping/dict: {path}")
    return data


def load_setup_manifest() -> Dict[str, Any]:
    return load_yaml(_manifest_root() / "setup.yaml")


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Merge override into a copy of base. Mappings merge, everything else replaces."""

    out = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(out.get(key), dict):
            out[key] = deep_merge(out[key], value)
        else:
            out[key] = value
    return out
