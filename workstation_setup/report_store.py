from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict

import yaml

from .pipeline import PipelineResult

logger = logging.getLogger(__name__)


def _detect_format(path: Path) -> str:
    ext = path.suffix.lower().lstrip(".")
    if ext in {"yaml", "yml"}:
        return "yaml"
    # Default to JSON for unknown extensions.
    return "json"


def result_to_dict(result: PipelineResult) -> Dict[str, Any]:
    return {
        "exit_code": result.exit_code,
        "restarts": result.restarts,
        "fatal": str(result.fatal) if result.fatal else None,
        "steps": [
            {
                "step": r.step_id,
                "outcome": r.outcome.value,
                "detail": r.detail,
                "warnings": list(r.warnings),
            }
            for r in result.results
        ],
        "warnings": list(result.warnings),
    }


def save_report(path: str, result: PipelineResult) -> None:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)

    data = result_to_dict(result)
    if _detect_format(p) == "yaml":
        p.write_text(yaml.safe_dump(data, sort_keys=False), encoding="utf-8")
    else:
        p.write_text(json.dumps(data, indent=2, sort_keys=True) + "\n", encoding="utf-8")
    logger.debug("Run report written to %s", p)


def load_report(path: str) -> Dict[str, Any]:
    p = Path(path)
    if _detect_format(p) == "yaml":
        data = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    else:
        data = json.loads(p.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"Report file must be an object/dict, got {type(data)}")
    return data
