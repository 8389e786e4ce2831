"""Loading of JSON/YAML override files for layouts and type rules."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Mapping

import yaml


def load_config_data(path: Path, kind: str) -> Mapping[str, Any]:
    """Return the mapping stored in *path*; an empty file is an empty mapping.

    *kind* names the configuration in error messages (``"layout"``, ``"rule"``).
    """

    if not path.exists():
        raise FileNotFoundError(f"{kind.capitalize()} override file not found: {path}")

    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}

    suffix = path.suffix.lower()
    if suffix in {".yaml", ".yml"}:
        data = yaml.safe_load(text)
    elif suffix == ".json":
        data = json.loads(text)
    else:
        raise ValueError(f"Unsupported {kind} file format: {path.suffix}")

    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise TypeError(f"{kind.capitalize()} configuration must be a mapping")
    return data


__all__ = ["load_config_data"]
