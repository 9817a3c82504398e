"""YAML reporter — same documents as the JSON reporter, for humans."""

from __future__ import annotations

from typing import Any, Dict, List

import yaml


def render(data: Dict[str, Any] | List[Dict[str, Any]]) -> str:
    return yaml.safe_dump(data, sort_keys=False, allow_unicode=True, default_flow_style=False)
