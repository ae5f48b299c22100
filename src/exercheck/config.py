"""Harness settings resolved from defaults, mappings, or the environment."""
from __future__ import annotations

import os
import shutil
from dataclasses import dataclass, fields, replace
from typing import Any, Mapping, Optional

ENV_PREFIX = "EXERCHECK_"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class HarnessSettings:
    """Limits and runtime selection for a single harness run."""

    timeout_ms: int = 10000
    load_timeout_ms: int = 10000
    max_code_size: int = 50000
    memory_limit_mb: int = 256
    cpu_limit_s: int = 60
    grace_s: float = 2.0
    node_path: Optional[str] = None
    safety_checks: bool = True
    max_log_entries: int = 1000

    @property
    def timeout_s(self) -> float:
        return self.timeout_ms / 1000.0

    def resolve_node(self) -> Optional[str]:
        if self.node_path:
            return self.node_path
        return shutil.which("node")

    def with_overrides(self, **changes: Any) -> "HarnessSettings":
        return replace(self, **changes)

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> "HarnessSettings":
        if not data:
            return cls()
        known = {f.name: f for f in fields(cls)}
        values: dict[str, Any] = {}
        for key, raw in data.items():
            name = str(key).replace("-", "_")
            if name not in known:
                raise ValueError(f"Unknown harness setting '{key}'")
            values[name] = _coerce(known[name].type, raw, name)
        return cls(**values)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "HarnessSettings":
        env = os.environ if environ is None else environ
        data = {}
        for f in fields(cls):
            value = env.get(ENV_PREFIX + f.name.upper())
            if value is not None and value.strip():
                data[f.name] = value.strip()
        if "node_path" not in data and env.get(ENV_PREFIX + "NODE"):
            data["node_path"] = env[ENV_PREFIX + "NODE"]
        return cls.from_mapping(data)


def _coerce(annotation: Any, raw: Any, name: str) -> Any:
    kind = str(annotation)
    if raw is None:
        if "Optional" in kind:
            return None
        raise ValueError(f"Setting '{name}' cannot be null")
    if "bool" in kind:
        if isinstance(raw, bool):
            return raw
        text = str(raw).strip().lower()
        if text in _TRUE:
            return True
        if text in _FALSE:
            return False
        raise ValueError(f"Setting '{name}' expects a boolean, got {raw!r}")
    try:
        if "int" in kind:
            value: Any = int(raw)
        elif "float" in kind:
            value = float(raw)
        else:
            return str(raw)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Setting '{name}' expects a number, got {raw!r}") from exc
    if value <= 0:
        raise ValueError(f"Setting '{name}' must be positive")
    return value
