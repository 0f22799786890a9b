"""Runner configuration loaded from YAML and merged with command line flags.

Example ``config.yaml``::

    suites: benches
    defines:
      - BLOCK_SIZE=512,4096
      - N=range(4)
    step: 0,100
    trace:
      path: trace.txt
      period: 10
    results_dir: results/benches
    log_level: INFO
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, List, Optional

import yaml

DEFAULT_SUITES = "benches"


@dataclass(frozen=True)
class RunnerOptions:
    suites: str = DEFAULT_SUITES
    defines: List[str] = field(default_factory=list)
    step: Optional[str] = None
    disk: Optional[str] = None
    trace: Optional[str] = None
    trace_period: int = 0
    trace_freq: int = 0
    trace_backtrace: bool = False
    read_sleep: float = 0.0
    prog_sleep: float = 0.0
    erase_sleep: float = 0.0
    results_dir: Optional[str] = None
    log_level: str = "WARNING"


def load_config(config_file: str) -> Dict[str, Any]:
    """Load configuration from YAML file (an empty file yields ``{}``)."""
    with open(config_file, "r", encoding="utf-8") as file:
        config = yaml.safe_load(file)
    if config is None:
        return {}
    if not isinstance(config, dict):
        raise ValueError(f"{config_file}: top level must be a mapping")
    return config


def options_from_config(config: Dict[str, Any]) -> RunnerOptions:
    """Translate a loaded YAML mapping into RunnerOptions.

    The ``trace`` key may be a path or a mapping with ``path``, ``period``,
    ``freq`` and ``backtrace``. Unknown keys are rejected so typos do not
    silently fall back to defaults.
    """
    config = dict(config)
    values: Dict[str, Any] = {}
    trace_cfg = config.pop("trace", None)
    if isinstance(trace_cfg, dict):
        values["trace"] = trace_cfg.get("path")
        values["trace_period"] = int(trace_cfg.get("period", 0))
        values["trace_freq"] = int(trace_cfg.get("freq", 0))
        values["trace_backtrace"] = bool(trace_cfg.get("backtrace", False))
    elif trace_cfg is not None:
        values["trace"] = str(trace_cfg)

    known = {f.name for f in fields(RunnerOptions)}
    unknown = sorted(set(config) - known)
    if unknown:
        raise ValueError(f"Unknown config keys: {', '.join(unknown)}")

    if "defines" in config:
        defines = config.pop("defines") or []
        if isinstance(defines, str):
            defines = [defines]
        values["defines"] = [str(d) for d in defines]
    if "step" in config and config["step"] is not None:
        values["step"] = str(config.pop("step"))
    for key in ("read_sleep", "prog_sleep", "erase_sleep"):
        if key in config:
            values[key] = float(config.pop(key))
    for key in ("trace_period", "trace_freq"):
        if key in config:
            values[key] = int(config.pop(key))
    values.update(config)
    return RunnerOptions(**values)


def merge_options(base: RunnerOptions, overrides: Dict[str, Any]) -> RunnerOptions:
    """Apply command line values that were actually given (not None).

    Command line defines are placed before those from the file; the first
    override naming a define wins, so the command line takes precedence.
    """
    changes = {k: v for k, v in overrides.items() if v is not None and k != "defines"}
    defines = list(overrides.get("defines") or []) + list(base.defines)
    return replace(base, defines=defines, **changes)


def resolve_config_path(path: Optional[str], default: str = "config.yaml") -> Optional[str]:
    """Return the config file to load: an explicit path, else ``default`` if present."""
    if path:
        if not os.path.isfile(path):
            raise FileNotFoundError(f"Config file not found: {path}")
        return path
    return default if os.path.isfile(default) else None
