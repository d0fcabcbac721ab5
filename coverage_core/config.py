"""
Estimator settings.

Values are layered: model defaults, then an optional YAML file, then
COVERAGE_* environment variables.
"""

import os
from typing import Any, Dict, Literal, Mapping, Optional

import yaml
from pydantic import BaseModel, Field


DEFAULT_SIMULATIONS = 100_000
MAX_GRID_ROWS = 9
MAX_GRID_COLS = 9

ENV_PREFIX = "COVERAGE_"
CONFIG_ENV_VAR = "COVERAGE_CONFIG"


class EstimatorSettings(BaseModel):
    """Tunables for the Monte-Carlo estimator and the HTTP boundary."""
    simulations: int = Field(DEFAULT_SIMULATIONS, gt=0)
    workers: int = Field(0, ge=0)  # 0 = one per CPU
    executor: Literal["process", "thread", "serial"] = "process"
    batch_size: int = Field(2000, gt=0)
    seed: Optional[int] = Field(None, ge=0)
    max_rows: int = Field(MAX_GRID_ROWS, gt=0)
    max_cols: int = Field(MAX_GRID_COLS, gt=0)
    static_dir: Optional[str] = None

    def with_overrides(self, **overrides: Any) -> 'EstimatorSettings':
        """Return a copy with the non-None overrides applied (and validated)."""
        data = self.model_dump()
        data.update({k: v for k, v in overrides.items() if v is not None})
        return EstimatorSettings(**data)


def load_settings_from_yaml(file_path: str) -> Dict[str, Any]:
    """Read a settings mapping from a YAML file. An empty file gives {}."""
    with open(file_path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f)

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Settings file {file_path} must contain a mapping")
    return data


def settings_from_env(environ: Mapping[str, str]) -> Dict[str, str]:
    """Collect COVERAGE_* variables that name a settings field."""
    values = {}
    for name in EstimatorSettings.model_fields:
        key = ENV_PREFIX + name.upper()
        raw = environ.get(key)
        if raw is not None and raw.strip() != "":
            values[name] = raw.strip()
    return values


def load_settings(
    path: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None
) -> EstimatorSettings:
    """
    Build settings from defaults, a YAML file and the environment.

    Args:
        path: YAML settings file; falls back to $COVERAGE_CONFIG
        environ: Environment mapping (defaults to os.environ)

    Returns:
        Validated EstimatorSettings
    """
    if environ is None:
        environ = os.environ

    data: Dict[str, Any] = {}
    config_path = path or environ.get(CONFIG_ENV_VAR)
    if config_path:
        data.update(load_settings_from_yaml(config_path))

    data.update(settings_from_env(environ))
    return EstimatorSettings(**data)
