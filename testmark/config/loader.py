"""YAML config loading with env var expansion."""

import os
import re
from pathlib import Path

import yaml
from pydantic import ValidationError

from .models import TestmarkConfig

REGEN_ENV_VAR = "TESTMARK_REGEN"


def load_config(cli_path: str | None = None) -> TestmarkConfig:
    """Load config with resolution order: CLI > project-local > user-global > defaults."""
    config_paths = [
        Path(cli_path) if cli_path else None,
        Path("./testmark.yaml"),
        Path.home() / ".testmark" / "config.yaml",
    ]

    for path in config_paths:
        if path and path.exists():
            try:
                with open(path) as f:
                    raw = yaml.safe_load(f)
                if raw is None:
                    continue
                raw = _expand_env_vars(raw)
                return TestmarkConfig(**raw)
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid YAML in {path}: {e}") from e
            except ValidationError as e:
                raise ValueError(f"Invalid config in {path}: {e}") from e

    return TestmarkConfig()


def regen_requested(config: TestmarkConfig) -> bool:
    """True if fixtures should be regenerated instead of checked.

    Either the config says so, or TESTMARK_REGEN is set to a truthy value.
    """
    if config.regen:
        return True
    return os.environ.get(REGEN_ENV_VAR, "").strip().lower() in {"1", "true", "yes", "on"}


def _expand_env_vars(obj: object) -> object:
    """Recursively expand ${VAR} references in strings."""
    if isinstance(obj, str):
        return re.sub(r"\$\{(\w+)\}", lambda m: os.environ.get(m.group(1), ""), obj)
    elif isinstance(obj, dict):
        return {k: _expand_env_vars(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [_expand_env_vars(v) for v in obj]
    return obj


# Default YAML template for `testmark config init`
DEFAULT_CONFIG_TEMPLATE = """\
# testmark.yaml

# Regenerate fixtures in place instead of checking them.
# TESTMARK_REGEN=1 in the environment has the same effect.
regen: false

# Files picked up when a directory is given to `testmark check`
patterns:
  - "*.md"

# Logging
log_level: "info"              # debug | info | warn | error
log_format: "text"             # text | json
"""
