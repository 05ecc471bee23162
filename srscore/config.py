"""
Loading scheduling policies from YAML files.

A policy file is a mapping of SchedulerConfig field names, e.g.::

    learning_steps: ["1m", "10m", "1h"]
    easy_interval: 5
    min_ease: 150
"""

import logging
from pathlib import Path
from typing import Optional, Union

import yaml
from pydantic import ValidationError

from .exceptions import ConfigError
from .scheduler import SchedulerConfig

logger = logging.getLogger(__name__)

POLICY_ENV_VAR = "SRSCORE_POLICY"


def load_scheduler_config(path: Union[str, Path]) -> SchedulerConfig:
    """
    Read a YAML policy file into a SchedulerConfig.

    An empty file yields the default policy; keys that are absent keep their
    defaults.

    Raises:
        ConfigError: If the file cannot be read, is not a YAML mapping, or
            holds invalid policy values.
    """
    path = Path(path)
    try:
        with path.open("r", encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Could not read policy file {path}: {e}", e) from e

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigError(
            f"Policy file {path} must contain a mapping, "
            f"got {type(raw).__name__}."
        )

    try:
        config = SchedulerConfig.model_validate(raw)
    except ValidationError as e:
        raise ConfigError(f"Invalid policy in {path}:\n{e}", e) from e

    logger.debug(f"Loaded scheduling policy from {path}: {config!r}")
    return config


def resolve_scheduler_config(
    path: Optional[Union[str, Path]] = None,
) -> SchedulerConfig:
    """Policy from ``path`` if given, otherwise the built-in defaults."""
    if path is None:
        return SchedulerConfig()
    return load_scheduler_config(path)
