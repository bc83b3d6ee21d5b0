"""Configuration for the profile agent.

Holds request-parameter ranges and sampler tuning. A config can be loaded from
YAML; the document is validated against the packaged JSON schema
``profagent/schemas/config.json``.
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass, fields
from importlib import resources
from pathlib import Path
from typing import Any, Dict, Union

import jsonschema
import yaml

from profagent.utils.yaml_utils import normalize_yaml_dict_keys


def _as_number(raw: Any) -> Union[int, float, None]:
    # bool is an int subclass but never a valid numeric parameter
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        return None
    if isinstance(raw, float) and not math.isfinite(raw):
        return None
    return raw


@dataclass(frozen=True)
class AgentConfig:
    """Ranges and defaults applied at the request boundary."""

    # Number of report rows when the caller gives no usable limit
    default_limit: int = 100
    min_limit: int = 100
    max_limit: int = 10000

    # CPU profile duration in seconds
    default_duration: int = 10
    min_duration: int = 1
    max_duration: int = 60

    # Seconds between two CPU stack samples
    cpu_sample_interval: float = 0.01

    # Frames kept per tracemalloc traceback
    heap_traceback_frames: int = 16

    # Frames kept per captured thread stack
    max_stack_depth: int = 64

    # Sum samples into every ancestor in the cumulative view
    inclusive_cumulative: bool = False

    def clamp_limit(self, raw: Any) -> int:
        """Return ``raw`` as a limit within range, or the default when unusable."""
        value = _as_number(raw)
        if value is None:
            return self.default_limit
        return max(self.min_limit, min(int(value), self.max_limit))

    def clamp_duration(self, raw: Any) -> int:
        """Return ``raw`` as a CPU duration within range, or the default when unusable."""
        value = _as_number(raw)
        if value is None:
            return self.default_duration
        return max(self.min_duration, min(int(value), self.max_duration))


DEFAULT_CONFIG = AgentConfig()


def _config_schema() -> Dict[str, Any]:
    with (
        resources.files("profagent.schemas")
        .joinpath("config.json")
        .open("r", encoding="utf-8")
    ) as f:
        return json.load(f)


def load_config_yaml(yaml_str: str) -> AgentConfig:
    """Build an AgentConfig from a YAML document.

    Args:
        yaml_str: YAML text. Empty documents give the defaults.

    Returns:
        Validated configuration.

    Raises:
        ValueError: If the document is not a mapping or a range is inverted.
        jsonschema.ValidationError: If the document violates the schema.
    """
    data = yaml.safe_load(yaml_str)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValueError("The provided YAML must map to a dictionary at top-level.")

    data = normalize_yaml_dict_keys(data)
    jsonschema.validate(data, _config_schema())

    known = {f.name for f in fields(AgentConfig)}
    config = AgentConfig(**{k: v for k, v in data.items() if k in known})

    if config.min_limit > config.max_limit:
        raise ValueError(
            f"min_limit ({config.min_limit}) exceeds max_limit ({config.max_limit})"
        )
    if config.min_duration > config.max_duration:
        raise ValueError(
            f"min_duration ({config.min_duration}) exceeds max_duration ({config.max_duration})"
        )
    return config


def load_config(path: Union[str, Path]) -> AgentConfig:
    """Read and validate a YAML config file."""
    return load_config_yaml(Path(path).read_text(encoding="utf-8"))
