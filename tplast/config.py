"""Normalizer configuration.

Configuration can be built in code or loaded from a YAML file with a
top-level ``tplast`` mapping:

    tplast:
      preserve_whitespaces: false
      missing_child: skip
      copy_tree: true
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from enum import Enum
from pathlib import Path

import yaml

from tplast.errors import ConfigError


class MissingChildPolicy(Enum):
    """What to do when a declared child field holds no value."""

    ERROR = "error"  # Raise MalformedNodeError
    SKIP = "skip"  # Leave the field alone and continue


@dataclass
class NormalizerConfig:
    # Template parser options
    preserve_whitespaces: bool = True
    preserve_line_endings: bool = True
    collect_comment_nodes: bool = True

    # Normalizer options
    missing_child: MissingChildPolicy = MissingChildPolicy.ERROR
    copy_tree: bool = False  # Normalize a deep copy instead of the caller's tree

    @classmethod
    def from_dict(cls, data: dict) -> NormalizerConfig:
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown config key(s): {', '.join(unknown)}")

        values = dict(data)
        if "missing_child" in values:
            try:
                values["missing_child"] = MissingChildPolicy(values["missing_child"])
            except ValueError:
                choices = ", ".join(p.value for p in MissingChildPolicy)
                raise ConfigError(
                    f"Invalid missing_child '{values['missing_child']}'. Must be one of: {choices}"
                ) from None

        for name, value in values.items():
            if name != "missing_child" and not isinstance(value, bool):
                raise ConfigError(f"Config key '{name}' must be a boolean, got {value!r}")

        return cls(**values)


def load_config(path: str | Path) -> NormalizerConfig:
    """Load normalizer configuration from a YAML file."""
    with open(path) as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return NormalizerConfig()
    section = data.get("tplast") if isinstance(data, dict) else None
    if not isinstance(data, dict) or not isinstance(section or {}, dict):
        raise ConfigError(f"{path}: expected a top-level 'tplast' mapping")

    return NormalizerConfig.from_dict(section or {})
