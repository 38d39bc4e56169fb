"""Settings read from ``[workspace.metadata.easydep]`` in the root manifest."""

from __future__ import annotations

import logging
import tomllib
from dataclasses import dataclass, field
from pathlib import Path

from easydep.errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_MIN_OCCURRENCES = 2


@dataclass
class EasyDepConfig:
    min_occurrences: int | None = None
    exclude: list[str] = field(default_factory=list)


def read_config(root_manifest: Path) -> EasyDepConfig:
    """Read the easydep metadata table; missing file or table means defaults."""
    try:
        with open(root_manifest, "rb") as f:
            data = tomllib.load(f)
    except FileNotFoundError:
        return EasyDepConfig()
    except (OSError, tomllib.TOMLDecodeError) as e:
        # The root rewrite reports these properly; config just falls back.
        logger.debug("Could not read config from %s: %s", root_manifest, e)
        return EasyDepConfig()

    section = data
    for key in ("workspace", "metadata", "easydep"):
        section = section.get(key, {}) if isinstance(section, dict) else {}
    if not isinstance(section, dict):
        raise ConfigError(root_manifest, "workspace.metadata.easydep must be a table")

    min_occurrences = section.get("min-occurrences")
    if min_occurrences is not None and (
        isinstance(min_occurrences, bool)
        or not isinstance(min_occurrences, int)
        or min_occurrences < 1
    ):
        raise ConfigError(root_manifest, "min-occurrences must be a positive integer")

    exclude = section.get("exclude", [])
    if not isinstance(exclude, list) or not all(isinstance(n, str) for n in exclude):
        raise ConfigError(root_manifest, "exclude must be a list of crate names")

    return EasyDepConfig(min_occurrences=min_occurrences, exclude=exclude)
