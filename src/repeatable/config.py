#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
"""Library settings, backed by `omegaconf`.

The defaults are declared as structured configs so that overrides are type
checked on merge. Overrides can be given as a mapping, a path to a YAML file or
a `DictConfig`."""

import contextlib
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterator, Mapping, Optional

from omegaconf import DictConfig, OmegaConf

logger = logging.getLogger(__name__)


@dataclass
class StringifyConfig:
    tab_length: int = 2
    strip_quotes: bool = False
    sort: bool = False


@dataclass
class EventsConfig:
    max_repeats: Optional[int] = None


@dataclass
class Settings:
    stringify: StringifyConfig = field(default_factory=StringifyConfig)
    events: EventsConfig = field(default_factory=EventsConfig)


ConfigOverrides = Mapping[str, Any] | DictConfig | Path | str


def default_config() -> DictConfig:
    return OmegaConf.structured(Settings)


_config: DictConfig = default_config()


def get_config() -> DictConfig:
    """Return the active configuration."""
    return _config


def _as_config(overrides: ConfigOverrides) -> DictConfig:
    if isinstance(overrides, DictConfig):
        return overrides
    if isinstance(overrides, (str, Path)):
        return OmegaConf.load(overrides)
    return OmegaConf.create(dict(overrides))


def load_config(overrides: ConfigOverrides | None = None) -> DictConfig:
    """Merge `overrides` onto the defaults and make the result the active
    configuration.

    Raises
    ------
    omegaconf.errors.ValidationError if an override does not match the type
    of the default it replaces.
    """
    global _config
    config = default_config()
    if overrides is not None:
        config = OmegaConf.merge(config, _as_config(overrides))
    _config = config
    logger.debug(f"Loaded configuration: {OmegaConf.to_container(config)}")
    return _config


def reset_config() -> DictConfig:
    return load_config()


@contextlib.contextmanager
def override_config(overrides: ConfigOverrides) -> Iterator[DictConfig]:
    """Temporarily merge `overrides` onto the active configuration."""
    global _config
    previous = _config
    _config = OmegaConf.merge(previous, _as_config(overrides))
    try:
        yield _config
    finally:
        _config = previous
