"""
Store configuration.

Settings come from three layers, later ones winning:

    1. Defaults on StoreConfig
    2. An optional YAML file (flat mapping of field name -> value)
    3. SURVEYKIT_<FIELD> environment variables, e.g. SURVEYKIT_STATE_FORMAT=yaml

Unknown keys in the YAML file are an error; unknown SURVEYKIT_ variables
are ignored.
"""

import logging
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Mapping, Optional

import yaml

from surveykit.backends import FileBackend


logger = logging.getLogger(__name__)

ENV_PREFIX = "SURVEYKIT_"
STATE_FORMATS = ("json", "yaml")


@dataclass
class StoreConfig:
    """
    Properties:
        state_key:
            Key the state blob is saved under in the backend

        state_format:
            "json" or "yaml"

        storage_dir:
            Directory used by the file backend

        export_date_format:
            strftime pattern for the submission column of exports
    """

    state_key: str = "survey_creator_data"
    state_format: str = "json"
    storage_dir: str = ".surveykit"
    export_date_format: str = "%Y-%m-%d %H:%M:%S"

    def __post_init__(self):
        if self.state_format not in STATE_FORMATS:
            raise ValueError(
                f"state_format must be one of {STATE_FORMATS}, got {self.state_format!r}"
            )
        if not self.state_key:
            raise ValueError("state_key must not be empty")


def _apply(config: StoreConfig, values: Mapping[str, object], source: str) -> StoreConfig:
    known = {f.name for f in fields(StoreConfig)}
    unknown = set(values) - known
    if unknown:
        raise ValueError(f"Unknown config keys in {source}: {sorted(unknown)}")
    return replace(config, **{k: str(v) for k, v in values.items()})


def load_config(path=None, environ: Optional[Mapping[str, str]] = None) -> StoreConfig:
    """
    Build a StoreConfig from defaults, a YAML file and the environment.

    Args:
        path: YAML file to read. A missing file is not an error.
        environ: Environment mapping (defaults to os.environ)

    Raises:
        ValueError: On unknown keys, a non-mapping YAML document or
                    invalid values
    """
    config = StoreConfig()

    if path is not None:
        path = Path(path)
        if path.exists():
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
            if not isinstance(data, dict):
                raise ValueError(f"Config file {path} must contain a mapping")
            config = _apply(config, data, str(path))
        else:
            logger.info("Config file %s not found, using defaults", path)

    environ = os.environ if environ is None else environ
    known = {f.name for f in fields(StoreConfig)}
    env_values = {}
    for name, value in environ.items():
        if not name.startswith(ENV_PREFIX):
            continue
        key = name[len(ENV_PREFIX):].lower()
        if key in known:
            env_values[key] = value
        else:
            logger.debug("Ignoring unrelated environment variable %s", name)
    if env_values:
        config = _apply(config, env_values, "environment")

    return config


def make_backend(config: StoreConfig) -> FileBackend:
    suffix = ".yaml" if config.state_format == "yaml" else ".json"
    return FileBackend(config.storage_dir, suffix=suffix)
