"""Settings for an export: packaged defaults, merged with an optional user YAML file."""
import os
from pathlib import Path
from typing import List, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from sfexport.core.exceptions import ConfigError
from sfexport.core.utils import dictmerge
from sfexport.tasks.metadata.catalog import CatalogStrategy
from sfexport.tasks.metadata.manifest import EmptyFolderPolicy

__location__ = os.path.dirname(os.path.realpath(__file__))

DEFAULT_CONFIG_PATH = os.path.join(__location__, "..", "sfexport.yml")


class SfExportModel(BaseModel):
    # Base class for sfexport's Pydantic models
    model_config = ConfigDict(extra="forbid")


class CatalogSettings(SfExportModel):
    strategy: CatalogStrategy = CatalogStrategy.static
    types: Optional[List[str]] = None


class ManifestSettings(SfExportModel):
    empty_folder_policy: EmptyFolderPolicy = EmptyFolderPolicy.empty


class ExportSettings(SfExportModel):
    api_version: str = "43.0"
    catalog: CatalogSettings = CatalogSettings()
    manifest: ManifestSettings = ManifestSettings()

    @field_validator("api_version", mode="before")
    @classmethod
    def api_version_as_string(cls, v):
        # YAML reads an unquoted 43.0 as a float
        if isinstance(v, (int, float)):
            return f"{float(v):.1f}"
        return v


def safe_load(path: Union[str, Path]) -> dict:
    """Read a YAML mapping from `path`; an empty file is an empty mapping."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"Couldn't read config file: {e}", config_name=str(path))
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML: {e}", config_name=str(path))
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError("Expected a mapping at the top level", config_name=str(path))
    return data


def load_settings(path: Optional[Union[str, Path]] = None) -> ExportSettings:
    """Load the packaged defaults, deep-merge the file at `path` over them and validate."""
    config = safe_load(DEFAULT_CONFIG_PATH)
    name = "sfexport.yml"
    if path:
        name = str(path)
        config = dictmerge(config, safe_load(path), name)
    try:
        return ExportSettings.model_validate(config)
    except ValidationError as e:
        raise ConfigError(f"Invalid settings:\n{e}", config_name=name)
