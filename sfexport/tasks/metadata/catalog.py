import os
from typing import List, Optional, Sequence

import yaml

from sfexport.core.enums import StrEnum
from sfexport.core.exceptions import ConfigError

__location__ = os.path.dirname(os.path.realpath(__file__))

METADATA_TYPES_PATH = os.path.join(__location__, "metadata_types.yml")


class CatalogStrategy(StrEnum):
    static = "static"
    dynamic = "dynamic"


def load_static_types(path=METADATA_TYPES_PATH) -> List[str]:
    """Load the curated list of metadata types shipped with sfexport."""
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    types = data.get("types")
    if not isinstance(types, list) or not all(isinstance(t, str) for t in types):
        raise ConfigError("Expected a list of metadata type names", config_name=path)
    return types


def get_metadata_types(
    strategy: CatalogStrategy,
    backend=None,
    static_types: Optional[Sequence[str]] = None,
) -> List[str]:
    """Return the metadata types to list in the manifest, in manifest order.

    The static strategy uses `static_types` if given, otherwise the
    packaged list. The dynamic strategy asks `backend` which types the
    org supports.
    """
    strategy = CatalogStrategy(strategy)
    if strategy is CatalogStrategy.dynamic:
        if backend is None:
            raise ValueError("The dynamic metadata catalog needs a backend")
        return list(backend.list_metadata_types())
    if static_types is not None:
        return list(static_types)
    return load_static_types()
