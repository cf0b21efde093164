from .errors import (
    ConfigError,
    ControlNotReadyError,
    LoadError,
    SearchControlError,
    UnknownLayerError,
    ZoomError,
)
from .registry import (
    ElementIdentifiers,
    ensure_layer_searchable,
    load_options_file,
    picker_groups,
    resolve_identifiers,
    validate,
)
from .types import ControlOptions, LayerConfig

__all__ = [
    "ConfigError",
    "ControlNotReadyError",
    "ControlOptions",
    "ElementIdentifiers",
    "LayerConfig",
    "LoadError",
    "SearchControlError",
    "UnknownLayerError",
    "ZoomError",
    "ensure_layer_searchable",
    "load_options_file",
    "picker_groups",
    "resolve_identifiers",
    "validate",
]
