from __future__ import annotations

import math
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from control.errors import ConfigError
from control.types import (
    DEFAULT_CHARACTER_THRESHOLD,
    DEFAULT_MAX_RESULTS,
    DEFAULT_PLACEHOLDER_TEXT,
    ControlOptions,
    LayerConfig,
)

_IDENTIFIER_RE = re.compile(r"^\w+(-\w+)*$", re.ASCII)
_IDENTIFIER_OPTIONS: tuple[str, ...] = ("containerClass", "inputID", "btnID")
_ELEMENT_PREFIX = "mapbox-search"


def validate(raw_options: Any) -> ControlOptions:
    """
    Validate and normalize construction-time options.

    Pure: nothing touches the map here, so a bad config never leaves a half-built
    control behind.
    """
    if not isinstance(raw_options, Mapping):
        raise ConfigError("options is not a valid object")

    for name in _IDENTIFIER_OPTIONS:
        value = raw_options.get(name)
        if value is None:
            continue
        if not isinstance(value, str) or not _IDENTIFIER_RE.fullmatch(value):
            raise ConfigError(f"{value} is not a valid string for an identifier")

    max_results = raw_options.get("maxResults")
    if max_results is None:
        max_results = raw_options.get("maxSuggest")

    placeholder = raw_options.get("placeholderText")
    if placeholder is not None and not isinstance(placeholder, str):
        raise ConfigError(f"{placeholder} is not a valid string for options.placeholderText")

    layers = _validate_layers(raw_options.get("layers"))

    return ControlOptions(
        layers=layers,
        maxResults=_rounded_option(
            "maxResults", max_results, default=DEFAULT_MAX_RESULTS
        ),
        characterThreshold=_rounded_option(
            "characterThreshold",
            raw_options.get("characterThreshold"),
            default=DEFAULT_CHARACTER_THRESHOLD,
        ),
        placeholderText=DEFAULT_PLACEHOLDER_TEXT if placeholder is None else placeholder,
        containerClass=raw_options.get("containerClass"),
        inputID=raw_options.get("inputID"),
        btnID=raw_options.get("btnID"),
        draggable=bool(raw_options.get("draggable") or False),
    )


def round_half_up(value: float) -> int:
    # Same as the browser's Math.round: 2.5 -> 3, -2.5 -> -2.
    return int(math.floor(value + 0.5))


def _rounded_option(name: str, value: Any, *, default: int) -> int:
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigError(f"{value} is not a valid number for options.{name}")
    if not math.isfinite(value):
        raise ConfigError(f"{value} is not a valid number for options.{name}")
    return round_half_up(value)


def _validate_layers(raw_layers: Any) -> list[LayerConfig]:
    if raw_layers is None:
        raise ConfigError("options.layers is required")
    if isinstance(raw_layers, (str, bytes, Mapping)) or not isinstance(
        raw_layers, Sequence
    ):
        raise ConfigError("options.layers is not an array")
    if not raw_layers:
        raise ConfigError("options.layers must contain at least one layer")

    out: list[LayerConfig] = []
    seen_names: set[str] = set()
    # One highlight overlay per source, so two layers cannot share a source.
    seen_sources: set[str] = set()
    for i, raw in enumerate(raw_layers):
        if isinstance(raw, LayerConfig):
            layer = raw
        elif isinstance(raw, Mapping):
            try:
                layer = LayerConfig.model_validate(dict(raw))
            except ValidationError as e:
                raise ConfigError(f"options.layers[{i}] is invalid: {e}") from e
        else:
            raise ConfigError(f"options.layers[{i}] is not a valid object")

        ensure_layer_searchable(layer)
        if layer.displayName in seen_names:
            raise ConfigError(
                f"options.layers[{i}].displayName '{layer.displayName}' is used by another layer"
            )
        if layer.source in seen_sources:
            raise ConfigError(
                f"options.layers[{i}].source '{layer.source}' is used by another layer"
            )
        seen_names.add(layer.displayName)
        seen_sources.add(layer.source)
        out.append(layer)
    return out


def ensure_layer_searchable(layer: LayerConfig) -> None:
    """
    Per-layer checks shared by validation and the data loader.
    """
    if not layer.uniqueFeatureID:
        raise ConfigError("options.uniqueFeatureID is required for every layer")
    if layer.searchProperties is not None and layer.excludedProperties is not None:
        raise ConfigError(
            "both options.searchProperties and options.excludedProperties "
            "cannot be included at the same time"
        )


@dataclass(frozen=True)
class ElementIdentifiers:
    container_class: str
    input_id: str
    btn_id: str


def resolve_identifiers(options: ControlOptions) -> ElementIdentifiers:
    classes = [f"{_ELEMENT_PREFIX}-container"]
    if options.draggable:
        classes.insert(0, "draggable")
    if options.containerClass:
        classes.append(options.containerClass)
    return ElementIdentifiers(
        container_class=" ".join(classes),
        input_id=options.inputID or f"{_ELEMENT_PREFIX}-input",
        btn_id=options.btnID or f"{_ELEMENT_PREFIX}-btn",
    )


def picker_groups(
    layers: Sequence[LayerConfig], *, chosen: str | None = None
) -> list[dict[str, Any]]:
    """
    Layer-picker entries grouped by category.

    Categories keep their first-seen order. Uncategorized layers are not grouped;
    they show up as plain choices where their first one appeared.
    """
    out: list[dict[str, Any]] = []
    groups: dict[str, dict[str, Any]] = {}
    for layer in layers:
        choice = {
            "value": layer.displayName,
            "label": layer.displayName,
            "selected": layer.displayName == chosen,
        }
        if layer.category is None:
            out.append(choice)
            continue
        group = groups.get(layer.category)
        if group is None:
            group = {"label": layer.category, "id": len(groups) + 1, "choices": []}
            groups[layer.category] = group
            out.append(group)
        group["choices"].append(choice)
    return out


def load_options_file(path: Path) -> tuple[dict[str, Any], dict[str, Any]]:
    """
    Read a YAML options file.

    Returns `(options, sources)`; `sources` maps map-source ids to
    `{type, data}` and is consumed by the command map host, not by validation.
    """
    if not path.exists():
        raise ConfigError(f"Search options file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid search options yaml: {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid search options yaml root: {path}")
    sources = data.pop("sources", None) or {}
    if not isinstance(sources, dict):
        raise ConfigError(f"`sources` must be a mapping: {path}")
    return data, sources
