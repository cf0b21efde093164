from __future__ import annotations

from typing import Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, StrictBool

GeometryType = Literal["polygon", "linestring", "line", "circle", "point"]

# Geometry types drawn with a line-outline highlight; everything else gets a circle ring.
LINE_GEOMETRY_TYPES: frozenset[str] = frozenset({"polygon", "linestring", "line"})

DEFAULT_HIGHLIGHT_COLOR = "#ff0"
DEFAULT_MAX_RESULTS = 5
DEFAULT_CHARACTER_THRESHOLD = 2
DEFAULT_PLACEHOLDER_TEXT = "Search..."


class LayerConfig(BaseModel):
    """
    One searchable layer.

    `source` is the map data source id; the highlight overlay is derived from it.
    Per-layer consistency (unique id property, property lists) is checked by
    `control.registry.ensure_layer_searchable`, not here, so a loader can still be
    handed a partially-configured layer and reject it itself.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    source: str
    displayName: str
    category: str | None = None
    geometryType: GeometryType = Field(
        default="circle", validation_alias=AliasChoices("geometryType", "type")
    )
    uniqueFeatureID: str | None = None
    searchProperties: list[str] | None = None
    excludedProperties: list[str] | None = None
    # Raw feature URL; bypasses the data held by the map source.
    dataPath: str | None = None
    highlightColor: str = DEFAULT_HIGHLIGHT_COLOR
    # None and True both mean "zoom on selection".
    zoomOnSearch: StrictBool | None = None

    @property
    def zoom_enabled(self) -> bool:
        return self.zoomOnSearch is not False

    @property
    def draws_as_line(self) -> bool:
        return self.geometryType in LINE_GEOMETRY_TYPES


class ControlOptions(BaseModel):
    model_config = ConfigDict(frozen=True)

    layers: list[LayerConfig]
    maxResults: int = DEFAULT_MAX_RESULTS
    characterThreshold: int = DEFAULT_CHARACTER_THRESHOLD
    placeholderText: str = DEFAULT_PLACEHOLDER_TEXT
    containerClass: str | None = None
    inputID: str | None = None
    btnID: str | None = None
    # Carried for the UI; the engine does not move anything.
    draggable: bool = False

    def layer_named(self, display_name: str) -> LayerConfig | None:
        name = (display_name or "").strip()
        for layer in self.layers:
            if layer.displayName == name:
                return layer
        return None
