from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Literal

from control.types import LayerConfig
from engine.types import MapHost
from geo.zoom import ViewportZoomer
from highlight.filters import empty_match_filter, highlight_layer_id, match_filter
from layers.types import FeatureCollection
from search.index import features_matching

HighlightKeyStrategy = Literal["matchedValue", "uniqueFeatureIdLookup"]


@dataclass(frozen=True)
class SearchStrategy:
    """
    How a selection turns into a highlight.

    - matchedValue: filter the overlay on the matched property itself
    - uniqueFeatureIdLookup: resolve the matching features first, then filter on
      their `uniqueFeatureID` values
    """

    highlight_key: HighlightKeyStrategy = "uniqueFeatureIdLookup"
    dedup_enabled: bool = True


class HighlightPhase(str, Enum):
    idle = "idle"
    highlighted = "highlighted"


@dataclass(frozen=True)
class EngineState:
    active_layer: LayerConfig
    feature_collection: FeatureCollection
    # Set by a layer switch, cleared by the next selection / cleared query.
    previous_layer: LayerConfig | None = None
    highlight_visible: bool = False
    last_input: str = ""

    @property
    def phase(self) -> HighlightPhase:
        return HighlightPhase.highlighted if self.highlight_visible else HighlightPhase.idle


def selection_filter(
    state: EngineState, value: Any, key: str, strategy: SearchStrategy
) -> list[Any]:
    if strategy.highlight_key == "matchedValue":
        return match_filter(key, value)

    uid = state.active_layer.uniqueFeatureID or ""
    ids: list[Any] = []
    for f in features_matching(state.feature_collection.features, key, value):
        fid = f.properties.get(uid)
        # Blanked (null) ids cannot be filtered on.
        if fid is not None and fid != "" and fid not in ids:
            ids.append(fid)
    if not ids:
        return match_filter(key, value)
    return match_filter(uid, *ids)


def select(
    state: EngineState,
    value: Any,
    key: str,
    *,
    host: MapHost,
    strategy: SearchStrategy,
    zoomer: ViewportZoomer | None = None,
) -> EngineState:
    """
    Idle/Highlighted --selection--> Highlighted.
    """
    if state.previous_layer is not None:
        host.set_filter(
            highlight_layer_id(state.previous_layer.source), empty_match_filter()
        )

    layer = state.active_layer
    host.set_filter(
        highlight_layer_id(layer.source), selection_filter(state, value, key, strategy)
    )
    if zoomer is not None:
        matches = features_matching(state.feature_collection.features, key, value)
        zoomer.zoom_to(matches, host=host, layer=layer)

    return replace(
        state,
        previous_layer=None,
        highlight_visible=True,
        last_input="" if value is None else str(value),
    )


def clear_query(state: EngineState, *, host: MapHost) -> EngineState:
    """
    Highlighted --queryCleared--> Idle.
    """
    if state.previous_layer is not None:
        host.set_filter(
            highlight_layer_id(state.previous_layer.source), empty_match_filter()
        )
    host.set_filter(highlight_layer_id(state.active_layer.source), empty_match_filter())
    return replace(state, previous_layer=None, highlight_visible=False)


def switch_layer(
    state: EngineState,
    layer: LayerConfig,
    collection: FeatureCollection,
    *,
    host: MapHost,
) -> EngineState:
    """
    Move to `layer`; the layer being left always loses its highlight first.

    The new layer starts Idle until something is selected on it.
    """
    left = state.active_layer
    host.set_filter(highlight_layer_id(left.source), empty_match_filter())
    return EngineState(
        active_layer=layer,
        feature_collection=collection,
        previous_layer=left,
        highlight_visible=False,
        last_input=state.last_input,
    )


def input_changed(state: EngineState, value: str, *, host: MapHost) -> EngineState:
    # The search UI has no "cleared" event; an emptied input while highlighted is one.
    if value == "" and state.highlight_visible:
        state = clear_query(state, host=host)
    return replace(state, last_input=value)
