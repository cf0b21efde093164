from __future__ import annotations

from control.types import LayerConfig
from engine.command_host import CommandMapHost
from geo.zoom import ViewportZoomer
from highlight.control import (
    EngineState,
    HighlightPhase,
    SearchStrategy,
    clear_query,
    input_changed,
    select,
    switch_layer,
)
from highlight.filters import empty_match_filter, highlight_layer_spec
from layers.types import FeatureCollection, FeatureRecord

PARKS = LayerConfig(
    source="parks", displayName="parks", uniqueFeatureID="id", searchProperties=["name"]
)
TRAILS = LayerConfig(
    source="trails", displayName="trails", uniqueFeatureID="trail_id", type="line"
)

EMPTY = ["in", "_highlighted_search__", ""]


def _parks() -> FeatureCollection:
    return FeatureCollection(
        features=[
            FeatureRecord(
                properties={"id": 1, "name": "Lakeview", "district": "North"},
                geometry={"type": "Point", "coordinates": [14.42, 50.08]},
            ),
            FeatureRecord(
                properties={"id": 2, "name": "", "district": "North"},
                geometry={"type": "Point", "coordinates": [14.45, 50.10]},
            ),
        ]
    )


def _trails() -> FeatureCollection:
    return FeatureCollection(
        features=[
            FeatureRecord(
                properties={"trail_id": "t1", "name": "Ridge"},
                geometry={"type": "LineString", "coordinates": [[0, 0], [1, 1]]},
            )
        ]
    )


def _host() -> CommandMapHost:
    host = CommandMapHost()
    host.add_layer(highlight_layer_spec(PARKS))
    host.add_layer(highlight_layer_spec(TRAILS))
    host.drain()
    return host


def _filters(host: CommandMapHost) -> list[tuple[str, list]]:
    return [(c["layerId"], c["filter"]) for c in host.drain() if c["op"] == "setFilter"]


def test_empty_match_filter_shape():
    assert empty_match_filter() == EMPTY


def test_highlight_layer_spec_by_geometry():
    circle = highlight_layer_spec(PARKS)
    assert circle["id"] == "parks_highlighted_search__"
    assert circle["type"] == "circle"
    assert circle["filter"] == EMPTY
    assert circle["paint"]["circle-stroke-color"] == "#ff0"

    line = highlight_layer_spec(TRAILS)
    assert line["type"] == "line"
    assert line["paint"] == {"line-color": "#ff0", "line-width": 5}


def test_selection_filters_by_unique_feature_id_and_zooms():
    host = _host()
    state = select(
        EngineState(active_layer=PARKS, feature_collection=_parks()),
        "Lakeview",
        "name",
        host=host,
        strategy=SearchStrategy(),
        zoomer=ViewportZoomer(),
    )
    assert state.phase is HighlightPhase.highlighted
    assert state.last_input == "Lakeview"
    cmds = host.drain()
    assert cmds[0] == {
        "op": "setFilter",
        "layerId": "parks_highlighted_search__",
        "filter": ["in", "id", 1],
    }
    assert cmds[1]["op"] == "fitBounds"
    assert cmds[1]["bbox"] == [14.42, 50.08, 14.42, 50.08]
    assert cmds[1]["options"]["padding"] == 100


def test_shared_value_highlights_every_matching_id():
    host = _host()
    select(
        EngineState(active_layer=PARKS, feature_collection=_parks()),
        "North",
        "district",
        host=host,
        strategy=SearchStrategy(),
    )
    assert _filters(host) == [("parks_highlighted_search__", ["in", "id", 1, 2])]


def test_matched_value_strategy_filters_on_matched_key():
    host = _host()
    select(
        EngineState(active_layer=PARKS, feature_collection=_parks()),
        "Lakeview",
        "name",
        host=host,
        strategy=SearchStrategy(highlight_key="matchedValue"),
    )
    assert _filters(host) == [("parks_highlighted_search__", ["in", "name", "Lakeview"])]


def test_selection_then_cleared_query_returns_to_idle():
    host = _host()
    state = EngineState(active_layer=PARKS, feature_collection=_parks())
    state = select(state, "Lakeview", "name", host=host, strategy=SearchStrategy())
    state = switch_layer(state, TRAILS, _trails(), host=host)
    state = select(state, "Ridge", "name", host=host, strategy=SearchStrategy())
    host.drain()

    state = clear_query(state, host=host)
    assert state.phase is HighlightPhase.idle
    assert state.previous_layer is None
    assert host.filters["parks_highlighted_search__"] == EMPTY
    assert host.filters["trails_highlighted_search__"] == EMPTY


def test_cleared_query_after_switch_clears_both_layers():
    host = _host()
    state = EngineState(active_layer=PARKS, feature_collection=_parks())
    state = select(state, "Lakeview", "name", host=host, strategy=SearchStrategy())
    state = switch_layer(state, TRAILS, _trails(), host=host)
    host.drain()

    clear_query(state, host=host)
    assert _filters(host) == [
        ("parks_highlighted_search__", EMPTY),
        ("trails_highlighted_search__", EMPTY),
    ]


def test_layer_switch_clears_left_layer_before_any_new_highlight():
    host = _host()
    state = EngineState(active_layer=PARKS, feature_collection=_parks())
    state = select(state, "Lakeview", "name", host=host, strategy=SearchStrategy())
    host.drain()

    state = switch_layer(state, TRAILS, _trails(), host=host)
    assert _filters(host) == [("parks_highlighted_search__", EMPTY)]
    assert state.active_layer is TRAILS
    assert state.previous_layer is PARKS
    assert state.phase is HighlightPhase.idle

    state = select(state, "Ridge", "name", host=host, strategy=SearchStrategy())
    assert _filters(host) == [
        ("parks_highlighted_search__", EMPTY),
        ("trails_highlighted_search__", ["in", "trail_id", "t1"]),
    ]
    assert state.previous_layer is None


def test_emptied_input_clears_only_when_highlighted():
    host = _host()
    state = EngineState(active_layer=PARKS, feature_collection=_parks())

    state = input_changed(state, "", host=host)
    assert host.drain() == []

    state = select(state, "Lakeview", "name", host=host, strategy=SearchStrategy())
    host.drain()
    state = input_changed(state, "Lake", host=host)
    assert host.drain() == []
    assert state.phase is HighlightPhase.highlighted

    state = input_changed(state, "", host=host)
    assert _filters(host) == [("parks_highlighted_search__", EMPTY)]
    assert state.phase is HighlightPhase.idle
    assert state.last_input == ""


def test_features_with_blank_ids_are_not_filtered_on():
    feats = FeatureCollection(
        features=[
            FeatureRecord(properties={"id": "", "name": "Oak"}),
            FeatureRecord(properties={"id": 7, "name": "Oak"}),
            FeatureRecord(properties={"id": "", "name": "Elm"}),
        ]
    )
    state = EngineState(active_layer=PARKS, feature_collection=feats)
    host = _host()
    select(state, "Oak", "name", host=host, strategy=SearchStrategy())
    select(state, "Elm", "name", host=host, strategy=SearchStrategy())
    assert _filters(host) == [
        ("parks_highlighted_search__", ["in", "id", 7]),
        ("parks_highlighted_search__", ["in", "name", "Elm"]),
    ]
