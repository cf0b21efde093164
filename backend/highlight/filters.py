from __future__ import annotations

from typing import Any

from control.types import LayerConfig

HIGHLIGHT_ID = "_highlighted_search__"
HIGHLIGHT_WIDTH = 5


def highlight_layer_id(source: str) -> str:
    return f"{source}{HIGHLIGHT_ID}"


def empty_match_filter() -> list[Any]:
    # No feature carries the marker property, so nothing renders.
    return ["in", HIGHLIGHT_ID, ""]


def match_filter(key: str, *values: Any) -> list[Any]:
    return ["in", key, *values]


def highlight_layer_spec(layer: LayerConfig) -> dict[str, Any]:
    """
    Overlay layer drawn on top of `layer.source`; starts with nothing highlighted.

    Polygons and lines get an outline, points get a hollow ring.
    """
    spec: dict[str, Any] = {
        "id": highlight_layer_id(layer.source),
        "source": layer.source,
        "filter": empty_match_filter(),
    }
    if layer.draws_as_line:
        spec["type"] = "line"
        spec["paint"] = {
            "line-color": layer.highlightColor,
            "line-width": HIGHLIGHT_WIDTH,
        }
    else:
        spec["type"] = "circle"
        spec["paint"] = {
            "circle-opacity": 0,
            "circle-stroke-color": layer.highlightColor,
            "circle-stroke-width": HIGHLIGHT_WIDTH,
        }
    return spec
