from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Callable

from engine.types import MapSource


@dataclass
class CommandMapHost:
    """
    A server-side map host.

    Map mutations are applied to an in-process mirror (layers, filters) and queued as
    JSON commands; the browser drains and replays them on the real map.
    """

    sources: dict[str, MapSource] = field(default_factory=dict)
    pitch: float = 0.0
    bearing: float = 0.0
    layers: dict[str, dict[str, Any]] = field(default_factory=dict)
    filters: dict[str, list[Any]] = field(default_factory=dict)
    _commands: list[dict[str, Any]] = field(default_factory=list, repr=False)
    _once: dict[str, list[Callable[[], Any]]] = field(default_factory=dict, repr=False)

    @classmethod
    def from_sources(cls, sources: Mapping[str, Mapping[str, Any]]) -> "CommandMapHost":
        host = cls()
        for source_id, raw in sources.items():
            host.add_source(
                source_id,
                type=str((raw or {}).get("type") or "geojson"),
                data=(raw or {}).get("data"),
            )
        return host

    def add_source(self, source_id: str, *, type: str, data: Any) -> None:
        self.sources[source_id] = MapSource(type=type, data=data)

    def add_layer(self, spec: dict[str, Any]) -> None:
        layer_id = spec["id"]
        if layer_id in self.layers:
            raise ValueError(f"Layer '{layer_id}' already exists on this map")
        self.layers[layer_id] = spec
        if "filter" in spec:
            self.filters[layer_id] = list(spec["filter"])
        self._commands.append({"op": "addLayer", "layer": spec})

    def set_filter(self, layer_id: str, expr: list[Any]) -> None:
        if layer_id not in self.layers:
            raise ValueError(f"Layer '{layer_id}' does not exist on this map")
        self.filters[layer_id] = list(expr)
        self._commands.append({"op": "setFilter", "layerId": layer_id, "filter": expr})

    def get_source(self, source_id: str) -> MapSource | None:
        return self.sources.get(source_id)

    def fit_bounds(self, bbox: list[float], options: dict[str, Any]) -> None:
        self._commands.append(
            {"op": "fitBounds", "bbox": list(bbox), "options": dict(options)}
        )

    def get_pitch(self) -> float:
        return self.pitch

    def get_bearing(self) -> float:
        return self.bearing

    def set_view(self, *, pitch: float | None = None, bearing: float | None = None) -> None:
        if pitch is not None:
            self.pitch = float(pitch)
        if bearing is not None:
            self.bearing = float(bearing)

    def once(self, event: str, callback: Callable[[], Any]) -> None:
        self._once.setdefault(event, []).append(callback)

    def fire(self, event: str) -> int:
        callbacks = self._once.pop(event, [])
        for cb in callbacks:
            cb()
        return len(callbacks)

    def drain(self) -> list[dict[str, Any]]:
        out = self._commands
        self._commands = []
        return out
