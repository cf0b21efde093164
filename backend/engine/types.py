from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Protocol


@dataclass(frozen=True)
class MapSource:
    """
    What the map host reports for a data source.

    `data` is either a URL string or an in-memory GeoJSON mapping.
    """

    type: str
    data: str | dict[str, Any] | None = None


class MapHost(Protocol):
    """
    The slice of a map the search control drives.

    - CommandMapHost: records mutations as JSON commands for a browser to replay
    """

    def add_layer(self, spec: dict[str, Any]) -> None: ...

    def set_filter(self, layer_id: str, expr: list[Any]) -> None: ...

    def get_source(self, source_id: str) -> MapSource | None: ...

    def fit_bounds(self, bbox: list[float], options: dict[str, Any]) -> None: ...

    def get_pitch(self) -> float: ...

    def get_bearing(self) -> float: ...

    def once(self, event: str, callback: Callable[[], Any]) -> None: ...
