from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class FeatureRecord:
    """
    A single map feature: its properties plus a GeoJSON geometry mapping.

    Property values are never `None`; loaders normalize nulls to "" so text matching
    sees a uniform shape.
    """

    properties: dict[str, Any]
    geometry: dict[str, Any] | None = None
    # GeoJSON top-level feature id, when the source provides one.
    id: Any = None


@dataclass(frozen=True)
class FeatureCollection:
    features: list[FeatureRecord] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.features)
