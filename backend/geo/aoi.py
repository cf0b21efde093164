from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class BBox:
    """
    WGS84 bounding box in lon/lat degrees.

    Convention used throughout this repo:
    - minLon, minLat, maxLon, maxLat
    """

    min_lon: float
    min_lat: float
    max_lon: float
    max_lat: float

    def union(self, other: "BBox") -> "BBox":
        return BBox(
            min_lon=min(self.min_lon, other.min_lon),
            min_lat=min(self.min_lat, other.min_lat),
            max_lon=max(self.max_lon, other.max_lon),
            max_lat=max(self.max_lat, other.max_lat),
        )

    def as_list(self) -> list[float]:
        # Same order as a GeoJSON / turf bbox.
        return [self.min_lon, self.min_lat, self.max_lon, self.max_lat]
