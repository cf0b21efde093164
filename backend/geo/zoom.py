from __future__ import annotations

import logging
import math
from collections.abc import Iterable

from shapely.errors import ShapelyError
from shapely.geometry import shape

from control.errors import ZoomError
from control.types import LayerConfig
from engine.types import MapHost
from geo.aoi import BBox
from layers.types import FeatureRecord

logger = logging.getLogger(__name__)

FIT_PADDING = 100


def features_bbox(features: Iterable[FeatureRecord]) -> BBox:
    """
    Bounding box enclosing every geometry in `features`.

    A selection can resolve to several features sharing a property value, so this is
    the union of their bounds, not the first match.
    """
    out: BBox | None = None
    for f in features:
        if not f.geometry:
            continue
        try:
            min_lon, min_lat, max_lon, max_lat = shape(f.geometry).bounds
        except (ShapelyError, ValueError, TypeError, KeyError) as e:
            raise ZoomError(f"Invalid geometry: {e}") from e
        # Empty geometries report NaN bounds.
        if any(math.isnan(v) for v in (min_lon, min_lat, max_lon, max_lat)):
            continue
        b = BBox(min_lon=min_lon, min_lat=min_lat, max_lon=max_lon, max_lat=max_lat)
        out = b if out is None else out.union(b)
    if out is None:
        raise ZoomError("No feature geometry to zoom to")
    return out


class ViewportZoomer:
    def __init__(self, *, padding: int = FIT_PADDING):
        self.padding = padding

    def zoom_to(
        self, features: list[FeatureRecord], *, host: MapHost, layer: LayerConfig
    ) -> BBox | None:
        """
        Ask the host to fit the selected features, keeping pitch and bearing.

        Never raises for an empty selection: the highlight must still apply.
        """
        if not layer.zoom_enabled:
            return None
        try:
            bbox = features_bbox(features)
        except ZoomError as e:
            logger.warning("Skipping zoom on layer '%s': %s", layer.displayName, e)
            return None

        host.fit_bounds(
            bbox.as_list(),
            {
                "pitch": host.get_pitch(),
                "bearing": host.get_bearing(),
                "padding": self.padding,
            },
        )
        return bbox
