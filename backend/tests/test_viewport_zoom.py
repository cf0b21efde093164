from __future__ import annotations

import logging

import pytest

from control.errors import ZoomError
from control.types import LayerConfig
from engine.command_host import CommandMapHost
from geo.zoom import ViewportZoomer, features_bbox
from layers.types import FeatureRecord


def _layer(**kw) -> LayerConfig:
    return LayerConfig(
        **{"source": "parks", "displayName": "Parks", "uniqueFeatureID": "id", **kw}
    )


def _point(lon: float, lat: float) -> FeatureRecord:
    return FeatureRecord(
        properties={}, geometry={"type": "Point", "coordinates": [lon, lat]}
    )


def test_bbox_spans_every_selected_feature():
    line = FeatureRecord(
        properties={},
        geometry={"type": "LineString", "coordinates": [[1.0, 1.0], [3.0, 4.0]]},
    )
    bbox = features_bbox([_point(0.5, 2.0), line])
    assert bbox.as_list() == [0.5, 1.0, 3.0, 4.0]


def test_bbox_of_nothing_raises():
    with pytest.raises(ZoomError):
        features_bbox([])
    with pytest.raises(ZoomError):
        features_bbox([FeatureRecord(properties={"id": 1})])


def test_zoom_keeps_pitch_and_bearing_with_fixed_padding():
    host = CommandMapHost(pitch=45.0, bearing=-17.5)
    bbox = ViewportZoomer().zoom_to([_point(1.0, 2.0)], host=host, layer=_layer())
    assert bbox is not None
    assert host.drain() == [
        {
            "op": "fitBounds",
            "bbox": [1.0, 2.0, 1.0, 2.0],
            "options": {"pitch": 45.0, "bearing": -17.5, "padding": 100},
        }
    ]


def test_zoom_disabled_per_layer():
    host = CommandMapHost()
    out = ViewportZoomer().zoom_to(
        [_point(1.0, 2.0)], host=host, layer=_layer(zoomOnSearch=False)
    )
    assert out is None
    assert host.drain() == []


def test_empty_selection_logs_instead_of_raising(caplog):
    host = CommandMapHost()
    with caplog.at_level(logging.WARNING, logger="geo.zoom"):
        assert ViewportZoomer().zoom_to([], host=host, layer=_layer()) is None
    assert host.drain() == []
    assert "Skipping zoom" in caplog.text
