from __future__ import annotations

import logging
import random
import string
from collections.abc import Mapping
from typing import Any

import httpx

from control.errors import ConfigError, LoadError
from control.registry import ensure_layer_searchable
from control.settings import cache_bust_enabled, http_timeout_s
from control.types import LayerConfig
from engine.types import MapHost, MapSource
from layers.types import FeatureCollection, FeatureRecord

logger = logging.getLogger(__name__)

_CACHE_BUST_ALPHABET = string.ascii_lowercase + string.digits


class DataLoader:
    """
    Resolves the raw features behind a layer.

    Features are requested as raw GeoJSON (not queried from the rendered map) so that
    search also covers features outside the current viewport.

    Resolution order, first match wins:
    1. `layer.dataPath` (fetched)
    2. the map source's data when it is a URL (fetched)
    3. the map source's in-memory data
    """

    def __init__(
        self,
        host: MapHost,
        *,
        client: httpx.AsyncClient | None = None,
        cache_bust: bool | None = None,
        timeout: float | None = None,
    ):
        self.host = host
        self.cache_bust = cache_bust_enabled() if cache_bust is None else cache_bust
        self.timeout = http_timeout_s() if timeout is None else timeout
        self._client = client

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def close(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def load(self, layer: LayerConfig) -> FeatureCollection:
        ensure_layer_searchable(layer)
        source = resolve_source(self.host, layer)

        if isinstance(layer.dataPath, str) and layer.dataPath:
            data = await self._fetch(layer.dataPath)
        elif isinstance(source.data, str):
            data = await self._fetch(source.data)
        else:
            data = source.data

        collection = parse_feature_collection(data)
        logger.info(
            "Loaded %d features for layer '%s'", len(collection), layer.displayName
        )
        return collection

    async def _fetch(self, url: str) -> Any:
        target = with_cache_buster(url) if self.cache_bust else url
        client = await self._get_client()
        try:
            response = await client.get(target)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            raise LoadError(
                f"Fetching {url} failed with HTTP {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise LoadError(f"Fetching {url} failed: {type(e).__name__}: {e}") from e
        except ValueError as e:
            raise LoadError(f"{url} did not return valid JSON") from e


def resolve_source(host: MapHost, layer: LayerConfig) -> MapSource:
    """
    The GeoJSON source backing `layer`; anything else is a config error.
    """
    source = host.get_source(layer.source)
    if source is None:
        raise ConfigError(f"{layer.source} source is not registered on the map")
    if source.type != "geojson":
        raise ConfigError(f"{layer.source} layer is not a valid geojson")
    return source


def with_cache_buster(url: str) -> str:
    key = "".join(random.choices(_CACHE_BUST_ALPHABET, k=2))
    val = "".join(random.choices(_CACHE_BUST_ALPHABET, k=4))
    sep = "&" if "?" in url else "?"
    return f"{url}{sep}x-{key}={val}"


def parse_feature_collection(data: Any) -> FeatureCollection:
    if not isinstance(data, Mapping):
        raise LoadError("Feature data is not a GeoJSON object")
    if data.get("type") not in (None, "FeatureCollection"):
        raise LoadError(f"Expected a FeatureCollection, got {data.get('type')!r}")
    features = data.get("features")
    if not isinstance(features, list):
        raise LoadError("FeatureCollection is missing a `features` list")

    out: list[FeatureRecord] = []
    for feature in features:
        if not isinstance(feature, Mapping):
            continue
        props = feature.get("properties") or {}
        geom = feature.get("geometry")
        out.append(
            FeatureRecord(
                properties=blank_nulls(props) if isinstance(props, Mapping) else {},
                geometry=dict(geom) if isinstance(geom, Mapping) else None,
                id=feature.get("id"),
            )
        )
    return FeatureCollection(features=out)


def blank_nulls(props: Mapping[str, Any]) -> dict[str, Any]:
    """
    Copy of `props` with every null mapping value (nested ones too) replaced by "".
    """
    out: dict[str, Any] = {}
    for k, v in props.items():
        if v is None:
            out[k] = ""
        elif isinstance(v, Mapping):
            out[k] = blank_nulls(v)
        elif isinstance(v, list):
            out[k] = [blank_nulls(x) if isinstance(x, Mapping) else x for x in v]
        else:
            out[k] = v
    return out
