from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Mapping
from typing import Any, Callable, TypeVar

from control.errors import ControlNotReadyError, LoadError, UnknownLayerError
from control.registry import picker_groups, resolve_identifiers, validate
from control.settings import dedup_enabled, highlight_strategy
from control.types import LayerConfig
from engine.types import MapHost
from geo.zoom import ViewportZoomer
from highlight import control as highlight
from highlight.control import EngineState, SearchStrategy
from highlight.filters import highlight_layer_spec
from layers.loaders import DataLoader, resolve_source
from layers.types import FeatureCollection
from search.index import EMPTY_INDEX, SuggestionIndex, build_suggestion_index, dedup_matches

logger = logging.getLogger(__name__)

C = TypeVar("C", bound=Mapping[str, Any])


class SearchControl:
    """
    One search control bound to (at most) one map host.

    Lifecycle:
    - construct: options are validated eagerly; a bad config raises before any map call
    - on_add(host): highlight overlays are added and a host "idle" hook is registered
    - populate(): waits for the host to be ready, loads the first layer
    - switch_layer / select / input_changed: UI events
    - on_remove(): tears the state down

    Loads are tagged with a generation token; a load that resolves after a newer
    populate/switch request was issued is dropped instead of overwriting fresher data.
    """

    def __init__(
        self,
        raw_options: Any,
        *,
        strategy: SearchStrategy | None = None,
        zoomer: ViewportZoomer | None = None,
        loader_factory: Callable[[MapHost], DataLoader] | None = None,
    ):
        self.options = validate(raw_options)
        self.identifiers = resolve_identifiers(self.options)
        self.strategy = strategy or SearchStrategy(
            highlight_key=highlight_strategy(),
            dedup_enabled=dedup_enabled(),
        )
        self.zoomer = zoomer or ViewportZoomer()
        self._loader_factory = loader_factory or DataLoader
        self.host: MapHost | None = None
        self.loader: DataLoader | None = None
        self.state: EngineState | None = None
        self.index: SuggestionIndex = EMPTY_INDEX
        self._generation = 0
        self._ready = asyncio.Event()

    def on_add(self, host: MapHost) -> None:
        if self.host is not None:
            raise RuntimeError("Search control is already added to a map")
        # Every source is checked before the first overlay goes on the map.
        for layer in self.options.layers:
            resolve_source(host, layer)
        self.host = host
        self.loader = self._loader_factory(host)
        for layer in self.options.layers:
            host.add_layer(highlight_layer_spec(layer))
        host.once("idle", self.host_ready)

    def host_ready(self) -> None:
        """
        Mark the host as ready; `populate()` proceeds once this has been called.
        """
        self._ready.set()

    async def populate(self) -> SuggestionIndex | None:
        self._require_host()
        await self._ready.wait()
        return await self._activate(self.options.layers[0])

    async def on_remove(self) -> None:
        # Bumping the generation drops any load still in flight.
        self._generation += 1
        if self.loader is not None:
            await self.loader.close()
        self.host = None
        self.loader = None
        self.state = None
        self.index = EMPTY_INDEX
        self._ready = asyncio.Event()

    async def switch_layer(self, display_name: str) -> SuggestionIndex | None:
        """
        Layer-picker change. Returns the new index, or None if a newer request won.
        """
        self._require_host()
        layer = self.options.layer_named(display_name)
        if layer is None:
            raise UnknownLayerError(f"No layer named '{display_name}'")
        return await self._activate(layer)

    def select(self, value: Any, key: str) -> EngineState:
        host = self._require_host()
        self.state = highlight.select(
            self._require_state(),
            value,
            key,
            host=host,
            strategy=self.strategy,
            zoomer=self.zoomer,
        )
        return self.state

    def input_changed(self, value: str) -> EngineState:
        host = self._require_host()
        self.state = highlight.input_changed(self._require_state(), value, host=host)
        return self.state

    def dedup(self, candidates: Iterable[C]) -> list[C]:
        if not self.strategy.dedup_enabled:
            return list(candidates)
        return dedup_matches(candidates)

    @property
    def active_layer(self) -> LayerConfig | None:
        return self.state.active_layer if self.state is not None else None

    def picker_groups(self) -> list[dict[str, Any]]:
        active = self.active_layer
        return picker_groups(
            self.options.layers, chosen=active.displayName if active else None
        )

    def ui_payload(self) -> dict[str, Any]:
        active = self.active_layer
        return {
            **self.index.to_payload(),
            "threshold": self.options.characterThreshold,
            "maxResults": self.options.maxResults,
            "placeholder": self.options.placeholderText,
            "inputID": self.identifiers.input_id,
            "activeLayer": active.displayName if active else None,
            "dedup": self.strategy.dedup_enabled,
        }

    async def _activate(self, layer: LayerConfig) -> SuggestionIndex | None:
        self._generation += 1
        token = self._generation
        if self.loader is None:
            raise ControlNotReadyError("Search control is not added to a map")
        try:
            collection = await self.loader.load(layer)
        except LoadError:
            # on_remove may close the client under a superseded fetch.
            if token != self._generation:
                logger.debug(
                    "Dropping failed stale load for layer '%s'", layer.displayName
                )
                return None
            raise
        if token != self._generation:
            logger.debug(
                "Dropping stale load for layer '%s' (generation %d, current %d)",
                layer.displayName,
                token,
                self._generation,
            )
            return None
        self._apply(layer, collection)
        return self.index

    def _apply(self, layer: LayerConfig, collection: FeatureCollection) -> None:
        host = self._require_host()
        if self.state is None:
            self.state = EngineState(active_layer=layer, feature_collection=collection)
        else:
            logger.info(
                "Switching search layer '%s' -> '%s'",
                self.state.active_layer.displayName,
                layer.displayName,
            )
            self.state = highlight.switch_layer(self.state, layer, collection, host=host)
        self.index = build_suggestion_index(collection.features, layer)

    def _require_host(self) -> MapHost:
        if self.host is None:
            raise ControlNotReadyError("Search control is not added to a map")
        return self.host

    def _require_state(self) -> EngineState:
        if self.state is None:
            raise ControlNotReadyError("Search control has no layer data yet")
        return self.state
