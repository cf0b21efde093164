from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, TypeVar

from control.types import LayerConfig
from layers.loaders import blank_nulls
from layers.types import FeatureRecord

C = TypeVar("C", bound=Mapping[str, Any])


@dataclass(frozen=True)
class SuggestionIndex:
    """
    Records and keys handed to the text-search UI for the active layer.
    """

    records: list[dict[str, Any]]
    keys: list[str]

    def to_payload(self) -> dict[str, Any]:
        return {"records": self.records, "keys": list(self.keys)}


EMPTY_INDEX = SuggestionIndex(records=[], keys=[])


def build_suggestion_index(
    features: Sequence[FeatureRecord], layer: LayerConfig
) -> SuggestionIndex:
    records = [blank_nulls(f.properties) for f in features]
    return SuggestionIndex(records=records, keys=search_keys(records, layer))


def search_keys(records: Sequence[Mapping[str, Any]], layer: LayerConfig) -> list[str]:
    if layer.searchProperties is not None:
        return list(layer.searchProperties)
    # The first record stands in for the layer's schema.
    first = list(records[0].keys()) if records else []
    if layer.excludedProperties is not None:
        excluded = set(layer.excludedProperties)
        return [k for k in first if k not in excluded]
    return first


def dedup_matches(candidates: Iterable[C]) -> list[C]:
    """
    Drop result rows that repeat an earlier `(key, match)` pair.

    A query can hit the same value through several synonymous properties; without this
    the UI would render the same row more than once. First-seen order is kept.
    """
    out: list[C] = []
    seen: set[tuple[Any, Any]] = set()
    for c in candidates:
        pair = (c.get("key"), c.get("match"))
        if pair in seen:
            continue
        seen.add(pair)
        out.append(c)
    return out


def features_matching(
    features: Iterable[FeatureRecord], key: str, value: Any
) -> list[FeatureRecord]:
    return [f for f in features if f.properties.get(key) == value]
