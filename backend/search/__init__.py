from .index import (
    EMPTY_INDEX,
    SuggestionIndex,
    build_suggestion_index,
    dedup_matches,
    features_matching,
    search_keys,
)

__all__ = [
    "EMPTY_INDEX",
    "SuggestionIndex",
    "build_suggestion_index",
    "dedup_matches",
    "features_matching",
    "search_keys",
]
