from .control import (
    EngineState,
    HighlightPhase,
    SearchStrategy,
    clear_query,
    input_changed,
    select,
    selection_filter,
    switch_layer,
)
from .filters import (
    HIGHLIGHT_ID,
    empty_match_filter,
    highlight_layer_id,
    highlight_layer_spec,
    match_filter,
)

__all__ = [
    "HIGHLIGHT_ID",
    "EngineState",
    "HighlightPhase",
    "SearchStrategy",
    "clear_query",
    "empty_match_filter",
    "highlight_layer_id",
    "highlight_layer_spec",
    "input_changed",
    "match_filter",
    "select",
    "selection_filter",
    "switch_layer",
]
