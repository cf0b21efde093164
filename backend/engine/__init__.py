"""
Search control engine.

`SearchControl` ties config validation, data loading, the suggestion index and the
highlight state machine to a single map host.
"""
