from __future__ import annotations


class SearchControlError(Exception):
    """Base class for errors raised by the search control."""


class ConfigError(SearchControlError):
    """
    Bad or missing configuration.

    Raised eagerly (validation / before a load) and never retried.
    """


class LoadError(SearchControlError):
    """
    Fetching or parsing a layer's feature data failed.

    Recoverable: the control stays in its pre-load state and the caller may try again.
    """


class ZoomError(SearchControlError):
    """No bounds could be computed for the selected features."""


class UnknownLayerError(ConfigError):
    """A layer-picker value that names no configured layer."""


class ControlNotReadyError(SearchControlError):
    """The control was used before it was added to a map and populated."""
