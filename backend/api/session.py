from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache

from control.registry import load_options_file
from control.settings import options_path
from engine.command_host import CommandMapHost
from engine.search_control import SearchControl


@dataclass
class SearchSession:
    """
    The process-wide control and the command host it drives.
    """

    control: SearchControl
    host: CommandMapHost


def build_session(options: dict, sources: dict) -> SearchSession:
    # Validation happens in the SearchControl constructor, before the host is touched.
    control = SearchControl(options)
    host = CommandMapHost.from_sources(sources)
    control.on_add(host)
    return SearchSession(control=control, host=host)


@lru_cache(maxsize=1)
def get_session() -> SearchSession:
    options, sources = load_options_file(options_path())
    return build_session(options, sources)


def clear_session_cache() -> None:
    """
    Drop the cached session so the next request re-reads the options file.
    """
    get_session.cache_clear()


async def current_session() -> SearchSession:
    # Async so FastAPI resolves it on the event loop, not in its threadpool.
    return get_session()
