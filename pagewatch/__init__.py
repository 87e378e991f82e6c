"""PageWatch - Summarize recent workspace changes per author"""

from __future__ import annotations

__version__ = "1.0.0"


# Lazy imports so `import pagewatch` stays cheap (no requests/pydantic load)
def __getattr__(name: str):
    if name in ("WatchRun", "RunResult", "RunState"):
        from pagewatch.watch import orchestrator

        return getattr(orchestrator, name)

    if name in ("WatchSettings", "load_settings"):
        from pagewatch.infrastructure import settings

        return getattr(settings, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)


__all__ = [
    "RunResult",
    "RunState",
    "WatchRun",
    "WatchSettings",
    "load_settings",
]
