"""Default configuration values.

DEFAULT_CONFIG is a plain dict so it can be passed straight to deep_merge,
which copies rather than mutates its inputs.
"""

from typing import Any

DEFAULT_CONFIG: dict[str, Any] = {  # pyright: ignore[reportExplicitAny]
    "logging": {
        "level": "info",
        "format": "json",
        "file": "",
    },
    "sync": {
        "remote": "origin",
        "fetch": True,
        "prune": True,
        "fetch_timeout": 60.0,
        "active_branch": "fast-forward",
        "protected_branches": [],
    },
}
