"""
functions/utils/payload_access.py

Safe nested lookups into JSON-like payloads returned by the search engine.

Missing keys, out-of-range indices and wrong container types all fall
back to a caller-supplied default; nothing here raises.
"""

from __future__ import annotations

from typing import Any, Mapping, Sequence


def get_path(obj: Any, path: Sequence[Any], default: Any = None) -> Any:
    """
    Walk nested dicts/lists by key or index; return `default` on any miss.

    Example:
        get_path(resp, ["hits", "hits", 0, "_source", "detector_id"])
    """
    cur = obj
    for part in path:
        if isinstance(cur, Mapping) and part in cur:
            cur = cur[part]
        elif isinstance(cur, list) and isinstance(part, int) and -len(cur) <= part < len(cur):
            cur = cur[part]
        else:
            return default
    return cur
