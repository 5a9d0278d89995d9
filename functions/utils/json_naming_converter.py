"""
functions/utils/json_naming_converter.py

WHAT THIS FILE IS FOR
---------------------
This module provides the **recursive JSON key normalization utilities**
shared by every payload mapper in this package.

Two naming conventions meet at this layer:
- camelCase: the client-facing anomaly detection API contract
- snake_case: the backing search engine documents and responses

It converts dictionary keys in either direction while preserving
values and structure.

CORE FUNCTIONALITY
------------------
- Convert snake_case keys to camelCase (responses going to clients)
- Convert camelCase keys to snake_case (requests going to the engine)
- Recursively traverse nested dicts and lists
- Preserve non-dict primitives unchanged
- Avoid mutating the original input object

FREE-FORM CONTAINERS
--------------------
Every nested key is converted. Fields whose inner keys belong to the
user (saved query DSL, UI metadata blobs) are declared as explicit
tables in functions/detectors/detector_mapper.py, which strips them
before calling the converters here and puts them back verbatim.

ROUND-TRIP GUARANTEE
--------------------
For keys made of lowercase words, digits and single capitals
(e.g. "seqNo", "featureAttributes", "feature1Name") the two directions
are inverses:

    camel_to_snake(snake_to_camel(k)) == k
    snake_to_camel(camel_to_snake(k)) == k

WHAT THIS FILE IS NOT FOR
-------------------------
This module MUST NOT:
- Know about detector, feature or result schemas
- Modify values or business semantics
- Perform I/O or logging

It is a **pure transformation utility**.
"""

from __future__ import annotations

import copy
import re
from typing import Any, Callable


_CAMEL_BOUNDARY_RE = re.compile(r"(?<=[a-z0-9])([A-Z])")


def _split_underscores(s: str) -> tuple[str, str, str]:
    leading = len(s) - len(s.lstrip("_"))
    trailing = len(s) - len(s.rstrip("_"))
    core = s.strip("_")
    return "_" * leading, core, "_" * trailing


def snake_to_camel(s: str) -> str:
    """
    Convert snake_case string to camelCase.

    - Leaves strings without '_' unchanged
    - Preserves leading/trailing underscores
    """
    if "_" not in s:
        return s

    leading, core, trailing = _split_underscores(s)

    if not core:
        return s  # e.g. "___"

    parts = [p for p in core.split("_") if p]
    if not parts:
        return s

    first = parts[0]
    rest = [p[:1].upper() + p[1:] if p else p for p in parts[1:]]
    camel = first + "".join(rest)

    return leading + camel + trailing


def camel_to_snake(s: str) -> str:
    """
    Convert camelCase string to snake_case.

    - Leaves all-lowercase strings unchanged
    - Preserves leading/trailing underscores (e.g. "_id" stays "_id")
    """
    if not any(c.isupper() for c in s):
        return s

    leading, core, trailing = _split_underscores(s)
    snake = _CAMEL_BOUNDARY_RE.sub(r"_\1", core).lower()

    return leading + snake + trailing


def _convert_keys(obj: Any, key_fn: Callable[[str], str]) -> Any:
    # ---------- list ----------
    if isinstance(obj, list):
        return [_convert_keys(x, key_fn) for x in obj]

    # ---------- dict ----------
    if isinstance(obj, dict):
        out: dict[Any, Any] = {}

        for key, value in obj.items():
            if not isinstance(key, str):
                out[key] = copy.deepcopy(value)
                continue

            out[key_fn(key)] = _convert_keys(value, key_fn)

        return out

    # ---------- primitive ----------
    return obj


def convert_keys_snake_to_camel(obj: Any) -> Any:
    """
    Recursively convert dict keys from snake_case to camelCase.

    Args:
        obj:
            Any JSON-like object (dict / list / primitive)

    Returns:
        New object with converted keys (input is not mutated)
    """
    return _convert_keys(obj, snake_to_camel)


def convert_keys_camel_to_snake(obj: Any) -> Any:
    """
    Recursively convert dict keys from camelCase to snake_case.

    Mirror of convert_keys_snake_to_camel().
    """
    return _convert_keys(obj, camel_to_snake)
