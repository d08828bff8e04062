"""Shared type aliases for postburst."""

from __future__ import annotations

from typing import Any

# HTTP headers dictionary.
Headers = dict[str, str]

# Any value json.dumps accepts (dict, list, str, int, float, bool, None).
JSONValue = Any
