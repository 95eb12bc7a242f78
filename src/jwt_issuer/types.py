"""Shared type aliases for claim sets."""
from __future__ import annotations

from typing import Union

JSONScalar = Union[str, int, float, bool, None]
JSONValue = Union[JSONScalar, list["JSONValue"], dict[str, "JSONValue"]]

# Insertion-ordered mapping from claim name to value.
ClaimSet = dict[str, JSONValue]
