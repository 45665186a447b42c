"""Helpers for reading HTTP query parameters."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from urllib.parse import quote

__all__ = ["get_true", "get_string"]

Params = Mapping[str, str] | Iterable[tuple[str, str]]


def _find(params: Params, key: str) -> str | None:
    """Return the first value whose name matches ``key`` ignoring ASCII case."""
    pairs = params.items() if isinstance(params, Mapping) else params
    wanted = key.lower()
    for name, value in pairs:
        if name.lower() == wanted:
            return value
    return None


def get_true(params: Params, key: str) -> bool:
    """Tell whether ``key`` holds a true value: one starting with 1, or true/yes."""
    value = _find(params, key)
    if value is None:
        return False
    return value.startswith("1") or value.lower() in ("true", "yes")


def get_string(params: Params, key: str) -> str | None:
    """Return the value of ``key`` percent-encoded, or None if it is absent."""
    value = _find(params, key)
    if value is None:
        return None
    return quote(value, safe="")