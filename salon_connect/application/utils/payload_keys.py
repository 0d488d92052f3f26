from __future__ import annotations

from typing import Any, Iterable, Sequence


def dig(data: Any, path: Sequence[str]) -> Any:
    """Follow a key path through nested dicts. Returns None when any step is missing."""
    current = data
    for key in path:
        if not isinstance(current, dict):
            return None
        current = current.get(key)
        if current is None:
            return None
    return current


def first_present(data: Any, keys: Iterable[str | Sequence[str]], default: Any = None) -> Any:
    """
    Return the value of the first key (or key path) that holds a usable value.

    Empty strings and None are skipped; falsy but meaningful values such as 0,
    False or [] are returned.
    """
    for key in keys:
        path = (key,) if isinstance(key, str) else tuple(key)
        value = dig(data, path)
        if value is None or value == "":
            continue
        return value
    return default


def unwrap_data(body: Any) -> Any:
    """Responses arrive either as {"data": {...}} or as the object itself."""
    if isinstance(body, dict) and isinstance(body.get("data"), dict):
        return body["data"]
    return body
