from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from copy import deepcopy
from typing import Any

logger = logging.getLogger(__name__)

_MISSING = object()


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str) and value == "":
        return True
    if isinstance(value, Mapping) and not value:
        return True
    return False


def _merge_into(result: dict[str, Any], override: Mapping[str, Any]) -> None:
    for key, value in override.items():
        if _is_empty(value):
            continue
        current = result.get(key)
        if isinstance(value, Mapping) and isinstance(current, dict):
            _merge_into(current, value)
        elif isinstance(value, Mapping):
            nested: dict[str, Any] = {}
            _merge_into(nested, value)
            result[key] = nested
        else:
            result[key] = deepcopy(value)


def merge_tokens(defaults: Mapping[str, Any], *overrides: Mapping[str, Any] | None) -> dict[str, Any]:
    """Layer ``overrides`` left to right over ``defaults``.

    Nested mappings merge key by key; any other value replaces what is below it.
    ``None``, ``""`` and empty mappings never clear a lower layer, so a partial
    override keeps every sibling default. Inputs are not mutated.
    """
    result = deepcopy(dict(defaults))
    for override in overrides:
        if not override or not isinstance(override, Mapping):
            continue
        _merge_into(result, override)
    return result


def parse_json_column(value: Any, *, column: str = "") -> dict[str, Any]:
    """Decode a JSON object column; malformed or non-object values read as empty."""
    if value is None or value == "" or value == b"":
        return {}
    if isinstance(value, Mapping):
        return dict(value)
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8", errors="replace")
    if not isinstance(value, str):
        logger.warning(
            "theme.json_column_malformed",
            extra={"column": column, "error": f"unsupported type {type(value).__name__}"},
        )
        return {}
    try:
        decoded = json.loads(value)
    except json.JSONDecodeError as exc:
        logger.warning("theme.json_column_malformed", extra={"column": column, "error": str(exc)})
        return {}
    if not isinstance(decoded, dict):
        if decoded not in (None, [], ""):
            logger.warning(
                "theme.json_column_malformed",
                extra={"column": column, "error": f"expected object, got {type(decoded).__name__}"},
            )
        return {}
    return decoded


def get_token(tree: Mapping[str, Any], path: str, default: Any = None) -> Any:
    node: Any = tree
    for part in path.split("."):
        if not isinstance(node, Mapping):
            return default
        node = node.get(part, _MISSING)
        if node is _MISSING:
            return default
    return node


def set_token(tree: Mapping[str, Any], path: str, value: Any) -> dict[str, Any]:
    """Return a copy of ``tree`` with ``path`` set, creating intermediate mappings."""
    parts = [part for part in path.split(".") if part]
    if not parts:
        raise ValueError("Token path must not be empty")
    result = deepcopy(dict(tree))
    node = result
    for part in parts[:-1]:
        child = node.get(part)
        if not isinstance(child, dict):
            child = {}
            node[part] = child
        node = child
    node[parts[-1]] = value
    return result
