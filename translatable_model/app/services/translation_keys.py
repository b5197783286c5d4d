"""Classification of translatable keys and dotted-path access to structured values."""

from __future__ import annotations

import enum
from collections.abc import Iterable, Mapping, MutableMapping
from typing import Any


class KeyKind(str, enum.Enum):
    TRANSLATABLE = "TRANSLATABLE"
    NESTING = "NESTING"
    ORDINARY = "ORDINARY"


def normalize_key(key: str) -> str:
    """Accept ``->`` as a path separator (``meta->title`` == ``meta.title``)."""
    return key.replace("->", ".")


def classify_key(key: str, translatables: Iterable[str]) -> KeyKind:
    translatables = list(translatables)
    if key in translatables:
        return KeyKind.TRANSLATABLE
    prefix = key + "."
    if any(t.startswith(prefix) for t in translatables):
        return KeyKind.NESTING
    return KeyKind.ORDINARY


def nested_keys(key: str, translatables: Iterable[str]) -> list[tuple[str, str]]:
    """Return ``(translatable_key, path_relative_to_key)`` for keys under ``key``."""
    prefix = key + "."
    return [(t, t[len(prefix):]) for t in translatables if t.startswith(prefix)]


def data_get(target: Any, path: str, default: Any = None) -> Any:
    """Read ``path`` (dot separated) out of nested mappings and lists."""
    current = target
    for segment in path.split("."):
        if isinstance(current, Mapping) and segment in current:
            current = current[segment]
        elif isinstance(current, list) and segment.isdigit() and int(segment) < len(current):
            current = current[int(segment)]
        else:
            return default
    return current


def data_set(target: Any, path: str, value: Any) -> Any:
    """Write ``value`` at ``path`` and return the (possibly new) target.

    Mappings and lists are updated in place.  Missing or scalar intermediate
    slots are replaced by dicts; numeric segments index into lists, padding
    them with ``None`` as needed.
    """
    segment, _, rest = path.partition(".")

    if isinstance(target, list) and segment.isdigit():
        index = int(segment)
        if index >= len(target):
            target.extend([None] * (index + 1 - len(target)))
        target[index] = data_set(target[index], rest, value) if rest else value
        return target

    if not isinstance(target, MutableMapping):
        target = {}
    target[segment] = data_set(target.get(segment), rest, value) if rest else value
    return target
