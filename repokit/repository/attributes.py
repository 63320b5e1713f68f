"""
Dot-path helpers for attribute maps.

An attribute map is a tree: string keys mapping to scalars, lists or nested
maps. A dot path such as ``"address.city"`` or ``"0.name"`` addresses a node;
numeric segments index into lists.
"""

from copy import deepcopy
from typing import Any, Dict, Iterable, List, Mapping

_MISSING = object()


def _segments(key: Any) -> List[str]:
    return str(key).split(".")


def _is_index(segment: Any) -> bool:
    return isinstance(segment, int) or (isinstance(segment, str) and segment.isdigit())


def _child(container: Any, segment: str, default: Any = _MISSING) -> Any:
    if isinstance(container, Mapping):
        return container.get(segment, default)
    if isinstance(container, list) and _is_index(segment):
        index = int(segment)
        if index < len(container):
            return container[index]
    return default


def _assign(container: Any, segment: str, value: Any) -> None:
    if isinstance(container, list) and _is_index(segment):
        index = int(segment)
        if index < len(container):
            container[index] = value
        else:
            container.extend([None] * (index - len(container)))
            container.append(value)
    else:
        container[segment] = value


def data_get(data: Any, key: Any, default: Any = None) -> Any:
    """Read the value at a dot path, or ``default`` when any segment is missing."""
    if key is None:
        return data
    current = data
    for segment in _segments(key):
        current = _child(current, segment)
        if current is _MISSING:
            return default
    return current


def data_has(data: Any, key: Any) -> bool:
    return data_get(data, key, _MISSING) is not _MISSING


def data_set(data: Any, key: Any, value: Any) -> Any:
    """
    Set ``value`` at a dot path in place, creating intermediate maps.

    Scalars found on the way are replaced by maps. Returns ``data``.
    """
    segments = _segments(key)
    current = data
    for segment in segments[:-1]:
        child = _child(current, segment)
        if not isinstance(child, (dict, list)):
            child = {}
            _assign(current, segment, child)
        current = child
    _assign(current, segments[-1], value)
    return data


def forget(data: Any, keys: Iterable[Any]) -> Any:
    """Return a copy of ``data`` without the given dot paths."""
    result = deepcopy(data)
    targets = {}
    for key in keys:
        # an exact top-level key wins over its dot-path reading
        if isinstance(result, dict) and key in result:
            targets[(id(result), key)] = (result, key)
            continue
        segments = _segments(key)
        parent = result if len(segments) == 1 else data_get(result, ".".join(segments[:-1]))
        if isinstance(parent, (dict, list)):
            targets[(id(parent), segments[-1])] = (parent, segments[-1])

    # list entries go highest index first so removals don't shift pending ones
    ordered = sorted(
        targets.values(),
        key=lambda target: (isinstance(target[0], list), int(target[1]) if _is_index(target[1]) else -1),
        reverse=True,
    )
    for parent, segment in ordered:
        if isinstance(parent, dict):
            parent.pop(segment, None)
        elif _is_index(segment) and int(segment) < len(parent):
            del parent[int(segment)]
    return result


def expand_dot_keys(attributes: Mapping[str, Any]) -> Dict[str, Any]:
    """Turn ``{"a.b": 1, "c": 2}`` into ``{"a": {"b": 1}, "c": 2}``."""
    tree: Dict[str, Any] = {}
    for key, value in attributes.items():
        data_set(tree, key, deepcopy(value))
    return tree


def _replace(base: Any, replacement: Any) -> Any:
    if isinstance(base, dict) and isinstance(replacement, Mapping):
        for key, value in replacement.items():
            base[key] = _replace(base[key], value) if key in base else deepcopy(value)
        return base
    if isinstance(base, list) and isinstance(replacement, (list, Mapping)):
        items = list(replacement.items()) if isinstance(replacement, Mapping) else list(enumerate(replacement))
        if not all(_is_index(key) for key, _ in items):
            as_map = {str(index): value for index, value in enumerate(base)}
            return _replace(as_map, replacement)
        for key, value in items:
            index = int(key)
            if index < len(base):
                base[index] = _replace(base[index], value)
            else:
                base.append(deepcopy(value))
        return base
    return deepcopy(replacement)


def replace_recursive(base: Any, *replacements: Any) -> Any:
    """
    Deep-merge ``replacements`` into a copy of ``base``.

    Maps merge key by key and lists merge index by index; on any other
    conflict the replacement wins.
    """
    result = deepcopy(base)
    for replacement in replacements:
        result = _replace(result, replacement)
    return result
