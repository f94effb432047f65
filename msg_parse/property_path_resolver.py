"""Nested property lookup with ordered fallback across candidate paths"""
import math
from collections.abc import Mapping
from typing import Any, Dict, Iterable, Sequence, Union

from msg_parse.path_spec import PathSpec, coerce_path_specs


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_present(value: Any) -> bool:
    """
    True unless the value is None, False, an empty string or NaN.

    Numeric zero counts as present, which is what separates a real ``0``
    field from a missing one. Empty containers are present too.
    """
    if value is None or value is False:
        return False
    if isinstance(value, str):
        return value != ''
    if isinstance(value, float) and math.isnan(value):
        return False
    return True


def is_truthy(value: Any) -> bool:
    """Present and not numerically zero"""
    return is_present(value) and not (_is_number(value) and value == 0)


def _child(container: Any, key: str) -> Any:
    if isinstance(container, Mapping):
        return container.get(key)
    if isinstance(container, (list, tuple)) and isinstance(key, str) and key.isascii() and key.isdigit():
        index = int(key)
        if index < len(container):
            return container[index]
    return None


def get_prop(path: Sequence[str], obj: Any, default: Any = None) -> Any:
    """
    Resolve a key path against a nested message.

    Args:
        path: Keys to descend through, outermost first.
        obj: Message root.
        default: Returned as soon as any segment is absent.

    Returns:
        The leaf value, or ``default``.
    """
    current = obj
    for key in path:
        if not is_present(current):
            return default
        value = _child(current, key)
        if not is_present(value):
            return default
        current = value
    return current


def iterate_prop_paths(paths: Iterable[Union[PathSpec, Dict[str, Any]]], msg: Any) -> Any:
    """
    Return the value of the first candidate path present in ``msg``.

    A candidate's override replaces the matched value only when that value
    is truthy, so a winning zero is returned as-is. Returns None when no
    candidate resolves.
    """
    for spec in coerce_path_specs(paths):
        value = get_prop(spec.path, msg)
        if not is_present(value):
            continue
        if is_truthy(spec.override) and is_truthy(value):
            return spec.override
        return value
    return None
