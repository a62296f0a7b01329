#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
"""Helpers for manipulating nested dictionaries, lists and plain objects."""

import datetime
import json
import random
import re
from collections.abc import Callable, Mapping
from copy import deepcopy
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from numbers import Number
from typing import Any, NamedTuple, TypeVar

from repeatable.config import get_config
from repeatable.constants import (
    BASE_OBJECT_KEY,
    CIRCULAR_REFERENCE_TEMPLATE,
    LOWER_FIRST,
    NOT_FOUND,
    UPPER_FIRST,
)
from repeatable.exceptions import TraversalError

T = TypeVar("T")

TraversalCallback = Callable[[Any, Any], tuple[Any, Any] | list | None]


def to_type(val: Any = None) -> str:
    """A lower case name for the kind of value `val` is.

    Example
    -------
        to_type({"a": 4})  # 'object'
        to_type([1, 2, 3])  # 'array'
        to_type(ValueError())  # 'error'
        to_type(re.compile("a-z"))  # 'regexp'
        to_type(None)  # 'null'
        to_type(lambda: None)  # 'function'
    """
    if val is None:
        return "null"
    if isinstance(val, bool):
        return "boolean"
    if isinstance(val, Number):
        return "number"
    if isinstance(val, str):
        return "string"
    if isinstance(val, (list, tuple)):
        return "array"
    if isinstance(val, Mapping):
        return "object"
    if isinstance(val, (set, frozenset)):
        return "set"
    if isinstance(val, datetime.datetime):
        return "datetime"
    if isinstance(val, datetime.date):
        return "date"
    if isinstance(val, re.Pattern):
        return "regexp"
    if isinstance(val, BaseException):
        return "error"
    if callable(val):
        return "function"
    return type(val).__name__.lower()


def round_(value: float, decimals: int = 2) -> float:
    """Round half away from zero, without binary floating point artefacts
    (ie `round_(1.005)` is 1.01)."""
    quantum = Decimal(1).scaleb(-decimals)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def clone(obj: T) -> T:
    return deepcopy(obj)


def shuffle_in_place(seq: list[T]) -> list[T]:
    """Fisher-Yates shuffle. Operates on `seq` directly."""
    random.shuffle(seq)
    return seq


def shuffle_clone(seq: list[T]) -> list[T]:
    """Fisher-Yates shuffle. Preserves the original, returns a clone."""
    return shuffle_in_place(clone(seq))


def is_empty(val: Any) -> bool:
    if val is None:
        return True
    if isinstance(val, (str, list, tuple, Mapping, set, frozenset)):
        return len(val) == 0
    # other types are filled by nature
    return False


def is_not_empty(val: Any) -> bool:
    return not is_empty(val)


def wrap_object_with_property(
    obj: T, prop_name: str, preserve_original: bool = True
) -> dict[str, T]:
    return {prop_name: clone(obj) if preserve_original else obj}


def is_object(val: Any) -> bool:
    return isinstance(val, Mapping)


def traverse_object(
    obj: dict,
    callback: TraversalCallback,
    recursive: bool = False,
    preserve_original: bool = True,
) -> dict:
    """Visit the items of `obj`, building a new dictionary from the
    `(key, value)` pairs returned by `callback`.

    Parameters
    ----------
    callback
        Called with each key and value. Returning `None` (or any empty value)
        skips the item; returning a pair adds it to the output.
    recursive
        If set, nested dictionaries are traversed first and replaced by the
        result of their traversal (unless it is empty).
    preserve_original
        Operate on a copy of `obj`. Otherwise nested values of `obj` may be
        replaced in recursive mode.

    Raises
    ------
    TraversalError if `callback` returns something other than a pair.
    """
    new_object = clone(obj) if preserve_original else obj
    returned = {}
    for key in list(new_object):
        if recursive and is_object(new_object[key]):
            recursed = traverse_object(
                new_object[key], callback, recursive, preserve_original
            )
            if not is_empty(recursed):
                new_object[key] = recursed
        pair = callback(key, new_object[key])
        if isinstance(pair, (list, tuple)) and len(pair) == 2:
            returned[pair[0]] = pair[1]
        elif not is_empty(pair):
            raise TraversalError(
                "It looks like you might have been trying to construct a new object, "
                "but you returned something other than a pair that looks like "
                f"(key, value). You returned {pair!r}"
            )
    return returned


class PropertyDetails(NamedTuple):
    """The outcome of walking a dotted property path.

    Parameters
    ----------
    exists
        Whether the full path resolved to a truthy value.
    existing_path
        The longest prefix of the path which could be resolved.
    final_valid_property
        The value found at `existing_path`.
    """

    exists: bool
    existing_path: str
    final_valid_property: Any


def _get_property(obj: Any, name: str) -> Any:
    if isinstance(obj, Mapping):
        return obj.get(name)
    if isinstance(obj, (list, tuple)):
        if name.isdigit() and int(name) < len(obj):
            return obj[int(name)]
        return None
    return getattr(obj, name, None)


def nested_property_details(obj: Any, property_path: str) -> PropertyDetails:
    current = obj
    exists = True
    existing_path = []
    for part in property_path.split("."):
        value = _get_property(current, part) if part else None
        if not value:
            exists = False
            break
        existing_path.append(part)
        current = value
    return PropertyDetails(
        exists=exists,
        existing_path=".".join(existing_path),
        final_valid_property=current,
    )


def nested_property_test(
    obj: Any, property_path: str, callback: Callable[[Any], Any]
) -> bool:
    details = nested_property_details(obj, property_path)
    if details.exists:
        return bool(callback(details.final_valid_property))
    return False


def nested_property_exists(obj: Any, property_path: str) -> bool:
    return nested_property_details(obj, property_path).exists


def nested_property_or_default(
    obj: Any, property_path: str, default_value: Any = None
) -> Any:
    """Return the value of a nested property, or `default_value` if the path
    does not exist.

    Parameters
    ----------
    property_path
        Dotted path to the desired value, eg "config.person.name".
    """
    details = nested_property_details(obj, property_path)
    if details.exists:
        return details.final_valid_property
    return default_value


def first_char_to_upper(s: str) -> str:
    return s[:1].upper() + s[1:]


def first_char_to_lower(s: str) -> str:
    return s[:1].lower() + s[1:]


def change_props_initial_case(
    obj: dict,
    which_case: str,
    recursive: bool = False,
    preserve_original: bool = True,
) -> dict:
    """Change the case of the first letter of every key in `obj`. `which_case`
    is either "UpperFirst" or, for lower case, any other string."""
    make_upper = which_case == UPPER_FIRST
    pattern = re.compile("[a-z]" if make_upper else "[A-Za-z]")
    new_obj = clone(obj) if preserve_original else obj

    def _rename(key: Any, prop: Any) -> tuple[Any, Any]:
        if not isinstance(key, str) or pattern.match(key[:1]) is None:
            return key, prop
        new_key = first_char_to_upper(key) if make_upper else first_char_to_lower(key)
        return new_key, prop

    return traverse_object(new_obj, _rename, recursive)


def convert_prop_keys_for_asp(obj: dict) -> dict:
    return change_props_initial_case(obj, UPPER_FIRST, recursive=True)


def convert_prop_keys_for_js(obj: dict) -> dict:
    return change_props_initial_case(obj, LOWER_FIRST, recursive=True)


def values_array_from_object(obj: Mapping) -> list:
    if not is_object(obj):
        raise TypeError(f"'obj' was not an object. Was {to_type(obj)}")
    return list(obj.values())


def object_contains_value(val: Any, obj: Mapping) -> bool:
    return val in values_array_from_object(obj)


def object_key_for_value(val: Any, obj: Mapping) -> Any:
    """The key under which `val` is stored in `obj`, or `NOT_FOUND`. If several
    keys map to `val`, the last one is returned."""
    if not object_contains_value(val, obj):
        return NOT_FOUND
    match = NOT_FOUND
    for key, candidate in obj.items():
        if candidate == val:
            match = key
    return match


def force_array(val: T | list[T] | None) -> list[T]:
    if val is None:
        return []
    if isinstance(val, list):
        return val
    if isinstance(val, tuple):
        return list(val)
    return [val]


def _is_container(value: Any) -> bool:
    if isinstance(value, (Mapping, list, tuple, set, frozenset)):
        return True
    return (
        hasattr(value, "__dict__")
        and not isinstance(value, type)
        and not callable(value)
    )


def _without_circular_refs(obj: Any) -> Any:
    """Convert `obj` to JSON serialisable containers. A container met for the
    second time is replaced by a marker naming the key it was first seen under."""
    seen: dict[int, str] = {}

    def _walk(key: str, value: Any) -> Any:
        if isinstance(value, Enum):
            value = value.value
        if isinstance(value, (datetime.date, datetime.time)):
            return value.isoformat()
        if not _is_container(value):
            return value
        # immutable sequences cannot close a cycle on their own
        if not isinstance(value, (tuple, frozenset)):
            if id(value) in seen:
                return CIRCULAR_REFERENCE_TEMPLATE.format(seen[id(value)])
            seen[id(value)] = key
        if isinstance(value, (list, tuple, set, frozenset)):
            return [_walk(str(i), v) for i, v in enumerate(value)]
        items = value.items() if isinstance(value, Mapping) else vars(value).items()
        return {str(k): _walk(str(k), v) for k, v in items}

    return _walk(BASE_OBJECT_KEY, obj)


def stringify(
    obj: Any,
    tab_length: int | None = None,
    strip_quotes: bool | None = None,
    sort: bool | None = None,
) -> str:
    """Pretty print `obj` as JSON, tolerating circular references.

    Parameters
    ----------
    tab_length
        Indentation width.
    strip_quotes
        Remove the quotes around keys.
    sort
        Sort the keys of all dictionaries.

    Notes
    -----
    Parameters left unset are read from the `stringify` section of the
    library configuration.
    """
    settings = get_config().stringify
    tab_length = settings.tab_length if tab_length is None else tab_length
    strip_quotes = settings.strip_quotes if strip_quotes is None else strip_quotes
    sort = settings.sort if sort is None else sort
    text = json.dumps(
        _without_circular_refs(obj),
        indent=tab_length or None,
        sort_keys=sort,
        ensure_ascii=False,
        default=str,
    )
    if strip_quotes:
        text = re.sub(r'"(.*?)": ', r"\1: ", text)
    return text


def deep_equal(obj_a: Any, obj_b: Any) -> bool:
    """Returns true if the deep values of two objects are equal."""
    return stringify(obj_a, sort=True) == stringify(obj_b, sort=True)
