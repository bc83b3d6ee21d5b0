"""Helpers for YAML parsing quirks."""

from typing import Any, Dict, TypeVar

V = TypeVar("V")


def normalize_yaml_dict_keys(data: Dict[Any, V]) -> Dict[str, V]:
    """Return ``data`` with every key converted to a string.

    YAML 1.1 turns bare ``yes``/``no``/``on``/``off`` keys into booleans and
    bare digits into ints. Config keys are always names, so they are
    stringified before schema validation reports them as unknown.

    Examples:
        >>> normalize_yaml_dict_keys({True: 1, 5: 2, "max_limit": 3})
        {'True': 1, '5': 2, 'max_limit': 3}
    """
    return {str(key): value for key, value in data.items()}
