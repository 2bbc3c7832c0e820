# encoding.py - value escaping for POST bodies
#
# The remote parser chokes on raw quotes and tabs, so every string value is
# cleaned and percent-encoded before it goes on the wire. Keys are left alone.
from typing import Any, Mapping
from urllib.parse import quote

_STRIPPED = str.maketrans("", "", "\"\t")


def clean_value(value: str) -> str:
    return value.translate(_STRIPPED)


def escape_value(value: str) -> str:
    return quote(clean_value(value), safe="")


def escape_values(value: Any) -> Any:
    """Recursively percent-encode every string leaf of ``value``.

    Mappings keep their keys, lists and tuples keep their order (tuples come
    back as lists so the result is JSON-ready). None and non-string scalars
    pass through unchanged.
    """
    if value is None:
        return None
    if isinstance(value, str):
        return escape_value(value)
    if isinstance(value, Mapping):
        return {k: escape_values(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [escape_values(v) for v in value]
    return value
