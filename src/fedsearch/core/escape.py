"""Markup escaping for values re-displayed downstream as XML/HTML."""

from __future__ import annotations

import html
from typing import Any


def escape(value: Any) -> Any:
    """Escape ``&``, ``<``, ``>``, ``"`` and ``'`` in a string value.

    Non-string values are returned unchanged. Escaping is not idempotent:
    ``escape(escape("&"))`` yields ``"&amp;amp;"``, so every value must be
    escaped exactly once.
    """
    if not isinstance(value, str):
        return value
    return html.escape(value, quote=True)


def escape_tree(value: Any) -> Any:
    """Return a copy of ``value`` with every string leaf escaped.

    Dicts, lists and tuples are walked recursively; keys are left as-is.
    """
    if isinstance(value, dict):
        return {key: escape_tree(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [escape_tree(item) for item in value]
    return escape(value)
