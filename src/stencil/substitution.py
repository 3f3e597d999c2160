"""Substitution maps built from generation data.

Generation data is a flat mapping whose keys are either unqualified
(``"main"``) or qualified (``"artifact/id"``). Every key produces a
``{{key}}`` token. Unqualified keys with string values also produce
``{{key/ns}}`` and ``{{key/file}}`` tokens holding the namespace and file-path
forms of the value.
"""

from __future__ import annotations

import re
from typing import Any, Mapping

from .naming import is_qualified, to_file, to_ns

__all__ = [
    "DEFAULT_DELIMITERS",
    "adjust_delimiters",
    "build_substitutions",
    "substitute",
    "to_text",
]


DEFAULT_DELIMITERS = ("{{", "}}")

_OPEN = re.compile(r"^\{\{")
_CLOSE = re.compile(r"\}\}$")


def to_text(value: Any) -> str:
    """Coerce a data value to the text substituted into templates."""

    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def build_substitutions(data: Mapping[str, Any]) -> dict[str, str]:
    """Return the ``token -> replacement`` mapping for ``data``."""

    substitutions: dict[str, str] = {}
    for key, value in data.items():
        key = str(key)
        substitutions[f"{{{{{key}}}}}"] = to_text(value)
        if not is_qualified(key) and isinstance(value, str):
            substitutions[f"{{{{{key}/ns}}}}"] = to_ns(value)
            substitutions[f"{{{{{key}/file}}}}"] = to_file(value)
    return substitutions


def adjust_delimiters(substitutions: Mapping[str, str], open_delim: str, close_delim: str) -> dict[str, str]:
    """Re-key ``substitutions`` to use ``open_delim``/``close_delim`` tokens.

    Only the token strings change; replacement values are left untouched.
    """

    adjusted: dict[str, str] = {}
    for token, value in substitutions.items():
        rekeyed = _OPEN.sub(lambda _: open_delim, token)
        rekeyed = _CLOSE.sub(lambda _: close_delim, rekeyed)
        adjusted[rekeyed] = value
    return adjusted


def substitute(text: str, substitutions: Mapping[str, str]) -> str:
    """Replace every token of ``substitutions`` found in ``text``."""

    for token, replacement in substitutions.items():
        if token in text:
            text = text.replace(token, replacement)
    return text
