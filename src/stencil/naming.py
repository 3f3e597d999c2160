"""String normalisation utilities shared by identity and substitution code."""

from __future__ import annotations

import re
from typing import Any

__all__ = ["to_ns", "to_file", "is_qualified", "split_qualified", "capitalize"]


_QUALIFIER_SEPARATOR = "/"


def to_ns(value: Any) -> str:
    """Return the namespace form of ``value``.

    Path separators become dots and underscores become hyphens, so
    ``"acme/cool_lib"`` turns into ``"acme.cool-lib"``. This is the exact
    inverse of :func:`to_file`.
    """

    return str(value).replace("/", ".").replace("_", "-")


def to_file(value: Any) -> str:
    """Return the file-path form of ``value``.

    Dots become path separators and hyphens become underscores, so
    ``"acme.cool-lib"`` turns into ``"acme/cool_lib"``.
    """

    return str(value).replace(".", "/").replace("-", "_")


def is_qualified(key: str) -> bool:
    """Return ``True`` when ``key`` has a ``qualifier/name`` shape."""

    qualifier, _, name = key.partition(_QUALIFIER_SEPARATOR)
    return bool(qualifier) and bool(name)


def split_qualified(token: str) -> tuple[str, str]:
    """Split ``token`` into ``(qualifier, name)``.

    An unqualified token is its own qualifier: ``"demo"`` becomes
    ``("demo", "demo")``.
    """

    if _QUALIFIER_SEPARATOR in token:
        qualifier, name = token.split(_QUALIFIER_SEPARATOR, 1)
        return qualifier, name
    return token, token


def capitalize(value: str) -> str:
    """Upper-case the first character and lower-case the rest."""

    collapsed = re.sub(r"\s+", " ", value).strip()
    if not collapsed:
        return ""
    return collapsed[0].upper() + collapsed[1:].lower()
