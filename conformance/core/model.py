"""
Identified Object Helpers

Read-only accessors for the identification properties of objects returned
by the implementation under test. Entities are duck-typed: a name is either
a plain string or an object with a ``code`` attribute; identifiers expose
``code_space`` (or ``codespace``) and ``code``; aliases are strings or
name-like objects exposing ``tip``.
"""

import unicodedata
from dataclasses import dataclass
from typing import Any, List, Optional


@dataclass(frozen=True)
class SimpleIdentifier:
    """An authority code such as EPSG:6326."""
    code_space: str
    code: str
    version: Optional[str] = None

    def __str__(self) -> str:
        return f"{self.code_space}:{self.code}"


def get_name(entity: Any) -> Optional[str]:
    """Return the primary name of an entity, or None."""
    if entity is None:
        return None
    name = getattr(entity, 'name', None)
    if name is None or isinstance(name, str):
        return name
    code = getattr(name, 'code', None)
    return str(code) if code is not None else str(name)


def get_identifiers(entity: Any) -> Optional[List[Any]]:
    """Return the identifiers of an entity as a list, or None if it has none."""
    identifiers = getattr(entity, 'identifiers', None)
    if identifiers is None:
        return None
    return list(identifiers)


def identifier_code_space(identifier: Any) -> Optional[str]:
    code_space = getattr(identifier, 'code_space', None)
    if code_space is None:
        code_space = getattr(identifier, 'codespace', None)
    return code_space


def get_aliases(entity: Any) -> Optional[List[str]]:
    """Return the alias tips of an entity, or None if it exposes no aliases."""
    aliases = getattr(entity, 'aliases', None)
    if aliases is None:
        aliases = getattr(entity, 'alias', None)
    if aliases is None:
        return None
    tips = []
    for alias in aliases:
        if isinstance(alias, str):
            tips.append(alias)
        else:
            tip = getattr(alias, 'tip', None)
            if callable(tip):
                tip = tip()
            if tip is None:
                tip = getattr(alias, 'code', alias)
            tips.append(str(tip))
    return tips


_QUOTE_REPLACEMENTS = {
    '‘': "'", '’': "'", '“': '"', '”': '"',
    '⋅': '*', '∕': '/', '′': "'", '″': '"',
}


def to_ascii(text: Optional[str]) -> Optional[str]:
    """
    Fold a name to the ASCII form used by published reference data.

    Combining marks and formatting characters are removed, typographic
    quotes and primes become their ASCII counterparts, and any Unicode
    space becomes a plain space. Letter case and word spacing are kept.
    """
    if text is None:
        return None
    buffer = []
    for char in unicodedata.normalize('NFKD', text):
        category = unicodedata.category(char)
        if category in ('Mn', 'Cf', 'Cc'):
            continue
        if category == 'Zs':
            buffer.append(' ')
        elif category in ('Zl', 'Zp'):
            buffer.append('\n')
        else:
            buffer.append(_QUOTE_REPLACEMENTS.get(char, char))
    return ''.join(buffer)
