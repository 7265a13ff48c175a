"""Quoting of SQL identifiers and literals, and encoding-name checks."""

from __future__ import annotations

__all__ = ["quote_identifier", "quote_literal", "is_utf8"]


def quote_identifier(name: str) -> str:
    """Quote an identifier such as a table or column name.

    Double quotes are doubled and the result is case sensitive. A NUL
    character truncates the name just before it.
    """
    name = name.partition("\x00")[0]
    return '"' + name.replace('"', '""') + '"'


def quote_literal(literal: str) -> str:
    """Quote a string literal for use in SQL text.

    Single quotes are doubled. If the text holds backslashes they are doubled
    too and the literal takes the ``E''`` escape form, preceded by a space.
    """
    literal = literal.replace("'", "''")
    if "\\" in literal:
        return " E'" + literal.replace("\\", "\\\\") + "'"
    return "'" + literal + "'"


def _alnum_lower_ascii(name: str) -> str:
    return "".join(
        c.lower() for c in name if c.isascii() and c.isalnum()
    )


def is_utf8(name: str) -> bool:
    """Whether name is some spelling of UTF-8, as the server understands it."""
    folded = _alnum_lower_ascii(name)
    return folded in ("utf8", "unicode")