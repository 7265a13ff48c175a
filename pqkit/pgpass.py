"""Password lookup in a libpq-style password file (``.pgpass``)."""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Optional

from .conninfo import network

__all__ = ["get_fields", "match_pgpass_line", "read_pgpass"]

# Files whose mode shares any of these bits with the group or other
# permissions are ignored.
_INSECURE_MODE_BITS = 0x77


def get_fields(line: str) -> list[str]:
    """Split a password-file line on colons; a backslash escapes the next character."""
    fields: list[str] = []
    current: list[str] = []
    escape = False
    for c in line:
        if escape:
            current.append(c)
            escape = False
        elif c == "\\":
            escape = True
        elif c == ":":
            fields.append("".join(current))
            current.clear()
        else:
            current.append(c)
    fields.append("".join(current))
    return fields


def match_pgpass_line(line: str, options: Mapping) -> Optional[str]:
    """Return the password on line if it applies to options, else None.

    A line holds ``host:port:database:user:password``; ``*`` matches anything,
    and ``localhost`` also matches an empty host or a Unix-socket connection.
    Empty lines and lines starting with ``#`` never match.
    """
    if not line or line.startswith("#"):
        return None
    fields = get_fields(line)
    if len(fields) != 5:
        return None

    hostname = options.get("host", "")
    kind, _address = network(options)
    host_field, port_field, db_field, user_field, secret = fields

    host_ok = (
        host_field == "*"
        or host_field == hostname
        or (host_field == "localhost" and (hostname == "" or kind == "unix"))
    )
    port_ok = port_field == "*" or port_field == options.get("port", "")
    db_ok = db_field == "*" or db_field == options.get("dbname", "")
    user_ok = user_field == "*" or user_field == options.get("user", "")
    if host_ok and port_ok and db_ok and user_ok:
        return secret
    return None


def _default_home(environ: Mapping) -> Optional[Path]:
    home = environ.get("HOME", "")
    if home:
        return Path(home)
    try:
        return Path.home()
    except (RuntimeError, KeyError, OSError):
        return None


def _pgpass_path(environ: Mapping) -> Optional[Path]:
    filename = environ.get("PGPASSFILE", "")
    if filename:
        return Path(filename)
    home = _default_home(environ)
    if home is None:
        return None
    return home / ".pgpass"


def read_pgpass(options: Mapping, environ: Optional[Mapping] = None) -> Optional[str]:
    """Look up the password for options in the password file.

    Returns None when options already carry a password, when the file is
    missing, unreadable or readable by others, or when no line matches.
    The file is ``$PGPASSFILE``, or ``.pgpass`` in the home directory.
    """
    if "password" in options:
        return None
    if environ is None:
        environ = os.environ

    path = _pgpass_path(environ)
    if path is None:
        return None
    try:
        if path.stat().st_mode & _INSECURE_MODE_BITS:
            return None
        with path.open("r", encoding="utf-8", errors="surrogateescape", newline="") as handle:
            for raw in handle:
                line = raw.rstrip("\n")
                if line.endswith("\r"):
                    line = line[:-1]
                found = match_pgpass_line(line, options)
                if found is not None:
                    return found
    except OSError:
        return None
    return None