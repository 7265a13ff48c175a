"""Connection strings, environment defaults and driver-side settings."""

from __future__ import annotations

import posixpath
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Iterator, Optional

__all__ = [
    "ConnInfoError",
    "DriverSettings",
    "parse_opts",
    "parse_environ",
    "network",
    "is_driver_setting",
    "handle_driver_settings",
]


class ConnInfoError(ValueError):
    """Raised when connection information cannot be understood."""


_DRIVER_SETTINGS = frozenset(
    {
        "host",
        "port",
        "password",
        "sslmode",
        "sslcert",
        "sslkey",
        "sslrootcert",
        "sslinline",
        "sslsni",
        "fallback_application_name",
        "connect_timeout",
        "disable_prepared_binary_result",
        "binary_parameters",
        "krbsrvname",
        "krbspn",
    }
)

# Environment variables and the connection options they provide.
_ENVIRON_KEYS = {
    "PGHOST": "host",
    "PGPORT": "port",
    "PGDATABASE": "dbname",
    "PGUSER": "user",
    "PGPASSWORD": "password",
    "PGOPTIONS": "options",
    "PGAPPNAME": "application_name",
    "PGSSLMODE": "sslmode",
    "PGSSLCERT": "sslcert",
    "PGSSLKEY": "sslkey",
    "PGSSLROOTCERT": "sslrootcert",
    "PGSSLSNI": "sslsni",
    "PGCONNECT_TIMEOUT": "connect_timeout",
    "PGCLIENTENCODING": "client_encoding",
    "PGDATESTYLE": "datestyle",
    "PGTZ": "timezone",
    "PGGEQO": "geqo",
}

# Well-defined variables the driver does not support; they must be unset.
_UNSUPPORTED_ENVIRON = frozenset(
    {
        "PGHOSTADDR",
        "PGSERVICE",
        "PGSERVICEFILE",
        "PGREALM",
        "PGREQUIRESSL",
        "PGSSLCRL",
        "PGREQUIREPEER",
        "PGKRBSRVNAME",
        "PGGSSLIB",
        "PGSYSCONFDIR",
        "PGLOCALEDIR",
    }
)


def _quote(text: str) -> str:
    return '"' + text.replace("\\", "\\\\").replace('"', '\\"') + '"'


def _skip_spaces(chars: Iterator[str]) -> Optional[str]:
    """Return the next non-whitespace character, or None at the end."""
    for c in chars:
        if not c.isspace():
            return c
    return None


def parse_opts(name: str, options: Optional[dict] = None) -> dict:
    """Parse a libpq-style ``key=value`` string into options and return them.

    Values may be single-quoted; a backslash escapes the next character.
    """
    if options is None:
        options = {}
    chars = iter(name)

    while True:
        c = _skip_spaces(chars)
        if c is None:
            break

        key = []
        while c is not None and not c.isspace() and c != "=":
            key.append(c)
            c = next(chars, None)
        if c is not None and c != "=":
            c = _skip_spaces(chars)
        if c != "=":
            raise ConnInfoError(
                f'missing "=" after {_quote("".join(key))} in connection info string"'
            )
        key_text = "".join(key)

        c = _skip_spaces(chars)
        if c is None:
            # A value left empty at the end of the string is just "".
            options[key_text] = ""
            break

        value = []
        if c != "'":
            while c is not None and not c.isspace():
                if c == "\\":
                    c = next(chars, None)
                    if c is None:
                        raise ConnInfoError("missing character after backslash")
                value.append(c)
                c = next(chars, None)
        else:
            while True:
                c = next(chars, None)
                if c is None:
                    raise ConnInfoError(
                        "unterminated quoted string literal in connection string"
                    )
                if c == "'":
                    break
                if c == "\\":
                    c = next(chars, "\x00")
                value.append(c)

        options[key_text] = "".join(value)

    return options


def parse_environ(env) -> dict:
    """Map PG* environment variables to connection options.

    ``env`` is a mapping or an iterable of ``NAME=value`` strings.
    Unsupported but well-defined variables raise ConnInfoError.
    """
    if isinstance(env, Mapping):
        pairs: Iterable = ((k, v) for k, v in env.items())
    else:
        pairs = (entry.partition("=")[::2] if "=" in entry else (entry, None) for entry in env)

    out: dict = {}
    for name, value in pairs:
        if name in _UNSUPPORTED_ENVIRON:
            raise ConnInfoError(f"setting {name} not supported")
        option = _ENVIRON_KEYS.get(name)
        if option is None:
            continue
        if value is None:
            raise ConnInfoError(f"environment entry {name} has no value")
        out[option] = value
    return out


def network(options: Mapping) -> tuple[str, str]:
    """Return the network kind and address to connect to."""
    host = options.get("host", "")
    port = options.get("port", "")
    if host.startswith("/"):
        return "unix", posixpath.normpath(posixpath.join(host, ".s.PGSQL." + port))
    if ":" in host:
        return "tcp", f"[{host}]:{port}"
    return "tcp", f"{host}:{port}"


def is_driver_setting(key: str) -> bool:
    """Whether key configures the driver and is not sent to the server."""
    return key in _DRIVER_SETTINGS


@dataclass(frozen=True)
class DriverSettings:
    """Driver-side switches taken from the connection options."""

    disable_prepared_binary_result: bool = False
    binary_parameters: bool = False


def _bool_setting(options: Mapping, key: str) -> bool:
    value = options.get(key)
    if value is None or value == "no":
        return False
    if value == "yes":
        return True
    raise ConnInfoError(f"unrecognized value {_quote(value)} for {key}")


def handle_driver_settings(options: Mapping) -> DriverSettings:
    """Read the driver-side yes/no settings from options."""
    return DriverSettings(
        disable_prepared_binary_result=_bool_setting(
            options, "disable_prepared_binary_result"
        ),
        binary_parameters=_bool_setting(options, "binary_parameters"),
    )