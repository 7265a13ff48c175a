"""Host name handling for Kerberos service principals."""

from __future__ import annotations

import socket

__all__ = ["canonicalize_hostname", "service_principal_name"]


def canonicalize_hostname(host: str) -> str:
    """Resolve host to its canonical name.

    The KDC usually holds one principal per host rather than one per alias,
    so names should be canonicalized before building a principal. Lookup
    failures propagate as OSError.
    """
    name, _aliases, _addresses = socket.gethostbyname_ex(host)
    name = name.removesuffix(".")
    return name or host


def service_principal_name(host: str, service: str = "postgres", canonicalize: bool = True) -> str:
    """Return the service principal name ``service/host``."""
    if canonicalize:
        host = canonicalize_hostname(host)
    return f"{service}/{host}"