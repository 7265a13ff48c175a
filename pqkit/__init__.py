"""PostgreSQL client helpers: array literals, protocol buffers, connection settings, quoting."""

__version__ = "0.1.0"