# pqkit

Helpers for PostgreSQL clients written in Python, with no dependencies
outside the standard library.

## Modules

- **`pqkit.array`**: reading and writing PostgreSQL array literals
  (`{1,2,3}`, `{"a","b\"c"}`, `{{1,2},{3,4}}`). It has typed one-dimensional
  arrays (`BoolArray`, `ByteaArray`, `Float64Array`, `Float32Array`,
  `Int64Array`, `Int32Array`, `StringArray`, all subclasses of `PgArray`,
  which is a `list`), the low-level `parse_array` and `scan_linear_array`
  functions, and `quote_array_element`. Errors are raised as `ArrayError`.
- **`pqkit.generic_array`**: `GenericArray` for nested lists and tuples of
  any element type, the `Scanner` base class for elements that fill
  themselves from text, the `array()` helper that picks the best array type
  for a value, and `check_named_value()` for turning list query parameters
  into array literals.
- **`pqkit.buffers`**: `ReadBuffer` and `WriteBuffer` for the big-endian,
  length-prefixed framing of PostgreSQL protocol messages. Short or
  malformed input raises `BufferError`.
- **`pqkit.conninfo`**: `parse_opts` for libpq-style `key=value` connection
  strings, `parse_environ` for `PG*` environment variables, `network` for
  the address to connect to, `is_driver_setting`, and
  `handle_driver_settings`, which returns a `DriverSettings`. Errors are
  raised as `ConnInfoError`.
- **`pqkit.pgpass`**: `read_pgpass`, `match_pgpass_line` and `get_fields`
  for password files in the `.pgpass` format.
- **`pqkit.quoting`**: `quote_identifier`, `quote_literal` and `is_utf8`.
- **`pqkit.txoptions`**: `IsolationLevel` and `begin_mode` for the text
  that follows `BEGIN`.
- **`pqkit.kerberos`**: `canonicalize_hostname` and
  `service_principal_name` for GSSAPI service principals.

## Installation

```
pip install pqkit
```

To run the test suite:

```
pip install "pqkit[test]"
pytest
```

## Examples

### Array literals

```python
from pqkit.array import Int64Array, StringArray, parse_array

Int64Array.scan("{345,678}")          # Int64Array([345, 678])
StringArray(["a", "\\b", 'c"', "d,e"]).value()
# '{"a","\\\\b","c\\"","d,e"}'

dims, elems = parse_array(b"{{a,b}}", b",")
# dims == [1, 2], elems == [b"a", b"b"]
```

`scan` returns `None` for a `None` source. It raises `ArrayError` when the
text is not a valid array literal, when it has more than one dimension, or
when an element cannot be converted.

### Arrays of any shape

```python
from pqkit.generic_array import GenericArray, array, check_named_value

GenericArray([[1, 2], [3, 4]]).value()   # '{{1,2},{3,4}}'
array([True, False]).value()             # '{t,f}'
check_named_value([1, 2])                # '{1,2}'
```

To scan into a `GenericArray`, give it a list and an `element_type` that
subclasses `Scanner`; `fixed=True` makes the list length part of its type.

### Protocol buffers

```python
from pqkit.buffers import ReadBuffer, WriteBuffer

w = WriteBuffer("Q")
w.string("SELECT 1")
w.wrap()        # b'Q\x00\x00\x00\rSELECT 1\x00'

r = ReadBuffer(b"\x00\x00\x00\x2aabc\x00")
r.int32()       # 42
r.string()      # 'abc'
```

### Connection strings

```python
from pqkit.conninfo import handle_driver_settings, network, parse_opts

options = parse_opts("host=/var/run/postgresql port=5432 dbname='my db'")
network(options)   # ('unix', '/var/run/postgresql/.s.PGSQL.5432')
handle_driver_settings({"binary_parameters": "yes"}).binary_parameters   # True
```

### Password files

```python
from pqkit.pgpass import match_pgpass_line, read_pgpass

match_pgpass_line(
    "localhost:5432:*:alice:secret",
    {"host": "", "port": "5432", "user": "alice"},
)   # 'secret'

read_pgpass({"host": "localhost", "port": "5432", "user": "alice"})
```

`read_pgpass` reads `$PGPASSFILE`, or `.pgpass` in the home directory, and
returns `None` if the options already hold a password, if the file is
missing or readable by group or others, or if no line matches.

### Quoting

```python
from pqkit.quoting import quote_identifier, quote_literal, is_utf8

quote_identifier('my "table"')   # '"my ""table"""'
quote_literal("it's")            # "'it''s'"
is_utf8("UTF-8")                 # True
```

### Transactions and Kerberos names

```python
from pqkit.txoptions import IsolationLevel, begin_mode
from pqkit.kerberos import service_principal_name

begin_mode(IsolationLevel.SERIALIZABLE, True)
# ' ISOLATION LEVEL SERIALIZABLE READ ONLY'

service_principal_name("db.example.com", "postgres", canonicalize=False)
# 'postgres/db.example.com'
```

## What pqkit does not do

pqkit does not open connections to a server. It has no session, no startup
or authentication handshake, no query execution and no transaction control
over the wire: `begin_mode` only builds the text of a `BEGIN` statement, and
`WriteBuffer` and `ReadBuffer` only frame and unpack message bytes. Use these
pieces inside your own client, or alongside an existing driver.