from dataclasses import dataclass
from typing import Any, Callable

import pytest

from pqkit.array import (
    ArrayError,
    BoolArray,
    ByteaArray,
    Float32Array,
    Float64Array,
    Int64Array,
    StringArray,
)
from pqkit.generic_array import GenericArray, Scanner, array, check_named_value


@dataclass
class NullString(Scanner):
    string: str = ""
    valid: bool = False

    def scan(self, src):
        if src is None:
            self.string, self.valid = "", False
        else:
            self.string = src.decode() if isinstance(src, bytes) else str(src)
            self.valid = True

    def value(self):
        return self.string if self.valid else None


@dataclass
class NullInt64(Scanner):
    int64: int = 0
    valid: bool = False

    def scan(self, src):
        if src is None:
            self.int64, self.valid = 0, False
            return
        text = src.decode()
        try:
            self.int64 = int(text)
        except ValueError:
            raise ValueError(
                f"converting driver.Value type bytes ({text!r}) to a int64: invalid syntax"
            ) from None
        self.valid = True


class TildeNullInt64(NullInt64):
    array_delimiter = "~"


class ByteValuer:
    def __init__(self, data):
        self.data = bytes(data)

    def value(self):
        return self.data


@dataclass
class FuncValuer:
    delimiter: Callable[[], str]
    produce: Callable[[], Any]

    @property
    def array_delimiter(self):
        return self.delimiter()

    def value(self):
        return self.produce()


def tilde(v):
    return FuncValuer(lambda: "~", lambda: v)


# --- scanning -------------------------------------------------------------


@pytest.mark.parametrize(
    "src, ga, message",
    [
        (None, GenericArray(None), "destination NoneType is not a list"),
        (None, GenericArray(True), "destination bool is not a list"),
        (None, GenericArray("s"), "destination str is not a list"),
        (None, GenericArray(("a",), str), "destination tuple is not a list"),
        (None, GenericArray([NullString()], NullString, fixed=True), "NoneType to [1]NullString"),
        (True, GenericArray([], str), "bool to []str"),
        ("{{x}}", GenericArray([], str), "multidimensional ARRAY[1][1] is not implemented"),
        ("{{x},{x}}", GenericArray([], str), "multidimensional ARRAY[2][1] is not implemented"),
        ("{x}", GenericArray([], str), "scanning to str is not implemented"),
    ],
)
def test_scan_unsupported(src, ga, message):
    with pytest.raises(ArrayError) as info:
        ga.scan(src)
    assert message in str(info.value)


def test_scan_scanner_array_bytes():
    nsa = [NullString("", True), NullString(), NullString()]
    GenericArray(nsa, NullString, fixed=True).scan(b'{NULL,abc,"\\""}')
    assert nsa == [NullString(), NullString("abc", True), NullString('"', True)]


def test_scan_scanner_array_string():
    nsa = [NullString("", True), NullString(), NullString()]
    GenericArray(nsa, NullString, fixed=True).scan('{NULL,"\\"",xyz}')
    assert nsa == [NullString(), NullString('"', True), NullString("xyz", True)]


def test_scan_scanner_slice_empty():
    nss = []
    result = GenericArray(nss, NullString).scan("{}")
    assert result == []
    assert result is nss


def test_scan_scanner_slice_nil():
    ga = GenericArray([NullString("", True), NullString()], NullString)
    assert ga.scan(None) is None
    assert ga.a is None


def test_scan_scanner_slice_bytes():
    nss = [NullString("", True), NullString(), NullString(), NullString(), NullString()]
    GenericArray(nss).scan(b'{NULL,abc,"\\""}')
    assert nss == [NullString(), NullString("abc", True), NullString('"', True)]


def test_scan_scanner_slice_string():
    nss = [NullString("", True), NullString(), NullString()]
    GenericArray(nss, NullString).scan('{NULL,"\\"",xyz}')
    assert nss == [NullString(), NullString('"', True), NullString("xyz", True)]


def test_scan_delimiter():
    tnis = [TildeNullInt64(0, True), TildeNullInt64()]
    GenericArray(tnis, TildeNullInt64).scan("{12~NULL~76}")
    assert tnis == [TildeNullInt64(12, True), TildeNullInt64(), TildeNullInt64(76, True)]


@pytest.mark.parametrize(
    "src, ga, message",
    [
        ("{", GenericArray([""], str, fixed=True), "unable to parse"),
        ("{}", GenericArray([""], str, fixed=True), "cannot convert ARRAY[0] to [1]str"),
        ("{x,x}", GenericArray([""], str, fixed=True), "cannot convert ARRAY[2] to [1]str"),
        ("{x}", GenericArray([], NullInt64), "parsing array element index 0: converting"),
    ],
)
def test_scan_errors(src, ga, message):
    with pytest.raises(ArrayError) as info:
        ga.scan(src)
    assert message in str(info.value)


def test_scan_value_round_trip():
    original = [NullString("a,b", True), NullString(), NullString('q"\\', True)]
    text = GenericArray(original).value()
    target = []
    GenericArray(target, NullString).scan(text)
    assert target == original


# --- rendering ------------------------------------------------------------


def test_value_nil():
    assert GenericArray(None).value() is None


def test_value_unsupported():
    with pytest.raises(ArrayError) as info:
        GenericArray(True).value()
    assert "bool to array" in str(info.value)


@pytest.mark.parametrize(
    "expected, value",
    [
        ("{}", []),
        ("{true}", [True]),
        ("{true,false}", [True, False]),
        ("{true,false}", (True, False)),
        ("{}", [[]]),
        ("{}", [[], []]),
        ("{{1}}", [[1]]),
        ("{{1},{2}}", [[1], [2]]),
        ("{{1,2},{3,4}}", [[1, 2], [3, 4]]),
        ("{{1,2},{3,4}}", ((1, 2), (3, 4))),
        (r'{"a","\\b","c\"","d,e"}', ["a", "\\b", 'c"', "d,e"]),
        (r'{"a","\\b","c\"","d,e"}', [b"a", b"\\b", b'c"', b"d,e"]),
        ("{NULL}", [None]),
        ("{0,NULL}", [0, None]),
        ("{NULL}", [NullString()]),
        (r'{"\"",NULL}', [NullString('"', True), NullString()]),
        ('{"a","b"}', [ByteValuer(b"a"), ByteValuer(b"b")]),
        (
            '{{"a","b"},{"c","d"}}',
            [[ByteValuer(b"a"), ByteValuer(b"b")], [ByteValuer(b"c"), ByteValuer(b"d")]],
        ),
        ("{1~2}", [tilde(1), tilde(2)]),
        ("{{1~2}~{3~4}}", [[tilde(1), tilde(2)], [tilde(3), tilde(4)]]),
    ],
)
def test_value(expected, value):
    assert GenericArray(value).value() == expected


def test_value_errors():
    with pytest.raises(ArrayError):
        GenericArray([lambda: None]).value()
    with pytest.raises(ArrayError):
        GenericArray([None, lambda: None]).value()


# --- dispatch and argument conversion ------------------------------------


@pytest.mark.parametrize(
    "value, cls",
    [
        ([True], BoolArray),
        ([1.5], Float64Array),
        ([1], Int64Array),
        (["a"], StringArray),
        ([b"a"], ByteaArray),
    ],
)
def test_array_typed(value, cls):
    result = array(value)
    assert type(result) is cls
    assert list(result) == value


@pytest.mark.parametrize(
    "value",
    [None, [], [[True]], [[1.5]], [[1]], [["a"]], [NullString()], (True, False)],
)
def test_array_generic(value):
    result = array(value)
    assert isinstance(result, GenericArray)
    assert result.a is value


def test_array_keeps_wrapped():
    typed = Float32Array([1.0])
    assert array(typed) is typed
    generic = GenericArray([1])
    assert array(generic) is generic


@pytest.mark.parametrize(
    "value, expected",
    [
        ([245, 231], "{245,231}"),
        (["hello", "world"], '{"hello","world"}'),
        ([[1, 2], [3, 4]], "{{1,2},{3,4}}"),
    ],
)
def test_check_named_value_lists(value, expected):
    assert check_named_value(value) == expected


def test_check_named_value_passthrough():
    data = b"ab"
    assert check_named_value(data) is data
    valuer = Int64Array([245, 231])
    assert check_named_value(valuer) is valuer
    assert check_named_value(5) == 5