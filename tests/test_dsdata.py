import struct

import pytest
from hypothesis import given
from hypothesis import strategies as st

from netinfo.dsdata import (
    DataType,
    DSData,
    casecstring_to_data,
    caseutf8string_to_data,
    comparable_types,
    cstring_to_data,
    data_compare,
    data_compare_sub,
    data_equal,
    is_case_string_type,
    is_string_type,
    is_utf8_type,
    utf8string_to_data,
)

ascii_text = st.text(alphabet=st.characters(min_codepoint=1, max_codepoint=127))


def test_cstring_is_nul_terminated():
    d = cstring_to_data("abc")
    assert d.type == DataType.CSTR
    assert d.data == b"abc\x00"
    assert d.length == 4
    assert d.size() == 12


def test_utf8string_type_depends_on_content():
    assert utf8string_to_data("abc").type == DataType.CSTR
    assert utf8string_to_data("héllo").type == DataType.UTF8_STR
    assert caseutf8string_to_data("abc").type == DataType.CASE_CSTR
    assert caseutf8string_to_data("héllo").type == DataType.CASE_UTF8_STR
    assert casecstring_to_data("abc").type == DataType.CASE_CSTR


def test_to_cstring_and_utf8string():
    assert cstring_to_data("hello").to_cstring() == "hello"
    assert utf8string_to_data("héllo").to_cstring() is None
    assert utf8string_to_data("héllo").to_utf8string() == "héllo"
    assert DSData(DataType.BLOB, b"abc").to_cstring() is None
    assert DSData(DataType.BLOB, b"abc").to_utf8string() is None


def test_type_predicates():
    assert is_string_type(DataType.CASE_UTF8_STR)
    assert not is_string_type(DataType.BLOB)
    assert is_case_string_type(DataType.CASE_CSTR)
    assert not is_case_string_type(DataType.CSTR)
    assert is_utf8_type(DataType.UTF8_STR)
    assert not is_utf8_type(DataType.CSTR)


def test_comparable_types():
    assert comparable_types(DataType.INT, DataType.ANY)
    assert comparable_types(DataType.CSTR, DataType.CASE_UTF8_STR)
    assert comparable_types(DataType.INT, DataType.INT)
    assert not comparable_types(DataType.INT, DataType.UINT)


def test_equal_case_folding():
    assert data_equal(casecstring_to_data("ABC"), cstring_to_data("abc"))
    assert not data_equal(cstring_to_data("ABC"), cstring_to_data("abc"))
    assert data_equal(caseutf8string_to_data("ÉTÉ"), utf8string_to_data("été"))


def test_equal_none_and_type_mismatch():
    assert data_equal(None, None)
    assert not data_equal(None, cstring_to_data("a"))
    assert not data_equal(cstring_to_data("a"), None)
    assert not data_equal(DSData(DataType.INT, b"\x01"), DSData(DataType.UINT, b"\x01"))
    assert data_equal(DSData(DataType.BLOB, b"\x01"), DSData(DataType.BLOB, b"\x01"))


def test_compare_ordering():
    assert data_compare(cstring_to_data("abc"), cstring_to_data("abd")) < 0
    assert data_compare(cstring_to_data("abd"), cstring_to_data("abc")) > 0
    assert data_compare(cstring_to_data("ab"), cstring_to_data("abc")) < 0
    assert data_compare(None, cstring_to_data("a")) == -1
    assert data_compare(cstring_to_data("a"), None) == 1
    assert data_compare(DSData(DataType.BLOB), DSData(DataType.BLOB)) == 0
    assert data_compare(DSData(DataType.BLOB), DSData(DataType.BLOB, b"\x00")) == -1
    assert data_compare(casecstring_to_data("ABC"), cstring_to_data("abc")) == 0


def test_compare_sub_prefix_and_suffix():
    value = cstring_to_data("foobar")
    prefix = cstring_to_data("foo")
    suffix = cstring_to_data("bar")
    assert data_compare_sub(value, prefix, 0, prefix.length) == 0
    assert data_compare_sub(value, suffix, value.length - suffix.length, suffix.length) == 0
    assert data_compare_sub(value, suffix, 0, suffix.length) != 0
    assert data_compare_sub(None, prefix, 0, 1) == -1
    with pytest.raises(ValueError):
        data_compare_sub(value, prefix, value.length + 5, 1)


def test_compare_sub_utf8_prefix():
    value = utf8string_to_data("héllo")
    prefix = utf8string_to_data("hé")
    assert data_compare_sub(value, prefix, 0, prefix.length) == 0


def test_insert_places_bytes():
    base = DSData(DataType.BLOB, b"ad")
    result = base.insert(DSData(DataType.BLOB, b"bc"), 1, 10)
    assert result.data == b"abcd"
    assert result.type == DataType.BLOB
    assert base.insert(None, 0, 5) is base
    assert base.insert(DSData(DataType.BLOB), 0, 5) is base


def test_format_simple_types():
    assert DSData(DataType.NIL).format() == "(nil)"
    assert DSData(DataType.BOOL, b"\x00").format() == "(bool) NO"
    assert DSData(DataType.BOOL, b"\x01").format() == "(bool) YES"
    assert DSData(DataType.BLOB, b"\x01\xab").format() == "(blob) 0x1 0xab"
    assert cstring_to_data("hello").format() == "hello"


def test_format_numbers():
    assert DSData(DataType.INT, struct.pack(">h", -2)).format() == "(int) -2"
    assert DSData(DataType.UINT, struct.pack(">I", 4000000000)).format() == "(uint) 4000000000"


def test_format_non_ascii_utf8_falls_back_to_bytes():
    text = utf8string_to_data("é").format()
    assert text.startswith("(7)")
    assert "0xc3" in text


@given(ascii_text, ascii_text)
def test_compare_is_antisymmetric(x, y):
    a, b = cstring_to_data(x), cstring_to_data(y)
    assert data_compare(a, b) == -data_compare(b, a)


@given(ascii_text, ascii_text)
def test_equal_agrees_with_compare(x, y):
    a, b = cstring_to_data(x), cstring_to_data(y)
    assert data_equal(a, b) == (data_compare(a, b) == 0)


@given(st.binary(), st.binary(min_size=1), st.integers(min_value=0, max_value=40),
       st.integers(min_value=0, max_value=40))
def test_insert_length_invariant(base, extra, where, length):
    a = DSData(DataType.BLOB, base)
    result = a.insert(DSData(DataType.BLOB, extra), where, length)
    assert result.length == len(base) + min(length, len(extra))


@given(ascii_text)
def test_cstring_round_trip(text):
    assert cstring_to_data(text).to_cstring() == text
    assert utf8string_to_data(text).to_utf8string() == text