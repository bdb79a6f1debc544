import pytest
from hypothesis import given
from hypothesis import strategies as st

from netinfo.dsattribute import Attribute
from netinfo.dsdata import DataType, DSData, casecstring_to_data, cstring_to_data


def cs(text):
    return cstring_to_data(text)


def names(attribute):
    return [v.to_cstring() for v in attribute.values]


def test_key_required():
    with pytest.raises(ValueError):
        Attribute(None)


def test_append_and_insert_order():
    a = Attribute(cs("name"))
    a.append(cs("b"))
    a.insert(cs("a"), 0)
    a.insert(cs("z"), 100)
    assert names(a) == ["a", "b", "z"]


def test_insert_negative_rejected():
    a = Attribute(cs("name"))
    with pytest.raises(ValueError):
        a.insert(cs("x"), -1)


def test_remove_and_out_of_range():
    a = Attribute(cs("k"), [cs("x"), cs("y"), cs("z")])
    a.remove(1)
    assert names(a) == ["x", "z"]
    a.remove(5)
    assert names(a) == ["x", "z"]


def test_merge_skips_equal_values():
    a = Attribute(cs("k"), [casecstring_to_data("ABC")])
    a.merge(cs("abc"))
    assert len(a) == 1
    a.merge(cs("def"))
    assert names(a) == ["ABC", "def"]


def test_index_and_value():
    a = Attribute(cs("k"), [cs("x"), cs("y")])
    assert a.index(cs("y")) == 1
    assert a.index(cs("q")) is None
    assert a.value(0) == cs("x")
    assert a.value(2) is None


def test_copy_is_independent():
    a = Attribute(cs("k"), [cs("x")])
    b = a.copy()
    b.append(cs("y"))
    assert names(a) == ["x"]
    assert names(b) == ["x", "y"]


def test_match():
    a = Attribute(cs("k"), [cs("x"), cs("y")])
    assert a.match(None)
    assert a.match(Attribute(cs("k"), [cs("y")]))
    assert a.match(Attribute(cs("k")))
    assert not a.match(Attribute(cs("k"), [cs("w")]))
    assert not a.match(Attribute(cs("other"), [cs("x")]))


def test_equals_ignores_order():
    a = Attribute(cs("k"), [cs("x"), cs("y")])
    assert a.equals(Attribute(cs("k"), [cs("y"), cs("x")]))
    assert not a.equals(Attribute(cs("k"), [cs("x")]))
    assert not a.equals(Attribute(cs("j"), [cs("x"), cs("y")]))
    assert not a.equals(None)


def test_serialised_layout_of_empty_attribute():
    data = Attribute(cs("k")).to_data()
    assert data.type == DataType.DS_ATTRIBUTE
    assert data.data == b"\x00\x00\x00\x06\x00\x00\x00\x02k\x00\x00\x00\x00\x00"


values_strategy = st.lists(
    st.builds(DSData, st.integers(0, 300), st.binary(max_size=20)), max_size=8
)


@given(st.text(max_size=10), values_strategy)
def test_serialise_round_trip(key_text, values):
    a = Attribute(cs(key_text), values)
    b = Attribute.from_data(a.to_data())
    assert b.key == a.key
    assert b.values == a.values


def test_from_data_wrong_type():
    with pytest.raises(ValueError):
        Attribute.from_data(DSData(DataType.BLOB, b""))


def test_from_data_truncated():
    data = Attribute(cs("k"), [cs("value")]).to_data()
    with pytest.raises(ValueError):
        Attribute.from_data(DSData(DataType.DS_ATTRIBUTE, data.data[:-3]))