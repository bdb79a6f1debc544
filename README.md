# netinfo

Building blocks for a hierarchical directory service: typed data values,
multi-valued attributes, per-directory value indexes, search assertions and
filters in three-valued logic, a bounded record cache and a string-keyed hash
cache with time-to-live. There are no third-party dependencies.

## Installation

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## Modules

### `netinfo.dsdata`

`DSData` is a frozen value made of a type tag (`DataType`) and raw big-endian
bytes; `length` and `size()` (length plus the 8-byte stored header) describe it.
Strings are NUL-terminated and built with `cstring_to_data`,
`casecstring_to_data`, `utf8string_to_data` and `caseutf8string_to_data`; the
UTF-8 constructors choose a plain string type when the text is pure ASCII.

- `data_equal(a, b)` and `data_compare(a, b)` (-1, 0 or 1) compare values,
  treating all string types as comparable and folding case when either side is
  a case-insensitive type. `None` sorts before everything.
- `data_compare_sub(a, b, start, length)` compares a span of `a` with the start
  of `b`.
- `DSData.insert`, `to_cstring`, `to_utf8string` and `format` (a readable
  rendering such as `(int) 42` or `(blob) 0x1 0x2`).
- `is_string_type`, `is_case_string_type`, `is_utf8_type`, `comparable_types`.

### `netinfo.dsconvert`

Big-endian integers of width 1, 2, 4 or 8: `int_to_data`, `uint_to_data`,
`int_array_to_data`, `uint_array_to_data`, and back with `data_to_int`,
`data_to_uint`, `int_at_index`, `uint_at_index` (0 when the value is too
short). Directory IDs use `dsid_to_data` and `data_to_dsid`.

`write_data(data, stream)` and `read_data(stream)` store a value as type,
length and bytes; `read_data` returns `None` at a clean end of stream and
raises `EOFError` on a truncated one. `save_data` and `load_data` do the same
for a file path.

### `netinfo.dsattribute`

`Attribute` holds a key and an ordered list of values, with `insert`,
`append`, `remove`, `merge` (append unless an equal value is present),
`index`, `value`, `match` (every value of a pattern is present) and `equals`
(same values in any order). `to_data()` and `Attribute.from_data()` convert
to and from a machine-independent `DSData`.

### `netinfo.dsindex`

`Index` maps keys, in insertion order, to sorted values (`IndexKey`), each
carrying a sorted list of directory IDs (`IndexValue`). Use `insert`,
`insert_key`, `insert_attribute`, `insert_attributes`, `lookup`, `lookup_key`,
`IndexKey.lookup`, `delete_dsid` (which also drops values left with no IDs)
and `format`.

### `netinfo.dscache`

`RecordCache(capacity)` keeps records ordered by merit: a record's
`sub_count`, with the root (`dsid` 0) ranked above all. Records with merit
below 1 are not cached; when full, the lowest-merit record is evicted unless
the newcomer ranks lower still. Methods: `save`, `fetch`, `remove`, `flush`,
`format_statistics`. Any object with `dsid` and `sub_count` attributes can be
cached.

### `netinfo.dsassertion`

`Assertion(op, key, value, meta)` tests one attribute of a record with an
`AssertionOp` (less, less-or-equal, equal, approx, greater-or-equal, greater,
has-key, prefix, substring, suffix, precomputed) and returns a `Logic3`
(`FALSE`, `TRUE`, `UNDEFINED`). A record is any object with `attributes` and
`meta_attributes` sequences of `Attribute`; a missing attribute gives
`UNDEFINED`.

### `netinfo.dsfilter`

`Filter` combines assertions: `Filter.new_assert`, `new_and`, `new_or`,
`new_not`, then `append_filter` / `append_assertion`, and `test(record)` in
three-valued logic.

### `netinfo.cache`

`Cache(size, replace=False, retain=None, release=None)` is a fixed
bucket-count hash table from string keys to data, bucketed by `hash_key`.
`insert(key, datum, ttl=0, now=None)` stores an entry that expires `ttl`
seconds after `now` (0 never expires); with `replace` off, inserting an
existing key only resets its expiry. Also `find`, `find_reset`, `delete`,
`delete_datum`, `contains_datum`, `sweep`, `close` and `format`. The
`retain` and `release` callbacks are called as data enter and leave the
cache. A `Cache` works as a context manager that closes it on exit.

## Example

```python
from netinfo.dsdata import cstring_to_data, data_compare
from netinfo.dsattribute import Attribute

name = Attribute(cstring_to_data("name"))
name.append(cstring_to_data("alice"))
name.merge(cstring_to_data("alice"))   # already present, ignored
assert len(name.values) == 1

blob = name.to_data()
assert Attribute.from_data(blob).equals(name)
assert data_compare(cstring_to_data("a"), cstring_to_data("b")) < 0
```

## What this package does not do

It provides the primitives only. There is no record type, no persistent
directory store, no engine for creating, moving or searching a tree of
directories, no path parsing, no server and no command-line tool. Assertions,
filters and the record cache work with whatever record objects the caller
supplies.