import io

from cilisp.ast import *
from cilisp.errors import Diagnostics, ErrorKind
from cilisp.symbols import *
from cilisp.values import NumberType


def table_of(diagnostics, *bindings):
	table = None
	for name, value in bindings:
		table = insert(bind(name, make_number(value)), table, diagnostics)
	return table


def test_lookup_local_finds_entries_past_the_head():
	table = table_of(Diagnostics(io.StringIO()), ("a", 1), ("b", 2), ("c", 3))
	for name, value in [("a", 1), ("b", 2), ("c", 3)]:
		entry = lookup_local(name, table)
		assert entry is not None
		assert entry.name == name
		assert entry.value.value.value == value


def test_lookup_local_missing():
	table = table_of(Diagnostics(io.StringIO()), ("a", 1))
	assert lookup_local("z", table) is None
	assert lookup_local(None, table) is None
	assert lookup_local("a", None) is None


def test_insert_prepends():
	diagnostics = Diagnostics(io.StringIO())
	first = bind("a", make_number(1))
	table = insert(first, None, diagnostics)
	second = bind("b", make_number(2))
	table = insert(second, table, diagnostics)
	assert table is second
	assert second.next is first
	assert [e.name for e in table] == ["b", "a"]


def test_insert_duplicate_replaces_value():
	stream = io.StringIO()
	diagnostics = Diagnostics(stream)
	table = table_of(diagnostics, ("x", 1), ("y", 5))
	old_value = lookup_local("x", table).value
	new_entry = bind("x", make_number(2))

	result = insert(new_entry, table, diagnostics)

	assert result is table
	assert [e.name for e in table].count("x") == 1
	assert lookup_local("x", table).value.value.value == 2
	assert diagnostics.count(ErrorKind.DUPLICATE_SYMBOL) == 1
	assert "WARNING: duplicate assignment to symbol x" in stream.getvalue()
	# The replaced value and the discarded wrapper are torn down.
	assert old_value.next is None
	assert new_entry.name is None and new_entry.value is None


def test_insert_duplicate_keeps_declared_type():
	diagnostics = Diagnostics(io.StringIO())
	table = insert(bind("x", make_number(1), NumberType.INT), None, diagnostics)
	table = insert(bind("x", make_number(2.5, NumberType.DOUBLE)), table, diagnostics)
	assert lookup_local("x", table).type is NumberType.INT


def test_insert_nothing():
	diagnostics = Diagnostics(io.StringIO())
	table = table_of(diagnostics, ("a", 1))
	assert insert(None, table, diagnostics) is table


def test_entry_str():
	assert str(bind("x", make_number(1))) == "(x 1)"
	assert str(bind("x", make_number(1), NumberType.DOUBLE)) == "(double x 1)"
