from cilisp.ast import enclose, iter_list, release
from cilisp.errors import ErrorKind
from cilisp.values import NumberType


class SymbolEntry:
	"""
	One binding in a symbol table.
	A table is the chain of entries starting from its head entry.
	"""

	def __init__(self, name, value, type: NumberType | None = None):
		self.name = name
		self.value = value
		# Declared type for typed bindings, None when untyped.
		self.type = type
		self.next = None

	def __iter__(self):
		return iter_list(self)

	def __str__(self):
		if self.type is None:
			return f"({self.name} {self.value})"
		return f"({self.type.value} {self.name} {self.value})"

	def __repr__(self):
		return f"SymbolEntry{self}"


def lookup_local(name, table):
	if name is None:
		return None
	for entry in iter_list(table):
		if entry.name == name:
			return entry
	return None


def bind(name, value, type=None):
	return SymbolEntry(name, value, type)


def insert(entry, table, diagnostics):
	"""
	Adds the entry to the table and returns the new head.
	A name already in the table keeps its entry and only takes the new value.
	"""
	if entry is None:
		return table

	existing = lookup_local(entry.name, table)
	if existing is not None:
		diagnostics.report(ErrorKind.DUPLICATE_SYMBOL,
				f"duplicate assignment to symbol {entry.name}")
		scope = existing.value.enclosing_scope if existing.value is not None else None
		release(existing.value)
		existing.value = entry.value
		enclose(existing.value, scope)
		entry.name = entry.value = None
		return table

	entry.next = table
	return entry
