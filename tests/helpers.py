import io

from cilisp.ast import *
from cilisp.errors import Diagnostics
from cilisp.symbols import bind, insert
from cilisp.values import NumberType


def i(value):
	return make_number(value, NumberType.INT)

def d(value):
	return make_number(value, NumberType.DOUBLE)

def sym(name):
	return make_symbol_ref(name)


def operand_list(*nodes):
	head = None
	for node in reversed(nodes):
		head = append_to_list(node, head)
	return head


def call(name, *operands):
	return make_function_call(resolve_function_tag(name), operand_list(*operands), name)


def scope(bindings, body, diagnostics=None):
	"""bindings is a sequence of (name, node) or (type, name, node)."""
	if diagnostics is None:
		diagnostics = quiet()
	table = None
	for b in bindings:
		match b:
			case (name, node):
				entry = bind(name, node)
			case (type, name, node):
				entry = bind(name, node, type)
		table = insert(entry, table, diagnostics)
	return make_scope(table, body)


def quiet():
	return Diagnostics(io.StringIO())
