from enum import Enum
import weakref

from cilisp.values import NumericValue, NumberType


class Func(Enum):
	"""
	Builtin function tags. The value is the name the front-end matches against.
	"""
	NEG = "neg"
	ABS = "abs"
	ADD = "add"
	SUB = "sub"
	MULT = "mult"
	DIV = "div"
	REMAINDER = "remainder"
	EXP = "exp"
	EXP2 = "exp2"
	POW = "pow"
	LOG = "log"
	SQRT = "sqrt"
	CBRT = "cbrt"
	HYPOT = "hypot"
	MAX = "max"
	MIN = "min"
	# Reserved for user defined functions, which are not evaluated yet.
	CUSTOM = None


def resolve_function_tag(name):
	"""Exact, case sensitive match; anything unknown is CUSTOM."""
	if name is None:
		return Func.CUSTOM
	try:
		return Func(name)
	except ValueError:
		return Func.CUSTOM


def _deref(ref):
	return None if ref is None else ref()

def _weak(node):
	return None if node is None else weakref.ref(node)


class Node:
	"""
	Common part of every expression node.

	`next` chains operand lists and top-level expressions;
	it belongs to whichever container built the list.
	`enclosing_scope` and `containing_call` are back-references only
	and never keep their target alive.
	"""

	def __init__(self):
		self.next = None
		self.symbol_table = None
		self._enclosing_scope = None
		self._containing_call = None

	@property
	def enclosing_scope(self):
		return _deref(self._enclosing_scope)

	@enclosing_scope.setter
	def enclosing_scope(self, scope):
		self._enclosing_scope = _weak(scope)

	@property
	def containing_call(self):
		return _deref(self._containing_call)

	@containing_call.setter
	def containing_call(self, call):
		self._containing_call = _weak(call)

	def __repr__(self):
		return f"{type(self).__name__}({self})"


class NumberNode(Node):
	def __init__(self, value: NumericValue):
		super().__init__()
		self.value = value

	def __str__(self):
		match self.value.type:
			case NumberType.INT:
				return f"{self.value.value:.0f}"
			case _:
				return repr(self.value.value)


class SymbolNode(Node):
	def __init__(self, name: str):
		super().__init__()
		self.name = name

	def __str__(self):
		return str(self.name)


class FunctionNode(Node):
	def __init__(self, func: Func, operands, name=None):
		super().__init__()
		self.func = func
		self.operands = operands
		if name is None:
			name = "custom" if func is Func.CUSTOM else func.value
		self.name = name

	def __iter__(self):
		return iter_list(self.operands)

	def __str__(self):
		return "(" + " ".join([str(self.name), *map(str, self)]) + ")"


class ScopeNode(Node):
	def __init__(self, symbol_table, child):
		super().__init__()
		self.symbol_table = symbol_table
		self.child = child

	def __str__(self):
		bindings = " ".join(map(str, iter_list(self.symbol_table)))
		return f"((let {bindings}) {self.child})"


def iter_list(head):
	"""Walks a chain of `next` links, stopping at None."""
	while head is not None:
		yield head
		head = head.next


def make_number(value, type=NumberType.INT):
	return NumberNode(NumericValue(type, value))


def make_symbol_ref(name):
	return SymbolNode(name)


def make_function_call(func, operands, name=None):
	node = FunctionNode(func, operands, name)
	for operand in iter_list(operands):
		operand.containing_call = node
	return node


def make_scope(symbol_table, child):
	"""
	Closes a table and its body into a new scope.
	Every bound value and the body, along with the operands of any
	calls among them, gets this scope as its enclosing scope.
	"""
	node = ScopeNode(symbol_table, child)
	for entry in iter_list(symbol_table):
		enclose(entry.value, node)
	enclose(child, node)
	return node


def enclose(node, scope):
	"""
	Sets the enclosing scope of a freshly built subtree.
	Descends through call operands only: a nested scope node is enclosed
	itself, but its contents already belong to it.
	"""
	if node is None or node.enclosing_scope is not None:
		return
	node.enclosing_scope = scope
	if isinstance(node, FunctionNode):
		for operand in node:
			enclose(operand, scope)


def append_to_list(new_node, list_head):
	new_node.next = list_head
	return new_node


def release(node):
	"""
	Tears down a subtree post-order: owned children first, then the node.
	Back-references and the node's own `next` are cleared but never followed.
	"""
	if node is None:
		return

	match node:
		case FunctionNode():
			release_list(node.operands)
			node.operands = None
		case ScopeNode():
			release(node.child)
			node.child = None
			_release_table(node.symbol_table)
		case SymbolNode():
			node.name = None
		case NumberNode():
			pass

	node.symbol_table = None
	node.next = None
	node.enclosing_scope = None
	node.containing_call = None


def release_list(head):
	while head is not None:
		following = head.next
		release(head)
		head = following


def _release_table(entry):
	while entry is not None:
		following = entry.next
		release(entry.value)
		entry.value = None
		entry.name = None
		entry.next = None
		entry = following


__all__ = [
	"Func", "resolve_function_tag",
	*(cls.__name__ for cls in [
		Node, NumberNode, SymbolNode, FunctionNode, ScopeNode]),
	"iter_list", "make_number", "make_symbol_ref", "make_function_call",
	"make_scope", "enclose", "append_to_list", "release", "release_list",
]
