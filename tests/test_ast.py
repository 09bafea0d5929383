import gc
import weakref

from cilisp.ast import *
from cilisp.values import NumberType
from helpers import *


def test_resolve_function_tag():
	names = ["neg", "abs", "add", "sub", "mult", "div", "remainder", "exp",
			"exp2", "pow", "log", "sqrt", "cbrt", "hypot", "max", "min"]
	tags = [resolve_function_tag(name) for name in names]
	assert len(set(tags)) == 16
	assert Func.CUSTOM not in tags
	for name, tag in zip(names, tags):
		assert tag.value == name


def test_resolve_function_tag_unknown():
	assert resolve_function_tag("Add") is Func.CUSTOM
	assert resolve_function_tag("print") is Func.CUSTOM
	assert resolve_function_tag("") is Func.CUSTOM
	assert resolve_function_tag(None) is Func.CUSTOM


def test_make_number():
	node = make_number(3, NumberType.INT)
	assert node.value.type is NumberType.INT
	assert node.value.value == 3.0
	assert node.next is None
	assert node.symbol_table is None


def test_append_to_list_prepends():
	a, b = i(1), i(2)
	head = append_to_list(b, None)
	head = append_to_list(a, head)
	assert head is a
	assert list(iter_list(head)) == [a, b]
	assert list(iter_list(None)) == []


def test_make_function_call_links_operands():
	a, b = i(1), sym("x")
	node = make_function_call(Func.ADD, operand_list(a, b))
	assert node.name == "add"
	assert list(node) == [a, b]
	assert a.containing_call is node
	assert b.containing_call is node
	assert node.containing_call is None
	# Being an operand does not make the call a scope.
	assert a.enclosing_scope is None


def test_make_scope_encloses_values_and_nested_calls():
	inner_operand = sym("x")
	inner_call = call("neg", inner_operand)
	value = call("add", i(1), inner_call)
	body = sym("y")
	node = scope([("y", value)], body)

	assert body.enclosing_scope is node
	assert value.enclosing_scope is node
	assert inner_call.enclosing_scope is node
	assert inner_operand.enclosing_scope is node
	assert node.enclosing_scope is None


def test_make_scope_keeps_inner_scopes():
	x = sym("x")
	inner = scope([("x", i(2))], x)
	outer = scope([("x", i(1))], call("add", inner, i(1)))
	assert x.enclosing_scope is inner
	assert inner.enclosing_scope is outer


def test_make_scope_with_unbound_entries():
	node = scope([("x", None)], i(1))
	(entry,) = list(node.symbol_table)
	assert entry.value is None


def test_back_links_do_not_own():
	x = sym("x")
	node = scope([("x", i(1))], x)
	assert x.enclosing_scope is node
	del node
	assert x.enclosing_scope is None


def test_str():
	node = scope([("x", d(1.5))], call("add", sym("x"), i(2)))
	assert str(node) == "((let (x 1.5)) (add x 2))"


def _collect(node, found):
	"""Gathers weak references to every node and entry of a tree."""
	if node is None:
		return
	found.append(weakref.ref(node))
	match node:
		case FunctionNode():
			for operand in node:
				_collect(operand, found)
		case ScopeNode():
			for entry in iter_list(node.symbol_table):
				found.append(weakref.ref(entry))
				_collect(entry.value, found)
			_collect(node.child, found)


def _sample_tree():
	inner = scope(
			[("y", call("mult", sym("x"), d(2.5)))],
			call("add", sym("y"), sym("x"), i(1)))
	return scope([("x", i(3)), ("z", call("neg", i(4)))], call("max", inner, sym("z")))


def test_tree_is_reclaimed_without_cycle_collector():
	gc.disable()
	try:
		root = _sample_tree()
		refs = []
		_collect(root, refs)
		assert len(refs) == 17
		del root
		assert all(ref() is None for ref in refs)
	finally:
		gc.enable()


def test_release_tears_down_everything():
	root = _sample_tree()
	nodes = []
	_collect(root, nodes)
	held = [ref() for ref in nodes]

	release(root)

	for obj in held:
		assert obj.next is None
		match obj:
			case FunctionNode():
				assert obj.operands is None
			case ScopeNode():
				assert obj.child is None
				assert obj.symbol_table is None
			case SymbolNode():
				assert obj.name is None
			case NumberNode():
				pass
			case _:  # symbol table entry
				assert obj.name is None
				assert obj.value is None
		if not hasattr(obj, "symbol_table"):
			continue
		assert obj.enclosing_scope is None
		assert obj.containing_call is None

	gc.disable()
	try:
		del held, obj, root
		assert all(ref() is None for ref in nodes)
	finally:
		gc.enable()


def test_release_list():
	a, b = call("neg", i(1)), i(2)
	head = operand_list(a, b)
	release_list(head)
	assert a.next is None
	assert a.operands is None


def test_release_none():
	release(None)
	release_list(None)


def test_custom_call_without_name():
	node = make_function_call(Func.CUSTOM, operand_list(i(1)))
	assert node.name == "custom"
	assert str(node) == "(custom 1)"
