import math

import cilisp.builtins as builtins
from cilisp.ast import *
from cilisp.debug import debug, trace_entry, trace_exit
from cilisp.errors import ErrorKind
from cilisp.symbols import lookup_local
from cilisp.values import NAN_VALUE, NumericValue, NumberType


@trace_entry
def evaluate(node, diagnostics):
	"""
	Reduces an expression tree to a numeric value.
	Only a missing node is fatal; malformed input degrades to NaN or zero
	with a diagnostic and evaluation carries on.
	"""
	match node:
		case None:
			diagnostics.report(ErrorKind.NULL_NODE, "NULL ast node passed into eval!")

		case NumberNode(value=value):
			return value

		case FunctionNode():
			return builtins.dispatch(node, evaluate, diagnostics)

		case ScopeNode(child=child):
			# The table only provides context for symbols inside the body.
			return evaluate(child, diagnostics)

		case SymbolNode():
			return resolve(node, diagnostics)

		case _:
			debug(f"raw object: {node!r}")
			assert False  # We should never see anything but nodes.


def find_binding(symbol):
	"""
	Walks outward from the symbol through its enclosing scopes
	and returns the innermost entry binding its name, or None.
	"""
	scope = symbol
	while scope is not None:
		entry = lookup_local(symbol.name, scope.symbol_table)
		if entry is not None:
			return entry
		scope = scope.enclosing_scope
	return None


@trace_exit
def resolve(symbol, diagnostics):
	entry = find_binding(symbol)
	if entry is None:
		diagnostics.report(ErrorKind.UNDEFINED_SYMBOL,
				f"undefined symbol {symbol.name}, nan returned")
		return NAN_VALUE

	# Bindings are evaluated again on every reference.
	result = evaluate(entry.value, diagnostics)
	if entry.type is None:
		return result
	return cast(result, entry.type, entry.name, diagnostics)


def cast(value, type, name, diagnostics):
	"""Converts a value to the declared type of the symbol it was bound to."""
	match type, value.type:
		case NumberType.INT, NumberType.DOUBLE if math.isfinite(value.value):
			truncated = float(math.trunc(value.value))
			if truncated != value.value:
				diagnostics.report(ErrorKind.PRECISION_LOSS,
						f"precision loss on int cast from {value.value:f} "
						f"to {truncated:.0f} for symbol {name}")
			return NumericValue(NumberType.INT, truncated)
		case _:
			return NumericValue(type, value.value)
