from enum import Enum
import math

from cilisp.ast import Func, iter_list
from cilisp.debug import debug
from cilisp.errors import ErrorKind
from cilisp.values import NAN_VALUE, ZERO_VALUE, NumericValue, NumberType, promote


class Arity(Enum):
	UNARY = 1
	BINARY = 2
	VARIADIC = None


class Builtin:
	"""
	A builtin checks its operand count against its arity class,
	evaluates only the operands it is going to use,
	and hands the values to its implementation.
	"""

	def __init__(self, func, arity, impl):
		self.func = func
		self.arity = arity
		self.impl = impl

	def __repr__(self):
		return f"<builtin {self.func.value}>"

	def __call__(self, operands, evaluate, diagnostics):
		name = self.func.value
		operands = list(iter_list(operands))

		match self.arity, len(operands):
			case Arity.UNARY, 0:
				diagnostics.report(ErrorKind.TOO_FEW_OPERANDS,
						f"{name} called with no operands, nan returned")
				return NAN_VALUE
			case Arity.UNARY, n if n > 1:
				diagnostics.report(ErrorKind.TOO_MANY_OPERANDS,
						f"{name} called with extra operands")
			case (Arity.BINARY | Arity.VARIADIC), 0:
				diagnostics.report(ErrorKind.TOO_FEW_OPERANDS,
						f"{name} called with no operands, 0 returned")
				return ZERO_VALUE
			case Arity.BINARY, 1:
				diagnostics.report(ErrorKind.TOO_FEW_OPERANDS,
						f"{name} called with 1 operand, nan returned")
				return NAN_VALUE
			case Arity.BINARY, n if n > 2:
				diagnostics.report(ErrorKind.TOO_MANY_OPERANDS,
						f"{name} called with too many operands, ignoring extra")

		if self.arity.value is not None:
			operands = operands[:self.arity.value]
		values = [evaluate(operand, diagnostics) for operand in operands]
		return self.impl(*values)


builtin_functions: dict[Func, Builtin] = {}

def builtin(func, arity):
	def register(impl):
		builtin_functions[func] = Builtin(func, arity, impl)
		return impl
	return register


def dispatch(node, evaluate, diagnostics):
	"""Runs the builtin selected by the tag of a function node."""
	try:
		function = builtin_functions[node.func]
	except KeyError:
		diagnostics.report(ErrorKind.UNKNOWN_FUNCTION,
				f"unknown function {node.name}, nan returned")
		return NAN_VALUE
	debug(f"dispatch: {node}")
	return function(node.operands, evaluate, diagnostics)


# The math module raises where IEEE arithmetic gives a special value.
# These helpers return that value instead.

def _divide(a, b):
	if b != 0:
		return a / b
	if a == 0 or math.isnan(a):
		return math.nan
	return math.copysign(math.inf, a) * math.copysign(1.0, b)


def _fmod(a, b):
	try:
		return math.fmod(a, b)
	except ValueError:
		return math.nan


def _is_odd_integer(x):
	return math.isfinite(x) and x.is_integer() and x % 2 == 1


def _pow(a, b):
	try:
		return math.pow(a, b)
	except ValueError:
		if a == 0 and b < 0:
			# pole error
			return math.copysign(math.inf, a) if _is_odd_integer(b) else math.inf
		return math.nan
	except OverflowError:
		if a < 0 and _is_odd_integer(b):
			return -math.inf
		return math.inf


def _exp(x):
	try:
		return math.exp(x)
	except OverflowError:
		return math.inf


def _exp2(x):
	try:
		return math.pow(2.0, x)
	except OverflowError:
		return math.inf


def _log(x):
	if x == 0:
		return -math.inf
	if x < 0:
		return math.nan
	return math.log(x)


def _sqrt(x):
	return math.nan if x < 0 else math.sqrt(x)


################################################################################


@builtin(Func.NEG, Arity.UNARY)
def negate(x):
	return NumericValue(x.type, -x.value)


@builtin(Func.ABS, Arity.UNARY)
def absolute(x):
	return NumericValue(x.type, abs(x.value))


@builtin(Func.EXP, Arity.UNARY)
def exponential(x):
	return NumericValue(NumberType.DOUBLE, _exp(x.value))


@builtin(Func.EXP2, Arity.UNARY)
def exponential2(x):
	value = _exp2(x.value)
	# Only a negative result is forced to Double.
	return NumericValue(NumberType.DOUBLE if value < 0 else x.type, value)


@builtin(Func.LOG, Arity.UNARY)
def logarithm(x):
	return NumericValue(NumberType.DOUBLE, _log(x.value))


@builtin(Func.SQRT, Arity.UNARY)
def square_root(x):
	return NumericValue(NumberType.DOUBLE, _sqrt(x.value))


@builtin(Func.CBRT, Arity.UNARY)
def cube_root(x):
	return NumericValue(NumberType.DOUBLE, math.cbrt(x.value))


################################################################################


@builtin(Func.SUB, Arity.BINARY)
def subtract(a, b):
	return NumericValue(promote(a, b), a.value - b.value)


@builtin(Func.MULT, Arity.BINARY)
def multiply(a, b):
	return NumericValue(promote(a, b), a.value * b.value)


@builtin(Func.DIV, Arity.BINARY)
def divide(a, b):
	return NumericValue(promote(a, b), _divide(a.value, b.value))


@builtin(Func.REMAINDER, Arity.BINARY)
def remainder(a, b):
	return NumericValue(promote(a, b), abs(_fmod(a.value, b.value)))


@builtin(Func.POW, Arity.BINARY)
def power(a, b):
	return NumericValue(promote(a, b), _pow(a.value, b.value))


################################################################################


@builtin(Func.ADD, Arity.VARIADIC)
def add(*values):
	total = 0.0
	for v in values:
		total += v.value
	# The result carries the type of the last operand, not the promoted type.
	return NumericValue(values[-1].type, total)


@builtin(Func.HYPOT, Arity.VARIADIC)
def hypotenuse(*values):
	squares = 0.0
	for v in values:
		squares += v.value * v.value
	return NumericValue(NumberType.DOUBLE, math.sqrt(squares))


@builtin(Func.MIN, Arity.VARIADIC)
def minimum(first, *rest):
	result = first
	for v in rest:
		if result.value > v.value:
			result = v
	return result


@builtin(Func.MAX, Arity.VARIADIC)
def maximum(first, *rest):
	result = first
	for v in rest:
		if result.value < v.value:
			result = v
	return result
