from enum import Enum
import math

from pydantic import field_validator
from pydantic.dataclasses import dataclass


class NumberType(Enum):
	INT = "int"
	DOUBLE = "double"


@dataclass(frozen=True)
class NumericValue:
	"""
	The only runtime datum of the language.
	The value is always held as a float; the type tag only decides
	how the value is printed and how results are promoted.
	"""
	type: NumberType
	value: float

	@field_validator("value")
	@classmethod
	def value_as_float(cls, value):
		return float(value)

	def __str__(self):
		return format_value(self)


NAN_VALUE = NumericValue(NumberType.DOUBLE, math.nan)
ZERO_VALUE = NumericValue(NumberType.INT, 0.0)


def promote(*values: NumericValue) -> NumberType:
	"""Double if any of the values is a Double, otherwise Int."""
	if any(v.type is NumberType.DOUBLE for v in values):
		return NumberType.DOUBLE
	return NumberType.INT


def format_value(value: NumericValue) -> str:
	match value.type:
		case NumberType.INT:
			return f"Integer : {value.value:.0f}"
		case NumberType.DOUBLE:
			return f"Double : {value.value:f}"
		case _:
			return f"No Type : {value.value:f}"
