from string import whitespace, digits, ascii_letters
from functools import wraps
from dataclasses import dataclass
from typing import Any

from cilisp.ast import (
	append_to_list, make_function_call, make_number, make_scope,
	make_symbol_ref, resolve_function_tag)
from cilisp.errors import CilispError
from cilisp.symbols import bind, insert
from cilisp.values import NumberType


_SPACES = set(whitespace)
_DIGITS = set(digits)
_LETTERS = set(ascii_letters)
_SEPARATORS = set("();") | _SPACES | {""}
_IDENT_CHARS = _LETTERS | _DIGITS | {"_"}

_TYPE_NAMES = {
	"int": NumberType.INT,
	"double": NumberType.DOUBLE,
}


class ParseError(CilispError):
	def __init__(self, msg, line):
		super().__init__(msg)
		self.line = line
	def __str__(self):
		return f"Parse error on line {self.line}: {self.msg}"


@dataclass
class ParseResult:
	success: bool
	result: Any = None
	chars_consumed_adj: int = None


def _component_parser(parse_method):
	"""
	Rewinds the reader to where the parse began when the parse fails,
	or applies the manual adjustment the parse asked for.
	"""
	@wraps(parse_method)
	def component_parser_wrapper(self):
		bookmark = self._next_char

		out = parse_method(self)
		if out.chars_consumed_adj is not None:
			self._next_char += out.chars_consumed_adj
		elif not out.success:
			self._next_char = bookmark

		return out
	return component_parser_wrapper


class Reader:
	"""
	Builds expression trees from source text.

	The character source is a function returning the next character,
	or the empty string at the end of input.
	Characters are buffered so that a failed parse can back up.
	"""

	def __init__(self, get_next_char, diagnostics):
		self.get_next_char = get_next_char
		self.diagnostics = diagnostics
		self.line = 1
		self._buffer = []
		self._next_char = 0
		self._chars = self._char_gen()

	def _char_gen(self):
		while True:
			while self._next_char >= len(self._buffer):
				c = self.get_next_char()
				if c == '\n':
					self.line += 1
				self._buffer.append(c)

			out = self._buffer[self._next_char]
			self._next_char += 1
			yield out

	def _peek(self):
		c = next(self._chars)
		self._next_char -= 1
		return c

	def _error(self, msg):
		return ParseError(msg, self.line)

	def _expect(self, c):
		self.skip_whitespace()
		got = next(self._chars)
		if got == "":
			raise self._error("Unexpected end of input.")
		if got != c:
			raise self._error(f"Expected '{c}' but found '{got}'.")

	def read(self):
		"""Returns the next top-level expression tree, or None at end of input."""
		self.skip_whitespace()
		if self._peek() == "":
			return None
		return self.parse_form().result

	def __iter__(self):
		while (form := self.read()) is not None:
			yield form

	def skip_whitespace(self):
		while True:
			c = next(self._chars)
			if c == ';':
				while c not in ('\n', ""):
					c = next(self._chars)
			elif c not in _SPACES:
				break
		self._next_char -= 1

	def parse_form(self):
		order = [
			self.parse_compound,
			self.parse_number,
			self.parse_symbol]

		self.skip_whitespace()
		for parse_function in order:
			out = parse_function()
			if out.success:
				return out

		if self._peek() == "":
			raise self._error("Unexpected end of input.")
		raise self._error("Invalid form.")

	@_component_parser
	def parse_compound(self):
		if next(self._chars) != '(':
			return ParseResult(False)
		self.skip_whitespace()
		if self._peek() == '(':
			return self.parse_scope()
		return self.parse_call()

	def parse_scope(self):
		table = self.parse_let_section()
		body = self.parse_form().result
		self._expect(')')
		return ParseResult(True, make_scope(table, body))

	def parse_call(self):
		name = self.parse_identifier()
		if name is None:
			raise self._error("Expected a function name.")

		operands = []
		while True:
			self.skip_whitespace()
			c = self._peek()
			if c == ')':
				next(self._chars)
				break
			if c == "":
				raise self._error("Unexpected end of input.")
			operands.append(self.parse_form().result)

		# Keep source order: the list is built by prepending.
		head = None
		for operand in reversed(operands):
			head = append_to_list(operand, head)
		return ParseResult(True,
				make_function_call(resolve_function_tag(name), head, name))

	def parse_let_section(self):
		self._expect('(')
		self.skip_whitespace()
		if self.parse_identifier() != "let":
			raise self._error("Expected 'let'.")

		table = None
		while True:
			self.skip_whitespace()
			c = self._peek()
			if c == ')':
				next(self._chars)
				return table
			if c == "":
				raise self._error("Unexpected end of input.")
			table = insert(self.parse_let_element(), table, self.diagnostics)

	def parse_let_element(self):
		self._expect('(')
		self.skip_whitespace()
		name = self.parse_identifier()
		if name is None:
			raise self._error("Expected a symbol to bind.")

		type = None
		self.skip_whitespace()
		if name in _TYPE_NAMES and self._peek() in _LETTERS:
			type = _TYPE_NAMES[name]
			name = self.parse_identifier()

		value = self.parse_form().result
		self._expect(')')
		return bind(name, value, type)

	def parse_identifier(self):
		"""Reads a raw identifier, returning None when there is none."""
		out = self.parse_symbol()
		return out.result.name if out.success else None

	@_component_parser
	def parse_number(self):
		num_str = []
		c = next(self._chars)
		if c == '+' or c == '-':
			num_str.append(c)
			c = next(self._chars)

		if c not in _DIGITS:
			return ParseResult(False)
		num_str.append(c)

		type = NumberType.INT
		for c in self._chars:
			if c == '.' and type is NumberType.INT:
				type = NumberType.DOUBLE
			elif c not in _DIGITS:
				# Only accept as a number if it ended on a separator.
				if c not in _SEPARATORS:
					return ParseResult(False)
				break
			num_str.append(c)
		return ParseResult(True, make_number(float("".join(num_str)), type), -1)

	@_component_parser
	def parse_symbol(self):
		c = next(self._chars)
		if c not in _LETTERS:
			return ParseResult(False)
		s = [c]
		for c in self._chars:
			if c not in _IDENT_CHARS:
				break
			s.append(c)
		return ParseResult(True, make_symbol_ref("".join(s)), -1)


def load_forms(get_next_char, diagnostics):
	return iter(Reader(get_next_char, diagnostics))
