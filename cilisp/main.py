import os
import sys

from cilisp.ast import release
from cilisp.errors import Diagnostics, ErrorKind, FatalError, format_error
from cilisp.evaluator import evaluate
from cilisp.reader import ParseError, Reader, load_forms
from cilisp.values import NAN_VALUE, format_value


def print_usage(name="cilisp"):
	print(f"Usage: {name} [filename]")


def make_diagnostics(stream=None):
	"""Builds the diagnostics context from the environment."""
	stream = sys.stdout if stream is None else stream
	color = os.environ.get("CILISP_COLOR")
	if color is None:
		color = stream.isatty()
	else:
		color = color not in ("", "0")
	return Diagnostics(stream, log_path=os.environ.get("CILISP_LOG"), color=color)


def evaluate_and_print(form, diagnostics):
	try:
		try:
			result = evaluate(form, diagnostics)
		except RecursionError:
			# Typically a binding that refers to itself.
			diagnostics.report(ErrorKind.RECURSION_LIMIT,
					"expression nested too deeply, nan returned")
			result = NAN_VALUE
		print(format_value(result), flush=True)
	finally:
		release(form)


def repl(diagnostics):
	reader = Reader(lambda: sys.stdin.read(1), diagnostics)
	while True:
		print("> ", end="", flush=True)
		try:
			form = reader.read()
		except ParseError as e:
			print(format_error(e), file=sys.stderr)
			break
		if form is None:
			break
		evaluate_and_print(form, diagnostics)


def run_file(f, diagnostics):
	try:
		for form in load_forms(lambda: f.read(1), diagnostics):
			evaluate_and_print(form, diagnostics)
	except ParseError as e:
		print(format_error(e), file=sys.stderr)
		return 2
	return 0


def main(argv):
	diagnostics = make_diagnostics()
	try:
		with diagnostics:
			try:
				match argv:
					case [name]:  # interactive mode
						repl(diagnostics)
						return 0
					case [name, filename]:
						if filename == "-":
							f = sys.stdin
						else:
							f = open(filename)
						with f:
							return run_file(f, diagnostics)
					case [name, *args]:
						print_usage(name)
						return 2
					case _:
						print_usage()
						return 2
			except MemoryError:
				diagnostics.report(ErrorKind.ALLOCATION_FAILED, "Memory allocation failed!")
	except FatalError:
		return 1


def run():
	sys.exit(main(sys.argv))
