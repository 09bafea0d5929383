from enum import Enum
import sys

from pydantic.dataclasses import dataclass


_RED = "\033[31m"
_RESET_COLOR = "\033[0m"


class Severity(Enum):
	FATAL = "fatal"
	RECOVERABLE = "recoverable"


class ErrorKind(Enum):
	ALLOCATION_FAILED = "allocation failed"
	NULL_NODE = "null node"
	TOO_FEW_OPERANDS = "too few operands"
	TOO_MANY_OPERANDS = "too many operands"
	UNDEFINED_SYMBOL = "undefined symbol"
	DUPLICATE_SYMBOL = "duplicate symbol"
	UNKNOWN_FUNCTION = "unknown function"
	PRECISION_LOSS = "precision loss"
	RECURSION_LIMIT = "recursion limit"


# Fatal kinds terminate the run; everything else degrades to a fallback value.
SEVERITY = {
	ErrorKind.ALLOCATION_FAILED: Severity.FATAL,
	ErrorKind.NULL_NODE:         Severity.FATAL,
	ErrorKind.TOO_FEW_OPERANDS:  Severity.RECOVERABLE,
	ErrorKind.TOO_MANY_OPERANDS: Severity.RECOVERABLE,
	ErrorKind.UNDEFINED_SYMBOL:  Severity.RECOVERABLE,
	ErrorKind.DUPLICATE_SYMBOL:  Severity.RECOVERABLE,
	ErrorKind.UNKNOWN_FUNCTION:  Severity.RECOVERABLE,
	ErrorKind.PRECISION_LOSS:    Severity.RECOVERABLE,
	ErrorKind.RECURSION_LIMIT:   Severity.RECOVERABLE,
}


@dataclass(frozen=True)
class Diagnostic:
	kind: ErrorKind
	message: str

	@property
	def severity(self):
		return SEVERITY[self.kind]

	@property
	def is_fatal(self):
		return self.severity is Severity.FATAL

	def __str__(self):
		if self.is_fatal:
			return f"ERROR: {self.message}\nExiting..."
		return f"WARNING: {self.message}"


class CilispError(Exception):
	def __init__(self, msg):
		super().__init__(msg)
		self.msg = msg

class FatalError(CilispError):
	def __init__(self, diagnostic):
		super().__init__(diagnostic.message)
		self.diagnostic = diagnostic


class Diagnostics:
	"""
	Execution context for everything the core reports.
	It is opened once before the first evaluation and closed once at shutdown.
	Diagnostics go to the output stream and, when a log path is given,
	are also appended to the log file.
	"""

	def __init__(self, stream=None, log_path=None, color=False):
		self.stream = sys.stdout if stream is None else stream
		self.log_path = log_path
		self.color = color
		self.emitted: list[Diagnostic] = []
		self._log_file = None

	def open(self):
		if self.log_path is not None and self._log_file is None:
			self._log_file = open(self.log_path, "a")
		return self

	def close(self):
		if self._log_file is not None:
			self._log_file.close()
			self._log_file = None

	def __enter__(self):
		return self.open()

	def __exit__(self, *exc_info):
		self.close()

	def report(self, kind, message):
		"""
		Emits a diagnostic of the given kind.
		Recoverable diagnostics are returned to the caller;
		fatal ones raise FatalError after being written out.
		"""
		diagnostic = Diagnostic(kind, message)
		self.emitted.append(diagnostic)
		self._write(diagnostic)
		if diagnostic.is_fatal:
			raise FatalError(diagnostic)
		return diagnostic

	def count(self, kind):
		return sum(1 for d in self.emitted if d.kind is kind)

	def _write(self, diagnostic):
		text = str(diagnostic)
		if self.color:
			print(_RED + text + _RESET_COLOR, file=self.stream, flush=True)
		else:
			print(text, file=self.stream, flush=True)
		if self._log_file is not None:
			print(text, file=self._log_file, flush=True)


def format_error(e):
	match e:
		case FatalError(diagnostic=diagnostic):
			return str(diagnostic)
		case _:
			return str(e)
