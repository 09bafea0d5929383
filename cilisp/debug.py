import os

if __debug__ and os.environ.get("CILISP_DEBUG"):
	from functools import wraps
	from sys import stderr
	def debug(*args, **kws):
		kws.setdefault("file", stderr)
		print("[DEBUG]", *args, **kws)

	def _format_call(fn, args):
		return f"{fn.__name__}({', '.join(map(str, args))})"

	def trace_entry(fn):
		@wraps(fn)
		def _(*args, **kws):
			debug(f"CALL: {_format_call(fn, args)}")
			return fn(*args, **kws)
		return _

	def trace_exit(fn):
		@wraps(fn)
		def _(*args, **kws):
			result = fn(*args, **kws)
			debug(f"RETN: {_format_call(fn, args)} -> {result}")
			return result
		return _

else:
	def debug(*args, **kws):
		pass
	def trace_entry(fn):
		return fn
	def trace_exit(fn):
		return fn
