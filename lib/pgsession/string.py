##
# .string
##
"""
Rendering of Python values as SQL text, and LIKE pattern escaping.

The functions here work on Python strings; escaping that depends on the
session's settings (literals, identifiers) is done by the session itself with
libpq's help.
"""
import math
import datetime
import decimal
from .encodings import bytea

def render(value):
	"""
	Render `value` as the text PostgreSQL would accept for it.

	`None` renders as `None`; the caller decides how to represent NULL.
	Binary data renders as hex-format bytea text.
	"""
	if value is None:
		return None
	if value is True:
		return 'true'
	if value is False:
		return 'false'
	if isinstance(value, str):
		return value
	if isinstance(value, (bytes, bytearray, memoryview)):
		return bytea.escape(value)
	if isinstance(value, float):
		if math.isnan(value):
			return 'NaN'
		if math.isinf(value):
			return 'Infinity' if value > 0 else '-Infinity'
		return repr(value)
	if isinstance(value, (int, decimal.Decimal)):
		return str(value)
	if isinstance(value, (datetime.datetime, datetime.date, datetime.time)):
		return value.isoformat()
	if isinstance(value, datetime.timedelta):
		return '{0} days {1} seconds {2} microseconds'.format(
			value.days, value.seconds, value.microseconds
		)
	return str(value)

def escape_like(text, escape_char = '\\'):
	"""
	Prefix every '_' and '%' in `text` with `escape_char` so that the text
	matches itself in a LIKE pattern.

	>>> escape_like('50%_off')
	'50\\\\%\\\\_off'
	"""
	return ''.join(
		(escape_char + c) if c in '_%' else c
		for c in text
	)
