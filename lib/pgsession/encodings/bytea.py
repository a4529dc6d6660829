##
# .encodings.bytea
##
"""
PostgreSQL bytea escaping and unescaping.

`escape` produces the hex format (``\\x`` followed by two hex digits per
byte). `unescape` reads both the hex format and the older escape format, where
printable bytes stand for themselves, ``\\\\`` is a backslash and ``\\nnn`` is an
octal byte.
"""
import binascii

def size_escaped(nbytes):
	'Length of the hex-escaped text for `nbytes` bytes, prefix included.'
	return 2 + (2 * nbytes)

def escape(data):
	"""
	Hex-escape the given bytes for use as a bytea literal's text.

	>>> escape(b"a'\\\\")
	'\\\\x61275c'
	"""
	return '\\x' + binascii.hexlify(bytes(data)).decode('ascii')

def _unescape_hex(text):
	digits = text[2:]
	if len(digits) % 2:
		raise ValueError("odd number of hex digits in bytea text")
	try:
		return binascii.unhexlify(digits)
	except (binascii.Error, ValueError):
		raise ValueError("invalid hex digits in bytea text")

def _unescape_octal(text):
	diter = iter(text)
	output = bytearray()
	next_char = diter.__next__
	for x in diter:
		if x == "\\":
			try:
				y = next_char()
			except StopIteration:
				raise ValueError("incomplete backslash sequence")
			if y == "\\":
				# It's a backslash, so let x(\) be appended.
				x = ord(x)
			elif y.isdigit():
				try:
					os = ''.join((y, next_char(), next_char()))
				except StopIteration:
					# requires three digits
					raise ValueError("incomplete backslash sequence")
				try:
					x = int(os, base = 8)
				except ValueError:
					raise ValueError("invalid bytea octal sequence '%s'" %(os,))
				if x > 255:
					raise ValueError("invalid bytea octal sequence '%s'" %(os,))
			else:
				raise ValueError("invalid backslash follow '%s'" %(y,))
		else:
			x = ord(x)
			if x > 255:
				raise ValueError("non-byte character in bytea text")
		output.append(x)
	return bytes(output)

def unescape(text):
	"""
	Reconstitute the bytes from bytea text in either the hex or the escape
	format.
	"""
	if isinstance(text, (bytes, bytearray, memoryview)):
		text = bytes(text).decode('ascii')
	if text.startswith('\\x'):
		return _unescape_hex(text)
	return _unescape_octal(text)
