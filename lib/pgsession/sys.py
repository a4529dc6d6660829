##
# .sys
##
"""
pgsession system functions.

Overridable Functions
---------------------

 errformat
  Information that makes up an exception's displayed "body".
  Effectively, the implementation of `pgsession.exceptions.Error.__str__`

 msghook
  Display a message that no error handler or notice callback consumed.
"""
import sys
import os

def indent(s, level = 2, char = ' '):
	ind = char * level
	r = ""
	for x in s.splitlines():
		r += ((ind + x).rstrip() + os.linesep)
	return r

def format_message(msg):
	"""
	Format the message with its metadata into a readable string.
	"""
	it = msg._e_metas()
	first = next(it)[1] or ''
	lines = []
	for k, v in it:
		v = str(v)
		if len(v) > 70 or os.linesep in v:
			lines.append(k + ':' + os.linesep + indent(v).rstrip())
		else:
			lines.append(k + ': ' + v)
	label = msg._e_label
	s = label + ': ' + first.rstrip()
	if lines:
		s += os.linesep + indent(os.linesep.join(lines)).rstrip()
	return s

def default_errformat(val):
	"""
	Built-in error formatter. DON'T TOUCH!
	"""
	it = val._e_metas()
	return (next(it)[1] or '') \
		+ os.linesep + '  ' \
		+ (os.linesep + '  ').join(
			k + ': ' + str(v) for k, v in it
		)

def default_msghook(msg, format_message = format_message):
	"""
	Built-in message hook. DON'T TOUCH!
	"""
	if sys.stderr and not sys.stderr.closed:
		try:
			sys.stderr.write(format_message(msg) + os.linesep)
		except Exception:
			try:
				sys.excepthook(*sys.exc_info())
			except Exception:
				# gasp.
				pass

def errformat(*args, **kw):
	"""
	Raised Error formatter pointing to default_errformat.

	Override if you like. All pgsession.exceptions.Error's are formatted using
	this function.
	"""
	return default_errformat(*args, **kw)

def msghook(*args, **kw):
	"""
	Message hook pointing to default_msghook.

	Override if you like. All untrapped notices come here to be printed to
	stderr.
	"""
	return default_msghook(*args, **kw)

def reset_errformat(with_func = errformat):
	'restore the original errformat function'
	global errformat
	errformat = with_func

def reset_msghook(with_func = msghook):
	'restore the original msghook function'
	global msghook
	msghook = with_func
