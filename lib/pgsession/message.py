##
# .message - notice and error message representation
##
from operator import itemgetter
from psycopg import pq

class Message(object):
	"""
	A message emitted by PostgreSQL or by the client side of a session.

	Server notices, client notices and errors are all represented with this
	class; `pgsession.exceptions.Error` mixes it in.
	"""
	_e_label = property(lambda x: getattr(x, 'details').get('severity', 'MESSAGE'))

	source = 'SERVER'
	code = '00000'
	message = None
	details = None
	creator = None

	# keys to filter in .details
	standard_detail_coverage = frozenset(['message', 'severity', 'file', 'function', 'line',])

	def __init__(self,
		message : "The primary information of the message",
		code : "Message code to attach (SQL state)" = None,
		details : "additional information associated with the message" = {},
		source : "Which side generated the message(SERVER, CLIENT)" = None,
		creator : "The object that called for instantiation" = None,
	):
		self.message = message
		self.details = details
		self.creator = creator
		if code is not None and self.code != code:
			self.code = code
		if source is not None and self.source != source:
			self.source = source

	def __repr__(self):
		return "{mod}.{typname}({message!r}{code}{details}{source})".format(
			mod = self.__module__,
			typname = self.__class__.__name__,
			message = self.message,
			code = (
				"" if self.code == type(self).code
				else ", code = " + repr(self.code)
			),
			details = (
				"" if not self.details
				else ", details = " + repr(self.details)
			),
			source = (
				"" if self.source is None
				else ", source = " + repr(self.source)
			),
		)

	def __str__(self):
		return self.message or ''

	def _e_metas(self, get0 = itemgetter(0)):
		yield (None, self.message)
		if self.code and self.code != "00000":
			yield ('CODE', self.code)
		locstr = self.location_string
		if locstr:
			yield ('LOCATION', locstr + ' from ' + self.source)
		else:
			yield ('LOCATION', self.source)
		for k, v in sorted(self.details.items(), key = get0):
			if k not in self.standard_detail_coverage:
				yield (k.upper(), str(v))

	def isconsistent(self, other):
		"""
		Return `True` if the all the fields of the message in `self` are
		equivalent to the fields in `other`.
		"""
		if not isinstance(other, self.__class__):
			return False
		# creator is contextual information
		return (
			self.code == other.code and \
			self.message == other.message and \
			self.details == other.details and \
			self.source == other.source
		)

	@property
	def severity(self):
		return self.details.get('severity')

	@property
	def location_string(self):
		"""
		A single line representation of the 'file', 'line', and 'function' keys
		in the `details` dictionary.
		"""
		details = self.details
		loc = [
			details.get(k, '?') for k in ('file', 'line', 'function')
		]
		return (
			"" if loc == ['?', '?', '?']
			else "File {0!r}, "\
			"line {1!s}, in {2!s}".format(*loc)
		)

def client_notice(text, severity = 'NOTICE', creator = None):
	"""
	Create a client-sourced `Message` from plain text.
	"""
	return Message(text, details = {'severity': severity},
		source = 'CLIENT', creator = creator)

# Map libpq diagnostic fields to the names used in `Message.details`.
notice_field_to_name = {
	pq.DiagnosticField.SEVERITY : 'severity',
	pq.DiagnosticField.SQLSTATE : 'code',
	pq.DiagnosticField.MESSAGE_PRIMARY : 'message',
	pq.DiagnosticField.MESSAGE_DETAIL : 'detail',
	pq.DiagnosticField.MESSAGE_HINT : 'hint',
	pq.DiagnosticField.CONTEXT : 'context',
	pq.DiagnosticField.STATEMENT_POSITION : 'position',
	pq.DiagnosticField.INTERNAL_POSITION : 'internal_position',
	pq.DiagnosticField.INTERNAL_QUERY : 'internal_query',
	pq.DiagnosticField.SCHEMA_NAME : 'schema',
	pq.DiagnosticField.TABLE_NAME : 'table',
	pq.DiagnosticField.COLUMN_NAME : 'column',
	pq.DiagnosticField.DATATYPE_NAME : 'datatype',
	pq.DiagnosticField.CONSTRAINT_NAME : 'constraint',
	pq.DiagnosticField.SOURCE_FILE : 'file',
	pq.DiagnosticField.SOURCE_LINE : 'line',
	pq.DiagnosticField.SOURCE_FUNCTION : 'function',
}

def _decode_failsafe(data, encoding):
	try:
		return data.decode(encoding)
	except (UnicodeDecodeError, LookupError):
		# Fallback to the bytes representation.
		# This should be sufficiently informative in most cases.
		return repr(data)[2:-1]

def decode_fields(pgresult, encoding = 'utf_8'):
	"""
	Read the diagnostic fields of a notice or error `PGresult` into a
	dictionary keyed by the names in `notice_field_to_name`.

	When the result carries no primary message, the full error message
	is used instead.
	"""
	fields = {}
	for k, name in notice_field_to_name.items():
		v = pgresult.error_field(k)
		if v is not None:
			fields[name] = _decode_failsafe(v, encoding)
	if 'message' not in fields:
		text = pgresult.error_message
		if text:
			fields['message'] = _decode_failsafe(text, encoding).rstrip('\n')
	return fields

def message_from_result(pgresult, encoding = 'utf_8', MessageType = Message):
	"""
	Make a server-sourced `MessageType` instance out of a notice `PGresult`.
	"""
	fields = decode_fields(pgresult, encoding)
	m = fields.pop('message', '')
	c = fields.pop('code', None)
	return MessageType(m, code = c, details = fields, source = 'SERVER')
