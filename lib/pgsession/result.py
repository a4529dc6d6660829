##
# .result - materialized statement outcomes
##
"""
`Result` wraps the native `PGresult` of an executed statement.

Results are immutable and may outlive the session that produced them. They
hold a reference to the session's `NoticeContext`, never to the session, so
notices raised while reading a result after the session closed are still
routed.

`make_result` is the single place outcomes are validated: it raises for a
missing outcome and for any status other than the successful ones.
"""
import weakref
from psycopg import pq

from . import exceptions as pg_exc
from .message import decode_fields

#: Statuses accepted as success.
accepted_statuses = frozenset((
	pq.ExecStatus.EMPTY_QUERY,
	pq.ExecStatus.COMMAND_OK,
	pq.ExecStatus.TUPLES_OK,
	pq.ExecStatus.COPY_OUT,
	pq.ExecStatus.COPY_IN,
))

def _clear(raw):
	raw.clear()

class Result(object):
	"""
	The rows, columns and command status of an executed statement.

	Iteration yields each row as a tuple of strings, with `None` for NULL.
	"""
	__slots__ = (
		'_raw',
		'_notices',
		'_query',
		'_encoding',
		'_release',
		'__weakref__',
	)

	def __init__(self, raw, query, notice_context, encoding):
		self._raw = raw
		self._notices = notice_context
		self._query = query
		self._encoding = encoding
		self._release = weakref.finalize(self, _clear, raw)

	def __setattr__(self, k, v):
		if hasattr(self, '_release'):
			raise AttributeError("results are immutable")
		super().__setattr__(k, v)

	def __repr__(self):
		return '<%s.%s %s rows=%d query=%r>' %(
			type(self).__module__,
			type(self).__name__,
			self.command_status,
			len(self),
			self._query,
		)

	@property
	def query(self):
		'The text of the statement that produced the result.'
		return self._query

	@property
	def encoding(self):
		'The Python codec in effect when the result was created.'
		return self._encoding

	@property
	def notice_context(self):
		return self._notices

	@property
	def status(self):
		return pq.ExecStatus(self._raw.status)

	@property
	def command_status(self):
		cs = self._raw.command_status
		return None if cs is None else cs.decode(self._encoding)

	@property
	def affected_rows(self):
		return self._raw.command_tuples or 0

	@property
	def columns(self):
		raw = self._raw
		return tuple(
			raw.fname(i).decode(self._encoding)
			for i in range(raw.nfields)
		)

	def __len__(self):
		return self._raw.ntuples

	def __iter__(self):
		for i in range(len(self)):
			yield self._row(i)

	def __getitem__(self, i):
		n = len(self)
		if i < 0:
			i += n
		self._check_index('row', i, n)
		return self._row(i)

	def field(self, row, column):
		"""
		The value at `row` and `column`; the column is a position or a name.
		"""
		if isinstance(column, str):
			column = self.column_number(column)
		self._check_index('row', row, len(self))
		self._check_index('column', column, self._raw.nfields)
		return self._value(row, column)

	def column_number(self, name):
		try:
			return self.columns.index(name)
		except ValueError:
			raise pg_exc.ArgumentError(
				"unknown column name: " + repr(name)
			)

	def _check_index(self, what, i, n):
		if not 0 <= i < n:
			text = '%s number %d is out of range 0..%d' %(what, i, n - 1)
			self._notices.process(text + '\n')
			raise pg_exc.RangeError(text)

	def _value(self, row, column):
		v = self._raw.get_value(row, column)
		return None if v is None else v.decode(self._encoding)

	def _row(self, row):
		return tuple(
			self._value(row, col) for col in range(self._raw.nfields)
		)

	def process_notice(self, msg):
		'Route `msg` through the notice context shared with the session.'
		return self._notices.process(msg)

	def expect_rows(self, n):
		'Raise `RangeError` unless the result has exactly `n` rows.'
		got = len(self)
		if got != n:
			raise pg_exc.RangeError(
				"Expected %d row(s) from query, got %d." %(n, got)
			)
		return self

	def expect_columns(self, n):
		got = self._raw.nfields
		if got != n:
			raise pg_exc.RangeError(
				"Expected %d column(s) from query, got %d." %(n, got)
			)
		return self

	def no_rows(self):
		return self.expect_rows(0)

	def one_row(self):
		return self.expect_rows(1)._row(0)

	def one_field(self):
		self.expect_rows(1).expect_columns(1)
		return self._value(0, 0)

	def check_status(self):
		"""
		Raise the `SQLError` subclass matching the server's diagnostics unless
		the status is one of `accepted_statuses`.
		"""
		if self._raw.status in accepted_statuses:
			return
		raise self.sql_error()

	def sql_error(self):
		fields = decode_fields(self._raw, self._encoding)
		m = fields.pop('message', None) or \
			'unexpected result status ' + pq.ExecStatus(self._raw.status).name
		c = fields.pop('code', None)
		errtype = pg_exc.ErrorLookup(c)
		return errtype(m, code = c, details = fields,
			source = 'SERVER', query = self._query)

def make_result(raw, query, notice_context, encoding, session = None):
	"""
	Materialize the native outcome `raw` of `query` into a `Result`.

	A missing outcome fails with the session's last error if the session is
	still open, otherwise with `BrokenConnection`. A failed outcome raises the
	server's error.
	"""
	if raw is None:
		if session is not None and session.is_open:
			raise pg_exc.Failure(session.err_msg())
		raise pg_exc.BrokenConnection("Lost connection to the database server.")
	r = Result(raw, query, notice_context, encoding)
	try:
		r.check_status()
	except pg_exc.SQLError as err:
		if not err.code and session is not None and not session.is_open:
			# No SQLSTATE and no connection: the transport failed.
			raise pg_exc.BrokenConnection(
				err.message, details = err.details
			) from err
		raise
	return r
