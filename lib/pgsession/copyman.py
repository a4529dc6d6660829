##
# .copyman - COPY data streaming
##
"""
Line-oriented COPY streaming over a session.

A session enters a COPY state when an executed statement's result reports
COPY_OUT or COPY_IN. While in that state, `CopyStream.read_line` (COPY TO
STDOUT) or `CopyStream.write_line` followed by `CopyStream.end_write` (COPY
FROM STDIN) move the data:

	>>> for line in db.copy_out("COPY t TO STDOUT"):
	...  print(line)
	>>> db.copy_in("COPY t FROM STDIN", [b'1\tone', b'2\ttwo'])
"""
import psycopg
from psycopg import pq

from . import exceptions as pg_exc

#: Query text given to the outcome that ends a COPY.
end_copy_query = '[END COPY]'

class CopyStream(object):
	"""
	The COPY state of a session: `None`, ``'reading'`` or ``'writing'``.

	`failed` remembers a failed write until the stream is ended.
	"""
	__slots__ = (
		'session',
		'state',
		'failed',
	)

	def __init__(self, session):
		self.session = session
		self.state = None
		self.failed = False

	def begin(self, status):
		'Enter the COPY state announced by a result `status`, if any.'
		if status == pq.ExecStatus.COPY_OUT:
			self.state = 'reading'
		elif status == pq.ExecStatus.COPY_IN:
			self.state = 'writing'
			self.failed = False

	def take(self, other):
		self.state, other.state = other.state, None
		self.failed, other.failed = other.failed, False

	def _end_result(self):
		s = self.session
		return s._make_result(s._call('get_result'), end_copy_query)

	def read_line(self):
		"""
		Read one line of COPY TO STDOUT data, without its trailing newline.

		Returns `None` at the end of the data; the statement's final outcome is
		checked at that point and the stream leaves the reading state.
		"""
		if self.state != 'reading':
			raise pg_exc.UsageError("No COPY TO STDOUT in progress.")
		s = self.session
		pgconn = s._pgconn
		if pgconn is None:
			raise pg_exc.BrokenConnection("Lost connection to the database server.")

		try:
			nbytes, data = pgconn.get_copy_data(0)
		except psycopg.OperationalError:
			nbytes = -2

		if nbytes == -2:
			raise pg_exc.Failure("Reading of table data failed: " + s.err_msg())
		elif nbytes == -1:
			# End of data; the statement's outcome follows.
			self.state = None
			self._end_result()
			return None
		elif nbytes == 0:
			raise pg_exc.InternalError("table read inexplicably went asynchronous")

		line = bytes(data)
		if line.endswith(b'\n'):
			line = line[:-1]
		return line

	def write_line(self, line):
		"""
		Send one line of COPY FROM STDIN data; the newline is appended.

		`line` is `bytes`, or `str` encoded in the session's client encoding.
		"""
		if self.state != 'writing':
			raise pg_exc.UsageError("No COPY FROM STDIN in progress.")
		s = self.session
		pgconn = s._pgconn
		if pgconn is None:
			raise pg_exc.BrokenConnection("Lost connection to the database server.")
		if isinstance(line, str):
			line = line.encode(s._codec())
		s.check_cast(len(line), "Line in COPY data is too long to process.")

		for chunk in (bytes(line), b'\n'):
			try:
				rv = pgconn.put_copy_data(chunk)
			except psycopg.OperationalError:
				rv = -1
			if rv <= 0:
				self.failed = True
				raise pg_exc.Failure("Error writing to table: " + s.err_msg())

	def end_write(self):
		"""
		Finish COPY FROM STDIN and return the statement's final `Result`.

		If any earlier line failed to be written, the COPY is aborted and the
		call fails.
		"""
		if self.state != 'writing':
			raise pg_exc.UsageError("No COPY FROM STDIN in progress.")
		s = self.session
		pgconn = s._pgconn
		if pgconn is None:
			raise pg_exc.BrokenConnection("Lost connection to the database server.")

		failed = self.failed
		self.state = None
		self.failed = False
		try:
			rv = pgconn.put_copy_end(
				b'COPY aborted after a failed write' if failed else None
			)
		except psycopg.OperationalError:
			rv = -1

		if rv == -1:
			raise pg_exc.Failure("Write to table failed: " + s.err_msg())
		elif rv == 0:
			raise pg_exc.InternalError("table write is inexplicably asynchronous")
		elif rv != 1:
			raise pg_exc.InternalError(
				"unexpected result %r from put_copy_end()" %(rv,)
			)

		# An aborted COPY gives an error outcome, raised here.
		r = self._end_result()
		if failed:
			raise pg_exc.Failure(
				"Write to table failed: an earlier line could not be written."
			)
		return r

	def copy_out(self, query):
		"""
		Execute a COPY TO STDOUT `query` and generate its lines.

		Closing the generator early reads and discards the remaining lines, so
		the statement's outcome is still checked and the session is usable.
		"""
		s = self.session
		s.execute(query)
		if self.state != 'reading':
			raise pg_exc.UsageError("not a COPY TO STDOUT statement: " + query)
		try:
			line = self.read_line()
			while line is not None:
				yield line
				line = self.read_line()
		except GeneratorExit:
			while self.state == 'reading' and self.read_line() is not None:
				pass
			raise

	def copy_in(self, query, lines):
		"""
		Execute a COPY FROM STDIN `query`, write every item of the iterable
		`lines` and return the final `Result`.

		An exception raised while writing aborts the COPY and propagates.
		"""
		s = self.session
		s.execute(query)
		if self.state != 'writing':
			raise pg_exc.UsageError("not a COPY FROM STDIN statement: " + query)
		try:
			for line in lines:
				self.write_line(line)
		except Exception:
			self.failed = True
			try:
				self.end_write()
			except pg_exc.Failure:
				# The abort outcome; the original exception is the one to report.
				pass
			raise
		return self.end_write()
