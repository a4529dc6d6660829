##
# .test.support
##
"""
Scripted stand-ins for the `psycopg.pq` objects a session drives.

`FakePGconn` records the statements it is given and answers them from a queue
of `responses` or, when the queue is empty, with a plausible default outcome.
COPY data, notifications, connection polling and cancel behavior are scripted
through its attributes. `FakeSession` and `FakeConnecting` use it in place of
the libpq handle.
"""
import hashlib
import psycopg
from psycopg import pq

from ..driver.pq import Session
from ..driver.connector import Connecting
from ..message import notice_field_to_name

#: Diagnostic field codes by the detail names `Message` uses.
field_by_name = dict((v, k) for k, v in notice_field_to_name.items())

def _bytes(v):
	if v is None or isinstance(v, bytes):
		return v
	return str(v).encode('utf_8')

class FakePGresult(object):
	def __init__(self,
		status = pq.ExecStatus.COMMAND_OK,
		rows = (),
		columns = (),
		command = b'',
		fields = None,
		error_message = b'',
	):
		self.status = status
		self.rows = [tuple(map(_bytes, r)) for r in rows]
		self.columns = [_bytes(c) for c in columns]
		if rows and not columns:
			self.columns = [b'?column?'] * len(self.rows[0])
		self.command_status = _bytes(command) or None
		self.fields = fields or {}
		self.error_message = error_message
		self.cleared = False

	@property
	def ntuples(self):
		return len(self.rows)

	@property
	def nfields(self):
		return len(self.columns)

	@property
	def command_tuples(self):
		if self.command_status:
			last = self.command_status.split()[-1]
			if last.isdigit():
				return int(last)
		return None

	def fname(self, i):
		return self.columns[i]

	def get_value(self, row, column):
		return self.rows[row][column]

	def error_field(self, code):
		return self.fields.get(code)

	def clear(self):
		self.cleared = True

def error_result(code, message, severity = 'ERROR', **extra):
	"""
	A failed outcome carrying the SQLSTATE `code` and `message`. Keywords add
	diagnostic fields by their detail names: `detail`, `hint`, `position`...
	"""
	fields = {
		pq.DiagnosticField.SEVERITY : _bytes(severity),
		pq.DiagnosticField.SQLSTATE : _bytes(code),
		pq.DiagnosticField.MESSAGE_PRIMARY : _bytes(message),
	}
	for k, v in extra.items():
		fields[field_by_name[k]] = _bytes(v)
	return FakePGresult(
		pq.ExecStatus.FATAL_ERROR, fields = fields,
		error_message = _bytes(severity + ':  ' + message + '\n'),
	)

def notice_result(message, severity = 'NOTICE', code = '00000'):
	return FakePGresult(pq.ExecStatus.NONFATAL_ERROR, fields = {
		pq.DiagnosticField.SEVERITY : _bytes(severity),
		pq.DiagnosticField.SQLSTATE : _bytes(code),
		pq.DiagnosticField.MESSAGE_PRIMARY : _bytes(message),
	})

class FakePGcancel(object):
	def __init__(self, conn):
		self.conn = conn
		self.freed = False

	def cancel(self):
		if self.conn.fail_cancel:
			raise psycopg.OperationalError(
				"sending cancel request failed: could not connect to server"
			)
		self.conn.cancels.append('cancel')

	def free(self):
		self.freed = True
		self.conn.cancels.append('free')

class FakeEscaping(object):
	'Escaping as libpq does it with standard_conforming_strings on.'
	def __init__(self, conn = None):
		self.conn = conn

	def escape_string(self, data):
		return bytes(data).replace(b"'", b"''")

	def escape_identifier(self, data):
		if self.conn is None:
			raise psycopg.OperationalError(
				"escape_identifier failed: no connection provided"
			)
		return b'"' + bytes(data).replace(b'"', b'""') + b'"'

class FakePGconn(object):
	"""
	Stand-in for `psycopg.pq.PGconn`.

	`poll_script` is the sequence of `pq.PollingStatus` values handed out by
	`connect_poll` for connections made with `connect_start`.
	"""
	start_status = pq.ConnStatus.STARTED
	poll_script = (
		pq.PollingStatus.WRITING,
		pq.PollingStatus.READING,
		pq.PollingStatus.OK,
	)
	protocol_version = 3
	server_version = 160002

	def __init__(self, conninfo = b''):
		self.conninfo = conninfo
		self.status = pq.ConnStatus.OK
		self.backend_pid = 4242
		self.db = b'test'
		self.user = b'tester'
		self.host = b'localhost'
		self.port = b'5432'
		self.error_message = b''
		self.parameters = {b'client_encoding' : b'UTF8'}
		self.notice_handler = None
		self.socket_fd = -1
		self.finished = False
		self.traced = None
		self.fail_nonblocking = False
		self._nonblocking = 0

		self.executed = []
		self.parameter_log = []
		self.prepared = {}
		self.variables = {}
		self.responses = []
		self.pending = []
		self.notifications = []
		self.fail_consume = False
		self.on_consume = None

		self.copy_out_lines = []
		self.copied_out = 0
		self.copy_in_data = []
		self.copy_write_results = []
		self.copy_end_result = 1
		self.copy_end_error = None

		self.fail_cancel = False
		self.cancels = []
		self.options = []
		self.polls = list(self.poll_script)

	@classmethod
	def connect(cls, conninfo):
		return cls(conninfo)

	@classmethod
	def connect_start(cls, conninfo):
		c = cls(conninfo)
		c.status = cls.start_status
		if c.status == pq.ConnStatus.BAD:
			c.error_message = b'invalid connection option "bogus"\n'
		return c

	def _check(self):
		if self.finished:
			raise psycopg.OperationalError("the connection is closed")

	def connect_poll(self):
		self._check()
		status = self.polls.pop(0)
		if status == pq.PollingStatus.OK:
			self.status = pq.ConnStatus.OK
		elif status == pq.PollingStatus.FAILED:
			self.status = pq.ConnStatus.BAD
			self.error_message = b'could not connect to server: Connection refused\n'
		return status

	def finish(self):
		self.finished = True
		self.status = pq.ConnStatus.BAD

	@property
	def socket(self):
		self._check()
		if self.socket_fd < 0:
			raise psycopg.OperationalError("the connection is lost")
		return self.socket_fd

	@property
	def info(self):
		return [
			pq.ConninfoOption(
				keyword = _bytes(k), envvar = _bytes(env), compiled = _bytes(compiled),
				val = _bytes(val), label = b'', dispchar = b'', dispsize = 20,
			)
			for (k, env, compiled, val) in self.options
		]

	def parameter_status(self, name):
		return self.parameters.get(name)

	def is_busy(self):
		return 0

	def trace(self, fileno):
		self._check()
		self.traced = fileno

	def untrace(self):
		self._check()
		self.traced = None

	@property
	def nonblocking(self):
		return self._nonblocking

	@nonblocking.setter
	def nonblocking(self, arg):
		self._check()
		if self.fail_nonblocking:
			raise psycopg.OperationalError("setting nonblocking mode failed")
		self._nonblocking = int(bool(arg))

	def encrypt_password(self, passwd, user, algorithm = None):
		return b'md5' + hashlib.md5(passwd + user).hexdigest().encode('ascii')

	def notice(self, message, severity = 'NOTICE'):
		'Deliver a server notice the way libpq does.'
		if self.notice_handler is not None:
			self.notice_handler(notice_result(message, severity))

	def notify(self, channel, payload = '', pid = 777):
		self.notifications.append(
			pq.PGnotify(_bytes(channel), pid, _bytes(payload))
		)

	def _default_response(self, text):
		upper = text.upper()
		words = upper.split()
		if not words:
			return FakePGresult(pq.ExecStatus.EMPTY_QUERY)
		if words[0] == 'SHOW':
			name = text.split(None, 1)[1].strip().strip('"')
			return FakePGresult(pq.ExecStatus.TUPLES_OK,
				rows = [(self.variables.get(name, ''),)], columns = (name,),
				command = b'SHOW')
		if words[0] == 'COPY' and 'TO STDOUT' in upper:
			return FakePGresult(pq.ExecStatus.COPY_OUT)
		if words[0] == 'COPY' and 'FROM STDIN' in upper:
			return FakePGresult(pq.ExecStatus.COPY_IN)
		if words[0] == 'SET':
			if len(words) > 2 and words[1] == 'CLIENT_ENCODING' and words[2] == 'TO':
				self.parameters[b'client_encoding'] = \
					_bytes(text.split(None, 3)[3].strip("'").upper())
			elif '=' in text:
				name, value = text[4:].split('=', 1)
				self.variables[name.strip().strip('"')] = value.strip()
			return FakePGresult(command = b'SET')
		if words[0] == 'SELECT':
			return FakePGresult(pq.ExecStatus.TUPLES_OK,
				rows = [('1',)], columns = ('?column?',), command = b'SELECT 1')
		return FakePGresult(command = _bytes(words[0]))

	def _respond(self, text):
		if self.responses:
			r = self.responses.pop(0)
			if r is None:
				# libpq returned no outcome at all.
				raise psycopg.OperationalError("executing query failed: " + \
					self.error_message.decode('utf_8'))
			if isinstance(r, BaseException):
				raise r
			return r
		return self._default_response(text)

	def exec_(self, command):
		self._check()
		text = command.decode('utf_8')
		self.executed.append(text)
		return self._respond(text)

	def exec_params(self, command, param_values, param_types = None,
		param_formats = None, result_format = pq.Format.TEXT,
	):
		self._check()
		text = command.decode('utf_8')
		self.executed.append(text)
		self.parameter_log.append((text, list(param_values), list(param_formats or ())))
		return self._respond(text)

	def prepare(self, name, command, param_types = None):
		self._check()
		if self.responses:
			return self._respond(command.decode('utf_8'))
		self.prepared[name] = command
		return FakePGresult()

	def exec_prepared(self, name, param_values, param_formats = None,
		result_format = pq.Format.TEXT,
	):
		self._check()
		if name not in self.prepared:
			return error_result('26000',
				'prepared statement "%s" does not exist' %(name.decode('utf_8'),))
		text = self.prepared[name].decode('utf_8')
		self.parameter_log.append((text, list(param_values), list(param_formats or ())))
		return self._respond(text)

	def get_result(self):
		if self.pending:
			return self.pending.pop(0)
		return None

	def consume_input(self):
		self._check()
		if self.fail_consume:
			raise psycopg.OperationalError("consuming input failed: server closed the connection")
		if self.on_consume is not None:
			self.on_consume(self)

	def notifies(self):
		if self.notifications:
			return self.notifications.pop(0)
		return None

	def get_copy_data(self, async_):
		self._check()
		if self.copy_out_lines:
			item = self.copy_out_lines.pop(0)
			if isinstance(item, int):
				if item == -2:
					raise psycopg.OperationalError("receiving copy data failed: lost")
				return item, memoryview(b'')
			self.copied_out += 1
			return len(item), memoryview(item)
		self.pending.append(FakePGresult(command = b'COPY %d' %(self.copied_out,)))
		return -1, memoryview(b'')

	def put_copy_data(self, buffer):
		self._check()
		if self.copy_write_results:
			rv = self.copy_write_results.pop(0)
			if rv < 0:
				raise psycopg.OperationalError("sending copy data failed: lost")
			return rv
		self.copy_in_data.append(bytes(buffer))
		return 1

	@property
	def copied_in(self):
		'The lines received by COPY FROM STDIN so far.'
		return b''.join(self.copy_in_data).splitlines()

	def put_copy_end(self, error = None):
		self._check()
		self.copy_end_error = error
		rv = self.copy_end_result
		if rv < 0:
			raise psycopg.OperationalError("sending copy end failed: lost")
		if rv == 1:
			if error is not None:
				self.pending.append(error_result('57014',
					'COPY from stdin failed: ' + error.decode('utf_8')))
			else:
				self.pending.append(FakePGresult(
					command = b'COPY %d' %(len(self.copied_in),)))
		return rv

	def get_cancel(self):
		self._check()
		return FakePGcancel(self)

class FakeSession(Session):
	PGconn = FakePGconn
	Escaping = FakeEscaping

	@property
	def pgconn(self):
		'The fake native handle.'
		return self._pgconn

class FakeConnecting(Connecting):
	Session = FakeSession
