##
# .driver.pq - libpq backed sessions
##
"""
The `Session` owns one libpq connection handle (a `psycopg.pq.PGconn`) and
everything attached to it: the notice routing, the notification router, the
COPY state, and the registration of the one transaction that may be active.

	>>> from pgsession.driver.pq import Session
	>>> with Session('dbname=test') as db:
	...  db.execute('SELECT 1').one_field()
	'1'
"""
import os
import psycopg
from psycopg import pq
from psycopg.conninfo import make_conninfo

from .. import exceptions as pg_exc
from .. import clientparameters as pg_param
from .. import string as pg_str
from ..encodings import aliases as pg_enc
from ..encodings import bytea
from ..notice import NoticeContext
from ..result import make_result
from ..notifyman import NotificationRouter
from ..copyman import CopyStream

#: Servers at or below this version are refused.
oldest_server = 90000
#: The oldest frontend/backend protocol version supported.
oldest_protocol = 3

def describe_object(class_name, name):
	"""
	>>> describe_object('transaction', 'load')
	"transaction 'load'"
	>>> describe_object('transaction', '')
	'transaction'
	"""
	if not name:
		return class_name
	return "%s '%s'" %(class_name, name)

def check_unique_register(
	old_guest, old_class, old_name,
	new_guest, new_class, new_name,
):
	if new_guest is None:
		raise pg_exc.UsageError("Null pointer registered.")
	if old_guest is not None:
		if old_guest is new_guest:
			raise pg_exc.UsageError(
				"Started twice: " + describe_object(old_class, old_name) + "."
			)
		raise pg_exc.UsageError(
			"Started new " + describe_object(new_class, new_name) +
			" while " + describe_object(old_class, old_name) + " still active."
		)

def check_unique_unregister(
	old_guest, old_class, old_name,
	new_guest, new_class, new_name,
):
	if new_guest is not old_guest:
		if new_guest is None:
			raise pg_exc.UsageError(
				"Expected to close " + describe_object(old_class, old_name) +
				", but got null pointer instead."
			)
		if old_guest is None:
			raise pg_exc.UsageError(
				"Closed while not open: " + describe_object(new_class, new_name)
			)
		raise pg_exc.UsageError(
			"Closed " + describe_object(new_class, new_name) +
			"; expected to close " + describe_object(old_class, old_name)
		)

def check_cast(value, description, bits = 32):
	'Raise `RangeError` unless `value` fits a signed integer of `bits` bits.'
	limit = 1 << (bits - 1)
	if not -limit <= value < limit:
		raise pg_exc.RangeError("Cast overflow: " + description)
	return value

def _name(guest):
	return '' if guest is None else getattr(guest, 'name', '')

def _default(option):
	'The value libpq would use for the conninfo `option` when none is given.'
	if option.envvar is not None:
		v = os.environ.get(option.envvar.decode('ascii'))
		if v is not None:
			return v
	if option.compiled is not None:
		return option.compiled.decode('utf_8')
	return None

class Transaction(object):
	"""
	A transaction block on a `Session`.

	Starting registers the transaction with the session; commit and rollback
	unregister it. While registered, the session delivers no notifications and
	refuses to be moved, and `Session.listen` is refused.

	>>> with db.xact(name = 'load'):
	...  db.execute("INSERT INTO t VALUES (1)")
	"""
	session = None
	name = ''
	mode = None
	isolation = None

	def __init__(self, session, name = '', isolation = None, mode = None):
		self.session = session
		self.name = name
		self.isolation = isolation
		self.mode = mode
		self.state = 'initialized'

	def __repr__(self):
		return '<%s.%s %s %s>' %(
			type(self).__module__,
			type(self).__name__,
			describe_object('transaction', self.name),
			self.state,
		)

	def __enter__(self):
		self.start()
		return self

	def __exit__(self, typ, value, tb):
		if typ is None:
			self.commit()
		elif issubclass(typ, Exception):
			# A failed start or commit leaves nothing to roll back.
			if self.state == 'open':
				self.rollback()

	@staticmethod
	def _start_xact_string(isolation = None, mode = None):
		q = 'START TRANSACTION'
		if isolation is not None:
			if ';' in isolation:
				raise ValueError("invalid transaction isolation " + repr(isolation))
			q += ' ISOLATION LEVEL ' + isolation
		if mode is not None:
			if ';' in mode:
				raise ValueError("invalid transaction mode " + repr(mode))
			q += ' ' + mode
		return q

	def start(self):
		if self.state == 'open':
			return
		if self.state != 'initialized':
			raise pg_exc.UsageError("transactions cannot be restarted",
				details = {'hint': 'Create a new transaction object instead of re-using an old one.'},
				creator = self)

		q = self._start_xact_string(isolation = self.isolation, mode = self.mode)
		self.session.register_transaction(self)
		try:
			self.session.execute(q)
		except Exception:
			self.state = 'failed'
			self.session.unregister_transaction(self)
			raise
		self.state = 'open'
	begin = start

	def _require_open(self, action):
		if self.state != 'open':
			raise pg_exc.UsageError(
				"%s attempted on transaction with unexpected state, %r" %(
					action, self.state,
				), creator = self
			)

	def execute(self, query, desc = None):
		self._require_open('execute')
		return self.session.execute(query, desc)

	def execute_params(self, query, *args):
		self._require_open('execute')
		return self.session.execute_params(query, *args)

	def execute_prepared(self, name, *args):
		self._require_open('execute')
		return self.session.execute_prepared(name, *args)

	def commit(self):
		if self.state == 'committed':
			return
		self._require_open('commit')
		try:
			self.session.execute('COMMIT')
			self.state = 'committed'
		finally:
			if self.state != 'committed':
				self.state = 'failed'
			self.session.unregister_transaction(self)

	def rollback(self):
		if self.state == 'aborted':
			return
		self._require_open('ABORT')
		try:
			if not self.session.closed:
				self.session.execute('ROLLBACK')
		finally:
			self.state = 'aborted'
			self.session.unregister_transaction(self)
	abort = rollback

class Session(object):
	"""
	A session with a PostgreSQL server.

	Construct with a conninfo string or a ``pq://`` / ``postgresql://`` URI
	and/or connection keywords; see `pgsession.clientparameters.conninfo`.
	`connect_start` begins a non-blocking connection instead.

	The native handle is `None` once the session is closed; every operation
	that needs it then fails with `BrokenConnection`.
	"""
	#: Native connection class.
	PGconn = pq.PGconn
	#: Native escaping helper class.
	Escaping = pq.Escaping

	_pgconn = None
	_trans = None

	check_cast = staticmethod(check_cast)

	def __init__(self, conninfo = None, **params):
		self._init_state()
		self._attach(self.PGconn.connect(self._conninfo(conninfo, params)))
		self.complete_init()

	@classmethod
	def connect_start(cls, conninfo = None, **params):
		"""
		Begin a non-blocking connection. Drive it with `poll_connect` and
		finish with `complete_init`; `pgsession.driver.connector.Connecting`
		does this.
		"""
		self = cls.__new__(cls)
		self._init_state()
		pgconn = cls.PGconn.connect_start(self._conninfo(conninfo, params))
		self._attach(pgconn)
		if pgconn.status == pq.ConnStatus.BAD:
			msg = self.err_msg()
			self._release()
			raise pg_exc.BrokenConnection(msg, creator = self)
		return self

	@classmethod
	def take(cls, source):
		"""
		Create a session that takes over everything `source` holds. `source`
		is left closed.
		"""
		source._check_movable()
		self = cls.__new__(cls)
		self._init_state()
		self._steal(source)
		return self

	def assign(self, source):
		"""
		Close this session and take over everything `source` holds. `source`
		is left closed.
		"""
		if source is self:
			return self
		self._check_overwritable()
		source._check_movable()
		self.close()
		self._steal(source)
		return self

	@staticmethod
	def _conninfo(conninfo, params):
		return pg_param.conninfo(conninfo, **params).encode('utf_8')

	def _init_state(self):
		self._pgconn = None
		self._trans = None
		self._notices = NoticeContext()
		self._router = NotificationRouter(self)
		self._copy = CopyStream(self)
		self._prepared = {}
		self._unique_id = 0

	def _attach(self, pgconn):
		self._pgconn = pgconn
		pgconn.notice_handler = self._notices.receive

	def _release(self):
		pgconn = self._pgconn
		self._pgconn = None
		if pgconn is not None:
			pgconn.finish()

	def _steal(self, source):
		self._pgconn, source._pgconn = source._pgconn, None
		self._notices, source._notices = source._notices, NoticeContext()
		self._prepared, source._prepared = source._prepared, {}
		self._unique_id = source._unique_id
		self._router.take(source._router)
		self._copy.take(source._copy)
		for h in self._notices.errorhandlers:
			if getattr(h, 'session', None) is source:
				h.session = self

	def _check_movable(self):
		if self._trans is not None:
			raise pg_exc.UsageError("Moving a connection with a transaction open.")
		if self._router.receivers:
			raise pg_exc.UsageError(
				"Moving a connection with notification receivers registered."
			)

	def _check_overwritable(self):
		if self._trans is not None:
			raise pg_exc.UsageError(
				"Moving a connection onto one with a transaction open."
			)
		if self._router.receivers:
			raise pg_exc.UsageError(
				"Moving a connection onto one with notification receivers registered."
			)

	def complete_init(self):
		"""
		Validate a freshly established connection. On failure the native
		handle is released before the exception propagates.
		"""
		try:
			if not self.is_open:
				raise pg_exc.BrokenConnection(self.err_msg(), creator = self)
			self._set_up_state()
		except Exception:
			self._release()
			raise

	def _set_up_state(self):
		proto = self.protocol_version
		if proto == 0:
			raise pg_exc.BrokenConnection("No connection.", creator = self)
		if proto < oldest_protocol:
			raise pg_exc.FeatureNotSupported(
				"Unsupported frontend/backend protocol version; 3.0 is the minimum.",
				creator = self
			)
		if self.server_version <= oldest_server:
			raise pg_exc.FeatureNotSupported(
				"Unsupported server version; 9.0 is the minimum.",
				creator = self
			)
		self._codec()

	def __repr__(self):
		return '<{mod}.{name}[{db}] {state}>'.format(
			mod = type(self).__module__,
			name = type(self).__name__,
			db = self.dbname,
			state = 'closed' if self.closed else (
				'open' if self._trans is None else
				'in ' + describe_object('transaction', _name(self._trans))
			),
		)

	def __enter__(self):
		return self

	def __exit__(self, typ, val, tb):
		self.close()

	@property
	def closed(self) -> bool:
		return self._pgconn is None

	@property
	def is_open(self) -> bool:
		pgconn = self._pgconn
		return pgconn is not None and pgconn.status == pq.ConnStatus.OK

	def close(self):
		"""
		Close the session. Does nothing if it is already closed.

		Leftover registrations are reported as notices; error handlers are
		unregistered, most recent first.
		"""
		pgconn = self._pgconn
		if pgconn is None:
			return
		try:
			if self._trans is not None:
				self.process_notice(
					"Closing connection while " +
					describe_object('transaction', _name(self._trans)) +
					" is still open.\n"
				)

			if self._router.receivers:
				self.process_notice("Closing connection with outstanding receivers.\n")
				self._router.receivers.clear()
			self._router.handlers.clear()

			for h in reversed(list(self._notices.errorhandlers)):
				self._notices.remove(h)
				detach = getattr(h, 'unregister', None)
				if detach is not None:
					detach()

			pgconn.finish()
		finally:
			self._pgconn = None

	def poll_connect(self):
		"""
		Advance a non-blocking connection by one step.

		Returns ``(wait_to_read, wait_to_write)``; both false means the
		connection is established.
		"""
		pgconn = self._pgconn
		if pgconn is None:
			raise pg_exc.BrokenConnection("No connection.", creator = self)
		try:
			status = pgconn.connect_poll()
		except psycopg.OperationalError:
			status = pq.PollingStatus.FAILED

		if status == pq.PollingStatus.FAILED:
			raise pg_exc.BrokenConnection(self.err_msg(), creator = self)
		elif status == pq.PollingStatus.READING:
			return (True, False)
		elif status == pq.PollingStatus.WRITING:
			return (False, True)
		elif status == pq.PollingStatus.OK:
			if not self.is_open:
				raise pg_exc.BrokenConnection(self.err_msg(), creator = self)
			return (False, False)
		raise pg_exc.InternalError(
			"Nonblocking connection poll returned unknown value: %r" %(status,),
			creator = self
		)

	def err_msg(self):
		'The most recent error text of the native handle.'
		pgconn = self._pgconn
		if pgconn is None:
			return "No connection to database"
		msg = pgconn.error_message
		return msg.decode(self._notices.encoding, 'replace').rstrip('\n')

	##
	# Notices

	def process_notice(self, msg):
		return self._notices.process(msg)

	def register_errorhandler(self, handler):
		self._notices.add(handler)

	def unregister_errorhandler(self, handler):
		self._notices.remove(handler)

	def get_errorhandlers(self):
		'The registered error handlers, in registration order.'
		return list(self._notices.errorhandlers)

	def set_notice_handler(self, callback):
		'Receive the notices no error handler consumed; `None` restores msghook.'
		self._notices.notice_handler = callback

	@property
	def notice_context(self):
		return self._notices

	##
	# Transactions

	def xact(self, name = '', isolation = None, mode = None):
		return Transaction(self, name = name, isolation = isolation, mode = mode)

	def register_transaction(self, t):
		check_unique_register(
			self._trans, 'transaction', _name(self._trans),
			t, 'transaction', _name(t)
		)
		self._trans = t

	def unregister_transaction(self, t):
		try:
			check_unique_unregister(
				self._trans, 'transaction', _name(self._trans),
				t, 'transaction', _name(t)
			)
		except pg_exc.UsageError as err:
			self.process_notice(err.message + '\n')
		self._trans = None

	@property
	def transaction(self):
		'The registered transaction, or `None`.'
		return self._trans

	##
	# Execution

	def _codec(self):
		pgconn = self._pgconn
		if pgconn is not None:
			name = pgconn.parameter_status(b'client_encoding')
			if name is not None:
				self._notices.encoding = pg_enc.get_python_name(name.decode('ascii'))
		return self._notices.encoding

	def _encode(self, text):
		return text.encode(self._codec())

	def _call(self, method, *args, **kw):
		'Invoke a native method; `None` when the native call failed.'
		pgconn = self._pgconn
		if pgconn is None:
			return None
		try:
			return getattr(pgconn, method)(*args, **kw)
		except psycopg.OperationalError:
			return None

	def _make_result(self, raw, query):
		r = make_result(raw, query, self._notices, self._codec(), session = self)
		self._copy.begin(r.status)
		return r

	def _check_not_copying(self):
		if self._copy.state is not None:
			raise pg_exc.UsageError(
				"COPY %s in progress; finish it before executing statements." %(
					'TO STDOUT' if self._copy.state == 'reading' else 'FROM STDIN',
				), creator = self
			)

	def _parameters(self, args):
		check_cast(len(args), "Too many parameters.")
		values = []
		formats = []
		for v in args:
			if v is None:
				values.append(None)
				formats.append(pq.Format.TEXT)
			elif isinstance(v, (bytes, bytearray, memoryview)):
				values.append(bytes(v))
				formats.append(pq.Format.BINARY)
			else:
				values.append(self._encode(pg_str.render(v)))
				formats.append(pq.Format.TEXT)
		return values, formats

	def execute(self, query, desc = None):
		"""
		Execute `query` and return its `Result`. `desc`, if given, stands in for
		the query text in the result and in errors.

		Pending notifications are delivered afterwards.
		"""
		self._check_not_copying()
		q = str(query)
		r = self._make_result(self._call('exec_', self._encode(q)), desc or q)
		self.get_notifs()
		return r

	def execute_params(self, query, *args):
		"""
		Execute `query` with positional parameters, ``$1`` to ``$n``.

		`bytes` arguments are sent as binary data, `None` as NULL, and anything
		else as text rendered by `pgsession.string.render`.
		"""
		self._check_not_copying()
		q = str(query)
		values, formats = self._parameters(args)
		raw = self._call('exec_params', self._encode(q), values,
			param_formats = formats)
		r = self._make_result(raw, q)
		self.get_notifs()
		return r

	def prepare(self, name, definition = None):
		"""
		Prepare a statement named `name`. With only one argument, prepare the
		unnamed statement.
		"""
		if definition is None:
			name, definition = '', name
		self._check_not_copying()
		raw = self._call('prepare', self._encode(name), self._encode(definition))
		self._make_result(raw, '[PREPARE %s]' %(name,))
		self._prepared[name] = definition

	def execute_prepared(self, name, *args):
		self._check_not_copying()
		values, formats = self._parameters(args)
		raw = self._call('exec_prepared', self._encode(name), values,
			param_formats = formats)
		r = self._make_result(raw, name)
		self.get_notifs()
		return r

	def unprepare(self, name):
		self.execute("DEALLOCATE " + self.quote_name(name))
		self._prepared.pop(name, None)

	@property
	def prepared_statements(self):
		'Map of the statement names prepared on this session to their definitions.'
		return dict(self._prepared)

	def cancel_query(self):
		"""
		Ask the server to cancel the statement in progress. May be called from
		another thread.
		"""
		pgconn = self._pgconn
		if pgconn is None:
			raise pg_exc.BrokenConnection("No connection to database", creator = self)
		try:
			cancel = pgconn.get_cancel()
		except psycopg.OperationalError as err:
			raise pg_exc.SQLError(str(err), query = '[cancel]', creator = self) from err
		try:
			cancel.cancel()
		except psycopg.OperationalError as err:
			raise pg_exc.SQLError(str(err), query = '[cancel]', creator = self) from err
		finally:
			cancel.free()

	def consume_input(self) -> bool:
		'Read what the server sent; false if the read failed.'
		pgconn = self._pgconn
		if pgconn is None:
			return False
		try:
			pgconn.consume_input()
		except psycopg.OperationalError:
			return False
		return True

	def is_busy(self) -> bool:
		pgconn = self._pgconn
		return pgconn is not None and bool(pgconn.is_busy())

	def trace(self, out = None):
		"""
		Have libpq write a trace of the protocol traffic to the file object
		`out`; `None` stops tracing. Does nothing on a closed session.
		"""
		pgconn = self._pgconn
		if pgconn is None:
			return
		if out is None:
			pgconn.untrace()
		else:
			pgconn.trace(out.fileno())

	def set_blocking(self, block = True):
		'Switch the connection between blocking and non-blocking mode.'
		pgconn = self._pgconn
		if pgconn is None:
			raise pg_exc.BrokenConnection("No connection to database", creator = self)
		try:
			pgconn.nonblocking = 0 if block else 1
		except psycopg.OperationalError as err:
			raise pg_exc.BrokenConnection(
				"Could not set blocking mode: " + self.err_msg(), creator = self
			) from err

	@property
	def blocking(self) -> bool:
		pgconn = self._pgconn
		return pgconn is not None and not pgconn.nonblocking

	def adorn_name(self, base = ''):
		"""
		Make a name unique within the session.

		>>> db.adorn_name()
		'x1'
		>>> db.adorn_name('cursor')
		'cursor_2'
		"""
		self._unique_id += 1
		if not base:
			return 'x%d' %(self._unique_id,)
		return '%s_%d' %(base, self._unique_id)

	def set_variable(self, var, value):
		'Issue ``SET var=value``; `value` is raw SQL.'
		self.execute("SET %s=%s" %(self.quote_name(var), value))

	def get_variable(self, var):
		return self.execute("SHOW " + self.quote_name(var)).one_field()

	##
	# Escaping

	def _escaping(self):
		return self.Escaping(self._pgconn)

	def esc(self, text):
		'Escape `text` for use inside a single-quoted literal.'
		codec = self._codec()
		try:
			e = self._escaping().escape_string(text.encode(codec))
		except psycopg.OperationalError as err:
			raise pg_exc.ArgumentError(str(err), creator = self) from err
		return e.decode(codec)

	def esc_raw(self, data):
		'Escape binary `data` into bytea text.'
		return bytea.escape(bytes(data))

	def unesc_raw(self, text):
		'Decode bytea text into `bytes`.'
		try:
			return bytea.unescape(text)
		except ValueError as err:
			raise pg_exc.ArgumentError(str(err), creator = self) from err

	def quote_raw(self, data):
		return "'" + self.esc_raw(data) + "'::bytea"

	def quote(self, value):
		"""
		Render `value` as an SQL literal: NULL for `None`, a bytea literal for
		binary data, and a quoted string otherwise.
		"""
		if value is None:
			return 'NULL'
		if isinstance(value, (bytes, bytearray, memoryview)):
			return self.quote_raw(value)
		return "'" + self.esc(pg_str.render(value)) + "'"

	def quote_name(self, identifier):
		codec = self._codec()
		try:
			e = self._escaping().escape_identifier(identifier.encode(codec))
		except psycopg.OperationalError as err:
			raise pg_exc.Failure(self.err_msg(), creator = self) from err
		return e.decode(codec)

	def quote_table(self, name):
		"""
		Quote a table name; `name` is a string or a sequence of name parts,
		such as ``('schema', 'table')``.
		"""
		if isinstance(name, str):
			return self.quote_name(name)
		return '.'.join(self.quote_name(x) for x in name)

	def esc_like(self, text, escape_char = '\\'):
		return pg_str.escape_like(text, escape_char)

	##
	# Encoding

	@property
	def encoding_id(self) -> int:
		'The numeric PostgreSQL id of the client encoding.'
		pgconn = self._pgconn
		name = None if pgconn is None else pgconn.parameter_status(b'client_encoding')
		if name is None:
			if self.is_open:
				raise pg_exc.Failure("Could not obtain client encoding.", creator = self)
			raise pg_exc.BrokenConnection(
				"Lost connection to the database server.", creator = self
			)
		name = name.decode('ascii')
		eid = pg_enc.encoding_id(name)
		if eid < 0:
			raise pg_exc.Failure("Unknown client encoding: " + name, creator = self)
		return eid

	def get_client_encoding(self):
		return pg_enc.name_encoding(self.encoding_id)

	def set_client_encoding(self, name):
		self.execute("SET client_encoding TO " + self.quote(name))
		self._codec()

	##
	# COPY

	def read_copy_line(self):
		return self._copy.read_line()

	def write_copy_line(self, line):
		self._copy.write_line(line)

	def end_copy_write(self):
		return self._copy.end_write()

	def copy_out(self, query):
		return self._copy.copy_out(query)

	def copy_in(self, query, lines):
		return self._copy.copy_in(query, lines)

	##
	# Notifications

	def listen(self, channel, handler = None):
		self._router.listen(channel, handler)

	def add_receiver(self, receiver):
		self._router.add_receiver(receiver)

	def remove_receiver(self, receiver):
		self._router.remove_receiver(receiver)

	def get_notifs(self):
		return self._router.get_notifs()

	def await_notification(self, timeout = None):
		return self._router.await_notification(timeout)

	##
	# Introspection

	def _text(self, attr):
		pgconn = self._pgconn
		if pgconn is None:
			return None
		try:
			v = getattr(pgconn, attr)
		except psycopg.OperationalError:
			return None
		return None if v is None else v.decode(self._notices.encoding)

	dbname = property(lambda self: self._text('db'))
	username = property(lambda self: self._text('user'))
	hostname = property(lambda self: self._text('host'))
	port = property(lambda self: self._text('port'))

	@property
	def backendpid(self) -> int:
		pgconn = self._pgconn
		return 0 if pgconn is None else pgconn.backend_pid

	@property
	def sock(self) -> int:
		pgconn = self._pgconn
		if pgconn is None:
			return -1
		try:
			return pgconn.socket
		except psycopg.OperationalError:
			return -1

	@property
	def protocol_version(self) -> int:
		pgconn = self._pgconn
		return 0 if pgconn is None else pgconn.protocol_version

	@property
	def server_version(self) -> int:
		pgconn = self._pgconn
		return 0 if pgconn is None else pgconn.server_version

	def connection_string(self):
		"""
		A conninfo string with the options of this session that differ from
		their defaults.
		"""
		pgconn = self._pgconn
		if pgconn is None:
			raise pg_exc.UsageError(
				"Can't get connection string: connection is not open.",
				creator = self
			)
		params = {}
		for opt in pgconn.info:
			if opt.val is None:
				continue
			v = opt.val.decode(self._notices.encoding)
			if v != _default(opt):
				params[opt.keyword.decode('ascii')] = v
		return make_conninfo('', **params)

	def encrypt_password(self, user, password, algorithm = None):
		'Encrypt `password` for `user` the way the server expects it.'
		pgconn = self._pgconn
		if pgconn is None:
			raise pg_exc.BrokenConnection("No connection to database", creator = self)
		codec = self._codec()
		try:
			e = pgconn.encrypt_password(
				password.encode(codec), user.encode(codec),
				None if algorithm is None else algorithm.encode('ascii')
			)
		except psycopg.OperationalError as err:
			raise pg_exc.Failure(self.err_msg(), creator = self) from err
		return e.decode('ascii')
