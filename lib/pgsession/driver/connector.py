##
# .driver.connector - non-blocking connection establishment
##
"""
`Connecting` drives a non-blocking connection to completion. The caller owns
the waiting: after each `process` step, wait on `sock` for what
`wait_to_read` / `wait_to_write` say, until `done` is true:

	>>> import selectors
	>>> c = Connecting('dbname=test')
	>>> sel = selectors.DefaultSelector()
	>>> while not c.done():
	...  ev = selectors.EVENT_READ if c.wait_to_read() else selectors.EVENT_WRITE
	...  sel.register(c.sock, ev); sel.select(); sel.unregister(c.sock)
	...  c.process()
	>>> db = c.produce()
"""
from .. import exceptions as pg_exc
from .pq import Session

class Connecting(object):
	"""
	A connection being established without blocking.

	Until `produce` hands it over, the `Connecting` owns the session.
	"""
	#: The session class started.
	Session = Session

	def __init__(self, conninfo = None, **params):
		self._session = self.Session.connect_start(conninfo, **params)
		# libpq wants the socket to be writable first.
		self._reading = False
		self._writing = True

	def __repr__(self):
		return '<%s.%s %s>' %(
			type(self).__module__,
			type(self).__name__,
			'produced' if self._session is None else (
				'done' if self.done() else 'connecting'
			),
		)

	def _get(self):
		if self._session is None:
			raise pg_exc.UsageError(
				"Connection was already produced.", creator = self
			)
		return self._session

	@property
	def sock(self) -> int:
		return self._get().sock

	def process(self):
		'Advance the connection by one step.'
		self._reading, self._writing = self._get().poll_connect()

	def wait_to_read(self) -> bool:
		return self._reading

	def wait_to_write(self) -> bool:
		return self._writing

	def done(self) -> bool:
		return not (self._reading or self._writing)

	def produce(self):
		"""
		Validate the established connection and hand over the `Session`; the
		`Connecting` no longer holds it afterwards.
		"""
		s = self._get()
		if not self.done():
			raise pg_exc.UsageError(
				"Tried to produce a nonblocking connection before it was done.",
				creator = self
			)
		self._session = None
		s.complete_init()
		return s
