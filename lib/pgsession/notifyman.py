##
# .notifyman - Receive and route NOTIFY events.
##
"""
Notification Management Tools

Primarily this module houses the `NotificationRouter` class which a `Session`
uses to LISTEN on channels and to deliver the notifications that arrive:

	>>> import pgsession
	>>> db = pgsession.open(...)
	>>> db.listen('orders', lambda n: print(n.channel, n.payload, n.backend_pid))
	>>> while True:
	...  db.await_notification(10)

There are two ways to receive notifications. Handlers, one per channel, are
installed with `listen`. Receivers, `pgsession.api.Receiver` instances, are the
older mechanism; any number may share a channel. Both stay supported, but the
receivers are deprecated.
"""
from collections import namedtuple
from select import select
import psycopg

from . import exceptions as pg_exc

#: The payload handed to a handler installed with `Session.listen`.
Notification = namedtuple('Notification', ('channel', 'payload', 'backend_pid'))

class NotificationRouter(object):
	"""
	The LISTEN/UNLISTEN bookkeeping and the notification dispatch of a session.

	`handlers` maps a channel to its one handler; a channel is in `handlers`
	exactly when the session is LISTENing on it for the handler.
	`receivers` maps a channel to the list of its receivers.

	There is no thread safety; the router is driven by the session's thread.
	"""
	__slots__ = (
		'session',
		'handlers',
		'receivers',
	)

	def __init__(self, session):
		self.session = session
		self.handlers = {}
		self.receivers = {}

	def listen(self, channel, handler = None):
		"""
		Install `handler` for `channel`, replacing any installed one. A
		handler of `None` removes the installed handler.

		LISTEN is issued only when the channel gets its first handler, and
		UNLISTEN only when an installed handler is removed.
		"""
		s = self.session
		if s._trans is not None:
			raise pg_exc.UsageError(
				"Attempting to listen for notifications on '%s' " \
				"while transaction is active." %(channel,)
			)

		if handler is not None:
			if channel not in self.handlers:
				# We had no handler installed for this name. Start listening.
				s.execute("LISTEN " + s.quote_name(channel)).no_rows()
			self.handlers[channel] = handler
		elif channel in self.handlers:
			s.execute("UNLISTEN " + s.quote_name(channel)).no_rows()
			del self.handlers[channel]

	def add_receiver(self, receiver):
		if receiver is None:
			raise pg_exc.ArgumentError("Null receiver registered")
		s = self.session
		channel = receiver.channel
		l = self.receivers.get(channel)
		if l is None:
			# Not listening on this channel yet, start doing so.
			s._check_not_copying()
			q = "LISTEN " + s.quote_name(channel)
			s._make_result(s._call('exec_', s._encode(q)), q)
			self.receivers[channel] = [receiver]
		else:
			l.append(receiver)

	def remove_receiver(self, receiver):
		"""
		Remove the receiver. An unknown receiver is reported as a notice, as
		is a failure to UNLISTEN.
		"""
		if receiver is None:
			return
		s = self.session
		channel = receiver.channel
		l = self.receivers.get(channel, ())
		if len(l) == 1 and receiver in l:
			# Removing the last one means UNLISTEN; refuse before erasing.
			s._check_not_copying()
		try:
			if receiver not in l:
				s.process_notice(
					"Attempt to remove unknown receiver '%s'\n" %(channel,)
				)
				return
			# Erase first; otherwise a notification for the same receiver
			# may yet come in.
			l.remove(receiver)
			if not l:
				del self.receivers[channel]
				s.execute("UNLISTEN " + s.quote_name(channel))
		except pg_exc.Error as err:
			s.process_notice(err.message + '\n')

	def take(self, other):
		'Take over the handlers of the `other` router.'
		self.handlers, other.handlers = other.handlers, {}

	def _deliver(self, target, args, channel, what):
		try:
			target(*args)
		except Exception as err:
			self.session.process_notice(
				"Exception in notification %s '%s': %s\n" %(what, channel, err)
			)

	def get_notifs(self):
		"""
		Read what the server sent and deliver every notification that arrived.

		Returns the number of notifications delivered. While a transaction is
		registered, nothing is delivered; the notifications stay queued until
		the next call made outside of a transaction.
		"""
		s = self.session
		pgconn = s._pgconn
		if pgconn is None:
			raise pg_exc.BrokenConnection("Connection lost.")
		try:
			pgconn.consume_input()
		except psycopg.OperationalError as err:
			raise pg_exc.BrokenConnection("Connection lost.") from err

		# Even if somehow we receive notifications during our transaction,
		# don't deliver them.
		if s._trans is not None:
			return 0

		count = 0
		encoding = s._codec()
		n = pgconn.notifies()
		while n is not None:
			count += 1
			channel = n.relname.decode(encoding)
			payload = n.extra.decode(encoding)

			for r in list(self.receivers.get(channel, ())):
				self._deliver(r, (payload, n.be_pid), channel, 'receiver')

			handler = self.handlers.get(channel)
			if handler is not None:
				self._deliver(
					handler, (Notification(channel, payload, n.be_pid),),
					channel, 'handler'
				)
			n = pgconn.notifies()
		return count

	def await_notification(self, timeout = None):
		"""
		Deliver the pending notifications; if there are none, wait for the
		socket to become readable and try again.

		`timeout` is the maximum wait in seconds; `None` waits indefinitely.
		Returns the number of notifications delivered.
		"""
		if timeout is not None and timeout < 0:
			raise ValueError("cannot wait less than zero seconds")
		count = self.get_notifs()
		if count:
			return count
		sock = self.session.sock
		if sock < 0:
			raise pg_exc.BrokenConnection("Connection lost.")
		r, w, x = select((sock,), (), (sock,), timeout)
		return self.get_notifs()
