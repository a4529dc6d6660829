##
# .notice - notice routing shared by a session and its results
##
"""
The `NoticeContext` holds the routing state for notices: the registered
error handlers and the notice callback.

A session and every `Result` it produced share one context, so a result that
outlives its session still routes notices somewhere valid. The context does
not know about the session; it only holds the handler objects.
"""
from .message import Message, client_notice, message_from_result
from . import sys as pg_sys

class NoticeContext(object):
	"""
	Routing state for notices.

	The `errorhandlers` list is kept in registration order and walked in
	reverse. `notice_handler` is the callback receiving the notices no handler
	consumed; without it, they go to `pgsession.sys.msghook`.

	Not safe for concurrent mutation.
	"""
	__slots__ = (
		'errorhandlers',
		'notice_handler',
		'encoding',
		'__weakref__',
	)

	def __init__(self, notice_handler = None):
		self.errorhandlers = []
		self.notice_handler = notice_handler
		# Python codec used to decode server notices.
		self.encoding = 'utf_8'

	def __repr__(self):
		return '<%s.%s handlers=%d callback=%r>' %(
			type(self).__module__,
			type(self).__name__,
			len(self.errorhandlers),
			self.notice_handler,
		)

	def add(self, handler):
		self.errorhandlers.append(handler)

	def remove(self, handler):
		'Remove the handler; unknown handlers are ignored.'
		try:
			self.errorhandlers.remove(handler)
		except ValueError:
			pass

	def process(self, msg):
		"""
		Route the message: error handlers first, most recent first, then the
		notice callback.

		`msg` is a `Message` or plain text; empty messages are dropped.
		Returns the handler that consumed the message, if any.
		"""
		if not isinstance(msg, Message):
			if not msg:
				return None
			msg = client_notice(str(msg))
		elif not msg.message:
			return None

		for handler in reversed(list(self.errorhandlers)):
			if handler(msg):
				return handler

		if self.notice_handler is not None:
			self.notice_handler(msg)
		else:
			pg_sys.msghook(msg)
		return None

	def receive(self, pgresult):
		"""
		The ``notice_handler`` given to the native connection. Decodes the
		notice `PGresult` and routes it.
		"""
		self.process(message_from_result(pgresult, self.encoding))
