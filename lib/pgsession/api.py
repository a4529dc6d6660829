##
# .api - ABCs for objects a session calls back into
##
"""
Interfaces implemented by application objects that a `Session` calls:
error handlers that see every notice, and (deprecated) notification
receivers bound to a single channel.
"""
import abc
import warnings

__all__ = [
	'ErrorHandler',
	'Receiver',
]

class ErrorHandler(object, metaclass = abc.ABCMeta):
	"""
	A notice handler registered with a session.

	Instantiating registers the handler with the `session`; the most recently
	registered handler sees a notice first. Handlers stay registered until
	`unregister` is called or the session is closed.

	A handler remains callable after its session is gone; a `Result` may still
	route notices to it.
	"""
	session = None

	def __init__(self, session):
		self.session = session
		session.register_errorhandler(self)

	@abc.abstractmethod
	def __call__(self, message) -> bool:
		"""
		Process the `pgsession.message.Message`.

		Return a true value to consume the message; the handlers registered
		before this one and the session's notice callback will not see it.
		"""

	def unregister(self):
		'Detach the handler from its session. Safe to call twice.'
		s = self.session
		self.session = None
		if s is not None:
			s.unregister_errorhandler(self)

class Receiver(object, metaclass = abc.ABCMeta):
	"""
	A NOTIFY receiver for a single `channel`.

	Instantiating adds the receiver to the `session`; the first receiver of a
	channel makes the session LISTEN. `remove` takes it off again; removing the
	last receiver of a channel makes the session UNLISTEN.

	Deprecated in favor of `Session.listen`, which takes any callable.
	"""
	session = None
	channel = None

	def __init__(self, session, channel):
		warnings.warn(
			"Receiver is deprecated; use Session.listen with a callable",
			DeprecationWarning, stacklevel = 2
		)
		self.session = session
		self.channel = channel
		session.add_receiver(self)

	@abc.abstractmethod
	def __call__(self, payload : str, backend_pid : int) -> None:
		"""
		A notification arrived on `self.channel`.
		"""

	def remove(self):
		'Stop receiving. Safe to call twice.'
		s = self.session
		self.session = None
		if s is not None:
			s.remove_receiver(self)
