##
# .exceptions - Exception hierarchy for session and server errors.
##
"""
Exceptions raised by `pgsession` with their associated state codes.

The primary entry point of this module is the `ErrorLookup` function. Given an
SQL state code, it gives back the most appropriate `SQLError` subclass.

Client-side conditions use codes starting with ``--``; these never come from
the server, so `ErrorLookup` will never hand them out for a server error.

This module is executable via -m: python -m pgsession.exceptions.
It provides a convenient way to look up the exception mapped to by the given
error code::

	$ python -m pgsession.exceptions 42P01
	pgsession.exceptions.UndefinedTableError [42P01]

If the exact error code is not found, the error's class is used(the first two
characters of the code make up the class identity). If that fails, `SQLError`
is returned.
"""
import sys
import os
from functools import partial
from .message import Message
from . import sys as pg_sys

PythonException = Exception
class Exception(Exception):
	'Base pgsession exception class'
	pass

class Disconnection(Exception):
	'Exception identifying errors that result in disconnection'

class Error(Message, Exception):
	'A pgsession Error'
	_e_label = 'ERROR'
	code = ''

	def __str__(self):
		'Call .sys.errformat(self)'
		return pg_sys.errformat(self)

	@property
	def fatal(self):
		f = self.details.get('severity')
		return None if f is None else f in ('PANIC', 'FATAL')

class Failure(Error):
	"""
	A statement or operation could not be carried out.

	This is the general case; more specific failures derive from it.
	"""
	code = '--FAI'

class DriverError(Error):
	"Errors originating in the client, not in the server."
	source = 'CLIENT'
	code = '--000'

class UsageError(DriverError):
	"""
	The caller violated a precondition.

	For instance, moving a session that has a transaction open, listening while
	a transaction is active, or producing an unfinished asynchronous connection.
	"""
	code = '--USE'

class InternalError(DriverError):
	"""
	A condition that was assumed to be impossible occurred.
	"""
	code = '--INT'

class ArgumentError(DriverError, ValueError):
	'An argument was rejected, for instance text that could not be escaped.'
	code = '--ARG'

class RangeError(DriverError, OverflowError, IndexError):
	"""
	A value fell out of its allowed range: a checked numeric narrowing
	overflowed, or a row or column index is out of bounds.
	"""
	code = '--RNG'

class BrokenConnection(Failure, Disconnection):
	"""
	The transport failed; the session is usually unusable afterwards.
	"""
	source = 'CLIENT'
	code = '08000'

class SQLError(Failure):
	"""
	The server rejected a statement.

	Carries the server's diagnostic fields in `details` and the text of the
	statement that failed in `query`.
	"""
	source = 'SERVER'
	code = ''
	query = None

	def __init__(self, message, code = None, details = {},
		source = None, creator = None, query = None,
	):
		super().__init__(message, code = code, details = details,
			source = source, creator = creator)
		self.query = query

	@property
	def sqlstate(self):
		return self.code or None

	def _e_metas(self):
		yield from super()._e_metas()
		if self.query:
			yield ('QUERY', self.query)

class FeatureNotSupported(SQLError):
	"Unsupported feature, protocol version, or server version."
	code = '0A000'

class ConnectionError(SQLError, Disconnection):
	code = '08000'
class ConnectionDoesNotExistError(ConnectionError):
	"""
	The connection is closed or was never connected.
	"""
	code = '08003'
class ConnectionFailureError(ConnectionError):
	'Raised when a connection is dropped'
	code = '08006'
class ClientCannotConnectError(ConnectionError):
	code = '08001'
class ConnectionRejectionError(ConnectionError):
	code = '08004'
class ProtocolError(ConnectionError):
	code = '08P01'

class CardinalityError(SQLError):
	"Wrong number of rows returned"
	code = '21000'

class DataError(SQLError):
	code = '22000'
class NumericRangeError(DataError):
	code = '22003'
class ZeroDivisionError(DataError):
	code = '22012'
class TextRepresentationError(DataError):
	code = '22P02'
class BadCopyError(DataError):
	code = '22P04'
class UntranslatableCharacterError(DataError):
	code = '22P05'
class EncodingError(DataError):
	code = '22021'

class ICVError(SQLError):
	"Integrity Contraint Violation"
	code = '23000'
class RestrictError(ICVError):
	code = '23001'
class NotNullError(ICVError):
	code = '23502'
class ForeignKeyError(ICVError):
	code = '23503'
class UniqueError(ICVError):
	code = '23505'
class CheckError(ICVError):
	code = '23514'

class TransactionError(SQLError):
	pass
class ITSError(TransactionError):
	"Invalid Transaction State"
	code = '25000'
class ActiveTransactionError(ITSError):
	code = '25001'
class ReadOnlyTransactionError(ITSError):
	"Occurs when an alteration occurs in a read-only transaction."
	code = '25006'
class NoActiveTransactionError(ITSError):
	code = '25P01'
class InFailedTransactionError(ITSError):
	"Occurs when an action occurs in a failed transaction."
	code = '25P02'

class StatementNameError(SQLError):
	code = '26000'

class AuthenticationSpecificationError(SQLError, Disconnection):
	code = '28000'

class TRError(TransactionError):
	"Transaction Rollback"
	code = '40000'
class SerializationError(TRError):
	code = '40001'
class DeadlockError(TRError):
	code = '40P01'

class SEARVError(SQLError):
	"Syntax Error or Access Rule Violation"
	code = '42000'
class SyntaxError(SEARVError):
	code = '42601'
class InsufficientPrivilegeError(SEARVError):
	code = '42501'
class UndefinedError(SEARVError):
	pass
class UndefinedColumnError(UndefinedError):
	code = '42703'
class UndefinedFunctionError(UndefinedError):
	code = '42883'
class UndefinedTableError(UndefinedError):
	code = '42P01'
class UndefinedObjectError(UndefinedError):
	code = '42704'
class DuplicateError(SEARVError):
	pass
class DuplicatePreparedStatementError(DuplicateError):
	code = '42P05'
class DuplicateTableError(DuplicateError):
	code = '42P07'
class DuplicateObjectError(DuplicateError):
	code = '42710'

class IRError(SQLError):
	"Insufficient Resource Error"
	code = '53000'
class DiskFullError(IRError):
	code = '53100'
class TooManyConnectionsError(IRError):
	code = '53300'

class ONIPSError(SQLError):
	"Object Not In Prerequisite State"
	code = '55000'
class ObjectInUseError(ONIPSError):
	code = '55006'
class UnavailableLockError(ONIPSError):
	code = '55P03'

class OIError(SQLError):
	"Operator Intervention"
	code = '57000'
class QueryCanceledError(OIError):
	code = '57014'
class AdminShutdownError(OIError, Disconnection):
	code = '57P01'
class CrashShutdownError(OIError, Disconnection):
	code = '57P02'
class ServerNotReadyError(OIError, Disconnection):
	'Thrown when a connection is established to a server that is still starting up.'
	code = '57P03'

class ServerInternalError(SQLError):
	"The server reported an internal error."
	code = 'XX000'
class DataCorruptedError(ServerInternalError):
	code = 'XX001'
class IndexCorruptedError(ServerInternalError):
	code = 'XX002'

class PLPGSQLError(SQLError):
	"Error raised by a PL/PgSQL procedural function"
	code = 'P0000'
class PLPGSQLRaiseError(PLPGSQLError):
	"Error raised by a PL/PgSQL RAISE statement."
	code = 'P0001'

# Setup mapping to provide code based exception lookup.
code_to_error = {}
def map_errors(
	objs : "An iterable of objects to consider",
	container : "apply the code to error association to this object" = code_to_error,
):
	"""
	Construct the code-to-error association for the server-side errors.
	"""
	for obj in objs:
		if not isinstance(obj, type) or not issubclass(obj, SQLError):
			# Client errors are never looked up by code.
			continue
		code = getattr(obj, 'code', None)
		if not code:
			# If it's code is empty, we don't map it as it's a "container".
			continue

		cur_obj = container.get(code)
		if cur_obj is None or issubclass(cur_obj, obj):
			# There is no object yet, or the object at the code
			# is not the most general class.
			container[code] = obj

def code_lookup(
	default : "The object to return when no code or class is found",
	container : "where to look for the object associated with the code",
	code : "the code to find the exception for"
):
	if not code:
		return default
	obj = container.get(code)
	if obj is None:
		obj = container.get(code[:2] + "000", default)
	return obj

map_errors(sys.modules[__name__].__dict__.values())
ErrorLookup = partial(code_lookup, SQLError, code_to_error)

if __name__ == '__main__':
	for x in sys.argv[1:]:
		e = ErrorLookup(x)
		sys.stdout.write('pgsession.exceptions.%s [%s]%s%s' %(
				e.__name__, e.code, os.linesep, (
					e.__doc__ is not None and os.linesep.join([
						'  ' + x for x in (e.__doc__).split('\n')
					]) + os.linesep or ''
				)
			)
		)
