##
# .clientparameters
##
"""
Turn client connection parameters into a libpq connection string.

Parameters may be given as a connection string (key=value pairs or a
``postgresql://`` URI; the ``pq://`` scheme is accepted as an alias), as
keywords, or both. Keywords override what the connection string says::

	>>> s = conninfo('pq://localhost/postgres', user = 'jwp',
	...  settings = {'search_path' : 'home,public'})

There are two data-structures this module deals with: normalized parameters
and denormalized parameters.

Normalized parameters is a proper mapping object, dictionary, consisting of
the parameters in the vocabulary libpq understands. The ``settings`` key holds
a sub-dictionary of server settings to apply on connect.

Denormalized parameters is an iterable of key-value pairs whose key is a
tuple making up the "key-path"; ``(('settings', 'timezone'), 'utc')`` for
instance. Later pairs override earlier ones.

Environment variables (PGHOST, PGUSER, ...) and the password file are left to
libpq, which consults them when the connection is made.
"""
import psycopg
from psycopg.conninfo import make_conninfo

from .exceptions import DriverError

class ClientParameterError(DriverError):
	code = '-*000'

#: The scheme accepted as an alias of libpq's own postgresql:// scheme.
pq_scheme = 'pq://'

def denormalize_parameters(p):
	"""
	Given a fully normalized parameters dictionary:
	{'host': 'localhost', 'settings' : {'timezone':'utc'}}

	Denormalize it:
	[(('host',), 'localhost'), (('settings','timezone'), 'utc')]
	"""
	for k,v in p.items():
		if k == 'settings':
			if not hasattr(v, 'items'):
				raise ClientParameterError(
					"settings must be a mapping, not " + type(v).__name__
				)
			for sk, sv in v.items():
				yield (('settings', sk), sv)
		else:
			yield ((k,), v)

def normalize_parameter(kv):
	"""
	Translate a parameter into the vocabulary libpq understands.
	"""
	(k, v) = kv
	k = list(k)
	if k[0] == 'requiressl' and v in ('1', True):
		k[0] = 'sslmode'
		v = 'require'
	elif k[0] == 'database':
		k[0] = 'dbname'
	elif k[0] == 'unix':
		# libpq takes the socket directory as the host.
		k[0] = 'host'
	elif k[0] == 'sslmode':
		v = v.lower()
	return (tuple(k),v)

def normalize(iter):
	"""
	Make a dictionary out of denormalized parameters.
	"""
	rd = {}
	for (k, v) in map(normalize_parameter, iter):
		if v is None:
			continue
		sd = rd
		for sk in k[:len(k)-1]:
			sd = sd.setdefault(sk, {})
		sd[k[-1]] = v
	return rd

def _escape_option(value):
	return str(value).replace('\\', '\\\\').replace(' ', '\\ ')

def settings_to_options(settings, options = None):
	"""
	Render the settings dictionary as a libpq ``options`` value of
	``-c name=value`` switches appended to the existing `options`.
	"""
	parts = [options] if options else []
	for k, v in settings.items():
		parts.append('-c ' + _escape_option(k) + '=' + _escape_option(v))
	return ' '.join(parts)

def conninfo(base = None, **params):
	"""
	Build the libpq connection string for the given connection string
	and keyword parameters.
	"""
	base = base or ''
	if base.startswith(pq_scheme):
		base = 'postgresql://' + base[len(pq_scheme):]
	kw = normalize(denormalize_parameters(params))
	settings = kw.pop('settings', None)
	if settings:
		kw['options'] = settings_to_options(settings, kw.get('options'))
	try:
		return make_conninfo(base, **kw)
	except psycopg.Error as err:
		raise ClientParameterError(str(err)) from err
