##
# pgsession root package
##
"""
pgsession is a Python package for holding sessions with PostgreSQL servers
through libpq: statement execution, notices, LISTEN/NOTIFY, COPY and
non-blocking connection establishment.

The native connection handle comes from `psycopg.pq`.
"""
__all__ = [
	'__version__',
	'version',
	'version_info',
	'open',
]

#: The version triple of pgsession: (major, minor, patch).
version_info = (1, 0, 0)

#: The version string of pgsession.
version = '.'.join(map(str, version_info))
__version__ = version

# Avoid importing these until requested.
_pg_driver = None
def open(iri = None, **kw):
	"""
	Create a `pgsession.driver.pq.Session` to the server referenced by the
	given `iri`::

		>>> import pgsession
		# General Format:
		>>> db = pgsession.open('pq://user:password@host:port/database')

		# A libpq conninfo string works too.
		>>> db = pgsession.open('host=localhost dbname=postgres')

	Connection keywords can also be used with `open`; see
	`pgsession.clientparameters`.

	Prefixing the `iri` with ``&`` returns a `pgsession.driver.Connecting`
	instead, establishing the session without blocking.
	"""
	global _pg_driver
	if _pg_driver is None:
		from . import driver as _pg_driver

	if iri is not None and iri.startswith('&'):
		return _pg_driver.connect_nonblocking(iri[1:], **kw)
	return _pg_driver.connect(iri, **kw)

__docformat__ = 'reStructuredText'
