##
# .driver package
##
"""
Driver package providing libpq backed sessions.
"""
__all__ = ['connect', 'connect_nonblocking', 'Session', 'Transaction', 'Connecting']

from .pq import Session, Transaction
from .connector import Connecting

def connect(*args, **kw):
	'Establish a session, blocking until connected.'
	return Session(*args, **kw)

def connect_nonblocking(*args, **kw):
	'Start establishing a session; see `Connecting`.'
	return Connecting(*args, **kw)
