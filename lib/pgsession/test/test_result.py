##
# .test.test_result
##
import unittest
from psycopg import pq
from .. import exceptions as pg_exc
from ..notice import NoticeContext
from ..result import Result, make_result
from .support import FakeSession, FakePGresult, error_result

def rows_result():
	return FakePGresult(pq.ExecStatus.TUPLES_OK,
		rows = [('1', 'one'), ('2', None)],
		columns = ('n', 'name'),
		command = b'SELECT 2',
	)

class test_result(unittest.TestCase):
	def setUp(self):
		self.notices = []
		self.nc = NoticeContext(notice_handler = self.notices.append)

	def test_rows(self):
		r = make_result(rows_result(), 'SELECT n, name FROM t', self.nc, 'utf_8')
		self.assertEqual(len(r), 2)
		self.assertEqual(list(r), [('1', 'one'), ('2', None)])
		self.assertEqual(r[0], ('1', 'one'))
		self.assertEqual(r[-1], ('2', None))
		self.assertEqual(r.columns, ('n', 'name'))
		self.assertEqual(r.field(1, 'n'), '2')
		self.assertEqual(r.field(0, 1), 'one')
		self.assertEqual(r.column_number('name'), 1)
		self.assertEqual(r.command_status, 'SELECT 2')
		self.assertEqual(r.affected_rows, 2)
		self.assertEqual(r.status, pq.ExecStatus.TUPLES_OK)
		self.assertEqual(r.query, 'SELECT n, name FROM t')
		self.assertTrue(r.notice_context is self.nc)

	def test_out_of_range(self):
		r = make_result(rows_result(), 'q', self.nc, 'utf_8')
		self.assertRaises(pg_exc.RangeError, r.__getitem__, 2)
		self.assertEqual(
			[m.message for m in self.notices],
			['row number 2 is out of range 0..1\n']
		)
		self.assertRaises(IndexError, r.field, 0, 2)
		self.assertRaises(pg_exc.ArgumentError, r.column_number, 'nope')

	def test_expectations(self):
		r = make_result(rows_result(), 'q', self.nc, 'utf_8')
		self.assertTrue(r.expect_rows(2) is r)
		self.assertRaises(pg_exc.RangeError, r.expect_rows, 1)
		self.assertRaises(pg_exc.RangeError, r.no_rows)
		self.assertRaises(pg_exc.RangeError, r.one_row)
		try:
			r.expect_rows(3)
		except pg_exc.RangeError as err:
			self.assertEqual(err.message, 'Expected 3 row(s) from query, got 2.')

		one = make_result(FakePGresult(pq.ExecStatus.TUPLES_OK,
			rows = [('42',)], columns = ('answer',)), 'q', self.nc, 'utf_8')
		self.assertEqual(one.one_row(), ('42',))
		self.assertEqual(one.one_field(), '42')

	def test_immutable(self):
		r = make_result(rows_result(), 'q', self.nc, 'utf_8')
		self.assertRaises(AttributeError, setattr, r, '_query', 'other')

	def test_accepted_statuses(self):
		for status in (
			pq.ExecStatus.EMPTY_QUERY,
			pq.ExecStatus.COMMAND_OK,
			pq.ExecStatus.TUPLES_OK,
			pq.ExecStatus.COPY_OUT,
			pq.ExecStatus.COPY_IN,
		):
			r = make_result(FakePGresult(status), 'q', self.nc, 'utf_8')
			self.assertTrue(isinstance(r, Result))
			self.assertEqual(len(r), 0)

	def test_server_error(self):
		raw = error_result('42P01', 'relation "nope" does not exist',
			detail = 'no such relation in schema "public"',
			hint = 'check the name', position = '15')
		try:
			make_result(raw, 'SELECT * FROM nope', self.nc, 'utf_8')
		except pg_exc.UndefinedTableError as err:
			self.assertEqual(err.message, 'relation "nope" does not exist')
			self.assertEqual(err.code, '42P01')
			self.assertEqual(err.query, 'SELECT * FROM nope')
			self.assertEqual(err.details['severity'], 'ERROR')
			self.assertEqual(err.details['detail'], 'no such relation in schema "public"')
			self.assertEqual(err.details['hint'], 'check the name')
			self.assertEqual(err.details['position'], '15')
		else:
			self.fail("error result was accepted")

	def test_unexpected_status(self):
		raw = FakePGresult(pq.ExecStatus.BAD_RESPONSE)
		try:
			make_result(raw, 'q', self.nc, 'utf_8')
		except pg_exc.SQLError as err:
			self.assertEqual(type(err), pg_exc.SQLError)
			self.assertTrue('BAD_RESPONSE' in err.message)
		else:
			self.fail("bad response was accepted")

	def test_missing_without_session(self):
		try:
			make_result(None, 'q', self.nc, 'utf_8')
		except pg_exc.BrokenConnection as err:
			self.assertEqual(err.message, 'Lost connection to the database server.')
		else:
			self.fail("missing result was accepted")

class test_result_with_session(unittest.TestCase):
	def setUp(self):
		self.db = FakeSession()

	def tearDown(self):
		self.db.close()

	def test_missing_while_open(self):
		self.db.pgconn.error_message = b'out of memory\n'
		try:
			make_result(None, 'q', self.db.notice_context, 'utf_8', session = self.db)
		except pg_exc.BrokenConnection:
			self.fail("open session reported as broken")
		except pg_exc.Failure as err:
			self.assertEqual(err.message, 'out of memory')
		else:
			self.fail("missing result was accepted")

	def test_missing_after_close(self):
		nc = self.db.notice_context
		self.db.close()
		self.assertRaises(pg_exc.BrokenConnection,
			make_result, None, 'q', nc, 'utf_8', session = self.db)

	def test_codeless_error_after_connection_loss(self):
		self.db.pgconn.status = pq.ConnStatus.BAD
		raw = FakePGresult(pq.ExecStatus.FATAL_ERROR,
			error_message = b'server closed the connection unexpectedly\n')
		try:
			make_result(raw, 'q', self.db.notice_context, 'utf_8', session = self.db)
		except pg_exc.BrokenConnection as err:
			self.assertEqual(err.message, 'server closed the connection unexpectedly')
		else:
			self.fail("connection loss was not reported")

	def test_notices_after_close(self):
		got = []
		self.db.set_notice_handler(got.append)
		r = self.db.execute('SELECT 1')
		self.db.close()
		self.assertRaises(pg_exc.RangeError, r.__getitem__, 9)
		self.assertEqual(
			[m.message for m in got], ['row number 9 is out of range 0..0\n']
		)
		# the rows are still readable
		self.assertEqual(r[0], ('1',))

if __name__ == '__main__':
	unittest.main()
