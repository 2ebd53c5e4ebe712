import unittest
from types import SimpleNamespace
from unittest.mock import patch

from sqlalchemy.exc import OperationalError

from todos_api.db import SqlAccountStore
from todos_api.errors import DuplicateUsername, StoreError


class SqlAccountStoreTests(unittest.TestCase):
    """
    Uses SQLite via SQLAlchemy URL for fast/local testing of the SQL store logic.
    """

    def setUp(self):
        self.db = SqlAccountStore("sqlite+pysqlite:///:memory:")

    def tearDown(self):
        self.db.engine.dispose()

    def test_create_and_get_account(self):
        account = self.db.create_account("alice", "hash")
        self.assertTrue(account.account_id)
        self.assertEqual(account.todos, [])
        fetched = self.db.get_account(account.account_id)
        self.assertEqual(fetched.username, "alice")
        self.assertEqual(fetched.password_hash, "hash")
        self.assertEqual(
            self.db.find_by_username("alice").account_id, account.account_id
        )

    def test_unknown_account(self):
        self.assertIsNone(self.db.get_account("missing"))
        self.assertIsNone(self.db.find_by_username("missing"))
        self.assertIsNone(self.db.add_todo("missing", "x"))
        self.assertIsNone(self.db.update_todo("missing", "t", "x"))
        self.assertIsNone(self.db.remove_todo("missing", "t"))

    def test_duplicate_username_is_rejected_by_the_database(self):
        self.db.create_account("bob", "one")
        with self.assertRaises(DuplicateUsername):
            self.db.create_account("bob", "two")
        # The store is still usable after the failed insert.
        self.assertIsNotNone(self.db.create_account("carol", "three"))

    def test_todo_operations_preserve_order(self):
        account_id = self.db.create_account("alice", "hash").account_id
        self.db.add_todo(account_id, "first")
        self.db.add_todo(account_id, "second")
        account = self.db.add_todo(account_id, "third")
        self.assertEqual(
            [t.text for t in account.todos], ["first", "second", "third"]
        )

        first, second, _ = account.todos
        account = self.db.update_todo(account_id, first.todo_id, "FIRST")
        self.assertEqual(account.todos[0].todo_id, first.todo_id)
        self.assertEqual(account.todos[0].text, "FIRST")

        account = self.db.remove_todo(account_id, second.todo_id)
        self.assertEqual([t.text for t in account.todos], ["FIRST", "third"])

    def test_todo_operations_are_scoped_to_account(self):
        alice = self.db.create_account("alice", "hash").account_id
        bob = self.db.create_account("bob", "hash").account_id
        todo_id = self.db.add_todo(alice, "mine").todos[0].todo_id

        self.assertEqual(self.db.update_todo(bob, todo_id, "theirs").todos, [])
        self.assertEqual(self.db.remove_todo(bob, todo_id).todos, [])
        self.assertEqual(
            [t.text for t in self.db.get_account(alice).todos], ["mine"]
        )

    def test_projection_hides_password_hash(self):
        account = self.db.create_account("alice", "hash")
        account = self.db.add_todo(account.account_id, "x")
        projection = account.as_dict()
        self.assertEqual(set(projection), {"id", "username", "todos"})
        self.assertEqual(projection["todos"][0]["text"], "x")

    def test_database_failure_raises_store_error(self):
        error = OperationalError("SELECT 1", {}, Exception("db down"))
        with patch.object(self.db, "Session", side_effect=error):
            with self.assertRaises(StoreError) as ctx:
                self.db.get_account("anything")
        self.assertIs(ctx.exception.__cause__, error)

    def test_other_integrity_errors_are_not_reported_as_duplicates(self):
        fixed = SimpleNamespace(hex="same-account-id")
        with patch("todos_api.db.uuid.uuid4", return_value=fixed):
            self.db.create_account("alice", "hash")
            with self.assertRaises(StoreError) as ctx:
                self.db.create_account("bob", "hash")
        self.assertNotIsInstance(ctx.exception, DuplicateUsername)
        self.assertIsNone(self.db.find_by_username("bob"))


if __name__ == "__main__":
    unittest.main()
