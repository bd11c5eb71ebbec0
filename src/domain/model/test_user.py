"""Unit tests for the User aggregate — creation, last-seen tracking, todo lookup."""

import unittest
from datetime import datetime, timedelta, timezone

from domain.model.user import Todo, User

NOW = datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


def _todo(todo_id: str) -> Todo:
    return Todo(
        id=todo_id, title=todo_id, description='', completed=False,
        created_at=NOW, updated_at=NOW,
    )


class TestUserCreate(unittest.TestCase):

    def test_create_sets_timestamps_and_empty_todos(self):
        user = User.create(email='a@example.com', password_hash='hash', now=NOW)

        self.assertEqual(user.created_at, NOW)
        self.assertEqual(user.last_seen_at, NOW)
        self.assertEqual(user.todos, [])
        self.assertEqual(user.email, 'a@example.com')

    def test_create_generates_distinct_ids(self):
        first = User.create(email='a@example.com', password_hash='hash')
        second = User.create(email='b@example.com', password_hash='hash')

        self.assertTrue(first.id)
        self.assertNotEqual(first.id, second.id)

    def test_create_without_email(self):
        user = User.create(email=None, password_hash=None, now=NOW)
        self.assertIsNone(user.email)


class TestUserTouch(unittest.TestCase):

    def test_touch_advances_last_seen(self):
        user = User.create(email='a@example.com', password_hash='hash', now=NOW)
        later = NOW + timedelta(minutes=5)

        user.touch(later)

        self.assertEqual(user.last_seen_at, later)

    def test_touch_never_moves_backwards(self):
        """last_seen_at stays >= created_at even with a skewed clock."""
        user = User.create(email='a@example.com', password_hash='hash', now=NOW)

        user.touch(NOW - timedelta(hours=1))

        self.assertEqual(user.last_seen_at, NOW)
        self.assertGreaterEqual(user.last_seen_at, user.created_at)


class TestUserTodoLookup(unittest.TestCase):

    def setUp(self):
        self.user = User.create(email='a@example.com', password_hash='hash', now=NOW)
        self.user.todos = [_todo('t1'), _todo('t2'), _todo('t3')]

    def test_index_of_todo(self):
        self.assertEqual(self.user.index_of_todo('t2'), 1)
        self.assertEqual(self.user.index_of_todo('missing'), -1)

    def test_find_todo(self):
        self.assertIs(self.user.find_todo('t3'), self.user.todos[2])
        self.assertIsNone(self.user.find_todo('missing'))
