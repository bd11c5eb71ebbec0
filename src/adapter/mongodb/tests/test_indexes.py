"""Tests for index creation with conflict replacement."""

import unittest
from unittest.mock import MagicMock, call

from pymongo.errors import OperationFailure

from adapter.mongodb.indexes import create_index_safe, ensure_all_indexes

EMAIL_KEYS = [('email', 1)]


def _conflict(code=85):
    return OperationFailure("Index already exists with different options", code=code)


def _collection(existing: dict, first_error=None):
    collection = MagicMock()
    collection.index_information.return_value = {'_id_': {'key': [('_id', 1)]}, **existing}
    if first_error:
        collection.create_index.side_effect = [first_error, None]
    return collection


class TestCreateIndexSafe(unittest.TestCase):

    def test_creates_index(self):
        collection = _collection({})

        self.assertTrue(create_index_safe(collection, EMAIL_KEYS, 'idx_users_email', unique=True))

        collection.create_index.assert_called_once_with(EMAIL_KEYS, name='idx_users_email', unique=True)
        collection.drop_index.assert_not_called()

    def test_same_name_different_keys_is_replaced(self):
        collection = _collection(
            {'idx_users_email': {'key': [('email', -1)]}},
            first_error=_conflict(86),
        )

        self.assertTrue(create_index_safe(collection, EMAIL_KEYS, 'idx_users_email', unique=True))

        collection.drop_index.assert_called_once_with('idx_users_email')
        self.assertEqual(collection.create_index.call_args_list[-1],
                         call(EMAIL_KEYS, name='idx_users_email', unique=True))

    def test_same_keys_under_other_name_is_replaced(self):
        """A non-unique email index left by an older deployment is rebuilt as unique."""
        collection = _collection(
            {'email_1': {'key': [('email', 1)]}},
            first_error=_conflict(85),
        )

        self.assertTrue(create_index_safe(collection, EMAIL_KEYS, 'idx_users_email', unique=True))

        collection.drop_index.assert_called_once_with('email_1')
        self.assertEqual(collection.create_index.call_count, 2)

    def test_unresolvable_conflict_returns_false(self):
        collection = _collection(
            {'idx_users_created_at': {'key': [('created_at', -1)]}},
            first_error=_conflict(85),
        )

        self.assertFalse(create_index_safe(collection, EMAIL_KEYS, 'idx_users_email', unique=True))

        collection.drop_index.assert_not_called()
        self.assertEqual(collection.create_index.call_count, 1)

    def test_other_operation_failures_propagate(self):
        collection = _collection({}, first_error=OperationFailure("not authorized", code=13))

        with self.assertRaises(OperationFailure):
            create_index_safe(collection, EMAIL_KEYS, 'idx_users_email')

        collection.index_information.assert_not_called()


class TestEnsureAllIndexes(unittest.TestCase):

    def test_creates_users_indexes(self):
        collection = MagicMock()
        db = MagicMock()
        db.__getitem__.return_value = collection

        self.assertTrue(ensure_all_indexes(db))

        db.__getitem__.assert_called_with('users')
        names = [c.kwargs['name'] for c in collection.create_index.call_args_list]
        self.assertEqual(names, ['idx_users_email', 'idx_users_created_at'])
