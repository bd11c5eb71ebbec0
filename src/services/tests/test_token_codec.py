"""Unit tests for SessionTokenCodec — issue/verify and failure classification."""

import base64
import json
import unittest
from datetime import datetime, timedelta, timezone

from jose import jwt

from domain.model.errors import ExpiredTokenError, InvalidSignatureError, MalformedTokenError
from services.token_codec import SESSION_TTL, SessionTokenCodec

SECRET = "test-secret-key-for-testing-only"
ISSUED_AT = datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


def _b64(data: dict) -> str:
    return base64.urlsafe_b64encode(json.dumps(data).encode()).decode().rstrip('=')


class TestSessionTokenCodec(unittest.TestCase):

    def setUp(self):
        self.clock = FakeClock(ISSUED_AT)
        self.codec = SessionTokenCodec(SECRET, clock=self.clock)

    def test_default_ttl_is_fifteen_minutes(self):
        self.assertEqual(SESSION_TTL, timedelta(minutes=15))

    def test_issue_and_verify(self):
        token = self.codec.issue('user-123', 'test@example.com')

        claims = self.codec.verify(token)

        self.assertEqual(claims.user_id, 'user-123')
        self.assertEqual(claims.email, 'test@example.com')
        self.assertEqual(claims.expires_at, ISSUED_AT + timedelta(minutes=15))

    def test_issue_without_email(self):
        claims = self.codec.verify(self.codec.issue('user-123', None))
        self.assertIsNone(claims.email)

    def test_token_valid_just_before_expiry(self):
        token = self.codec.issue('user-123', 'test@example.com')
        self.clock.now = ISSUED_AT + timedelta(minutes=14, seconds=59)

        self.assertEqual(self.codec.verify(token).user_id, 'user-123')

    def test_token_expired_after_ttl(self):
        """Issued with a 15-minute expiry, checked at 15 minutes + 1 second."""
        token = self.codec.issue('user-123', 'test@example.com')
        self.clock.now = ISSUED_AT + timedelta(minutes=15, seconds=1)

        with self.assertRaises(ExpiredTokenError):
            self.codec.verify(token)

    def test_token_expired_exactly_at_expiry(self):
        token = self.codec.issue('user-123', 'test@example.com')
        self.clock.now = ISSUED_AT + timedelta(minutes=15)

        with self.assertRaises(ExpiredTokenError):
            self.codec.verify(token)

    def test_wrong_secret_is_invalid_signature(self):
        token = SessionTokenCodec("another-secret", clock=self.clock).issue('user-123', None)

        with self.assertRaises(InvalidSignatureError):
            self.codec.verify(token)

    def test_tampered_payload_is_invalid_signature(self):
        token = self.codec.issue('user-123', 'test@example.com')
        header, _, signature = token.split('.')
        forged = _b64({
            'sub': 'someone-else',
            'email': 'test@example.com',
            'exp': int((ISSUED_AT + timedelta(minutes=15)).timestamp()),
        })

        with self.assertRaises(InvalidSignatureError):
            self.codec.verify(f"{header}.{forged}.{signature}")

    def test_garbage_is_malformed(self):
        for token in ('not-a-token', 'a.b.c', ''):
            with self.subTest(token=token):
                with self.assertRaises(MalformedTokenError):
                    self.codec.verify(token)

    def test_missing_subject_is_malformed(self):
        token = jwt.encode(
            {'exp': int((ISSUED_AT + timedelta(minutes=15)).timestamp())},
            SECRET, algorithm='HS256',
        )

        with self.assertRaises(MalformedTokenError):
            self.codec.verify(token)

    def test_empty_secret_rejected(self):
        with self.assertRaises(ValueError):
            SessionTokenCodec('')
