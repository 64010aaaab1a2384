import unittest
from datetime import timedelta

from flowpilot.core.security import (
    REFRESH_TOKEN_TYPE,
    create_access_token,
    create_refresh_token,
    decode_token,
    hash_password,
    verify_password,
    verify_token,
)

class PasswordTests(unittest.TestCase):

    def test_hash_is_salted_and_verifies(self):
        first = hash_password("secret123")
        second = hash_password("secret123")
        self.assertNotEqual(first, second)
        self.assertTrue(verify_password("secret123", first))
        self.assertFalse(verify_password("wrong", first))

    def test_corrupted_hash_does_not_raise(self):
        self.assertFalse(verify_password("secret123", "not-a-bcrypt-hash"))

class TokenTests(unittest.TestCase):

    def test_access_token_round_trip(self):
        token = create_access_token({"sub": "user-1", "email": "a@flowpilot.io"})
        payload = verify_token(token)
        self.assertEqual(payload["sub"], "user-1")
        self.assertEqual(payload["type"], "access")
        self.assertEqual(decode_token(token), "user-1")

    def test_refresh_token_is_not_an_access_token(self):
        token = create_refresh_token({"sub": "user-1"})
        self.assertIsNone(decode_token(token))
        self.assertEqual(decode_token(token, token_type=REFRESH_TOKEN_TYPE), "user-1")

    def test_access_token_is_not_a_refresh_token(self):
        token = create_access_token({"sub": "user-1"})
        self.assertIsNone(decode_token(token, token_type=REFRESH_TOKEN_TYPE))

    def test_expired_token_rejected(self):
        token = create_access_token({"sub": "user-1"}, expires_delta=timedelta(seconds=-10))
        self.assertIsNone(decode_token(token))

    def test_garbage_token_rejected(self):
        self.assertIsNone(decode_token("not.a.jwt"))

    def test_tokens_with_same_claims_differ(self):
        self.assertNotEqual(
            create_refresh_token({"sub": "user-1"}),
            create_refresh_token({"sub": "user-1"}),
        )
