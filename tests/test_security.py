"""Unit tests for scriptvault.core.security: salted password hashing and credential rules."""

import unittest

from scriptvault.core.security import (
    HASH_SEPARATOR,
    KDF_KEY_BYTES,
    SALT_BYTES,
    hash_password,
    password_problem,
    username_problem,
    verify_password,
)


class TestHashPassword(unittest.TestCase):
    """hash_password returns 'salt:derived' with a fresh salt per call."""

    def test_format_is_salt_and_derived_hex(self) -> None:
        hashed = hash_password("escolar112200")
        salt_hex, derived_hex = hashed.split(HASH_SEPARATOR)
        self.assertEqual(len(bytes.fromhex(salt_hex)), SALT_BYTES)
        self.assertEqual(len(bytes.fromhex(derived_hex)), KDF_KEY_BYTES)

    def test_same_password_hashes_differently(self) -> None:
        self.assertNotEqual(hash_password("secret1"), hash_password("secret1"))

    def test_plain_password_not_in_hash(self) -> None:
        self.assertNotIn("secret1", hash_password("secret1"))


class TestVerifyPassword(unittest.TestCase):
    """verify_password accepts the right password only and never raises."""

    @classmethod
    def setUpClass(cls) -> None:
        cls.hashed = hash_password("correct horse")

    def test_correct_password_verifies(self) -> None:
        self.assertTrue(verify_password("correct horse", self.hashed))

    def test_verify_is_deterministic(self) -> None:
        self.assertTrue(verify_password("correct horse", self.hashed))
        self.assertTrue(verify_password("correct horse", self.hashed))

    def test_wrong_password_rejected(self) -> None:
        self.assertFalse(verify_password("correct horsE", self.hashed))
        self.assertFalse(verify_password("", self.hashed))

    def test_malformed_hashes_return_false(self) -> None:
        for bad in ("", "nocolon", "zz:zz", ":", "abcd:", "a:b:c", f"{'00' * 16}:abcd"):
            with self.subTest(bad=bad):
                self.assertFalse(verify_password("correct horse", bad))

    def test_non_string_hash_returns_false(self) -> None:
        self.assertFalse(verify_password("correct horse", None))  # type: ignore[arg-type]


class TestCredentialRules(unittest.TestCase):
    """username_problem / password_problem return a message or None."""

    def test_short_username(self) -> None:
        self.assertIsNotNone(username_problem("ab"))

    def test_username_with_path_characters(self) -> None:
        self.assertIsNotNone(username_problem("../admin"))
        self.assertIsNotNone(username_problem("bob smith"))

    def test_valid_usernames(self) -> None:
        for name in ("bob", "daveblunts", "alice.b", "x_y-z"):
            with self.subTest(name=name):
                self.assertIsNone(username_problem(name))

    def test_password_length_bounds(self) -> None:
        self.assertIsNotNone(password_problem("12345"))
        self.assertIsNone(password_problem("123456"))
        self.assertIsNotNone(password_problem("x" * 129))


if __name__ == "__main__":
    unittest.main()
