"""Unit tests for scriptvault.core.config: settings validation."""

import asyncio
import unittest

from pydantic import ValidationError

from scriptvault.core.config import Settings
from scriptvault.core.object_store import MemoryObjectStore
from scriptvault.services.dispatcher import build_dispatcher


class TestAdminSeedSettings(unittest.TestCase):
    """The configured admin must be a username that can actually log in."""

    def test_username_with_space_is_rejected(self) -> None:
        with self.assertRaises(ValidationError) as ctx:
            Settings(ADMIN_USERNAME="dave blunts")
        self.assertIn("ADMIN_USERNAME", str(ctx.exception))

    def test_username_with_slash_is_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            Settings(ADMIN_USERNAME="ops/admin")

    def test_short_username_is_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            Settings(ADMIN_USERNAME="ab")

    def test_username_is_stripped(self) -> None:
        self.assertEqual(Settings(ADMIN_USERNAME="  ops.admin ").ADMIN_USERNAME, "ops.admin")

    def test_short_password_is_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            Settings(ADMIN_PASSWORD="12345")

    def test_accepted_admin_can_log_in(self) -> None:
        settings = Settings(
            STORAGE_BACKEND="memory",
            SESSION_SWEEP_ENABLED=False,
            ADMIN_USERNAME="ops.admin-1",
            ADMIN_PASSWORD="a-long-secret",
        )
        dispatcher = build_dispatcher(settings, MemoryObjectStore())
        result = asyncio.run(
            dispatcher.dispatch(
                {"action": "login", "username": "ops.admin-1", "password": "a-long-secret"}
            )
        )
        self.assertEqual(result.role, "admin")


class TestOtherSettings(unittest.TestCase):
    def test_api_prefix_trailing_slash_stripped(self) -> None:
        self.assertEqual(Settings(API_PREFIX="/api/").API_PREFIX, "/api")

    def test_api_prefix_must_start_with_slash(self) -> None:
        with self.assertRaises(ValidationError):
            Settings(API_PREFIX="api")

    def test_log_level_is_uppercased(self) -> None:
        self.assertEqual(Settings(LOG_LEVEL="debug").LOG_LEVEL, "DEBUG")


if __name__ == "__main__":
    unittest.main()
