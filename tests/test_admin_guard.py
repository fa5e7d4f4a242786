"""Unit tests for app.services.admin_guard: the last admin cannot be removed."""

import unittest

from sqlalchemy.orm import sessionmaker

from app.core.errors import InvariantViolationError
from app.services.admin_guard import count_admins, ensure_admin_remains
from helpers import create_user, make_engine


class TestEnsureAdminRemains(unittest.TestCase):
    def setUp(self) -> None:
        self.engine = make_engine()
        self.db = sessionmaker(bind=self.engine, autoflush=False)()
        create_user(self.db, "Root", "root@example.com", "Abcdefg1", role="admin")
        create_user(self.db, "Plain", "plain@example.com", "Abcdefg1")

    def tearDown(self) -> None:
        self.db.close()
        self.engine.dispose()

    def test_counts_only_admins(self) -> None:
        self.assertEqual(count_admins(self.db), 1)
        self.assertEqual(count_admins(self.db, lock=True), 1)

    def test_sole_admin_cannot_be_deleted_or_demoted(self) -> None:
        for action, message in (
            ("delete", "Cannot delete the last admin"),
            ("demote", "Cannot demote the last admin"),
        ):
            with self.subTest(action=action):
                with self.assertRaises(InvariantViolationError) as ctx:
                    ensure_admin_remains(self.db, action)
                self.assertEqual(ctx.exception.message, message)
                self.assertEqual(ctx.exception.status_code, 400)

    def test_allowed_with_two_admins(self) -> None:
        create_user(self.db, "Second", "second@example.com", "Abcdefg1", role="admin")
        ensure_admin_remains(self.db, "delete")
        ensure_admin_remains(self.db, "demote")


if __name__ == "__main__":
    unittest.main()
