"""Unit tests for AccountStore against an in-memory SQLite database."""

import unittest
from unittest.mock import MagicMock

from sqlalchemy import create_engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.models import Base, User
from app.services.account_store import AccountStore
from app.services.errors import AccountConflictError


def _user(username: str, email: str | None = None) -> User:
    return User(
        name=username.title(),
        username=username,
        email=email or f"{username}@example.com",
        password_hash="$2b$04$notarealhashnotarealhashnotarealhashnotarealhas",
    )


class TestAccountStore(unittest.TestCase):
    def setUp(self) -> None:
        self.engine = create_engine(
            "sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool
        )
        Base.metadata.create_all(self.engine)
        self.session = sessionmaker(bind=self.engine)()
        self.store = AccountStore(self.session)

    def tearDown(self) -> None:
        self.session.close()
        self.engine.dispose()

    def test_add_assigns_id_and_defaults(self) -> None:
        user = self.store.add(_user("ann"))
        self.assertIsNotNone(user.id)
        self.assertEqual(user.role, "user")
        self.assertIsNotNone(user.created_at)
        self.assertEqual(self.store.get(user.id).username, "ann")

    def test_find_by_username_or_email(self) -> None:
        self.store.add(_user("ann", "ann@mail.com"))
        self.assertEqual(self.store.find_by_username_or_email("ann").email, "ann@mail.com")
        self.assertEqual(self.store.find_by_username_or_email("ann@mail.com").username, "ann")
        self.assertIsNone(self.store.find_by_username_or_email("bob"))

    def test_email_lookup_prefers_email_owner(self) -> None:
        owner = self.store.add(_user("ann", "ann@mail.com"))
        # Rows written before usernames were restricted may still look like emails.
        self.store.add(_user("ann@mail.com", "mallory@mail.com"))
        self.assertEqual(self.store.find_by_username_or_email("ann@mail.com").id, owner.id)
        self.assertEqual(self.store.find_by_username_or_email("ANN@Mail.com ").id, owner.id)

    def test_find_conflicting_across_columns(self) -> None:
        self.store.add(_user("ann", "ann@mail.com"))
        self.store.add(_user("legacy@mail.com", "legacy-owner@mail.com"))
        self.assertIsNotNone(self.store.find_conflicting(email="legacy@mail.com", username="zed"))
        self.assertIsNotNone(self.store.find_conflicting(email="zed@mail.com", username="ann@mail.com"))
        self.assertIsNotNone(self.store.find_conflicting(email="Ann@MAIL.com", username="zed"))

    def test_find_conflicting(self) -> None:
        ann = self.store.add(_user("ann", "ann@mail.com"))
        self.assertIsNotNone(self.store.find_conflicting(email="ann@mail.com", username="zed"))
        self.assertIsNotNone(self.store.find_conflicting(email="zed@mail.com", username="ann"))
        self.assertIsNone(self.store.find_conflicting(email="zed@mail.com", username="zed"))
        self.assertIsNone(self.store.find_conflicting(email="ann@mail.com", exclude_id=ann.id))
        self.assertIsNone(self.store.find_conflicting())

    def test_unique_violation_at_commit_is_conflict(self) -> None:
        self.store.add(_user("ann", "ann@mail.com"))
        with self.assertRaises(AccountConflictError):
            self.store.add(_user("ann", "other@mail.com"))
        with self.assertRaises(AccountConflictError):
            self.store.add(_user("other", "ann@mail.com"))
        # Session is usable again after the rollback.
        self.store.add(_user("bob"))
        self.assertEqual(len(self.store.list_newest_first()), 2)

    def test_list_newest_first(self) -> None:
        for name in ("ann", "bob", "cat"):
            self.store.add(_user(name))
        self.assertEqual([u.username for u in self.store.list_newest_first()], ["cat", "bob", "ann"])

    def test_delete(self) -> None:
        ann = self.store.add(_user("ann"))
        self.store.delete(ann)
        self.assertIsNone(self.store.get(ann.id))


class TestAccountStoreCommitErrors(unittest.TestCase):
    def test_rolls_back_on_integrity_error(self) -> None:
        session = MagicMock()
        session.commit.side_effect = IntegrityError("INSERT", {}, Exception("duplicate key"))
        store = AccountStore(session)
        with self.assertRaises(AccountConflictError):
            store.save(_user("ann"))
        session.rollback.assert_called_once()
        session.refresh.assert_not_called()


if __name__ == "__main__":
    unittest.main()
