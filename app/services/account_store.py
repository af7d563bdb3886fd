"""Account persistence: one AccountStore per request, wrapping that request's DB session."""

import logging

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models.user import User
from app.services.errors import AccountConflictError

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    """Emails are stored and compared lowercased: one mailbox, one account."""
    return email.strip().lower()


class AccountStore:
    """
    Queries and writes for User rows.

    Writes commit the session's transaction once, so a check-then-write
    sequence done through the same store is a single transaction. Unique
    constraint violations at commit (a concurrent registration or activation
    won) are rolled back and raised as AccountConflictError.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, account_id: int) -> User | None:
        return self.session.get(User, account_id)

    def find_by_username_or_email(self, value: str) -> User | None:
        """An identifier containing "@" is matched against emails first; usernames cannot contain "@"."""
        if "@" in value:
            user = self.session.query(User).filter(User.email == normalize_email(value)).first()
            if user is not None:
                return user
        return self.session.query(User).filter(User.username == value).first()

    def find_conflicting(
        self,
        email: str | None = None,
        username: str | None = None,
        exclude_id: int | None = None,
    ) -> User | None:
        """
        Return an account, other than exclude_id, that owns email or username.

        Each value is also checked against the other column so no login
        identifier can resolve to two accounts.
        """
        clauses = []
        if email is not None:
            email = normalize_email(email)
            clauses.extend([User.email == email, User.username == email])
        if username is not None:
            clauses.extend([User.username == username, User.email == normalize_email(username)])
        if not clauses:
            return None
        query = self.session.query(User).filter(or_(*clauses))
        if exclude_id is not None:
            query = query.filter(User.id != exclude_id)
        return query.first()

    def list_newest_first(self) -> list[User]:
        return (
            self.session.query(User)
            .order_by(User.created_at.desc(), User.id.desc())
            .all()
        )

    def add(self, user: User) -> User:
        self.session.add(user)
        self._commit()
        self.session.refresh(user)
        return user

    def save(self, user: User) -> User:
        self._commit()
        self.session.refresh(user)
        return user

    def delete(self, user: User) -> None:
        self.session.delete(user)
        self._commit()

    def _commit(self) -> None:
        try:
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            logger.info("Unique constraint violation on users: %s", e.orig)
            raise AccountConflictError() from e
