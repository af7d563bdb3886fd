"""
Create an account directly, bypassing email activation (e.g. the first admin).
Run from project root:
  python -m app.scripts.create_user NAME USERNAME EMAIL PASSWORD [role]
Example:
  python -m app.scripts.create_user "Site Admin" admin admin@example.com your-secure-password admin
"""
import argparse
import logging
import re
import sys

from app.core.database import SessionLocal
from app.core.security import (
    PASSWORD_MAX_BYTES,
    USERNAME_MAX_LEN,
    USERNAME_PATTERN,
    hash_password,
    password_too_long,
)
from app.models.user import Role, User
from app.services.account_store import AccountStore, normalize_email
from app.services.errors import AccountConflictError

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create an account without the activation email.")
    parser.add_argument("name", help="Display name")
    parser.add_argument("username", help=f'Username (1-{USERNAME_MAX_LEN} chars, no spaces or "@")')
    parser.add_argument("email", help="Email address")
    parser.add_argument("password", help=f"Password (1-{PASSWORD_MAX_BYTES} bytes)")
    parser.add_argument("role", nargs="?", default=Role.USER.value, choices=[r.value for r in Role])
    args = parser.parse_args(argv)

    username = args.username.strip()
    email = normalize_email(args.email)
    if not username or len(username) > USERNAME_MAX_LEN:
        logger.error("Invalid username length.")
        return 1
    if not re.fullmatch(USERNAME_PATTERN, username):
        logger.error('Username cannot contain spaces or "@".')
        return 1
    if "@" not in email:
        logger.error("Invalid email address.")
        return 1
    if not args.password or password_too_long(args.password):
        logger.error("Password must be 1-%s bytes.", PASSWORD_MAX_BYTES)
        return 1

    db = SessionLocal()
    try:
        store = AccountStore(db)
        if store.find_conflicting(email=email, username=username) is not None:
            logger.error("An account with username '%s' or email '%s' already exists.", username, email)
            return 1
        user = store.add(
            User(
                name=args.name.strip(),
                username=username,
                email=email,
                password_hash=hash_password(args.password),
                role=args.role,
            )
        )
        logger.info("Created account '%s' (id=%s) with role '%s'.", username, user.id, args.role)
        return 0
    except AccountConflictError as e:
        logger.error("%s", e.message)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
