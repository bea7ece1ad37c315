"""User directory backed by the ``users`` table."""

import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from .errors import DuplicateEmail, TransientStorageError
from .models.user import User

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


class UserDirectory:
    """Look up and create users keyed by normalized email.

    Uniqueness is enforced by the unique index on ``users.email``; a violation
    on insert is the authoritative duplicate signal, whatever an earlier
    lookup returned.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def find_by_email(self, email: str) -> Optional[User]:
        try:
            return (
                self.session.query(User)
                .filter(User.email == normalize_email(email))
                .first()
            )
        except SQLAlchemyError as exc:
            logger.exception("user lookup failed")
            raise TransientStorageError("User directory unavailable") from exc

    def create(
        self,
        *,
        name: str,
        email: str,
        password_hash: str,
        role_type: str,
        contributor_profile: dict | None = None,
        advisory_profile: dict | None = None,
    ) -> User:
        email = normalize_email(email)
        user = User(
            name=name,
            email=email,
            password_hash=password_hash,
            role_type=role_type,
            contributor_profile=contributor_profile,
            advisory_profile=advisory_profile,
        )
        self.session.add(user)
        try:
            self.session.commit()
        except IntegrityError as exc:
            self.session.rollback()
            if self.find_by_email(email) is not None:
                raise DuplicateEmail() from exc
            # any other constraint failure is a bug in profile assembly
            raise
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.exception("user insert failed")
            raise TransientStorageError("User directory unavailable") from exc
        self.session.refresh(user)
        return user
