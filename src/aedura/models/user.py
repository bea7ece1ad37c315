from datetime import datetime
from uuid import uuid4

from sqlalchemy import JSON, CheckConstraint, Column, DateTime, String

from ..database import Base

ROLE_CONTRIBUTOR = "contributor"
ROLE_ADVISORY = "advisory"
ROLE_TYPES = (ROLE_CONTRIBUTOR, ROLE_ADVISORY)


def _new_id() -> str:
    return uuid4().hex


class User(Base):
    """SQLAlchemy model for registered contributors and advisory-board members."""

    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint(
            "(role_type = 'contributor' AND contributor_profile IS NOT NULL"
            " AND advisory_profile IS NULL)"
            " OR (role_type = 'advisory' AND advisory_profile IS NOT NULL"
            " AND contributor_profile IS NULL)",
            name="ck_users_single_profile",
        ),
        CheckConstraint("length(password_hash) > 0", name="ck_users_password_hash"),
    )

    id = Column(String(32), primary_key=True, default=_new_id)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)
    role_type = Column(String(16), nullable=False)
    contributor_profile = Column(JSON(none_as_null=True), nullable=True)
    advisory_profile = Column(JSON(none_as_null=True), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False
    )

    @property
    def profile(self) -> dict:
        """Return the role-specific profile matching ``role_type``."""
        if self.role_type == ROLE_CONTRIBUTOR:
            return self.contributor_profile
        return self.advisory_profile
